from functools import total_ordering
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ConfigDict, Field, computed_field
from semver.version import Version

from . import Model


@total_ordering
class ReleaseVersion(Model):
    """
    Represents a published version string parsed as a semantic version.

    Ordering follows semantic versioning precedence: major, minor and patch numerically,
    then prerelease identifiers. A version without prerelease identifiers outranks the
    same ``major.minor.patch`` with them. Build metadata is carried but never compared.

    :ivar raw: The version string exactly as published by the registry.
    :type raw: :py:class:`str`
    :ivar major: Major version number.
    :type major: :py:class:`int`
    :ivar minor: Minor version number.
    :type minor: :py:class:`int`
    :ivar patch: Patch version number.
    :type patch: :py:class:`int`
    :ivar prerelease: Dot-separated prerelease identifiers, empty for stable releases.
    :type prerelease: :py:obj:`~typing.Tuple` [:py:class:`str`, ...]
    :ivar build: Dot-separated build metadata identifiers.
    :type build: :py:obj:`~typing.Tuple` [:py:class:`str`, ...]
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, raw: str) -> Optional["ReleaseVersion"]:
        """
        Parses a registry version string, returning ``None`` if it is not a valid semantic version.

        A single leading ``v`` is tolerated, surrounding whitespace is ignored.

        :param raw: The version string to parse.
        :type raw: :py:class:`str`
        :return: The parsed version, or ``None`` if parsing failed.
        :rtype: :py:obj:`~typing.Optional` [:class:`~docversions.models.version.ReleaseVersion`]
        """
        if not isinstance(raw, str):
            return None
        text = raw.strip()
        if text.startswith("v"):
            text = text[1:]
        try:
            info = Version.parse(text)
        except (ValueError, TypeError):
            return None
        return cls(
            raw=raw,
            major=info.major,
            minor=info.minor,
            patch=info.patch,
            prerelease=tuple(info.prerelease.split(".")) if info.prerelease else (),
            build=tuple(info.build.split(".")) if info.build else (),
        )

    @computed_field
    @property
    def version(self) -> str:
        """Normalized version string without build metadata (e.g., ``1.3.0-rc.2``)."""
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}-{'.'.join(self.prerelease)}" if self.prerelease else core

    @property
    def branch(self) -> str:
        """The ``major.minor`` release branch this version belongs to."""
        return f"{self.major}.{self.minor}"

    @property
    def is_stable(self) -> bool:
        return not self.prerelease

    @property
    def semver(self) -> Version:
        return Version(
            self.major,
            self.minor,
            self.patch,
            prerelease=".".join(self.prerelease) or None,
        )

    def compare(self, other: "ReleaseVersion") -> int:
        """
        Compares precedence with another version.

        :param other: The version to compare against.
        :type other: :class:`~docversions.models.version.ReleaseVersion`
        :return: ``-1``, ``0`` or ``1`` when this version is lower, equal or higher.
        :rtype: :py:class:`int`
        """
        return self.semver.compare(other.semver)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ReleaseVersion):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: "ReleaseVersion") -> bool:
        if not isinstance(other, ReleaseVersion):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self):
        return hash(self.version)

    def __str__(self):
        return self.raw


class SyntheticVersion(Model):
    """Placeholder version for unreleased snapshot builds (``snapshot``, ``snapshot-stable``)."""

    model_config = ConfigDict(frozen=True)

    version: str

    def __str__(self):
        return self.version


class CurrentVersion(Model):
    """
    Describes the version the documentation is currently being built for.

    Loaded from the build's ``version.json``. Keys beyond ``version`` and ``isSnapshot``
    are kept so the descriptor can be handed to templates verbatim.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    version: str = Field(min_length=1)
    is_snapshot: bool = Field(default=False, alias="isSnapshot")


class VersionOption(Model):
    """
    A single entry of the version switcher.

    :ivar version: The parsed release, or a synthetic snapshot placeholder.
    :ivar label: Text shown in the switcher (e.g., ``v1.4.8``).
    :ivar group: Heading the option is listed under (e.g., ``Latest`` or ``v1.4``).
    :ivar docs_url: Location of the documentation for this version.
    """

    version: Union[ReleaseVersion, SyntheticVersion]
    label: str
    group: str
    docs_url: str = Field(alias="docsUrl")

    @property
    def is_snapshot(self) -> bool:
        return isinstance(self.version, SyntheticVersion)


class CatalogResult(Model):
    """
    Outcome of a catalog build.

    ``options`` is the complete, ordered switcher catalog: the two snapshot entries,
    the latest release of every branch and then the full release history. Strings
    that could not be parsed are listed in ``dropped`` so callers can decide whether
    a noisy registry response should fail the build. Repeated listings of a release
    are collapsed and the skipped strings kept in ``duplicates``.
    """

    current: CurrentVersion
    options: List[VersionOption]
    latest: Dict[str, ReleaseVersion]
    highest_stable: ReleaseVersion
    dropped: List[str] = []
    blacklisted: List[str] = []
    duplicates: List[str] = []
    backfilled: bool = False

    @property
    def clean(self) -> bool:
        return not self.dropped

    @property
    def snapshots(self) -> List[VersionOption]:
        return self.options[:2]

    @property
    def latest_options(self) -> List[VersionOption]:
        return self.options[2 : 2 + len(self.latest)]

    @property
    def history(self) -> List[VersionOption]:
        return self.options[2 + len(self.latest) :]
