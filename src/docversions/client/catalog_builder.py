from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..models.record import ServiceRecord, all_versions_record, current_version_record
from ..models.settings import BuildSettings
from ..models.version import (
    CatalogResult,
    CurrentVersion,
    ReleaseVersion,
    SyntheticVersion,
    VersionOption,
)
from ..utils.exceptions import NoStableReleaseError
from ..utils.logger import LogMe

LATEST_GROUP = "Latest"
MASTER_SNAPSHOT = "snapshot"
STABLE_SNAPSHOT = "snapshot-stable"


class CatalogBuilder:
    def __init__(self, settings: Optional[BuildSettings] = None):
        """
        Classifies published versions into the catalog shown by the documentation version switcher.

        The catalog lists, in order:

        1. Two snapshot entries: the development head (``master-snapshot``) and the next patch of
           the most recent stable branch (e.g. ``v1.4.x-snapshot``).
        2. The latest release of every ``major.minor`` branch, highest first.
        3. The full release history, in registry order.

        Blacklisted, unparseable and ``0.x`` versions are never listed.

        :param settings: Build settings supplying the blacklist and docs host. Defaults to :class:`~docversions.models.settings.BuildSettings`.
        :type settings: :py:obj:`~typing.Optional` [:class:`~docversions.models.settings.BuildSettings`]
        """
        self.settings = settings or BuildSettings()
        self.blacklist = frozenset(self.settings.blacklist)
        self.docs_host = self.settings.docs_host
        self.log = LogMe(self.__class__.__name__)

    def docs_url(self, version: Union[ReleaseVersion, SyntheticVersion]) -> str:
        """
        Builds the documentation URL of a version.

        Releases before 1.0.2 were published under a ``docs-<version>`` folder, so those URLs
        carry the version suffix.

        :param version: The version to link to.
        :type version: :py:obj:`~typing.Union` [:class:`~docversions.models.version.ReleaseVersion` | :class:`~docversions.models.version.SyntheticVersion`]
        :return: The documentation URL.
        :rtype: :py:class:`str`
        """
        url = f"https://{self.docs_host}/{version.version}/docs"
        if (
            isinstance(version, ReleaseVersion)
            and version.major == 1
            and version.minor == 0
            and version.patch < 2
        ):
            url += f"-{version.version}"
        return url

    def make_option(
        self,
        version: Union[ReleaseVersion, SyntheticVersion],
        group: Optional[str] = None,
        label: Optional[str] = None,
    ) -> VersionOption:
        """
        Creates a switcher option for a version.

        :param version: The version the option points to.
        :type version: :py:obj:`~typing.Union` [:class:`~docversions.models.version.ReleaseVersion` | :class:`~docversions.models.version.SyntheticVersion`]
        :param group: Group heading. Defaults to ``v<major>.<minor>``.
        :type group: :py:obj:`~typing.Optional` [:py:class:`str`]
        :param label: Option label. Defaults to ``v<raw version>``.
        :type label: :py:obj:`~typing.Optional` [:py:class:`str`]
        :return: The option.
        :rtype: :class:`~docversions.models.version.VersionOption`
        """
        return VersionOption(
            version=version,
            label=label or f"v{version.raw}",
            group=group or f"v{version.major}.{version.minor}",
            docs_url=self.docs_url(version),
        )

    @staticmethod
    def backfill(raw_versions: Iterable[str], current: CurrentVersion) -> Tuple[List[str], bool]:
        """
        Appends the current release when the registry does not list it yet.

        Builds running on a freshly tagged commit query the registry before the release is
        published there.
        """
        versions = list(raw_versions)
        if current.is_snapshot or current.version in versions:
            return versions, False

        # A differently spelled listing (v3.0.0, 3.0.0+build) is the same release
        parsed = ReleaseVersion.parse(current.version)
        if parsed is not None:
            listed = [ReleaseVersion.parse(raw) for raw in versions]
            if any(version is not None and version.version == parsed.version for version in listed):
                return versions, False
        versions.append(current.version)
        return versions, True

    @staticmethod
    def highest_stable(newest_first: Iterable[str]) -> Optional[ReleaseVersion]:
        """
        Returns the highest parseable, stable, non-0.x release.

        Registry order is not guaranteed to be ascending, so versions are compared rather than
        trusting position. On ties the version listed first wins.
        """
        highest = None
        for raw in newest_first:
            version = ReleaseVersion.parse(raw)
            if version is None or not version.is_stable or version.major == 0:
                continue
            if highest is None or version.compare(highest) > 0:
                highest = version
        return highest

    @staticmethod
    def stable_snapshot_label(version: ReleaseVersion) -> str:
        # The last character of the release is swapped for "x": 1.4.8 -> v1.4.x-snapshot
        return f"v{version.raw[:-1]}x-snapshot"

    @staticmethod
    def latest_per_branch(versions: Iterable[ReleaseVersion]) -> Dict[str, ReleaseVersion]:
        """
        Folds versions into the highest version seen for each ``major.minor`` branch.

        On ties the version seen first is kept. The mapping is returned highest branch first.
        """
        latest: Dict[str, ReleaseVersion] = {}
        for version in versions:
            stored = latest.get(version.branch)
            if stored is None or version.compare(stored) > 0:
                latest[version.branch] = version

        ordered = sorted(latest.values(), key=cmp_to_key(lambda a, b: -a.compare(b)))
        return {version.branch: version for version in ordered}

    def _classify(
        self, newest_first: List[str]
    ) -> Tuple[List[ReleaseVersion], List[str], List[str], List[str]]:
        """
        Drops blacklisted, unparseable and 0.x versions, preserving order.

        Repeated releases, including spellings that differ only in a ``v`` prefix or build
        metadata, are listed once. The first one seen is kept.
        """
        kept, dropped, blacklisted, duplicates = [], [], [], []
        seen = set()
        for raw in newest_first:
            if raw in self.blacklist:
                blacklisted.append(raw)
                continue
            version = ReleaseVersion.parse(raw)
            if version is None:
                dropped.append(raw)
                continue
            if version.major == 0:
                continue
            if version.version in seen:
                duplicates.append(raw)
                continue
            seen.add(version.version)
            kept.append(version)
        return kept, dropped, blacklisted, duplicates

    def build_catalog(self, raw_versions: Iterable[str], current: CurrentVersion) -> CatalogResult:
        """
        Builds the ordered version switcher catalog.

        :param raw_versions: Published version strings, in registry order.
        :type raw_versions: :py:obj:`~typing.Iterable` [:py:class:`str`]
        :param current: Descriptor of the version the docs are built for.
        :type current: :class:`~docversions.models.version.CurrentVersion`
        :return: The catalog along with the data it was derived from.
        :rtype: :class:`~docversions.models.version.CatalogResult`
        :raises NoStableReleaseError: If the history holds no parseable stable 1.x+ release.
        """
        versions, backfilled = self.backfill(raw_versions, current)
        if backfilled:
            self.log.info(f"Current version {current.version} missing from registry. Backfilled.")

        newest_first = versions[::-1]
        highest = self.highest_stable(newest_first)
        if highest is None:
            raise NoStableReleaseError(
                "Unable to label the stable snapshot, no stable release found.",
                candidates=len(versions),
            )
        self.log.debug(f"Highest stable release: {highest.raw}")

        parsed, dropped, blacklisted, duplicates = self._classify(newest_first)
        for raw in blacklisted:
            self.log.debug(f"Skipping blacklisted version {raw}")
        for raw in duplicates:
            self.log.debug(f"Skipping repeated version {raw}")
        if dropped:
            self.log.info(f"Dropped {len(dropped)} unparseable version(s): {', '.join(dropped)}")

        latest = self.latest_per_branch(parsed)
        history = [self.make_option(version) for version in parsed][::-1]
        latest_options = [self.make_option(version, LATEST_GROUP) for version in latest.values()]
        snapshots = [
            self.make_option(
                SyntheticVersion(version=MASTER_SNAPSHOT), LATEST_GROUP, "master-snapshot"
            ),
            self.make_option(
                SyntheticVersion(version=STABLE_SNAPSHOT),
                LATEST_GROUP,
                self.stable_snapshot_label(highest),
            ),
        ]

        self.log.info(
            f"Catalog built with {len(latest)} branches and {len(history)} releases."
        )
        return CatalogResult(
            current=current,
            options=snapshots + latest_options + history,
            latest=latest,
            highest_stable=highest,
            dropped=dropped[::-1],
            blacklisted=blacklisted[::-1],
            duplicates=duplicates[::-1],
            backfilled=backfilled,
        )

    @staticmethod
    def records(result: CatalogResult) -> Tuple[ServiceRecord, ServiceRecord]:
        """
        Produces the current version and all versions service records of a catalog.

        :param result: A built catalog.
        :type result: :class:`~docversions.models.version.CatalogResult`
        :return: The ``current-version-data`` and ``allversions-data`` records.
        :rtype: :py:obj:`~typing.Tuple` [:class:`~docversions.models.record.ServiceRecord`, :class:`~docversions.models.record.ServiceRecord`]
        """
        return (
            current_version_record(result.current.model_dump(mode="json", by_alias=True)),
            all_versions_record(
                [option.model_dump(mode="json", by_alias=True) for option in result.options]
            ),
        )
