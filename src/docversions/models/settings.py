from typing import List
from urllib.parse import urlparse

from pydantic import Field, field_validator

from . import Model

DEFAULT_REGISTRY_COMMAND = ["yarn", "info", "{package}", "versions", "--json"]


class BuildSettings(Model):
    """
    Settings for a single documentation build.

    :ivar package: Name of the package whose published versions are listed.
    :type package: :py:class:`str`
    :ivar docs_host: Host serving versioned documentation (no scheme, no path).
    :type docs_host: :py:class:`str`
    :ivar blacklist: Version strings published by mistake; never listed.
    :type blacklist: :py:obj:`~typing.List` [:py:class:`str`]
    :ivar registry_command: Command listing published versions as JSON. ``{package}`` is substituted.
    :type registry_command: :py:obj:`~typing.List` [:py:class:`str`]
    :ivar version_file: Path to the ``version.json`` describing the current build.
    :type version_file: :py:class:`str`
    :ivar output_dir: Directory generated service files are written under.
    :type output_dir: :py:class:`str`
    :ivar formats: Output formats to write (``js`` and/or ``json``).
    :type formats: :py:obj:`~typing.List` [:py:class:`str`]
    """

    package: str = Field(default="angular", min_length=1)
    docs_host: str = Field(default="code.angularjs.org", min_length=1)
    blacklist: List[str] = ["1.3.4-build.3588"]
    registry_command: List[str] = Field(default_factory=lambda: list(DEFAULT_REGISTRY_COMMAND))
    version_file: str = "build/version.json"
    output_dir: str = "build/docs"
    formats: List[str] = ["js"]

    @field_validator("docs_host")
    def validate_docs_host(cls, value: str) -> str:
        """
        Ensures the docs host is a bare host name, as URLs are built as ``https://<host>/<version>/docs``.

        :param value: The configured docs host.
        :type value: :py:class:`str`
        :return: The host without trailing slashes.
        :rtype: :py:class:`str`
        :raises ValueError: If a scheme or path is included.
        """
        value = value.strip().rstrip("/")
        parsed = urlparse(f"//{value}")
        if "://" in value or parsed.path or not parsed.netloc:
            raise ValueError(f"docs_host must be a bare host name, received '{value}'")
        return value

    @field_validator("registry_command")
    def validate_registry_command(cls, value: List[str]) -> List[str]:
        """Ensures the registry command is non-empty and references the package placeholder."""
        if not value:
            raise ValueError("registry_command cannot be empty")
        if not any("{package}" in part for part in value):
            raise ValueError("registry_command must contain a '{package}' placeholder")
        return value

    @field_validator("formats")
    def validate_formats(cls, value: List[str]) -> List[str]:
        normalized = [fmt.lower() for fmt in value]
        unsupported = set(normalized) - {"js", "json"}
        if unsupported:
            raise ValueError(f"Unsupported output format(s): {', '.join(sorted(unsupported))}")
        if not normalized:
            raise ValueError("At least one output format is required")
        return normalized
