import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..models.settings import BuildSettings
from ..models.version import CurrentVersion
from ..utils.exceptions import ConfigError
from ..utils.logger import LogMe


class ConfigManager:
    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Loads build settings and the current version descriptor.

        Settings are read from an optional JSON file. When no file is given, or the given file
        does not exist, the defaults of :class:`~docversions.models.settings.BuildSettings` apply.

        :param config_path: Path to a JSON settings file.
        :type config_path: :py:obj:`~typing.Optional` [:py:obj:`~typing.Union` [:py:class:`str` | :py:obj:`~pathlib.Path`]]
        """
        self.log = LogMe(self.__class__.__name__)
        self.config_path = Path(config_path).expanduser() if config_path else None
        self._settings: Optional[BuildSettings] = None

    def _load_json_file(self, path: Path) -> Any:
        """Reads and decodes a JSON file, raising ``ConfigError`` on failure."""
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise ConfigError("File does not exist.", path=path, error_msg=str(e))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError("Unable to read JSON file.", path=path, error_msg=str(e))

    @property
    def settings(self) -> BuildSettings:
        """
        The build settings, loaded on first access.

        :return: The validated settings.
        :rtype: :class:`~docversions.models.settings.BuildSettings`
        :raises ConfigError: If the settings file cannot be read or fails validation.
        """
        if self._settings is None:
            self._settings = self.load_settings()
        return self._settings

    def load_settings(self) -> BuildSettings:
        if self.config_path is None or not self.config_path.exists():
            self.log.debug("No settings file found. Using default settings.")
            return BuildSettings()

        self.log.debug(f"Attempting to load settings from {self.config_path}")
        data = self._load_json_file(self.config_path)
        if not isinstance(data, dict):
            raise ConfigError("Settings file must contain a JSON object.", path=self.config_path)
        try:
            settings = BuildSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigError("Invalid settings.", path=self.config_path, error_msg=str(e))
        self.log.info(f"Settings loaded successfully from {self.config_path}")
        return settings

    def override(self, **overrides: Any) -> BuildSettings:
        """
        Applies command line overrides on top of the loaded settings.

        Overrides with a ``None`` value (or an empty tuple, as passed by multiple-value options) are ignored.

        :return: The updated settings.
        :rtype: :class:`~docversions.models.settings.BuildSettings`
        :raises ConfigError: If an override fails validation.
        """
        updates: Dict[str, Any] = {
            key: list(value) if isinstance(value, tuple) else value
            for key, value in overrides.items()
            if value is not None and value != ()
        }
        if not updates:
            return self.settings
        try:
            # model_copy skips validation, so re-validate the merged values
            self._settings = BuildSettings.model_validate(
                {**self.settings.model_dump(), **updates}
            )
        except ValidationError as e:
            raise ConfigError("Invalid settings override.", error_msg=str(e))
        self.log.debug(f"Applied settings overrides: {', '.join(updates)}")
        return self._settings

    def load_current_version(self, path: Optional[Union[str, Path]] = None) -> CurrentVersion:
        """
        Loads the descriptor of the version the documentation is built for.

        :param path: Path to ``version.json``. Defaults to ``version_file`` of the settings.
        :type path: :py:obj:`~typing.Optional` [:py:obj:`~typing.Union` [:py:class:`str` | :py:obj:`~pathlib.Path`]]
        :return: The current version descriptor.
        :rtype: :class:`~docversions.models.version.CurrentVersion`
        :raises ConfigError: If the file is missing, not JSON, or lacks a ``version``.
        """
        version_path = Path(path or self.settings.version_file).expanduser()
        self.log.debug(f"Attempting to load current version from {version_path}")
        data = self._load_json_file(version_path)
        try:
            current = CurrentVersion.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                "Invalid current version descriptor.", path=version_path, error_msg=str(e)
            )
        self.log.info(
            f"Current version {current.version} loaded (snapshot: {current.is_snapshot})."
        )
        return current
