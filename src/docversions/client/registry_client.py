from typing import Any, List, Optional

from ..models.settings import DEFAULT_REGISTRY_COMMAND
from ..utils.exceptions import RegistryQueryError
from ..utils.logger import LogMe
from . import BaseRegistryClient


class RegistryClient(BaseRegistryClient):
    def __init__(self, registry_command: Optional[List[str]] = None):
        """
        Lists the published versions of a package through a registry command line tool.

        The command defaults to ``yarn info {package} versions --json``. Any tool printing a JSON
        list of versions, or a mapping keyed by version, can be configured instead (for instance
        ``npm view {package} versions --json``).

        :param registry_command: The command to run, with ``{package}`` as placeholder for the package name.
        :type registry_command: :py:obj:`~typing.Optional` [:py:obj:`~typing.List` [:py:class:`str`]]
        """
        super().__init__()
        self.log = LogMe(self.__class__.__name__)
        self.registry_command = registry_command or list(DEFAULT_REGISTRY_COMMAND)

    def _command(self, package: str) -> List[str]:
        return [part.replace("{package}", package) for part in self.registry_command]

    def _extract_versions(self, payload: Any, package: str) -> List[str]:
        """
        Extracts version strings from a registry payload.

        yarn wraps the result as ``{"type": "inspect", "data": [...]}``, npm prints the bare list.
        Mappings keyed by version (e.g. the registry ``time`` or ``versions`` objects) yield their keys.
        """
        if isinstance(payload, dict) and (payload.get("type") == "error" or "error" in payload):
            raise RegistryQueryError(
                "Registry reported an error.",
                package=package,
                error_msg=payload.get("data") or payload.get("error"),
            )
        data = payload.get("data") if isinstance(payload, dict) and "data" in payload else payload

        if isinstance(data, dict):
            versions = list(data.keys())
        elif isinstance(data, list):
            versions = data
        elif isinstance(data, str):
            versions = [data]  # npm prints a bare string when a single version exists
        else:
            raise RegistryQueryError(
                "Unexpected payload received from registry.",
                package=package,
                payload_type=type(data).__name__,
            )

        if not all(isinstance(version, str) for version in versions):
            raise RegistryQueryError(
                "Registry payload contains non-string versions.", package=package
            )
        return versions

    async def get_versions(self, package: str) -> List[str]:
        """
        Retrieves all published version strings of a package, in registry order.

        :param package: The package name (e.g., ``angular``).
        :type package: :py:class:`str`
        :return: The version strings as listed by the registry.
        :rtype: :py:obj:`~typing.List` [:py:class:`str`]
        :raises RegistryQueryError: If the registry command fails or returns an unexpected payload.
        """
        self.log.debug(f"Attempting to retrieve published versions of '{package}'.")
        payload = await self.fetch_json(self._command(package))
        versions = self._extract_versions(payload, package)
        self.log.info(f"Retrieved {len(versions)} published versions of '{package}'.")
        return versions

    def get_versions_sync(self, package: str) -> List[str]:
        """Blocking variant of :meth:`get_versions`."""
        payload = self.fetch_json_sync(self._command(package))
        return self._extract_versions(payload, package)
