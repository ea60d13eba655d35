from .__about__ import __version__
from .client.catalog_builder import CatalogBuilder
from .client.registry_client import RegistryClient
from .models.version import CatalogResult, CurrentVersion, ReleaseVersion, VersionOption

__all__ = [
    "__version__",
    "CatalogBuilder",
    "CatalogResult",
    "CurrentVersion",
    "RegistryClient",
    "ReleaseVersion",
    "VersionOption",
]
