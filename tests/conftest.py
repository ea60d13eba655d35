import json
from unittest.mock import AsyncMock

import pytest

from docversions.client import BaseRegistryClient
from docversions.client.catalog_builder import CatalogBuilder
from docversions.client.registry_client import RegistryClient
from docversions.models.settings import BuildSettings
from docversions.models.version import CurrentVersion


@pytest.fixture
def settings():
    return BuildSettings()


@pytest.fixture
def builder(settings):
    return CatalogBuilder(settings)


@pytest.fixture
def switcher_versions():
    yield ["2.0.0", "2.1.0", "2.1.1", "1.9.0"]


@pytest.fixture
def registry_versions():
    # Registry order, including noise the catalog must filter out
    yield [
        "0.9.19",
        "1.0.0rc1",
        "1.0.0",
        "1.0.1",
        "1.0.2",
        "1.2.0-rc.1",
        "1.2.0",
        "1.3.4-build.3588",
        "1.3.4",
        "1.4.8",
        "1.5.0-beta.1",
    ]


@pytest.fixture
def current_release():
    return CurrentVersion(version="2.1.1", is_snapshot=False)


@pytest.fixture
def current_snapshot():
    return CurrentVersion.model_validate(
        {"version": "1.6.0-local+sha.8f2b1c3", "isSnapshot": True, "codeName": "snapshot"}
    )


@pytest.fixture
def mock_yarn_response():
    return {"type": "inspect", "data": ["1.0.0", "1.0.1", "1.2.0", "1.4.8"]}


@pytest.fixture
def version_file(tmp_path):
    path = tmp_path / "version.json"
    path.write_text(
        json.dumps({"version": "1.5.0", "isSnapshot": False, "codeName": "tidal-wave"})
    )
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "docversions.json"
    path.write_text(
        json.dumps(
            {
                "package": "angular",
                "docs_host": "docs.example.org",
                "blacklist": ["1.3.4-build.3588", "1.4.8"],
            }
        )
    )
    return path


@pytest.fixture
def base_registry_client():
    return BaseRegistryClient()


@pytest.fixture
def registry_client():
    return RegistryClient()


@pytest.fixture
def mock_registry(registry_versions):
    client = AsyncMock(spec=RegistryClient)
    client.get_versions.return_value = registry_versions
    return client
