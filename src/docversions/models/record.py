from typing import Any

from pydantic import Field

from . import Model

SERVICE_TEMPLATE = "angular-service.template.js"


class ServiceRecord(Model):
    """
    A generated document exposing a value as an angular service to the documentation app.

    :ivar id: Identifier of the record (e.g., ``current-version-data``).
    :ivar doc_type: Document type, identical to ``id`` for version records.
    :ivar template: Template file name the record is rendered with.
    :ivar output_path: Path of the rendered file, relative to the output directory.
    :ivar ng_module_name: Name of the angular module defining the service.
    :ivar service_name: Name of the injectable value.
    :ivar service_value: JSON-serializable value of the service.
    """

    id: str
    doc_type: str = Field(alias="docType")
    template: str = SERVICE_TEMPLATE
    output_path: str = Field(alias="outputPath")
    ng_module_name: str = Field(alias="ngModuleName")
    service_name: str = Field(alias="serviceName")
    service_value: Any = Field(alias="serviceValue")


def current_version_record(service_value: Any) -> ServiceRecord:
    return ServiceRecord(
        id="current-version-data",
        doc_type="current-version-data",
        output_path="js/current-version-data.js",
        ng_module_name="currentVersionData",
        service_name="CURRENT_NG_VERSION",
        service_value=service_value,
    )


def all_versions_record(service_value: Any) -> ServiceRecord:
    return ServiceRecord(
        id="allversions-data",
        doc_type="allversions-data",
        output_path="js/all-versions-data.js",
        ng_module_name="allVersionsData",
        service_name="ALL_NG_VERSIONS",
        service_value=service_value,
    )
