"""
Deployment-management API v2 wire models.

Request bodies are strict (we produce them). Submission responses and status
documents are permissive: the server may add informational fields, but the
fields modeled here must be present and well-typed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

import pydantic

from appian_deploy.schemas.status import DeploymentStatus, ExportStatus, InspectionOperationStatus
from appian_deploy.schemas.types import BaseStrictModel, JsonDatetime, JsonUuid, PermissiveModel

# ==============================================================================
# Packages
# ==============================================================================


class Package(PermissiveModel):
    """A deployable package belonging to an application."""

    id: str
    name: str
    version: str
    dependencies: Sequence[str] = ()
    created_at: JsonDatetime = pydantic.Field(alias='createdAt')
    updated_at: JsonDatetime = pydantic.Field(alias='updatedAt')


class PackageListResponse(PermissiveModel):
    """Response of GET /deployment/v2/packages."""

    packages: Sequence[Package]
    total: int


# ==============================================================================
# Export
# ==============================================================================

ExportType = Literal['package', 'application']


class ExportRequest(BaseStrictModel):
    """JSON part of the export multipart request."""

    uuids: Sequence[JsonUuid]
    export_type: ExportType = pydantic.Field(alias='exportType')
    name: str | None = None
    description: str | None = None


class ExportResponse(PermissiveModel):
    """Response of the export submission."""

    uuid: JsonUuid
    url: str
    status: ExportStatus


class ExportStatusDocument(PermissiveModel):
    """
    Export status as reported by GET .../deployments/{uuid}.

    Only status drives the terminal decision. The same endpoint serves the
    export results, so uuid and url are not guaranteed on every read.
    """

    status: ExportStatus
    uuid: JsonUuid | None = None
    url: str | None = None


# ==============================================================================
# Deploy (import)
# ==============================================================================


class DatabaseScript(BaseStrictModel):
    """Database script reference in a deployment request. order_id is 1-based."""

    file_name: str = pydantic.Field(alias='fileName')
    order_id: str = pydantic.Field(alias='orderId')


class DeploymentRequest(BaseStrictModel):
    """JSON part of the deploy multipart request."""

    name: str
    description: str | None = None
    admin_console_settings_file_name: str | None = pydantic.Field(
        default=None, alias='adminConsoleSettingsFileName'
    )
    package_file_name: str | None = pydantic.Field(default=None, alias='packageFileName')
    customization_file_name: str | None = pydantic.Field(default=None, alias='customizationFileName')
    plugins_file_name: str | None = pydantic.Field(default=None, alias='pluginsFileName')
    data_source: str | None = pydantic.Field(default=None, alias='dataSource')
    database_scripts: Sequence[DatabaseScript] | None = pydantic.Field(default=None, alias='databaseScripts')


class DeployResponse(PermissiveModel):
    """Response of the deploy submission. status is free text at this point."""

    uuid: JsonUuid
    url: str
    status: str


class DeploymentStatusResponse(PermissiveModel):
    """Deployment status as reported by GET /deployment/v2/deployments/{uuid}."""

    status: DeploymentStatus
    deployment_id: JsonUuid | None = pydantic.Field(default=None, alias='deploymentId')
    current_step: str | None = pydantic.Field(default=None, alias='currentStep')
    result_links: Sequence[str] = pydantic.Field(default=(), alias='resultLinks')
    created_at: JsonDatetime | None = pydantic.Field(default=None, alias='createdAt')
    updated_at: JsonDatetime | None = pydantic.Field(default=None, alias='updatedAt')


# ==============================================================================
# Inspection
# ==============================================================================


class InspectionRequest(BaseStrictModel):
    """JSON part of the inspection multipart request."""

    admin_console_settings_file_name: str | None = pydantic.Field(
        default=None, alias='adminConsoleSettingsFileName'
    )
    package_file_name: str = pydantic.Field(alias='packageFileName')
    customization_file_name: str | None = pydantic.Field(default=None, alias='customizationFileName')


class InspectionResponse(PermissiveModel):
    """Response of the inspection submission."""

    uuid: JsonUuid
    url: str


class InspectionStatusDocument(PermissiveModel):
    """Inspection status read from GET .../inspections/{uuid}; the summary may not exist yet."""

    status: InspectionOperationStatus


# ==============================================================================
# Logs
# ==============================================================================

LogLevel = Literal['Error', 'Warn', 'Info', 'Debug']


class LogEntry(PermissiveModel):
    """One deployment log line."""

    timestamp: JsonDatetime
    level: LogLevel
    component: str
    message: str


class LogsResponse(PermissiveModel):
    """Response of GET /deployment/v2/deployments/{uuid}/log."""

    logs: Sequence[LogEntry]
    total: int
    has_more: bool = pydantic.Field(alias='hasMore')


# ==============================================================================
# Local package validation (no API call)
# ==============================================================================

ViolationSeverity = Literal['ERROR', 'WARNING', 'INFO']


class ValidationViolation(BaseStrictModel):
    """One finding of the local pre-upload package check."""

    severity: ViolationSeverity
    code: str
    message: str


class PackageValidation(BaseStrictModel):
    """Result of the local pre-upload package check."""

    is_valid: bool
    total_size: int
    violations: Sequence[ValidationViolation] = ()
