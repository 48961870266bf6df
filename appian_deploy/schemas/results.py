"""
Operation result schemas.

GET .../deployments/{uuid} returns one of two shapes depending on whether the
operation was an import or an export, without an explicit discriminant:

- Import: requires summary.adminConsoleSettings and status
- Export: requires databaseScripts; its URL fields are nullable

Unknown fields are tolerated at every level so that new server fields do not
break decoding; only status tokens fail closed. Matching is done by
services/results.py (ordered candidate decoders with an ambiguity check), not
by a pydantic union, so that "matched neither" and "matched both" are
reported distinctly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeAlias

import pydantic

from appian_deploy.schemas.status import ExportStatus, ImportDeploymentStatus, InspectionOperationStatus
from appian_deploy.schemas.types import PermissiveModel

# ==============================================================================
# Import results
# ==============================================================================


class ImportCounts(PermissiveModel):
    """Per-category counts of an import."""

    total: int
    imported: int
    failed: int
    skipped: int


class PluginsSummary(PermissiveModel):
    """Plug-in counts. Plug-ins cannot fail individually, they are skipped."""

    total: int
    imported: int
    skipped: int


class ImportSummary(PermissiveModel):
    """Summary block of an import. adminConsoleSettings is the structural discriminant."""

    admin_console_settings: ImportCounts = pydantic.Field(alias='adminConsoleSettings')
    objects: ImportCounts | None = None
    plugins: PluginsSummary | None = None
    database_scripts: int | None = pydantic.Field(default=None, alias='databaseScripts')
    deployment_log_url: str | None = pydantic.Field(default=None, alias='deploymentLogUrl')


class ImportDeploymentResults(PermissiveModel):
    """Results of an import (deploy) operation."""

    summary: ImportSummary
    status: ImportDeploymentStatus


# ==============================================================================
# Export results
# ==============================================================================


class ExportedDatabaseScript(PermissiveModel):
    """Database script produced by an export, with its download URL."""

    file_name: str = pydantic.Field(alias='fileName')
    order_id: int = pydantic.Field(alias='orderId')
    url: str


class ExportDeploymentResults(PermissiveModel):
    """Results of an export operation. URL fields stay null until the artifact exists."""

    database_scripts: Sequence[ExportedDatabaseScript] = pydantic.Field(alias='databaseScripts')
    package_zip: str | None = pydantic.Field(default=None, alias='packageZip')
    data_source: str | None = pydantic.Field(default=None, alias='dataSource')
    plugins_zip: str | None = pydantic.Field(default=None, alias='pluginsZip')
    customization_file: str | None = pydantic.Field(default=None, alias='customizationFile')
    customization_file_template: str | None = pydantic.Field(default=None, alias='customizationFileTemplate')
    deployment_log_url: str | None = pydantic.Field(default=None, alias='deploymentLogUrl')
    status: ExportStatus | None = None


DeploymentResults: TypeAlias = ImportDeploymentResults | ExportDeploymentResults
"""Tagged union over the two result shapes; tell them apart with isinstance."""


# ==============================================================================
# Inspection results
# ==============================================================================


class InspectionCountSummary(PermissiveModel):
    """Counts the import would produce."""

    total: int
    imported: int
    failed: int
    skipped: int


class InspectionErrorEntry(PermissiveModel):
    error_message: str = pydantic.Field(alias='errorMessage')
    object_name: str = pydantic.Field(alias='objectName')
    object_uuid: str = pydantic.Field(alias='objectUuid')


class InspectionWarningEntry(PermissiveModel):
    warning_message: str = pydantic.Field(alias='warningMessage')
    object_name: str = pydantic.Field(alias='objectName')
    object_uuid: str = pydantic.Field(alias='objectUuid')


class InspectionProblemsSummary(PermissiveModel):
    total_errors: int = pydantic.Field(alias='totalErrors')
    total_warnings: int = pydantic.Field(alias='totalWarnings')
    errors: Sequence[InspectionErrorEntry] = ()
    warnings: Sequence[InspectionWarningEntry] = ()


class InspectionSummary(PermissiveModel):
    admin_console_settings_expected: InspectionCountSummary = pydantic.Field(alias='adminConsoleSettingsExpected')
    objects_expected: InspectionCountSummary = pydantic.Field(alias='objectsExpected')
    problems: InspectionProblemsSummary


class InspectionResults(PermissiveModel):
    """Results of an inspection operation."""

    summary: InspectionSummary
    status: InspectionOperationStatus
