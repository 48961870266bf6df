"""
Submission service - validate local inputs and start server-side operations.

Everything that can be checked without the network is checked here first:
argument combinations, file existence and a quick package sanity check.
Submissions return the operation UUID; tracking is a separate step
(services/tracking.py).
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from pathlib import Path

import attrs

from appian_deploy.client import DeploymentApiClient, MultipartFile
from appian_deploy.exceptions import InvalidArgumentError, LocalFileError
from appian_deploy.schemas.api import (
    DatabaseScript,
    DeploymentRequest,
    DeployResponse,
    ExportRequest,
    ExportResponse,
    ExportType,
    InspectionRequest,
    InspectionResponse,
    PackageValidation,
    ValidationViolation,
)

__all__ = [
    'DeploymentPlan',
    'InspectionPlan',
    'SubmissionService',
    'build_export_request',
    'format_bytes',
    'plan_deployment',
    'plan_inspection',
    'validate_package_file',
]

logger = logging.getLogger(__name__)

LARGE_PACKAGE_BYTES = 100 * 1024 * 1024

# ==============================================================================
# Local validation
# ==============================================================================


def validate_package_file(package_path: Path) -> PackageValidation:
    """
    Quick local sanity check of a package before upload.

    An empty file is an error; a file over 100 MB or without a .zip
    extension only gets a warning.

    Raises:
        LocalFileError: If the file cannot be stat'ed
    """
    try:
        size = package_path.stat().st_size
    except OSError as e:
        raise LocalFileError(f'Failed to read package file: {e}') from e

    violations: list[ValidationViolation] = []
    if size == 0:
        violations.append(ValidationViolation(severity='ERROR', code='EMPTY_FILE', message='Package file is empty'))
    if size > LARGE_PACKAGE_BYTES:
        violations.append(
            ValidationViolation(severity='WARNING', code='LARGE_FILE', message='Package file is very large (>100MB)')
        )
    if package_path.suffix and package_path.suffix.lower() != '.zip':
        violations.append(
            ValidationViolation(
                severity='WARNING', code='WRONG_EXTENSION', message='Package file should have .zip extension'
            )
        )

    is_valid = not any(v.severity == 'ERROR' for v in violations)
    return PackageValidation(is_valid=is_valid, total_size=size, violations=violations)


def format_bytes(size: int) -> str:
    """Human-readable size with one decimal: 1536 -> '1.5 KB'."""
    units = ('B', 'KB', 'MB', 'GB')
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f'{value:.1f} {units[unit]}'


def _require_file(path: Path | None, label: str) -> None:
    if path is not None and not path.exists():
        raise InvalidArgumentError(f'{label} not found: {path}')


# ==============================================================================
# Request building
# ==============================================================================


@attrs.define(frozen=True)
class DeploymentPlan:
    """A validated deploy submission: JSON part plus the files to upload."""

    request: DeploymentRequest
    files: tuple[MultipartFile, ...]


@attrs.define(frozen=True)
class InspectionPlan:
    """A validated inspection submission."""

    request: InspectionRequest
    files: tuple[MultipartFile, ...]
    validation: PackageValidation


def plan_deployment(
    package: Path,
    name: str,
    *,
    description: str | None = None,
    customization_file: Path | None = None,
    admin_console_file: Path | None = None,
    plugins_file: Path | None = None,
    data_source: str | None = None,
    database_scripts: Sequence[Path] = (),
) -> DeploymentPlan:
    """
    Validate deploy inputs and build the multipart request.

    Database scripts keep their command-line order: orderId 1..n and upload
    parts databaseScript1..databaseScriptN.

    Raises:
        InvalidArgumentError: If any referenced file does not exist
    """
    _require_file(package, 'Package file')
    _require_file(customization_file, 'Customization file')
    _require_file(admin_console_file, 'Admin Console settings file')
    _require_file(plugins_file, 'Plugins file')
    for script in database_scripts:
        _require_file(script, 'Database script')

    files: list[MultipartFile] = [('packageFileName', package)]
    if customization_file is not None:
        files.append(('customizationFileName', customization_file))
    if admin_console_file is not None:
        files.append(('adminConsoleSettingsFileName', admin_console_file))
    if plugins_file is not None:
        files.append(('pluginsFileName', plugins_file))
    for index, script in enumerate(database_scripts, start=1):
        files.append((f'databaseScript{index}', script))

    scripts = [
        DatabaseScript(file_name=script.name, order_id=str(index))
        for index, script in enumerate(database_scripts, start=1)
    ]
    request = DeploymentRequest(
        name=name,
        description=description,
        admin_console_settings_file_name=admin_console_file.name if admin_console_file else None,
        package_file_name=package.name,
        customization_file_name=customization_file.name if customization_file else None,
        plugins_file_name=plugins_file.name if plugins_file else None,
        data_source=data_source,
        database_scripts=scripts or None,
    )
    return DeploymentPlan(request=request, files=tuple(files))


def plan_inspection(
    package: Path,
    *,
    customization_file: Path | None = None,
    admin_console_file: Path | None = None,
) -> InspectionPlan:
    """
    Validate inspection inputs and build the multipart request.

    Raises:
        LocalFileError: If the package file is missing
        InvalidArgumentError: If an optional file is missing or the package is invalid
    """
    if not package.exists():
        raise LocalFileError(f'Package file not found: {package}')
    _require_file(customization_file, 'Customization file')
    _require_file(admin_console_file, 'Admin Console settings file')

    validation = validate_package_file(package)
    if not validation.is_valid:
        raise InvalidArgumentError('Package file is invalid')

    files: list[MultipartFile] = [('zipFile', package)]
    if customization_file is not None:
        files.append(('ICF', customization_file))
    if admin_console_file is not None:
        files.append(('adminConsole', admin_console_file))

    request = InspectionRequest(
        admin_console_settings_file_name=admin_console_file.name if admin_console_file else None,
        package_file_name=package.name,
        customization_file_name=customization_file.name if customization_file else None,
    )
    return InspectionPlan(request=request, files=tuple(files), validation=validation)


def build_export_request(
    uuids: Sequence[str],
    export_type: str,
    *,
    name: str | None = None,
    description: str | None = None,
) -> ExportRequest:
    """
    Validate export arguments and build the request.

    Raises:
        InvalidArgumentError: No uuids, unknown export type, more than one
            uuid for a package export, or a uuid that does not parse
    """
    if not uuids:
        raise InvalidArgumentError('At least one --uuids value must be provided')

    normalized = export_type.lower()
    if normalized not in ('package', 'application'):
        raise InvalidArgumentError("--export-type must be 'package' or 'application'")
    kind: ExportType = 'package' if normalized == 'package' else 'application'

    if kind == 'package' and len(uuids) != 1:
        raise InvalidArgumentError("For export-type 'package', exactly one uuid is required")

    parsed: list[uuid.UUID] = []
    for value in uuids:
        try:
            parsed.append(uuid.UUID(value))
        except ValueError as e:
            raise InvalidArgumentError(f'Invalid UUID provided: {value} ({e})') from e

    return ExportRequest(uuids=parsed, export_type=kind, name=name, description=description)


# ==============================================================================
# Submission
# ==============================================================================


class SubmissionService:
    """Start deployments, exports and inspections."""

    def __init__(self, client: DeploymentApiClient) -> None:
        self.client = client

    async def deploy(self, plan: DeploymentPlan) -> DeployResponse:
        logger.info(f'Starting deployment: {plan.request.name} with package {plan.request.package_file_name}')
        response = await self.client.deploy(plan.request, plan.files)
        logger.info(f'Deployment submitted: {response.uuid}')
        return response

    async def export(self, request: ExportRequest) -> ExportResponse:
        response = await self.client.export(request)
        logger.info(f'Export submitted: {response.uuid}')
        return response

    async def inspect(self, plan: InspectionPlan) -> InspectionResponse:
        response = await self.client.inspect(plan.request, plan.files)
        logger.info(f'Inspection submitted: {response.uuid}')
        return response
