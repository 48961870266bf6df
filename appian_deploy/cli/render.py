"""
Text and JSON rendering of command results (stdout).

JSON output uses the wire field names (by_alias) so it can be fed back to
other tools unchanged.
"""

from __future__ import annotations

from typing import Literal, TypeAlias

import pydantic
import typer

from appian_deploy.schemas.api import (
    DeploymentStatusResponse,
    DeployResponse,
    ExportRequest,
    ExportResponse,
    ExportStatusDocument,
    InspectionResponse,
    InspectionStatusDocument,
    LogEntry,
    LogsResponse,
    PackageListResponse,
)
from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.results import (
    DeploymentResults,
    ExportDeploymentResults,
    ImportCounts,
    ImportDeploymentResults,
    InspectionResults,
)
from appian_deploy.schemas.status import is_import_result_terminal
from appian_deploy.services.submission import DeploymentPlan

OutputFormat: TypeAlias = Literal['text', 'json']

LOG_LEVEL_COLORS = {
    'Error': typer.colors.RED,
    'Warn': typer.colors.YELLOW,
    'Info': typer.colors.GREEN,
    'Debug': typer.colors.BLUE,
}


def emit_json(model: pydantic.BaseModel) -> None:
    typer.echo(model.model_dump_json(by_alias=True, indent=2))


def _field(label: str, value: object) -> None:
    typer.echo(f'  {label}: {value}')


def _counts(label: str, counts: ImportCounts | None) -> None:
    if counts is None:
        return
    typer.echo(f'  {label}:')
    typer.echo(
        f'    total={counts.total}, imported={counts.imported}, failed={counts.failed}, skipped={counts.skipped}'
    )


# ==============================================================================
# Packages and submissions
# ==============================================================================


def render_packages(response: PackageListResponse) -> None:
    typer.secho(f'Found {response.total} package(s)', bold=True, fg=typer.colors.GREEN)
    for package in response.packages:
        typer.echo(f'  • {package.name} ({package.version})')
        _field('  ID', package.id)
        _field('  Updated', package.updated_at.strftime('%Y-%m-%d %H:%M:%S UTC'))
        if package.dependencies:
            _field('  Dependencies', ', '.join(package.dependencies))


def render_export_started(response: ExportResponse) -> None:
    typer.secho('✓ Export initiated successfully', fg=typer.colors.GREEN)
    _field('Export UUID', response.uuid)
    _field('Status', response.status)
    _field('Details URL', response.url)


def render_export_plan(request: ExportRequest) -> None:
    typer.secho('Dry run validation successful', fg=typer.colors.GREEN)
    _field('Export type', request.export_type)
    _field('UUIDs', ', '.join(str(u) for u in request.uuids))
    _field('Name', request.name or '-')
    _field('Description', request.description or '-')


def render_deploy_started(response: DeployResponse) -> None:
    typer.secho('✓ Deployment initiated successfully', fg=typer.colors.GREEN)
    _field('Deployment UUID', response.uuid)
    _field('Status', response.status)
    _field('Results URL', response.url)
    typer.echo()
    typer.secho("Use 'status' or 'monitor' commands to track progress", dim=True)


def render_deploy_plan(plan: DeploymentPlan) -> None:
    typer.secho('Dry run validation successful', fg=typer.colors.GREEN)
    for field_name, path in plan.files:
        _field(field_name, path)
    _field('Deployment name', plan.request.name)
    if plan.request.description:
        _field('Description', plan.request.description)
    if plan.request.data_source:
        _field('Data source', plan.request.data_source)


def render_inspection_started(response: InspectionResponse) -> None:
    typer.secho('✓ Inspection initiated', fg=typer.colors.GREEN)
    _field('UUID', response.uuid)
    _field('URL', response.url)


# ==============================================================================
# Status
# ==============================================================================


def render_status(snapshot: StatusSnapshot) -> None:
    document = snapshot.document
    match document:
        case DeploymentStatusResponse():
            typer.secho('Deployment Status:', bold=True, fg=typer.colors.GREEN)
            _field('Deployment ID', document.deployment_id or snapshot.operation_uuid)
            _field('Status', document.status)
            if document.current_step:
                _field('Current Step', document.current_step)
            if document.result_links:
                typer.echo('  Result Links:')
                for link in document.result_links:
                    typer.echo(f'    • {link}')
            if document.created_at:
                _field('Created', document.created_at.strftime('%Y-%m-%d %H:%M:%S UTC'))
            if document.updated_at:
                _field('Updated', document.updated_at.strftime('%Y-%m-%d %H:%M:%S UTC'))
        case ExportStatusDocument():
            typer.secho('Export Status:', bold=True, fg=typer.colors.GREEN)
            _field('Export UUID', document.uuid or snapshot.operation_uuid)
            _field('Status', document.status)
            if document.url:
                _field('Details URL', document.url)
        case InspectionStatusDocument():
            typer.secho('Inspection Status:', bold=True, fg=typer.colors.GREEN)
            _field('Inspection UUID', snapshot.operation_uuid)
            _field('Status', document.status)

    typer.echo()
    if snapshot.is_terminal:
        typer.secho('Operation completed', fg=typer.colors.GREEN)
    else:
        typer.secho('Operation in progress...', fg=typer.colors.YELLOW)


def render_terminal(snapshot: StatusSnapshot) -> None:
    typer.secho(f'✓ Operation {snapshot.operation_uuid} finished: {snapshot.status}', fg=typer.colors.GREEN)


# ==============================================================================
# Results
# ==============================================================================


def render_results(results: DeploymentResults | InspectionResults) -> None:
    match results:
        case ImportDeploymentResults():
            _render_import(results)
        case ExportDeploymentResults():
            _render_export(results)
        case InspectionResults():
            _render_inspection(results)


def _render_import(results: ImportDeploymentResults) -> None:
    summary = results.summary
    typer.secho('Deployment Results:', bold=True, fg=typer.colors.GREEN)
    _field('Status', results.status)
    if not is_import_result_terminal(results.status):
        typer.secho('  Results are not final yet; rerun with --poll to wait for completion', fg=typer.colors.YELLOW)
    if summary.deployment_log_url:
        _field('Deployment Log', summary.deployment_log_url)
    _counts('Admin Console Settings', summary.admin_console_settings)
    _counts('Objects', summary.objects)
    if summary.plugins is not None:
        typer.echo('  Plugins:')
        typer.echo(
            f'    total={summary.plugins.total}, imported={summary.plugins.imported}, skipped={summary.plugins.skipped}'
        )
    if summary.database_scripts is not None:
        _field('Database Scripts', summary.database_scripts)


def _render_export(results: ExportDeploymentResults) -> None:
    typer.secho('Export Results:', bold=True, fg=typer.colors.GREEN)
    if results.status:
        _field('Status', results.status)
    optional = {
        'Deployment Log': results.deployment_log_url,
        'Package Zip': results.package_zip,
        'Plugins Zip': results.plugins_zip,
        'Customization File': results.customization_file,
        'Customization File Template': results.customization_file_template,
        'Data Source': results.data_source,
    }
    for label, value in optional.items():
        if value:
            _field(label, value)
    if results.database_scripts:
        typer.echo('  Database Scripts:')
        for script in results.database_scripts:
            typer.echo(f'    • {script.file_name} (order {script.order_id}): {script.url}')


def _render_inspection(results: InspectionResults) -> None:
    summary = results.summary
    problems = summary.problems
    typer.secho('Inspection Results:', bold=True, fg=typer.colors.GREEN)
    _field('Status', results.status)
    _counts('Admin Console Settings (expected)', summary.admin_console_settings_expected)
    _counts('Objects (expected)', summary.objects_expected)
    color = typer.colors.RED if problems.total_errors else typer.colors.GREEN
    typer.secho(f'  Problems: {problems.total_errors} error(s), {problems.total_warnings} warning(s)', fg=color)
    for error in problems.errors:
        typer.secho(f'    ✗ {error.object_name} ({error.object_uuid}): {error.error_message}', fg=typer.colors.RED)
    for warning in problems.warnings:
        typer.secho(
            f'    ! {warning.object_name} ({warning.object_uuid}): {warning.warning_message}', fg=typer.colors.YELLOW
        )


# ==============================================================================
# Logs
# ==============================================================================


def render_log_entry(entry: LogEntry) -> None:
    timestamp = typer.style(entry.timestamp.strftime('%Y-%m-%d %H:%M:%S'), dim=True)
    level = typer.style(f'[{entry.level:5}]', fg=LOG_LEVEL_COLORS[entry.level])
    typer.echo(f'{timestamp} {level} {entry.message}')


def render_logs(deployment_uuid: str, response: LogsResponse) -> None:
    typer.secho(f'Logs for deployment: {deployment_uuid}', bold=True, fg=typer.colors.GREEN)
    typer.echo(f'Total entries: {response.total}')
    typer.echo()
    if not response.logs:
        typer.secho('No logs found.', fg=typer.colors.YELLOW)
        return
    for entry in response.logs:
        render_log_entry(entry)
