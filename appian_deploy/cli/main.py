#!/usr/bin/env python3
"""
Command-line interface for appian-deploy.

Submits packages, exports and inspections to the deployment-management API
and tracks the resulting operations to completion.

Every command resolves settings once, opens one API client and runs on a
single event loop (asyncio.run). Failures surface as AppianCliError
subclasses and map to their exit codes (see exit_codes.py).
"""

from __future__ import annotations

import asyncio
import json
import traceback
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import attrs
import typer

from appian_deploy.cli.logger import CLILogger, configure_logging, resolve_log_level
from appian_deploy.cli.render import (
    OutputFormat,
    emit_json,
    render_deploy_plan,
    render_deploy_started,
    render_export_plan,
    render_export_started,
    render_inspection_started,
    render_log_entry,
    render_logs,
    render_packages,
    render_results,
    render_status,
    render_terminal,
)
from appian_deploy.client import DeploymentApiClient
from appian_deploy.config import AppianSettings, SettingsOverrides, load_settings
from appian_deploy.exceptions import AppianCliError, ConfigurationError, LocalFileError
from appian_deploy.exit_codes import EXIT_GENERIC_FAILURE
from appian_deploy.protocols import LoggerProtocol
from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.status import OperationKind, parse_kind
from appian_deploy.services.poller import OperationPoller, PollPolicy
from appian_deploy.services.submission import (
    SubmissionService,
    build_export_request,
    format_bytes,
    plan_deployment,
    plan_inspection,
)
from appian_deploy.services.tracking import OperationTracker

app = typer.Typer(
    name='appian-deploy',
    help='Appian Deployment CLI - automate Appian deployments via REST API v2',
    add_completion=False,
)

OUTPUT_FORMATS = ('text', 'json')
RESULTS_POLL_INTERVAL_SECONDS = 10.0
RESULTS_POLL_TIMEOUT_SECONDS = 600.0


@attrs.define(frozen=True)
class GlobalOptions:
    """Options given before the command name."""

    config_file: Path | None
    overrides: SettingsOverrides
    verbose: bool
    quiet: bool
    output_format: OutputFormat


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(None, '--config-file', help='Configuration file path (TOML)'),
    base_url: str | None = typer.Option(None, '--base-url', help='Base URL for Appian API'),
    api_key: str | None = typer.Option(None, '--api-key', help='API key for authentication'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Enable verbose output'),
    quiet: bool = typer.Option(False, '--quiet', '-q', help='Suppress non-essential output'),
    output_format: str = typer.Option('text', '--format', help='Output format (text or json)'),
) -> None:
    """Appian Deployment CLI."""
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"must be 'text' or 'json', got '{output_format}'", param_hint='--format')
    ctx.obj = GlobalOptions(
        config_file=config_file,
        overrides=SettingsOverrides(base_url=base_url, api_key=api_key),
        verbose=verbose,
        quiet=quiet,
        output_format='json' if output_format == 'json' else 'text',
    )


# ==============================================================================
# Shared plumbing
# ==============================================================================


def _build_client(settings: AppianSettings) -> DeploymentApiClient:
    return DeploymentApiClient(settings)


def _load_settings(options: GlobalOptions) -> AppianSettings:
    settings = load_settings(options.config_file, options.overrides)
    try:
        level = resolve_log_level(settings.logging.level, options.verbose, options.quiet)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    configure_logging(level, settings.logging.json_output)
    return settings


def _kind_option(value: str) -> OperationKind:
    try:
        return parse_kind(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint='--kind') from e


def _split_csv(values: Sequence[str] | None) -> list[str]:
    """Accept both repeated options and comma-separated values."""
    return [item.strip() for value in values or () for item in value.split(',') if item.strip()]


@asynccontextmanager
async def _command_errors(logger: LoggerProtocol, verbose: bool) -> AsyncIterator[None]:
    """Map failures to exit codes: AppianCliError to its own, anything else to 1."""
    try:
        yield
    except AppianCliError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(e.exit_code) from e
    except typer.Exit:
        raise
    except Exception as e:
        await logger.error(f'Unexpected error: {e}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(EXIT_GENERIC_FAILURE) from e


async def _wait_for(tracker: OperationTracker, operation_uuid: str, kind: OperationKind) -> StatusSnapshot:
    """Track with the monitor defaults; progress goes to the tracker's logger."""
    monitor = tracker.settings.monitor
    return await tracker.track(operation_uuid, kind, monitor.interval_seconds, monitor.timeout_seconds)


# ==============================================================================
# Packages
# ==============================================================================


@app.command('get-packages')
def get_packages(
    ctx: typer.Context,
    app_uuid: list[str] | None = typer.Option(None, '--app-uuid', help='Application UUID (repeatable)'),
) -> None:
    """List packages for applications."""
    asyncio.run(_get_packages_async(ctx.obj, _split_csv(app_uuid)))


async def _get_packages_async(options: GlobalOptions, app_uuids: list[str]) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        async with _build_client(settings) as client:
            response = await client.get_packages(app_uuids)
        if options.output_format == 'json':
            emit_json(response)
        else:
            render_packages(response)


# ==============================================================================
# Submissions
# ==============================================================================


@app.command()
def export(
    ctx: typer.Context,
    uuids: list[str] | None = typer.Option(None, '--uuids', help='UUIDs to export (repeatable or comma-separated)'),
    export_type: str = typer.Option('package', '--export-type', help='Export type (package|application)'),
    name: str | None = typer.Option(None, '--name', help='Export name'),
    description: str | None = typer.Option(None, '--description', help='Export description'),
    dry_run: bool = typer.Option(False, '--dry-run', help='Validate without execution'),
    wait: bool = typer.Option(False, '--wait', help='Track the export until it finishes'),
) -> None:
    """Export an application or package to an artifact zip."""
    asyncio.run(_export_async(ctx.obj, _split_csv(uuids), export_type, name, description, dry_run, wait))


async def _export_async(
    options: GlobalOptions,
    uuids: list[str],
    export_type: str,
    name: str | None,
    description: str | None,
    dry_run: bool,
    wait: bool,
) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        request = build_export_request(uuids, export_type, name=name, description=description)
        if dry_run:
            if options.output_format == 'json':
                emit_json(request)
            else:
                render_export_plan(request)
            return

        settings = _load_settings(options)
        async with _build_client(settings) as client:
            response = await SubmissionService(client).export(request)
            if options.output_format == 'json':
                emit_json(response)
            else:
                render_export_started(response)

            if wait:
                snapshot = await _wait_for(OperationTracker(client, settings, logger), str(response.uuid), 'export')
                if options.output_format == 'json':
                    emit_json(snapshot.document)
                else:
                    render_terminal(snapshot)


@app.command()
def inspect(
    ctx: typer.Context,
    package_zip_name: Path = typer.Option(..., '--package-zip-name', help='Package zip file path'),
    customization_file: Path | None = typer.Option(
        None, '--customization-file', help='Import customization properties file (.properties)'
    ),
    admin_console_file: Path | None = typer.Option(
        None, '--admin-console-file', help='Admin Console settings zip (.zip)'
    ),
    wait: bool = typer.Option(False, '--wait', help='Track the inspection and print its results'),
) -> None:
    """Inspect a package via the API before deploying it."""
    asyncio.run(_inspect_async(ctx.obj, package_zip_name, customization_file, admin_console_file, wait))


async def _inspect_async(
    options: GlobalOptions,
    package: Path,
    customization_file: Path | None,
    admin_console_file: Path | None,
    wait: bool,
) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        plan = plan_inspection(package, customization_file=customization_file, admin_console_file=admin_console_file)
        await logger.info(f'Package size: {format_bytes(plan.validation.total_size)}')
        for violation in plan.validation.violations:
            if violation.severity == 'WARNING':
                await logger.warning(f'{violation.message} ({violation.code})')

        settings = _load_settings(options)
        async with _build_client(settings) as client:
            response = await SubmissionService(client).inspect(plan)
            if options.output_format == 'json' and not wait:
                emit_json(response)
            elif not wait:
                render_inspection_started(response)

            if wait:
                tracker = OperationTracker(client, settings, logger)
                await _wait_for(tracker, str(response.uuid), 'inspection')
                results = await tracker.fetch_results(str(response.uuid), 'inspection')
                if options.output_format == 'json':
                    emit_json(results)
                else:
                    render_inspection_started(response)
                    render_results(results)


@app.command('get-inspection')
def get_inspection(
    ctx: typer.Context,
    uuid: str = typer.Option(..., '--uuid', help='Inspection UUID'),
) -> None:
    """Get inspection results by UUID."""
    asyncio.run(_get_inspection_async(ctx.obj, uuid))


async def _get_inspection_async(options: GlobalOptions, inspection_uuid: str) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        async with _build_client(settings) as client:
            results = await OperationTracker(client, settings, logger).fetch_results(inspection_uuid, 'inspection')
        if options.output_format == 'json':
            emit_json(results)
        else:
            render_results(results)


@app.command()
def deploy(
    ctx: typer.Context,
    package_zip_name: Path = typer.Option(..., '--package-zip-name', help='Package zip file path'),
    name: str = typer.Option(..., '--name', help='Deployment name'),
    description: str | None = typer.Option(None, '--description', help='Deployment description'),
    dry_run: bool = typer.Option(False, '--dry-run', help='Validate inputs without deploying'),
    customization_file: Path | None = typer.Option(
        None, '--customization-file', help='Import customization properties file (.properties)'
    ),
    admin_console_file: Path | None = typer.Option(
        None, '--admin-console-file', help='Admin Console settings zip (.zip)'
    ),
    plugins_file: Path | None = typer.Option(None, '--plugins-file', help='Plug-ins file (.zip)'),
    data_source: str | None = typer.Option(None, '--data-source', help='Data source name or UUID'),
    database_scripts: list[str] | None = typer.Option(
        None, '--database-scripts', help='Comma-separated database scripts (.sql,.ddl) in execution order'
    ),
    wait: bool = typer.Option(False, '--wait', help='Track the deployment until it finishes'),
) -> None:
    """Deploy a package to the target environment."""
    scripts = [Path(s) for s in _split_csv(database_scripts)]
    asyncio.run(
        _deploy_async(
            ctx.obj,
            package_zip_name,
            name,
            description,
            dry_run,
            customization_file,
            admin_console_file,
            plugins_file,
            data_source,
            scripts,
            wait,
        )
    )


async def _deploy_async(
    options: GlobalOptions,
    package: Path,
    name: str,
    description: str | None,
    dry_run: bool,
    customization_file: Path | None,
    admin_console_file: Path | None,
    plugins_file: Path | None,
    data_source: str | None,
    database_scripts: list[Path],
    wait: bool,
) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        plan = plan_deployment(
            package,
            name,
            description=description,
            customization_file=customization_file,
            admin_console_file=admin_console_file,
            plugins_file=plugins_file,
            data_source=data_source,
            database_scripts=database_scripts,
        )
        if dry_run:
            if options.output_format == 'json':
                emit_json(plan.request)
            else:
                render_deploy_plan(plan)
            return

        settings = _load_settings(options)
        async with _build_client(settings) as client:
            response = await SubmissionService(client).deploy(plan)
            if options.output_format == 'json':
                emit_json(response)
            else:
                render_deploy_started(response)

            if wait:
                tracker = OperationTracker(client, settings, logger)
                snapshot = await _wait_for(tracker, str(response.uuid), 'deployment')
                if options.output_format == 'json':
                    emit_json(snapshot.document)
                else:
                    render_terminal(snapshot)


# ==============================================================================
# Tracking
# ==============================================================================


@app.command('get-deployment', hidden=True)
@app.command('status')
def status(
    ctx: typer.Context,
    deployment_uuid: str = typer.Option(..., '--deployment-uuid', '--uuid', help='Operation UUID'),
    kind: str = typer.Option('deployment', '--kind', help='Operation kind (deployment, export or inspection)'),
) -> None:
    """Check the status of an operation (one query)."""
    asyncio.run(_status_async(ctx.obj, deployment_uuid, _kind_option(kind)))


async def _status_async(options: GlobalOptions, operation_uuid: str, kind: OperationKind) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        async with _build_client(settings) as client:
            snapshot = await client.get_status(operation_uuid, kind)
        if options.output_format == 'json':
            emit_json(snapshot.document)
        else:
            render_status(snapshot)


@app.command('results', hidden=True)
@app.command('get-deployment-results')
def get_deployment_results(
    ctx: typer.Context,
    deployment_uuid: str = typer.Option(..., '--deployment-uuid', '--uuid', help='Operation UUID'),
    poll: bool = typer.Option(False, '--poll', help='Poll until the operation is terminal first'),
    kind: str = typer.Option('deployment', '--kind', help='Operation kind (deployment, export or inspection)'),
) -> None:
    """Retrieve the results of an operation."""
    asyncio.run(_results_async(ctx.obj, deployment_uuid, poll, _kind_option(kind)))


async def _results_async(options: GlobalOptions, operation_uuid: str, poll: bool, kind: OperationKind) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        async with _build_client(settings) as client:
            tracker = OperationTracker(client, settings, logger)
            if poll:
                await tracker.track(operation_uuid, kind, RESULTS_POLL_INTERVAL_SECONDS, RESULTS_POLL_TIMEOUT_SECONDS)
            results = await tracker.fetch_results(operation_uuid, kind)
        if options.output_format == 'json':
            emit_json(results)
        else:
            render_results(results)


@app.command()
def monitor(
    ctx: typer.Context,
    deployment_uuid: str = typer.Option(..., '--deployment-uuid', '--uuid', help='Operation UUID'),
    kind: str = typer.Option('deployment', '--kind', help='Operation kind (deployment, export or inspection)'),
    interval_seconds: float | None = typer.Option(None, '--interval-seconds', help='Polling interval (default 10)'),
    timeout_seconds: float | None = typer.Option(None, '--timeout-seconds', help='Overall timeout (default 3600)'),
    backoff: bool = typer.Option(False, '--backoff', help='Use exponential backoff between queries'),
) -> None:
    """Track an operation until it reaches a terminal status."""
    asyncio.run(_monitor_async(ctx.obj, deployment_uuid, _kind_option(kind), interval_seconds, timeout_seconds, backoff))


async def _monitor_async(
    options: GlobalOptions,
    operation_uuid: str,
    kind: OperationKind,
    interval_seconds: float | None,
    timeout_seconds: float | None,
    backoff: bool,
) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        interval = settings.monitor.interval_seconds if interval_seconds is None else interval_seconds
        timeout = settings.monitor.timeout_seconds if timeout_seconds is None else timeout_seconds
        if options.output_format == 'text' and not options.quiet:
            typer.secho(f'Monitoring {kind} operation: {operation_uuid}', bold=True, fg=typer.colors.CYAN, err=True)
            typer.secho(f'Interval: {interval:g}s, Timeout: {timeout:g}s', dim=True, err=True)

        async with _build_client(settings) as client:
            snapshot = await OperationTracker(client, settings, logger).track(
                operation_uuid, kind, interval, timeout, backoff=backoff
            )
        if options.output_format == 'json':
            emit_json(snapshot.document)
        else:
            render_terminal(snapshot)


# ==============================================================================
# Artifacts and logs
# ==============================================================================


@app.command('download-package')
def download_package(
    ctx: typer.Context,
    deployment_uuid: str = typer.Option(..., '--deployment-uuid', '--uuid', help='Artifact UUID'),
    output: Path | None = typer.Option(None, '--output', '-o', help='Output file (default: <uuid>.zip)'),
    overwrite: bool = typer.Option(False, '--overwrite', help='Replace an existing output file'),
) -> None:
    """Download a package artifact."""
    asyncio.run(_download_async(ctx.obj, deployment_uuid, output, overwrite))


async def _download_async(options: GlobalOptions, artifact_uuid: str, output: Path | None, overwrite: bool) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        output_path = output if output is not None else settings.download.dir / f'{artifact_uuid}.zip'
        if output_path.exists() and not overwrite:
            raise LocalFileError(f'File already exists: {output_path}. Use --overwrite to replace.')

        async with _build_client(settings) as client:
            data = await client.download_artifact(artifact_uuid)

        try:
            output_path.write_bytes(data)
        except OSError as e:
            raise LocalFileError(f'Failed to write {output_path}: {e}') from e

        if options.output_format == 'json':
            typer.echo(json.dumps({'path': str(output_path), 'bytes': len(data)}))
        else:
            typer.secho('✓ Package downloaded successfully!', fg=typer.colors.GREEN)
            typer.echo(f'  Path: {output_path}')
            typer.echo(f'  Size: {format_bytes(len(data))}')


@app.command()
def logs(
    ctx: typer.Context,
    deployment_uuid: str = typer.Option(..., '--deployment-uuid', '--uuid', help='Deployment UUID'),
    follow: bool | None = typer.Option(None, '--follow/--no-follow', help='Keep printing new entries until done'),
    tail: int | None = typer.Option(None, '--tail', help='Only the last N entries'),
) -> None:
    """Show deployment logs."""
    asyncio.run(_logs_async(ctx.obj, deployment_uuid, follow, tail))


async def _logs_async(options: GlobalOptions, deployment_uuid: str, follow: bool | None, tail: int | None) -> None:
    logger = CLILogger(verbose=options.verbose, quiet=options.quiet)
    async with _command_errors(logger, options.verbose):
        settings = _load_settings(options)
        follow = settings.monitor.logs_follow_default if follow is None else follow

        async with _build_client(settings) as client:
            if not follow:
                response = await client.get_deployment_logs(deployment_uuid, tail)
                if options.output_format == 'json':
                    emit_json(response)
                else:
                    render_logs(deployment_uuid, response)
                return

            await logger.warning('Following logs; press Ctrl+C to stop')
            printed = 0

            async def print_new_entries(*_: object) -> None:
                nonlocal printed
                response = await client.get_deployment_logs(deployment_uuid)
                for entry in response.logs[printed:]:
                    render_log_entry(entry)
                printed = len(response.logs)

            policy = PollPolicy(
                interval_seconds=settings.monitor.logs_follow_interval_seconds,
                timeout_seconds=settings.monitor.timeout_seconds,
            )
            await OperationPoller(client.get_status, policy).track(
                deployment_uuid, 'deployment', on_progress=print_new_entries
            )
            await print_new_entries()
            typer.secho('Deployment completed. Log streaming stopped.', fg=typer.colors.GREEN)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
