"""
CLI logger adapter - implements LoggerProtocol for command-line usage.

User-facing messages go to stderr so stdout stays clean for command output
(tables, JSON). Diagnostic logging (module loggers) is configured separately
by configure_logging().
"""

from __future__ import annotations

import logging
import sys

import structlog
import typer

from appian_deploy.schemas.operations import StatusSnapshot

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class CLILogger:
    """
    Logger implementation for CLI (implements LoggerProtocol from protocols).

    Outputs messages to stderr with optional verbose and quiet modes.
    """

    def __init__(self, verbose: bool = False, quiet: bool = False) -> None:
        """
        Initialize CLI logger.

        Args:
            verbose: If True, show info messages. If False, only warnings/errors.
            quiet: If True, suppress everything but errors (wins over verbose).
        """
        self.verbose = verbose and not quiet
        self.quiet = quiet

    async def info(self, message: str) -> None:
        """Log info message (only if verbose)."""
        if self.verbose:
            typer.echo(f'[INFO] {message}', err=True)

    async def warning(self, message: str) -> None:
        """Log warning message."""
        if not self.quiet:
            typer.secho(f'[WARNING] {message}', fg=typer.colors.YELLOW, err=True)

    async def error(self, message: str) -> None:
        """Log error message."""
        typer.secho(f'[ERROR] {message}', fg=typer.colors.RED, err=True)

    async def progress(self, snapshot: StatusSnapshot, elapsed_seconds: float) -> None:
        """One line per non-terminal observation."""
        if not self.quiet:
            typer.secho(f'[{elapsed_seconds:6.0f}s] Status: {snapshot.status}', dim=True, err=True)


# ==============================================================================
# Module logging
# ==============================================================================


def json_formatter() -> logging.Formatter:
    """One JSON object per record: timestamp, level, logger, event."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt='iso', utc=True),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def resolve_log_level(configured: str, verbose: bool, quiet: bool) -> int:
    """--verbose wins, then --quiet, then the configured level name."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    level = logging.getLevelNamesMapping().get(configured.upper())
    if level is None:
        raise ValueError(f"Unknown log level '{configured}'")
    return level


def configure_logging(level: int, json_output: bool = False) -> None:
    """Install a single stderr handler on the root logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(json_formatter() if json_output else logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    # httpx logs every request at INFO; keep it to warnings unless debugging
    logging.getLogger('httpx').setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
