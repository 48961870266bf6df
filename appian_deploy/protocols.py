"""
Shared protocols for appian-deploy services.

Single source of truth for the seams between the tracking core and its
collaborators (transport, progress display).
"""

from __future__ import annotations

from typing import Protocol

from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.status import OperationKind


class LoggerProtocol(Protocol):
    """
    Protocol for async user-facing logger.

    Implementations:
    - CLILogger (cli/logger.py): Writes to stderr with optional verbose mode
    - NullLogger (below): No-op implementation for when output is not wanted
    """

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...
    async def progress(self, snapshot: StatusSnapshot, elapsed_seconds: float) -> None: ...


class StatusQuery(Protocol):
    """One status query against the API, returning a decoded snapshot.

    Raises the classified exception (or TransportError) on failure.
    """

    async def __call__(self, operation_uuid: str, kind: OperationKind) -> StatusSnapshot: ...


class ProgressCallback(Protocol):
    """Receives every non-terminal snapshot observed by a poller."""

    async def __call__(self, snapshot: StatusSnapshot, elapsed_seconds: float) -> None: ...


class NullLogger:
    """
    No-op logger implementation for when logging is optional.

    Use this when a function requires a LoggerProtocol but the caller
    doesn't need output.
    """

    async def info(self, message: str) -> None:
        pass

    async def warning(self, message: str) -> None:
        pass

    async def error(self, message: str) -> None:
        pass

    async def progress(self, snapshot: StatusSnapshot, elapsed_seconds: float) -> None:
        pass
