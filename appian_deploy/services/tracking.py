"""
Operation tracker - the facade the CLI uses for long-running operations.

Builds a fresh OperationPoller per track() call from explicit arguments and
the frozen settings, and delegates results lookups to ResultsResolver.
"""

from __future__ import annotations

from appian_deploy.client import DeploymentApiClient
from appian_deploy.config import AppianSettings
from appian_deploy.protocols import LoggerProtocol, NullLogger, ProgressCallback
from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.results import DeploymentResults, InspectionResults
from appian_deploy.schemas.status import OperationKind
from appian_deploy.services.poller import BackoffPolicy, OperationPoller, PollPolicy
from appian_deploy.services.results import ResultsResolver

__all__ = ['OperationTracker']


class OperationTracker:
    """Track operations and fetch their results through one API client."""

    def __init__(
        self,
        client: DeploymentApiClient,
        settings: AppianSettings,
        logger: LoggerProtocol | None = None,
    ) -> None:
        """
        Args:
            client: Open API client
            settings: Resolved settings (monitor section supplies backoff)
            logger: Receives progress lines; NullLogger when omitted
        """
        self.client = client
        self.settings = settings
        self.logger = logger if logger is not None else NullLogger()
        self.resolver = ResultsResolver(client)

    async def track(
        self,
        operation_uuid: str,
        kind: OperationKind,
        interval_seconds: float,
        timeout_seconds: float,
        on_progress: ProgressCallback | None = None,
        backoff: bool = False,
    ) -> StatusSnapshot:
        """
        Poll an operation to a terminal status.

        Args:
            operation_uuid: Operation to track
            kind: deployment, export or inspection
            interval_seconds: Flat wait between queries (ignored with backoff)
            timeout_seconds: Overall deadline
            on_progress: Awaited with every non-terminal snapshot (default: logger.progress)
            backoff: Use exponential backoff (also enabled by monitor.backoff_enabled)

        Raises:
            PollTimeoutError: Deadline passed before a terminal status
        """
        policy = PollPolicy(interval_seconds=interval_seconds, timeout_seconds=timeout_seconds)
        backoff_policy = None
        if backoff or self.settings.monitor.backoff_enabled:
            backoff_policy = BackoffPolicy.from_config(self.settings.monitor)

        await self.logger.info(f'Waiting for {kind} {operation_uuid} to finish')
        poller = OperationPoller(self.client.get_status, policy, backoff=backoff_policy)
        snapshot = await poller.track(
            operation_uuid,
            kind,
            on_progress=on_progress if on_progress is not None else self.logger.progress,
        )
        await self.logger.info(f'Terminal status: {snapshot.status}')
        return snapshot

    async def fetch_results(self, operation_uuid: str, kind: OperationKind) -> DeploymentResults | InspectionResults:
        return await self.resolver.fetch_results(operation_uuid, kind)
