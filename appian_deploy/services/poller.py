"""
Operation poller - drive one server-side operation to a terminal status.

Loop contract:
- The deadline is checked before every query; no query is issued once the
  elapsed time exceeds the timeout.
- At most one status query is in flight per poller.
- A failed query ends the loop immediately (no retries here).
- The wait between queries is never shortened to meet the deadline, so a
  timeout shorter than the interval yields at most one query.

Each track() call owns its start instant and backoff counter, so one poller
can track several operations concurrently from separate tasks.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable

import attrs

from appian_deploy.config import MonitorConfig
from appian_deploy.exceptions import PollTimeoutError
from appian_deploy.protocols import ProgressCallback, StatusQuery
from appian_deploy.schemas.operations import StatusSnapshot
from appian_deploy.schemas.status import OperationKind

__all__ = [
    'BackoffPolicy',
    'OperationPoller',
    'PollPolicy',
]

logger = logging.getLogger(__name__)


@attrs.define(frozen=True)
class PollPolicy:
    """Flat polling interval and overall deadline, both in seconds."""

    interval_seconds: float = attrs.field(validator=attrs.validators.ge(0))
    timeout_seconds: float = attrs.field(validator=attrs.validators.ge(0))


@attrs.define(frozen=True)
class BackoffPolicy:
    """
    Exponential backoff between status queries.

    The n-th non-terminal observation (0-based) waits min(initial * 2**n, max).
    With jitter, a uniform skew in [0, delay/2) is added and the result is
    capped at max again.
    """

    initial_ms: int = attrs.field(default=1000, validator=attrs.validators.gt(0))
    max_ms: int = attrs.field(default=30000)
    jitter: bool = True

    @max_ms.validator
    def _check_max(self, attribute: attrs.Attribute[int], value: int) -> None:
        if value < self.initial_ms:
            raise ValueError(f'max_ms ({value}) must be >= initial_ms ({self.initial_ms})')

    @classmethod
    def from_config(cls, config: MonitorConfig) -> BackoffPolicy:
        return cls(initial_ms=config.backoff_initial_ms, max_ms=config.backoff_max_ms, jitter=config.jitter)

    def delay_seconds(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        """Wait after the attempt-th non-terminal observation."""
        delay_ms = min(self.initial_ms * 2**attempt, self.max_ms)
        if self.jitter:
            delay_ms = min(delay_ms + rng() * delay_ms / 2, self.max_ms)
        return delay_ms / 1000


class OperationPoller:
    """
    Repeatedly query an operation's status until it is terminal or time runs out.

    Dependencies are injected so tests can run without real time:
    clock (monotonic seconds), sleep (awaitable delay), rng (jitter source).
    """

    def __init__(
        self,
        status_query: StatusQuery,
        policy: PollPolicy,
        *,
        backoff: BackoffPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.status_query = status_query
        self.policy = policy
        self.backoff = backoff
        self._clock = clock
        self._sleep = sleep
        self._rng = rng

    async def track(
        self,
        operation_uuid: str,
        kind: OperationKind,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> StatusSnapshot:
        """
        Poll until the operation reaches a terminal status.

        Args:
            operation_uuid: Server-assigned operation UUID
            kind: Which status vocabulary and endpoint apply
            on_progress: Awaited with every non-terminal snapshot

        Returns:
            The first terminal snapshot observed

        Raises:
            PollTimeoutError: If the deadline passes before a terminal status
            AppianCliError: Any classified failure of a status query
        """
        started = self._clock()
        attempt = 0
        logger.debug(f'Tracking {kind} {operation_uuid} (timeout {self.policy.timeout_seconds}s)')

        while True:
            elapsed = self._clock() - started
            if elapsed > self.policy.timeout_seconds:
                logger.warning(f'Timed out tracking {kind} {operation_uuid} after {elapsed:.1f}s ({attempt} queries)')
                raise PollTimeoutError(operation_uuid, self.policy.timeout_seconds)

            snapshot = await self.status_query(operation_uuid, kind)
            if snapshot.is_terminal:
                logger.info(f'{kind} {operation_uuid} reached terminal status {snapshot.status}')
                return snapshot

            if on_progress is not None:
                await on_progress(snapshot, elapsed)

            delay = self._next_delay(attempt)
            attempt += 1
            logger.debug(f'{kind} {operation_uuid} is {snapshot.status}; next query in {delay:.2f}s')
            await self._sleep(delay)

    def _next_delay(self, attempt: int) -> float:
        if self.backoff is None:
            return self.policy.interval_seconds
        return self.backoff.delay_seconds(attempt, self._rng)
