"""Bounded fixed-interval polling for queue-based providers.

The engine owns the :class:`ProviderJob` state machine
``QUEUED -> RUNNING -> {COMPLETED | FAILED}``. Adapters hand it two closures
scoped to one vendor request id: one returning the vendor's textual status,
one fetching the finished result. Only the status phase loops; submission is
never retried here.

Unknown vendor statuses are treated as still running. The loop is bounded by
``max_polls`` and, optionally, by a wall-clock budget; exhausting either
raises :class:`OrchestrationTimeout`.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from .generation_errors import OrchestrationTimeout, VendorError
from .generation_models import JobStatus, ProviderJob

logger = structlog.get_logger(__name__)

T = TypeVar("T")

COMPLETED_TOKENS = frozenset({"completed"})
FAILED_TOKENS = frozenset({"failed", "error"})


def map_vendor_status(raw: str | None) -> JobStatus:
    """Map a vendor status string onto :class:`JobStatus`."""

    token = (raw or "").strip().lower()
    if token in COMPLETED_TOKENS:
        return JobStatus.COMPLETED
    if token in FAILED_TOKENS:
        return JobStatus.FAILED
    return JobStatus.RUNNING


@dataclass(slots=True)
class PollingEngine:
    """Drive a :class:`ProviderJob` to a terminal state."""

    interval_seconds: float = 15.0
    max_polls: int = 10
    deadline_seconds: float | None = None
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    clock: Callable[[], float] = field(default=time.monotonic)

    def __post_init__(self) -> None:
        if self.max_polls < 1:
            raise ValueError("max_polls must be at least 1")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

    async def run(
        self,
        job: ProviderJob,
        *,
        provider_key: str,
        fetch_status: Callable[[], Awaitable[str | None]],
        fetch_result: Callable[[], Awaitable[T]],
    ) -> T:
        """Poll ``fetch_status`` until completion, then call ``fetch_result`` once.

        Raises:
            VendorError: The vendor reported a failed job.
            OrchestrationTimeout: ``max_polls`` or the deadline was exhausted.
        """

        started = self.clock()
        log = logger.bind(provider_key=provider_key, request_id=job.request_id)
        log.info("polling.start", max_polls=self.max_polls, interval=self.interval_seconds)

        try:
            while job.poll_count < self.max_polls:
                job.poll_count += 1
                raw_status = await fetch_status()
                job.status = map_vendor_status(raw_status)
                log.debug("polling.status", attempt=job.poll_count, vendor_status=raw_status)

                if job.status is JobStatus.COMPLETED:
                    log.info("polling.completed", attempts=job.poll_count)
                    return await fetch_result()
                if job.status is JobStatus.FAILED:
                    log.warning("polling.failed", attempts=job.poll_count, vendor_status=raw_status)
                    raise VendorError(
                        f"{provider_key} request failed with status: {raw_status}",
                        provider_key=provider_key,
                        vendor_message=f"Generation failed with status: {raw_status}",
                    )
                if job.poll_count >= self.max_polls:
                    break
                if self._deadline_exceeded(started):
                    job.status = JobStatus.FAILED
                    log.warning("polling.deadline_exceeded", attempts=job.poll_count)
                    raise OrchestrationTimeout(
                        f"{provider_key} request exceeded {self.deadline_seconds}s polling budget",
                        provider_key=provider_key,
                    )
                await self.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            log.info("polling.cancelled", attempts=job.poll_count)
            raise

        job.status = JobStatus.FAILED
        log.warning("polling.timeout", attempts=job.poll_count)
        raise OrchestrationTimeout(
            f"{provider_key} request timed out after {job.poll_count} status checks",
            provider_key=provider_key,
        )

    def _deadline_exceeded(self, started: float) -> bool:
        if self.deadline_seconds is None:
            return False
        elapsed = self.clock() - started
        return elapsed + self.interval_seconds > self.deadline_seconds


__all__ = ["PollingEngine", "map_vendor_status"]
