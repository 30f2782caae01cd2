"""Bounded-concurrency work pool dispatching conversion jobs across render slots."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Iterable, Optional

from . import logging_manager as log_mgr
from .aggregation import BatchAggregator
from .errors import RenderError
from .jobs import BatchResult, Failure, Job, Outcome

JobRunner = Callable[[Job], Awaitable[Outcome]]


class WorkPool:
    """Run jobs through ``runner`` with at most ``capacity`` in flight.

    Every slot is a worker task that takes the next pending job as soon as its
    previous one settles, so a free slot never waits on unrelated jobs. A
    failing job is recorded and never cancels its siblings.
    """

    def __init__(
        self,
        capacity: int,
        runner: JobRunner,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self.capacity = capacity
        self._runner = runner
        self._logger = logger or log_mgr.get_logger()
        self._pending: Deque[Job] = deque()
        self._active: Dict[int, Job] = {}
        self._lock = asyncio.Lock()
        self._aggregator = BatchAggregator(0)
        self._running = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def settled_count(self) -> int:
        return self._aggregator.settled

    async def run(self, jobs: Iterable[Job]) -> BatchResult:
        """Process ``jobs`` and return the batch result once all of them settled."""

        if self._running:
            raise RuntimeError("WorkPool.run() is already in progress")
        self._running = True
        try:
            self._lock = asyncio.Lock()
            self._pending = deque(jobs)
            self._aggregator = BatchAggregator(len(self._pending))
            slots = min(self.capacity, len(self._pending))
            self._logger.debug(
                "%d files will be processed",
                len(self._pending),
                extra={"event": "pool.start", "capacity": self.capacity, "slots": slots},
            )
            if slots:
                async with asyncio.TaskGroup() as group:
                    for index in range(slots):
                        group.create_task(self._slot(index), name=f"svg2png-slot-{index + 1}")
            result = self._aggregator.result()
            self._logger.debug(
                "Batch settled",
                extra={
                    "event": "pool.complete",
                    "settled": self._aggregator.settled,
                    "failed": len(self._aggregator.failures),
                },
            )
            return result
        finally:
            self._running = False

    async def _acquire(self, slot: int) -> Optional[Job]:
        async with self._lock:
            if not self._pending:
                return None
            job = self._pending.popleft()
            self._active[slot] = job
            return job

    async def _release(self, slot: int, outcome: Outcome) -> None:
        async with self._lock:
            self._active.pop(slot, None)
            self._aggregator.settle(outcome)

    async def _slot(self, slot: int) -> None:
        with log_mgr.log_context(slot=slot + 1):
            while True:
                job = await self._acquire(slot)
                if job is None:
                    break
                outcome = await self._run_job(job)
                await self._release(slot, outcome)

    async def _run_job(self, job: Job) -> Outcome:
        try:
            return await self._runner(job)
        except Exception as exc:
            self._logger.warning(
                "Job runner raised instead of reporting a failure",
                exc_info=True,
                extra={"event": "pool.runner_error", "source": str(job.source)},
            )
            error = RenderError(f"Rendering {job.source} failed: {exc}", source=job.source)
            error.__cause__ = exc
            return Failure(job, error)


__all__ = ["JobRunner", "WorkPool"]
