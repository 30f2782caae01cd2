"""Collect per-job outcomes and decide the batch result."""
from __future__ import annotations

from .jobs import AllSucceeded, AnyFailed, BatchResult, Failure, Outcome, Success


class BatchAggregator:
    """Accumulate outcomes for a fixed number of jobs.

    The batch result is available only once every expected job has settled:
    all successes when nothing failed, otherwise the failures alone.
    """

    def __init__(self, total: int) -> None:
        if total < 0:
            raise ValueError("total must not be negative")
        self.total = total
        self._successes: list[Success] = []
        self._failures: list[Failure] = []
        self._result: BatchResult | None = None

    @property
    def settled(self) -> int:
        return len(self._successes) + len(self._failures)

    @property
    def is_complete(self) -> bool:
        return self.settled == self.total

    @property
    def failures(self) -> list[Failure]:
        return list(self._failures)

    @property
    def successes(self) -> list[Success]:
        return list(self._successes)

    def settle(self, outcome: Outcome) -> None:
        if self.is_complete:
            raise RuntimeError("All jobs of this batch have already settled")
        if isinstance(outcome, Success):
            self._successes.append(outcome)
        else:
            self._failures.append(outcome)

    def result(self) -> BatchResult:
        if not self.is_complete:
            raise RuntimeError(
                f"Batch is not settled yet ({self.settled} of {self.total} jobs)"
            )
        if self._result is None:
            if self._failures:
                self._result = AnyFailed(list(self._failures))
            else:
                self._result = AllSucceeded(list(self._successes))
        return self._result


__all__ = ["BatchAggregator"]
