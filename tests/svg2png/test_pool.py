import asyncio
from collections import Counter
from pathlib import Path

import pytest

from svg2png.errors import RenderError
from svg2png.jobs import AllSucceeded, AnyFailed, Failure, Job, Success
from svg2png.pool import WorkPool


def _jobs(count: int) -> list[Job]:
    return [Job(Path(f"in/{index}.svg"), Path(f"out/{index}.png")) for index in range(count)]


class _Tracker:
    def __init__(self, delays=None, failing=()):
        self.delays = delays or {}
        self.failing = set(failing)
        self.active = 0
        self.peak = 0
        self.runs: Counter[str] = Counter()
        self.finished: list[str] = []

    async def __call__(self, job: Job):
        self.active += 1
        self.peak = max(self.peak, self.active)
        self.runs[job.source.stem] += 1
        try:
            await asyncio.sleep(self.delays.get(job.source.stem, 0.01))
        finally:
            self.active -= 1
            self.finished.append(job.source.stem)
        if job.source.stem in self.failing:
            return Failure(job, RenderError(f"boom {job.source}", source=job.source))
        return Success(job, job.destination, b"data")


@pytest.mark.parametrize("capacity,count", [(1, 5), (3, 10), (4, 4), (20, 6)])
def test_pool_never_exceeds_capacity(capacity, count):
    tracker = _Tracker()
    result = asyncio.run(WorkPool(capacity, tracker).run(_jobs(count)))

    assert isinstance(result, AllSucceeded)
    assert tracker.peak == min(capacity, count)
    assert len(result.successes) == count
    assert sorted(str(path) for path in result.destinations) == sorted(
        str(job.destination) for job in _jobs(count)
    )


def test_every_job_runs_exactly_once():
    tracker = _Tracker()
    asyncio.run(WorkPool(3, tracker).run(_jobs(17)))

    assert set(tracker.runs) == {str(index) for index in range(17)}
    assert all(count == 1 for count in tracker.runs.values())


def test_free_slot_is_refilled_without_waiting_for_slow_job():
    # Job 0 is slow; with two slots the short jobs must all stream through the
    # second slot while job 0 is still running.
    tracker = _Tracker(delays={"0": 0.3, "1": 0.01, "2": 0.01, "3": 0.01})

    result = asyncio.run(WorkPool(2, tracker).run(_jobs(4)))

    assert isinstance(result, AllSucceeded)
    assert tracker.finished[-1] == "0"
    assert tracker.finished[:3] == ["1", "2", "3"]


def test_failures_do_not_cancel_other_jobs():
    tracker = _Tracker(failing={"1", "4"}, delays={"1": 0.001})

    result = asyncio.run(WorkPool(2, tracker).run(_jobs(6)))

    assert isinstance(result, AnyFailed)
    assert sum(tracker.runs.values()) == 6
    assert sorted(failure.job.source.stem for failure in result.failures) == ["1", "4"]
    assert all(isinstance(error, RenderError) for error in result.errors)


def test_runner_exception_becomes_failure():
    async def runner(job: Job):
        await asyncio.sleep(0)
        if job.source.stem == "2":
            raise KeyError("unexpected")
        return Success(job, job.destination, b"ok")

    pool = WorkPool(2, runner)
    result = asyncio.run(pool.run(_jobs(5)))

    assert isinstance(result, AnyFailed)
    assert len(result.failures) == 1
    error = result.failures[0].error
    assert isinstance(error, RenderError)
    assert error.source == Path("in/2.svg")
    assert pool.settled_count == 5
    assert pool.active_count == 0
    assert pool.pending_count == 0


def test_empty_batch_resolves_immediately():
    async def runner(job):  # pragma: no cover - never called
        raise AssertionError("runner should not be called")

    result = asyncio.run(WorkPool(3, runner).run([]))

    assert isinstance(result, AllSucceeded)
    assert result.successes == []


@pytest.mark.parametrize("capacity", [0, -2, True, 1.5, "3"])
def test_capacity_must_be_positive_integer(capacity):
    async def runner(job):  # pragma: no cover - never called
        return Success(job, job.destination, b"")

    with pytest.raises(ValueError):
        WorkPool(capacity, runner)
