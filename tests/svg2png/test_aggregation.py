from pathlib import Path

import pytest

from svg2png.aggregation import BatchAggregator
from svg2png.errors import LoadError
from svg2png.jobs import AllSucceeded, AnyFailed, Failure, Job, Success


def _job(name: str) -> Job:
    return Job(Path(f"{name}.svg"), Path(f"{name}.png"))


def test_all_successes_resolve_with_every_success():
    aggregator = BatchAggregator(2)
    aggregator.settle(Success(_job("a"), Path("a.png"), b"1"))
    aggregator.settle(Success(_job("b"), Path("b.png"), b"2"))

    result = aggregator.result()

    assert isinstance(result, AllSucceeded)
    assert sorted(result.destinations) == [Path("a.png"), Path("b.png")]


def test_any_failure_reports_only_failures():
    aggregator = BatchAggregator(3)
    aggregator.settle(Success(_job("a"), Path("a.png"), b"1"))
    error = LoadError(Path("b.svg"), "fail")
    aggregator.settle(Failure(_job("b"), error))
    aggregator.settle(Success(_job("c"), Path("c.png"), b"3"))

    result = aggregator.result()

    assert isinstance(result, AnyFailed)
    assert result.errors == [error]


def test_result_is_unavailable_until_every_job_settled():
    aggregator = BatchAggregator(2)
    aggregator.settle(Success(_job("a"), Path("a.png"), b"1"))

    assert not aggregator.is_complete
    with pytest.raises(RuntimeError):
        aggregator.result()


def test_result_is_decided_once():
    aggregator = BatchAggregator(1)
    aggregator.settle(Success(_job("a"), Path("a.png"), b"1"))

    first = aggregator.result()

    assert aggregator.result() is first
    with pytest.raises(RuntimeError):
        aggregator.settle(Success(_job("b"), Path("b.png"), b"2"))
    assert aggregator.settled == 1
