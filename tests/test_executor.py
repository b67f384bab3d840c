from __future__ import annotations

import threading
import time
from typing import List

import pytest

from engine.executor import SequentialExecutor, ThreadedExecutor, make_executor


def test_sequential_executor_preserves_order() -> None:
    executor = SequentialExecutor()
    assert list(executor.run(lambda item: item * 2, [3, 1, 2])) == [(3, 6), (1, 2), (2, 4)]


def test_threaded_executor_yields_in_completion_order() -> None:
    executor = ThreadedExecutor(3)
    delays = {"slow": 0.3, "fast": 0.0}

    def work(name: str) -> str:
        time.sleep(delays[name])
        return threading.current_thread().name

    try:
        results = list(executor.run(work, ["slow", "fast"]))
    finally:
        executor.shutdown()

    assert [item for item, _ in results] == ["fast", "slow"]
    assert all(name.startswith("image_optim") for _, name in results)


def test_threaded_executor_reraises_worker_errors() -> None:
    executor = ThreadedExecutor(2)

    def work(item: int) -> int:
        raise OSError("disk full")

    try:
        with pytest.raises(OSError):
            list(executor.run(work, [1, 2]))
    finally:
        executor.shutdown()


def test_threaded_executor_releases_results_left_behind_by_an_error() -> None:
    executor = ThreadedExecutor(2)
    released: List[str] = []

    def work(item: str) -> str:
        if item == "broken":
            raise OSError("disk full")
        time.sleep(0.2)
        return item

    try:
        with pytest.raises(OSError):
            list(executor.run(work, ["broken", "done"], release=released.append))
    finally:
        executor.shutdown()

    assert released == ["done"]


def test_threaded_executor_releases_results_when_closed_early() -> None:
    executor = ThreadedExecutor(2)
    released: List[str] = []

    def work(item: str) -> str:
        time.sleep(0.3 if item == "slow" else 0.0)
        return item

    try:
        completed = executor.run(work, ["slow", "fast"], release=released.append)
        assert next(completed) == ("fast", "fast")
        completed.close()
    finally:
        executor.shutdown()

    assert released == ["slow"]


def test_make_executor_selects_backend() -> None:
    assert isinstance(make_executor(1), SequentialExecutor)
    threaded = make_executor(4)
    assert isinstance(threaded, ThreadedExecutor)
    threaded.shutdown()
