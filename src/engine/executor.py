"""Executor backends distributing per-file work."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed, wait
from typing import Callable, Generator, Optional, Protocol, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class Executor(Protocol):
    """Abstract execution backend."""

    def run(
        self,
        fn: Callable[[T], R],
        items: Sequence[T],
        release: Optional[Callable[[R], None]] = None,
    ) -> Generator[Tuple[T, R], None, None]:
        """Apply ``fn`` to each item, yielding ``(item, result)`` as work completes.

        ``release`` receives every result that was computed but never yielded
        because iteration stopped early.
        """

    def shutdown(self) -> None:
        """Tear down resources allocated by the executor."""


class SequentialExecutor:
    """Deterministic executor processing items serially, in input order."""

    def run(
        self,
        fn: Callable[[T], R],
        items: Sequence[T],
        release: Optional[Callable[[R], None]] = None,
    ) -> Generator[Tuple[T, R], None, None]:
        # results are computed on demand, so none is ever left unyielded
        for item in items:
            yield item, fn(item)

    def shutdown(self) -> None:
        return None


class ThreadedExecutor:
    """Thread pool executor yielding results in completion order.

    An exception raised by ``fn`` is re-raised from the iterator when its
    item completes; remaining queued items are cancelled and items already
    running are waited for, so their results can be released.
    """

    def __init__(self, threads: int) -> None:
        self.threads = threads
        self._pool = ThreadPoolExecutor(max_workers=threads, thread_name_prefix="image_optim")

    def run(
        self,
        fn: Callable[[T], R],
        items: Sequence[T],
        release: Optional[Callable[[R], None]] = None,
    ) -> Generator[Tuple[T, R], None, None]:
        futures = {self._pool.submit(fn, item): item for item in items}
        pending = set(futures)
        try:
            for future in as_completed(futures):
                pending.discard(future)
                yield futures[future], future.result()
        finally:
            for future in pending:
                future.cancel()
            if release is not None and pending:
                wait(pending)
                for future in pending:
                    if future.cancelled() or future.exception() is not None:
                        continue
                    release(future.result())

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)


def make_executor(threads: int) -> Executor:
    return ThreadedExecutor(threads) if threads > 1 else SequentialExecutor()


__all__ = ["Executor", "SequentialExecutor", "ThreadedExecutor", "make_executor"]
