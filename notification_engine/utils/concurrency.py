"""Bounded parallel execution helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class TaskResult(Generic[T, R]):
    """Outcome of running one task: either ``value`` or ``error`` is set."""

    item: T
    value: R | None = None
    error: BaseException | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.timed_out


def bounded_map(
    func: Callable[[T], R],
    items: Iterable[T],
    *,
    max_workers: int,
    timeout: float | None = None,
) -> list[TaskResult[T, R]]:
    """Run ``func`` over ``items`` with at most ``max_workers`` concurrent calls.

    Results keep the input order. Exceptions are captured per item instead of
    propagating, so one failing item never aborts the others. ``timeout`` is the
    budget for the whole batch; items still running when it expires are
    reported as timed out and their results are ignored. Items run on the
    calling thread only when there is no timeout to enforce.
    """

    pending: Sequence[T] = list(items)
    if not pending:
        return []

    if timeout is None and (max_workers <= 1 or len(pending) == 1):
        return [_run_inline(func, item) for item in pending]

    workers = max(1, min(max_workers, len(pending)))
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bounded-map")
    try:
        futures = [executor.submit(func, item) for item in pending]
        done, not_done = wait(futures, timeout=timeout)
        results: list[TaskResult[T, R]] = []
        for item, future in zip(pending, futures):
            if future in not_done:
                future.cancel()
                results.append(TaskResult(item=item, timed_out=True))
                continue
            error = future.exception()
            if error is not None:
                results.append(TaskResult(item=item, error=error))
            else:
                results.append(TaskResult(item=item, value=future.result()))
        if not_done:
            logger.warning("%s task(s) did not finish within %ss", len(not_done), timeout)
        return results
    finally:
        # Stuck calls are abandoned rather than awaited.
        executor.shutdown(wait=False, cancel_futures=True)


def _run_inline(func: Callable[[T], R], item: T) -> TaskResult[T, R]:
    try:
        return TaskResult(item=item, value=func(item))
    except Exception as exc:
        return TaskResult(item=item, error=exc)


__all__ = ["TaskResult", "bounded_map"]
