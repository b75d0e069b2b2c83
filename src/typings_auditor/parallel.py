from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def n_at_a_time(n: int, items: Iterable[T], fn: Callable[[T], R]) -> List[R]:
    """Apply ``fn`` to every item with at most ``n`` calls in flight.

    Results come back in input order. The first exception cancels work that
    has not started yet and is re-raised once running calls finish.
    """

    if n < 1:
        raise ValueError(f"Concurrency must be at least 1, got {n}")

    work = list(items)
    if not work:
        return []

    executor = ThreadPoolExecutor(max_workers=min(n, len(work)))
    try:
        futures = [executor.submit(fn, item) for item in work]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()  # type: ignore[misc]
        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
