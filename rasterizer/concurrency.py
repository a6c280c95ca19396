from concurrent.futures import FIRST_EXCEPTION, Executor, Future, wait
from typing import Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(pool: Executor, fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
    """
    Run `fn` over every item on `pool` and collect the results in input order.

    Fails fast: the first exception cancels work that has not started yet and
    is re-raised. Tasks already running are left to finish on their own, so
    their side effects stay on disk.
    """
    futures: List[Future] = [pool.submit(fn, item) for item in items]
    if not futures:
        return []

    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    for future in futures:
        if future in done and future.exception() is not None:
            for other in pending:
                other.cancel()
            raise future.exception()

    return [future.result() for future in futures]
