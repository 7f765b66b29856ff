"""
Bounded-concurrency execution of many calls to the same operation.

Calls are issued in waves: up to `limit` calls run at once on a thread pool,
and the next wave only starts once every call of the current wave is done.

Example:
    >>> from apicseed import concurrent, send_manager
    >>> def args_for(i):
    ...     return [f"/api/orgs/acme/apis", "POST", {"name": f"api-{i}"}]
    >>> results = concurrent(send_manager, args_for, total_calls=100, limit=10)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def concurrent(
    operation: Callable[..., T],
    args_for_index: Callable[[int], Any],
    total_calls: int,
    limit: int | None = None,
) -> list[T]:
    """
    Execute `operation` up to `total_calls` times, at most `limit` at a time.

    For each 1-based index `i`, `args_for_index(i)` computes the call
    arguments: a list or tuple is spread as positional arguments, any other
    value is passed as the single argument, and None skips index `i`.

    Results are returned in ascending index order (skipped indices contribute
    nothing). An exception raised by any call propagates once its wave has
    been joined, and no further wave is started. Wrap `operation` (e.g. with
    `retry`) when individual failures must not abort the batch.

    Args:
        operation: Blocking callable to execute.
        args_for_index: Resolves the arguments of the i-th call (1-indexed).
        total_calls: Number of indices to resolve.
        limit: Maximum calls in flight per wave. Defaults to the
            `http.concurrency_limit` config (25).

    Returns:
        The results of every issued call, in index order.
    """
    assert callable(operation), "operation must be callable."
    assert callable(args_for_index), "args_for_index must be callable."
    assert total_calls is not None, "total_calls can not be None."
    assert total_calls >= 0, "total_calls must be >= 0."

    if limit is None:
        from apicseed._config import SEED
        limit = SEED.config.http.concurrency_limit

    assert limit > 0, "limit must be greater than 0."

    results: list[T] = []
    if total_calls == 0:
        return results

    with ThreadPoolExecutor(max_workers=min(limit, total_calls)) as executor:
        wave: list[Future[T]] = []
        for i in range(1, total_calls + 1):
            args = args_for_index(i)
            if args is None:
                logger.warning(
                    f"Skipping method execution {i}. Argument resolved for method "
                    f"execution {i} is null or undefined."
                )
            else:
                call_args = args if isinstance(args, list | tuple) else (args,)
                wave.append(executor.submit(operation, *call_args))

            if len(wave) == limit or i == total_calls:
                logger.debug(f"Waiting for a wave of {len(wave)} calls (up to index {i}/{total_calls}).")
                try:
                    results.extend(future.result() for future in wave)
                except Exception:
                    for future in wave:
                        future.cancel()
                    raise
                wave = []

    return results
