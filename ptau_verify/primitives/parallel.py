"""Fork-join execution of CPU-bound work over index ranges.

Every call spins up its own executor and joins it before returning; no task
outlives the call that issued it. Workers return their own results, which are
handed back to the caller in range order.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")

# --- Type Aliases ---

IndexRange = Tuple[int, int]  # [start, end)
RangeWorker = Callable[[int, int], T]


def default_workers() -> int:
    """Number of workers used when the caller does not specify one."""
    return os.cpu_count() or 1


def split_ranges(total_iterations: int, workers: int) -> List[IndexRange]:
    """Partition [0, total_iterations) into near-equal contiguous ranges.

    Produces min(workers, total_iterations) ranges. The base size is
    total_iterations // workers and the first total_iterations % workers ranges
    take one extra element.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if total_iterations < 0:
        raise ValueError(f"total_iterations must be >= 0, got {total_iterations}")
    if total_iterations == 0:
        return []

    n_tasks = min(workers, total_iterations)
    base, extra = divmod(total_iterations, n_tasks)

    sizes = np.full(n_tasks, base, dtype=np.int64)
    sizes[:extra] += 1
    bounds = np.concatenate(([0], np.cumsum(sizes)))

    return [(int(bounds[i]), int(bounds[i + 1])) for i in range(n_tasks)]


def execute(
    total_iterations: int,
    work: RangeWorker,
    max_workers: Optional[int] = None,
) -> List[T]:
    """Run work(start, end) on each range concurrently and join.

    All ranges run to completion even when one of them fails. If any worker
    raised, the first exception in range order is re-raised after the join.

    Returns:
        The value returned by each worker, ordered by range start.
    """
    workers = max_workers if max_workers is not None else default_workers()
    ranges = split_ranges(total_iterations, workers)
    if not ranges:
        return []

    logger.debug("executing %d iterations over %d ranges", total_iterations, len(ranges))

    if len(ranges) == 1:
        start, end = ranges[0]
        return [work(start, end)]

    with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
        futures = [pool.submit(work, start, end) for start, end in ranges]
        # Leaving the context manager joins every task.

    results = []
    for fut in futures:
        exc = fut.exception()
        if exc is not None:
            raise exc
        results.append(fut.result())
    return results
