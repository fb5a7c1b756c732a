"""
Data-parallel fan-out over disjoint index ranges.

Each worker receives a half-open ``[start, end)`` slice and may only write to
the slots it owns, so no locking is needed. The call returns once every worker
has finished, which acts as the barrier between phases of a generation.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple


def split_ranges(size: int, thread_num: int) -> List[Tuple[int, int]]:
    """
    Split ``range(size)`` into at most ``thread_num`` contiguous slices.

    Args:
        size: Number of items
        thread_num: Maximum number of slices

    Returns:
        List of (start, end) pairs covering [0, size) in order
    """
    if size <= 0:
        return []
    chunk = max(1, math.ceil(size / max(1, thread_num)))
    return [(start, min(start + chunk, size)) for start in range(0, size, chunk)]


def parallel_for(size: int, body: Callable[[int, int], None], thread_num: int = 1):
    """
    Run ``body(start, end)`` over disjoint slices of ``range(size)``.

    Exceptions raised by ``body`` propagate to the caller unchanged.
    """
    ranges = split_ranges(size, thread_num)
    if len(ranges) <= 1:
        for start, end in ranges:
            body(start, end)
        return

    with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
        futures = [executor.submit(body, start, end) for start, end in ranges]
        for future in futures:
            future.result()
