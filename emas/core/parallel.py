"""
Ordered fan-out over independent sequences.

Encoding and scoring calls share only read-only tables, profiles and
reference sets, so they can run one task per sequence. Results always come
back in input order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(
    func: Callable[[T], R],
    items: Iterable[T],
    max_workers: int = 0,
) -> list[R]:
    """
    Apply ``func`` to every item, optionally on a thread pool.

    Args:
        func: Function of one item; must not mutate shared state
        items: Inputs
        max_workers: Maximum parallel workers (0 = sequential)

    Returns:
        List of results in the same order as ``items``
    """
    items = list(items)
    if max_workers <= 0 or len(items) < 2:
        return [func(item) for item in items]

    logger.debug(f"Fanning out {len(items)} tasks over {max_workers} workers")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))
