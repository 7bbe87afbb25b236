"""
Batching Utilities
==================

Fixed-size batching that keeps track of each item's original position.
"""

from typing import TypeVar

T = TypeVar("T")


def batch_by_count(
    items: list[T],
    max_batch_size: int,
) -> list[list[T]]:
    """
    Split items into batches of fixed size.

    Args:
        items: List of items to batch
        max_batch_size: Maximum items per batch

    Returns:
        List of batches
    """
    if max_batch_size < 1:
        raise ValueError("max_batch_size must be at least 1")
    if not items:
        return []

    batches = []
    for i in range(0, len(items), max_batch_size):
        batches.append(items[i : i + max_batch_size])

    return batches


def indexed_batches(items: list[T], max_batch_size: int) -> list[list[tuple[int, T]]]:
    """Like ``batch_by_count`` but every item is paired with its index in ``items``."""
    return batch_by_count(list(enumerate(items)), max_batch_size)
