"""Distribution of a question count across question types.

Example:
    >>> distribute(10, ["A", "B", "C"])
    {'A': 4, 'B': 3, 'C': 3}
    >>> distribute(3, ["A", "B", "C", "D"])
    {'A': 1, 'B': 1, 'C': 1, 'D': 0}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

TypeDistribution = dict[str, int]


def distribute(total: int, types: Sequence[str]) -> TypeDistribution:
    """Partition ``total`` across ``types`` as evenly as possible.

    Every type gets ``total // len(types)`` questions and the first
    ``total % len(types)`` types, in input order, get one more. Counts
    therefore sum to ``total`` and differ by at most one. When ``total`` is
    smaller than the number of types the trailing types get 0.

    Args:
        total: Number of questions to distribute.
        types: Ordered, distinct type identifiers.

    Returns:
        Mapping from type to count, in input order.

    Raises:
        ValueError: If ``types`` is empty or has duplicates, or ``total`` is negative.
    """
    if total < 0:
        msg = f"total must be non-negative, got {total}"
        raise ValueError(msg)
    if not types:
        msg = "at least one type is required"
        raise ValueError(msg)
    if len(set(types)) != len(types):
        msg = f"types must be distinct, got {list(types)}"
        raise ValueError(msg)

    base, remainder = divmod(total, len(types))
    return {t: base + 1 if i < remainder else base for i, t in enumerate(types)}


def active_types(distribution: TypeDistribution) -> list[str]:
    """Return the types with at least one question, in order."""
    return [t for t, count in distribution.items() if count > 0]
