"""
Split search: find ledger records whose amounts add up to one bank amount.
"""

from decimal import Decimal
from itertools import combinations
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_TOLERANCE = Decimal("0.01")


def find_split(
    target: Decimal,
    candidates: Sequence[T],
    amounts: Sequence[Decimal],
    tolerance: Decimal = DEFAULT_TOLERANCE,
    max_size: int = 3,
) -> Optional[tuple[T, ...]]:
    """
    Return the first subset of ``candidates`` whose amounts sum to ``target``.

    All 2-element subsets are tried before any 3-element subset, each size in
    lexicographic index order. A subset qualifies when
    ``|sum - target| < tolerance``. The search is exhaustive over the given
    candidates, so callers are expected to pre-filter them.

    Args:
        target: Amount to reach (absolute bank amount)
        candidates: Candidate items, in the order they should be tried
        amounts: Amount of each candidate, parallel to ``candidates``
        tolerance: Exclusive absolute tolerance on the sum
        max_size: Largest subset size to try (2 or 3)

    Returns:
        Tuple of candidates forming the split, or None
    """
    if len(candidates) != len(amounts):
        raise ValueError("candidates and amounts must have the same length")

    for size in range(2, max_size + 1):
        if len(candidates) < size:
            break
        for indices in combinations(range(len(candidates)), size):
            total = sum((amounts[i] for i in indices), Decimal("0"))
            if abs(total - target) < tolerance:
                return tuple(candidates[i] for i in indices)

    return None
