"""Index permutations used to shuffle option display order.

A permutation ``p`` maps display position to canonical position:
``display[i] = canonical[p[i]]``.  Its inverse maps canonical position back
to display position.
"""
from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

from .config import make_rng

T = TypeVar("T")


def shuffle_indices(n: int, rng: Optional[random.Random] = None) -> List[int]:
    """Fisher-Yates permutation of ``0..n-1``."""

    if n < 0:
        raise ValueError(f"permutation length must be >= 0, got {n}")
    rng = rng or make_rng()
    indices = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randint(0, i)
        indices[i], indices[j] = indices[j], indices[i]
    return indices


def _check_permutation(permutation: Sequence[int]) -> None:
    if sorted(permutation) != list(range(len(permutation))):
        raise ValueError(f"not a permutation of 0..{len(permutation) - 1}: {list(permutation)}")


def apply_permutation(items: Sequence[T], permutation: Sequence[int]) -> List[T]:
    if len(items) != len(permutation):
        raise ValueError(
            f"cannot apply permutation of length {len(permutation)} to {len(items)} items"
        )
    _check_permutation(permutation)
    return [items[p] for p in permutation]


def invert_permutation(permutation: Sequence[int]) -> List[int]:
    _check_permutation(permutation)
    inverse = [0] * len(permutation)
    for display_index, canonical_index in enumerate(permutation):
        inverse[canonical_index] = display_index
    return inverse
