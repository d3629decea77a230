from __future__ import annotations
from typing import List, Optional
from .config import OPTIONS_PER_QUESTION
from .types import RankEntry


class RankingBuilder:
    """Click-to-rank bookkeeping for one displayed scenario.

    Only the order in which options were picked is stored; an option's rank is
    its position in that order, so un-picking an option closes the gap for
    every later pick.
    """

    def __init__(self, n: int = OPTIONS_PER_QUESTION):
        self.n = n
        self._picks: List[int] = []

    def _check(self, index: int) -> int:
        idx = int(index)
        if not 0 <= idx < self.n:
            raise ValueError(f"option index {index} outside 0..{self.n - 1}")
        return idx

    def toggle(self, index: int) -> Optional[int]:
        """Pick or un-pick an option; returns its new rank, or None if removed."""
        idx = self._check(index)
        if idx in self._picks:
            self._picks.remove(idx)
            return None
        self._picks.append(idx)
        return len(self._picks)

    def rank_of(self, index: int) -> Optional[int]:
        idx = self._check(index)
        return self._picks.index(idx) + 1 if idx in self._picks else None

    def ranking(self) -> List[RankEntry]:
        return [RankEntry(option_index=idx, rank=pos + 1) for pos, idx in enumerate(self._picks)]

    @property
    def is_complete(self) -> bool:
        return len(self._picks) == self.n

    def reset(self) -> None:
        self._picks = []
