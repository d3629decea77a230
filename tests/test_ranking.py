from __future__ import annotations

import pytest

from sjt_core.ranking import RankingBuilder
from sjt_core.types import RankEntry


def test_ranks_follow_pick_order():
    rb = RankingBuilder()
    assert rb.toggle(3) == 1
    assert rb.toggle(0) == 2
    assert rb.rank_of(3) == 1
    assert rb.rank_of(4) is None
    assert rb.ranking() == [RankEntry(3, 1), RankEntry(0, 2)]
    assert not rb.is_complete


def test_unpick_closes_the_gap():
    rb = RankingBuilder()
    for idx in (2, 4, 1):
        rb.toggle(idx)
    assert rb.toggle(4) is None
    assert rb.rank_of(1) == 2
    assert rb.ranking() == [RankEntry(2, 1), RankEntry(1, 2)]


def test_complete_and_reset():
    rb = RankingBuilder()
    for idx in range(5):
        rb.toggle(idx)
    assert rb.is_complete
    rb.reset()
    assert rb.ranking() == []


def test_out_of_range_index_is_rejected():
    with pytest.raises(ValueError):
        RankingBuilder().toggle(5)
    with pytest.raises(ValueError):
        RankingBuilder(n=3).rank_of(-1)
