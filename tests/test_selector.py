from __future__ import annotations

import random
from collections import Counter

import pytest

from sjt_core.selector import (
    available_categories,
    category_distribution,
    generate_test,
    group_by_category,
    select_scenarios,
)

from tests.conftest import build_synthetic_catalog


def _counts(chosen) -> Counter:
    return Counter(sc.category for sc in chosen)


@pytest.mark.parametrize("seed", range(20))
def test_even_catalog_splits_evenly(seed):
    catalog = build_synthetic_catalog({"A": 4, "B": 4, "C": 4})
    chosen = select_scenarios(catalog, 9, random.Random(seed))
    assert _counts(chosen) == {"A": 3, "B": 3, "C": 3}


@pytest.mark.parametrize("seed", range(20))
def test_small_category_is_exhausted_and_backfilled_from_the_rest(seed):
    catalog = build_synthetic_catalog({"A": 4, "B": 4, "C": 1})
    chosen = select_scenarios(catalog, 9, random.Random(seed))
    assert _counts(chosen) == {"A": 4, "B": 4, "C": 1}


def test_backfill_prefers_least_picked_category():
    # quotas 2/2/2, C only has 1 -> the spare pick goes to A or B, never both twice
    catalog = build_synthetic_catalog({"A": 5, "B": 5, "C": 1})
    for seed in range(30):
        counts = _counts(select_scenarios(catalog, 6, random.Random(seed)))
        assert counts["C"] == 1
        assert sorted([counts["A"], counts["B"]]) == [2, 3]


def test_remainder_goes_to_varying_categories():
    catalog = build_synthetic_catalog({"A": 5, "B": 5, "C": 5})
    winners = set()
    for seed in range(40):
        counts = _counts(select_scenarios(catalog, 4, random.Random(seed)))
        assert sorted(counts.values()) == [1, 1, 2]
        winners.add(counts.most_common(1)[0][0])
    assert winners == {"A", "B", "C"}


def test_no_scenario_is_picked_twice(synthetic_catalog):
    chosen = select_scenarios(synthetic_catalog, 10, random.Random(4))
    assert len({id(sc) for sc in chosen}) == 10


def test_count_larger_than_catalog_returns_whole_catalog(synthetic_catalog):
    chosen = select_scenarios(synthetic_catalog, 50, random.Random(2))
    assert len(chosen) == len(synthetic_catalog)
    assert {id(sc) for sc in chosen} == {id(sc) for sc in synthetic_catalog}


def test_order_is_shuffled(synthetic_catalog):
    orders = {tuple(sc.id for sc in select_scenarios(synthetic_catalog, 12, random.Random(s))) for s in range(5)}
    assert len(orders) > 1


def test_empty_catalog_and_zero_count():
    assert select_scenarios([], 10, random.Random(0)) == []
    assert select_scenarios(build_synthetic_catalog(), 0, random.Random(0)) == []


def test_uncategorized_catalog_falls_back_to_uniform_sampling():
    catalog = build_synthetic_catalog({None: 8})
    chosen = select_scenarios(catalog, 5, random.Random(11))
    assert len(chosen) == 5
    assert len({sc.id for sc in chosen}) == 5


def test_uncategorized_scenarios_form_their_own_bucket_when_mixed():
    catalog = build_synthetic_catalog({"A": 3, None: 3})
    chosen = select_scenarios(catalog, 4, random.Random(0))
    assert Counter(sc.category for sc in chosen) == {"A": 2, None: 2}


def test_category_helpers():
    catalog = build_synthetic_catalog({"A": 3, "B": 1, None: 1})
    assert available_categories(catalog) == ["A", "B"]
    groups = group_by_category(catalog)
    assert {k: len(v) for k, v in groups.items()} == {"A": 3, "B": 1, "Uncategorized": 1}

    dist = category_distribution(catalog)
    assert dist["total_questions"] == 5
    assert dist["categories_count"] == 3
    assert dist["distribution"]["A"] == {"count": 3, "percentage": 60}


def test_generate_test_returns_display_scenarios(synthetic_catalog):
    shown = generate_test(synthetic_catalog, 6, random.Random(9))
    assert len(shown) == 6
    assert all(sorted(d.shuffle_map) == [0, 1, 2, 3, 4] for d in shown)

    plain = generate_test(synthetic_catalog, 6, random.Random(9), mix_categories=False)
    assert len(plain) == 6
