"""Category-balanced scenario selection for a practice test."""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from .config import TEST_SIZE, UNCATEGORIZED, make_rng
from .randomizer import randomize_test
from .types import DisplayScenario, Scenario

log = logging.getLogger(__name__)


def available_categories(catalog: Sequence[Scenario]) -> List[str]:
    """Distinct non-empty category labels, in first-seen order."""

    seen: List[str] = []
    for sc in catalog:
        if sc.category and sc.category not in seen:
            seen.append(sc.category)
    return seen


def group_by_category(catalog: Sequence[Scenario]) -> Dict[str, List[Scenario]]:
    groups: Dict[str, List[Scenario]] = {}
    for sc in catalog:
        groups.setdefault(sc.category or UNCATEGORIZED, []).append(sc)
    return groups


def category_distribution(scenarios: Sequence[Scenario]) -> Dict[str, object]:
    total = len(scenarios)
    dist: Dict[str, Dict[str, int]] = {}
    for sc in scenarios:
        row = dist.setdefault(sc.category or UNCATEGORIZED, {"count": 0, "percentage": 0})
        row["count"] += 1
    for row in dist.values():
        row["percentage"] = int(100 * row["count"] / total + 0.5)
    return {"distribution": dist, "total_questions": total, "categories_count": len(dist)}


def _quotas(categories: List[str], count: int, rng: random.Random) -> Dict[str, int]:
    base, remainder = divmod(count, len(categories))
    # remainder goes to a random subset, not always the first categories
    order = rng.sample(categories, len(categories))
    return {cat: base + (1 if pos < remainder else 0) for pos, cat in enumerate(order)}


def select_scenarios(
    catalog: Sequence[Scenario],
    count: int = TEST_SIZE,
    rng: Optional[random.Random] = None,
) -> List[Scenario]:
    """Pick ``min(count, len(catalog))`` scenarios spread as evenly as possible over categories.

    Quotas are ``count // k`` per category with the remainder handed to randomly
    chosen categories.  Categories that cannot fill their quota leave a
    shortfall that is backfilled one scenario at a time from whichever
    category has the fewest picks so far (random among ties).  The returned
    order is shuffled.
    """

    rng = rng or make_rng()
    target = min(max(count, 0), len(catalog))
    if target == 0:
        return []

    if not available_categories(catalog):
        return rng.sample(list(catalog), target)

    # pools hold catalog positions so duplicate scenario texts stay distinct
    pools: Dict[str, List[int]] = {}
    for idx, sc in enumerate(catalog):
        pools.setdefault(sc.category or UNCATEGORIZED, []).append(idx)
    for pool in pools.values():
        rng.shuffle(pool)

    quotas = _quotas(list(pools), target, rng)
    picked: Dict[str, int] = {cat: 0 for cat in pools}
    chosen: List[int] = []
    for cat, quota in quotas.items():
        take = min(quota, len(pools[cat]))
        chosen.extend(pools[cat][:take])
        pools[cat] = pools[cat][take:]
        picked[cat] = take

    shortfall = target - len(chosen)
    if shortfall:
        log.debug("backfilling %d scenario(s); picks so far %s", shortfall, picked)
    while len(chosen) < target:
        open_cats = [cat for cat, pool in pools.items() if pool]
        fewest = min(picked[cat] for cat in open_cats)
        cat = rng.choice([c for c in open_cats if picked[c] == fewest])
        chosen.append(pools[cat].pop())
        picked[cat] += 1

    rng.shuffle(chosen)
    log.debug("selected %d of %d scenarios across %s", len(chosen), len(catalog), picked)
    return [catalog[i] for i in chosen]


def generate_test(
    catalog: Sequence[Scenario],
    count: int = TEST_SIZE,
    rng: Optional[random.Random] = None,
    mix_categories: bool = True,
) -> List[DisplayScenario]:
    rng = rng or make_rng()
    if mix_categories:
        selected = select_scenarios(catalog, count, rng)
    else:
        selected = rng.sample(list(catalog), min(max(count, 0), len(catalog)))
    return randomize_test(selected, rng)
