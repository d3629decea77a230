from __future__ import annotations

import logging
import random
from typing import List

from .config import DEBUG_SEED, DEBUG_TRACE, make_rng
from .engine import PracticeSession
from .history import HistoryTracker, MemoryStore
from .types import DisplayScenario, RankEntry, Scenario

SMOKE_CATEGORIES = ("Professional Boundaries", "Confidentiality", "Team Working")


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if DEBUG_TRACE:
        logging.getLogger("sjt_core").setLevel(logging.DEBUG)


def _synthetic_catalog() -> List[Scenario]:
    items: List[Scenario] = []
    for category in SMOKE_CATEGORIES:
        for idx in range(4):
            items.append(
                Scenario(
                    id=f"smoke_{category[:4].lower()}_{idx}",
                    scenario=f"{category} scenario #{idx}",
                    options=[f"{category} option {c}" for c in "ABCDE"],
                    ideal_ranking=[1, 2, 3, 4, 5],
                    explanations=[f"Why {c}" for c in "ABCDE"],
                    category=category,
                )
            )
    return items


def _auto_answer(display: DisplayScenario, rng: random.Random, noise: float) -> List[RankEntry]:
    # start from the ideal ranking in display order, then swap neighbours
    ranks = list(display.ideal_ranking)
    if rng.random() < noise:
        a = rng.randrange(len(ranks) - 1)
        i, j = ranks.index(a + 1), ranks.index(a + 2)
        ranks[i], ranks[j] = ranks[j], ranks[i]
    return [RankEntry(option_index=i, rank=r) for i, r in enumerate(ranks)]


def run_smoke_session(runs: int = 12, noise: float = 0.5) -> None:
    _maybe_enable_trace()

    rng = make_rng()
    tracker = HistoryTracker(MemoryStore())
    catalog = _synthetic_catalog()
    logging.info("Starting %d synthetic tests with DEBUG_SEED=%s", runs, DEBUG_SEED)

    for _ in range(runs):
        session = PracticeSession(catalog=catalog, count=9, rng=rng)
        while session.current() is not None:
            session.submit(_auto_answer(session.current(), rng, noise))
            session.advance()
        result = session.finalize()
        tracker.record(result.summary, result.performance)
        for row in result.performance.sorted_categories:
            logging.info("  %s: %d%% over %d", row.category, row.percentage, row.questions_count)

    stats = tracker.stats()
    logging.info(
        "History: tests=%d avg=%d best=%d trend=%s streak=%d/%d",
        stats.total_tests,
        stats.average_score,
        stats.best_score,
        stats.recent_trend,
        stats.streak_info.current,
        stats.streak_info.best,
    )
    logging.info("Category averages: %s", stats.category_averages)


if __name__ == "__main__":  # pragma: no cover
    run_smoke_session()
