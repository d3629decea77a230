# sjt_core/engine.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
import logging, random

from .types import CategoryPerformance, DisplayScenario, OptionScore, RankEntry, Scenario, TestSummary
from .question_bank import load_bank
from .selector import generate_test
from .scoring import score_ranking, total_score
from .category_stats import category_performance
from .validators import validate_ranking
from .config import TEST_SIZE, DEBUG_TRACE, load_config, make_rng


log = logging.getLogger(__name__)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FinalResult:
    summary: TestSummary
    performance: CategoryPerformance


class PracticeSession:
    """One practice test: a fixed set of shuffled scenarios answered in order."""

    def __init__(
        self,
        catalog: Optional[Sequence[Scenario]] = None,
        count: int = TEST_SIZE,
        rng: Optional[random.Random] = None,
        mix_categories: bool = True,
    ):
        self.cfg = load_config()
        self.rng = rng or make_rng(self.cfg.get("SEED"))
        self.catalog: List[Scenario] = list(catalog) if catalog is not None else load_bank()
        self.scenarios: List[DisplayScenario] = generate_test(
            self.catalog, count, self.rng, mix_categories=mix_categories
        )
        self._scores: Dict[int, List[OptionScore]] = {}
        self._index = 0
        if DEBUG_TRACE:
            log.info("session with %d scenarios: %s", len(self.scenarios),
                     [d.source.id or d.scenario[:20] for d in self.scenarios])

    def __len__(self) -> int:
        return len(self.scenarios)

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> Optional[DisplayScenario]:
        if self._index >= len(self.scenarios):
            return None
        return self.scenarios[self._index]

    def submitted(self) -> bool:
        return self._index in self._scores

    def submit(self, ranking: Sequence[RankEntry]) -> List[OptionScore]:
        """Score the current scenario; incomplete or duplicate rankings are rejected."""
        display = self.current()
        if display is None:
            raise ValueError("no scenario left to answer")
        check = validate_ranking(ranking, expected=len(display.options))
        if not check.is_valid:
            issues = ", ".join(k for k, v in check.issues.items() if v) or "invalid ranking"
            raise ValueError(f"ranking rejected: {issues}")
        scores = score_ranking(ranking, display)
        self._scores[self._index] = scores
        log.debug("scenario %d scored %d", self._index, sum(s.score for s in scores))
        return scores

    def advance(self) -> Optional[DisplayScenario]:
        if self._index < len(self.scenarios):
            self._index += 1
        return self.current()

    @property
    def is_complete(self) -> bool:
        return bool(self.scenarios) and len(self._scores) == len(self.scenarios)

    def retry(self) -> None:
        """Start over on the same scenarios in the same display order."""
        self._scores = {}
        self._index = 0

    def finalize(self) -> FinalResult:
        answered = sorted(self._scores)
        scenarios = [self.scenarios[i] for i in answered]
        scores = [self._scores[i] for i in answered]
        if len(answered) < len(self.scenarios):
            log.info("finalizing with %d of %d scenarios answered", len(answered), len(self.scenarios))
        summary = TestSummary(
            scenarios=scenarios,
            option_scores=scores,
            timestamp=utcnow_iso(),
            total=total_score(scores),
        )
        return FinalResult(summary=summary, performance=category_performance(scenarios, scores))
