from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Any

from .config import MAX_POINTS_PER_OPTION, POINT_VALUES, PERFORMANCE_THRESHOLDS
from .randomizer import display_to_canonical
from .types import DisplayScenario, OptionScore, QuestionTotal, RankEntry, TestScore


def percent(earned: float, possible: float) -> int:
    """Rounded percentage, halves rounded up; 0 when nothing was possible."""
    if not possible:
        return 0
    return int(math.floor(100.0 * earned / possible + 0.5))


def option_score(user_rank: int, ideal_rank: int) -> int:
    return POINT_VALUES.get(abs(int(user_rank) - int(ideal_rank)), 0)


def score_canonical(ranking: Iterable[RankEntry], ideal_ranking: Sequence[int]) -> List[OptionScore]:
    """Score a ranking already expressed in canonical option positions.

    Options missing from ``ranking`` count as rank 0.
    """
    by_index: Dict[int, int] = {}
    for r in ranking:
        # first entry wins, matching a lookup over the submitted list
        by_index.setdefault(int(r.option_index), int(r.rank))
    out: List[OptionScore] = []
    for idx, ideal in enumerate(ideal_ranking):
        user = by_index.get(idx, 0)
        out.append(OptionScore(
            option_index=idx,
            user_rank=user,
            ideal_rank=int(ideal),
            difference=abs(user - int(ideal)),
            score=option_score(user, ideal),
            max_score=MAX_POINTS_PER_OPTION,
        ))
    return out


def score_ranking(ranking: Iterable[RankEntry], display: DisplayScenario) -> List[OptionScore]:
    """Score a learner ranking given in display positions."""
    canonical = display_to_canonical(ranking, display.shuffle_map)
    return score_canonical(canonical, display.original_ranking)


def question_total(scores: Sequence[OptionScore]) -> QuestionTotal:
    earned = sum(s.score for s in scores)
    possible = len(scores) * MAX_POINTS_PER_OPTION
    return QuestionTotal(earned=earned, possible=possible, percentage=percent(earned, possible))


def total_score(all_scores: Sequence[Sequence[OptionScore]]) -> TestScore:
    earned = sum(s.score for q in all_scores for s in q)
    possible = sum(len(q) * MAX_POINTS_PER_OPTION for q in all_scores)
    return TestScore(earned=earned, possible=possible,
                     percentage=percent(earned, possible), questions_count=len(all_scores))


@dataclass(frozen=True)
class PerformanceBand:
    label: str
    color: str


def performance_category(percentage: float) -> PerformanceBand:
    p = float(percentage)
    if p >= PERFORMANCE_THRESHOLDS["EXCELLENT"]: return PerformanceBand("Excellent", "green")
    if p >= PERFORMANCE_THRESHOLDS["GOOD"]: return PerformanceBand("Good", "green")
    if p >= PERFORMANCE_THRESHOLDS["SATISFACTORY"]: return PerformanceBand("Satisfactory", "yellow")
    if p >= PERFORMANCE_THRESHOLDS["NEEDS_IMPROVEMENT"]: return PerformanceBand("Needs Improvement", "yellow")
    return PerformanceBand("Poor", "red")


_RANK_LABELS = {
    1: "Most Appropriate Option (#1)",
    2: "Second Most Appropriate Option (#2)",
    3: "Middle Option (#3)",
    4: "Second Least Appropriate Option (#4)",
    5: "Least Appropriate Option (#5)",
}


def rank_label(rank: int) -> str:
    return _RANK_LABELS.get(int(rank), f"Option (#{rank})")


def explanation_mismatch(explanation: str, ideal_rank: int, worst_rank: int = 5) -> Optional[str]:
    text = (explanation or "").lower()
    if "most appropriate" in text and ideal_rank == worst_rank:
        return "Note: There is a mismatch. This IS the least appropriate option despite what the explanation says."
    if "least appropriate" in text and ideal_rank == 1:
        return "Note: There is a mismatch. This IS the most appropriate option despite what the explanation says."
    return None


def feedback_rows(display: DisplayScenario, scores: Sequence[OptionScore]) -> List[Dict[str, Any]]:
    """Per-rank feedback in ideal order (best option first), canonical texts."""
    by_index = {s.option_index: s for s in scores}
    n = len(display.original_ranking)
    rows: List[Dict[str, Any]] = []
    for target in range(1, n + 1):
        idx = display.original_ranking.index(target)
        s = by_index.get(idx)
        explanation = display.original_explanations[idx]
        rows.append({
            "ideal_rank": target,
            "label": rank_label(target),
            "option": display.original_options[idx],
            "explanation": explanation,
            "user_rank": s.user_rank if s else 0,
            "score": s.score if s else 0,
            "max_score": MAX_POINTS_PER_OPTION,
            "display_index": display.original_to_display[idx],
            "mismatch": explanation_mismatch(explanation, target, worst_rank=n),
        })
    return rows
