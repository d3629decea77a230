from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .config import (
    MAX_POINTS_PER_OPTION,
    PERFORMANCE_THRESHOLDS,
    RECOMMEND_GENERAL_BELOW,
    RECOMMEND_PRIORITY_BELOW,
    RECOMMEND_STRENGTH_FROM,
    SCENARIO_PREVIEW_CHARS,
    UNCATEGORIZED,
)
from .scoring import percent
from .types import (
    CategoryPerformance,
    CategoryStats,
    OptionScore,
    QuestionBreakdown,
    TestScore,
)


def preview(text: str, limit: int = SCENARIO_PREVIEW_CHARS) -> str:
    return (text or "")[:limit] + "..."


def category_performance(scenarios: Sequence, option_scores: Sequence[Sequence[OptionScore]]) -> CategoryPerformance:
    """Roll per-question scores up by category.

    ``scenarios`` may hold ``Scenario`` or ``DisplayScenario`` objects; only
    ``category`` and ``scenario`` are read.  Lists of different length give an
    empty result with ``overall`` unset.
    """

    if not scenarios or len(scenarios) != len(option_scores):
        return CategoryPerformance()

    stats: Dict[str, CategoryStats] = {}
    total_earned = 0
    total_possible = 0
    for qidx, (sc, scores) in enumerate(zip(scenarios, option_scores)):
        category = sc.category or UNCATEGORIZED
        earned = sum(s.score for s in scores)
        possible = len(scores) * MAX_POINTS_PER_OPTION

        row = stats.setdefault(category, CategoryStats(category=category))
        row.questions_count += 1
        row.total_earned += earned
        row.total_possible += possible
        row.questions.append(QuestionBreakdown(
            question_index=qidx,
            scenario=preview(sc.scenario),
            earned=earned,
            possible=possible,
            percentage=percent(earned, possible),
        ))
        total_earned += earned
        total_possible += possible

    for row in stats.values():
        row.percentage = percent(row.total_earned, row.total_possible)
        row.average_per_question = round(row.total_earned / row.questions_count, 2)

    # sort is stable, so equal percentages keep first-seen order
    ordered = sorted(stats.values(), key=lambda r: r.percentage, reverse=True)
    overall = TestScore(
        earned=total_earned,
        possible=total_possible,
        percentage=percent(total_earned, total_possible),
        questions_count=len(scenarios),
    )
    return CategoryPerformance(category_stats=stats, sorted_categories=ordered, overall=overall)


@dataclass(frozen=True)
class Highlight:
    category: str
    percentage: int
    questions_count: int


def _highlight(row: CategoryStats) -> Highlight:
    return Highlight(category=row.category, percentage=row.percentage, questions_count=row.questions_count)


def performance_highlights(sorted_categories: Sequence[CategoryStats]) -> Dict[str, Optional[Highlight]]:
    if not sorted_categories:
        return {"strongest": None, "weakest": None}
    strongest = sorted_categories[0]
    weakest = sorted_categories[-1]
    return {
        "strongest": _highlight(strongest) if strongest.percentage > 0 else None,
        "weakest": _highlight(weakest) if weakest.percentage < 100 and len(sorted_categories) > 1 else None,
    }


@dataclass(frozen=True)
class PerformanceLevel:
    label: str
    color: str
    description: str


def performance_level(percentage: float) -> PerformanceLevel:
    p = float(percentage)
    if p >= PERFORMANCE_THRESHOLDS["EXCELLENT"]:
        return PerformanceLevel("Excellent", "green", "Outstanding understanding of this clinical domain")
    if p >= PERFORMANCE_THRESHOLDS["GOOD"]:
        return PerformanceLevel("Good", "green", "Strong grasp of clinical principles in this area")
    if p >= PERFORMANCE_THRESHOLDS["SATISFACTORY"]:
        return PerformanceLevel("Satisfactory", "yellow", "Adequate understanding with room for improvement")
    if p >= PERFORMANCE_THRESHOLDS["NEEDS_IMPROVEMENT"]:
        return PerformanceLevel("Needs Development", "orange", "Further study and practice recommended")
    return PerformanceLevel("Requires Focus", "red", "Significant development needed in this area")


def study_recommendations(sorted_categories: Sequence[CategoryStats]) -> List[Dict[str, Optional[str]]]:
    recs: List[Dict[str, Optional[str]]] = []
    if not sorted_categories:
        return recs

    needs_work = [c for c in sorted_categories if c.percentage < RECOMMEND_PRIORITY_BELOW]
    if needs_work:
        weakest = needs_work[-1]
        recs.append({
            "type": "priority",
            "title": f"Focus on {weakest.category}",
            "description": (
                f"Your score of {weakest.percentage}% suggests this area needs attention. "
                f"Review BPS and HCPC guidelines related to {weakest.category.lower()}."
            ),
            "category": weakest.category,
        })

    strongest = sorted_categories[0]
    if strongest.percentage >= RECOMMEND_STRENGTH_FROM:
        recs.append({
            "type": "strength",
            "title": f"Maintain {strongest.category} Excellence",
            "description": (
                f"Your {strongest.percentage}% score shows strong competence. "
                "Continue applying these principles consistently."
            ),
            "category": strongest.category,
        })

    mean_pct = sum(c.percentage for c in sorted_categories) / len(sorted_categories)
    if mean_pct < RECOMMEND_GENERAL_BELOW:
        recs.append({
            "type": "general",
            "title": "Review Core Ethical Principles",
            "description": (
                "Consider revisiting fundamental BPS Code of Ethics and HCPC Standards "
                "to strengthen your foundation."
            ),
            "category": None,
        })
    return recs
