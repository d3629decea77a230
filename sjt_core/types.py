from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Literal, Any

Trend = Literal["improving", "declining", "stable"]


@dataclass(frozen=True)
class Scenario:
    scenario: str
    options: List[str]
    ideal_ranking: List[int]
    explanations: List[str]
    category: Optional[str] = None
    id: Optional[str] = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Scenario":
        # catalog files use the camelCase key from the authoring tools
        ranking = d.get("ideal_ranking", d.get("idealRanking", []))
        return Scenario(
            scenario=str(d.get("scenario", "")),
            options=list(d.get("options", [])),
            ideal_ranking=[int(r) for r in ranking],
            explanations=list(d.get("explanations", [])),
            category=d.get("category") or None,
            id=(str(d["id"]) if d.get("id") is not None else None),
        )


@dataclass(frozen=True)
class DisplayScenario:
    source: Scenario
    options: List[str]
    ideal_ranking: List[int]
    explanations: List[str]
    shuffle_map: List[int]
    original_to_display: List[int]

    @property
    def original_options(self) -> List[str]:
        return self.source.options

    @property
    def original_ranking(self) -> List[int]:
        return self.source.ideal_ranking

    @property
    def original_explanations(self) -> List[str]:
        return self.source.explanations

    @property
    def scenario(self) -> str:
        return self.source.scenario

    @property
    def category(self) -> Optional[str]:
        return self.source.category


@dataclass(frozen=True)
class RankEntry:
    option_index: int
    rank: int


@dataclass(frozen=True)
class OptionScore:
    option_index: int
    user_rank: int
    ideal_rank: int
    difference: int
    score: int
    max_score: int = 4


@dataclass(frozen=True)
class QuestionTotal:
    earned: int
    possible: int
    percentage: int


@dataclass(frozen=True)
class TestScore:
    __test__ = False
    earned: int
    possible: int
    percentage: int
    questions_count: int = 0


@dataclass
class TestSummary:
    __test__ = False
    scenarios: List[DisplayScenario]
    option_scores: List[List[OptionScore]]
    timestamp: str
    total: TestScore


@dataclass
class QuestionBreakdown:
    question_index: int
    scenario: str
    earned: int
    possible: int
    percentage: int


@dataclass
class CategoryStats:
    category: str
    questions_count: int = 0
    total_earned: int = 0
    total_possible: int = 0
    percentage: int = 0
    average_per_question: float = 0.0
    questions: List[QuestionBreakdown] = field(default_factory=list)


@dataclass
class CategoryPerformance:
    category_stats: Dict[str, CategoryStats] = field(default_factory=dict)
    sorted_categories: List[CategoryStats] = field(default_factory=list)
    overall: Optional[TestScore] = None


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _int_fields(row: Any, keys: tuple) -> Dict[str, int]:
    # stored rows may come from imports; unknown or non-numeric values read as 0
    row = row if isinstance(row, dict) else {}
    out = {k: _as_int(row.get(k)) for k in keys if k in row}
    out.update({k: _as_int(v) for k, v in row.items() if k not in keys and isinstance(v, (int, float))})
    return out


@dataclass
class HistoryEntry:
    """Storage-safe projection of one completed test."""

    id: str
    timestamp: str
    questions_count: int
    overall_score: Dict[str, int]
    category_breakdown: Dict[str, Dict[str, int]] = field(default_factory=dict)
    questions: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return int(self.overall_score.get("percentage", 0))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HistoryEntry":
        breakdown = d.get("category_breakdown") or {}
        return HistoryEntry(
            id=str(d.get("id", "")),
            timestamp=str(d.get("timestamp", "")),
            questions_count=_as_int(d.get("questions_count")),
            overall_score=_int_fields(d.get("overall_score"), ("earned", "possible", "percentage")),
            category_breakdown={
                str(k): _int_fields(v, ("questions_count", "total_earned", "total_possible", "percentage"))
                for k, v in (breakdown.items() if isinstance(breakdown, dict) else [])
            },
            questions=[dict(q) for q in (d.get("questions") or [])],
        )


@dataclass
class StreakInfo:
    current: int = 0
    best: int = 0


@dataclass
class HistoryStats:
    total_tests: int = 0
    average_score: int = 0
    best_score: int = 0
    recent_trend: Trend = "stable"
    category_averages: Dict[str, int] = field(default_factory=dict)
    streak_info: StreakInfo = field(default_factory=StreakInfo)
