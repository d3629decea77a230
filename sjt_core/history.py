"""Test history persistence and trend statistics.

History is kept most-recent-first and capped at ``HISTORY_CAP`` entries.  The
tracker never lets a storage failure escape into the scoring flow: writes
report ``saved=False`` and unreadable stores read as empty.
"""
from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .category_stats import category_performance, preview
from .config import (
    CATEGORY_TREND_DELTA,
    CATEGORY_TREND_LIMIT,
    HISTORY_CAP,
    STREAK_THRESHOLD,
    TREND_DELTA,
    TREND_WINDOW,
)
from .scoring import percent
from .types import (
    CategoryPerformance,
    HistoryEntry,
    HistoryStats,
    StreakInfo,
    TestSummary,
)

log = logging.getLogger(__name__)


class HistoryStore(Protocol):
    def load(self) -> List[Dict[str, Any]]: ...

    def save(self, entries: List[Dict[str, Any]]) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    """In-process store; keeps a JSON round trip so shapes match a file store."""

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None):
        self._raw = json.dumps(entries or [])

    def load(self) -> List[Dict[str, Any]]:
        return json.loads(self._raw)

    def save(self, entries: List[Dict[str, Any]]) -> None:
        self._raw = json.dumps(entries)

    def clear(self) -> None:
        self._raw = "[]"


@dataclass(frozen=True)
class RecordOutcome:
    entry: HistoryEntry
    saved: bool
    error: Optional[str] = None


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _round(x: float) -> int:
    return int(math.floor(x + 0.5))


def build_entry(summary: TestSummary, perf: Optional[CategoryPerformance] = None) -> HistoryEntry:
    perf = perf or category_performance(summary.scenarios, summary.option_scores)
    breakdown = {
        name: {
            "questions_count": row.questions_count,
            "total_earned": row.total_earned,
            "total_possible": row.total_possible,
            "percentage": row.percentage,
        }
        for name, row in perf.category_stats.items()
    }
    questions = []
    for sc, scores in zip(summary.scenarios, summary.option_scores):
        earned = sum(s.score for s in scores)
        possible = sum(s.max_score for s in scores)
        questions.append({
            "category": sc.category,
            "scenario": preview(sc.scenario),
            "earned": earned,
            "possible": possible,
            "percentage": percent(earned, possible),
        })
    return HistoryEntry(
        id=uuid.uuid4().hex,
        timestamp=summary.timestamp,
        questions_count=len(summary.scenarios),
        overall_score={
            "earned": summary.total.earned,
            "possible": summary.total.possible,
            "percentage": summary.total.percentage,
        },
        category_breakdown=breakdown,
        questions=questions,
    )


def _trend(scores: Sequence[int], window: int = TREND_WINDOW, delta: float = TREND_DELTA) -> str:
    if len(scores) < 2 * window:
        return "stable"
    diff = _mean(scores[:window]) - _mean(scores[window:2 * window])
    if diff > delta:
        return "improving"
    if diff < -delta:
        return "declining"
    return "stable"


def _streaks(scores: Sequence[int], threshold: int = STREAK_THRESHOLD) -> StreakInfo:
    current = 0
    for s in scores:
        if s < threshold:
            break
        current += 1
    best = run = 0
    for s in scores:
        run = run + 1 if s >= threshold else 0
        best = max(best, run)
    return StreakInfo(current=current, best=best)


def compute_stats(history: Sequence[HistoryEntry]) -> HistoryStats:
    """Summary statistics over a most-recent-first history."""

    if not history:
        return HistoryStats()
    scores = [h.percentage for h in history]

    totals: Dict[str, List[int]] = {}
    for h in history:
        for cat, row in h.category_breakdown.items():
            totals.setdefault(cat, []).append(int(row.get("percentage", 0)))

    return HistoryStats(
        total_tests=len(history),
        average_score=_round(_mean(scores)),
        best_score=max(scores),
        recent_trend=_trend(scores),  # type: ignore[arg-type]
        category_averages={cat: _round(_mean(vals)) for cat, vals in totals.items()},
        streak_info=_streaks(scores),
    )


def category_trend(history: Sequence[HistoryEntry], category: str, limit: int = CATEGORY_TREND_LIMIT) -> Dict[str, Any]:
    points = [
        {
            "timestamp": h.timestamp,
            "percentage": int(h.category_breakdown[category].get("percentage", 0)),
            "questions_count": int(h.category_breakdown[category].get("questions_count", 0)),
        }
        for h in history[:limit]
        if category in h.category_breakdown
    ]
    points.reverse()  # chronological
    if len(points) < 2:
        return {"trend": "insufficient-data", "scores": points}

    diff = points[-1]["percentage"] - points[0]["percentage"]
    trend = "stable"
    if diff > CATEGORY_TREND_DELTA:
        trend = "improving"
    elif diff < -CATEGORY_TREND_DELTA:
        trend = "declining"
    return {
        "trend": trend,
        "difference": diff,
        "scores": points,
        "average": _round(_mean([p["percentage"] for p in points])),
    }


def _ts_key(entry: Dict[str, Any]) -> datetime:
    try:
        ts = datetime.fromisoformat(str(entry.get("timestamp", "")))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def merge_histories(imported: List[Dict[str, Any]], existing: List[Dict[str, Any]], cap: int = HISTORY_CAP) -> List[Dict[str, Any]]:
    merged: List[Dict[str, Any]] = []
    seen_ids: set = set()
    seen_ts: set = set()
    for entry in list(imported) + list(existing):
        eid, ts = entry.get("id"), entry.get("timestamp")
        if eid in seen_ids or ts in seen_ts:
            continue
        seen_ids.add(eid)
        seen_ts.add(ts)
        merged.append(entry)
    merged.sort(key=_ts_key, reverse=True)
    return merged[:cap]


class HistoryTracker:
    def __init__(self, store: HistoryStore, cap: int = HISTORY_CAP):
        self.store = store
        self.cap = cap

    def _raw(self) -> List[Dict[str, Any]]:
        raw = self.store.load()
        return list(raw) if isinstance(raw, list) else []

    def history(self) -> List[HistoryEntry]:
        try:
            return [HistoryEntry.from_dict(d) for d in self._raw()]
        except Exception:
            log.warning("could not read test history; treating it as empty", exc_info=True)
            return []

    def record(self, summary: TestSummary, perf: Optional[CategoryPerformance] = None) -> RecordOutcome:
        entry = build_entry(summary, perf)
        try:
            entries = [entry.to_dict()] + self._raw()
            self.store.save(entries[: self.cap])
        except Exception as exc:
            log.warning("could not save test %s to history", entry.id, exc_info=True)
            return RecordOutcome(entry=entry, saved=False, error=str(exc))
        log.info("recorded test %s (%d%%)", entry.id, entry.percentage)
        return RecordOutcome(entry=entry, saved=True)

    def clear(self) -> bool:
        try:
            self.store.clear()
        except Exception:
            log.warning("could not clear test history", exc_info=True)
            return False
        return True

    def stats(self) -> HistoryStats:
        return compute_stats(self.history())

    def category_trend(self, category: str, limit: int = CATEGORY_TREND_LIMIT) -> Dict[str, Any]:
        return category_trend(self.history(), category, limit)

    def export_json(self) -> str:
        return json.dumps([h.to_dict() for h in self.history()], indent=2)

    def import_json(self, payload: str) -> bool:
        try:
            imported = json.loads(payload)
            if not isinstance(imported, list):
                raise ValueError("history import must be a JSON list")
            normalized = [HistoryEntry.from_dict(d).to_dict() for d in imported]
            self.store.save(merge_histories(normalized, self._raw(), self.cap))
        except Exception:
            log.warning("could not import test history", exc_info=True)
            return False
        return True
