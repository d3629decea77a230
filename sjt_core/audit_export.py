"""Helpers to export test history in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "id",
    "timestamp",
    "questions_count",
    "earned",
    "possible",
    "percentage",
    "categories",
)

_INT_FIELDS = {"questions_count", "earned", "possible", "percentage"}


def _normalize_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    overall = entry.get("overall_score") or {}
    flat = dict(entry)
    flat.update({k: overall.get(k) for k in ("earned", "possible", "percentage")})
    breakdown = entry.get("category_breakdown") or {}
    flat["categories"] = ";".join(
        f"{name}={(row or {}).get('percentage', 0)}" for name, row in sorted(breakdown.items())
    )
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = flat.get(key)
        if key in _INT_FIELDS:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        else:
            out[key] = "" if val is None else str(val)
    return out


def to_json(entries: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload with one flat row per test."""

    normalized: List[Dict[str, Any]] = [_normalize_entry(e or {}) for e in entries]
    return {"tests": normalized}


def to_csv(entries: Iterable[Dict[str, Any]]) -> str:
    """Render history rows as CSV with a fixed header."""

    normalized = [_normalize_entry(e or {}) for e in entries]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
