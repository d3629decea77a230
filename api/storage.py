"""JSON-file persistence for per-user test history.

Each user gets one file under ``DATA_DIR/history``.  Writes go through a
temporary file and an atomic replace; read-modify-write cycles from the API
are serialized with a module lock.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
HISTORY_DIR = DATA_ROOT / "history"

_LOCK = threading.RLock()
_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def history_path(user_id: str) -> Path:
    safe = _SAFE_ID.sub("_", user_id).strip(".") or "_"
    return HISTORY_DIR / f"{safe}.json"


class JsonHistoryStore:
    """``HistoryStore`` over a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def for_user(cls, user_id: str) -> "JsonHistoryStore":
        return cls(history_path(user_id))

    def load(self) -> List[Dict[str, Any]]:
        with _LOCK:
            data = _read_json(self.path, [])
        return data if isinstance(data, list) else []

    def save(self, entries: List[Dict[str, Any]]) -> None:
        with _LOCK:
            _write_json(self.path, entries)

    def clear(self) -> None:
        with _LOCK:
            if self.path.exists():
                self.path.unlink()


def locked():
    """Hold the store lock across a load/save pair."""
    return _LOCK
