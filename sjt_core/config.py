from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_seed(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


OPTIONS_PER_QUESTION: int = 5
MAX_POINTS_PER_OPTION: int = 4
MAX_POINTS_PER_QUESTION: int = OPTIONS_PER_QUESTION * MAX_POINTS_PER_OPTION

# |user_rank - ideal_rank| -> points; anything further apart earns 0
POINT_VALUES: dict[int, int] = {0: 4, 1: 3, 2: 2, 3: 1}

PERFORMANCE_THRESHOLDS: dict[str, int] = {
    "EXCELLENT": 90,
    "GOOD": 80,
    "SATISFACTORY": 70,
    "NEEDS_IMPROVEMENT": 60,
}

TEST_SIZE: int = 10
UNCATEGORIZED: str = "Uncategorized"
SCENARIO_PREVIEW_CHARS: int = 100

HISTORY_CAP: int = 50
STREAK_THRESHOLD: int = 80
TREND_WINDOW: int = 5
TREND_DELTA: int = 5
CATEGORY_TREND_LIMIT: int = 10
CATEGORY_TREND_DELTA: int = 10

RECOMMEND_PRIORITY_BELOW: int = 75
RECOMMEND_STRENGTH_FROM: int = 85
RECOMMEND_GENERAL_BELOW: int = 70

BANK_MIN_PER_CATEGORY: int = 5
BANK_EXPECT_IDS: bool = True

DEBUG_TRACE: bool = False
DEBUG_SEED: int | None = None

# // env overrides for staging/ops; defaults match the published exam format.
TEST_SIZE = _env_int("TEST_SIZE", TEST_SIZE)
HISTORY_CAP = _env_int("HISTORY_CAP", HISTORY_CAP)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
DEBUG_SEED = _env_seed("DEBUG_SEED")


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("SEED"): cfg["SEED"] = _env_seed("SEED")
    if e.get("TEST_SIZE"): cfg["TEST_SIZE"] = TEST_SIZE
    if e.get("DATA_DIR"): cfg["DATA_DIR"] = e.get("DATA_DIR")
    return cfg


def make_rng(seed: int | None = None) -> random.Random:
    """Return a private generator; falls back to DEBUG_SEED, then OS entropy."""

    if seed is None:
        seed = DEBUG_SEED
    return random.Random(seed) if seed is not None else random.Random()
