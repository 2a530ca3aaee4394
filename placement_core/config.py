from __future__ import annotations
import os, json, pathlib


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


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# stopping / selection
MIN_ITEMS_PER_LEVEL: int = 3
GLOBAL_CAP: int = 12
ESCALATE_RATIO: float = 0.8
TRUNCATE_RATIO: float = 0.4
ADVANCE_RATIO: float = 0.7

# confidence tracker
CORE_WEIGHT: float = 1.5
MISS_PENALTY: float = 0.5

# resolver
LADDER_PASS_PCT: int = 70
LADDER_PRIOR_PCT: int = 80
GAP_PCT: int = 40
STRENGTH_PCT: int = 75
WEAKNESS_PCT: int = 50
UNIT_ADVANCE_PCT: int = 85

PROGRESS_EXPECTED_ITEMS: int = 8
PROGRESS_CAP_PCT: float = 90.0

AUDIT_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "event",
    "item_id",
    "level",
    "skill",
    "correct",
    "delta",
    "confidence_after",
    "ratio",
    "asked_total",
)
# // env overrides for staging/ops; defaults match the production thresholds.
MIN_ITEMS_PER_LEVEL = _env_int("PLACEMENT_MIN_ITEMS_PER_LEVEL", MIN_ITEMS_PER_LEVEL)
GLOBAL_CAP = _env_int("PLACEMENT_GLOBAL_CAP", GLOBAL_CAP)
ESCALATE_RATIO = _env_float("PLACEMENT_ESCALATE_RATIO", ESCALATE_RATIO)
TRUNCATE_RATIO = _env_float("PLACEMENT_TRUNCATE_RATIO", TRUNCATE_RATIO)
ADVANCE_RATIO = _env_float("PLACEMENT_ADVANCE_RATIO", ADVANCE_RATIO)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("PLACEMENT_BANK_PATH"): cfg["PLACEMENT_BANK_PATH"] = e.get("PLACEMENT_BANK_PATH")
    return cfg
