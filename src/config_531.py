"""
531 BBB Engine — Configuration

Wendler's 5/3/1 Boring But Big program tables and defaults.
Cycle percentages, warmup scheme, equipment and training maxes.
Every default can be overridden from the environment.
"""
import os

from src.models_531 import (
    DEFAULT_LIFT_ORDER,
    EquipmentConfig,
    Lift,
    ProgramSettings,
)

# ── 531 Cycle Structure ──────────────────────────────────────────────
# Cycle = 4 weeks, one session per main lift each week.
#
# Week 1: 5s      (last set AMRAP)
# Week 2: 3s      (last set AMRAP)
# Week 3: 5/3/1   (last set AMRAP) → progression point
# Week 4: Deload  (no warmup, no BBB, no AMRAP)
WEEKS_PER_CYCLE = 4
SESSIONS_PER_WEEK = 4  # one session per main lift
DELOAD_WEEK = 4
AMRAP_SET_INDEX = 2  # third main set

CYCLE_WEEKS = {
    1: {
        "name": "5/5/5+",
        "sets": [
            {"pct": 0.65, "reps": 5},
            {"pct": 0.75, "reps": 5},
            {"pct": 0.85, "reps": 5},  # AMRAP
        ],
    },
    2: {
        "name": "3/3/3+",
        "sets": [
            {"pct": 0.70, "reps": 3},
            {"pct": 0.80, "reps": 3},
            {"pct": 0.90, "reps": 3},  # AMRAP
        ],
    },
    3: {
        "name": "5/3/1+",
        "sets": [
            {"pct": 0.75, "reps": 5},
            {"pct": 0.85, "reps": 3},
            {"pct": 0.95, "reps": 1},  # AMRAP
        ],
    },
    4: {
        "name": "Deload",
        "sets": [
            {"pct": 0.40, "reps": 5},
            {"pct": 0.50, "reps": 5},
            {"pct": 0.60, "reps": 5},
        ],
    },
}

WEEK_LABELS = {week: cfg["name"] for week, cfg in CYCLE_WEEKS.items()}

# Warmup before main sets (skipped on deload)
WARMUP_SETS = [
    {"pct": 0.40, "reps": 5},
    {"pct": 0.50, "reps": 5},
    {"pct": 0.60, "reps": 3},
]

# BBB supplemental: 5×10 at a fixed % of TM
BBB_SETS = 5
BBB_REPS = 10

# ── Defaults (lb, standard gym) ──────────────────────────────────────
DEFAULT_BAR_WEIGHT = 45.0
DEFAULT_PLATES = (45.0, 35.0, 25.0, 10.0, 5.0, 2.5)
DEFAULT_BBB_PERCENTAGE = 0.50
DEFAULT_TM_PERCENTAGE = 0.90  # TM = e1RM × this
DEFAULT_WARMUP_REST = 60
DEFAULT_MAIN_REST = 180
DEFAULT_BBB_REST = 90

# Env var holding each lift's Training Max. Unset = not yet established.
TM_ENV_VARS = {
    Lift.SQUAT: "TM_SQUAT",
    Lift.BENCH: "TM_BENCH",
    Lift.DEADLIFT: "TM_DEADLIFT",
    Lift.OHP: "TM_OHP",
}


# ── ProgramTable lookups ─────────────────────────────────────────────

def week_config(week: int) -> dict:
    """Table for a week. Anything outside 1-4 falls back to week 1."""
    return CYCLE_WEEKS.get(week, CYCLE_WEEKS[1])


def percentages_for_week(week: int) -> list[float]:
    return [s["pct"] for s in week_config(week)["sets"]]


def reps_for_week(week: int) -> list[int]:
    return [s["reps"] for s in week_config(week)["sets"]]


def is_amrap_set(week: int, set_index: int) -> bool:
    """Last main set is AMRAP on weeks 1-3, never on deload."""
    return set_index == AMRAP_SET_INDEX and week != DELOAD_WEEK


def amrap_count(week: int) -> int:
    return sum(is_amrap_set(week, i) for i in range(len(week_config(week)["sets"])))


def min_amrap_reps(week: int) -> int | None:
    """Prescribed minimum for the AMRAP set, None on deload."""
    if amrap_count(week) == 0:
        return None
    return reps_for_week(week)[AMRAP_SET_INDEX]


# ── Environment loading ──────────────────────────────────────────────

def _env_float(env: dict, name: str, default: float | None) -> float | None:
    raw = env.get(name, "")
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(env: dict, name: str, default: int) -> int:
    raw = env.get(name, "")
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(env: dict, name: str, default: bool) -> bool:
    raw = str(env.get(name, "") or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def parse_plates(raw: str) -> tuple[float, ...]:
    """'45,35,25' → (45.0, 35.0, 25.0). Blank entries are ignored."""
    plates = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            plates.append(float(part))
        except ValueError:
            raise ValueError(f"AVAILABLE_PLATES has a non-numeric plate: {part!r}") from None
    return tuple(plates)


def parse_lift_order(raw: str) -> tuple[Lift, ...]:
    """Unknown keys are skipped; an empty result means canonical order."""
    lifts = [Lift.from_key(k) for k in raw.split(",")]
    return tuple(l for l in lifts if l is not None)


def load_settings(env: dict | None = None) -> ProgramSettings:
    """Build ProgramSettings from env vars, falling back to the defaults above."""
    env = os.environ if env is None else env

    plates_raw = env.get("AVAILABLE_PLATES", "")
    plates = parse_plates(plates_raw) if plates_raw else DEFAULT_PLATES
    order_raw = env.get("LIFT_ORDER", "")
    lift_order = parse_lift_order(order_raw) if order_raw else DEFAULT_LIFT_ORDER

    equipment = EquipmentConfig(
        bar_weight=_env_float(env, "BAR_WEIGHT", DEFAULT_BAR_WEIGHT),
        plates=plates,
    )
    return ProgramSettings(
        equipment=equipment,
        bbb_percentage=_env_float(env, "BBB_PERCENTAGE", DEFAULT_BBB_PERCENTAGE),
        training_max_percentage=_env_float(env, "TM_PERCENTAGE", DEFAULT_TM_PERCENTAGE),
        bbb_enabled=_env_bool(env, "BBB_ENABLED", True),
        lift_order=lift_order or DEFAULT_LIFT_ORDER,
        warmup_rest_seconds=_env_int(env, "WARMUP_REST_SECONDS", DEFAULT_WARMUP_REST),
        main_rest_seconds=_env_int(env, "MAIN_REST_SECONDS", DEFAULT_MAIN_REST),
        bbb_rest_seconds=_env_int(env, "BBB_REST_SECONDS", DEFAULT_BBB_REST),
    )


def load_training_maxes(env: dict | None = None) -> dict[Lift, float | None]:
    """Current TM per lift from TM_* env vars. None = not yet established."""
    env = os.environ if env is None else env
    return {lift: _env_float(env, var, None) for lift, var in TM_ENV_VARS.items()}
