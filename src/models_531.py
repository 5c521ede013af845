"""
531 BBB Engine — Data Model

Plain value records passed in and out of the engine. Nothing here holds
state between calls: callers own persistence and hand values back in.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


# ── Closed tags ──────────────────────────────────────────────────────

class Lift(str, Enum):
    """The four main lifts of the program."""

    SQUAT = "squat"
    BENCH = "bench"
    DEADLIFT = "deadlift"
    OHP = "ohp"

    @property
    def label(self) -> str:
        return _LIFT_LABELS[self]

    @property
    def short_name(self) -> str:
        return _LIFT_SHORT[self]

    @property
    def day_order(self) -> int:
        return DEFAULT_LIFT_ORDER.index(self)

    @classmethod
    def from_key(cls, key: str) -> "Lift | None":
        """Resolve a stored key ("squat", "ohp", "overheadPress"...) or None."""
        key = (key or "").strip()
        if key == "overheadPress":
            return cls.OHP
        try:
            return cls(key.lower())
        except ValueError:
            return None


_LIFT_LABELS = {
    Lift.SQUAT: "Squat",
    Lift.BENCH: "Bench Press",
    Lift.DEADLIFT: "Deadlift",
    Lift.OHP: "Overhead Press",
}
_LIFT_SHORT = {
    Lift.SQUAT: "SQ",
    Lift.BENCH: "BP",
    Lift.DEADLIFT: "DL",
    Lift.OHP: "OHP",
}

DEFAULT_LIFT_ORDER = (Lift.SQUAT, Lift.BENCH, Lift.DEADLIFT, Lift.OHP)


class SetKind(str, Enum):
    WARMUP = "warmup"
    MAIN = "main"
    ASSISTANCE = "bbb"


# ── Configuration records ────────────────────────────────────────────

@dataclass(frozen=True)
class EquipmentConfig:
    """
    Bar plus plate inventory.

    `plates` is treated as an unordered multiset of plate weights that may
    be loaded any number of times. `max_per_side` optionally caps how many
    of a given plate fit on one side (a real gym's disc count / 2); a dict
    is accepted and stored as sorted (plate, count) pairs.
    """

    bar_weight: float
    plates: tuple = (45.0, 35.0, 25.0, 10.0, 5.0, 2.5)
    max_per_side: tuple | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "plates", tuple(float(p) for p in self.plates))
        if self.max_per_side is not None:
            limits = tuple(sorted((float(p), int(n)) for p, n in dict(self.max_per_side).items()))
            object.__setattr__(self, "max_per_side", limits)
        if self.bar_weight <= 0:
            raise ValueError("bar_weight must be positive")
        if not self.plates:
            raise ValueError("plates must not be empty")
        if any(p <= 0 for p in self.plates):
            raise ValueError("plate weights must be positive")

    @property
    def increment(self) -> float:
        """Smallest loadable jump: the lightest plate on each side."""
        return 2 * min(self.plates)


@dataclass(frozen=True)
class ProgramSettings:
    """Everything the configuration provider hands to the engine."""

    equipment: EquipmentConfig
    bbb_percentage: float = 0.50
    training_max_percentage: float = 0.90
    bbb_enabled: bool = True
    lift_order: tuple = DEFAULT_LIFT_ORDER
    warmup_rest_seconds: int = 60
    main_rest_seconds: int = 180
    bbb_rest_seconds: int = 90

    def __post_init__(self) -> None:
        object.__setattr__(self, "lift_order", tuple(self.lift_order))
        if not 0 < self.bbb_percentage <= 1:
            raise ValueError("bbb_percentage must be in (0, 1]")
        if not 0 < self.training_max_percentage <= 1:
            raise ValueError("training_max_percentage must be in (0, 1]")
        for name in ("warmup_rest_seconds", "main_rest_seconds", "bbb_rest_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


# ── Program state ────────────────────────────────────────────────────

@dataclass(frozen=True)
class CycleState:
    """Position in the program: cycle (1+), week (1-4), day slot (0-3)."""

    cycle: int = 1
    week: int = 1
    day_slot: int = 0

    def __post_init__(self) -> None:
        if self.cycle < 1:
            raise ValueError("cycle must be >= 1")
        if self.week not in (1, 2, 3, 4):
            raise ValueError("week must be 1-4")
        if self.day_slot not in (0, 1, 2, 3):
            raise ValueError("day_slot must be 0-3")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.cycle, self.week, self.day_slot)


@dataclass(frozen=True)
class SetDescriptor:
    ordinal: int
    target_weight: float
    target_reps: int
    kind: SetKind
    is_amrap: bool = False

    @property
    def rep_display(self) -> str:
        return f"{self.target_reps}+" if self.is_amrap else str(self.target_reps)


# ── Progression records ──────────────────────────────────────────────

@dataclass(frozen=True)
class PersonalRecord:
    lift: Lift
    weight: float
    reps: int
    estimated_one_rep_max: float
    achieved_at: date = field(default_factory=date.today)


@dataclass(frozen=True)
class TopSetEvaluation:
    """Outcome of a top (AMRAP) set: e1RM, optional new TM, optional PR."""

    estimated_one_rep_max: float
    candidate_training_max: float | None
    is_new_record: bool
    new_record: PersonalRecord | None = None
