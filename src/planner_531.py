"""
531 BBB Engine — Session Planner

Training Max + week + equipment → ordered list of SetDescriptors:
warmup (not on deload) → 3 main sets → BBB 5×10 (not on deload, if enabled).
Ordinals run 0..n-1 across all three phases with no gaps.
"""
from src.config_531 import (
    BBB_REPS,
    BBB_SETS,
    DELOAD_WEEK,
    SESSIONS_PER_WEEK,
    WARMUP_SETS,
    is_amrap_set,
    week_config,
)
from src.cycle_531 import lift_for_slot, week_description
from src.models_531 import CycleState, EquipmentConfig, ProgramSettings, SetDescriptor, SetKind
from src.plates import describe_load, round_to_nearest_loadable


def _round(weight: float, equipment: EquipmentConfig) -> float:
    return round_to_nearest_loadable(weight, equipment.bar_weight, equipment.plates)


def warmup_sets(training_max: float, equipment: EquipmentConfig) -> list[dict]:
    """40/50/60% × 5/5/3."""
    return [
        {"weight": _round(training_max * s["pct"], equipment), "reps": s["reps"],
         "pct": s["pct"], "is_amrap": False}
        for s in WARMUP_SETS
    ]


def main_sets(training_max: float, week: int, equipment: EquipmentConfig) -> list[dict]:
    """The week's three 531 sets; index 2 is AMRAP on weeks 1-3."""
    return [
        {"weight": _round(training_max * s["pct"], equipment), "reps": s["reps"],
         "pct": s["pct"], "is_amrap": is_amrap_set(week, i)}
        for i, s in enumerate(week_config(week)["sets"])
    ]


def assistance_sets(training_max: float, bbb_percentage: float, equipment: EquipmentConfig) -> list[dict]:
    """BBB 5×10, one rounded weight for all five sets."""
    w = _round(training_max * bbb_percentage, equipment)
    return [
        {"weight": w, "reps": BBB_REPS, "pct": bbb_percentage, "is_amrap": False}
        for _ in range(BBB_SETS)
    ]


def generate_sets(
    training_max: float | None,
    week: int,
    equipment: EquipmentConfig,
    bbb_percentage: float,
    include_assistance: bool = True,
) -> list[SetDescriptor]:
    """
    Full set list for one session.

    No TM (None or 0) → empty list: the caller shows "can't start" instead.
    """
    if not training_max:
        return []

    phases = []
    if week != DELOAD_WEEK:
        phases.append((SetKind.WARMUP, warmup_sets(training_max, equipment)))
    phases.append((SetKind.MAIN, main_sets(training_max, week, equipment)))
    if week != DELOAD_WEEK and include_assistance:
        phases.append((SetKind.ASSISTANCE, assistance_sets(training_max, bbb_percentage, equipment)))

    result = []
    for kind, sets in phases:
        for s in sets:
            result.append(SetDescriptor(
                ordinal=len(result),
                target_weight=s["weight"],
                target_reps=s["reps"],
                kind=kind,
                is_amrap=s["is_amrap"],
            ))
    return result


def next_session_plan(state: CycleState, training_maxes: dict, settings: ProgramSettings) -> dict:
    """
    Everything needed to run the session at `state`.

    Returns {
        cycle, week, day_slot, week_name, is_deload, lift, lift_label, tm,
        sets: [{ordinal, kind, weight, reps, rep_display, is_amrap, plates, plates_str}]
    }
    """
    lift = lift_for_slot(state.day_slot, settings.lift_order)
    tm = training_maxes.get(lift)

    plan = {
        "cycle": state.cycle,
        "week": state.week,
        "day_slot": state.day_slot,
        "week_name": week_description(state.week),
        "is_deload": state.week == DELOAD_WEEK,
        "lift": lift,
        "lift_label": lift.label,
        "tm": tm,
        "sets": [],
    }

    sets = generate_sets(
        tm, state.week, settings.equipment, settings.bbb_percentage,
        include_assistance=settings.bbb_enabled,
    )
    for s in sets:
        load = describe_load(s.target_weight, settings.equipment)
        plan["sets"].append({
            "ordinal": s.ordinal,
            "kind": s.kind,
            "weight": s.target_weight,
            "reps": s.target_reps,
            "rep_display": s.rep_display,
            "is_amrap": s.is_amrap,
            "plates": load["plates"],
            "plates_str": load["plates_str"],
        })

    return plan


def full_week_plan(state: CycleState, training_maxes: dict, settings: ProgramSettings) -> list[dict]:
    """Plans for all 4 day slots of the week `state` is in."""
    return [
        next_session_plan(
            CycleState(cycle=state.cycle, week=state.week, day_slot=slot),
            training_maxes, settings,
        )
        for slot in range(SESSIONS_PER_WEEK)
    ]
