"""
531 BBB Engine — Cycle Clock

Tracks (cycle, week, day_slot) through the repeating 4-week × 4-lift
schedule. CycleState is immutable: every transition returns a new one.
"""
from src.config_531 import DELOAD_WEEK, SESSIONS_PER_WEEK, WEEK_LABELS, WEEKS_PER_CYCLE
from src.models_531 import DEFAULT_LIFT_ORDER, CycleState, Lift


def initial_state() -> CycleState:
    return CycleState(cycle=1, week=1, day_slot=0)


def reset(state: CycleState | None = None) -> CycleState:
    """Back to the very start, regardless of where we are."""
    return initial_state()


def advance(state: CycleState) -> CycleState:
    cycle, week, day = state.cycle, state.week, state.day_slot + 1
    if day == SESSIONS_PER_WEEK:
        day = 0
        week += 1
        if week > WEEKS_PER_CYCLE:
            week = 1
            cycle += 1
    return CycleState(cycle=cycle, week=week, day_slot=day)


def rewind(state: CycleState) -> CycleState:
    """
    Step back one session.

    Rewinding from (1, 1, 0) gives (1, 4, 3): the cycle number is floored
    at 1, so this is the one position where advance() does not undo it.
    """
    cycle, week, day = state.cycle, state.week, state.day_slot - 1
    if day < 0:
        day = SESSIONS_PER_WEEK - 1
        week -= 1
        if week < 1:
            week = WEEKS_PER_CYCLE
            cycle = max(1, cycle - 1)
    return CycleState(cycle=cycle, week=week, day_slot=day)


def week_description(week: int) -> str:
    """'5/5/5+', '3/3/3+', '5/3/1+' or 'Deload'."""
    return WEEK_LABELS.get(week, f"Week {week}")


def lift_for_slot(day_slot: int, order=None) -> Lift:
    """Lift trained in a day slot. Empty/None order → squat, bench, deadlift, ohp."""
    lifts = tuple(order) if order else DEFAULT_LIFT_ORDER
    return lifts[day_slot % len(lifts)]


def is_deload(state: CycleState) -> bool:
    return state.week == DELOAD_WEEK


def is_last_day_of_week(state: CycleState) -> bool:
    return state.day_slot == SESSIONS_PER_WEEK - 1


def sessions_completed(state: CycleState) -> int:
    """Sessions done before this position (inverse of cycle_position)."""
    weeks_done = (state.cycle - 1) * WEEKS_PER_CYCLE + (state.week - 1)
    return weeks_done * SESSIONS_PER_WEEK + state.day_slot


def cycle_position(total_sessions: int) -> CycleState:
    """
    Position after N completed sessions.

    Each week = 4 sessions (one per lift), each cycle = 4 weeks.
    Negative counts are treated as 0.
    """
    total_sessions = max(0, total_sessions)
    completed_weeks = total_sessions // SESSIONS_PER_WEEK
    return CycleState(
        cycle=completed_weeks // WEEKS_PER_CYCLE + 1,
        week=completed_weeks % WEEKS_PER_CYCLE + 1,
        day_slot=total_sessions % SESSIONS_PER_WEEK,
    )
