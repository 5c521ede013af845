"""
531 BBB Engine — Workout Session

Tracks a day's generated sets against the reps actually done.
`completed` maps set ordinal → actual reps; a set is done once it has an entry.

Progression cadence:
- every completed AMRAP set is checked for a PR
- only week 3 AMRAPs queue a new Training Max; the queue is offered for
  applying once the last session of week 3 is finished
"""
from datetime import date

from src.config_531 import SESSIONS_PER_WEEK
from src.cycle_531 import advance
from src.models_531 import CycleState, Lift, ProgramSettings, SetDescriptor, SetKind
from src.progression_531 import apply_training_max, best_record, evaluate_top_set

PROGRESSION_WEEK = 3


def _ordered(sets: list[SetDescriptor]) -> list[SetDescriptor]:
    return sorted(sets, key=lambda s: s.ordinal)


def amrap_set(sets: list[SetDescriptor]) -> SetDescriptor | None:
    for s in _ordered(sets):
        if s.kind == SetKind.MAIN and s.is_amrap:
            return s
    return None


def next_incomplete_set(sets: list[SetDescriptor], completed: dict) -> SetDescriptor | None:
    for s in _ordered(sets):
        if s.ordinal not in completed:
            return s
    return None


def next_set_after(sets: list[SetDescriptor], completed: dict, ordinal: int) -> SetDescriptor | None:
    """First set still to do after `ordinal` (the 'up next' preview while resting)."""
    for s in _ordered(sets):
        if s.ordinal > ordinal and s.ordinal not in completed:
            return s
    return None


def last_completed_set(sets: list[SetDescriptor], completed: dict) -> SetDescriptor | None:
    done = [s for s in _ordered(sets) if s.ordinal in completed]
    return done[-1] if done else None


def can_undo(sets: list[SetDescriptor], completed: dict, ordinal: int) -> bool:
    """Only the most recently completed set can be undone."""
    last = last_completed_set(sets, completed)
    return last is not None and last.ordinal == ordinal


def rest_seconds(set_descriptor: SetDescriptor, settings: ProgramSettings) -> int:
    if set_descriptor.kind == SetKind.WARMUP:
        return settings.warmup_rest_seconds
    if set_descriptor.kind == SetKind.ASSISTANCE:
        return settings.bbb_rest_seconds
    return settings.main_rest_seconds


def is_workout_complete(sets: list[SetDescriptor], completed: dict) -> bool:
    return bool(sets) and all(s.ordinal in completed for s in sets)


def complete_workout(
    state: CycleState,
    lift: Lift,
    sets: list[SetDescriptor],
    completed: dict,
    training_maxes: dict,
    records: list,
    settings: ProgramSettings,
    pending: dict | None = None,
    completed_on: date | None = None,
) -> dict:
    """
    Close out a finished session.

    Returns {
        next_state, evaluation, new_record,
        pending_training_maxes, ready_to_apply
    }
    """
    if not is_workout_complete(sets, completed):
        raise ValueError("cannot complete a workout with unfinished sets")

    pending = dict(pending or {})
    evaluation = None

    top = amrap_set(sets)
    if top is not None:
        evaluation = evaluate_top_set(
            lift,
            top.target_weight,
            completed[top.ordinal],
            training_maxes.get(lift),
            best_record(records, lift),
            settings.training_max_percentage,
            achieved_at=completed_on,
        )
        if state.week == PROGRESSION_WEEK and evaluation.candidate_training_max is not None:
            pending[lift] = evaluation.candidate_training_max

    ready = (
        state.week == PROGRESSION_WEEK
        and state.day_slot == SESSIONS_PER_WEEK - 1
        and bool(pending)
    )

    return {
        "next_state": advance(state),
        "evaluation": evaluation,
        "new_record": evaluation.new_record if evaluation else None,
        "pending_training_maxes": pending,
        "ready_to_apply": ready,
    }


def apply_pending_training_maxes(training_maxes: dict, pending: dict) -> dict:
    """New TM mapping with each pending value applied only if it is higher."""
    updated = dict(training_maxes)
    for lift, candidate in pending.items():
        updated[lift] = apply_training_max(updated.get(lift), candidate)
    return updated
