"""
531 BBB Engine — Progression

AMRAP performance → estimated 1RM → next Training Max, plus PR detection.
TMs never go down here: a lower computed value is simply not offered.
"""
from datetime import date

from src.config_531 import DEFAULT_TM_PERCENTAGE
from src.models_531 import Lift, PersonalRecord, TopSetEvaluation


def estimated_one_rep_max(weight: float, reps: int) -> float:
    """Epley: weight × (1 + reps/30). A single (or no reps) is the weight itself."""
    if reps <= 0 or reps == 1:
        return weight
    return weight * (1 + reps / 30)


def next_training_max(estimated_1rm: float, tm_percentage: float = DEFAULT_TM_PERCENTAGE) -> float:
    return estimated_1rm * tm_percentage


def make_record(lift: Lift, weight: float, reps: int, achieved_at: date | None = None) -> PersonalRecord:
    return PersonalRecord(
        lift=lift,
        weight=weight,
        reps=reps,
        estimated_one_rep_max=estimated_one_rep_max(weight, reps),
        achieved_at=achieved_at or date.today(),
    )


def best_record(records, lift: Lift) -> PersonalRecord | None:
    """Highest-e1RM record for a lift (earliest wins a tie), or None."""
    best = None
    for r in records:
        if r.lift != lift:
            continue
        if best is None or r.estimated_one_rep_max > best.estimated_one_rep_max:
            best = r
    return best


def evaluate_top_set(
    lift: Lift,
    top_set_weight: float,
    actual_reps: int,
    current_training_max: float | None,
    current_best: PersonalRecord | None,
    tm_percentage: float = DEFAULT_TM_PERCENTAGE,
    achieved_at: date | None = None,
) -> TopSetEvaluation:
    """
    Evaluate the week's AMRAP set.

    - candidate_training_max is only set when it beats the current TM
    - is_new_record needs a strictly higher e1RM than the current best
      (no best yet = record)
    """
    e1rm = estimated_one_rep_max(top_set_weight, actual_reps)

    candidate = next_training_max(e1rm, tm_percentage)
    if current_training_max is None or candidate <= current_training_max:
        candidate = None

    is_record = current_best is None or e1rm > current_best.estimated_one_rep_max
    record = make_record(lift, top_set_weight, actual_reps, achieved_at) if is_record else None

    return TopSetEvaluation(
        estimated_one_rep_max=e1rm,
        candidate_training_max=candidate,
        is_new_record=is_record,
        new_record=record,
    )


def apply_training_max(current: float | None, candidate: float | None) -> float | None:
    """New TM value after offering `candidate`: only ever goes up."""
    if candidate is None:
        return current
    if current is None or candidate > current:
        return candidate
    return current
