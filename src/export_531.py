"""
531 BBB Engine — Markdown Export

Plain-text dump of the program: training maxes, lift order, equipment,
current position, best PR per lift and the completed-workout log
(same log shape as analytics_531).
"""
from datetime import datetime

import pandas as pd

from src.config_531 import CYCLE_WEEKS, SESSIONS_PER_WEEK
from src.cycle_531 import week_description
from src.models_531 import DEFAULT_LIFT_ORDER, CycleState, Lift, ProgramSettings, SetKind
from src.plates import format_weight
from src.progression_531 import best_record
from src.session_531 import is_workout_complete

SECTION_TITLES = [
    (SetKind.WARMUP, "Warmup"),
    (SetKind.MAIN, "Working Sets"),
    (SetKind.ASSISTANCE, "BBB (5×10)"),
]


def _program_overview() -> list[str]:
    lines = ["### Program Overview", "- 4-week cycles with progressive overload"]
    for week, cfg in CYCLE_WEEKS.items():
        pcts = ", ".join(f"{s['pct'] * 100:.0f}%" for s in cfg["sets"])
        lines.append(f"- Week {week}: {cfg['name']} ({pcts} of Training Max)")
    lines += [
        "- The \"+\" sets are AMRAP (As Many Reps As Possible)",
        "- BBB: 5 sets of 10 reps at a lower percentage",
    ]
    return lines


def _set_lines(workout: dict, kind: SetKind) -> list[str]:
    actual = workout.get("actual_reps", {}) or {}
    lines = []
    for s in sorted(workout.get("sets", []), key=lambda s: s.ordinal):
        if s.kind != kind:
            continue
        reps = actual.get(s.ordinal)
        marker = " (AMRAP)" if s.is_amrap else ""
        reps_text = "-" if reps is None else str(reps)
        lines.append(f"  - {format_weight(s.target_weight)} lbs × {reps_text} reps{marker}")
    return lines


def generate_export_text(
    training_maxes: dict,
    settings: ProgramSettings,
    workouts: list[dict],
    records: list | None = None,
    state: CycleState | None = None,
    generated_at: datetime | None = None,
) -> str:
    """
    Markdown export of settings, PRs and history.

    Lifts without a TM are left out, only complete workouts are listed
    (newest first) and PRs are the best e1RM per lift.
    """
    generated_at = generated_at or datetime.now()
    eq = settings.equipment
    lines = [
        "# 531 BBB — Workout Export",
        f"Generated: {generated_at:%Y-%m-%d %H:%M}",
        "",
        "## About This Data",
        "Wendler 5/3/1 with BBB (Boring But Big) assistance work.",
        "",
        *_program_overview(),
        "",
        "## Current Settings",
        "",
        "### Training Maxes",
    ]
    for lift in DEFAULT_LIFT_ORDER:
        tm = training_maxes.get(lift)
        if tm:
            lines.append(f"- {lift.label}: {format_weight(tm)} lbs")

    lines += ["", "### Exercise Order"]
    lines += [f"{i}. {lift.label}" for i, lift in enumerate(settings.lift_order, 1)]

    lines += [
        "",
        "### Equipment",
        f"- Bar Weight: {format_weight(eq.bar_weight)} lbs",
        f"- Available Plates: {', '.join(format_weight(p) for p in eq.plates)} lbs",
        "",
        "### Program Settings",
        f"- BBB Percentage: {settings.bbb_percentage * 100:.0f}%",
        f"- TM Percentage: {settings.training_max_percentage * 100:.0f}%",
    ]

    if state is not None:
        lines += [
            "",
            "### Current Progress",
            f"- Cycle: {state.cycle}",
            f"- Week: {state.week} ({week_description(state.week)})",
            f"- Day: {state.day_slot + 1} of {SESSIONS_PER_WEEK}",
        ]

    if records:
        lines += [
            "",
            "## Personal Records",
            "PRs are calculated using the Epley formula: weight × (1 + reps/30)",
        ]
        for lift in DEFAULT_LIFT_ORDER:
            pr = best_record(records, lift)
            if pr is None:
                continue
            lines += [
                "",
                f"### {lift.label}",
                f"- Best Estimated 1RM: {format_weight(round(pr.estimated_one_rep_max, 1))} lbs",
                f"- Achieved: {format_weight(pr.weight)} lbs × {pr.reps} reps",
                f"- Date: {pr.achieved_at:%Y-%m-%d}",
            ]

    completed = [
        w for w in workouts
        if is_workout_complete(w.get("sets", []), w.get("actual_reps", {}) or {})
    ]
    completed.sort(key=lambda w: pd.Timestamp(w["date"]), reverse=True)

    lines += [
        "",
        "## Workout History",
        f"Total Completed Workouts: {len(completed)}",
        f"Total Workouts (including incomplete): {len(workouts)}",
    ]
    for w in completed:
        label = Lift(w["lift"]).label
        lines += [
            "",
            f"### {pd.Timestamp(w['date']):%Y-%m-%d} - {label}",
            f"Cycle {w.get('cycle', 1)}, Week {w.get('week', 1)}",
        ]
        for kind, title in SECTION_TITLES:
            set_lines = _set_lines(w, kind)
            if set_lines:
                lines += ["", f"{title}:", *set_lines]

    lines += ["", "---", "Exported from the 531 BBB engine", ""]
    return "\n".join(lines)
