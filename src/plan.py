"""
531 BBB Engine — Session Planner CLI
Run: python -m src.plan [--cycle N] [--week W] [--day D] [--all]

Training maxes come from TM_SQUAT / TM_BENCH / TM_DEADLIFT / TM_OHP,
equipment and percentages from the other env vars in config_531.
"""
import sys

from src.config_531 import load_settings, load_training_maxes
from src.cycle_531 import initial_state
from src.models_531 import CycleState, SetKind
from src.planner_531 import full_week_plan, next_session_plan
from src.plates import format_weight

KIND_LABELS = {
    SetKind.WARMUP: "Warmup",
    SetKind.MAIN: "Working",
    SetKind.ASSISTANCE: "BBB",
}


def parse_args(argv: list[str]) -> tuple[CycleState, bool]:
    """--cycle/--week/--day (day slot 0-3) and --all. Raises ValueError on bad input."""
    values = {"--cycle": 1, "--week": 1, "--day": 0}
    show_all = False
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--all":
            show_all = True
        elif arg in values:
            if i + 1 >= len(argv):
                raise ValueError(f"{arg} needs a value")
            try:
                values[arg] = int(argv[i + 1])
            except ValueError:
                raise ValueError(f"{arg} must be an integer, got {argv[i + 1]!r}") from None
            i += 1
        else:
            raise ValueError(f"unknown argument: {arg}")
        i += 1

    state = CycleState(cycle=values["--cycle"], week=values["--week"], day_slot=values["--day"])
    return state, show_all


def print_session_plan(plan: dict) -> None:
    print(f"\n🏋️  {plan['lift_label']} — Cycle {plan['cycle']}, Week {plan['week']} ({plan['week_name']})")
    if not plan["sets"]:
        print(f"   ⚠️  No training max for {plan['lift_label']}, can't build this session")
        return

    print(f"   TM: {format_weight(plan['tm'])}")
    for s in plan["sets"]:
        flag = "  🔥 AMRAP" if s["is_amrap"] else ""
        print(
            f"   {s['ordinal'] + 1:>2}. {KIND_LABELS[s['kind']]:<8}"
            f"{format_weight(s['weight']):>6} × {s['rep_display']:<3}"
            f" | {s['plates_str']}{flag}"
        )


def print_week_plan(plans: list[dict]) -> None:
    for plan in plans:
        print_session_plan(plan)


def run_plan(state: CycleState | None = None, show_all: bool = False, env: dict | None = None) -> dict:
    """Build and print the plan. Returns {state, plans}."""
    state = state or initial_state()
    settings = load_settings(env)
    training_maxes = load_training_maxes(env)

    print("📋 531 BBB — Session Plan")
    print(f"   Bar: {format_weight(settings.equipment.bar_weight)} | "
          f"Plates: {', '.join(format_weight(p) for p in settings.equipment.plates)}")

    if show_all:
        plans = full_week_plan(state, training_maxes, settings)
        print_week_plan(plans)
    else:
        plans = [next_session_plan(state, training_maxes, settings)]
        print_session_plan(plans[0])

    missing = [p["lift_label"] for p in plans if not p["sets"]]
    print(f"\n{'='*50}")
    if missing:
        print(f"⚠️  Missing training max: {', '.join(missing)}")
    else:
        print("✅ Ready to lift.")

    return {"state": state, "plans": plans}


if __name__ == "__main__":
    try:
        state, show_all = parse_args(sys.argv[1:])
        run_plan(state, show_all)
    except ValueError as e:
        print(f"\n❌ Plan FAILED: {e}")
        sys.exit(1)
