"""
531 BBB Engine — Pandas Analytics

Works on a log of completed sessions:
    {"date", "lift", "cycle", "week", "sets": [SetDescriptor], "actual_reps": {ordinal: reps}}

- AMRAP performance and e1RM estimation
- PR table and PR history
- Training Max progression / calibration
- BBB supplemental compliance
"""
import pandas as pd
import numpy as np

from src.config_531 import BBB_REPS, BBB_SETS, min_amrap_reps
from src.models_531 import Lift, SetKind
from src.plates import round_to_nearest_loadable
from src.progression_531 import next_training_max


def _tm_by_key(training_maxes: dict | None) -> dict:
    """TM mapping keyed by lift value string ('squat'), matching the DataFrame."""
    if not training_maxes:
        return {}
    return {Lift(k).value: v for k, v in training_maxes.items()}


# ═════════════════════════════════════════════════════════════════════
# DATAFRAME CONSTRUCTION
# ═════════════════════════════════════════════════════════════════════

def workouts_to_dataframe_531(workouts: list[dict]) -> pd.DataFrame:
    """One row per completed set. Sets without actual reps are skipped."""
    rows = []
    for session_num, w in enumerate(workouts, 1):
        actual = w.get("actual_reps", {}) or {}
        lift = Lift(w["lift"]).value
        for s in sorted(w.get("sets", []), key=lambda s: s.ordinal):
            if s.ordinal not in actual:
                continue
            rows.append({
                "date": pd.Timestamp(w["date"]),
                "session_num": session_num,
                "lift": lift,
                "cycle": int(w.get("cycle", 1)),
                "week": int(w.get("week", 1)),
                "set_type": SetKind(s.kind).value,
                "set_number": s.ordinal,
                "weight": float(s.target_weight),
                "target_reps": int(s.target_reps),
                "reps": int(actual[s.ordinal]),
                "is_amrap": bool(s.is_amrap),
            })

    df = pd.DataFrame(rows)
    if df.empty:
        return df

    df = df.sort_values(["date", "session_num", "set_number"]).reset_index(drop=True)
    df["volume"] = df["weight"] * df["reps"]

    # Epley e1RM, kept unrounded (reports round for display). Singles and
    # zero-rep sets count as the weight itself
    df["e1rm"] = np.where(
        df["reps"] > 1, df["weight"] * (1 + df["reps"] / 30), df["weight"],
    )

    return df


def _amraps(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    return df[(df["set_type"] == SetKind.MAIN.value) & df["is_amrap"]].copy()


# ═════════════════════════════════════════════════════════════════════
# ANALYTICS FUNCTIONS
# ═════════════════════════════════════════════════════════════════════

def global_summary_531(df: pd.DataFrame) -> dict:
    """Overall program summary."""
    if df.empty:
        return {}

    amraps = _amraps(df)
    return {
        "total_sessions": df["session_num"].nunique(),
        "first_session": df["date"].min(),
        "last_session": df["date"].max(),
        "total_volume": float(df["volume"].sum()),
        "total_sets": len(df),
        "total_reps": int(df["reps"].sum()),
        "amrap_count": len(amraps),
        "avg_amrap_reps": round(amraps["reps"].mean(), 1) if not amraps.empty else 0,
    }


def amrap_tracking(df: pd.DataFrame, training_maxes: dict | None = None) -> pd.DataFrame:
    """
    All AMRAP sets with e1RM, prescribed minimum and reps over it.

    The AMRAP set is what tells you if the TM is right.
    """
    amraps = _amraps(df)
    if amraps.empty:
        return pd.DataFrame()

    tms = _tm_by_key(training_maxes)
    amraps["min_reps"] = amraps["week"].map(lambda w: min_amrap_reps(w) or 0)
    amraps["reps_over_min"] = amraps["reps"] - amraps["min_reps"]
    tm_col = amraps["lift"].map(lambda l: tms.get(l) or np.nan)
    amraps["pct_of_tm"] = np.where(
        tm_col > 0, (amraps["weight"] / tm_col * 100).round(1), np.nan,
    )

    amraps["e1rm"] = amraps["e1rm"].round(1)
    return amraps[["date", "session_num", "cycle", "week", "lift", "weight", "reps",
                   "e1rm", "min_reps", "reps_over_min", "pct_of_tm"]].reset_index(drop=True)


def pr_table_531(df: pd.DataFrame) -> pd.DataFrame:
    """Best AMRAP per lift by e1RM (earliest set wins a tie)."""
    amraps = _amraps(df)
    if amraps.empty:
        return pd.DataFrame()

    amraps = amraps.sort_values(["date", "session_num"])
    best_idx = amraps.groupby("lift")["e1rm"].idxmax()
    prs = amraps.loc[best_idx, ["lift", "weight", "reps", "e1rm", "date"]].copy()
    prs["e1rm"] = prs["e1rm"].round(1)
    return prs.sort_values("e1rm", ascending=False).reset_index(drop=True)


def pr_history(df: pd.DataFrame, lift) -> pd.DataFrame:
    """AMRAP sets that beat every earlier one for this lift. Ties are not PRs."""
    amraps = _amraps(df)
    if amraps.empty:
        return pd.DataFrame()

    key = Lift(lift).value
    hist = amraps[amraps["lift"] == key].sort_values(["date", "session_num"])
    if hist.empty:
        return pd.DataFrame()

    prev_best = hist["e1rm"].cummax().shift(1)
    is_pr = prev_best.isna() | (hist["e1rm"] > prev_best)
    prs = hist.loc[is_pr, ["date", "cycle", "week", "weight", "reps", "e1rm"]].copy()
    prs["e1rm"] = prs["e1rm"].round(1)
    return prs.reset_index(drop=True)


def tm_progression(df: pd.DataFrame, training_maxes: dict, settings) -> pd.DataFrame:
    """
    Candidate Training Max per cycle and lift from the best AMRAP e1RM.

    candidate = e1RM × TM% rounded to a loadable weight; would_apply only
    when it beats the current TM (TMs never go down).
    """
    amraps = _amraps(df)
    if amraps.empty:
        return pd.DataFrame()

    eq = settings.equipment
    tms = _tm_by_key(training_maxes)

    result = amraps.groupby(["cycle", "lift"]).agg(
        date=("date", "last"),
        amrap_weight=("weight", "last"),
        amrap_reps=("reps", "last"),
        e1rm=("e1rm", "max"),
    ).reset_index()

    result["candidate_tm"] = result["e1rm"].apply(
        lambda e: round_to_nearest_loadable(
            next_training_max(e, settings.training_max_percentage), eq.bar_weight, eq.plates,
        )
    )
    result["current_tm"] = result["lift"].map(lambda l: tms.get(l) or 0)
    result["would_apply"] = result["candidate_tm"] > result["current_tm"]

    return result


def validate_tm(df: pd.DataFrame, training_maxes: dict, settings) -> dict:
    """
    Is each lift's TM calibrated?

    Returns dict per lift:
      - status: "ok" | "too_light" | "too_heavy"
      - avg_reps_over_min: mean AMRAP reps above the prescribed minimum
      - latest_e1rm, current_tm, recommended_tm, tm_delta, n_amraps
    """
    amraps = amrap_tracking(df, training_maxes)
    if amraps.empty:
        return {}

    eq = settings.equipment
    tms = _tm_by_key(training_maxes)

    result = {}
    for lift in amraps["lift"].unique():
        lift_amraps = amraps[amraps["lift"] == lift].sort_values(["date", "session_num"])

        avg_over = lift_amraps["reps_over_min"].mean()
        latest_e1rm = lift_amraps["e1rm"].iloc[-1]
        current_tm = tms.get(lift) or 0
        recommended_tm = round_to_nearest_loadable(
            next_training_max(latest_e1rm, settings.training_max_percentage),
            eq.bar_weight, eq.plates,
        )

        if avg_over > 5:
            status = "too_light"
        elif avg_over < 0:
            status = "too_heavy"
        else:
            status = "ok"

        result[lift] = {
            "status": status,
            "avg_reps_over_min": round(avg_over, 1),
            "latest_e1rm": round(latest_e1rm, 1),
            "current_tm": current_tm,
            "recommended_tm": recommended_tm,
            "tm_delta": recommended_tm - current_tm,
            "n_amraps": len(lift_amraps),
        }

    return result


def cycle_comparison(df: pd.DataFrame) -> pd.DataFrame:
    """
    AMRAP and BBB aggregates per cycle and lift, with e1RM delta
    vs the previous cycle.
    """
    amraps = _amraps(df)
    if amraps.empty:
        return pd.DataFrame()

    amrap_agg = amraps.groupby(["cycle", "lift"]).agg(
        amrap_avg_reps=("reps", "mean"),
        amrap_best_e1rm=("e1rm", "max"),
        n_amraps=("reps", "count"),
    ).reset_index()
    amrap_agg["amrap_avg_reps"] = amrap_agg["amrap_avg_reps"].round(1)

    bbb = df[df["set_type"] == SetKind.ASSISTANCE.value]
    if not bbb.empty:
        bbb_agg = bbb.groupby(["cycle", "lift"]).agg(
            bbb_total_volume=("volume", "sum"),
            bbb_sets=("reps", "count"),
        ).reset_index()
        result = amrap_agg.merge(bbb_agg, on=["cycle", "lift"], how="left").fillna(0)
    else:
        result = amrap_agg
        result["bbb_total_volume"] = 0.0
        result["bbb_sets"] = 0

    result = result.sort_values(["lift", "cycle"])
    result["e1rm_delta"] = result.groupby("lift")["amrap_best_e1rm"].diff()
    result[["amrap_best_e1rm", "e1rm_delta"]] = result[["amrap_best_e1rm", "e1rm_delta"]].round(1)

    return result.sort_values(["cycle", "lift"]).reset_index(drop=True)


def bbb_compliance(df: pd.DataFrame) -> pd.DataFrame:
    """BBB sets done vs the 5×10 target, per session."""
    if df.empty:
        return pd.DataFrame()
    bbb = df[df["set_type"] == SetKind.ASSISTANCE.value]
    if bbb.empty:
        return pd.DataFrame()

    grouped = bbb.groupby(["session_num", "date", "lift"]).agg(
        weight=("weight", "first"),
        n_sets=("reps", "count"),
        total_reps=("reps", "sum"),
        avg_reps=("reps", "mean"),
        min_reps=("reps", "min"),
    ).reset_index()

    grouped["avg_reps"] = grouped["avg_reps"].round(1)
    grouped["sets_ok"] = grouped["n_sets"] >= BBB_SETS
    grouped["reps_ok"] = grouped["avg_reps"] >= BBB_REPS - 1  # allow slight miss

    return grouped
