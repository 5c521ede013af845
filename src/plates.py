"""
531 BBB Engine — Plate Math

Two separate rounding rules live here and they can disagree:
- plates_per_side() loads greedily and drops whatever it cannot match
  (what goes on the bar).
- round_to_nearest_loadable() snaps to the nearest multiple of the
  smallest increment (what every prescribed set weight goes through).
"""
import math

EMPTY_BAR = "empty bar"

# Float slack when comparing plate weights (2.5 + 2.5 + ... drift)
_EPS = 1e-9


def _check_plates(available_plates) -> list[float]:
    plates = [float(p) for p in available_plates]
    if not plates:
        raise ValueError("available_plates must not be empty")
    if any(p <= 0 for p in plates):
        raise ValueError("plate weights must be positive")
    return plates


def plates_per_side(
    target_weight: float,
    bar_weight: float,
    available_plates,
    max_per_side: dict | None = None,
) -> list[float]:
    """
    Greedy plate selection for ONE side of the bar, heaviest first.

    Plates repeat as often as needed unless `max_per_side` caps a weight.
    Any remainder smaller than the lightest usable plate is dropped.
    """
    plates = _check_plates(available_plates)
    per_side = max(0.0, (target_weight - bar_weight) / 2)
    if per_side <= 0:
        return []

    loaded = []
    remaining = per_side
    for plate in sorted(set(plates), reverse=True):
        limit = max_per_side.get(plate) if max_per_side else None
        used = 0
        while remaining >= plate - _EPS and (limit is None or used < limit):
            loaded.append(plate)
            remaining -= plate
            used += 1
    return loaded


def round_half_away(value: float) -> float:
    """Round to the nearest integer, .5 going away from zero (not banker's)."""
    return math.copysign(math.floor(abs(value) + 0.5), value)


def round_to_nearest_loadable(weight: float, bar_weight: float, available_plates) -> float:
    """
    Nearest weight in steps of 2 × lightest plate above the bar.

    138 with a 45 bar and 2.5s → 140; 132 → 130. Never below the bar.
    """
    plates = _check_plates(available_plates)
    increment = 2 * min(plates)
    # 122.49999999999999 (175 × 0.70) is a tie, not a round-down
    steps = round_half_away(round((weight - bar_weight) / increment, 9))
    return max(bar_weight, bar_weight + steps * increment)


def loaded_weight(plates: list[float], bar_weight: float) -> float:
    """Total on the bar for a per-side plate list."""
    return bar_weight + 2 * sum(plates)


def format_weight(weight: float) -> str:
    """135.0 → '135', 2.5 → '2.5'."""
    if float(weight).is_integer():
        return f"{weight:.0f}"
    return f"{weight:.1f}"


def format_plate_stack(plates: list[float]) -> str:
    """[45, 45, 25, 10, 10] → '45×2 + 25 + 10×2'."""
    if not plates:
        return EMPTY_BAR

    groups = []  # [plate, count], consecutive runs only
    for p in plates:
        if groups and groups[-1][0] == p:
            groups[-1][1] += 1
        else:
            groups.append([p, 1])

    parts = []
    for plate, count in groups:
        display = format_weight(plate)
        parts.append(f"{display}×{count}" if count > 1 else display)
    return " + ".join(parts)


def describe_load(weight: float, equipment) -> dict:
    """Plate breakdown of a target weight for display: {weight, plates, plates_str, loaded}."""
    limits = dict(equipment.max_per_side) if equipment.max_per_side else None
    plates = plates_per_side(weight, equipment.bar_weight, equipment.plates, limits)
    return {
        "weight": weight,
        "plates": plates,
        "plates_str": format_plate_stack(plates),
        "loaded": loaded_weight(plates, equipment.bar_weight),
    }
