"""Square-footage tier validation and labels."""

import math
from collections.abc import Iterable

MISSING_BOUNDS = "Enter Min and Max (or leave Min blank to auto-fill)."
MAX_BELOW_MIN = "Max must be >= Min."
OVERLAP = "Tier overlaps detected. Adjust Min/Max."


def _as_number(value) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def tiers_are_valid(tiers: Iterable[tuple]) -> bool:
    """Check (min, max) pairs: each max >= min, no two ranges touch or overlap.

    Touching counts as overlap: (1, 100) and (100, 200) is invalid.
    """
    ranges = []
    for low, high in tiers:
        low, high = _as_number(low), _as_number(high)
        if low is None or high is None:
            continue
        if high < low:
            return False
        ranges.append((low, high))

    ranges.sort(key=lambda r: r[0])
    for (_, prev_max), (next_min, _) in zip(ranges, ranges[1:]):
        if next_min <= prev_max:
            return False
    return True


def next_tier_min(existing: Iterable[tuple]) -> int:
    """Auto-fill value for a new tier's min: one above the highest max."""
    maxima = [int(high) for _, high in existing]
    return max(maxima) + 1 if maxima else 1


def tier_label(min_sqft: int, max_sqft: int) -> str:
    if min_sqft <= 1:
        return f"Up to {max_sqft:,} SQ.FT"
    return f"{min_sqft:,} - {max_sqft:,} SQ.FT"
