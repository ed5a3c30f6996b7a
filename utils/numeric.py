"""
Numeric helpers shared by the scoring modules.

Rounding is half-up (away from -inf at .5), which is what the published
scores have always used; Python's built-in round() is banker's rounding and
would move e.g. 72.5 to 72.
"""

import math
from typing import Iterable, Optional


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty input."""
    items = list(values)
    if not items:
        return None
    return math.fsum(items) / len(items)


def to_float(value, default: float = 0.0) -> float:
    """
    Coerce loosely-typed numeric input ("4.3", None, 12) to float. NaN and
    infinities fall back to the default.
    """
    if value is None or value == "":
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def parses_non_finite(value) -> bool:
    """True for input that parses as a float but is NaN or infinite ("inf", 1e309)."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isfinite(result)
