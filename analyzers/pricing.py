"""
Price position helpers shared by the performance and competitive analyzers.

The position partition is exhaustive and mutually exclusive:
  price <  reference  ->  competitive
  price == reference  ->  average
  price >  reference  ->  premium
"""

import math
from typing import Iterable, Optional

from analyzers.errors import ValidationError
from models.schemas import POSITION_AVERAGE, POSITION_COMPETITIVE, POSITION_PREMIUM
from utils.numeric import mean, parses_non_finite, to_float


def require_positive_price(price, message: str = "Price is required") -> float:
    if price is None or price == "":
        raise ValidationError(message)
    if parses_non_finite(price):
        raise ValidationError("Price must be a finite number")
    value = to_float(price, default=float("nan"))
    if math.isnan(value):
        raise ValidationError("Price must be a number")
    if value <= 0:
        raise ValidationError("Price must be greater than 0")
    return value


def reference_price(competitor_prices: Iterable[float], fallback: Optional[float] = None) -> float:
    """
    Mean of the competitor prices. With no competitor data the fallback is
    used; with neither, the reference is undefined and the call is rejected.
    """
    prices = list(competitor_prices)
    if any(parses_non_finite(p) for p in prices):
        raise ValidationError("Competitor prices must be finite numbers")
    avg = mean(to_float(p) for p in prices)
    if avg is None:
        if fallback is None:
            raise ValidationError("At least one competitor price is required")
        return fallback
    if avg <= 0:
        raise ValidationError("Competitor prices must average above 0")
    return avg


def classify_price_position(price: float, reference: float) -> str:
    if price < reference:
        return POSITION_COMPETITIVE
    if price > reference:
        return POSITION_PREMIUM
    return POSITION_AVERAGE


def price_difference_pct(price: float, reference: float) -> float:
    """Signed percentage of `price` over `reference`."""
    return (price - reference) / reference * 100
