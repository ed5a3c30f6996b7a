"""
Performance Scorer
-------------------
Combines conversion, rating, review volume and price position into a single
0-100 score:

  score = min(100, 0.3 * conversion% + 10 * rating + 0.1 * min(reviews, 100) + bonus)
  bonus = 20 competitive | 10 average | 0 premium

With no competitor prices the subject price is its own reference, so the
position degenerates to "average".

Input:  PerformanceInput
Output: PerformanceResult
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from analyzers.base import Analyzer
from analyzers.errors import ValidationError
from analyzers.pricing import (
    classify_price_position,
    price_difference_pct,
    reference_price,
    require_positive_price,
)
from analyzers.recommendations import PERFORMANCE_RULES, RuleSet
from config.settings import settings
from models.schemas import (
    POSITION_AVERAGE,
    POSITION_COMPETITIVE,
    POSITION_PREMIUM,
    PerformanceResult,
    PriceAnalysis,
)
from utils.numeric import clamp, round_half_up, round_int, to_float

logger = logging.getLogger(__name__)


@dataclass
class PerformanceInput:
    price: Any
    views: Any = 0
    sales: Any = 0
    reviews: Sequence[Any] = field(default_factory=list)
    rating: Any = 0.0
    competitor_prices: Sequence[Any] = field(default_factory=list)


def position_bonus(position: str) -> float:
    return {
        POSITION_COMPETITIVE: settings.POSITION_BONUS_COMPETITIVE,
        POSITION_AVERAGE: settings.POSITION_BONUS_AVERAGE,
        POSITION_PREMIUM: settings.POSITION_BONUS_PREMIUM,
    }[position]


def conversion_rate(views: float, sales: float) -> float:
    """Sales per view as a percentage; may exceed 100 when sales > views."""
    return sales / views * 100 if views > 0 else 0.0


def raw_performance_score(
    conversion: float, avg_rating: float, review_count: int, position: str
) -> float:
    return (
        conversion * settings.CONVERSION_WEIGHT
        + avg_rating * settings.RATING_WEIGHT
        + min(review_count, settings.REVIEW_CAP) * settings.REVIEW_WEIGHT
        + position_bonus(position)
    )


def score_performance(
    price: Any,
    views: Any = 0,
    sales: Any = 0,
    reviews: Optional[Sequence[Any]] = None,
    rating: Any = 0.0,
    competitor_prices: Optional[Sequence[Any]] = None,
    rules: RuleSet = PERFORMANCE_RULES,
) -> PerformanceResult:
    price = require_positive_price(price)
    views = to_float(views)
    sales = to_float(sales)
    if views < 0 or sales < 0:
        raise ValidationError("Views and sales must be non-negative")
    avg_rating = to_float(rating)
    if not 0 <= avg_rating <= 5:
        raise ValidationError("Rating must be between 0 and 5")
    review_count = len(reviews or [])

    conversion = conversion_rate(views, sales)
    reference = reference_price(competitor_prices or [], fallback=price)
    position = classify_price_position(price, reference)
    difference = price_difference_pct(price, reference)

    score = round_int(clamp(
        raw_performance_score(conversion, avg_rating, review_count, position), 0, 100
    ))

    metrics: Dict[str, Any] = {
        "conversion_rate": conversion,
        "avg_rating": avg_rating,
        "price_position": position,
        "review_count": review_count,
    }

    return PerformanceResult(
        performance_score=score,
        conversion_rate=round_half_up(conversion, 2),
        avg_rating=avg_rating,
        review_count=review_count,
        price_analysis=PriceAnalysis(
            position=position,
            difference_pct=round_half_up(difference, 2),
            avg_competitor_price=round_half_up(reference, 2),
        ),
        recommendations=rules.evaluate(metrics),
    )


class PerformanceAnalyzer(Analyzer):
    """
    Performance facet.

    Input:  PerformanceInput
    Output: PerformanceResult
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        super().__init__(name="PerformanceAnalyzer")
        self.rules = rules or PERFORMANCE_RULES

    def run(self, payload: PerformanceInput) -> PerformanceResult:
        result = score_performance(
            price=payload.price,
            views=payload.views,
            sales=payload.sales,
            reviews=payload.reviews,
            rating=payload.rating,
            competitor_prices=payload.competitor_prices,
            rules=self.rules,
        )
        self.logger.info(
            f"Scored performance={result.performance_score} "
            f"position={result.price_analysis.position} "
            f"recs={len(result.recommendations)}"
        )
        return result
