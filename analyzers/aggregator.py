"""
Multi-Product Aggregator
-------------------------
Side-by-side comparison of two or more product / competitor records:

  - price comparison: min / max / average, range % = (max - min) / min * 100
  - feature matrix: union of declared features (first-seen order) x per-product presence
  - market position: per-product composite score, in input order, plus a ranking
  - recommendations: per product, priced > 1.3x group average (pricing) and
    rated below 4.0 (quality); one instance per product per trigger
  - insights: best / worst by composite score, cheapest / most expensive,
    price outliers

Input:  sequence of CompetitorRecord (or dicts), len >= 2
Output: ProductComparison
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from analyzers.base import Analyzer
from analyzers.competitive import RecordLike, as_record, competitive_score
from analyzers.errors import ValidationError
from analyzers.recommendations import PRICE_SPREAD_RULES, PRODUCT_COMPARISON_RULES
from config.settings import settings
from models.schemas import CompetitorRecord, Recommendation
from utils.numeric import mean, parses_non_finite, round_half_up

logger = logging.getLogger(__name__)


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class PriceComparison:
    min: float
    max: float
    average: float
    difference_pct: float
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_range": {"min": self.min, "max": self.max, "average": self.average},
            "price_difference_pct": self.difference_pct,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class FeatureRow:
    feature: str
    availability: List[Dict[str, Any]]     # [{product, has_feature}]

    def to_dict(self) -> Dict[str, Any]:
        return {"feature": self.feature, "availability": list(self.availability)}


@dataclass
class MarketPositionEntry:
    name: str
    market_share_pct: float
    rating: float
    review_count: int
    competitive_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "market_share_pct": self.market_share_pct,
            "rating": self.rating,
            "review_count": self.review_count,
            "competitive_score": self.competitive_score,
        }


@dataclass
class ComparisonInsights:
    best_product: str
    worst_product: str
    cheapest_product: str
    most_expensive_product: str
    price_outliers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_product": self.best_product,
            "worst_product": self.worst_product,
            "cheapest_product": self.cheapest_product,
            "most_expensive_product": self.most_expensive_product,
            "price_outliers": list(self.price_outliers),
        }


@dataclass
class ProductComparison:
    price_comparison: PriceComparison
    feature_comparison: List[FeatureRow]
    market_position: List[MarketPositionEntry]
    ranking: List[str]
    recommendations: List[Recommendation]
    insights: ComparisonInsights

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_comparison": self.price_comparison.to_dict(),
            "feature_comparison": [f.to_dict() for f in self.feature_comparison],
            "market_position": [m.to_dict() for m in self.market_position],
            "ranking": list(self.ranking),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "insights": self.insights.to_dict(),
        }


# ─── Comparisons ─────────────────────────────────────────────────────────────


def compare_prices(records: Sequence[CompetitorRecord]) -> PriceComparison:
    prices = [r.price for r in records]
    low, high = min(prices), max(prices)
    return PriceComparison(
        min=low,
        max=high,
        average=mean(prices),
        difference_pct=round_half_up((high - low) / low * 100, 1),
        recommendations=PRICE_SPREAD_RULES.evaluate({"min_price": low, "max_price": high}),
    )


def compare_features(records: Sequence[CompetitorRecord]) -> List[FeatureRow]:
    union: List[str] = []
    seen = set()
    for record in records:
        for feature in record.features:
            if feature not in seen:
                seen.add(feature)
                union.append(feature)

    return [
        FeatureRow(
            feature=feature,
            availability=[
                {"product": r.name, "has_feature": feature in r.features}
                for r in records
            ],
        )
        for feature in union
    ]


def compare_market_position(records: Sequence[CompetitorRecord]) -> List[MarketPositionEntry]:
    return [
        MarketPositionEntry(
            name=r.name,
            market_share_pct=r.market_share_pct,
            rating=r.rating,
            review_count=r.review_count,
            competitive_score=competitive_score(r),
        )
        for r in records
    ]


def comparison_recommendations(records: Sequence[CompetitorRecord]) -> List[Recommendation]:
    avg_price = mean(r.price for r in records)
    items = [
        (r.name, {"price": r.price, "avg_price": avg_price, "rating": r.rating})
        for r in records
    ]
    return PRODUCT_COMPARISON_RULES.evaluate_each(items)


def comparison_insights(
    records: Sequence[CompetitorRecord],
    positions: Sequence[MarketPositionEntry],
) -> ComparisonInsights:
    avg_price = mean(r.price for r in records)
    # max()/min() return the first of equal elements, so ties go to input order
    best = max(positions, key=lambda p: p.competitive_score)
    worst = min(positions, key=lambda p: p.competitive_score)
    cheapest = min(records, key=lambda r: r.price)
    priciest = max(records, key=lambda r: r.price)
    return ComparisonInsights(
        best_product=best.name,
        worst_product=worst.name,
        cheapest_product=cheapest.name,
        most_expensive_product=priciest.name,
        price_outliers=[
            r.name for r in records
            if r.price > avg_price * settings.COMPARISON_PRICE_ALERT_RATIO
        ],
    )


def compare_products(products: Optional[Sequence[RecordLike]]) -> ProductComparison:
    if not products or len(products) < 2:
        raise ValidationError("At least 2 products are required for comparison")

    records = [as_record(p, i) for i, p in enumerate(products)]
    for i, (item, record) in enumerate(zip(products, records), 1):
        raw_price = item.price if isinstance(item, CompetitorRecord) else item.get("price")
        if parses_non_finite(raw_price):
            raise ValidationError(f"Product {i}: price must be a finite number")
        if record.price <= 0:
            raise ValidationError(f"Product {i}: price must be greater than 0")

    positions = compare_market_position(records)
    ranking = [
        p.name for p in sorted(positions, key=lambda p: p.competitive_score, reverse=True)
    ]

    return ProductComparison(
        price_comparison=compare_prices(records),
        feature_comparison=compare_features(records),
        market_position=positions,
        ranking=ranking,
        recommendations=comparison_recommendations(records),
        insights=comparison_insights(records, positions),
    )


class ComparisonAnalyzer(Analyzer):
    """
    Multi-product comparison.

    Input:  sequence of CompetitorRecord / dicts
    Output: ProductComparison
    """

    def __init__(self):
        super().__init__(name="ComparisonAnalyzer")

    def run(self, products: Sequence[RecordLike]) -> ProductComparison:
        result = compare_products(products)
        self.logger.info(
            f"Compared {len(products)} products: "
            f"range {result.price_comparison.difference_pct}% "
            f"features={len(result.feature_comparison)} "
            f"recs={len(result.recommendations)}"
        )
        return result
