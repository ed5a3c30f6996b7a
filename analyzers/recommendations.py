"""
Recommendation Generator
-------------------------
A stateless rule table. Each rule is a predicate over a metrics bundle plus a
fixed (type, priority, suggestion, impact) advice record:

  rule.applies(metrics)  ->  rule.build()  ->  Recommendation

Rules are evaluated independently, every matching rule is emitted once, and
output order equals declaration order. Extend a table by appending rules.

Tables:
  PERFORMANCE_RULES             conversion / rating / price position / reviews
  COMPETITIVE_RULES             price vs. competitor average, strong competitors
  HAZARD_RULES                  per-category hazard scores
  HAZARD_CATEGORY_RULES         product-category advice (electronics, cosmetics)
  HAZARD_COMPARISON_RULES       group-level hazard advice
  PRICE_SPREAD_RULES            group-level price spread
  PRODUCT_COMPARISON_RULES      per-product advice inside a comparison
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from config.settings import settings
from models.schemas import Recommendation, POSITION_PREMIUM

logger = logging.getLogger(__name__)

Metrics = Mapping[str, Any]
Predicate = Callable[[Metrics], bool]


@dataclass(frozen=True)
class RecommendationRule:
    name: str
    predicate: Predicate
    type: str
    priority: str
    suggestion: str
    impact: Optional[str] = None
    title: Optional[str] = None

    def applies(self, metrics: Metrics) -> bool:
        try:
            return bool(self.predicate(metrics))
        except (KeyError, TypeError) as e:
            logger.warning(f"Rule '{self.name}' skipped, metric unavailable: {e!r}")
            return False

    def build(self, product: Optional[str] = None) -> Recommendation:
        return Recommendation(
            type=self.type,
            priority=self.priority,
            suggestion=self.suggestion,
            impact=self.impact,
            title=self.title,
            product=product,
        )


class RuleSet:
    """An ordered, inspectable collection of recommendation rules."""

    def __init__(self, name: str, rules: Sequence[RecommendationRule]):
        self.name = name
        self.rules: Tuple[RecommendationRule, ...] = tuple(rules)
        names = [r.name for r in self.rules]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate rule names in rule set '{name}'")

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, rule_name: str) -> RecommendationRule:
        for rule in self.rules:
            if rule.name == rule_name:
                return rule
        raise KeyError(rule_name)

    def evaluate(self, metrics: Metrics, product: Optional[str] = None) -> List[Recommendation]:
        matched = [rule.build(product) for rule in self.rules if rule.applies(metrics)]
        logger.debug(f"[{self.name}] {len(matched)}/{len(self.rules)} rules matched")
        return matched

    def evaluate_each(self, items: Sequence[Tuple[str, Metrics]]) -> List[Recommendation]:
        """
        Evaluate per product: rule-major order, so all products flagged by the
        first rule come before any product flagged by the second.
        """
        out: List[Recommendation] = []
        for rule in self.rules:
            for product, metrics in items:
                if rule.applies(metrics):
                    out.append(rule.build(product))
        return out

    def extended(self, *rules: RecommendationRule) -> "RuleSet":
        return RuleSet(self.name, self.rules + tuple(rules))


# ─── Performance ─────────────────────────────────────────────────────────────


PERFORMANCE_RULES = RuleSet("performance", [
    RecommendationRule(
        name="low_conversion",
        predicate=lambda m: m["conversion_rate"] < settings.LOW_CONVERSION_RATE,
        type="conversion",
        priority="high",
        suggestion="Improve product presentation and call-to-action elements",
        impact="Increase conversion rate by 20-30%",
    ),
    RecommendationRule(
        name="low_rating",
        predicate=lambda m: m["avg_rating"] < settings.MIN_HEALTHY_RATING,
        type="quality",
        priority="high",
        suggestion="Address customer feedback and improve product quality",
        impact="Boost customer satisfaction and ratings",
    ),
    RecommendationRule(
        name="premium_low_conversion",
        predicate=lambda m: (
            m["price_position"] == POSITION_PREMIUM
            and m["conversion_rate"] < settings.PREMIUM_CONVERSION_RATE
        ),
        type="pricing",
        priority="medium",
        suggestion="Consider competitive pricing strategy or value proposition",
        impact="Improve market competitiveness",
    ),
    RecommendationRule(
        name="few_reviews",
        predicate=lambda m: m["review_count"] < settings.MIN_REVIEW_COUNT,
        type="engagement",
        priority="medium",
        suggestion="Encourage customer reviews and feedback",
        impact="Build social proof and trust",
    ),
])


# ─── Competitive position ────────────────────────────────────────────────────


COMPETITIVE_RULES = RuleSet("competitive", [
    RecommendationRule(
        name="overpriced_vs_competitors",
        predicate=lambda m: m["price"] > m["avg_competitor_price"] * settings.PREMIUM_ALERT_RATIO,
        type="pricing",
        priority="high",
        suggestion="Consider price optimization to improve competitiveness",
        impact="Potential 15-25% increase in market share",
    ),
    RecommendationRule(
        name="strong_competitor_quality",
        predicate=lambda m: m["max_competitor_rating"] > settings.COMPETITOR_RATING_ALERT,
        type="quality",
        priority="medium",
        suggestion="Focus on product quality and customer satisfaction",
        impact="Improve brand reputation and customer loyalty",
    ),
])


# ─── Environmental hazards ───────────────────────────────────────────────────


HAZARD_RULES = RuleSet("hazard", [
    RecommendationRule(
        name="toxicity_risk",
        predicate=lambda m: m["toxicity"] > settings.HAZARD_ALERT_SCORE,
        type="warning",
        priority="high",
        title="Toxicity Risk Detected",
        suggestion=(
            "This product may contain toxic substances. "
            "Consider alternatives with natural ingredients."
        ),
    ),
    RecommendationRule(
        name="chemical_composition",
        predicate=lambda m: m["chemical_risks"] > settings.HAZARD_ALERT_SCORE,
        type="info",
        priority="medium",
        title="Chemical Composition Alert",
        suggestion=(
            "Product contains synthetic chemicals. "
            "Look for organic or natural alternatives."
        ),
    ),
    RecommendationRule(
        name="environmental_impact",
        predicate=lambda m: m["environmental_impact"] > settings.HAZARD_ALERT_SCORE,
        type="warning",
        priority="high",
        title="Environmental Impact High",
        suggestion=(
            "This product may have significant environmental impact. "
            "Consider eco-friendly alternatives."
        ),
    ),
])

HAZARD_CATEGORY_RULES = RuleSet("hazard_category", [
    RecommendationRule(
        name="e_waste",
        predicate=lambda m: m["category"] == "electronics",
        type="info",
        priority="medium",
        title="E-Waste Consideration",
        suggestion="Ensure proper disposal and recycling of electronic components.",
    ),
    RecommendationRule(
        name="skin_safety",
        predicate=lambda m: m["category"] == "cosmetics",
        type="info",
        priority="medium",
        title="Skin Safety",
        suggestion="Check for hypoallergenic and dermatologically tested alternatives.",
    ),
])

HAZARD_COMPARISON_RULES = RuleSet("hazard_comparison", [
    RecommendationRule(
        name="high_average_risk",
        predicate=lambda m: m["avg_risk_score"] > settings.HIGH_AVERAGE_RISK,
        type="warning",
        priority="high",
        title="High Average Risk",
        suggestion=(
            "The compared products have high environmental risk scores. "
            "Consider more eco-friendly alternatives."
        ),
    ),
])


# ─── Multi-product comparison ────────────────────────────────────────────────


PRICE_SPREAD_RULES = RuleSet("price_spread", [
    RecommendationRule(
        name="wide_price_spread",
        predicate=lambda m: m["max_price"] / m["min_price"] > settings.PRICE_SPREAD_ALERT_RATIO,
        type="pricing",
        priority="medium",
        suggestion="Significant price variation detected. Consider market positioning strategy.",
        impact="High",
    ),
])

PRODUCT_COMPARISON_RULES = RuleSet("product_comparison", [
    RecommendationRule(
        name="priced_above_group",
        predicate=lambda m: m["price"] > m["avg_price"] * settings.COMPARISON_PRICE_ALERT_RATIO,
        type="pricing",
        priority="medium",
        suggestion="Consider price optimization for better market positioning",
    ),
    RecommendationRule(
        # an unrated product (rating 0) is not flagged
        name="below_rating_floor",
        predicate=lambda m: 0 < m["rating"] < settings.COMPARISON_MIN_RATING,
        type="quality",
        priority="medium",
        suggestion="Focus on improving product quality and customer satisfaction",
    ),
])
