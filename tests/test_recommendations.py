"""
Rule table tests: each rule individually, plus ordering and idempotence.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

import pytest
from analyzers.recommendations import (
    COMPETITIVE_RULES, HAZARD_CATEGORY_RULES, HAZARD_RULES, PERFORMANCE_RULES,
    PRICE_SPREAD_RULES, PRODUCT_COMPARISON_RULES, RecommendationRule, RuleSet,
)


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def weak_metrics():
    return {
        "conversion_rate": 1.0,
        "avg_rating": 3.0,
        "price_position": "premium",
        "review_count": 2,
    }


@pytest.fixture
def healthy_metrics():
    return {
        "conversion_rate": 5.0,
        "avg_rating": 4.6,
        "price_position": "competitive",
        "review_count": 40,
    }


# ─── RuleSet ─────────────────────────────────────────────────────────────────

class TestRuleSet:
    def test_declaration_order(self, weak_metrics):
        names = [r.name for r in PERFORMANCE_RULES]
        assert names == ["low_conversion", "low_rating", "premium_low_conversion", "few_reviews"]
        recs = PERFORMANCE_RULES.evaluate(weak_metrics)
        assert [r.type for r in recs] == ["conversion", "quality", "pricing", "engagement"]

    def test_idempotent(self, weak_metrics):
        first = PERFORMANCE_RULES.evaluate(weak_metrics)
        second = PERFORMANCE_RULES.evaluate(dict(weak_metrics))
        assert first == second

    def test_no_match(self, healthy_metrics):
        assert PERFORMANCE_RULES.evaluate(healthy_metrics) == []

    def test_missing_metric_does_not_match(self):
        assert PERFORMANCE_RULES.evaluate({}) == []

    def test_duplicate_names_rejected(self):
        rule = PERFORMANCE_RULES.get("low_rating")
        with pytest.raises(ValueError):
            RuleSet("dup", [rule, rule])

    def test_get_unknown_rule(self):
        with pytest.raises(KeyError):
            PERFORMANCE_RULES.get("nope")

    def test_extended_appends(self, weak_metrics):
        extra = RecommendationRule(
            name="always", predicate=lambda m: True, type="info", priority="low",
            suggestion="Always on",
        )
        rules = PERFORMANCE_RULES.extended(extra)
        assert len(rules) == len(PERFORMANCE_RULES) + 1
        assert rules.evaluate(weak_metrics)[-1].suggestion == "Always on"
        # original table untouched
        assert len(PERFORMANCE_RULES) == 4

    def test_evaluate_each_is_rule_major(self):
        items = [
            ("A", {"price": 200, "avg_price": 100, "rating": 3.0}),
            ("B", {"price": 200, "avg_price": 100, "rating": 3.5}),
        ]
        recs = PRODUCT_COMPARISON_RULES.evaluate_each(items)
        assert [(r.type, r.product) for r in recs] == [
            ("pricing", "A"), ("pricing", "B"), ("quality", "A"), ("quality", "B"),
        ]


# ─── Individual rules ────────────────────────────────────────────────────────

class TestPerformanceRules:
    @pytest.mark.parametrize("rule_name,overrides,expected", [
        ("low_conversion", {"conversion_rate": 1.99}, True),
        ("low_conversion", {"conversion_rate": 2.0}, False),
        ("low_rating", {"avg_rating": 3.9}, True),
        ("low_rating", {"avg_rating": 4.0}, False),
        ("premium_low_conversion", {"price_position": "premium", "conversion_rate": 2.5}, True),
        ("premium_low_conversion", {"price_position": "average", "conversion_rate": 2.5}, False),
        ("few_reviews", {"review_count": 9}, True),
        ("few_reviews", {"review_count": 10}, False),
    ])
    def test_threshold(self, healthy_metrics, rule_name, overrides, expected):
        metrics = {**healthy_metrics, **overrides}
        assert PERFORMANCE_RULES.get(rule_name).applies(metrics) is expected

    def test_priorities(self):
        assert [r.priority for r in PERFORMANCE_RULES] == ["high", "high", "medium", "medium"]


class TestCompetitiveRules:
    def test_overpriced_is_strictly_above_ratio(self):
        rule = COMPETITIVE_RULES.get("overpriced_vs_competitors")
        assert rule.applies({"price": 121, "avg_competitor_price": 100})
        assert not rule.applies({"price": 120, "avg_competitor_price": 100})

    def test_strong_competitor(self):
        rule = COMPETITIVE_RULES.get("strong_competitor_quality")
        assert rule.applies({"max_competitor_rating": 4.6})
        assert not rule.applies({"max_competitor_rating": 4.5})


class TestHazardRules:
    def test_each_category_rule(self):
        metrics = {"toxicity": 0.7, "chemical_risks": 0.3, "environmental_impact": 0.2}
        assert [r.name for r in HAZARD_RULES if r.applies(metrics)] == ["toxicity_risk"]

    def test_category_rules(self):
        assert [r.title for r in HAZARD_CATEGORY_RULES.evaluate({"category": "electronics"})] == [
            "E-Waste Consideration"
        ]
        assert HAZARD_CATEGORY_RULES.evaluate({"category": "food"}) == []


class TestComparisonRules:
    def test_price_spread(self):
        recs = PRICE_SPREAD_RULES.evaluate({"min_price": 50, "max_price": 150})
        assert len(recs) == 1
        assert recs[0].impact == "High"
        assert PRICE_SPREAD_RULES.evaluate({"min_price": 50, "max_price": 100}) == []

    def test_unrated_product_not_flagged(self):
        rule = PRODUCT_COMPARISON_RULES.get("below_rating_floor")
        assert not rule.applies({"rating": 0})
        assert rule.applies({"rating": 3.9})

    def test_recommendation_to_dict_omits_empty(self):
        rec = PRODUCT_COMPARISON_RULES.get("priced_above_group").build("A")
        assert rec.to_dict() == {
            "type": "pricing",
            "priority": "medium",
            "suggestion": "Consider price optimization for better market positioning",
            "product": "A",
        }


class TestMissingMetrics:
    def test_misspelled_metric_logs_warning(self, caplog):
        rule = PERFORMANCE_RULES.get("low_rating")
        with caplog.at_level(logging.WARNING, logger="analyzers.recommendations"):
            assert rule.applies({"avg_ratng": 2.0}) is False
        assert "low_rating" in caplog.text
        assert "avg_rating" in caplog.text
