"""
Multi-product comparison tests.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from analyzers.aggregator import (
    ComparisonAnalyzer, compare_features, compare_prices, compare_products,
)
from analyzers.errors import ValidationError
from models.schemas import CompetitorRecord


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def two_products():
    return [
        {"name": "Budget", "price": 50, "features": ["wifi", "timer"]},
        {"name": "Deluxe", "price": 150, "features": ["timer", "app"]},
    ]


@pytest.fixture
def rated_products():
    return [
        {"name": "A", "price": 100, "rating": 4.8, "review_count": 900, "market_share_pct": 30},
        {"name": "B", "price": 100, "rating": 3.5, "review_count": 40, "market_share_pct": 5},
        {"name": "C", "price": 220, "rating": 4.2, "review_count": 300, "market_share_pct": 12},
    ]


# ─── Validation ──────────────────────────────────────────────────────────────

class TestValidation:
    @pytest.mark.parametrize("products", [None, [], [{"name": "Solo", "price": 10}]])
    def test_fewer_than_two_rejected(self, products):
        with pytest.raises(ValidationError, match="At least 2 products are required"):
            compare_products(products)

    def test_exactly_two_accepted(self, two_products):
        assert compare_products(two_products).ranking

    def test_non_positive_price_rejected(self):
        with pytest.raises(ValidationError, match="Product 2: price must be greater than 0"):
            compare_products([{"name": "A", "price": 10}, {"name": "B"}])

    def test_non_finite_price_rejected(self):
        with pytest.raises(ValidationError, match="Product 1: price must be a finite number"):
            compare_products([{"name": "A", "price": "1e309"}, {"name": "B", "price": 10}])


# ─── Price comparison ────────────────────────────────────────────────────────

class TestPriceComparison:
    def test_range_and_spread(self, two_products):
        result = compare_products(two_products)
        price = result.price_comparison.to_dict()
        assert price["price_range"] == {"min": 50.0, "max": 150.0, "average": 100.0}
        assert price["price_difference_pct"] == 200.0
        assert [r.impact for r in result.price_comparison.recommendations] == ["High"]

    def test_narrow_spread_has_no_advice(self):
        records = [CompetitorRecord(id="a", name="A", price=10), CompetitorRecord(id="b", name="B", price=15)]
        comparison = compare_prices(records)
        assert comparison.difference_pct == 50.0
        assert comparison.recommendations == []


# ─── Feature matrix ──────────────────────────────────────────────────────────

class TestFeatureComparison:
    def test_union_in_first_seen_order(self, two_products):
        records = [CompetitorRecord.from_dict(p, i) for i, p in enumerate(two_products)]
        rows = compare_features(records)
        assert [r.feature for r in rows] == ["wifi", "timer", "app"]
        assert rows[0].availability == [
            {"product": "Budget", "has_feature": True},
            {"product": "Deluxe", "has_feature": False},
        ]
        assert all(a["has_feature"] for a in rows[1].availability)

    def test_no_features(self):
        records = [CompetitorRecord(id="a", name="A", price=1), CompetitorRecord(id="b", name="B", price=2)]
        assert compare_features(records) == []


# ─── Market position / advice / insights ─────────────────────────────────────

class TestMarketPosition:
    def test_positions_in_input_order(self, rated_products):
        result = compare_products(rated_products)
        assert [p.name for p in result.market_position] == ["A", "B", "C"]

    def test_ranking_by_composite_score(self, rated_products):
        assert compare_products(rated_products).ranking == ["A", "C", "B"]

    def test_recommendations_per_product(self, rated_products):
        # average price 140: C is above 1.3x ; B is below the 4.0 rating floor
        recs = compare_products(rated_products).recommendations
        assert [(r.type, r.product) for r in recs] == [("pricing", "C"), ("quality", "B")]

    def test_insights(self, rated_products):
        insights = compare_products(rated_products).insights
        assert insights.best_product == "A"
        assert insights.worst_product == "B"
        assert insights.cheapest_product == "A"
        assert insights.most_expensive_product == "C"
        assert insights.price_outliers == ["C"]

    def test_to_dict_shape(self, rated_products):
        data = compare_products(rated_products).to_dict()
        assert set(data) == {
            "price_comparison", "feature_comparison", "market_position",
            "ranking", "recommendations", "insights",
        }


class TestComparisonAnalyzer:
    def test_execute(self, two_products):
        result = ComparisonAnalyzer().execute(two_products)
        assert result.success
        assert result.data.price_comparison.min == 50

    def test_execute_with_one_product(self):
        result = ComparisonAnalyzer().execute([{"name": "A", "price": 1}])
        assert not result.success
        assert result.error_kind == "validation"
