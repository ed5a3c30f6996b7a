"""
Product catalog repository tests (in-memory SQLite).
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime

import pytest
from analyzers.errors import ValidationError
from db.database import make_session_factory
from db.repository import (
    ProductNotFound, SqlProductRepository, apply_patch, to_facts, to_snapshot,
)


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def repo():
    return SqlProductRepository(make_session_factory("sqlite://"))


@pytest.fixture
def kettle(repo):
    return repo.create({
        "name": "Steel Kettle",
        "price": 39.5,
        "category": "Kitchen",
        "brand": "Boilright",
        "description": "Stainless kettle with auto shut-off",
        "tags": ["eco", "bestseller"],
        "analytics": {"views": 300, "sales": 12, "rating": 4.4, "bogus": 1},
    })


# ─── apply_patch ─────────────────────────────────────────────────────────────

class TestApplyPatch:
    @pytest.fixture
    def current(self):
        return {
            "id": "p1",
            "name": "Old",
            "price": 10.0,
            "created_at": datetime(2024, 1, 1),
            "analytics": {"views": 5, "sales": 1, "reviews": [], "rating": 4.0, "sentiment": "neutral"},
        }

    def test_immutable_fields_preserved(self, current):
        merged = apply_patch(current, {"id": "hijack", "created_at": datetime(1999, 1, 1), "name": "New"})
        assert merged["id"] == "p1"
        assert merged["created_at"] == datetime(2024, 1, 1)
        assert merged["name"] == "New"

    def test_unknown_fields_ignored(self, current):
        assert "color" not in apply_patch(current, {"color": "red"})

    def test_analytics_merged_per_key(self, current):
        merged = apply_patch(current, {"analytics": {"views": 99, "junk": True}})
        assert merged["analytics"]["views"] == 99
        assert merged["analytics"]["rating"] == 4.0
        assert "junk" not in merged["analytics"]

    def test_input_not_mutated(self, current):
        apply_patch(current, {"name": "New"})
        assert current["name"] == "Old"

    def test_updated_at_refreshed(self, current):
        assert isinstance(apply_patch(current, {})["updated_at"], datetime)

    @pytest.mark.parametrize("patch", [{"price": 0}, {"name": "  "}, {"tags": "eco"}])
    def test_invalid_values_rejected(self, current, patch):
        with pytest.raises(ValidationError):
            apply_patch(current, patch)


# ─── Repository ──────────────────────────────────────────────────────────────

class TestSqlProductRepository:
    def test_create_assigns_id_and_defaults(self, kettle):
        assert len(kettle["id"]) == 36
        assert kettle["analytics"]["views"] == 300
        assert kettle["analytics"]["sentiment"] == "neutral"
        assert "bogus" not in kettle["analytics"]
        assert kettle["created_at"] == kettle["updated_at"]

    @pytest.mark.parametrize("data", [{"name": "X"}, {"price": 5}, {"name": "X", "price": 0}])
    def test_create_requires_name_and_positive_price(self, repo, data):
        with pytest.raises(ValidationError):
            repo.create(data)

    def test_get_and_list(self, repo, kettle):
        assert repo.get(kettle["id"])["name"] == "Steel Kettle"
        assert [p["id"] for p in repo.list()] == [kettle["id"]]

    def test_missing_product(self, repo):
        with pytest.raises(ProductNotFound) as exc:
            repo.get("nope")
        assert str(exc.value) == "Product not found"

    def test_update_preserves_identity(self, repo, kettle):
        updated = repo.update(kettle["id"], {"price": 35.0, "id": "other", "analytics": {"views": 500}})
        assert updated["id"] == kettle["id"]
        assert updated["created_at"] == kettle["created_at"]
        assert updated["price"] == 35.0
        assert updated["analytics"]["views"] == 500
        assert updated["analytics"]["sales"] == 12

    def test_delete(self, repo, kettle):
        deleted = repo.delete(kettle["id"])
        assert deleted["name"] == "Steel Kettle"
        assert repo.list() == []
        with pytest.raises(ProductNotFound):
            repo.delete(kettle["id"])

    @pytest.mark.parametrize("query", ["kettle", "KITCHEN", "boil", "shut-off", "bestseller"])
    def test_search_matches_columns_and_tags(self, repo, kettle, query):
        assert [p["id"] for p in repo.search(query)] == [kettle["id"]]

    def test_search_no_match(self, repo, kettle):
        assert repo.search("toaster") == []

    @pytest.mark.parametrize("query", ["%", "st_el", "k%e"])
    def test_search_wildcards_are_literal(self, repo, kettle, query):
        assert repo.search(query) == []

    def test_search_literal_percent(self, repo, kettle):
        tote = repo.create({"name": "100% Cotton Tote", "price": 12})
        assert [p["id"] for p in repo.search("100%")] == [tote["id"]]

    def test_conversion_to_engine_inputs(self, kettle):
        facts = to_facts(kettle)
        snapshot = to_snapshot(kettle)
        assert facts.name == "Steel Kettle"
        assert facts.tags == ("eco", "bestseller")
        assert snapshot.views == 300
        assert snapshot.rating == 4.4
