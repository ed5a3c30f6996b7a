"""
HTTP API tests: envelope, status mapping and routing.
Collaborators are swapped through FastAPI dependency overrides.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import inspect

import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    get_classifier, get_competitor_source, get_market_source, get_repository,
)
from api import routes
from api.main import app
from analyzers.sources import (
    MarketInsights, MarketShareEntry, MarketShareReport, MarketTrend, QuarterDemand,
    SimulatedMarketDataSource, StaticCompetitorSource, StaticMarketDataSource,
)
from db.database import make_session_factory
from db.repository import SqlProductRepository
from models.schemas import CompetitorRecord

API = "/api/v1"


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def competitors():
    return [
        CompetitorRecord(id="c1", name="Rival One", price=80, rating=4.7,
                         review_count=400, market_share_pct=12),
        CompetitorRecord(id="c2", name="Rival Two", price=120, rating=3.9,
                         review_count=90, market_share_pct=25),
    ]


@pytest.fixture
def client(competitors):
    repository = SqlProductRepository(make_session_factory("sqlite://"))
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_competitor_source] = lambda: StaticCompetitorSource(competitors)
    app.dependency_overrides[get_market_source] = lambda: SimulatedMarketDataSource(seed=5)
    app.dependency_overrides[get_classifier] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def stored_product(client):
    response = client.post(f"{API}/products", json={
        "name": "Glass Jar Set",
        "price": 18.0,
        "category": "Kitchen",
        "description": "Reusable glass jars with bamboo lids",
        "tags": ["zero-waste"],
        "analytics": {"views": 500, "sales": 20, "rating": 4.6},
    })
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def static_market(client):
    source = StaticMarketDataSource(
        trend=MarketTrend(
            category="Kitchen",
            market_growth_pct=4.5,
            seasonality=[QuarterDemand("Q4", 1.3)],
            key_drivers=["Home cooking"],
            opportunities=["Bundles"],
            threats=["Discounters"],
        ),
        insights=MarketInsights(
            market_size=2000000,
            growth_rate_pct=4.5,
            key_trends=["Smart appliances"],
            opportunities=["Bundles"],
            threats=["Discounters"],
        ),
        market_share=MarketShareReport(
            category="Kitchen",
            region="EU",
            total_market_size=2000000,
            competitors=[MarketShareEntry("Rival One", 12.0, 240000)],
            growth_rate_pct=4.5,
        ),
    )
    app.dependency_overrides[get_market_source] = lambda: source
    return source


# ─── System ──────────────────────────────────────────────────────────────────

class TestSystem:
    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    @pytest.mark.parametrize("handler", [
        routes.analyze_sentiment,
        routes.analyze_performance,
        routes.market_trends,
        routes.product_report,
        routes.analyze_competitors,
        routes.compare_competitors,
        routes.analyze_hazards,
    ])
    def test_analysis_handlers_run_in_threadpool(self, handler):
        assert not inspect.iscoroutinefunction(handler)


# ─── Analysis ────────────────────────────────────────────────────────────────

class TestAnalysisRoutes:
    def test_sentiment(self, client):
        response = client.post(f"{API}/analysis/sentiment", json={
            "text": "This product is terrible and disappointing",
        })
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"]["sentiment"] == "negative"

    def test_sentiment_requires_input(self, client):
        response = client.post(f"{API}/analysis/sentiment", json={})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Text or reviews are required"}

    def test_performance(self, client):
        response = client.post(f"{API}/analysis/performance", json={
            "price": 100, "competitor_prices": [80, 90, 110],
        })
        data = response.json()["data"]
        assert data["price_analysis"]["position"] == "premium"
        assert data["price_analysis"]["avg_competitor_price"] == 93.33
        assert data["price_analysis"]["difference_pct"] == 7.14

    def test_performance_requires_price(self, client):
        response = client.post(f"{API}/analysis/performance", json={"views": 10})
        assert response.status_code == 400
        assert response.json()["error"] == "Price is required"

    def test_malformed_body_is_400(self, client):
        response = client.post(f"{API}/analysis/performance", json={"price": "cheap"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "price" in response.json()["error"]

    def test_infinite_price_is_400(self, client):
        response = client.post(f"{API}/analysis/performance", json={"price": "inf"})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Price must be a finite number"}

    def test_market_trends(self, client):
        response = client.post(f"{API}/analysis/market-trends", json={"category": "Garden"})
        assert response.json()["data"]["category"] == "Garden"

    def test_market_trends_requires_category(self, client):
        response = client.post(f"{API}/analysis/market-trends", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Category is required"

    def test_inline_report(self, client):
        response = client.post(f"{API}/analysis/report", json={
            "name": "Desk Lamp",
            "description": "Warm LED lamp with a plastic base",
            "price": 45,
            "category": "electronics",
            "analytics": {"views": 200, "sales": 8, "rating": 4.1},
        })
        data = response.json()["data"]
        assert response.status_code == 200
        assert data["facets"]["hazard"]["environmental_impact"]["label"] == "HIGH"
        assert data["facets"]["competitive"]["analysis"]["price_position"] == "competitive"
        assert data["errors"] == {}

    def test_inline_report_partial_failure(self, client):
        response = client.post(f"{API}/analysis/report", json={
            "name": "Desk Lamp", "description": "Warm LED lamp",
        })
        data = response.json()["data"]
        assert response.status_code == 200
        assert data["facets"]["performance"] is None
        assert data["errors"]["performance"]["message"] == "Price is required"
        assert data["facets"]["sentiment"] is not None

    def test_catalog_report(self, client, stored_product):
        response = client.post(f"{API}/analysis/products/{stored_product['id']}/report")
        data = response.json()["data"]
        assert data["product"]["name"] == "Glass Jar Set"
        assert data["facets"]["performance"]["conversion_rate"] == 4.0

    def test_catalog_report_unknown_product(self, client):
        response = client.post(f"{API}/analysis/products/missing/report")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Product not found"}


# ─── Competitors ─────────────────────────────────────────────────────────────

class TestCompetitorRoutes:
    def test_analyze(self, client):
        response = client.post(f"{API}/competitors/analyze", json={
            "product_name": "Blender", "category": "Kitchen", "price": 130,
        })
        data = response.json()["data"]
        assert [c["id"] for c in data["competitors"]] == ["c2", "c1"]
        assert data["analysis"]["price_position"] == "premium"
        assert data["market_insights"] is not None
        assert data["ranking"][0]["id"] == "c1"

    def test_analyze_requires_name_and_category(self, client):
        response = client.post(f"{API}/competitors/analyze", json={"price": 10})
        assert response.status_code == 400
        assert response.json()["error"] == "Product name and category are required"

    def test_detail(self, client):
        assert client.get(f"{API}/competitors/c1").json()["data"]["name"] == "Rival One"

    def test_detail_unknown(self, client):
        response = client.get(f"{API}/competitors/zzz")
        assert response.status_code == 404
        assert response.json()["error"] == "Competitor not found"

    def test_compare(self, client):
        response = client.post(f"{API}/competitors/compare", json={"products": [
            {"name": "A", "price": 50}, {"name": "B", "price": 150},
        ]})
        price = response.json()["data"]["price_comparison"]
        assert price["price_range"] == {"min": 50.0, "max": 150.0, "average": 100.0}
        assert price["price_difference_pct"] == 200.0

    def test_compare_requires_two(self, client):
        response = client.post(f"{API}/competitors/compare", json={"products": [{"name": "A", "price": 5}]})
        assert response.status_code == 400
        assert response.json()["error"] == "At least 2 products are required for comparison"

    def test_compare_rejects_infinite_price(self, client):
        response = client.post(f"{API}/competitors/compare", json={"products": [
            {"name": "A", "price": "1e309"}, {"name": "B", "price": 10},
        ]})
        assert response.status_code == 400
        assert response.json()["error"] == "Product 1: price must be a finite number"

    def test_market_share(self, client):
        data = client.post(f"{API}/competitors/market-share", json={"category": "Kitchen"}).json()["data"]
        assert data["region"] == "Global"
        assert len(data["competitors"]) == 5


# ─── Market data ─────────────────────────────────────────────────────────────

class TestStaticMarketData:
    def test_market_trends(self, client, static_market):
        data = client.post(f"{API}/analysis/market-trends", json={"category": "Kitchen"}).json()["data"]
        assert data["market_growth_pct"] == 4.5
        assert data["seasonality"] == [{"quarter": "Q4", "demand": 1.3}]
        assert data["key_drivers"] == ["Home cooking"]

    def test_blank_category_rejected(self, client, static_market):
        response = client.post(f"{API}/analysis/market-trends", json={"category": "  "})
        assert response.status_code == 400
        assert response.json()["error"] == "Category is required"

    def test_market_share(self, client, static_market):
        data = client.post(f"{API}/competitors/market-share", json={"category": "Kitchen"}).json()["data"]
        assert data["region"] == "EU"
        assert data["competitors"] == [{"name": "Rival One", "share_pct": 12.0, "revenue": 240000}]

    def test_competitor_analysis_carries_insights(self, client, static_market):
        response = client.post(f"{API}/competitors/analyze", json={
            "product_name": "Blender", "category": "Kitchen", "price": 130,
        })
        insights = response.json()["data"]["market_insights"]
        assert insights["market_size"] == 2000000
        assert insights["key_trends"] == ["Smart appliances"]


# ─── Environmental ───────────────────────────────────────────────────────────

class TestEnvironmentalRoutes:
    def test_analyze(self, client):
        response = client.post(f"{API}/environmental/analyze-hazards", json={
            "product_name": "Drain Opener", "description": "Toxic chemical formula",
        })
        data = response.json()["data"]
        assert data["toxicity"] == {"score": 0.7, "label": "HIGH"}
        assert data["model_toxicity"] is None

    def test_analyze_requires_fields(self, client):
        response = client.post(f"{API}/environmental/analyze-hazards", json={"product_name": "X"})
        assert response.status_code == 400
        assert response.json()["error"] == "Product name and description are required"

    def test_compare(self, client):
        response = client.post(f"{API}/environmental/compare-products", json={"products": [
            {"name": "Clean", "description": "cotton"},
            {"name": "Dirty", "description": "toxic plastic"},
        ]})
        insights = response.json()["data"]["insights"]
        assert insights[0]["product_name"] == "Clean"
        assert insights[1]["product_name"] == "Dirty"

    def test_compliance_checklist(self, client):
        data = client.get(f"{API}/environmental/compliance-checklist").json()["data"]
        assert len(data["categories"]) == 4


# ─── Catalog ─────────────────────────────────────────────────────────────────

class TestProductRoutes:
    def test_create_and_get(self, client, stored_product):
        response = client.get(f"{API}/products/{stored_product['id']}")
        assert response.json()["data"]["name"] == "Glass Jar Set"

    def test_create_requires_name_and_price(self, client):
        response = client.post(f"{API}/products", json={"name": "No price"})
        assert response.status_code == 400
        assert response.json()["error"] == "Name and price are required"

    def test_list(self, client, stored_product):
        body = client.get(f"{API}/products").json()
        assert body["count"] == 1

    def test_partial_update(self, client, stored_product):
        response = client.put(f"{API}/products/{stored_product['id']}", json={"price": 15.5})
        data = response.json()["data"]
        assert data["price"] == 15.5
        assert data["name"] == "Glass Jar Set"
        assert data["id"] == stored_product["id"]
        assert data["created_at"] == stored_product["created_at"]

    def test_delete(self, client, stored_product):
        assert client.delete(f"{API}/products/{stored_product['id']}").status_code == 200
        assert client.get(f"{API}/products/{stored_product['id']}").status_code == 404

    def test_search(self, client, stored_product):
        body = client.get(f"{API}/products/search/BAMBOO").json()
        assert [p["id"] for p in body["data"]] == [stored_product["id"]]
