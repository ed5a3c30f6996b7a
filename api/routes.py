"""
FastAPI Route Handlers
Product Insight Engine: analysis, competitors, environmental
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Depends

from api.dependencies import (
    get_classifier, get_competitor_source, get_market_source, get_repository,
)
from api.schemas import (
    SentimentRequest, PerformanceRequest, MarketTrendRequest,
    ProductReportRequest, CatalogReportRequest,
    CompetitorAnalyzeRequest, CompareProductsRequest, MarketShareRequest,
    HazardRequest, HazardCompareRequest, HealthResponse,
)
from analyzers import (
    SentimentAnalyzer, PerformanceAnalyzer, CompetitorAnalyzer,
    HazardAnalyzer, ComparisonAnalyzer, ValidationError,
)
from analyzers.base import AnalysisResult
from analyzers.classifier import TextClassifierClient
from analyzers.competitive import CompetitorQuery
from analyzers.hazards import HazardInput, compare_hazards, compliance_checklist
from analyzers.performance import PerformanceInput
from analyzers.sources import CompetitorSource, MarketDataSource
from analyzers.text_signals import TextInput
from config.settings import settings
from db.repository import ProductRepository, to_facts, to_snapshot
from models.schemas import AnalyticsSnapshot, ProductFacts
from utils.pipeline import run_product_report

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(result: AnalysisResult) -> Dict[str, Any]:
    """Unwrap an analyzer result into the response envelope."""
    if result.success:
        return {"success": True, "data": result.data.to_dict()}
    if result.error_kind == ValidationError.kind:
        raise HTTPException(status_code=400, detail=result.error)
    raise HTTPException(status_code=500, detail=result.error)


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
    )


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.post("/analysis/sentiment", tags=["Analysis"])
def analyze_sentiment(request: SentimentRequest):
    """Polarity label, raw lexicon score and keywords for text or reviews."""
    result = SentimentAnalyzer().execute(TextInput(text=request.text, reviews=request.reviews))
    return _respond(result)


@router.post("/analysis/performance", tags=["Analysis"])
def analyze_performance(request: PerformanceRequest):
    """0-100 performance score with price position and recommendations."""
    payload = PerformanceInput(
        price=request.price,
        views=request.views,
        sales=request.sales,
        reviews=request.reviews,
        rating=request.rating,
        competitor_prices=request.competitor_prices,
    )
    return _respond(PerformanceAnalyzer().execute(payload))


@router.post("/analysis/market-trends", tags=["Analysis"])
def market_trends(
    request: MarketTrendRequest,
    market_source: MarketDataSource = Depends(get_market_source),
):
    trend = market_source.trend(
        request.category,
        historical_data=request.historical_data,
        market_size=request.market_size,
    )
    return {"success": True, "data": trend.to_dict()}


@router.post("/analysis/report", tags=["Analysis"])
def product_report(
    request: ProductReportRequest,
    competitor_source: CompetitorSource = Depends(get_competitor_source),
    market_source: MarketDataSource = Depends(get_market_source),
    classifier: Optional[TextClassifierClient] = Depends(get_classifier),
):
    """
    Run every facet for an inline product. Facets fail independently: a
    failed facet is null in `facets` and described in `errors`.
    """
    product = ProductFacts(
        name=request.name or "",
        description=request.description or "",
        price=request.price,
        category=request.category,
        ingredients=request.ingredients,
        brand=request.brand,
    )
    snapshot = AnalyticsSnapshot.build(
        views=request.analytics.views,
        sales=request.analytics.sales,
        reviews=request.analytics.reviews,
        rating=request.analytics.rating,
    )
    report = run_product_report(
        product,
        snapshot,
        competitor_prices=request.competitor_prices,
        competitor_source=competitor_source,
        market_source=market_source,
        classifier=classifier,
        facets=request.facets,
    )
    return {"success": True, "data": report.to_dict()}


@router.post("/analysis/products/{product_id}/report", tags=["Analysis"])
def catalog_product_report(
    product_id: str,
    request: Optional[CatalogReportRequest] = None,
    repository: ProductRepository = Depends(get_repository),
    competitor_source: CompetitorSource = Depends(get_competitor_source),
    market_source: MarketDataSource = Depends(get_market_source),
    classifier: Optional[TextClassifierClient] = Depends(get_classifier),
):
    """Same as /analysis/report for a product resolved from the catalog."""
    request = request or CatalogReportRequest()
    stored = repository.get(product_id)
    report = run_product_report(
        to_facts(stored),
        to_snapshot(stored),
        competitor_prices=request.competitor_prices,
        competitor_source=competitor_source,
        market_source=market_source,
        classifier=classifier,
        facets=request.facets,
    )
    return {"success": True, "data": report.to_dict()}


# ─── Competitors ─────────────────────────────────────────────────────────────

@router.post("/competitors/analyze", tags=["Competitors"])
def analyze_competitors(
    request: CompetitorAnalyzeRequest,
    competitor_source: CompetitorSource = Depends(get_competitor_source),
    market_source: MarketDataSource = Depends(get_market_source),
):
    """Competitor listing, price position against them and market context."""
    query = CompetitorQuery(
        product_name=request.product_name,
        category=request.category,
        price=request.price,
        brand=request.brand,
        market=request.market,
    )
    analyzer = CompetitorAnalyzer(competitor_source=competitor_source, market_source=market_source)
    return _respond(analyzer.execute(query))


@router.get("/competitors/{competitor_id}", tags=["Competitors"])
def get_competitor(
    competitor_id: str,
    competitor_source: CompetitorSource = Depends(get_competitor_source),
):
    try:
        record = competitor_source.get(competitor_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Competitor not found")
    return {"success": True, "data": record.to_dict()}


@router.post("/competitors/compare", tags=["Competitors"])
def compare_competitors(request: CompareProductsRequest):
    """Price, feature and market-position comparison of two or more products."""
    return _respond(ComparisonAnalyzer().execute(request.products))


@router.post("/competitors/market-share", tags=["Competitors"])
def market_share(
    request: MarketShareRequest,
    market_source: MarketDataSource = Depends(get_market_source),
):
    report = market_source.market_share(request.category, region=request.region)
    return {"success": True, "data": report.to_dict()}


# ─── Environmental ───────────────────────────────────────────────────────────

@router.post("/environmental/analyze-hazards", tags=["Environmental"])
def analyze_hazards(
    request: HazardRequest,
    classifier: Optional[TextClassifierClient] = Depends(get_classifier),
):
    """Keyword hazard scores, overall risk band and recommendations."""
    payload = HazardInput(
        name=request.product_name,
        description=request.description,
        ingredients=request.ingredients,
        category=request.category,
    )
    return _respond(HazardAnalyzer(classifier=classifier).execute(payload))


@router.post("/environmental/compare-products", tags=["Environmental"])
def compare_product_hazards(
    request: HazardCompareRequest,
    classifier: Optional[TextClassifierClient] = Depends(get_classifier),
):
    comparison = compare_hazards(request.products, classifier=classifier)
    logger.info(
        f"Hazard comparison of {len(comparison.products)} products, "
        f"avg risk {comparison.avg_risk_score:.2f}"
    )
    return {"success": True, "data": comparison.to_dict()}


@router.get("/environmental/compliance-checklist", tags=["Environmental"])
async def get_compliance_checklist():
    return {"success": True, "data": compliance_checklist()}
