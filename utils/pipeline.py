"""
Product report runner: runs every analysis facet for one product and
collects whatever succeeded.

Architecture:
  ProductFacts + AnalyticsSnapshot
      ├─ SentimentAnalyzer    (description / reviews)
      ├─ PerformanceAnalyzer  (price, views, sales, reviews, rating)
      ├─ HazardAnalyzer       (name, description, ingredients, category)
      └─ CompetitorAnalyzer   (name, category, price)

Facets run in isolation: one failing facet is reported in `errors` and its
slot in `facets` is None, the others are unaffected.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from analyzers.base import FacetRunner
from analyzers.classifier import TextClassifierClient
from analyzers.competitive import CompetitorAnalyzer, CompetitorQuery
from analyzers.errors import ValidationError
from analyzers.hazards import HazardAnalyzer, HazardInput
from analyzers.performance import PerformanceAnalyzer, PerformanceInput
from analyzers.sources import CompetitorSource, MarketDataSource
from analyzers.text_signals import SentimentAnalyzer, TextInput
from models.schemas import AnalyticsSnapshot, ProductFacts

logger = logging.getLogger(__name__)

FACET_SENTIMENT = "sentiment"
FACET_PERFORMANCE = "performance"
FACET_HAZARD = "hazard"
FACET_COMPETITIVE = "competitive"
FACETS = (FACET_SENTIMENT, FACET_PERFORMANCE, FACET_HAZARD, FACET_COMPETITIVE)


@dataclass
class ProductReport:
    report_id: str
    product: ProductFacts
    facets: Dict[str, Any]
    errors: Dict[str, Dict[str, str]] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "category": self.product.category,
                "brand": self.product.brand,
                "price": self.product.price,
            },
            "facets": {
                name: (value.to_dict() if value is not None else None)
                for name, value in self.facets.items()
            },
            "errors": dict(self.errors),
            "generated_at": self.generated_at.isoformat(),
        }


def build_payloads(
    product: ProductFacts,
    snapshot: AnalyticsSnapshot,
    competitor_prices: Optional[Sequence[float]] = None,
    market: str = "global",
) -> Dict[str, Any]:
    return {
        FACET_SENTIMENT: TextInput(text=product.description, reviews=list(snapshot.reviews)),
        FACET_PERFORMANCE: PerformanceInput(
            price=product.price,
            views=snapshot.views,
            sales=snapshot.sales,
            reviews=list(snapshot.reviews),
            rating=snapshot.rating,
            competitor_prices=list(competitor_prices or []),
        ),
        FACET_HAZARD: HazardInput(
            name=product.name,
            description=product.description,
            ingredients=product.ingredients,
            category=product.category,
            id=product.id,
        ),
        FACET_COMPETITIVE: CompetitorQuery(
            product_name=product.name,
            category=product.category,
            price=product.price,
            brand=product.brand or None,
            market=market,
        ),
    }


def run_product_report(
    product: ProductFacts,
    snapshot: Optional[AnalyticsSnapshot] = None,
    competitor_prices: Optional[Sequence[float]] = None,
    competitor_source: Optional[CompetitorSource] = None,
    market_source: Optional[MarketDataSource] = None,
    classifier: Optional[TextClassifierClient] = None,
    facets: Optional[List[str]] = None,
) -> ProductReport:
    """
    Run the requested facets (all four by default) for one product.
    """
    if not product.name or not product.name.strip():
        raise ValidationError("Product name is required")
    unknown = [f for f in (facets or []) if f not in FACETS]
    if unknown:
        raise ValidationError(f"Unknown facet: {unknown[0]}")
    snapshot = snapshot or AnalyticsSnapshot()

    runner = FacetRunner({
        FACET_SENTIMENT: SentimentAnalyzer(),
        FACET_PERFORMANCE: PerformanceAnalyzer(),
        FACET_HAZARD: HazardAnalyzer(classifier=classifier),
        FACET_COMPETITIVE: CompetitorAnalyzer(
            competitor_source=competitor_source,
            market_source=market_source,
        ),
    })

    payloads = build_payloads(product, snapshot, competitor_prices)
    if facets is not None:
        payloads = {name: p for name, p in payloads.items() if name in facets}

    report = runner.execute(payloads)
    logger.info(
        f"Report for '{product.name}': {len(report.succeeded)}/{len(report.results)} facets"
    )

    return ProductReport(
        report_id=str(uuid.uuid4())[:8],
        product=product,
        facets=report.data,
        errors=report.errors,
    )
