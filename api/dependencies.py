"""
Request-scoped collaborators injected with FastAPI's Depends.
Tests swap these through `app.dependency_overrides`.
"""

from typing import Optional

from analyzers.classifier import TextClassifierClient
from analyzers.sources import (
    CompetitorSource,
    MarketDataSource,
    SimulatedCompetitorSource,
    SimulatedMarketDataSource,
)
from config.settings import settings
from db.repository import ProductRepository, SqlProductRepository


def get_competitor_source() -> CompetitorSource:
    return SimulatedCompetitorSource()


def get_market_source() -> MarketDataSource:
    return SimulatedMarketDataSource()


def get_classifier() -> Optional[TextClassifierClient]:
    """External toxicity model, only when an API token is configured."""
    if not settings.HF_API_TOKEN:
        return None
    return TextClassifierClient()


def get_repository() -> ProductRepository:
    return SqlProductRepository()
