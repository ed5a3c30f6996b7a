"""
Pydantic schemas for API request/response validation.

Required engine inputs are declared Optional here so that a missing field
reaches the analyzers, which reject it with their specific message.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime


# ─── Analysis Requests ───────────────────────────────────────────────────────

class SentimentRequest(BaseModel):
    text: Optional[str] = None
    reviews: List[Any] = Field([], description="Review strings or {text, rating} objects")


class PerformanceRequest(BaseModel):
    price: Optional[float] = None
    views: float = Field(0, ge=0)
    sales: float = Field(0, ge=0)
    reviews: List[Any] = []
    rating: float = Field(0, ge=0, le=5)
    competitor_prices: List[float] = []


class MarketTrendRequest(BaseModel):
    category: Optional[str] = None
    historical_data: Optional[List[Any]] = None
    market_size: Optional[float] = None


class AnalyticsPayload(BaseModel):
    views: float = Field(0, ge=0)
    sales: float = Field(0, ge=0)
    reviews: List[Any] = []
    rating: float = Field(0, ge=0, le=5)


class ProductReportRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: str = "General"
    brand: str = ""
    ingredients: Optional[Any] = None
    analytics: AnalyticsPayload = AnalyticsPayload()
    competitor_prices: List[float] = []
    facets: Optional[List[str]] = Field(
        None, description="Subset of sentiment | performance | hazard | competitive"
    )


class CatalogReportRequest(BaseModel):
    competitor_prices: List[float] = []
    facets: Optional[List[str]] = None


# ─── Competitor Requests ─────────────────────────────────────────────────────

class CompetitorAnalyzeRequest(BaseModel):
    product_name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    brand: Optional[str] = None
    market: str = "global"


class CompareProductsRequest(BaseModel):
    products: Optional[List[Dict[str, Any]]] = None


class MarketShareRequest(BaseModel):
    category: Optional[str] = None
    region: Optional[str] = None


# ─── Environmental Requests ──────────────────────────────────────────────────

class HazardRequest(BaseModel):
    product_name: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[Any] = None
    category: Optional[str] = None


class HazardCompareRequest(BaseModel):
    products: Optional[List[Dict[str, Any]]] = None


# ─── Catalog Requests ────────────────────────────────────────────────────────

class ProductCreateRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    description: str = ""
    category: str = "General"
    brand: str = ""
    ingredients: Optional[str] = None
    specifications: Dict[str, Any] = {}
    images: List[str] = []
    tags: List[str] = []
    analytics: Dict[str, Any] = {}


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    ingredients: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    analytics: Optional[Dict[str, Any]] = None


# ─── Response Schemas ────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
