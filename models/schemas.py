"""
Core data models / schemas for the Product Insight Engine.

Inputs (ProductFacts, AnalyticsSnapshot, CompetitorRecord) are immutable and
owned by their callers. Results are created fresh per request.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from utils.numeric import to_float


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

POSITION_COMPETITIVE = "competitive"
POSITION_AVERAGE = "average"
POSITION_PREMIUM = "premium"

BAND_LOW = "LOW"
BAND_MODERATE = "MODERATE"
BAND_HIGH = "HIGH"


def _as_tuple(values: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReviewEntry:
    text: str
    rating: Optional[float] = None

    @classmethod
    def coerce(cls, value: Any) -> "ReviewEntry":
        """Accept a plain string, a mapping with text/rating, or a ReviewEntry."""
        if isinstance(value, ReviewEntry):
            return value
        if isinstance(value, Mapping):
            rating = value.get("rating")
            return cls(
                text=str(value.get("text") or ""),
                rating=to_float(rating) if rating is not None else None,
            )
        text = getattr(value, "text", None)
        if text is not None:
            return cls(text=str(text), rating=getattr(value, "rating", None))
        return cls(text=str(value))


@dataclass(frozen=True)
class ProductFacts:
    name: str
    description: str = ""
    price: Optional[float] = None
    category: str = "General"
    ingredients: Optional[str] = None
    brand: str = ""
    images: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    id: Optional[str] = None


@dataclass(frozen=True)
class AnalyticsSnapshot:
    views: int = 0
    sales: int = 0
    reviews: Tuple[ReviewEntry, ...] = ()
    rating: float = 0.0

    @classmethod
    def build(
        cls,
        views: Any = 0,
        sales: Any = 0,
        reviews: Optional[Sequence[Any]] = None,
        rating: Any = 0.0,
    ) -> "AnalyticsSnapshot":
        return cls(
            views=int(to_float(views)),
            sales=int(to_float(sales)),
            reviews=tuple(ReviewEntry.coerce(r) for r in (reviews or [])),
            rating=to_float(rating),
        )


@dataclass(frozen=True)
class CompetitorRecord:
    id: str
    name: str
    brand: str = ""
    price: float = 0.0
    rating: float = 0.0
    review_count: int = 0
    market_share_pct: float = 0.0
    features: Tuple[str, ...] = ()
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> "CompetitorRecord":
        """
        Build a record from loosely-typed input. Missing numeric fields become 0;
        numeric strings ("4.3") are accepted.
        """
        name = str(data.get("name") or f"Product {index + 1}")
        return cls(
            id=str(data.get("id") or f"product_{index + 1}"),
            name=name,
            brand=str(data.get("brand") or ""),
            price=to_float(data.get("price")),
            rating=to_float(data.get("rating")),
            review_count=int(to_float(data.get("review_count", data.get("reviewCount")))),
            market_share_pct=to_float(data.get("market_share_pct", data.get("marketShare"))),
            features=_as_tuple(data.get("features")),
            strengths=_as_tuple(data.get("strengths")),
            weaknesses=_as_tuple(data.get("weaknesses")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "price": self.price,
            "rating": self.rating,
            "review_count": self.review_count,
            "market_share_pct": self.market_share_pct,
            "features": list(self.features),
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Recommendation:
    type: str                       # conversion | quality | pricing | engagement | warning | info
    priority: str                   # high | medium | low
    suggestion: str
    impact: Optional[str] = None
    title: Optional[str] = None
    product: Optional[str] = None   # set on per-product comparison advice

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "priority": self.priority,
            "suggestion": self.suggestion,
        }
        for key in ("impact", "title", "product"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class SentimentResult:
    label: str
    score: float
    keywords: List[str]
    text_length: int
    word_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentiment": self.label,
            "score": round(self.score, 4),
            "keywords": list(self.keywords),
            "text_length": self.text_length,
            "word_count": self.word_count,
        }


@dataclass
class PriceAnalysis:
    position: str
    difference_pct: float
    avg_competitor_price: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "difference_pct": self.difference_pct,
            "avg_competitor_price": self.avg_competitor_price,
        }


@dataclass
class PerformanceResult:
    performance_score: int
    conversion_rate: float
    avg_rating: float
    review_count: int
    price_analysis: PriceAnalysis
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "performance_score": self.performance_score,
            "conversion_rate": self.conversion_rate,
            "avg_rating": self.avg_rating,
            "review_count": self.review_count,
            "price_analysis": self.price_analysis.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class CompetitiveAnalysis:
    price_position: str
    price_difference_pct: float
    avg_competitor_price: float
    competitive_advantage: str      # "Price" | "Quality/Features"
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_position": self.price_position,
            "price_difference_pct": self.price_difference_pct,
            "avg_competitor_price": self.avg_competitor_price,
            "competitive_advantage": self.competitive_advantage,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class CategoryScore:
    score: float                    # [0, 1]
    label: str                      # LOW | MODERATE | HIGH

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "label": self.label}


@dataclass
class HazardAssessment:
    toxicity: CategoryScore
    chemical_risks: CategoryScore
    environmental_impact: CategoryScore
    risk_score: float
    risk_level: str
    recommendations: List[Recommendation] = field(default_factory=list)
    model_toxicity: Optional[Dict[str, Any]] = None
    unavailable_facets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "toxicity": self.toxicity.to_dict(),
            "chemical_risks": self.chemical_risks.to_dict(),
            "environmental_impact": self.environmental_impact.to_dict(),
            "risk_score": round(self.risk_score, 4),
            "risk_level": self.risk_level,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "model_toxicity": self.model_toxicity,
            "unavailable_facets": list(self.unavailable_facets),
        }
