"""
Market Data Sources
--------------------
Competitor records and market context are supplied by injectable sources so
that the scoring functions never generate data themselves.

  CompetitorSource.fetch(...)  -> List[CompetitorRecord]
  CompetitorSource.get(id)     -> CompetitorRecord
  MarketDataSource.trend(...)  -> MarketTrend
  MarketDataSource.insights()  -> MarketInsights
  MarketDataSource.market_share(...) -> MarketShareReport

Implementations:
  - StaticCompetitorSource / StaticMarketDataSource: caller-provided data
  - SimulatedCompetitorSource / SimulatedMarketDataSource: seeded synthetic
    data for demos and fixtures. The generator is seeded from the request
    itself, so identical requests produce identical data.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from analyzers.errors import ValidationError
from config.settings import settings
from models.schemas import CompetitorRecord
from utils.numeric import round_half_up

logger = logging.getLogger(__name__)

QUARTERS = ("Q1", "Q2", "Q3", "Q4")


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class QuarterDemand:
    quarter: str
    demand: float

    def to_dict(self) -> Dict[str, Any]:
        return {"quarter": self.quarter, "demand": round(self.demand, 2)}


@dataclass
class MarketTrend:
    category: str
    market_growth_pct: float
    seasonality: List[QuarterDemand]
    key_drivers: List[str]
    opportunities: List[str]
    threats: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "market_growth_pct": round(self.market_growth_pct, 2),
            "seasonality": [q.to_dict() for q in self.seasonality],
            "key_drivers": list(self.key_drivers),
            "opportunities": list(self.opportunities),
            "threats": list(self.threats),
        }


@dataclass
class MarketInsights:
    market_size: int
    growth_rate_pct: float
    key_trends: List[str]
    opportunities: List[str]
    threats: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_size": self.market_size,
            "growth_rate_pct": self.growth_rate_pct,
            "key_trends": list(self.key_trends),
            "opportunities": list(self.opportunities),
            "threats": list(self.threats),
        }


@dataclass
class MarketShareEntry:
    name: str
    share_pct: float
    revenue: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "share_pct": self.share_pct, "revenue": self.revenue}


@dataclass
class MarketShareReport:
    category: str
    region: str
    total_market_size: int
    competitors: List[MarketShareEntry]
    growth_rate_pct: float
    seasonality: List[QuarterDemand] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "region": self.region,
            "total_market_size": self.total_market_size,
            "competitors": [c.to_dict() for c in self.competitors],
            "trends": {
                "growth_rate_pct": self.growth_rate_pct,
                "seasonality": [q.to_dict() for q in self.seasonality],
            },
        }


# ─── Interfaces ──────────────────────────────────────────────────────────────


class CompetitorSource(ABC):
    @abstractmethod
    def fetch(
        self,
        product_name: str,
        category: str,
        price: float,
        brand: Optional[str] = None,
        market: str = "global",
    ) -> List[CompetitorRecord]:
        raise NotImplementedError

    @abstractmethod
    def get(self, competitor_id: str) -> CompetitorRecord:
        """Raises KeyError when the competitor is unknown."""
        raise NotImplementedError


class MarketDataSource(ABC):
    @abstractmethod
    def trend(
        self,
        category: str,
        historical_data: Optional[Sequence[Any]] = None,
        market_size: Optional[float] = None,
    ) -> MarketTrend:
        raise NotImplementedError

    @abstractmethod
    def insights(self, category: str, market: str = "global") -> MarketInsights:
        raise NotImplementedError

    @abstractmethod
    def market_share(self, category: str, region: Optional[str] = None) -> MarketShareReport:
        raise NotImplementedError


def require_category(category: Optional[str]) -> str:
    if not category or not str(category).strip():
        raise ValidationError("Category is required")
    return str(category).strip()


# ─── Static sources ──────────────────────────────────────────────────────────


class StaticCompetitorSource(CompetitorSource):
    """Serves a fixed list of competitor records, regardless of the query."""

    def __init__(self, records: Sequence[CompetitorRecord]):
        self.records = list(records)

    def fetch(self, product_name, category, price, brand=None, market="global"):
        return list(self.records)

    def get(self, competitor_id: str) -> CompetitorRecord:
        for record in self.records:
            if record.id == competitor_id:
                return record
        raise KeyError(competitor_id)


class StaticMarketDataSource(MarketDataSource):
    def __init__(
        self,
        trend: MarketTrend,
        insights: MarketInsights,
        market_share: MarketShareReport,
    ):
        self._trend = trend
        self._insights = insights
        self._market_share = market_share

    def trend(self, category, historical_data=None, market_size=None) -> MarketTrend:
        require_category(category)
        return self._trend

    def insights(self, category, market="global") -> MarketInsights:
        return self._insights

    def market_share(self, category, region=None) -> MarketShareReport:
        require_category(category)
        return self._market_share


# ─── Simulated sources ───────────────────────────────────────────────────────


def stable_seed(*parts: Any, base: int = 0) -> int:
    """Process-independent seed (str hash() is salted per interpreter run)."""
    digest = hashlib.sha256("|".join(str(p) for p in parts).encode()).hexdigest()
    return (int(digest[:12], 16) + base) % 2**32


def _sample(rng: np.random.Generator, pool: Sequence[str], low: int, high: int) -> List[str]:
    """Random subset of `pool` with size in [low, high], in shuffled order."""
    k = int(rng.integers(low, high + 1))
    order = rng.permutation(len(pool))[:k]
    return [pool[i] for i in order]


class SimulatedCompetitorSource(CompetitorSource):
    """
    Synthetic competitors for demo / development.
    Prices sit within -20%..+40% of the subject price.
    """

    NAMES = [
        "PremiumTech Pro",
        "SmartSolutions Elite",
        "InnovateMax Plus",
        "FutureTech Advanced",
        "NextGen Premium",
    ]

    FEATURES = [
        "AI-powered analytics", "Cloud integration", "Mobile app",
        "Real-time monitoring", "Customizable dashboard", "API access",
        "24/7 support", "Advanced security", "Scalable architecture",
        "Multi-language support",
    ]

    STRENGTHS = [
        "Strong brand recognition", "Wide distribution network",
        "Innovative technology", "Excellent customer service",
        "Competitive pricing", "Product reliability",
        "Market expertise", "Strong partnerships",
    ]

    WEAKNESSES = [
        "Limited customization", "Higher price point",
        "Slower innovation cycle", "Limited market presence",
        "Customer service delays", "Complex implementation",
        "Limited integrations", "Resource constraints",
    ]

    def __init__(self, seed: Optional[int] = None):
        self.seed = settings.SIMULATION_SEED if seed is None else seed

    def _record(self, rng: np.random.Generator, index: int, price: float) -> CompetitorRecord:
        name = self.NAMES[index % len(self.NAMES)]
        return CompetitorRecord(
            id=f"comp_{index + 1}",
            name=name,
            brand=f"{name} Brand",
            price=round_half_up(price * (0.8 + rng.random() * 0.6), 2),
            rating=round_half_up(3 + rng.random() * 2, 1),
            review_count=int(rng.integers(100, 2100)),
            market_share_pct=round_half_up(5 + rng.random() * 20, 1),
            features=tuple(_sample(rng, self.FEATURES, 3, 7)),
            strengths=tuple(_sample(rng, self.STRENGTHS, 2, 4)),
            weaknesses=tuple(_sample(rng, self.WEAKNESSES, 1, 3)),
        )

    def fetch(self, product_name, category, price, brand=None, market="global"):
        rng = np.random.default_rng(
            stable_seed(product_name, category, price, brand or "", market, base=self.seed)
        )
        records = [self._record(rng, i, price) for i in range(len(self.NAMES))]
        logger.info(
            f"Simulated {len(records)} competitors for '{product_name}' ({category})"
        )
        return records

    def get(self, competitor_id: str) -> CompetitorRecord:
        if not competitor_id:
            raise KeyError(competitor_id)
        rng = np.random.default_rng(stable_seed("competitor", competitor_id, base=self.seed))
        return CompetitorRecord(
            id=competitor_id,
            name=f"Competitor {competitor_id}",
            brand="Competitor Brand",
            price=round_half_up(50 + rng.random() * 200, 2),
            rating=round_half_up(3 + rng.random() * 2, 1),
            review_count=int(rng.integers(50, 1050)),
            market_share_pct=round_half_up(2 + rng.random() * 15, 1),
            features=tuple(_sample(rng, self.FEATURES, 3, 7)),
            strengths=tuple(_sample(rng, self.STRENGTHS, 2, 4)),
            weaknesses=tuple(_sample(rng, self.WEAKNESSES, 1, 3)),
        )


class SimulatedMarketDataSource(MarketDataSource):
    """Synthetic market context for demo / development."""

    KEY_DRIVERS = [
        "Digital transformation",
        "Sustainability focus",
        "Consumer preferences",
        "Technology adoption",
    ]
    TREND_OPPORTUNITIES = [
        "E-commerce expansion",
        "Product innovation",
        "Market penetration",
        "Customer experience",
    ]
    TREND_THREATS = [
        "Competition increase",
        "Economic uncertainty",
        "Regulatory changes",
        "Supply chain issues",
    ]

    KEY_TRENDS = [
        "Digital transformation acceleration",
        "Sustainability focus",
        "Personalization demand",
        "AI/ML integration",
        "Mobile-first approach",
    ]
    INSIGHT_OPPORTUNITIES = [
        "Emerging markets expansion",
        "Product innovation",
        "Partnership opportunities",
        "Digital marketing growth",
    ]
    INSIGHT_THREATS = [
        "Economic uncertainty",
        "Regulatory changes",
        "Supply chain disruptions",
        "Competition intensification",
    ]

    # name, share %, revenue
    SHARE_TABLE = [
        ("Market Leader", 25.5, 250000),
        ("Strong Competitor", 18.2, 182000),
        ("Your Product", 12.8, 128000),
        ("Emerging Player", 8.9, 89000),
        ("Others", 34.6, 346000),
    ]

    def __init__(self, seed: Optional[int] = None):
        self.seed = settings.SIMULATION_SEED if seed is None else seed

    def _rng(self, *parts: Any) -> np.random.Generator:
        return np.random.default_rng(stable_seed(*parts, base=self.seed))

    def _seasonality(self, rng: np.random.Generator) -> List[QuarterDemand]:
        return [QuarterDemand(q, float(50 + rng.random() * 100)) for q in QUARTERS]

    def trend(self, category, historical_data=None, market_size=None) -> MarketTrend:
        category = require_category(category)
        rng = self._rng("trend", category)
        return MarketTrend(
            category=category,
            market_growth_pct=float(5 + rng.random() * 20),
            seasonality=self._seasonality(rng),
            key_drivers=list(self.KEY_DRIVERS),
            opportunities=list(self.TREND_OPPORTUNITIES),
            threats=list(self.TREND_THREATS),
        )

    def insights(self, category, market="global") -> MarketInsights:
        rng = self._rng("insights", category, market)
        return MarketInsights(
            market_size=int(rng.integers(1_000_000, 6_000_000)),
            growth_rate_pct=round_half_up(8 + rng.random() * 15, 1),
            key_trends=list(self.KEY_TRENDS),
            opportunities=list(self.INSIGHT_OPPORTUNITIES),
            threats=list(self.INSIGHT_THREATS),
        )

    def market_share(self, category, region=None) -> MarketShareReport:
        category = require_category(category)
        region = region or "Global"
        rng = self._rng("share", category, region)
        return MarketShareReport(
            category=category,
            region=region,
            total_market_size=int(rng.integers(100_000, 1_100_000)),
            competitors=[MarketShareEntry(n, s, r) for n, s, r in self.SHARE_TABLE],
            growth_rate_pct=round_half_up(5 + rng.random() * 10, 1),
            seasonality=self._seasonality(rng),
        )
