"""
Competitive Position Analyzer
------------------------------
Compares a subject price against a set of competitor records:

  avg      = mean(competitor prices)
  position = competitive (<) | average (==) | premium (>)
  diff %   = (price - avg) / avg * 100
  advantage = "Price" if price < avg else "Quality/Features"

Per-record composite score (0-100):

  score = round((rating*20 + min(share*2, 100) + min(reviews/10, 100)) / 3)

Listing order is market share descending; ranking uses the composite score.

Input:  CompetitorQuery
Output: CompetitorReport
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from analyzers.base import Analyzer
from analyzers.errors import ValidationError
from analyzers.pricing import (
    classify_price_position,
    price_difference_pct,
    reference_price,
    require_positive_price,
)
from analyzers.recommendations import COMPETITIVE_RULES, RuleSet
from analyzers.sources import (
    CompetitorSource,
    MarketDataSource,
    MarketInsights,
    SimulatedCompetitorSource,
    SimulatedMarketDataSource,
)
from models.schemas import CompetitiveAnalysis, CompetitorRecord
from utils.numeric import round_half_up, round_int

logger = logging.getLogger(__name__)

RecordLike = Union[CompetitorRecord, Mapping[str, Any]]

ADVANTAGE_PRICE = "Price"
ADVANTAGE_QUALITY = "Quality/Features"


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class CompetitorQuery:
    product_name: Optional[str]
    category: Optional[str]
    price: Any
    brand: Optional[str] = None
    market: str = "global"


@dataclass
class RankedCompetitor:
    rank: int
    id: str
    name: str
    competitive_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "id": self.id,
            "name": self.name,
            "competitive_score": self.competitive_score,
        }


@dataclass
class CompetitorReport:
    competitors: List[CompetitorRecord]
    analysis: CompetitiveAnalysis
    market_insights: Optional[MarketInsights]
    ranking: List[RankedCompetitor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competitors": [c.to_dict() for c in self.competitors],
            "analysis": self.analysis.to_dict(),
            "market_insights": self.market_insights.to_dict() if self.market_insights else None,
            "ranking": [r.to_dict() for r in self.ranking],
        }


# ─── Scoring ─────────────────────────────────────────────────────────────────


def as_record(item: RecordLike, index: int = 0) -> CompetitorRecord:
    if isinstance(item, CompetitorRecord):
        return item
    return CompetitorRecord.from_dict(item, index)


def competitive_score(record: CompetitorRecord) -> int:
    """Composite 0-100 blend of rating, market share and review volume."""
    rating_score = record.rating * 20
    share_score = min(record.market_share_pct * 2, 100)
    review_score = min(record.review_count / 10, 100)
    return round_int((rating_score + share_score + review_score) / 3)


def rank_by_market_share(records: Sequence[CompetitorRecord]) -> List[CompetitorRecord]:
    return sorted(records, key=lambda r: r.market_share_pct, reverse=True)


def rank_by_competitive_score(records: Sequence[CompetitorRecord]) -> List[RankedCompetitor]:
    scored = [(competitive_score(r), r) for r in records]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [
        RankedCompetitor(rank=i, id=r.id, name=r.name, competitive_score=score)
        for i, (score, r) in enumerate(scored, 1)
    ]


def analyze_competitive_position(
    price: Any,
    competitors: Sequence[RecordLike],
    fallback_price: Optional[float] = None,
    rules: RuleSet = COMPETITIVE_RULES,
) -> CompetitiveAnalysis:
    """
    Position of `price` against the competitor average. An empty competitor
    list is rejected unless a fallback reference price is supplied.
    """
    price = require_positive_price(price)
    records = [as_record(c, i) for i, c in enumerate(competitors)]

    avg = reference_price([r.price for r in records], fallback=fallback_price)
    position = classify_price_position(price, avg)

    metrics = {
        "price": price,
        "avg_competitor_price": avg,
        "max_competitor_rating": max((r.rating for r in records), default=0.0),
    }

    return CompetitiveAnalysis(
        price_position=position,
        price_difference_pct=round_half_up(price_difference_pct(price, avg), 2),
        avg_competitor_price=round_half_up(avg, 2),
        competitive_advantage=ADVANTAGE_PRICE if price < avg else ADVANTAGE_QUALITY,
        recommendations=rules.evaluate(metrics),
    )


# ─── CompetitorAnalyzer ──────────────────────────────────────────────────────


class CompetitorAnalyzer(Analyzer):
    """
    Competitive facet: fetch competitors from the injected source, analyze the
    subject's position, and attach market context.
    A market-data failure leaves `market_insights` empty rather than failing.
    """

    def __init__(
        self,
        competitor_source: Optional[CompetitorSource] = None,
        market_source: Optional[MarketDataSource] = None,
        rules: Optional[RuleSet] = None,
    ):
        super().__init__(name="CompetitorAnalyzer")
        self.competitor_source = competitor_source or SimulatedCompetitorSource()
        self.market_source = market_source or SimulatedMarketDataSource()
        self.rules = rules or COMPETITIVE_RULES

    def run(self, query: CompetitorQuery) -> CompetitorReport:
        if not query.product_name or not query.category:
            raise ValidationError("Product name and category are required")
        price = require_positive_price(query.price)

        competitors = self.competitor_source.fetch(
            query.product_name, query.category, price, query.brand, query.market
        )
        analysis = analyze_competitive_position(price, competitors, rules=self.rules)

        try:
            insights = self.market_source.insights(query.category, query.market)
        except Exception as e:
            self.logger.warning(f"Market insights unavailable for '{query.category}': {e}")
            insights = None

        self.logger.info(
            f"'{query.product_name}' vs {len(competitors)} competitors: "
            f"{analysis.price_position} ({analysis.price_difference_pct:+.2f}%)"
        )

        return CompetitorReport(
            competitors=rank_by_market_share(competitors),
            analysis=analysis,
            market_insights=insights,
            ranking=rank_by_competitive_score(competitors),
        )
