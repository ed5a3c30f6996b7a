"""
Core data models for the Product Insight Engine.
"""

from .schemas import (
    ReviewEntry,
    ProductFacts,
    AnalyticsSnapshot,
    CompetitorRecord,
    Recommendation,
    SentimentResult,
    PriceAnalysis,
    PerformanceResult,
    CompetitiveAnalysis,
    CategoryScore,
    HazardAssessment,
)

__all__ = [
    "ReviewEntry",
    "ProductFacts",
    "AnalyticsSnapshot",
    "CompetitorRecord",
    "Recommendation",
    "SentimentResult",
    "PriceAnalysis",
    "PerformanceResult",
    "CompetitiveAnalysis",
    "CategoryScore",
    "HazardAssessment",
]
