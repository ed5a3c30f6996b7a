from .base import Analyzer, AnalysisResult, FacetReport, FacetRunner
from .errors import AnalysisError, ValidationError, UpstreamUnavailable, InternalError
from .text_signals import SentimentAnalyzer, analyze_sentiment
from .performance import PerformanceAnalyzer, score_performance
from .competitive import CompetitorAnalyzer, analyze_competitive_position, competitive_score
from .hazards import HazardAnalyzer, assess_hazards, compare_hazards
from .aggregator import ComparisonAnalyzer, compare_products

__all__ = [
    "Analyzer", "AnalysisResult", "FacetReport", "FacetRunner",
    "AnalysisError", "ValidationError", "UpstreamUnavailable", "InternalError",
    "SentimentAnalyzer", "analyze_sentiment",
    "PerformanceAnalyzer", "score_performance",
    "CompetitorAnalyzer", "analyze_competitive_position", "competitive_score",
    "HazardAnalyzer", "assess_hazards", "compare_hazards",
    "ComparisonAnalyzer", "compare_products",
]
