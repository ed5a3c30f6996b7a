"""
Configuration & Settings
Product Insight Engine
"""

from pydantic import BaseModel
from typing import Optional
import os


class Settings(BaseModel):
    # App
    APP_NAME: str = "Product Insight Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Catalog storage
    DATABASE_URL: str = "sqlite:///./product_insight.db"

    # Text signals
    # Thresholds apply to the raw summed lexicon score, not a per-word mean.
    SENTIMENT_POSITIVE_THRESHOLD: float = 0.5
    SENTIMENT_NEGATIVE_THRESHOLD: float = -0.5
    MAX_KEYWORDS: int = 10

    # Performance scoring
    CONVERSION_WEIGHT: float = 0.3
    RATING_WEIGHT: float = 10.0
    REVIEW_WEIGHT: float = 0.1
    REVIEW_CAP: int = 100
    POSITION_BONUS_COMPETITIVE: float = 20.0
    POSITION_BONUS_AVERAGE: float = 10.0
    POSITION_BONUS_PREMIUM: float = 0.0

    # Recommendation thresholds
    LOW_CONVERSION_RATE: float = 2.0
    PREMIUM_CONVERSION_RATE: float = 3.0
    MIN_HEALTHY_RATING: float = 4.0
    MIN_REVIEW_COUNT: int = 10

    # Competitive position
    PREMIUM_ALERT_RATIO: float = 1.2
    COMPETITOR_RATING_ALERT: float = 4.5

    # Multi-product comparison
    COMPARISON_PRICE_ALERT_RATIO: float = 1.3
    COMPARISON_MIN_RATING: float = 4.0
    PRICE_SPREAD_ALERT_RATIO: float = 2.0

    # Environmental hazards
    HAZARD_ALERT_SCORE: float = 0.5
    HIGH_AVERAGE_RISK: float = 0.6

    # Simulated market data (demo / fixture paths only)
    SIMULATION_SEED: int = 42

    # Optional external text classification
    HF_API_TOKEN: Optional[str] = os.getenv("HUGGINGFACE_API_KEY")
    HF_API_URL: str = "https://api-inference.huggingface.co/models"
    HF_TOXICITY_MODEL: str = "martin-ha/toxic-comment-model"
    REQUEST_TIMEOUT: int = 10
    MAX_RETRIES: int = 2

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


settings = Settings()
