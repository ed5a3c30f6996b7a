"""
Text Signal Extractor
----------------------
Turns free text (a description or a set of reviews) into:
  - a polarity score: the raw SUM of per-token lexicon valences
    (VADER lexicon, with a Porter-stem fallback lookup)
  - a label: > +0.5 positive, < -0.5 negative, otherwise neutral
  - up to 10 noun keywords (part-of-speech tagged), in order of appearance
  - text length and word count

The score is deliberately not divided by the token count, so long texts drift
toward the extreme labels. Thresholds are calibrated to that scale.

Input:  TextInput
Output: SentimentResult
"""

import re
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS
from textblob import Word
from textblob.en.taggers import PatternTagger
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from analyzers.base import Analyzer
from analyzers.errors import ValidationError
from config.settings import settings
from models.schemas import ReviewEntry, SentimentResult

logger = logging.getLogger(__name__)


@dataclass
class TextInput:
    text: Optional[str] = None
    reviews: Sequence[Any] = field(default_factory=list)


# ─── Text assembly ───────────────────────────────────────────────────────────


def assemble_text(text: Optional[str], reviews: Optional[Sequence[Any]]) -> str:
    """
    Review texts, joined by a single space, take precedence over the primary
    text; the primary text is used when there are no reviews.
    """
    if not (text or "").strip() and not reviews:
        raise ValidationError("Text or reviews are required")
    if reviews:
        return " ".join(ReviewEntry.coerce(r).text for r in reviews)
    return text


def split_words(text: str) -> List[str]:
    """Split on single spaces; empty artifacts from repeated spaces are kept."""
    return text.split(" ")


# ─── Lexicon scoring ─────────────────────────────────────────────────────────

_EDGE_PUNCT = re.compile(r"^[^\w]+|[^\w]+$")


@lru_cache(maxsize=1)
def _vader_lexicon() -> Dict[str, float]:
    return dict(SentimentIntensityAnalyzer().lexicon)


def _stem(token: str) -> str:
    return Word(token).stem()


class LexiconScorer:
    """Sums signed valences of tokens found in a sentiment lexicon."""

    def __init__(self, lexicon: Optional[Mapping[str, float]] = None):
        self.lexicon = dict(lexicon) if lexicon is not None else _vader_lexicon()
        self._stemmed: Dict[str, float] = {}
        for word, weight in self.lexicon.items():
            if word.isalpha():
                # first entry wins so "love" is not overwritten by "loved"
                self._stemmed.setdefault(_stem(word), weight)

    def token_polarity(self, token: str) -> float:
        lowered = token.lower()
        if not lowered:
            return 0.0
        if lowered in self.lexicon:
            return float(self.lexicon[lowered])
        bare = _EDGE_PUNCT.sub("", lowered)
        if not bare:
            return 0.0
        if bare in self.lexicon:
            return float(self.lexicon[bare])
        return float(self._stemmed.get(_stem(bare), 0.0))

    def score(self, tokens: Sequence[str]) -> float:
        return sum(self.token_polarity(t) for t in tokens)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self.lexicon


@lru_cache(maxsize=1)
def default_scorer() -> LexiconScorer:
    """Shared VADER-backed scorer; stemming the lexicon is done once per process."""
    return LexiconScorer()


def classify_polarity(
    score: float,
    positive_threshold: float = settings.SENTIMENT_POSITIVE_THRESHOLD,
    negative_threshold: float = settings.SENTIMENT_NEGATIVE_THRESHOLD,
) -> str:
    if score > positive_threshold:
        return "positive"
    if score < negative_threshold:
        return "negative"
    return "neutral"


# ─── Keyword extraction ──────────────────────────────────────────────────────

_NOUN_TAGS = ("NN", "NNS", "NNP", "NNPS")


@lru_cache(maxsize=1)
def _tagger() -> PatternTagger:
    return PatternTagger()


def extract_keywords(text: str, limit: int = settings.MAX_KEYWORDS) -> List[str]:
    """
    Noun tokens, in order of appearance, duplicates kept.

    Tagging uses textblob's pattern tagger, which ships its lexicon and
    context rules with the package. Stop words tagged as nouns are skipped.
    """
    keywords: List[str] = []
    for token, tag in _tagger().tag(text):
        if tag not in _NOUN_TAGS or token.lower() in ENGLISH_STOP_WORDS:
            continue
        keywords.append(token)
        if len(keywords) >= limit:
            break
    return keywords


# ─── Public operation ────────────────────────────────────────────────────────


def analyze_sentiment(
    text: Optional[str] = None,
    reviews: Optional[Sequence[Any]] = None,
    scorer: Optional[LexiconScorer] = None,
) -> SentimentResult:
    analysis_text = assemble_text(text, reviews)
    scorer = scorer or default_scorer()

    words = split_words(analysis_text)
    score = scorer.score(words)

    return SentimentResult(
        label=classify_polarity(score),
        score=score,
        keywords=extract_keywords(analysis_text),
        text_length=len(analysis_text),
        word_count=len(words),
    )


class SentimentAnalyzer(Analyzer):
    """
    Sentiment facet.

    Input:  TextInput
    Output: SentimentResult
    """

    def __init__(self, scorer: Optional[LexiconScorer] = None):
        super().__init__(name="SentimentAnalyzer")
        self.scorer = scorer or default_scorer()

    def run(self, payload: TextInput) -> SentimentResult:
        result = analyze_sentiment(payload.text, payload.reviews, scorer=self.scorer)
        self.logger.info(
            f"Sentiment={result.label} score={result.score:+.2f} "
            f"words={result.word_count} keywords={len(result.keywords)}"
        )
        return result
