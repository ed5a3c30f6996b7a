"""
Environmental Hazard Scorer
----------------------------
Keyword-driven hazard classification over name + description + ingredients.

Each category is a two-level step function: any keyword present sets the
category's fixed high-band value, otherwise its fixed low-band value.

  category              hit          miss
  toxicity              0.7 HIGH     0.2 LOW
  chemical_risks        0.6 MODERATE 0.3 LOW
  environmental_impact  0.8 HIGH     0.2 LOW

  risk_score = mean of the three category scores  (always within [0, 1])

The multi-product variant ranks products by risk_score ascending to name the
best and worst choice, and warns when the group mean exceeds 0.6.

Input:  HazardInput / sequence of HazardInput (or dicts)
Output: HazardAssessment / HazardComparison
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from analyzers.base import Analyzer
from analyzers.classifier import TextClassifierClient
from analyzers.errors import UpstreamUnavailable, ValidationError
from analyzers.recommendations import (
    HAZARD_CATEGORY_RULES,
    HAZARD_COMPARISON_RULES,
    HAZARD_RULES,
)
from models.schemas import (
    BAND_HIGH,
    BAND_LOW,
    BAND_MODERATE,
    CategoryScore,
    HazardAssessment,
    Recommendation,
)
from utils.numeric import mean

logger = logging.getLogger(__name__)


# ─── Keyword table ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HazardCategory:
    name: str
    keywords: Tuple[str, ...]
    hit: CategoryScore
    miss: CategoryScore

    def assess(self, text: str) -> CategoryScore:
        return self.hit if any(kw in text for kw in self.keywords) else self.miss


TOXICITY = HazardCategory(
    name="toxicity",
    keywords=("toxic", "hazardous", "dangerous", "poison", "carcinogen"),
    hit=CategoryScore(0.7, BAND_HIGH),
    miss=CategoryScore(0.2, BAND_LOW),
)
CHEMICAL_RISKS = HazardCategory(
    name="chemical_risks",
    keywords=("chemical", "synthetic", "artificial", "preservative"),
    hit=CategoryScore(0.6, BAND_MODERATE),
    miss=CategoryScore(0.3, BAND_LOW),
)
ENVIRONMENTAL_IMPACT = HazardCategory(
    name="environmental_impact",
    keywords=("non-biodegradable", "plastic", "pollution", "waste"),
    hit=CategoryScore(0.8, BAND_HIGH),
    miss=CategoryScore(0.2, BAND_LOW),
)

HAZARD_CATEGORIES = (TOXICITY, CHEMICAL_RISKS, ENVIRONMENTAL_IMPACT)


def risk_band(score: float) -> str:
    """Overall band for a [0, 1] risk score."""
    if score > 0.6:
        return BAND_HIGH
    if score >= 0.4:
        return BAND_MODERATE
    return BAND_LOW


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class HazardInput:
    name: Optional[str]
    description: Optional[str]
    ingredients: Any = None
    category: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HazardInput":
        return cls(
            name=data.get("name") or data.get("product_name"),
            description=data.get("description"),
            ingredients=data.get("ingredients"),
            category=data.get("category"),
            id=data.get("id"),
        )


@dataclass
class ProductHazard:
    product_id: Optional[str]
    product_name: str
    analysis: HazardAssessment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "analysis": self.analysis.to_dict(),
        }


@dataclass
class ComparisonInsight:
    type: str                 # best_choice | warning
    title: str
    description: str
    product_name: str
    risk_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "product_name": self.product_name,
            "risk_score": round(self.risk_score, 4),
        }


@dataclass
class HazardComparison:
    products: List[ProductHazard]
    insights: List[ComparisonInsight]
    recommendations: List[Recommendation] = field(default_factory=list)
    avg_risk_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products": [p.to_dict() for p in self.products],
            "insights": [i.to_dict() for i in self.insights],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "avg_risk_score": round(self.avg_risk_score, 4),
        }


# ─── Scoring ─────────────────────────────────────────────────────────────────


def _ingredients_text(ingredients: Any) -> str:
    if not ingredients:
        return ""
    if isinstance(ingredients, str):
        return ingredients
    return ", ".join(str(i) for i in ingredients)


def build_hazard_text(name: str, description: str, ingredients: Any = None) -> str:
    """Single lower-cased blob the keyword lookups run against."""
    text = f"{name} - {description}"
    extra = _ingredients_text(ingredients)
    if extra:
        text = f"{text} Ingredients: {extra}"
    return text.lower()


def _require_text_fields(name: Optional[str], description: Optional[str]) -> None:
    if not name or not str(name).strip() or not description or not str(description).strip():
        raise ValidationError("Product name and description are required")


def assess_hazards(
    name: Optional[str],
    description: Optional[str],
    ingredients: Any = None,
    category: Optional[str] = None,
    classifier: Optional[TextClassifierClient] = None,
) -> HazardAssessment:
    _require_text_fields(name, description)
    text = build_hazard_text(name, description, ingredients)

    scores = {cat.name: cat.assess(text) for cat in HAZARD_CATEGORIES}
    risk = round(mean(s.score for s in scores.values()), 4)

    metrics = {cat: s.score for cat, s in scores.items()}
    metrics["category"] = (category or "").strip().lower()
    recommendations = HAZARD_RULES.evaluate(metrics) + HAZARD_CATEGORY_RULES.evaluate(metrics)

    model_toxicity = None
    unavailable: List[str] = []
    if classifier is not None:
        try:
            model_toxicity = classifier.classify(text)
        except UpstreamUnavailable as e:
            logger.warning(f"Toxicity classifier skipped for '{name}': {e}")
            unavailable.append("model_toxicity")

    return HazardAssessment(
        toxicity=scores[TOXICITY.name],
        chemical_risks=scores[CHEMICAL_RISKS.name],
        environmental_impact=scores[ENVIRONMENTAL_IMPACT.name],
        risk_score=risk,
        risk_level=risk_band(risk),
        recommendations=recommendations,
        model_toxicity=model_toxicity,
        unavailable_facets=unavailable,
    )


def compare_hazards(
    products: Optional[Sequence[Any]],
    classifier: Optional[TextClassifierClient] = None,
) -> HazardComparison:
    if not products or len(products) < 2:
        raise ValidationError("At least 2 products are required for comparison")

    inputs = [p if isinstance(p, HazardInput) else HazardInput.from_dict(p) for p in products]
    for i, item in enumerate(inputs, 1):
        try:
            _require_text_fields(item.name, item.description)
        except ValidationError:
            raise ValidationError(f"Product {i}: name and description are required") from None

    results = [
        ProductHazard(
            product_id=item.id,
            product_name=item.name,
            analysis=assess_hazards(
                item.name, item.description, item.ingredients, item.category, classifier
            ),
        )
        for item in inputs
    ]

    # stable: ties keep input order
    by_risk = sorted(results, key=lambda r: r.analysis.risk_score)
    best, worst = by_risk[0], by_risk[-1]
    insights = [
        ComparisonInsight(
            type="best_choice",
            title="Most Environmentally Friendly",
            description=f"{best.product_name} has the lowest environmental risk score.",
            product_name=best.product_name,
            risk_score=best.analysis.risk_score,
        ),
        ComparisonInsight(
            type="warning",
            title="Highest Environmental Risk",
            description=f"{worst.product_name} has the highest environmental risk score.",
            product_name=worst.product_name,
            risk_score=worst.analysis.risk_score,
        ),
    ]

    avg_risk = mean(r.analysis.risk_score for r in results)
    return HazardComparison(
        products=results,
        insights=insights,
        recommendations=HAZARD_COMPARISON_RULES.evaluate({"avg_risk_score": avg_risk}),
        avg_risk_score=avg_risk,
    )


# ─── HazardAnalyzer ──────────────────────────────────────────────────────────


class HazardAnalyzer(Analyzer):
    """
    Hazard facet.

    Input:  HazardInput
    Output: HazardAssessment
    """

    def __init__(self, classifier: Optional[TextClassifierClient] = None):
        super().__init__(name="HazardAnalyzer")
        self.classifier = classifier

    def run(self, payload: HazardInput) -> HazardAssessment:
        result = assess_hazards(
            payload.name,
            payload.description,
            payload.ingredients,
            payload.category,
            classifier=self.classifier,
        )
        self.logger.info(
            f"'{payload.name}' risk={result.risk_score:.2f} ({result.risk_level}) "
            f"recs={len(result.recommendations)}"
        )
        return result


# ─── Compliance checklist ────────────────────────────────────────────────────


COMPLIANCE_CHECKLIST: Dict[str, List[str]] = {
    "Chemical Safety": [
        "Contains hazardous chemicals",
        "Proper disposal instructions",
        "Safety data sheets available",
        "Biodegradable components",
        "Non-toxic alternatives available",
    ],
    "Packaging": [
        "Recyclable packaging",
        "Minimal packaging waste",
        "Biodegradable materials",
        "Reusable containers",
        "Local sourcing",
    ],
    "Manufacturing": [
        "Energy efficient production",
        "Water conservation",
        "Waste reduction",
        "Renewable energy use",
        "Carbon footprint tracking",
    ],
    "End-of-Life": [
        "Easy to disassemble",
        "Recyclable components",
        "Biodegradable materials",
        "Take-back programs",
        "Circular economy design",
    ],
}


def compliance_checklist() -> Dict[str, Any]:
    return {
        "categories": [
            {"name": name, "items": list(items)}
            for name, items in COMPLIANCE_CHECKLIST.items()
        ]
    }
