"""
Entry point for the Product Insight Engine.

Usage:
  # Score a sample product against simulated market data:
  python main.py demo

  # Start the FastAPI server:
  python main.py api

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import os
import sys
import logging

from config.settings import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("main")

DEMO_PRODUCT = {
    "name": "EcoClean Multi-Surface Spray",
    "description": (
        "Plant-based cleaner in a recyclable bottle. Great on glass and "
        "counters, gentle on hands, and the fresh scent is excellent."
    ),
    "price": 12.99,
    "category": "Household",
    "brand": "EcoClean",
    "ingredients": "water, plant-derived surfactant, citric acid, essential oils",
}

DEMO_ANALYTICS = {
    "views": 4200,
    "sales": 96,
    "rating": 4.3,
    "reviews": [
        {"text": "Works great and smells fresh", "rating": 5},
        {"text": "Good value but the nozzle is flimsy", "rating": 4},
        {"text": "Streaks on glass, disappointing", "rating": 2},
    ],
}


def demo():
    """
    Full facet report for a sample product, using simulated competitors.
    Prints a formatted report to stdout.
    """
    from models.schemas import AnalyticsSnapshot, ProductFacts
    from utils.pipeline import run_product_report
    from analyzers.aggregator import compare_products
    from analyzers.sources import SimulatedCompetitorSource

    logger.info("=== Product Insight Engine: Demo Run ===")

    product = ProductFacts(**DEMO_PRODUCT)
    snapshot = AnalyticsSnapshot.build(**DEMO_ANALYTICS)
    report = run_product_report(product, snapshot, competitor_prices=[10.49, 13.99, 15.25])

    # ── Print report ──────────────────────────────────────────────────────
    print("\n" + "=" * 70)
    print("  PRODUCT INSIGHT REPORT")
    print("=" * 70)
    print(f"  Report ID  : {report.report_id}")
    print(f"  Product    : {product.name} ({product.category})")
    print(f"  Price      : {product.price:.2f}")
    print(f"  Timestamp  : {report.generated_at.isoformat()}")
    print("=" * 70)

    sentiment = report.facets.get("sentiment")
    if sentiment:
        print("\nSENTIMENT")
        print("-" * 70)
        print(f"  {sentiment.label:<10} score={sentiment.score:+.2f}  words={sentiment.word_count}")
        if sentiment.keywords:
            print(f"  Keywords: {', '.join(sentiment.keywords)}")

    performance = report.facets.get("performance")
    if performance:
        pa = performance.price_analysis
        print("\nPERFORMANCE")
        print("-" * 70)
        print(
            f"  score={performance.performance_score}/100  "
            f"conversion={performance.conversion_rate:.2f}%  "
            f"rating={performance.avg_rating:.1f}  reviews={performance.review_count}"
        )
        print(f"  price {pa.position} ({pa.difference_pct:+.2f}% vs {pa.avg_competitor_price:.2f})")

    hazard = report.facets.get("hazard")
    if hazard:
        print("\nENVIRONMENTAL RISK")
        print("-" * 70)
        print(f"  risk={hazard.risk_score:.2f} ({hazard.risk_level})")
        for facet_name, facet in (
            ("toxicity", hazard.toxicity),
            ("chemical", hazard.chemical_risks),
            ("environment", hazard.environmental_impact),
        ):
            print(f"    {facet_name:<12} {facet.score:.1f} {facet.label}")

    competitive = report.facets.get("competitive")
    if competitive:
        print("\nCOMPETITORS (by market share)")
        print("-" * 70)
        for record in competitive.competitors:
            print(
                f"  {record.name:<24} price={record.price:>8.2f}  "
                f"rating={record.rating:.1f}  share={record.market_share_pct:.1f}%"
            )
        print(
            f"  Advantage: {competitive.analysis.competitive_advantage}  "
            f"({competitive.analysis.price_position})"
        )

    print("\nRECOMMENDATIONS")
    print("-" * 70)
    recommendations = []
    for facet in (performance, hazard):
        if facet:
            recommendations.extend(facet.recommendations)
    if competitive:
        recommendations.extend(competitive.analysis.recommendations)
    if recommendations:
        for rec in recommendations:
            print(f"  [{rec.priority:<6}] {rec.type:<12} {rec.suggestion}")
    else:
        print("  No recommendations.")

    for facet_name, error in report.errors.items():
        print(f"\n  ! {facet_name} unavailable: {error['message']}")

    # Head-to-head over the simulated competitor set
    competitors = SimulatedCompetitorSource().fetch(
        product.name, product.category, product.price, product.brand
    )
    comparison = compare_products(competitors[:3])
    print("\n" + "=" * 70)
    print("  HEAD-TO-HEAD (top 3 simulated competitors)")
    print("=" * 70)
    for rank, name in enumerate(comparison.ranking, 1):
        print(f"  #{rank} {name}")
    print(f"  Price spread: {comparison.price_comparison.difference_pct}%")
    print("=" * 70)

    return report


def start_api():
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=True)


def run_tests():
    """Run pytest."""
    import subprocess
    result = subprocess.run(
        ["pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "demo"

    if command == "demo":
        demo()
    elif command == "api":
        start_api()
    elif command == "test":
        run_tests()
    else:
        print(f"Unknown command: {command}")
        print("Usage: python main.py [demo|api|test]")
        sys.exit(1)
