"""
Product Opportunity Scorer (prodscore)

Scores product-research opportunities against a weighted multi-criteria
rubric, checks them against fixed pass/fail gates and derives a
proceed / gather-data / reject recommendation.

Usage:
    python -m prodscore make-example
    python -m prodscore score --input example_opportunity.json
    python -m prodscore product --input product.json
    python -m prodscore serve --port 8000
"""

__version__ = "0.1.0"
__author__ = "Product Research Dashboard"

from prodscore.models.inputs import Criterion, CriterionId, Margins, Opportunity
from prodscore.models.outputs import GateResults, Recommendation, ScoreResult
from prodscore.scoring.engine import (
    normalize_value,
    compute_final_score,
    check_gates,
    get_recommendation,
    evaluate_opportunity,
)

__all__ = [
    "Criterion",
    "CriterionId",
    "Margins",
    "Opportunity",
    "GateResults",
    "Recommendation",
    "ScoreResult",
    "normalize_value",
    "compute_final_score",
    "check_gates",
    "get_recommendation",
    "evaluate_opportunity",
]
