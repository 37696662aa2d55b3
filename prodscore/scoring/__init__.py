"""
Scoring and gating engine for product opportunities.

Normalizes criteria, computes the weighted composite score, evaluates the
fixed gates and derives a recommendation. Per-source readings can be
fused into criterion values first.
"""

from prodscore.scoring.engine import (
    normalize_value,
    compute_final_score,
    check_gates,
    get_recommendation,
    find_criterion,
    score_breakdown,
    collect_criterion_gates,
    evaluate_opportunity,
)
from prodscore.scoring.fusion import fuse_criteria, fuse_values
from prodscore.scoring.product_metrics import build_product_criteria, evaluate_product
from prodscore.scoring.refresh import refresh_opportunity, summarize_changes

__all__ = [
    "normalize_value",
    "compute_final_score",
    "check_gates",
    "get_recommendation",
    "find_criterion",
    "score_breakdown",
    "collect_criterion_gates",
    "evaluate_opportunity",
    "build_product_criteria",
    "evaluate_product",
    "refresh_opportunity",
    "summarize_changes",
    "fuse_values",
    "fuse_criteria",
]
