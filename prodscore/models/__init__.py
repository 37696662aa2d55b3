"""
Pydantic models for product scoring inputs and outputs.
"""

from prodscore.models.inputs import (
    INVERTED_CRITERIA,
    is_inverted,
    CriterionId,
    Criterion,
    Margins,
    Opportunity,
    ProductMetrics,
    ScoringThresholds,
    ProductScoreRequest,
    DataSource,
    SourcedValue,
)
from prodscore.models.outputs import (
    Recommendation,
    GateResults,
    CriterionScore,
    ScoreResult,
    RefreshResult,
    FusionMethod,
    FusedValue,
)

__all__ = [
    "INVERTED_CRITERIA",
    "is_inverted",
    "CriterionId",
    "Criterion",
    "Margins",
    "Opportunity",
    "ProductMetrics",
    "ScoringThresholds",
    "ProductScoreRequest",
    "DataSource",
    "SourcedValue",
    "Recommendation",
    "GateResults",
    "CriterionScore",
    "ScoreResult",
    "RefreshResult",
    "FusionMethod",
    "FusedValue",
]
