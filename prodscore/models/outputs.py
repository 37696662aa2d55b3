"""
Output models for product opportunity scoring.

These models define the structure of the score, gate statuses and
recommendation returned by the engine.
"""

from enum import Enum

from pydantic import BaseModel, Field

from prodscore.models.inputs import CriterionId, DataSource


class Recommendation(str, Enum):
    """Three-tier verdict derived from score and gate count."""
    PROCEED = "proceed"
    GATHER_DATA = "gather-data"
    REJECT = "reject"


class GateResults(BaseModel):
    """
    Pass/fail status for the four fixed gates.

    All four keys are always present.
    """
    revenue: bool = Field(..., description="Monthly revenue >= 5000")
    demand: bool = Field(..., description="Demand (search volume) >= 1000")
    competition: bool = Field(..., description="Competition level <= 70")
    margin: bool = Field(..., description="Computed margin >= 20%")

    @property
    def passed_count(self) -> int:
        """Number of gates that passed."""
        return sum(1 for passed in self.to_dict().values() if passed)

    @property
    def all_passed(self) -> bool:
        return self.passed_count == len(type(self).model_fields)

    def to_dict(self) -> dict[str, bool]:
        """Return the gates as a plain name -> bool mapping."""
        return {
            "revenue": self.revenue,
            "demand": self.demand,
            "competition": self.competition,
            "margin": self.margin,
        }


class CriterionScore(BaseModel):
    """Per-criterion contribution to the composite score."""
    id: CriterionId = Field(..., description="Criterion identifier")
    label: str = Field(..., description="Display label")
    value: float = Field(..., description="Raw value as supplied")
    max_value: float = Field(..., description="Normalization bound")
    inverted: bool = Field(..., description="Whether lower raw values are better")
    normalized: float = Field(..., description="Value on the 0-100 scale (not clamped)")
    weight: float = Field(..., description="Contribution weight")
    contribution: float = Field(..., description="normalized * weight / 100")


class ScoreResult(BaseModel):
    """
    Complete output of evaluating one opportunity.
    """
    name: str = Field(default="Untitled opportunity", description="Opportunity name")
    score: int = Field(..., description="Rounded weighted composite score")
    gates: GateResults = Field(..., description="Gate statuses")
    gates_passed: int = Field(..., ge=0, le=4, description="Number of passed gates")
    recommendation: Recommendation = Field(..., description="proceed / gather-data / reject")
    breakdown: list[CriterionScore] = Field(
        default_factory=list,
        description="Per-criterion contributions in input order",
    )
    total_weight: float = Field(..., description="Sum of supplied weights")
    criterion_gates: dict[str, bool] = Field(
        default_factory=dict,
        description="Per-criterion gate flags, for criteria that carry one",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Any warnings about the inputs",
    )


class RefreshResult(BaseModel):
    """
    Outcome of rescoring an opportunity after its criteria were updated.
    """
    old_score: int = Field(..., description="Score before the refresh")
    new_score: int = Field(..., description="Score after the refresh")
    score_change: int = Field(..., description="new_score - old_score")
    gates: GateResults = Field(..., description="Gate statuses for the updated criteria")
    recommendation: Recommendation = Field(..., description="Recommendation after the refresh")
    summary: str = Field(..., description="Human readable change summary")
    changes: list[str] = Field(default_factory=list, description="Individual change entries")


class FusionMethod(str, Enum):
    """How a fused value was derived."""
    WEIGHTED_MEDIAN = "weighted_median"
    TRIMMED_MEAN = "trimmed_mean"
    SINGLE_SOURCE = "single_source"


class FusedValue(BaseModel):
    """
    One criterion value merged from several sources.

    ``disagreement_index`` is the coefficient of variation of the source
    values, in percent. ``confidence_score`` blends source agreement with
    the sources' own confidence.
    """
    criterion_id: CriterionId = Field(..., description="Criterion the readings belong to")
    fused_value: float = Field(..., description="Merged raw value")
    disagreement_index: float = Field(..., ge=0, description="Spread of source values (CV %)")
    confidence_score: float = Field(..., ge=0, le=1, description="Confidence in the fused value")
    method: FusionMethod = Field(..., description="Fusion method used")
    conservative: bool = Field(
        default=False,
        description="True when high disagreement forced the least favorable source value",
    )
    sources: list[DataSource] = Field(default_factory=list, description="Sources that contributed")