"""
Input models for product opportunity scoring.

These models describe the criteria records and margin figures that the
import layer (spreadsheet exports, manual entry) hands to the scoring engine.
Validation happens here, at the boundary, so the engine never sees NaN or
a zero normalization bound.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CriterionId(str, Enum):
    """Known scoring dimensions for a product opportunity."""
    REVENUE = "revenue"
    DEMAND = "demand"
    COMPETITION = "competition"
    BARRIERS = "barriers"
    SEASONALITY = "seasonality"
    MARGIN = "margin"
    REVENUE_POTENTIAL = "revenue_potential"
    SALES_MOMENTUM = "sales_momentum"
    LOGISTICS = "logistics"
    LIFECYCLE = "lifecycle"
    REVIEWS = "reviews"
    RATING = "rating"
    PRICE = "price"


# Lower raw value is more favorable for these ids
INVERTED_CRITERIA: frozenset[CriterionId] = frozenset({
    CriterionId.COMPETITION,
    CriterionId.BARRIERS,
    CriterionId.SEASONALITY,
})


def is_inverted(criterion_id: CriterionId | str) -> bool:
    """
    Whether a criterion is scored in reverse.

    Raises:
        ValueError: If the id is not a known criterion
    """
    return CriterionId(criterion_id) in INVERTED_CRITERIA


class Criterion(BaseModel):
    """
    One weighted, measurable dimension of a product's attractiveness.

    ``value`` is expected in ``[0, max_value]`` but is not clamped; out of
    range values produce out of range normalized scores. Weights across a
    criteria list are expected to sum to 100 but this is not enforced.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "revenue",
                "name": "Revenue Potential",
                "value": 8000,
                "maxValue": 10000,
                "weight": 30,
            }
        },
    )

    id: CriterionId = Field(..., description="Criterion identifier from the known set")
    value: float = Field(..., allow_inf_nan=False, description="Raw measurement in domain units")
    max_value: float = Field(
        ...,
        alias="maxValue",
        gt=0,
        allow_inf_nan=False,
        description="Upper bound used for normalization (must be > 0)",
    )
    weight: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Contribution weight, percentage-like",
    )
    name: Optional[str] = Field(default=None, description="Display label")
    threshold: Optional[float] = Field(
        default=None,
        description="Informational threshold shown alongside the criterion",
    )
    gate: Optional[bool] = Field(
        default=None,
        description="Pass/fail flag for criteria that carry their own gate",
    )
    gate_description: Optional[str] = Field(
        default=None,
        alias="gateDescription",
        description="Human readable gate rule",
    )

    @property
    def inverted(self) -> bool:
        """Whether a lower raw value is more favorable."""
        return self.id in INVERTED_CRITERIA

    @property
    def label(self) -> str:
        """Name if set, otherwise the id."""
        return self.name or self.id.value


class Margins(BaseModel):
    """Margin calculation supplied independently of the criteria list."""
    model_config = ConfigDict(populate_by_name=True)

    computed_margin: Optional[float] = Field(
        default=None,
        alias="computedMargin",
        allow_inf_nan=False,
        description="Computed profit margin in percent",
    )


class Opportunity(BaseModel):
    """
    A product opportunity as handed to the CLI or API.

    Wraps the criteria list and optional margins with a display name.
    """
    name: str = Field(default="Untitled opportunity", description="Product or opportunity name")
    criteria: list[Criterion] = Field(default_factory=list, description="Scored criteria")
    margins: Optional[Margins] = Field(default=None, description="Margin calculation, if known")

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Silicone Baking Mat",
                "criteria": [
                    {"id": "revenue", "value": 8000, "maxValue": 10000, "weight": 30},
                    {"id": "demand", "value": 1500, "maxValue": 2000, "weight": 25},
                    {"id": "competition", "value": 30, "maxValue": 100, "weight": 20},
                    {"id": "barriers", "value": 20, "maxValue": 100, "weight": 25},
                ],
                "margins": {"computedMargin": 32.5},
            }
        }
    }


class ProductMetrics(BaseModel):
    """
    Product fields taken from a research-tool catalog export.

    Missing fields default to 0, matching how the exports leave blanks.
    Search volume is the exception: most exports lack it, so it stays None
    and the demand gate fails for lack of data.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, description="Product title")
    revenue: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Monthly revenue in USD")
    review_count: float = Field(
        default=0.0,
        ge=0,
        alias="reviewCount",
        allow_inf_nan=False,
        description="Number of reviews",
    )
    rating: float = Field(default=0.0, ge=0, le=5, description="Average star rating (0-5)")
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Listing price in USD")
    search_volume: Optional[float] = Field(
        default=None,
        ge=0,
        alias="searchVolume",
        allow_inf_nan=False,
        description="Monthly keyword search volume, when the export has it",
    )


class ScoringThresholds(BaseModel):
    """
    User thresholds displayed next to product-metric criteria.

    ``revenue`` is in dollars per month; the rest are on the 0-100 proxy
    scale where higher is better.
    """
    revenue: Optional[float] = None
    momentum: Optional[float] = None
    competition: Optional[float] = None
    barriers: Optional[float] = None
    logistics: Optional[float] = None
    lifecycle: Optional[float] = None


class ProductScoreRequest(BaseModel):
    """Catalog fields for one product plus optional thresholds and margins."""
    product: ProductMetrics = Field(..., description="Catalog fields")
    thresholds: Optional[ScoringThresholds] = Field(default=None, description="Display thresholds")
    margins: Optional[Margins] = Field(default=None, description="Margin calculation, if known")

    model_config = {
        "json_schema_extra": {
            "example": {
                "product": {
                    "title": "Silicone Baking Mat",
                    "revenue": 12500,
                    "reviewCount": 240,
                    "rating": 4.3,
                    "price": 18.99,
                    "searchVolume": 3200,
                },
                "margins": {"computedMargin": 28.0},
            }
        }
    }


class DataSource(str, Enum):
    """Research tools and manual channels that report criterion values."""
    JUNGLE_SCOUT = "jungle_scout"
    HELIUM_10 = "helium_10"
    AMAZON_POE = "amazon_poe"
    MANUAL = "manual"
    VALIDATION = "validation"


class SourcedValue(BaseModel):
    """
    One reading of a criterion value from a single source.

    ``timestamp`` drives recency decay; a timestamp without a timezone is
    read as UTC.
    """
    value: float = Field(..., allow_inf_nan=False, description="Raw value in the criterion's units")
    source: DataSource = Field(..., description="Where the value came from")
    timestamp: datetime = Field(..., description="When the value was captured")
    confidence: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Source confidence (0-1); 0.8 when not given",
    )
    notes: Optional[str] = Field(default=None, description="Free-form provenance notes")

    model_config = {
        "json_schema_extra": {
            "example": {
                "value": 8200,
                "source": "jungle_scout",
                "timestamp": "2025-01-15T00:00:00Z",
                "confidence": 0.9,
            }
        }
    }
