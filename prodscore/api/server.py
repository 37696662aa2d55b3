"""
FastAPI server for the product opportunity scorer.

Exposes the scoring engine as JSON endpoints for the dashboard front end.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from prodscore import __version__
from prodscore.cli.main import example_opportunity
from prodscore.models.inputs import (
    Criterion,
    INVERTED_CRITERIA,
    CriterionId,
    Margins,
    Opportunity,
    ProductScoreRequest,
    SourcedValue,
)
from prodscore.models.outputs import (
    FusedValue,
    GateResults,
    Recommendation,
    RefreshResult,
    ScoreResult,
)
from prodscore.scoring.engine import (
    check_gates,
    compute_final_score,
    evaluate_opportunity,
    get_recommendation,
    normalize_value,
)
from prodscore.scoring.fusion import fuse_values
from prodscore.scoring.product_metrics import evaluate_product
from prodscore.scoring.refresh import refresh_opportunity
from prodscore.scoring.rules import GATE_RULES

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Product Opportunity Scorer API",
    description="""
    Weighted multi-criteria scoring for product research.

    Normalizes criteria to 0-100, computes a weighted composite score,
    checks four fixed gates and returns proceed / gather-data / reject.
    """,
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class NormalizeRequest(BaseModel):
    """Request body for normalizing one raw value."""
    model_config = ConfigDict(populate_by_name=True)

    id: CriterionId
    value: float = Field(..., allow_inf_nan=False)
    max_value: float = Field(..., alias="maxValue", gt=0, allow_inf_nan=False)


class NormalizeResponse(BaseModel):
    id: CriterionId
    inverted: bool
    normalized: float


class CriteriaRequest(BaseModel):
    """Criteria list with optional margins."""
    criteria: list[Criterion] = Field(default_factory=list)
    margins: Optional[Margins] = None


class ScoreResponse(BaseModel):
    score: int


class RecommendationRequest(BaseModel):
    score: float = Field(..., allow_inf_nan=False)
    gates_passed: int = Field(..., ge=0, le=4, alias="gatesPassed")

    model_config = ConfigDict(populate_by_name=True)


class RecommendationResponse(BaseModel):
    recommendation: Recommendation


class FuseRequest(BaseModel):
    """Per-source readings of one criterion."""
    criterion_id: CriterionId
    readings: list[SourcedValue] = Field(default_factory=list)
    conservative: bool = False


class RefreshRequest(BaseModel):
    """Previous and refreshed criteria for one opportunity."""
    previous_criteria: list[Criterion] = Field(default_factory=list)
    updated_criteria: list[Criterion] = Field(default_factory=list)
    previous_score: int
    margins: Optional[Margins] = None


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check if the API is running."""
    return HealthResponse(status="healthy", version=__version__)


@app.get("/example", response_model=Opportunity, tags=["Reference"])
async def get_example():
    """Get an example opportunity."""
    return example_opportunity()


@app.get("/criteria-ids", tags=["Reference"])
async def list_criteria_ids():
    """Get supported criterion ids, the inverted set and the fixed gates."""
    return {
        "criteria_ids": [c.value for c in CriterionId],
        "inverted": sorted(c.value for c in INVERTED_CRITERIA),
        "gates": {rule.name: rule.description for rule in GATE_RULES},
    }


@app.post("/normalize", response_model=NormalizeResponse, tags=["Scoring"])
async def normalize(request: NormalizeRequest):
    """Normalize one raw value onto the 0-100 scale."""
    try:
        normalized = normalize_value(request.id, request.value, request.max_value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NormalizeResponse(
        id=request.id,
        inverted=request.id in INVERTED_CRITERIA,
        normalized=normalized,
    )


@app.post("/score", response_model=ScoreResponse, tags=["Scoring"])
async def score(request: CriteriaRequest):
    """Compute the rounded weighted composite score."""
    try:
        return ScoreResponse(score=compute_final_score(request.criteria))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/gates", response_model=GateResults, tags=["Scoring"])
async def gates(request: CriteriaRequest):
    """Evaluate the four fixed gates."""
    return check_gates(request.criteria, request.margins)


@app.post("/recommendation", response_model=RecommendationResponse, tags=["Scoring"])
async def recommendation(request: RecommendationRequest):
    """Classify a score and gate count."""
    return RecommendationResponse(
        recommendation=get_recommendation(request.score, request.gates_passed)
    )


@app.post("/evaluate", response_model=ScoreResult, tags=["Scoring"])
async def evaluate(opportunity: Opportunity):
    """
    Score, gate and classify an opportunity in one call.

    Returns the composite score, gate statuses, recommendation,
    per-criterion breakdown and input warnings.
    """
    try:
        result = evaluate_opportunity(
            opportunity.criteria,
            opportunity.margins,
            name=opportunity.name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Evaluated %s: %s", opportunity.name, result.recommendation.value)
    return result


@app.post("/product-score", response_model=ScoreResult, tags=["Scoring"])
async def product_score(request: ProductScoreRequest):
    """Score a product from catalog export fields."""
    try:
        return evaluate_product(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/refresh", response_model=RefreshResult, tags=["Scoring"])
async def refresh(request: RefreshRequest):
    """Rescore an opportunity after its criteria were updated."""
    try:
        return refresh_opportunity(
            request.previous_criteria,
            request.updated_criteria,
            request.previous_score,
            request.margins,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/fuse", response_model=FusedValue, tags=["Fusion"])
async def fuse(request: FuseRequest):
    """
    Merge per-source readings of a criterion into one value.

    Uses a recency-weighted median; with ``conservative`` set, strong
    disagreement between sources yields the least favorable reading.
    """
    return fuse_values(
        request.criterion_id,
        request.readings,
        conservative=request.conservative,
    )
