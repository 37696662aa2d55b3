"""
Scoring and gating engine for product opportunities.

Pure functions, no state between calls:
- normalize_value: map a raw criterion value onto a 0-100 scale
- compute_final_score: rounded weighted sum of normalized values
- check_gates: fixed pass/fail thresholds on raw values
- get_recommendation: proceed / gather-data / reject from score and gate count

Weights are NOT renormalized. If the supplied weights total something other
than 100 the composite is still the literal weighted sum, and
evaluate_opportunity reports a warning instead of altering the result.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional, Union

from prodscore.models.inputs import Criterion, CriterionId, Margins, is_inverted
from prodscore.models.outputs import (
    CriterionScore,
    GateResults,
    Recommendation,
    ScoreResult,
)
from prodscore.scoring.rules import (
    GATE_RULES,
    GATHER_DATA_MIN_GATES,
    GATHER_DATA_MIN_SCORE,
    MISSING_VALUE_DEFAULT,
    NOMINAL_TOTAL_WEIGHT,
    PROCEED_GATES,
    PROCEED_MIN_SCORE,
)

logger = logging.getLogger(__name__)

CriterionLike = Union[Criterion, Mapping[str, Any]]
MarginsLike = Union[Margins, Mapping[str, Any], None]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def coerce_criteria(criteria: Iterable[CriterionLike]) -> list[Criterion]:
    """Validate raw mappings into Criterion models; pass models through."""
    return [
        c if isinstance(c, Criterion) else Criterion.model_validate(c)
        for c in criteria
    ]


def coerce_margins(margins: MarginsLike) -> Optional[Margins]:
    if margins is None or isinstance(margins, Margins):
        return margins
    return Margins.model_validate(margins)


def normalize_value(
    criterion_id: CriterionId | str,
    value: float,
    max_value: float,
) -> float:
    """
    Map a raw criterion value onto a 0-100 scale.

    Inverted criteria (competition, barriers, seasonality) are reversed
    first: ``max_value - value``. The result is not clamped.

    Args:
        criterion_id: Criterion identifier
        value: Raw measurement
        max_value: Normalization bound, must be > 0

    Returns:
        Normalized value (0-100 for in-range inputs)

    Raises:
        ValueError: If max_value <= 0 or the id is unknown
    """
    if not max_value > 0:
        raise ValueError(f"max_value must be > 0, got {max_value}")

    raw = max_value - value if is_inverted(criterion_id) else value
    return (raw / max_value) * 100


def compute_final_score(criteria: Iterable[CriterionLike]) -> int:
    """
    Compute the rounded weighted composite score.

    Each criterion contributes ``normalized * weight / 100``. The sum is
    rounded half-up. An empty list scores 0.
    """
    total = 0.0
    for criterion in coerce_criteria(criteria):
        normalized = normalize_value(criterion.id, criterion.value, criterion.max_value)
        total += (normalized * criterion.weight) / 100
    return round_half_up(total)


def find_criterion(
    criteria: Iterable[CriterionLike],
    criterion_id: CriterionId | str,
) -> Optional[Criterion]:
    """Return the first criterion with the given id, or None."""
    target = CriterionId(criterion_id)
    for criterion in coerce_criteria(criteria):
        if criterion.id == target:
            return criterion
    return None


def check_gates(
    criteria: Iterable[CriterionLike],
    margins: MarginsLike = None,
) -> GateResults:
    """
    Evaluate the four fixed gates on raw (unnormalized) values.

    Missing-data policy: a gate whose criterion is absent from the list,
    and the margin gate when margins or computed_margin is absent, are
    evaluated against MISSING_VALUE_DEFAULT (0). With duplicated ids the
    first record wins.
    """
    items = coerce_criteria(criteria)
    margin_record = coerce_margins(margins)

    results: dict[str, bool] = {}
    for rule in GATE_RULES:
        if rule.criterion_id is None:
            raw = MISSING_VALUE_DEFAULT
            if margin_record is not None and margin_record.computed_margin is not None:
                raw = margin_record.computed_margin
        else:
            found = find_criterion(items, rule.criterion_id)
            raw = found.value if found is not None else MISSING_VALUE_DEFAULT
        results[rule.name] = rule.passes(raw)

    return GateResults(**results)


def get_recommendation(score: float, gates_passed: int) -> Recommendation:
    """
    Classify a (score, gates passed) pair.

    - proceed: score >= 80 and all 4 gates passed
    - gather-data: score >= 60 and at least 2 gates passed
    - reject: anything else
    """
    if score >= PROCEED_MIN_SCORE and gates_passed == PROCEED_GATES:
        return Recommendation.PROCEED
    if score >= GATHER_DATA_MIN_SCORE and gates_passed >= GATHER_DATA_MIN_GATES:
        return Recommendation.GATHER_DATA
    return Recommendation.REJECT


def score_breakdown(criteria: Iterable[CriterionLike]) -> list[CriterionScore]:
    """Per-criterion normalized values and weighted contributions."""
    breakdown = []
    for criterion in coerce_criteria(criteria):
        normalized = normalize_value(criterion.id, criterion.value, criterion.max_value)
        breakdown.append(
            CriterionScore(
                id=criterion.id,
                label=criterion.label,
                value=criterion.value,
                max_value=criterion.max_value,
                inverted=criterion.inverted,
                normalized=normalized,
                weight=criterion.weight,
                contribution=(normalized * criterion.weight) / 100,
            )
        )
    return breakdown


def collect_criterion_gates(criteria: Iterable[CriterionLike]) -> dict[str, bool]:
    """
    Gather the per-criterion gate flags of criteria that carry one.

    Used for product-metric criteria, which compute their own gates.
    """
    gates: dict[str, bool] = {}
    for criterion in coerce_criteria(criteria):
        if criterion.gate is not None:
            gates[criterion.id.value] = criterion.gate
    return gates


def evaluate_opportunity(
    criteria: Iterable[CriterionLike],
    margins: MarginsLike = None,
    name: str = "Untitled opportunity",
) -> ScoreResult:
    """
    Score, gate and classify one opportunity.

    Args:
        criteria: Criteria records (models or mappings)
        margins: Optional margin calculation
        name: Display name carried into the result

    Returns:
        ScoreResult with breakdown and input warnings
    """
    items = coerce_criteria(criteria)

    score = compute_final_score(items)
    gates = check_gates(items, margins)
    recommendation = get_recommendation(score, gates.passed_count)
    total_weight = sum(c.weight for c in items)

    warnings = []
    if items and not math.isclose(total_weight, NOMINAL_TOTAL_WEIGHT):
        warnings.append(
            f"Criteria weights total {total_weight:g}, not {NOMINAL_TOTAL_WEIGHT:g}; "
            "score is the unnormalized weighted sum"
        )
    present = {c.id for c in items}
    for rule in GATE_RULES:
        if rule.criterion_id is not None and rule.criterion_id not in present:
            warnings.append(
                f"No '{rule.criterion_id.value}' criterion; {rule.name} gate evaluated against 0"
            )
    margin_record = coerce_margins(margins)
    if margin_record is None or margin_record.computed_margin is None:
        warnings.append("No computed margin; margin gate evaluated against 0")

    logger.debug(
        "Evaluated %s: score=%d gates=%d/%d recommendation=%s",
        name, score, gates.passed_count, len(GATE_RULES), recommendation.value,
    )

    return ScoreResult(
        name=name,
        score=score,
        gates=gates,
        gates_passed=gates.passed_count,
        recommendation=recommendation,
        breakdown=score_breakdown(items),
        total_weight=total_weight,
        criterion_gates=collect_criterion_gates(items),
        warnings=warnings,
    )
