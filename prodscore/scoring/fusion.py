"""
Multi-source fusion of criterion values.

Research tools rarely agree on a number. Each source reports its own
reading for a criterion; fuse_values merges the readings into the single
raw value the engine scores, using:
- a per-criterion source weight (FUSION_WEIGHTS) times a recency weight
- a weighted median, with a trimmed mean as fallback
- an optional conservative pick when the sources disagree strongly
- a confidence score from source agreement and source confidence
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence, Union

from prodscore.models.inputs import (
    Criterion,
    CriterionId,
    DataSource,
    SourcedValue,
    is_inverted,
)
from prodscore.models.outputs import FusedValue, FusionMethod
from prodscore.scoring.engine import CriterionLike, coerce_criteria

logger = logging.getLogger(__name__)

# Source weights by criterion
FUSION_WEIGHTS: dict[CriterionId, dict[DataSource, float]] = {
    CriterionId.DEMAND: {
        DataSource.HELIUM_10: 0.6,
        DataSource.AMAZON_POE: 0.4,
        DataSource.JUNGLE_SCOUT: 0.3,
        DataSource.MANUAL: 0.1,
    },
    CriterionId.REVENUE: {
        DataSource.JUNGLE_SCOUT: 0.8,
        DataSource.AMAZON_POE: 0.2,
        DataSource.HELIUM_10: 0.3,
        DataSource.MANUAL: 0.1,
    },
    CriterionId.COMPETITION: {
        DataSource.JUNGLE_SCOUT: 0.7,
        DataSource.HELIUM_10: 0.3,
        DataSource.AMAZON_POE: 0.2,
        DataSource.MANUAL: 0.1,
    },
    CriterionId.SEASONALITY: {
        DataSource.AMAZON_POE: 0.6,
        DataSource.JUNGLE_SCOUT: 0.4,
        DataSource.HELIUM_10: 0.2,
        DataSource.MANUAL: 0.1,
    },
    CriterionId.MARGIN: {
        DataSource.VALIDATION: 0.9,
        DataSource.JUNGLE_SCOUT: 0.05,
        DataSource.HELIUM_10: 0.05,
        DataSource.MANUAL: 0.1,
    },
    CriterionId.BARRIERS: {
        DataSource.MANUAL: 0.8,
        DataSource.VALIDATION: 0.2,
    },
}

# Weight for a source not listed for the criterion
DEFAULT_SOURCE_WEIGHT = 0.1
DEFAULT_CONFIDENCE = 0.8

# Recency bands: (max age in days, weight); older data gets STALE_WEIGHT
RECENCY_BANDS: tuple[tuple[int, float], ...] = ((30, 1.0), (90, 0.8))
STALE_WEIGHT = 0.6

# Disagreement (CV %) above which conservative fusion kicks in
CONSERVATIVE_DISAGREEMENT = 20.0
# Disagreement at which the agreement part of the confidence reaches 0
MAX_EXPECTED_DISAGREEMENT = 50.0
AGREEMENT_SHARE = 0.6
SOURCE_CONFIDENCE_SHARE = 0.4

TRIM_FRACTION = 0.2


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def recency_weight(timestamp: datetime, now: Optional[datetime] = None) -> float:
    """
    Weight a reading by its age in whole days.

    Up to 30 days old counts fully, up to 90 days at 0.8, anything older
    at 0.6. Timestamps in the future count as fresh.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    age_days = (now - _as_utc(timestamp)).days
    for max_age, weight in RECENCY_BANDS:
        if age_days <= max_age:
            return weight
    return STALE_WEIGHT


def disagreement_index(values: Sequence[Union[SourcedValue, float]]) -> float:
    """
    Coefficient of variation of the values, in percent.

    Uses the population standard deviation. Fewer than two values, or a
    mean of zero, give 0.
    """
    if len(values) < 2:
        return 0.0
    numbers = [v.value if isinstance(v, SourcedValue) else float(v) for v in values]
    mean = sum(numbers) / len(numbers)
    if mean == 0:
        return 0.0
    variance = sum((n - mean) ** 2 for n in numbers) / len(numbers)
    return (math.sqrt(variance) / abs(mean)) * 100


def weighted_median(values: Sequence[float], weights: Sequence[float]) -> float:
    """
    Smallest value at which the cumulative weight reaches half the total.

    Raises:
        ValueError: If the sequences differ in length, or the weights are
            negative, non-finite or sum to zero
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have the same length")
    if not values:
        return 0.0
    if len(values) == 1:
        return values[0]
    if any(not math.isfinite(w) or w < 0 for w in weights):
        raise ValueError(f"weights must be finite and non-negative, got {list(weights)}")
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights sum to zero")

    pairs = sorted(zip(values, weights), key=lambda pair: pair[0])
    target = total / 2
    cumulative = 0.0
    for value, weight in pairs:
        cumulative += weight
        if cumulative >= target:
            return value
    return pairs[-1][0]


def trimmed_mean(values: Sequence[float], trim_fraction: float = TRIM_FRACTION) -> float:
    """
    Mean after dropping ``trim_fraction / 2`` of the values at each end.

    The count dropped per end is rounded down, so small samples are not
    trimmed at all.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    trim = math.floor(len(ordered) * trim_fraction / 2)
    kept = ordered[trim:len(ordered) - trim]
    return sum(kept) / len(kept)


def _latest_by_source(readings: Iterable[SourcedValue]) -> dict[DataSource, SourcedValue]:
    latest: dict[DataSource, SourcedValue] = {}
    for reading in readings:
        current = latest.get(reading.source)
        if current is None or _as_utc(reading.timestamp) >= _as_utc(current.timestamp):
            latest[reading.source] = reading
    return latest


def _confidence(reading: SourcedValue) -> float:
    return DEFAULT_CONFIDENCE if reading.confidence is None else reading.confidence


def fuse_values(
    criterion_id: CriterionId | str,
    readings: Iterable[SourcedValue],
    conservative: bool = False,
    weights: Optional[Mapping[DataSource, float]] = None,
    now: Optional[datetime] = None,
) -> FusedValue:
    """
    Merge per-source readings of one criterion into a single value.

    Only the most recent reading per source is used.

    Args:
        criterion_id: Criterion the readings belong to
        readings: Source readings, in any order
        conservative: When the sources disagree by more than 20%, take the
            least favorable reading instead of the median (highest for
            inverted criteria, lowest otherwise)
        weights: Per-source weights overriding FUSION_WEIGHTS
        now: Reference time for recency decay (defaults to now, UTC)

    Returns:
        FusedValue with the merged value and fusion metadata

    Raises:
        ValueError: If the criterion id is unknown
    """
    target = CriterionId(criterion_id)
    by_source = _latest_by_source(readings)
    sources = list(by_source)

    if not by_source:
        return FusedValue(
            criterion_id=target,
            fused_value=0.0,
            disagreement_index=0.0,
            confidence_score=0.0,
            method=FusionMethod.SINGLE_SOURCE,
        )

    if len(by_source) == 1:
        only = next(iter(by_source.values()))
        return FusedValue(
            criterion_id=target,
            fused_value=only.value,
            disagreement_index=0.0,
            confidence_score=_confidence(only),
            method=FusionMethod.SINGLE_SOURCE,
            sources=sources,
        )

    values = [r.value for r in by_source.values()]
    disagreement = disagreement_index(values)

    source_weights = FUSION_WEIGHTS.get(target, {}) if weights is None else weights
    combined = [
        source_weights.get(source, DEFAULT_SOURCE_WEIGHT) * recency_weight(r.timestamp, now)
        for source, r in by_source.items()
    ]

    applied_conservative = False
    try:
        fused = weighted_median(values, combined)
        method = FusionMethod.WEIGHTED_MEDIAN
    except ValueError as e:
        logger.warning("Weighted median failed for %s (%s); using trimmed mean", target.value, e)
        fused = trimmed_mean(values)
        method = FusionMethod.TRIMMED_MEAN
    else:
        if conservative and disagreement > CONSERVATIVE_DISAGREEMENT:
            fused = max(values) if is_inverted(target) else min(values)
            applied_conservative = True

    agreement = max(0.0, (MAX_EXPECTED_DISAGREEMENT - disagreement) / MAX_EXPECTED_DISAGREEMENT)
    source_confidence = sum(_confidence(r) for r in by_source.values()) / len(by_source)
    confidence = agreement * AGREEMENT_SHARE + source_confidence * SOURCE_CONFIDENCE_SHARE

    logger.debug(
        "Fused %s from %d sources: %g (%s, disagreement %.1f%%)",
        target.value, len(by_source), fused, method.value, disagreement,
    )

    return FusedValue(
        criterion_id=target,
        fused_value=fused,
        disagreement_index=disagreement,
        confidence_score=min(1.0, confidence),
        method=method,
        conservative=applied_conservative,
        sources=sources,
    )


def fuse_criteria(
    criteria: Iterable[CriterionLike],
    readings: Mapping[str, Iterable[SourcedValue]],
    conservative: bool = False,
    now: Optional[datetime] = None,
) -> tuple[list[Criterion], dict[str, FusedValue]]:
    """
    Replace criterion values with values fused from source readings.

    Criteria without readings are returned unchanged.

    Returns:
        (updated criteria in input order, fusion results keyed by criterion id)
    """
    updated = []
    results: dict[str, FusedValue] = {}
    for criterion in coerce_criteria(criteria):
        criterion_readings = list(readings.get(criterion.id.value, []))
        if not criterion_readings:
            updated.append(criterion)
            continue
        fused = fuse_values(criterion.id, criterion_readings, conservative=conservative, now=now)
        results[criterion.id.value] = fused
        updated.append(criterion.model_copy(update={"value": fused.fused_value}))
    return updated, results
