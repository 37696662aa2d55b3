"""
Criteria built from research-tool catalog fields.

A catalog export only carries a handful of usable fields (revenue, review
count, rating, price, sometimes search volume), so most criteria below are
0-100 proxy scores with their own gate flag. Review count stands in for
momentum, competition, barriers and lifecycle alike.

The criteria are shaped so the fixed gates read catalog figures:
- revenue is emitted as monthly dollars under ``revenue``
- competition and barriers are emitted as levels (100 minus the proxy
  score) under their inverted ids, so normalization restores the proxy
  score and the competition gate compares a level against its limit
- search volume, when known, is a zero-weight ``demand`` criterion
"""

from __future__ import annotations

from typing import Optional

from prodscore.models.inputs import (
    Criterion,
    CriterionId,
    ProductMetrics,
    ProductScoreRequest,
    ScoringThresholds,
)
from prodscore.models.outputs import ScoreResult
from prodscore.scoring.engine import evaluate_opportunity

# Revenue at which the revenue criterion saturates
REVENUE_SCORE_CAP = 50000.0
REVENUE_GATE = 5000.0

SEARCH_VOLUME_CAP = 50000.0
SEARCH_VOLUME_GATE = 1000.0

# Proxy scores and levels share this scale
PROXY_SCALE = 100.0


def revenue_value(product: ProductMetrics) -> float:
    return min(product.revenue, REVENUE_SCORE_CAP)


def sales_momentum_score(product: ProductMetrics) -> float:
    """Review volume plus a quality bonus for well-rated listings."""
    review_momentum = min(80.0, (product.review_count / 1000) * 80)
    if product.rating >= 4:
        quality_bonus = 20.0
    elif product.rating >= 3.5:
        quality_bonus = 10.0
    else:
        quality_bonus = 0.0
    return min(100.0, review_momentum + quality_bonus)


def sales_momentum_gate(product: ProductMetrics) -> bool:
    return product.review_count >= 50 and product.rating >= 3.5


def competition_score(product: ProductMetrics) -> float:
    """Fewer reviews means less entrenched competition, higher score."""
    reviews = product.review_count
    if reviews < 100:
        return 90.0
    if reviews < 300:
        return 70.0
    if reviews < 500:
        return 50.0
    if reviews < 1000:
        return 30.0
    return 10.0


def competition_gate(product: ProductMetrics) -> bool:
    # Seller count is not in the export; only the review limit is checked
    return product.review_count < 500


def barriers_score(product: ProductMetrics) -> float:
    """
    Start at 100 and subtract for an established market.

    High review counts and very high ratings both raise the bar for a
    new entrant.
    """
    score = 100.0

    reviews = product.review_count
    if reviews > 2000:
        score -= 40
    elif reviews > 1000:
        score -= 25
    elif reviews > 500:
        score -= 15

    if product.rating > 4.5:
        score -= 20
    elif product.rating > 4.0:
        score -= 10

    return max(0.0, score)


def logistics_score(product: ProductMetrics) -> float:
    """Price as a rough proxy for size, weight and storage fees."""
    if product.price <= 25:
        return 90.0
    if product.price <= 50:
        return 70.0
    if product.price <= 100:
        return 50.0
    return 30.0


def lifecycle_score(product: ProductMetrics) -> float:
    """Moderate review counts suggest a mature, stable product."""
    reviews = product.review_count
    if 100 <= reviews <= 1000:
        return 90.0
    if 50 <= reviews <= 2000:
        return 70.0
    if reviews < 50:
        return 40.0
    return 50.0


def _level(score: float) -> float:
    return PROXY_SCALE - score


def _level_threshold(threshold: Optional[float]) -> Optional[float]:
    return None if threshold is None else _level(threshold)


def build_product_criteria(
    product: ProductMetrics,
    thresholds: Optional[ScoringThresholds] = None,
) -> list[Criterion]:
    """
    Build the six weighted product-metric criteria (weights total 100).

    A seventh, zero-weight ``demand`` criterion is appended when the
    product carries a search volume.

    Args:
        product: Catalog fields for one product
        thresholds: Optional user thresholds attached for display

    Returns:
        Criteria with per-criterion gate flags
    """
    thresholds = thresholds or ScoringThresholds()
    barriers = barriers_score(product)
    logistics = logistics_score(product)

    criteria = [
        Criterion(
            id=CriterionId.REVENUE,
            name="Revenue Potential",
            value=revenue_value(product),
            weight=20,
            max_value=REVENUE_SCORE_CAP,
            threshold=thresholds.revenue,
            gate=product.revenue >= REVENUE_GATE,
            gate_description="≥ $5,000/mo revenue",
        ),
        Criterion(
            id=CriterionId.SALES_MOMENTUM,
            name="Sales Momentum",
            value=sales_momentum_score(product),
            weight=20,
            max_value=PROXY_SCALE,
            threshold=thresholds.momentum,
            gate=sales_momentum_gate(product),
            gate_description="Positive 90-day or YoY growth",
        ),
        Criterion(
            id=CriterionId.COMPETITION,
            name="Competition",
            value=_level(competition_score(product)),
            weight=20,
            max_value=PROXY_SCALE,
            threshold=_level_threshold(thresholds.competition),
            gate=competition_gate(product),
            gate_description="Review Count < 500 and ≤ 5 active sellers",
        ),
        Criterion(
            id=CriterionId.BARRIERS,
            name="Barriers to Entry",
            value=_level(barriers),
            weight=15,
            max_value=PROXY_SCALE,
            threshold=_level_threshold(thresholds.barriers),
            gate=barriers >= 50,
            gate_description="Fewer variations + fewer images",
        ),
        Criterion(
            id=CriterionId.LOGISTICS,
            name="Logistics Burden",
            value=logistics,
            weight=15,
            max_value=PROXY_SCALE,
            threshold=thresholds.logistics,
            gate=logistics >= 60,
            gate_description="Lighter/smaller items, lower storage fees",
        ),
        Criterion(
            id=CriterionId.LIFECYCLE,
            name="Lifecycle & Seasonality",
            value=lifecycle_score(product),
            weight=10,
            max_value=PROXY_SCALE,
            threshold=thresholds.lifecycle,
            gate=product.review_count >= 100,
            gate_description="Age ≥ 12 months and non-seasonal",
        ),
    ]

    if product.search_volume is not None:
        criteria.append(
            Criterion(
                id=CriterionId.DEMAND,
                name="Search Volume",
                value=min(product.search_volume, SEARCH_VOLUME_CAP),
                weight=0,
                max_value=SEARCH_VOLUME_CAP,
                gate=product.search_volume >= SEARCH_VOLUME_GATE,
                gate_description="≥ 1,000 monthly searches",
            )
        )

    return criteria


def evaluate_product(request: ProductScoreRequest) -> ScoreResult:
    """
    Build product-metric criteria and run them through the engine.

    The recommendation comes from the four fixed gates, fed by the
    revenue, competition level and search volume criteria plus the
    request margins. Per-criterion gate flags are reported in
    ``criterion_gates``.
    """
    criteria = build_product_criteria(request.product, request.thresholds)
    return evaluate_opportunity(
        criteria,
        request.margins,
        name=request.product.title or "Untitled product",
    )
