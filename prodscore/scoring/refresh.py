"""
Rescoring an opportunity after its criteria values were refreshed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from prodscore.models.outputs import RefreshResult
from prodscore.scoring.engine import (
    CriterionLike,
    MarginsLike,
    coerce_criteria,
    check_gates,
    compute_final_score,
    get_recommendation,
    round_half_up,
)

logger = logging.getLogger(__name__)

NO_CHANGES = "No significant changes"


def _signed(value: int, increased: bool) -> str:
    return f"+{value}" if increased else str(value)


def summarize_changes(
    previous_criteria: Iterable[CriterionLike],
    updated_criteria: Iterable[CriterionLike],
    previous_score: int,
    new_score: Optional[int] = None,
) -> list[str]:
    """
    List the score delta and per-criterion value changes.

    Criterion deltas are expressed as a percentage of the previous
    record's max_value. The sign follows the raw delta, so a small
    increase that rounds to zero still reads "+0%". Criteria missing
    from the previous list are skipped.
    """
    previous = coerce_criteria(previous_criteria)
    updated = coerce_criteria(updated_criteria)
    if new_score is None:
        new_score = compute_final_score(updated)

    changes = []
    if new_score != previous_score:
        changes.append(f"Score {_signed(new_score - previous_score, new_score > previous_score)} pts")

    for new in updated:
        old = next((c for c in previous if c.id == new.id), None)
        if old is None or old.value == new.value:
            continue
        delta = new.value - old.value
        percentage = round_half_up((delta / old.max_value) * 100)
        changes.append(f"{new.label} {_signed(percentage, delta > 0)}%")

    return changes


def refresh_opportunity(
    previous_criteria: Iterable[CriterionLike],
    updated_criteria: Iterable[CriterionLike],
    previous_score: int,
    margins: MarginsLike = None,
) -> RefreshResult:
    """
    Recompute score, gates and recommendation for updated criteria.

    Args:
        previous_criteria: Criteria as last scored
        updated_criteria: Criteria with refreshed values
        previous_score: Score recorded at the last evaluation
        margins: Optional margin calculation for the margin gate

    Returns:
        RefreshResult with the change summary
    """
    previous = coerce_criteria(previous_criteria)
    updated = coerce_criteria(updated_criteria)

    new_score = compute_final_score(updated)
    gates = check_gates(updated, margins)
    recommendation = get_recommendation(new_score, gates.passed_count)
    changes = summarize_changes(previous, updated, previous_score, new_score)

    logger.debug("Refreshed opportunity: score %d -> %d", previous_score, new_score)

    return RefreshResult(
        old_score=previous_score,
        new_score=new_score,
        score_change=new_score - previous_score,
        gates=gates,
        recommendation=recommendation,
        summary=", ".join(changes) if changes else NO_CHANGES,
        changes=changes,
    )
