"""
Static rule tables for the scoring engine.

Everything here is resolved once at import and never mutated:
- the four fixed gates with their thresholds and comparison direction
- the recommendation cut-offs
- the default substituted for missing data
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Callable, Optional

from prodscore.models.inputs import CriterionId


# Raw value used when a gate criterion or margin figure is absent
MISSING_VALUE_DEFAULT = 0.0

# Weights are percentage-like; a full set is expected to total this
NOMINAL_TOTAL_WEIGHT = 100.0

# Recommendation cut-offs
PROCEED_MIN_SCORE = 80
PROCEED_GATES = 4
GATHER_DATA_MIN_SCORE = 60
GATHER_DATA_MIN_GATES = 2


@dataclass(frozen=True)
class GateRule:
    """
    A fixed pass/fail threshold check on a raw, unnormalized value.

    ``criterion_id`` is None for gates fed from outside the criteria list
    (the margin gate reads ``Margins.computed_margin``).
    """
    name: str
    criterion_id: Optional[CriterionId]
    threshold: float
    comparison: Callable[[float, float], bool]
    symbol: str

    def passes(self, raw_value: float) -> bool:
        return bool(self.comparison(raw_value, self.threshold))

    @property
    def description(self) -> str:
        source = self.criterion_id.value if self.criterion_id else "computed margin"
        return f"{source} {self.symbol} {self.threshold:g}"


GATE_RULES: tuple[GateRule, ...] = (
    GateRule("revenue", CriterionId.REVENUE, 5000.0, operator.ge, ">="),
    GateRule("demand", CriterionId.DEMAND, 1000.0, operator.ge, ">="),
    GateRule("competition", CriterionId.COMPETITION, 70.0, operator.le, "<="),
    GateRule("margin", None, 20.0, operator.ge, ">="),
)

GATE_NAMES: tuple[str, ...] = tuple(rule.name for rule in GATE_RULES)

