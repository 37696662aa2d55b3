"""
Pytest configuration and shared fixtures.
"""

import pytest
from prodscore.models.inputs import Criterion, CriterionId, Margins


@pytest.fixture
def sample_criteria() -> list[Criterion]:
    """Four weighted criteria (weights total 100), two of them inverted."""
    return [
        Criterion(id=CriterionId.REVENUE, value=8000, max_value=10000, weight=30),
        Criterion(id=CriterionId.DEMAND, value=1500, max_value=2000, weight=25),
        Criterion(id=CriterionId.COMPETITION, value=30, max_value=100, weight=20),
        Criterion(id=CriterionId.BARRIERS, value=20, max_value=100, weight=25),
    ]


@pytest.fixture
def threshold_criteria() -> list[dict]:
    """Gate criteria sitting exactly on their thresholds, in camelCase form."""
    return [
        {"id": "revenue", "value": 5000, "maxValue": 10000},
        {"id": "demand", "value": 1000, "maxValue": 2000},
        {"id": "competition", "value": 70, "maxValue": 100},
    ]


@pytest.fixture
def healthy_margins() -> Margins:
    """Margin comfortably above the 20% gate."""
    return Margins(computed_margin=32.5)
