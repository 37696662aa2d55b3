"""
Tests for the scoring and gating engine.

Covers normalization, the weighted composite, gate thresholds and the
recommendation table.
"""

import pytest
from pydantic import ValidationError

from prodscore.models.inputs import INVERTED_CRITERIA, Criterion, CriterionId, Margins, is_inverted
from prodscore.models.outputs import Recommendation
from prodscore.scoring.engine import (
    check_gates,
    collect_criterion_gates,
    compute_final_score,
    evaluate_opportunity,
    find_criterion,
    get_recommendation,
    normalize_value,
    round_half_up,
    score_breakdown,
)
from prodscore.scoring.rules import GATE_NAMES


class TestNormalizeValue:
    """Tests for normalize_value."""

    def test_regular_criteria(self):
        """Test that regular criteria scale value / max_value."""
        assert normalize_value("revenue", 8000, 10000) == pytest.approx(80)
        assert normalize_value("demand", 1500, 2000) == pytest.approx(75)

    def test_inverted_criteria(self):
        """Test that competition, barriers and seasonality are reversed."""
        assert normalize_value("competition", 30, 100) == pytest.approx(70)
        assert normalize_value("barriers", 20, 100) == pytest.approx(80)
        assert normalize_value("seasonality", 40, 100) == pytest.approx(60)

    def test_accepts_enum_ids(self):
        """Test that enum and string ids behave the same."""
        assert normalize_value(CriterionId.COMPETITION, 30, 100) == normalize_value(
            "competition", 30, 100
        )

    def test_out_of_range_is_not_clamped(self):
        """Test that values above max_value produce scores above 100."""
        assert normalize_value("revenue", 15000, 10000) == pytest.approx(150)
        assert normalize_value("competition", 150, 100) == pytest.approx(-50)

    @pytest.mark.parametrize("max_value", [0, -10, float("nan")])
    def test_non_positive_max_value_raises(self, max_value):
        """Test that max_value must be > 0."""
        with pytest.raises(ValueError, match="max_value"):
            normalize_value("revenue", 10, max_value)

    def test_unknown_id_raises(self):
        """Test that ids outside the known set are rejected."""
        with pytest.raises(ValueError):
            normalize_value("profitability", 10, 100)

    @pytest.mark.parametrize("criterion_id", ["revenue", "competition"])
    def test_idempotent(self, criterion_id):
        """Test that repeated calls with the same inputs agree."""
        first = normalize_value(criterion_id, 37.5, 120)
        assert all(normalize_value(criterion_id, 37.5, 120) == first for _ in range(3))


class TestInvertedSet:
    """Tests for the static inverted-criteria table."""

    def test_inverted_membership(self):
        assert INVERTED_CRITERIA == {
            CriterionId.COMPETITION,
            CriterionId.BARRIERS,
            CriterionId.SEASONALITY,
        }

    def test_is_inverted_by_string(self):
        assert is_inverted("barriers") is True
        assert is_inverted("revenue") is False

    def test_criterion_inverted_property(self):
        crit = Criterion(id="seasonality", value=1, max_value=10)
        assert crit.inverted is True


class TestRoundHalfUp:
    """Tests for the rounding helper."""

    @pytest.mark.parametrize(
        "value,expected",
        [(76.25, 76), (76.5, 77), (2.5, 3), (0.49, 0), (-0.5, 0), (99.999, 100)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestComputeFinalScore:
    """Tests for compute_final_score."""

    def test_weighted_score(self, sample_criteria):
        """
        Test the weighted composite of the sample criteria.

        (80*30 + 75*25 + 70*20 + 80*25) / 100 = 76.75, rounded half-up to 77.
        """
        assert compute_final_score(sample_criteria) == 77

    def test_returns_int(self, sample_criteria):
        assert isinstance(compute_final_score(sample_criteria), int)

    def test_all_criteria_at_maximum(self):
        """Test that the most favorable values score 100."""
        criteria = [
            {"id": "revenue", "value": 10000, "maxValue": 10000, "weight": 50},
            {"id": "competition", "value": 0, "maxValue": 100, "weight": 50},
        ]
        assert compute_final_score(criteria) == 100

    def test_all_criteria_at_minimum(self):
        """Test that the least favorable values score 0."""
        criteria = [
            {"id": "revenue", "value": 0, "maxValue": 10000, "weight": 50},
            {"id": "competition", "value": 100, "maxValue": 100, "weight": 50},
        ]
        assert compute_final_score(criteria) == 0

    def test_empty_criteria(self):
        """Test that no criteria scores 0."""
        assert compute_final_score([]) == 0

    def test_half_rounds_up(self):
        """Test that an exact .5 composite rounds up, not to even."""
        criteria = [{"id": "revenue", "value": 5, "maxValue": 100, "weight": 50}]
        assert compute_final_score(criteria) == 3

    def test_weights_not_renormalized(self):
        """Test that weights over 100 inflate the score rather than being rescaled."""
        criteria = [
            {"id": "revenue", "value": 100, "maxValue": 100, "weight": 80},
            {"id": "demand", "value": 100, "maxValue": 100, "weight": 70},
        ]
        assert compute_final_score(criteria) == 150

    def test_weights_under_100_not_renormalized(self):
        """Test that a partial weight set yields a partial score."""
        criteria = [{"id": "revenue", "value": 100, "maxValue": 100, "weight": 40}]
        assert compute_final_score(criteria) == 40

    def test_order_does_not_matter(self, sample_criteria):
        assert compute_final_score(list(reversed(sample_criteria))) == compute_final_score(
            sample_criteria
        )

    def test_malformed_value_raises_validation_error(self):
        """Test that non-numeric fields fail at the boundary."""
        with pytest.raises(ValidationError):
            compute_final_score([{"id": "revenue", "value": "lots", "maxValue": 100, "weight": 10}])

    def test_zero_max_value_raises_validation_error(self):
        with pytest.raises(ValidationError):
            compute_final_score([{"id": "revenue", "value": 1, "maxValue": 0, "weight": 10}])

    def test_idempotent(self, sample_criteria):
        assert compute_final_score(sample_criteria) == compute_final_score(sample_criteria)


class TestCheckGates:
    """Tests for check_gates."""

    def test_passes_all_gates_at_thresholds(self, threshold_criteria):
        """Test that exact thresholds pass (closed comparisons)."""
        gates = check_gates(threshold_criteria, {"computedMargin": 20})

        assert gates.revenue is True
        assert gates.demand is True
        assert gates.competition is True
        assert gates.margin is True
        assert gates.passed_count == 4
        assert gates.all_passed

    def test_fails_gates_just_below_thresholds(self):
        """Test that one unit on the wrong side fails every gate."""
        criteria = [
            {"id": "revenue", "value": 4999, "maxValue": 10000},
            {"id": "demand", "value": 999, "maxValue": 2000},
            {"id": "competition", "value": 71, "maxValue": 100},
        ]
        gates = check_gates(criteria, Margins(computed_margin=19.9))

        assert gates.to_dict() == {
            "revenue": False,
            "demand": False,
            "competition": False,
            "margin": False,
        }
        assert gates.passed_count == 0

    def test_passes_gates_just_above_thresholds(self):
        """Test that one unit on the favorable side passes every gate."""
        criteria = [
            {"id": "revenue", "value": 5001, "maxValue": 10000},
            {"id": "demand", "value": 1001, "maxValue": 2000},
            {"id": "competition", "value": 69, "maxValue": 100},
        ]
        gates = check_gates(criteria, {"computedMargin": 20.1})

        assert all(gates.to_dict().values())

    def test_uses_raw_not_normalized_values(self):
        """Test that competition gates on the raw value, not the inverted score."""
        criteria = [{"id": "competition", "value": 60, "maxValue": 1000}]
        gates = check_gates(criteria)
        # normalized would be 94; raw 60 <= 70 passes
        assert gates.competition is True

    def test_always_returns_four_gates(self):
        gates = check_gates([])
        assert tuple(gates.to_dict()) == GATE_NAMES

    def test_missing_criteria_default_to_zero(self):
        """Test the missing-data policy: absent criteria are treated as 0."""
        gates = check_gates([])

        assert gates.revenue is False
        assert gates.demand is False
        # 0 <= 70 so a missing competition criterion passes
        assert gates.competition is True

    def test_missing_margins_default_to_zero(self, threshold_criteria):
        assert check_gates(threshold_criteria).margin is False
        assert check_gates(threshold_criteria, Margins()).margin is False
        assert check_gates(threshold_criteria, {}).margin is False

    def test_first_duplicate_wins(self):
        """Test that duplicated ids resolve to the first record."""
        criteria = [
            {"id": "revenue", "value": 100, "maxValue": 10000},
            {"id": "revenue", "value": 9000, "maxValue": 10000},
        ]
        assert check_gates(criteria).revenue is False

    def test_idempotent(self, threshold_criteria):
        margins = {"computedMargin": 25}
        assert check_gates(threshold_criteria, margins) == check_gates(threshold_criteria, margins)


class TestGetRecommendation:
    """Tests for get_recommendation."""

    @pytest.mark.parametrize(
        "score,gates_passed,expected",
        [
            (80, 4, "proceed"),
            (100, 4, "proceed"),
            (60, 2, "gather-data"),
            (79, 4, "gather-data"),
            (95, 3, "gather-data"),
            (59, 4, "reject"),
            (80, 3, "gather-data"),
            (80, 1, "reject"),
            (60, 1, "reject"),
            (0, 0, "reject"),
        ],
    )
    def test_recommendation_table(self, score, gates_passed, expected):
        assert get_recommendation(score, gates_passed) == expected

    def test_high_score_short_of_all_gates_is_not_proceed(self):
        """Test that 80 with 3 gates never reaches proceed."""
        assert get_recommendation(80, 3) != Recommendation.PROCEED

    def test_returns_enum(self):
        result = get_recommendation(80, 4)
        assert result is Recommendation.PROCEED
        assert result.value == "proceed"

    @pytest.mark.parametrize("score,gates_passed", [(80, 4), (80, 3), (59, 4)])
    def test_idempotent(self, score, gates_passed):
        first = get_recommendation(score, gates_passed)
        assert all(get_recommendation(score, gates_passed) is first for _ in range(3))


class TestFindCriterion:
    """Tests for find_criterion."""

    def test_finds_first_match(self, sample_criteria):
        found = find_criterion(sample_criteria, "demand")
        assert found is not None
        assert found.value == 1500

    def test_missing_returns_none(self, sample_criteria):
        assert find_criterion(sample_criteria, "seasonality") is None


class TestScoreBreakdown:
    """Tests for per-criterion breakdown."""

    def test_contributions_sum_to_unrounded_score(self, sample_criteria):
        breakdown = score_breakdown(sample_criteria)
        total = sum(row.contribution for row in breakdown)
        assert total == pytest.approx(76.75)

    def test_breakdown_marks_inverted(self, sample_criteria):
        breakdown = score_breakdown(sample_criteria)
        inverted = {row.id.value: row.inverted for row in breakdown}
        assert inverted == {
            "revenue": False,
            "demand": False,
            "competition": True,
            "barriers": True,
        }


class TestCollectCriterionGates:
    """Tests for collect_criterion_gates."""

    def test_only_criteria_with_gate_flags(self):
        criteria = [
            {"id": "revenue_potential", "value": 50, "maxValue": 100, "gate": True},
            {"id": "logistics", "value": 30, "maxValue": 100, "gate": False},
            {"id": "demand", "value": 30, "maxValue": 100},
        ]
        assert collect_criterion_gates(criteria) == {
            "revenue_potential": True,
            "logistics": False,
        }


class TestEvaluateOpportunity:
    """Tests for the combined evaluation."""

    def test_full_evaluation(self, sample_criteria, healthy_margins):
        result = evaluate_opportunity(sample_criteria, healthy_margins, name="Baking Mat")

        assert result.name == "Baking Mat"
        assert result.score == 77
        assert result.gates_passed == 4
        assert result.recommendation == Recommendation.GATHER_DATA
        assert result.total_weight == pytest.approx(100)
        assert len(result.breakdown) == 4
        assert result.warnings == []

    def test_proceed_when_score_and_gates_are_high(self, healthy_margins):
        criteria = [
            {"id": "revenue", "value": 9000, "maxValue": 10000, "weight": 40},
            {"id": "demand", "value": 1800, "maxValue": 2000, "weight": 30},
            {"id": "competition", "value": 20, "maxValue": 100, "weight": 30},
        ]
        result = evaluate_opportunity(criteria, healthy_margins)

        assert result.score == 87
        assert result.recommendation == Recommendation.PROCEED

    def test_warns_when_weights_do_not_total_100(self, healthy_margins):
        criteria = [
            {"id": "revenue", "value": 9000, "maxValue": 10000, "weight": 40},
            {"id": "demand", "value": 1800, "maxValue": 2000, "weight": 40},
            {"id": "competition", "value": 20, "maxValue": 100, "weight": 40},
        ]
        result = evaluate_opportunity(criteria, healthy_margins)

        assert result.total_weight == pytest.approx(120)
        assert any("weights total 120" in w for w in result.warnings)

    def test_warns_on_missing_gate_inputs(self):
        criteria = [{"id": "revenue", "value": 9000, "maxValue": 10000, "weight": 100}]
        result = evaluate_opportunity(criteria)

        assert any("'demand'" in w for w in result.warnings)
        assert any("'competition'" in w for w in result.warnings)
        assert any("margin" in w for w in result.warnings)

    def test_empty_evaluation(self):
        result = evaluate_opportunity([])

        assert result.score == 0
        assert result.recommendation == Recommendation.REJECT
        assert not any("weights total" in w for w in result.warnings)
