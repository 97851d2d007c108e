"""
Unit tests for the scoring engine.

Usage:
    pytest tests/test_scoring.py -v
"""
from datetime import date

import pytest

from conftest import answers_of
from burnout_engine import scoring
from burnout_engine.errors import ValidationError
from burnout_engine.models import DIMENSIONS, RiskLevel
from burnout_engine.scoring import (
    DIMENSION_RECOMMENDATIONS,
    RiskThresholds,
    build_assessment,
    classify_risk,
    parse_context_factors,
    score_answers,
)


class TestClassifyRisk:
    """Threshold table; boundaries belong to the lower band."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (1.0, RiskLevel.LOW),
            (2.0, RiskLevel.LOW),
            (2.5, RiskLevel.MODERATE),
            (3.0, RiskLevel.MODERATE),
            (3.5, RiskLevel.HIGH),
            (4.0, RiskLevel.HIGH),
            (4.5, RiskLevel.SEVERE),
            (5.0, RiskLevel.SEVERE),
        ],
    )
    def test_default_bands(self, score, expected):
        assert classify_risk(score) == expected

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(low_max=1.5, moderate_max=2.5, high_max=3.5)
        assert classify_risk(2.0, thresholds) == RiskLevel.MODERATE
        assert classify_risk(3.6, thresholds) == RiskLevel.SEVERE

    def test_thresholds_must_increase(self):
        with pytest.raises(ValueError):
            RiskThresholds(low_max=3.0, moderate_max=2.0, high_max=4.0)


class TestScoreAnswers:
    """Mean, band and recommendations."""

    def test_all_fives_is_severe_with_every_recommendation(self):
        result = score_answers(answers_of(5))

        assert result.total_score == 5.0
        assert result.risk_level == RiskLevel.SEVERE
        assert result.recommendations[0].startswith("URGENT: ")
        assert len(result.recommendations) == len(DIMENSIONS) + 1
        for name in DIMENSIONS:
            assert DIMENSION_RECOMMENDATIONS[name] in result.recommendations

    def test_all_ones_is_low_without_recommendations(self):
        result = score_answers(answers_of(1))

        assert result.total_score == 1.0
        assert result.risk_level == RiskLevel.LOW
        assert result.recommendations == []

    def test_exact_mean(self):
        answers = dict(zip(DIMENSIONS, [1, 2, 3, 4, 4]))
        result = score_answers(answers)

        assert result.total_score == pytest.approx(2.8)
        assert result.risk_level == RiskLevel.MODERATE
        # Two dimensions at 4, no urgency line for moderate
        assert len(result.recommendations) == 2
        assert not any(r.startswith("URGENT") for r in result.recommendations)

    def test_high_band_prepends_single_urgent_line(self):
        result = score_answers(answers_of(4))

        assert result.risk_level == RiskLevel.HIGH
        urgent = [r for r in result.recommendations if r.startswith("URGENT: ")]
        assert len(urgent) == 1
        assert result.recommendations[0] == urgent[0]

    def test_context_guidance_appended(self):
        result = score_answers(
            answers_of(2),
            {"workload_intensity": "heavy", "had_breaks": False, "difficult_session": True},
        )

        assert any("protected break" in r for r in result.recommendations)
        assert any("Debrief" in r for r in result.recommendations)


class TestValidation:
    """Invalid input is rejected, never clamped."""

    @pytest.mark.parametrize("bad", [0, 6, -1, 100])
    def test_out_of_range(self, bad):
        answers = answers_of(3)
        answers["energy_tank"] = bad
        with pytest.raises(ValidationError) as exc:
            score_answers(answers)
        assert exc.value.error_code == "VALIDATION_ERROR"
        assert exc.value.status_code == 422

    @pytest.mark.parametrize("bad", [True, 2.5, "3", None])
    def test_non_integer(self, bad):
        answers = answers_of(3)
        answers["recovery_speed"] = bad
        with pytest.raises(ValidationError):
            score_answers(answers)

    def test_missing_dimension(self):
        answers = answers_of(3)
        del answers["tomorrow_readiness"]
        with pytest.raises(ValidationError, match="tomorrow_readiness"):
            score_answers(answers)

    def test_unknown_dimension(self):
        answers = answers_of(3)
        answers["mood"] = 3
        with pytest.raises(ValidationError, match="mood"):
            score_answers(answers)

    def test_unknown_context_value(self):
        with pytest.raises(ValidationError):
            parse_context_factors({"workload_intensity": "extreme"})

    def test_empty_context_is_none(self):
        assert parse_context_factors({}) is None
        assert parse_context_factors(None) is None


class TestBuildAssessment:
    """Scored assessment for one day."""

    def test_fields(self):
        assessment = build_assessment(
            answers_of(3),
            {"team_support": False},
            assessment_date=date(2025, 3, 1),
        )

        assert assessment.date == date(2025, 3, 1)
        assert assessment.total_score == 3.0
        assert assessment.raw_score == 15
        assert assessment.risk_level == RiskLevel.MODERATE
        assert assessment.context_factors.team_support is False
        assert assessment.answers == answers_of(3)

    def test_answers_and_context_validated_once(self, monkeypatch):
        calls = []
        original = scoring.validate_answers

        def counting(answers):
            calls.append(answers)
            return original(answers)

        monkeypatch.setattr(scoring, "validate_answers", counting)
        assessment = build_assessment(answers_of(2), {"had_breaks": True}, assessment_date=date(2025, 3, 1))

        assert len(calls) == 1
        assert assessment.context_factors.had_breaks is True

    def test_score_result_carries_validated_input(self):
        result = score_answers(answers_of(3), {"emotional_demand": "high"})

        assert result.answers == answers_of(3)
        assert result.context_factors.emotional_demand == "high"
        assert "answers" not in result.to_dict()

    def test_row_mapping(self):
        assessment = build_assessment(answers_of(4), assessment_date=date(2025, 3, 1))
        row = assessment.to_row("user-1")

        assert row["user_id"] == "user-1"
        assert row["assessment_date"] == "2025-03-01"
        assert row["raw_score"] == 20
        assert row["risk_level"] == "high"
        assert row["recovery_recommendations"] == assessment.recommendations
