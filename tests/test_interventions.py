"""
Unit tests for the intervention planner.

Usage:
    pytest tests/test_interventions.py -v
"""
import pytest

from conftest import TODAY
from burnout_engine.errors import ValidationError
from burnout_engine.interventions import (
    PRIORITY_ORDER,
    RULES,
    InMemoryOutcomeLog,
    InterventionPlanner,
    plan_interventions,
)
from burnout_engine.models import Outcome, Priority, RiskAssessment, RiskFactors, RiskLevel, Trend


def risk(
    level=RiskLevel.LOW,
    trend=Trend.STABLE,
    energy=2.0,
    stress=2.0,
    engagement=5,
    chronic=False,
    weeks=None,
) -> RiskAssessment:
    return RiskAssessment(
        risk_score=2.0,
        risk_level=level,
        trend=trend,
        factors=RiskFactors(
            energy_trend=energy,
            stress_level=stress,
            engagement_days=engagement,
            chronic_stress_detected=chronic,
        ),
        assessment_date=TODAY,
        weeks_until_burnout=weeks,
    )


def ids(plan) -> list:
    return [a.id for a in plan.actions]


class TestPlanInterventions:
    """Rule table evaluation."""

    def test_severe_starts_with_critical_actions(self):
        plan = plan_interventions(risk(RiskLevel.SEVERE, energy=4.5, stress=4.5, chronic=True))

        assert plan.type == "immediate"
        assert plan.actions[0].priority == Priority.CRITICAL
        assert ids(plan)[:3] == ["immediate-break", "supervisor-check", "crisis-support"]

    def test_actions_sorted_by_priority(self):
        plan = plan_interventions(
            risk(RiskLevel.HIGH, Trend.WORSENING, energy=4.0, stress=4.0, engagement=1, chronic=True, weeks=3)
        )

        ranks = [PRIORITY_ORDER[a.priority] for a in plan.actions]
        assert ranks == sorted(ranks)

    def test_high_risk(self):
        plan = plan_interventions(risk(RiskLevel.HIGH))

        assert plan.type == "urgent"
        assert ids(plan) == ["workload-review", "stress-reduction", "peer-support"]
        assert any(r.url == "tel:988" for r in plan.resources)

    def test_moderate_risk(self):
        plan = plan_interventions(risk(RiskLevel.MODERATE))

        assert plan.type == "preventive"
        assert ids(plan) == ["weekly-reflection", "skill-building"]
        assert not any(r.type == "contact" for r in plan.resources)

    def test_low_risk_maintenance(self):
        plan = plan_interventions(risk(RiskLevel.LOW))

        assert plan.type == "maintenance"
        assert ids(plan) == ["daily-check-in"]
        assert [r.type for r in plan.resources] == ["article", "video", "exercise"]

    def test_factor_rules(self):
        plan = plan_interventions(risk(RiskLevel.LOW, energy=3.5, stress=3.5, engagement=2, chronic=True))

        assert {"stress-assessment", "energy-restoration", "decompression-ritual", "re-engagement"} <= set(ids(plan))

    def test_forecast_rule_needs_a_forecast(self):
        assert "forecast-review" not in ids(plan_interventions(risk(trend=Trend.WORSENING)))
        assert "forecast-review" in ids(plan_interventions(risk(trend=Trend.WORSENING, weeks=4)))

    def test_no_duplicate_actions_or_prompts(self):
        plan = plan_interventions(risk(RiskLevel.MODERATE, energy=4.0, stress=4.0))

        assert len(ids(plan)) == len(set(ids(plan)))
        assert len(plan.elya_prompts) == len(set(plan.elya_prompts))

    def test_plan_actions_are_copies(self):
        plan = plan_interventions(risk(RiskLevel.LOW))
        plan.actions[0].completed = True

        rule_action = next(a for rule in RULES for a in rule.actions if a.id == "daily-check-in")
        assert rule_action.completed is False

    def test_deterministic(self):
        first = plan_interventions(risk(RiskLevel.HIGH, chronic=True))
        second = plan_interventions(risk(RiskLevel.HIGH, chronic=True))
        assert first.to_dict() == second.to_dict()


class TestRecordOutcome:
    """Outcome hook."""

    @pytest.mark.asyncio
    async def test_records_event(self):
        log = InMemoryOutcomeLog()
        planner = InterventionPlanner(log)

        event = await planner.record_outcome("peer-support", "completed", user_id="u1", feedback="helped")

        assert event.outcome == Outcome.COMPLETED
        assert log.events("u1") == [event]
        assert event.to_dict()["feedback"] == "helped"

    @pytest.mark.asyncio
    async def test_unknown_outcome_rejected(self):
        planner = InterventionPlanner()

        with pytest.raises(ValidationError):
            await planner.record_outcome("peer-support", "maybe")

    @pytest.mark.asyncio
    async def test_rule_table_unchanged_by_outcomes(self):
        planner = InterventionPlanner()
        before = plan_interventions(risk(RiskLevel.HIGH)).to_dict()

        await planner.record_outcome("workload-review", Outcome.SKIPPED)

        assert plan_interventions(risk(RiskLevel.HIGH)).to_dict() == before
