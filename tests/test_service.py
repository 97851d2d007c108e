"""
Tests for the BurnoutService facade.

Exercises the six exposed operations end to end against the in-memory
durable store and device cache.

Usage:
    pytest tests/test_service.py -v
"""
import asyncio
from datetime import timedelta

import pytest

from conftest import TODAY, answers_for_score, answers_of, make_history
from burnout_engine.errors import NoDataAvailable, ValidationError
from burnout_engine.models import Priority, RiskLevel, Trend


class TestSubmitAssessment:
    """submit_assessment"""

    @pytest.mark.asyncio
    async def test_submit_scores_and_syncs(self, service, remote_store):
        result = await service.submit_assessment("u1", answers_of(5))

        assert result.assessment.total_score == 5.0
        assert result.assessment.risk_level == RiskLevel.SEVERE
        assert result.assessment.date == TODAY
        assert result.synced is True
        assert remote_store.count("u1") == 1

    @pytest.mark.asyncio
    async def test_same_day_twice_leaves_one_row(self, service, remote_store):
        await service.submit_assessment("u1", answers_of(1))
        await service.submit_assessment("u1", answers_of(1))

        rows = remote_store.get_range("u1")
        assert len(rows) == 1
        assert rows[0].total_score == 1.0
        assert rows[0].risk_level == RiskLevel.LOW

    @pytest.mark.asyncio
    async def test_concurrent_same_day_submissions_leave_one_row(self, service, local_cache, remote_store):
        await asyncio.gather(
            service.submit_assessment("u1", answers_of(2)),
            service.submit_assessment("u1", answers_of(4)),
        )

        assert remote_store.count("u1") == 1
        assert local_cache.count("u1") == 1
        assert remote_store.get_range("u1")[0].date == TODAY

    @pytest.mark.asyncio
    async def test_device_date_keys_the_assessment(self, service, remote_store):
        tomorrow = TODAY + timedelta(days=1)

        result = await service.submit_assessment("u1", answers_of(3), assessment_date=tomorrow)

        assert result.assessment.date == tomorrow
        assert [a.date for a in remote_store.get_range("u1")] == [tomorrow]
        risk = await service.get_latest_risk_assessment("u1")
        assert risk.assessment_date == tomorrow

    @pytest.mark.asyncio
    async def test_device_date_out_of_range_rejected(self, service, local_cache):
        with pytest.raises(ValidationError):
            await service.submit_assessment("u1", answers_of(3), assessment_date=TODAY - timedelta(days=5))
        assert local_cache.count("u1") == 0

    @pytest.mark.asyncio
    async def test_invalid_answers_not_persisted(self, service, local_cache):
        answers = answers_of(3)
        answers["energy_tank"] = 7

        with pytest.raises(ValidationError):
            await service.submit_assessment("u1", answers)
        assert local_cache.count("u1") == 0

    @pytest.mark.asyncio
    async def test_remote_down_reports_sync_pending(self, service, remote_store):
        remote_store.available = False

        result = await service.submit_assessment("u1", answers_of(3))

        assert result.synced is False
        assert result.sync_pending is True


class TestAlerts:
    """subscribe_to_alerts"""

    @pytest.mark.asyncio
    async def test_high_risk_durable_write_alerts_once(self, service):
        received = []
        service.subscribe_to_alerts("u1", received.append)

        await service.submit_assessment("u1", answers_of(4))

        assert len(received) == 1
        assert received[0]["risk_level"] == "high"
        assert received[0]["message"]

    @pytest.mark.asyncio
    async def test_low_risk_does_not_alert(self, service):
        received = []
        service.subscribe_to_alerts("u1", received.append)

        await service.submit_assessment("u1", answers_of(2))

        assert received == []

    @pytest.mark.asyncio
    async def test_failed_remote_write_does_not_alert(self, service, remote_store):
        received = []
        service.subscribe_to_alerts("u1", received.append)
        remote_store.available = False

        await service.submit_assessment("u1", answers_of(5))

        assert received == []

    @pytest.mark.asyncio
    async def test_resynced_severe_write_alerts_once(self, service, remote_store):
        received = []
        service.subscribe_to_alerts("u1", received.append)
        remote_store.available = False
        await service.submit_assessment("u1", answers_of(5), assessment_date=TODAY - timedelta(days=1))
        assert received == []

        remote_store.available = True
        result = await service.submit_assessment("u1", answers_of(2))

        assert result.synced is True
        assert [alert["risk_level"] for alert in received] == ["severe"]
        assert remote_store.count("u1") == 2

        await service.submit_assessment("u1", answers_of(2))
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_unsubscribed_callback_never_invoked(self, service):
        received = []
        unsubscribe = service.subscribe_to_alerts("u1", received.append)
        unsubscribe()

        await service.submit_assessment("u1", answers_of(5))

        assert received == []


class TestRiskAssessment:
    """get_latest_risk_assessment"""

    @pytest.mark.asyncio
    async def test_no_history_raises_no_data(self, service):
        with pytest.raises(NoDataAvailable):
            await service.get_latest_risk_assessment("u1")

    @pytest.mark.asyncio
    async def test_worsening_history(self, service, remote_store):
        scores = [2.0] * 7 + [2.4] * 7 + [3.0] * 7 + [3.6] * 7
        for a in make_history(scores):
            await remote_store.upsert("u1", a)

        risk = await service.get_latest_risk_assessment("u1")

        assert risk.trend == Trend.WORSENING
        assert risk.weeks_until_burnout == 1
        assert risk.risk_level == RiskLevel.HIGH
        assert risk.degraded is False
        assert risk.recommended_actions[0] in {"workload-review", "stress-assessment", "forecast-review"}

    @pytest.mark.asyncio
    async def test_degraded_when_remote_unreachable(self, service, remote_store):
        await service.submit_assessment("u1", answers_of(3))
        remote_store.available = False

        risk = await service.get_latest_risk_assessment("u1")

        assert risk.degraded is True
        assert risk.risk_level == RiskLevel.MODERATE

    @pytest.mark.asyncio
    async def test_lapsed_history_measured_from_today(self, service, remote_store):
        for a in make_history([1.4] * 7, end=TODAY - timedelta(days=20)):
            await remote_store.upsert("u1", a)

        risk = await service.get_latest_risk_assessment("u1")

        assert risk.assessment_date == TODAY
        assert risk.factors.engagement_days == 0
        assert risk.factors.last_check_in == TODAY - timedelta(days=20)
        assert "re-engagement" in risk.recommended_actions

    @pytest.mark.asyncio
    async def test_guest_uses_local_cache(self, service):
        await service.submit_assessment(None, answers_for_score(1.4))

        risk = await service.get_latest_risk_assessment(None)

        assert risk.risk_level == RiskLevel.LOW
        assert risk.factors.engagement_days == 1
        assert "re-engagement" in risk.recommended_actions


class TestTrendAndPlan:
    """get_risk_trend, get_intervention_plan, record_intervention_outcome"""

    @pytest.mark.asyncio
    async def test_trend_points(self, service, remote_store):
        for a in make_history([2.0, 3.0, 4.0]):
            await remote_store.upsert("u1", a)

        trend = await service.get_risk_trend("u1", days=2)

        assert [p.date for p in trend.points] == [TODAY - timedelta(days=1), TODAY]
        assert trend.degraded is False
        assert trend.summary.assessment_date == TODAY

    @pytest.mark.asyncio
    async def test_short_window_summary_is_stable(self, service, remote_store):
        scores = [2.0] * 7 + [2.4] * 7 + [3.0] * 7 + [3.6] * 7
        for a in make_history(scores):
            await remote_store.upsert("u1", a)

        trend = await service.get_risk_trend("u1", days=10)

        assert len(trend.points) == 10
        assert trend.summary.trend == Trend.STABLE
        assert trend.summary.weeks_until_burnout is None

    @pytest.mark.asyncio
    async def test_trend_degraded_when_remote_unreachable(self, service, remote_store):
        await service.submit_assessment("u1", answers_of(3))
        remote_store.available = False

        trend = await service.get_risk_trend("u1")

        assert trend.degraded is True
        assert trend.summary.degraded is True
        assert [p.date for p in trend.points] == [TODAY]

    @pytest.mark.asyncio
    async def test_trend_empty_without_data(self, service):
        trend = await service.get_risk_trend("u1")

        assert trend.points == []
        assert trend.summary is None

    @pytest.mark.asyncio
    async def test_trend_days_validated(self, service):
        with pytest.raises(ValidationError):
            await service.get_risk_trend("u1", days=0)
        with pytest.raises(ValidationError):
            await service.get_risk_trend("u1", days=91)

    @pytest.mark.asyncio
    async def test_plan_for_severe(self, service):
        await service.submit_assessment("u1", answers_of(5))
        risk = await service.get_latest_risk_assessment("u1")

        plan = service.get_intervention_plan(risk)

        assert plan.actions[0].priority == Priority.CRITICAL
        assert [a.id for a in plan.actions] == risk.recommended_actions

    @pytest.mark.asyncio
    async def test_record_outcome(self, service):
        event = await service.record_intervention_outcome("u1", "peer-support", "partial")

        assert event.user_id == "u1"
        assert event.outcome.value == "partial"
