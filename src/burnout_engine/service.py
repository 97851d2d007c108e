"""
BurnoutService facade.

Composes the scoring engine, persistence gateway, trend analyzer,
intervention planner and alert bus behind the six exposed operations.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Mapping, Optional

from .alert_bus import ALERT_LEVELS, AlertBus, AlertCallback, Subscription
from .errors import NoDataAvailable, ValidationError
from .interventions import InterventionPlanner
from .models import Assessment, InterventionPlan, OutcomeEvent, RiskAssessment, TrendPoint
from .repository import FallbackRepository, LoadResult
from .scoring import DEFAULT_THRESHOLDS, RiskThresholds, build_assessment
from .trends import (
    DEFAULT_EPSILON,
    DEFAULT_HORIZON_WEEKS,
    DEFAULT_LOOKBACK_DAYS,
    build_risk_assessment,
    trend_points,
)

logger = logging.getLogger(__name__)

MAX_TREND_DAYS = 90
# Local calendar dates span UTC-12 to UTC+14
MAX_DATE_SKEW_DAYS = 1


@dataclass
class SubmissionResult:
    """What the caller learns after submitting a check-in."""

    assessment: Assessment
    synced: bool
    sync_pending: bool

    def to_dict(self) -> dict:
        return {
            "assessment": self.assessment.to_dict(),
            "synced": self.synced,
            "sync_pending": self.sync_pending,
        }


@dataclass
class RiskTrend:
    """Chart points for a window plus the risk view computed over the same window."""

    points: List[TrendPoint] = field(default_factory=list)
    summary: Optional[RiskAssessment] = None
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "points": [p.to_dict() for p in self.points],
            "summary": self.summary.to_dict() if self.summary else None,
            "degraded": self.degraded,
        }


class BurnoutService:
    """Entry point used by the API and scripts."""

    def __init__(
        self,
        repository: FallbackRepository,
        planner: Optional[InterventionPlanner] = None,
        alert_bus: Optional[AlertBus] = None,
        thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
        epsilon: float = DEFAULT_EPSILON,
        horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        clock: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.planner = planner or InterventionPlanner()
        self.alert_bus = alert_bus or AlertBus()
        self.thresholds = thresholds
        self.epsilon = epsilon
        self.horizon_weeks = horizon_weeks
        self.lookback_days = lookback_days
        self._clock = clock

    async def submit_assessment(
        self,
        user_id: Optional[str],
        answers: Mapping[str, object],
        context_factors: Optional[Mapping[str, object]] = None,
        assessment_date: Optional[date] = None,
    ) -> SubmissionResult:
        """
        Score and persist today's check-in.

        Args:
            assessment_date: The user's local calendar date. Defaults to the
                server's today; may differ from it by at most one day.

        Raises:
            ValidationError: if the answers, context tags or date are malformed
        """
        today = self._clock()
        if assessment_date is None:
            assessment_date = today
        elif abs((assessment_date - today).days) > MAX_DATE_SKEW_DAYS:
            raise ValidationError(
                f"assessment_date {assessment_date} is not a current local date (server date {today})",
                {"field": "assessment_date"},
            )

        assessment = build_assessment(
            answers,
            context_factors,
            assessment_date=assessment_date,
            thresholds=self.thresholds,
        )
        logger.info(
            f"[SCORING] user={user_id or 'guest'} date={assessment.date} "
            f"score={assessment.total_score:.2f} level={assessment.risk_level.value}"
        )

        result = await self.repository.save(user_id, assessment)

        # One alert per record that reached the durable store, including re-synced ones
        durable = [result.assessment] if result.synced else []
        for stored in durable + result.flushed:
            if stored.risk_level in ALERT_LEVELS:
                self.alert_bus.publish(user_id, stored.risk_level)

        return SubmissionResult(
            assessment=result.assessment,
            synced=result.synced,
            sync_pending=result.sync_pending,
        )

    async def get_latest_risk_assessment(self, user_id: Optional[str]) -> RiskAssessment:
        """
        Recompute the risk view from the last `lookback_days` of history.

        Raises:
            NoDataAvailable: when the user has no assessments anywhere
        """
        today = self._clock()
        start = today - timedelta(days=self.lookback_days - 1)
        loaded = await self._load_window(user_id, start, today)
        if not loaded.has_data:
            raise NoDataAvailable("No burnout assessments recorded yet")
        return self._risk_view(loaded, self._reference_date(loaded, today))

    async def get_risk_trend(self, user_id: Optional[str], days: int = 30) -> RiskTrend:
        """
        Daily trend points for the last `days` days, ascending, with the
        risk view over the same window. Points are empty and the summary is
        None when there is no data.
        """
        if not 1 <= days <= MAX_TREND_DAYS:
            raise ValidationError(f"days must be between 1 and {MAX_TREND_DAYS}, got {days}")
        today = self._clock()
        start = today - timedelta(days=days - 1)
        loaded = await self._load_window(user_id, start, today)
        end = self._reference_date(loaded, today)
        trend = RiskTrend(
            points=trend_points(loaded.assessments, start, end),
            degraded=loaded.degraded,
        )
        if loaded.has_data:
            trend.summary = self._risk_view(loaded, end)
        return trend

    async def _load_window(self, user_id: Optional[str], start: date, today: date) -> LoadResult:
        # Users ahead of the server clock may already hold tomorrow's check-in
        return await self.repository.load(user_id, start, today + timedelta(days=MAX_DATE_SKEW_DAYS))

    @staticmethod
    def _reference_date(loaded: LoadResult, today: date) -> date:
        return max([today] + [a.date for a in loaded.assessments])

    def _risk_view(self, loaded: LoadResult, reference_date: date) -> RiskAssessment:
        # Windows end today, so a lapsed user shows low engagement
        risk = build_risk_assessment(
            loaded.assessments,
            reference_date=reference_date,
            epsilon=self.epsilon,
            horizon_weeks=self.horizon_weeks,
            thresholds=self.thresholds,
            lookback_days=self.lookback_days,
        )
        risk.degraded = loaded.degraded
        risk.recommended_actions = [a.id for a in self.planner.plan(risk).actions]
        return risk

    def get_intervention_plan(self, risk_assessment: RiskAssessment) -> InterventionPlan:
        return self.planner.plan(risk_assessment)

    def subscribe_to_alerts(self, user_id: str, callback: AlertCallback) -> Subscription:
        """Register for high/severe alerts; call the returned handle to unsubscribe."""
        return self.alert_bus.subscribe(user_id, callback)

    async def record_intervention_outcome(
        self,
        user_id: Optional[str],
        action_id: str,
        outcome: str,
        feedback: Optional[str] = None,
    ) -> OutcomeEvent:
        return await self.planner.record_outcome(action_id, outcome, user_id=user_id, feedback=feedback)

    async def aclose(self) -> None:
        """Release the durable store connection pool, if any."""
        await self.repository.aclose()
