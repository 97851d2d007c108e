"""Risk assessment and trend models."""
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

from burnout_engine.models import RiskAssessment, RiskFactors, RiskLevel, Trend

RiskLevelName = Literal["low", "moderate", "high", "severe"]
TrendName = Literal["improving", "worsening", "declining", "stable"]


class RiskFactorsModel(BaseModel):
    """Signals behind a risk assessment."""

    energy_trend: float
    stress_level: float
    engagement_days: int = Field(ge=0)
    chronic_stress_detected: bool
    confidence_level: float = 0.0
    last_check_in: Optional[date] = None


class RiskAssessmentModel(BaseModel):
    """Risk view as returned by GET /risk and accepted by POST /interventions/plan."""

    risk_score: float
    risk_level: RiskLevelName
    trend: TrendName = "stable"
    factors: RiskFactorsModel
    weeks_until_burnout: Optional[int] = None
    intervention_urgency: str = "monitoring"
    recommended_actions: list[str] = []
    assessment_date: date
    degraded: bool = False

    def to_domain(self) -> RiskAssessment:
        return RiskAssessment(
            risk_score=self.risk_score,
            risk_level=RiskLevel(self.risk_level),
            trend=Trend(self.trend),
            factors=RiskFactors(**self.factors.model_dump()),
            assessment_date=self.assessment_date,
            weeks_until_burnout=self.weeks_until_burnout,
            intervention_urgency=self.intervention_urgency,
            recommended_actions=list(self.recommended_actions),
            degraded=self.degraded,
        )


class TrendPointModel(BaseModel):
    """One day on the trend chart."""

    date: str
    risk_score: float
    risk_level: RiskLevelName


class NoDataResponse(BaseModel):
    """Returned instead of a risk view for first-time users."""

    status: Literal["no_data"] = "no_data"
    message: str


class RiskTrendResponse(BaseModel):
    """GET /trend: chart points, the risk view over the same window, and the data source."""

    points: list[TrendPointModel]
    summary: Optional[RiskAssessmentModel] = None
    degraded: bool = False
