"""
Domain Models for Burnout Risk Tracking.

Plain dataclasses shared by the scoring engine, the persistence gateway,
the trend analyzer and the intervention planner. Each model knows how to
serialize itself for the local JSON cache and, for assessments, how to map
to and from a durable store row.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional


class RiskLevel(str, Enum):
    """Ordinal burnout risk bands."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"


class Trend(str, Enum):
    """Direction of recent risk relative to the prior window."""

    IMPROVING = "improving"
    WORSENING = "worsening"
    # Accepted in payloads, never produced by the trend classifier
    DECLINING = "declining"
    STABLE = "stable"


class Priority(str, Enum):
    """Intervention priority, most urgent first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Outcome(str, Enum):
    """What the user did with a suggested action."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    PARTIAL = "partial"


# The five self-report dimensions, in questionnaire order
DIMENSIONS = (
    "energy_tank",
    "recovery_speed",
    "emotional_leakage",
    "performance_signal",
    "tomorrow_readiness",
)

WORKLOAD_INTENSITIES = ("light", "moderate", "heavy")
EMOTIONAL_DEMANDS = ("low", "medium", "high")


@dataclass
class ContextFactors:
    """Optional tags describing the working day behind an assessment."""

    workload_intensity: Optional[str] = None
    emotional_demand: Optional[str] = None
    had_breaks: Optional[bool] = None
    team_support: Optional[bool] = None
    difficult_session: Optional[bool] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting unset tags."""
        return {
            key: value
            for key, value in (
                ("workload_intensity", self.workload_intensity),
                ("emotional_demand", self.emotional_demand),
                ("had_breaks", self.had_breaks),
                ("team_support", self.team_support),
                ("difficult_session", self.difficult_session),
            )
            if value is not None
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ContextFactors"]:
        if not data:
            return None
        return cls(
            workload_intensity=data.get("workload_intensity"),
            emotional_demand=data.get("emotional_demand"),
            had_breaks=data.get("had_breaks"),
            team_support=data.get("team_support"),
            difficult_session=data.get("difficult_session"),
        )


@dataclass
class Assessment:
    """A scored daily burnout self-assessment (one per user per day)."""

    energy_tank: int
    recovery_speed: int
    emotional_leakage: int
    performance_signal: int
    tomorrow_readiness: int
    total_score: float
    risk_level: RiskLevel
    date: date
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    recommendations: List[str] = field(default_factory=list)
    context_factors: Optional[ContextFactors] = None

    @property
    def answers(self) -> dict:
        """The five raw dimension scores keyed by dimension name."""
        return {name: getattr(self, name) for name in DIMENSIONS}

    @property
    def raw_score(self) -> int:
        """Sum of the five answers (5-25)."""
        return sum(self.answers.values())

    def to_dict(self) -> dict:
        """Convert to dictionary for the local JSON cache."""
        return {
            **self.answers,
            "total_score": self.total_score,
            "raw_score": self.raw_score,
            "risk_level": self.risk_level.value,
            "date": self.date.isoformat(),
            "timestamp": self.timestamp.isoformat(),
            "recommendations": list(self.recommendations),
            "context_factors": self.context_factors.to_dict() if self.context_factors else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Assessment":
        return cls(
            **{name: int(data[name]) for name in DIMENSIONS},
            total_score=float(data["total_score"]),
            risk_level=RiskLevel(data["risk_level"]),
            date=date.fromisoformat(data["date"]),
            timestamp=_parse_timestamp(data.get("timestamp")),
            recommendations=list(data.get("recommendations") or []),
            context_factors=ContextFactors.from_dict(data.get("context_factors")),
        )

    def to_row(self, user_id: str) -> dict:
        """Map to a `burnout_assessments` row keyed by (user_id, assessment_date)."""
        return {
            "user_id": user_id,
            "assessment_date": self.date.isoformat(),
            **self.answers,
            "total_score": self.total_score,
            "raw_score": self.raw_score,
            "risk_level": self.risk_level.value,
            "recovery_recommendations": list(self.recommendations),
            "context_factors": self.context_factors.to_dict() if self.context_factors else None,
            "created_at": self.timestamp.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict) -> "Assessment":
        return cls(
            **{name: int(row[name]) for name in DIMENSIONS},
            total_score=float(row["total_score"]),
            risk_level=RiskLevel(row["risk_level"]),
            date=date.fromisoformat(str(row["assessment_date"])[:10]),
            timestamp=_parse_timestamp(row.get("created_at")),
            recommendations=list(row.get("recovery_recommendations") or []),
            context_factors=ContextFactors.from_dict(row.get("context_factors")),
        )


@dataclass
class RiskFactors:
    """Structured snapshot of the signals behind a risk assessment."""

    energy_trend: float
    stress_level: float
    engagement_days: int
    chronic_stress_detected: bool
    confidence_level: float = 0.0
    last_check_in: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "energy_trend": self.energy_trend,
            "stress_level": self.stress_level,
            "engagement_days": self.engagement_days,
            "chronic_stress_detected": self.chronic_stress_detected,
            "confidence_level": self.confidence_level,
            "last_check_in": self.last_check_in.isoformat() if self.last_check_in else None,
        }


@dataclass
class RiskAssessment:
    """Risk view recomputed from an assessment history snapshot."""

    risk_score: float
    risk_level: RiskLevel
    trend: Trend
    factors: RiskFactors
    assessment_date: date
    weeks_until_burnout: Optional[int] = None
    intervention_urgency: str = "monitoring"
    recommended_actions: List[str] = field(default_factory=list)
    degraded: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "trend": self.trend.value,
            "factors": self.factors.to_dict(),
            "weeks_until_burnout": self.weeks_until_burnout,
            "intervention_urgency": self.intervention_urgency,
            "recommended_actions": list(self.recommended_actions),
            "assessment_date": self.assessment_date.isoformat(),
            "degraded": self.degraded,
        }


@dataclass
class TrendPoint:
    """One day on the risk trend chart."""

    date: date
    risk_score: float
    risk_level: RiskLevel

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
        }


@dataclass
class InterventionAction:
    """A suggested action in an intervention plan."""

    id: str
    title: str
    description: str
    priority: Priority
    category: str
    estimated_time: str
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "category": self.category,
            "estimated_time": self.estimated_time,
            "completed": self.completed,
        }


@dataclass
class Resource:
    """A supporting article, video, exercise or contact."""

    title: str
    url: str
    type: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url, "type": self.type}


@dataclass
class InterventionPlan:
    """Prioritised actions, conversation prompts and resources."""

    type: str
    actions: List[InterventionAction] = field(default_factory=list)
    elya_prompts: List[str] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "actions": [action.to_dict() for action in self.actions],
            "elya_prompts": list(self.elya_prompts),
            "resources": [resource.to_dict() for resource in self.resources],
        }


@dataclass
class OutcomeEvent:
    """Record of a user completing or skipping an intervention action."""

    action_id: str
    outcome: Outcome
    user_id: Optional[str] = None
    feedback: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "action_id": self.action_id,
            "outcome": self.outcome.value,
            "feedback": self.feedback,
            "timestamp": self.timestamp.isoformat(),
        }


def _parse_timestamp(value) -> datetime:
    """Parse an ISO timestamp, accepting the trailing 'Z' PostgREST emits."""
    if not value:
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
