"""
Scoring Engine for Daily Burnout Self-Assessments.

Turns five ordinal answers (1-5, higher means more strain) into a total
score, a risk band and rule-based recommendations. Everything in this
module is pure: validation failures raise immediately and nothing is
clamped or corrected.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from statistics import fmean
from typing import List, Mapping, Optional, Union

from .errors import ValidationError
from .models import (
    DIMENSIONS,
    EMOTIONAL_DEMANDS,
    WORKLOAD_INTENSITIES,
    Assessment,
    ContextFactors,
    RiskLevel,
)

logger = logging.getLogger(__name__)

MIN_ANSWER = 1
MAX_ANSWER = 5

# A dimension at or above this value gets its own remediation
DIMENSION_ALERT_SCORE = 4

DIMENSION_RECOMMENDATIONS = {
    "energy_tank": "Take a 5-minute breathing break every hour today",
    "recovery_speed": "Schedule protected recovery time between sessions",
    "emotional_leakage": "Create a transition ritual between work and personal time",
    "performance_signal": "Use the Body Check-In to find tension points and take micro-breaks",
    "tomorrow_readiness": "End today with the Evening Reflection and set one small goal for tomorrow",
}

URGENT_RECOMMENDATIONS = {
    RiskLevel.SEVERE: (
        "URGENT: Burnout risk is severe. Step back from assignments today "
        "and reach out to a supervisor or support line"
    ),
    RiskLevel.HIGH: (
        "URGENT: Several burnout indicators are elevated. "
        "Prioritise recovery before your next assignment"
    ),
}


@dataclass(frozen=True)
class RiskThresholds:
    """Upper bounds (inclusive) of the low, moderate and high bands."""

    low_max: float = 2.0
    moderate_max: float = 3.0
    high_max: float = 4.0

    def __post_init__(self):
        if not (MIN_ANSWER <= self.low_max < self.moderate_max < self.high_max <= MAX_ANSWER):
            raise ValueError(
                f"Thresholds must increase within [{MIN_ANSWER}, {MAX_ANSWER}]: "
                f"{self.low_max}, {self.moderate_max}, {self.high_max}"
            )


DEFAULT_THRESHOLDS = RiskThresholds()


@dataclass
class ScoreResult:
    """Output of the scoring engine."""

    total_score: float
    risk_level: RiskLevel
    recommendations: List[str] = field(default_factory=list)
    answers: dict = field(default_factory=dict)
    context_factors: Optional[ContextFactors] = None

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "risk_level": self.risk_level.value,
            "recommendations": list(self.recommendations),
        }


def classify_risk(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> RiskLevel:
    """Map a score in [1, 5] to its risk band. Boundaries belong to the lower band."""
    if score <= thresholds.low_max:
        return RiskLevel.LOW
    if score <= thresholds.moderate_max:
        return RiskLevel.MODERATE
    if score <= thresholds.high_max:
        return RiskLevel.HIGH
    return RiskLevel.SEVERE


def validate_answers(answers: Mapping[str, object]) -> dict:
    """Check that all five dimensions are present integers in [1, 5].

    Raises:
        ValidationError: on a missing, unknown, non-integer or out-of-range answer.
    """
    if not isinstance(answers, Mapping):
        raise ValidationError("Answers must be a mapping of dimension to score")

    unknown = sorted(set(answers) - set(DIMENSIONS))
    if unknown:
        raise ValidationError(f"Unknown dimensions: {', '.join(unknown)}", {"unknown": unknown})

    missing = [name for name in DIMENSIONS if name not in answers]
    if missing:
        raise ValidationError(f"Missing dimensions: {', '.join(missing)}", {"missing": missing})

    validated = {}
    for name in DIMENSIONS:
        value = answers[name]
        # bool is an int subclass; True would silently score as 1
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}", {"field": name})
        if not MIN_ANSWER <= value <= MAX_ANSWER:
            raise ValidationError(
                f"{name} must be between {MIN_ANSWER} and {MAX_ANSWER}, got {value}",
                {"field": name, "value": value},
            )
        validated[name] = value
    return validated


def parse_context_factors(
    raw: Union[Mapping[str, object], ContextFactors, None],
) -> Optional[ContextFactors]:
    """Validate optional context tags and build a ContextFactors."""
    if raw is None:
        return None
    if isinstance(raw, ContextFactors):
        raw = raw.to_dict()

    workload = raw.get("workload_intensity")
    if workload is not None and workload not in WORKLOAD_INTENSITIES:
        raise ValidationError(f"Unknown workload_intensity: {workload!r}")

    demand = raw.get("emotional_demand")
    if demand is not None and demand not in EMOTIONAL_DEMANDS:
        raise ValidationError(f"Unknown emotional_demand: {demand!r}")

    for flag in ("had_breaks", "team_support", "difficult_session"):
        value = raw.get(flag)
        if value is not None and not isinstance(value, bool):
            raise ValidationError(f"{flag} must be a boolean, got {value!r}")

    factors = ContextFactors.from_dict(dict(raw))
    return factors if factors and factors.to_dict() else None


def _context_recommendations(context: Optional[ContextFactors]) -> List[str]:
    recs = []
    if context is None:
        return recs
    if context.workload_intensity == "heavy" and context.had_breaks is False:
        recs.append("Block a protected break into tomorrow's schedule before taking new bookings")
    if context.emotional_demand == "high" or context.difficult_session:
        recs.append("Debrief today's difficult session with a peer or a guided reflection")
    if context.team_support is False:
        recs.append("Reach out to a trusted colleague so you are not carrying today alone")
    return recs


def score_answers(
    answers: Mapping[str, object],
    context_factors: Union[Mapping[str, object], ContextFactors, None] = None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> ScoreResult:
    """
    Score a set of answers.

    Args:
        answers: The five dimension scores keyed by dimension name
        context_factors: Optional context tags for extra guidance
        thresholds: Band boundaries (defaults to 2.0 / 3.0 / 4.0)

    Returns:
        ScoreResult with the exact mean, its risk band and recommendations
    """
    validated = validate_answers(answers)
    context = parse_context_factors(context_factors)

    total_score = fmean(validated.values())
    risk_level = classify_risk(total_score, thresholds)

    recommendations = [
        DIMENSION_RECOMMENDATIONS[name]
        for name in DIMENSIONS
        if validated[name] >= DIMENSION_ALERT_SCORE
    ]
    recommendations.extend(_context_recommendations(context))

    urgent = URGENT_RECOMMENDATIONS.get(risk_level)
    if urgent:
        recommendations.insert(0, urgent)

    logger.debug(f"[SCORING] total={total_score:.2f} level={risk_level.value}")
    return ScoreResult(
        total_score=total_score,
        risk_level=risk_level,
        recommendations=recommendations,
        answers=validated,
        context_factors=context,
    )


def build_assessment(
    answers: Mapping[str, object],
    context_factors: Union[Mapping[str, object], ContextFactors, None] = None,
    assessment_date: Optional[date] = None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    timestamp: Optional[datetime] = None,
) -> Assessment:
    """Collect answers and context into a scored Assessment for one day."""
    result = score_answers(answers, context_factors, thresholds)
    return Assessment(
        **result.answers,
        total_score=result.total_score,
        risk_level=result.risk_level,
        date=assessment_date or date.today(),
        timestamp=timestamp or datetime.now(timezone.utc),
        recommendations=result.recommendations,
        context_factors=result.context_factors,
    )
