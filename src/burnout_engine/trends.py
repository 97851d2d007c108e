"""
Trend Analyzer for burnout risk.

Pure projections over an assessment history (ascending by date):
risk factors, week-over-week trend classification, a linear
"weeks until burnout" forecast, daily trend points and weekly buckets.
"""

import logging
from datetime import date, timedelta
from statistics import fmean
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import NoDataAvailable
from .models import Assessment, RiskAssessment, RiskFactors, RiskLevel, Trend, TrendPoint
from .scoring import DEFAULT_THRESHOLDS, RiskThresholds, classify_risk

logger = logging.getLogger(__name__)

RECENT_ENTRIES = 7
WINDOW_DAYS = 7
MIN_TREND_DAYS = 14
CHRONIC_WINDOW_DAYS = 14
CHRONIC_MIN_DAYS = 10
DEFAULT_EPSILON = 0.2
DEFAULT_HORIZON_WEEKS = 12
DEFAULT_LOOKBACK_DAYS = 30

URGENCY_BY_LEVEL = {
    RiskLevel.LOW: "monitoring",
    RiskLevel.MODERATE: "recommended",
    RiskLevel.HIGH: "urgent",
    RiskLevel.SEVERE: "immediate",
}


def _by_day(history: Iterable[Assessment]) -> Dict[date, Assessment]:
    """Index history by date; a later duplicate for the same day wins."""
    return {a.date: a for a in sorted(history, key=lambda a: (a.date, a.timestamp))}


def _window(days: Dict[date, Assessment], end: date, length: int) -> List[Assessment]:
    start = end - timedelta(days=length - 1)
    return [a for d, a in sorted(days.items()) if start <= d <= end]


def _mean(values: List[float]) -> float:
    return fmean(values) if values else 0.0


def compute_factors(
    history: List[Assessment],
    reference_date: date,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> RiskFactors:
    """Derive the structured factor snapshot for the reference date."""
    days = _by_day(a for a in history if a.date <= reference_date)
    recent = [days[d] for d in sorted(days)][-RECENT_ENTRIES:]

    engagement = len(_window(days, reference_date, WINDOW_DAYS))
    chronic_days = sum(
        1 for a in _window(days, reference_date, CHRONIC_WINDOW_DAYS)
        if a.total_score > thresholds.moderate_max
    )
    lookback = len(_window(days, reference_date, lookback_days))

    return RiskFactors(
        energy_trend=round(_mean([a.energy_tank for a in recent]), 2),
        stress_level=round(_mean([a.emotional_leakage for a in recent]), 2),
        engagement_days=engagement,
        chronic_stress_detected=chronic_days >= CHRONIC_MIN_DAYS,
        confidence_level=round(min(1.0, lookback / MIN_TREND_DAYS), 2),
        last_check_in=max(days) if days else None,
    )


def window_means(
    history: List[Assessment], reference_date: date
) -> Tuple[Optional[float], Optional[float]]:
    """Mean total score of the 7 days ending on reference_date and the 7 days before."""
    days = _by_day(history)
    recent = _window(days, reference_date, WINDOW_DAYS)
    prior = _window(days, reference_date - timedelta(days=WINDOW_DAYS), WINDOW_DAYS)
    return (
        fmean(a.total_score for a in recent) if recent else None,
        fmean(a.total_score for a in prior) if prior else None,
    )


def classify_trend(
    history: List[Assessment],
    reference_date: date,
    epsilon: float = DEFAULT_EPSILON,
) -> Trend:
    """
    Compare the recent week with the week before it.

    Histories shorter than 14 distinct days are always stable.
    """
    usable = [a for a in history if a.date <= reference_date]
    if len({a.date for a in usable}) < MIN_TREND_DAYS:
        return Trend.STABLE

    recent, prior = window_means(usable, reference_date)
    if recent is None or prior is None:
        return Trend.STABLE
    if recent < prior - epsilon:
        return Trend.IMPROVING
    if recent > prior + epsilon:
        return Trend.WORSENING
    return Trend.STABLE


def weeks_until_burnout(
    recent: float,
    prior: float,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
    ceiling: float = 4.0,
) -> Optional[int]:
    """
    Smallest whole number of weeks k >= 1 for which the linear projection
    `recent + k * (recent - prior)` crosses `ceiling`, or None beyond the horizon.
    """
    slope = recent - prior
    if slope <= 0:
        return None
    for k in range(1, horizon_weeks + 1):
        if recent + k * slope > ceiling:
            return k
    return None


def trend_points(history: List[Assessment], start: date, end: date) -> List[TrendPoint]:
    """One point per assessed day in [start, end], ascending."""
    days = _by_day(history)
    return [
        TrendPoint(date=d, risk_score=round(a.total_score, 2), risk_level=a.risk_level)
        for d, a in sorted(days.items())
        if start <= d <= end
    ]


def weekly_buckets(
    history: List[Assessment],
    reference_date: date,
    weeks: int = 4,
) -> List[Tuple[date, Optional[float]]]:
    """
    Mean total score per 7-day bucket counted back from reference_date.

    Returns (bucket start date, mean or None when empty), oldest first.
    """
    days = _by_day(history)
    buckets = []
    for i in range(weeks - 1, -1, -1):
        end = reference_date - timedelta(days=WINDOW_DAYS * i)
        entries = _window(days, end, WINDOW_DAYS)
        mean = round(fmean(a.total_score for a in entries), 2) if entries else None
        buckets.append((end - timedelta(days=WINDOW_DAYS - 1), mean))
    return buckets


def build_risk_assessment(
    history: List[Assessment],
    reference_date: Optional[date] = None,
    epsilon: float = DEFAULT_EPSILON,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> RiskAssessment:
    """
    Compute the RiskAssessment view for a history snapshot.

    Args:
        history: Assessments for one user, any order
        reference_date: Day the view is computed for (defaults to the latest assessment)
        epsilon: Dead band for the trend comparison
        horizon_weeks: Forecasts further out than this are dropped
        thresholds: Band boundaries used for risk_level and chronic stress
        lookback_days: Window used for the confidence level

    Raises:
        NoDataAvailable: if the history has no assessment on or before the reference date
    """
    if reference_date is None and history:
        reference_date = max(a.date for a in history)
    usable = [a for a in history if reference_date is not None and a.date <= reference_date]
    if not usable:
        raise NoDataAvailable("No assessments available for risk computation")

    ordered = [a for _, a in sorted(_by_day(usable).items())]
    risk_score = round(fmean(a.total_score for a in ordered[-RECENT_ENTRIES:]), 2)
    risk_level = classify_risk(risk_score, thresholds)
    trend = classify_trend(ordered, reference_date, epsilon)

    forecast = None
    if trend == Trend.WORSENING:
        recent, prior = window_means(ordered, reference_date)
        forecast = weeks_until_burnout(recent, prior, horizon_weeks, ceiling=thresholds.high_max)

    factors = compute_factors(ordered, reference_date, thresholds, lookback_days)
    logger.debug(
        f"[TREND] score={risk_score} level={risk_level.value} trend={trend.value} "
        f"forecast={forecast} days={len(ordered)}"
    )

    return RiskAssessment(
        risk_score=risk_score,
        risk_level=risk_level,
        trend=trend,
        factors=factors,
        assessment_date=reference_date,
        weeks_until_burnout=forecast,
        intervention_urgency=URGENCY_BY_LEVEL[risk_level],
    )
