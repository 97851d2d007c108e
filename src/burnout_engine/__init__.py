"""Burnout risk scoring and prediction engine for interpreters."""

from .alert_bus import AlertBus, BurnoutAlert
from .errors import (
    BurnoutError,
    MigrationConflict,
    NoDataAvailable,
    RemoteUnavailable,
    ValidationError,
)
from .interventions import (
    InMemoryOutcomeLog,
    InterventionPlanner,
    SupabaseOutcomeLog,
    plan_interventions,
)
from .models import (
    Assessment,
    ContextFactors,
    InterventionAction,
    InterventionPlan,
    Outcome,
    OutcomeEvent,
    Priority,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
    Trend,
    TrendPoint,
)
from .repository import (
    FallbackRepository,
    LocalAssessmentCache,
    SupabaseAssessmentStore,
)
from .scoring import RiskThresholds, build_assessment, classify_risk, score_answers
from .service import BurnoutService, RiskTrend, SubmissionResult
from .supabase_rest import PostgrestClient
from .trends import build_risk_assessment

__all__ = [
    "AlertBus",
    "Assessment",
    "BurnoutAlert",
    "BurnoutError",
    "BurnoutService",
    "ContextFactors",
    "FallbackRepository",
    "InMemoryOutcomeLog",
    "InterventionAction",
    "InterventionPlan",
    "InterventionPlanner",
    "LocalAssessmentCache",
    "MigrationConflict",
    "NoDataAvailable",
    "Outcome",
    "OutcomeEvent",
    "PostgrestClient",
    "Priority",
    "RemoteUnavailable",
    "RiskAssessment",
    "RiskFactors",
    "RiskLevel",
    "RiskThresholds",
    "RiskTrend",
    "SubmissionResult",
    "SupabaseAssessmentStore",
    "SupabaseOutcomeLog",
    "Trend",
    "TrendPoint",
    "ValidationError",
    "build_assessment",
    "build_risk_assessment",
    "classify_risk",
    "plan_interventions",
    "score_answers",
]
