"""Pydantic models for burnout API requests and responses."""
from .assessment import AssessmentOut, AssessmentRequest, ContextFactorsIn, SubmissionResponse
from .interventions import (
    InterventionActionModel,
    InterventionPlanModel,
    OutcomeEventModel,
    OutcomeRequest,
    ResourceModel,
)
from .risk import (
    NoDataResponse,
    RiskAssessmentModel,
    RiskFactorsModel,
    RiskTrendResponse,
    TrendPointModel,
)

__all__ = [
    "AssessmentOut",
    "AssessmentRequest",
    "ContextFactorsIn",
    "SubmissionResponse",
    "InterventionActionModel",
    "InterventionPlanModel",
    "OutcomeEventModel",
    "OutcomeRequest",
    "ResourceModel",
    "NoDataResponse",
    "RiskAssessmentModel",
    "RiskFactorsModel",
    "RiskTrendResponse",
    "TrendPointModel",
]
