"""Intervention plan and outcome routes."""
from typing import Optional

from fastapi import APIRouter, Depends

from burnout_engine.service import BurnoutService

from ..models.interventions import InterventionPlanModel, OutcomeEventModel, OutcomeRequest
from ..models.risk import RiskAssessmentModel
from ..services.engine import get_service
from .dependencies import current_user

router = APIRouter(prefix="/api/burnout/interventions", tags=["Interventions"])


@router.get("", response_model=InterventionPlanModel)
async def get_plan_for_latest(
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """Intervention plan for the user's latest risk assessment."""
    risk = await service.get_latest_risk_assessment(user_id)
    return service.get_intervention_plan(risk).to_dict()


@router.post("/plan", response_model=InterventionPlanModel)
async def plan_for_assessment(
    body: RiskAssessmentModel,
    service: BurnoutService = Depends(get_service),
):
    """Intervention plan for a posted risk assessment."""
    return service.get_intervention_plan(body.to_domain()).to_dict()


@router.post("/{action_id}/outcome", response_model=OutcomeEventModel, status_code=201)
async def record_outcome(
    action_id: str,
    body: OutcomeRequest,
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """Record whether a suggested action was completed, skipped or partly done."""
    event = await service.record_intervention_outcome(user_id, action_id, body.outcome, body.feedback)
    return event.to_dict()
