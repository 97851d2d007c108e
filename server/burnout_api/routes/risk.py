"""Risk assessment and trend routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from burnout_engine.service import BurnoutService

from ..models.risk import RiskAssessmentModel, RiskTrendResponse
from ..services.engine import get_service
from .dependencies import current_user

router = APIRouter(prefix="/api/burnout", tags=["Risk"])


@router.get("/risk", response_model=RiskAssessmentModel)
async def get_latest_risk(
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """
    Latest risk assessment, recomputed from recent history.

    First-time users get `{"status": "no_data"}`. `degraded` is true when
    the view was computed from this device's cache.
    """
    risk = await service.get_latest_risk_assessment(user_id)
    return risk.to_dict()


@router.get("/trend", response_model=RiskTrendResponse)
async def get_trend(
    days: int = Query(30, ge=1, le=90, description="Number of days to include"),
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """
    Daily risk scores for the chart, oldest first, with the risk summary
    for the same window. `degraded` is true when served from this device's cache.
    """
    trend = await service.get_risk_trend(user_id, days)
    return trend.to_dict()
