"""Daily check-in submission route."""
from typing import Optional

from fastapi import APIRouter, Depends

from burnout_engine.service import BurnoutService

from ..models.assessment import AssessmentRequest, SubmissionResponse
from ..services.engine import get_service
from .dependencies import current_user

router = APIRouter(prefix="/api/burnout", tags=["Assessments"])


@router.post("/assessments", response_model=SubmissionResponse, status_code=201)
async def submit_assessment(
    body: AssessmentRequest,
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """
    Score and store today's check-in.

    Send `assessmentDate` (the device's local date) so the check-in is
    keyed to the user's day rather than the server's.

    A second submission on the same day replaces the first. When the
    durable store cannot be reached the check-in is kept on this device
    and `sync_pending` is true.
    """
    result = await service.submit_assessment(
        user_id, body.answers(), body.context(), assessment_date=body.assessment_date
    )
    return result.to_dict()
