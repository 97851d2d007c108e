"""Real-time burnout alerts via Server-Sent Events."""
import json
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from burnout_engine.errors import ValidationError
from burnout_engine.service import BurnoutService

from ..services.engine import get_service
from .dependencies import current_user

router = APIRouter(prefix="/api/burnout/alerts", tags=["Alerts"])


def format_sse(payload: dict) -> str:
    """Frame one alert as an SSE event."""
    return f"event: alert\ndata: {json.dumps(payload)}\n\n"


@router.get("/stream")
async def stream_alerts(
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """
    Stream `high` and `severe` risk alerts for the user.

    Each event carries `{"risk_level", "message"}`. The stream never
    closes; clients should reconnect.

    Usage with curl:
        curl -N -H "X-User-Id: <id>" http://localhost:8083/api/burnout/alerts/stream
    """
    if user_id is None:
        raise ValidationError("Alerts require a signed-in user (X-User-Id header)")

    async def event_generator():
        async for payload in service.alert_bus.stream(user_id):
            yield format_sse(payload)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


@router.get("/history")
async def get_alert_history(
    count: int = Query(20, ge=1, le=100, description="Number of alerts to return"),
    user_id: Optional[str] = Depends(current_user),
    service: BurnoutService = Depends(get_service),
):
    """Recent alerts for the user, newest first."""
    if user_id is None:
        return []
    return [alert.to_dict() for alert in service.alert_bus.get_history(user_id, count)]


@router.get("/stats")
async def get_alert_stats(service: BurnoutService = Depends(get_service)):
    """Publish counts and current subscriber numbers."""
    return service.alert_bus.get_stats()
