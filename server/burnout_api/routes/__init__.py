"""API route modules."""
from .alerts import router as alerts_router
from .assessments import router as assessments_router
from .interventions import router as interventions_router
from .risk import router as risk_router

__all__ = [
    "alerts_router",
    "assessments_router",
    "interventions_router",
    "risk_router",
]
