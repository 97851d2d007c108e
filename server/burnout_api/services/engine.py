"""Wiring of the burnout engine for the API process."""
import logging
from typing import Optional

from burnout_engine.alert_bus import AlertBus
from burnout_engine.interventions import InMemoryOutcomeLog, InterventionPlanner, SupabaseOutcomeLog
from burnout_engine.repository import FallbackRepository, LocalAssessmentCache, SupabaseAssessmentStore
from burnout_engine.service import BurnoutService
from burnout_engine.supabase_rest import PostgrestClient

from ..config import Settings, get_settings

log = logging.getLogger(__name__)


def build_service(settings: Settings, alert_bus: Optional[AlertBus] = None) -> BurnoutService:
    """Compose a BurnoutService from settings.

    Without Supabase credentials the service runs in local-only mode and
    every user is served from the device cache.
    """
    local = LocalAssessmentCache(settings.local_cache_path, max_days=settings.local_cache_days)

    remote = None
    outcome_log = InMemoryOutcomeLog()
    if settings.remote_enabled:
        client = PostgrestClient(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout)
        remote = SupabaseAssessmentStore(client, settings.assessments_table)
        outcome_log = SupabaseOutcomeLog(client, settings.outcomes_table)
        log.info(f"[GATEWAY] Durable store enabled at {settings.supabase_url}")
    else:
        log.info("[GATEWAY] No Supabase credentials, running local-only")

    return BurnoutService(
        repository=FallbackRepository(local, remote),
        planner=InterventionPlanner(outcome_log),
        alert_bus=alert_bus,
        thresholds=settings.thresholds,
        epsilon=settings.trend_epsilon,
        horizon_weeks=settings.forecast_horizon_weeks,
    )


class EngineManager:
    """Holds the process-wide BurnoutService, built on first use."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._service: Optional[BurnoutService] = None

    @property
    def service(self) -> BurnoutService:
        if self._service is None:
            self._service = build_service(self._settings or get_settings())
        return self._service

    def override(self, service: Optional[BurnoutService]) -> None:
        """Swap the service (tests) or drop it so the next access rebuilds."""
        self._service = service

    async def shutdown(self) -> None:
        if self._service is not None:
            await self._service.aclose()


# Singleton instance
engine = EngineManager()


def get_service() -> BurnoutService:
    """FastAPI dependency returning the shared service."""
    return engine.service
