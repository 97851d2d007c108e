"""Application configuration loaded from environment variables."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from burnout_engine.scoring import RiskThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Durable store (Supabase PostgREST). Remote persistence is off unless both are set.
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    assessments_table: str = "burnout_assessments"
    outcomes_table: str = "intervention_outcomes"
    request_timeout: float = 5.0

    # Device-local cache
    local_cache_path: Optional[str] = None
    local_cache_days: int = 30

    # Risk model
    trend_epsilon: float = 0.2
    forecast_horizon_weeks: int = 12
    low_max: float = 2.0
    moderate_max: float = 3.0
    high_max: float = 4.0

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8083

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @property
    def remote_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def thresholds(self) -> RiskThresholds:
        return RiskThresholds(
            low_max=self.low_max,
            moderate_max=self.moderate_max,
            high_max=self.high_max,
        )

    class Config:
        env_prefix = "BURNOUT_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
