"""Daily check-in request and response models."""
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from burnout_engine.models import DIMENSIONS


class ContextFactorsIn(BaseModel):
    """Optional tags describing the working day."""

    model_config = ConfigDict(populate_by_name=True)

    workload_intensity: Optional[Literal["light", "moderate", "heavy"]] = Field(None, alias="workloadIntensity")
    emotional_demand: Optional[Literal["low", "medium", "high"]] = Field(None, alias="emotionalDemand")
    had_breaks: Optional[bool] = Field(None, alias="hadBreaks")
    team_support: Optional[bool] = Field(None, alias="teamSupport")
    difficult_session: Optional[bool] = Field(None, alias="difficultSession")


class AssessmentRequest(BaseModel):
    """Five self-report answers, 1 (fine) to 5 (strained).

    Range checks are left to the scoring engine so every rejection uses
    the same error envelope.
    """

    model_config = ConfigDict(populate_by_name=True)

    energy_tank: StrictInt = Field(alias="energyTank")
    recovery_speed: StrictInt = Field(alias="recoverySpeed")
    emotional_leakage: StrictInt = Field(alias="emotionalLeakage")
    performance_signal: StrictInt = Field(alias="performanceSignal")
    tomorrow_readiness: StrictInt = Field(alias="tomorrowReadiness")
    context_factors: Optional[ContextFactorsIn] = Field(None, alias="contextFactors")
    # Calendar date on the user's device; defaults to the server's today
    assessment_date: Optional[date] = Field(None, alias="assessmentDate")

    def answers(self) -> dict:
        return {name: getattr(self, name) for name in DIMENSIONS}

    def context(self) -> Optional[dict]:
        if self.context_factors is None:
            return None
        return self.context_factors.model_dump(exclude_none=True) or None


class AssessmentOut(BaseModel):
    """A stored daily assessment."""

    energy_tank: int
    recovery_speed: int
    emotional_leakage: int
    performance_signal: int
    tomorrow_readiness: int
    total_score: float
    raw_score: int
    risk_level: str
    date: str
    timestamp: str
    recommendations: list[str]
    context_factors: Optional[dict] = None


class SubmissionResponse(BaseModel):
    """Assessment plus where it ended up."""

    assessment: AssessmentOut
    synced: bool
    sync_pending: bool
