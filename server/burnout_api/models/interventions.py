"""Intervention plan and outcome models."""
from typing import Literal, Optional

from pydantic import BaseModel


class InterventionActionModel(BaseModel):
    id: str
    title: str
    description: str
    priority: Literal["critical", "high", "medium", "low"]
    category: str
    estimated_time: str
    completed: bool = False


class ResourceModel(BaseModel):
    title: str
    url: str
    type: Literal["article", "video", "exercise", "contact"]


class InterventionPlanModel(BaseModel):
    """Prioritised actions, conversation prompts and resources."""

    type: Literal["immediate", "urgent", "preventive", "maintenance"]
    actions: list[InterventionActionModel]
    elya_prompts: list[str]
    resources: list[ResourceModel]


class OutcomeRequest(BaseModel):
    """What the user did with an action. Unknown outcomes are rejected by the planner."""

    outcome: str
    feedback: Optional[str] = None


class OutcomeEventModel(BaseModel):
    user_id: Optional[str] = None
    action_id: str
    outcome: Literal["completed", "skipped", "partial"]
    feedback: Optional[str] = None
    timestamp: str
