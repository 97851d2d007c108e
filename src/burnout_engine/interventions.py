"""
Intervention Planner.

Maps a RiskAssessment to a prioritised InterventionPlan through a fixed,
ordered rule table, and records what users did with the suggested actions.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

from .errors import ValidationError
from .models import (
    InterventionAction,
    InterventionPlan,
    Outcome,
    OutcomeEvent,
    Priority,
    Resource,
    RiskAssessment,
    RiskLevel,
    Trend,
)
from .supabase_rest import PostgrestClient

logger = logging.getLogger(__name__)

# Averaged dimension scores at or above this are in the strained range
FACTOR_ALERT_SCORE = 3.5
LOW_ENGAGEMENT_DAYS = 3

PRIORITY_ORDER = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}

PLAN_TYPE_BY_LEVEL = {
    RiskLevel.SEVERE: "immediate",
    RiskLevel.HIGH: "urgent",
    RiskLevel.MODERATE: "preventive",
    RiskLevel.LOW: "maintenance",
}


def _action(id, title, description, priority, category, estimated_time) -> InterventionAction:
    return InterventionAction(
        id=id,
        title=title,
        description=description,
        priority=priority,
        category=category,
        estimated_time=estimated_time,
    )


@dataclass(frozen=True)
class Rule:
    """One row of the rule table: when `applies` holds, add actions and prompts."""

    name: str
    applies: Callable[[RiskAssessment], bool]
    actions: Tuple[InterventionAction, ...] = ()
    prompts: Tuple[str, ...] = ()


RULES: Tuple[Rule, ...] = (
    Rule(
        name="severe_risk",
        applies=lambda r: r.risk_level == RiskLevel.SEVERE,
        actions=(
            _action("immediate-break", "Take Immediate Wellness Break",
                    "Step away from current assignments for a brief reset period",
                    Priority.CRITICAL, "self_care", "15-30 minutes"),
            _action("supervisor-check", "Schedule Supervisor Check-in",
                    "Discuss workload and support needs with your supervisor",
                    Priority.CRITICAL, "professional_support", "30 minutes"),
            _action("crisis-support", "Access Crisis Support Resources",
                    "Connect with mental health support services immediately",
                    Priority.CRITICAL, "professional_support", "As needed"),
        ),
        prompts=(
            "I'm feeling completely overwhelmed and need immediate support",
            "Help me create an emergency self-care plan for today",
            "What are signs I should take a mental health day?",
        ),
    ),
    Rule(
        name="chronic_stress",
        applies=lambda r: r.factors.chronic_stress_detected,
        actions=(
            _action("stress-assessment", "Complete Comprehensive Stress Assessment",
                    "Identify specific stressors and develop targeted solutions",
                    Priority.HIGH, "professional_support", "60 minutes"),
        ),
    ),
    Rule(
        name="high_risk",
        applies=lambda r: r.risk_level == RiskLevel.HIGH,
        actions=(
            _action("workload-review", "Review and Adjust Workload",
                    "Identify assignments that can be rescheduled or delegated",
                    Priority.HIGH, "workload", "45 minutes"),
            _action("stress-reduction", "Implement Daily Stress Reduction",
                    "Start a daily 10-minute stress reduction practice",
                    Priority.HIGH, "self_care", "10 minutes/day"),
            _action("peer-support", "Connect with Peer Support",
                    "Schedule time with a trusted colleague for support",
                    Priority.MEDIUM, "social", "30 minutes"),
        ),
        prompts=(
            "Help me recognize early warning signs of burnout",
            "I need strategies for managing vicarious trauma",
            "How can I set better boundaries in high-stress assignments?",
        ),
    ),
    Rule(
        name="worsening_forecast",
        applies=lambda r: r.trend == Trend.WORSENING and r.weeks_until_burnout is not None,
        actions=(
            _action("forecast-review", "Review Your Burnout Forecast",
                    "Your scores are rising week over week. Plan lighter days before the trend peaks",
                    Priority.HIGH, "workload", "20 minutes"),
        ),
        prompts=("My stress keeps rising each week. What should I change first?",),
    ),
    Rule(
        name="energy_depleted",
        applies=lambda r: r.factors.energy_trend >= FACTOR_ALERT_SCORE,
        actions=(
            _action("energy-restoration", "Focus on Energy Restoration",
                    "Prioritize sleep, nutrition, and movement for energy recovery",
                    Priority.HIGH, "self_care", "30 minutes/day"),
        ),
        prompts=("How can I maintain energy throughout long assignments?",),
    ),
    Rule(
        name="high_stress",
        applies=lambda r: r.factors.stress_level >= FACTOR_ALERT_SCORE,
        actions=(
            _action("decompression-ritual", "Build a Decompression Ritual",
                    "Close each assignment with a short routine that separates work from home",
                    Priority.MEDIUM, "self_care", "10 minutes/day"),
        ),
        prompts=("What are effective ways to decompress after difficult sessions?",),
    ),
    Rule(
        name="moderate_risk",
        applies=lambda r: r.risk_level == RiskLevel.MODERATE,
        actions=(
            _action("weekly-reflection", "Establish Weekly Reflection Practice",
                    "Set aside time each week for structured reflection",
                    Priority.MEDIUM, "self_care", "20 minutes/week"),
            _action("skill-building", "Build Resilience Skills",
                    "Learn new coping strategies for challenging assignments",
                    Priority.MEDIUM, "training", "30 minutes/week"),
        ),
        prompts=(
            "What are effective ways to decompress after difficult sessions?",
            "Help me build a sustainable self-care routine",
            "How can I maintain energy throughout long assignments?",
        ),
    ),
    Rule(
        name="low_engagement",
        applies=lambda r: r.factors.engagement_days < LOW_ENGAGEMENT_DAYS,
        actions=(
            _action("re-engagement", "Re-engage with Wellness Practice",
                    "Restart your daily reflection practice with small, manageable steps",
                    Priority.MEDIUM, "self_care", "5 minutes/day"),
        ),
    ),
    Rule(
        name="low_risk",
        applies=lambda r: r.risk_level == RiskLevel.LOW,
        actions=(
            _action("daily-check-in", "Keep Your Daily Check-in Habit",
                    "A one-minute check-in each day keeps your trend accurate",
                    Priority.LOW, "self_care", "1 minute/day"),
        ),
        prompts=("Help me keep the habits that are working for me",),
    ),
)

BASE_RESOURCES = (
    Resource("Interpreter Self-Care Guide", "/resources/self-care-guide", "article"),
    Resource("Quick Stress Relief Exercises", "/resources/stress-relief-video", "video"),
    Resource("5-Minute Grounding Practice", "/exercises/grounding", "exercise"),
)

SUPPORT_LINE = Resource("Mental Health Support Line", "tel:988", "contact")


def plan_interventions(risk: RiskAssessment) -> InterventionPlan:
    """
    Build the plan for a risk assessment.

    Rules fire in table order; an action id seen twice keeps its first
    occurrence. The final list is stably sorted by priority.
    """
    actions: List[InterventionAction] = []
    seen_ids = set()
    prompts: List[str] = []
    fired = []

    for rule in RULES:
        if not rule.applies(risk):
            continue
        fired.append(rule.name)
        for action in rule.actions:
            if action.id in seen_ids:
                continue
            seen_ids.add(action.id)
            # Rule table entries are shared; hand out copies
            actions.append(replace(action))
        for prompt in rule.prompts:
            if prompt not in prompts:
                prompts.append(prompt)

    actions.sort(key=lambda a: PRIORITY_ORDER[a.priority])

    resources = [replace(r) for r in BASE_RESOURCES]
    if risk.risk_level in (RiskLevel.HIGH, RiskLevel.SEVERE):
        resources.append(replace(SUPPORT_LINE))

    logger.debug(f"[PLANNER] level={risk.risk_level.value} rules={fired} actions={len(actions)}")
    return InterventionPlan(
        type=PLAN_TYPE_BY_LEVEL[risk.risk_level],
        actions=actions,
        elya_prompts=prompts,
        resources=resources,
    )


class OutcomeLog(ABC):
    """Append-only sink for intervention outcomes."""

    @abstractmethod
    async def append(self, event: OutcomeEvent) -> None:
        ...


class InMemoryOutcomeLog(OutcomeLog):
    """Process-local outcome log."""

    def __init__(self):
        self._events: List[OutcomeEvent] = []
        self._lock = threading.Lock()

    async def append(self, event: OutcomeEvent) -> None:
        with self._lock:
            self._events.append(event)

    def events(self, user_id: Optional[str] = None) -> List[OutcomeEvent]:
        with self._lock:
            return [e for e in self._events if user_id is None or e.user_id == user_id]


class SupabaseOutcomeLog(OutcomeLog):
    """Outcome log backed by the `intervention_outcomes` table."""

    def __init__(self, client: PostgrestClient, table: str = "intervention_outcomes"):
        self.client = client
        self.table = table

    async def append(self, event: OutcomeEvent) -> None:
        await self.client.insert(self.table, event.to_dict())


@dataclass
class InterventionPlanner:
    """Rule-table planner plus the outcome-recording hook."""

    outcome_log: OutcomeLog = field(default_factory=InMemoryOutcomeLog)

    def plan(self, risk: RiskAssessment) -> InterventionPlan:
        return plan_interventions(risk)

    async def record_outcome(
        self,
        action_id: str,
        outcome,
        user_id: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> OutcomeEvent:
        """
        Record what the user did with a suggested action.

        Raises:
            ValidationError: for an empty action id or an unknown outcome
            RemoteUnavailable: when the configured durable log cannot be written
        """
        if not action_id:
            raise ValidationError("action_id is required")
        try:
            outcome = Outcome(outcome)
        except ValueError:
            allowed = ", ".join(o.value for o in Outcome)
            raise ValidationError(
                f"Unknown outcome {outcome!r}, expected one of: {allowed}",
                {"outcome": str(outcome)},
            )

        event = OutcomeEvent(action_id=action_id, outcome=outcome, user_id=user_id, feedback=feedback)
        await self.outcome_log.append(event)
        logger.info(f"[PLANNER] Outcome recorded: action={action_id} outcome={outcome.value}")
        return event
