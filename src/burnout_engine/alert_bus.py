"""Thread-safe in-process alert bus for burnout risk notifications.

Listeners subscribe per user id and are called synchronously whenever a
durable write for that user lands in the `high` or `severe` band. An async
stream adapter lets the API forward alerts to browsers over SSE.
"""
import asyncio
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional

from .models import RiskLevel

logger = logging.getLogger(__name__)

AlertCallback = Callable[[dict], None]

ALERT_LEVELS = (RiskLevel.HIGH, RiskLevel.SEVERE)

ALERT_MESSAGES = {
    RiskLevel.SEVERE: "Critical burnout risk detected. Please take immediate action for your wellbeing.",
    RiskLevel.HIGH: "High burnout risk detected. Consider reviewing your intervention plan.",
}


@dataclass
class BurnoutAlert:
    """A risk alert for one user."""

    user_id: str
    risk_level: RiskLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def payload(self) -> dict:
        """What subscriber callbacks receive."""
        return {"risk_level": self.risk_level.value, "message": self.message}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "risk_level": self.risk_level.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class Subscription:
    """Handle returned by subscribe(); calling it unsubscribes."""

    def __init__(self, bus: "AlertBus", user_id: str, callback: AlertCallback):
        self.user_id = user_id
        self.callback = callback
        self.active = True
        self._bus = bus

    def __call__(self) -> None:
        self._bus._remove(self)


class AlertBus:
    """Publish/subscribe bus keyed by user id.

    Keeps a short history buffer and publish statistics like the rest of
    the notification plumbing.
    """

    def __init__(self, max_history: int = 100):
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._history: deque = deque(maxlen=max_history)
        self._lock = threading.Lock()
        self._stats = {
            "total_published": 0,
            "total_subscribers": 0,
            "failed_callbacks": 0,
            "alerts_by_level": {},
        }

    def subscribe(self, user_id: str, callback: AlertCallback) -> Subscription:
        """Register a callback for one user's alerts.

        Returns:
            A Subscription; call it to unsubscribe. Unsubscribing twice is a no-op.
        """
        subscription = Subscription(self, user_id, callback)
        with self._lock:
            self._subscriptions.setdefault(user_id, []).append(subscription)
            self._stats["total_subscribers"] += 1
        logger.debug(f"[ALERTS] Subscribed listener for user={user_id}")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if not subscription.active:
                return
            subscription.active = False
            listeners = self._subscriptions.get(subscription.user_id, [])
            if subscription in listeners:
                listeners.remove(subscription)
            if not listeners:
                self._subscriptions.pop(subscription.user_id, None)

    def publish(self, user_id: str, risk_level: RiskLevel, message: Optional[str] = None) -> Optional[BurnoutAlert]:
        """Notify the user's listeners if the level warrants an alert.

        Thread-safe. A callback that raises is logged and skipped.

        Returns:
            The published alert, or None when the level is below `high`.
        """
        risk_level = RiskLevel(risk_level)
        if risk_level not in ALERT_LEVELS:
            return None

        alert = BurnoutAlert(
            user_id=user_id,
            risk_level=risk_level,
            message=message or ALERT_MESSAGES[risk_level],
        )
        with self._lock:
            self._history.append(alert)
            self._stats["total_published"] += 1
            level = risk_level.value
            self._stats["alerts_by_level"][level] = self._stats["alerts_by_level"].get(level, 0) + 1
            listeners = list(self._subscriptions.get(user_id, []))

        logger.info(f"[ALERTS] {risk_level.value} alert for user={user_id} ({len(listeners)} listeners)")
        for subscription in listeners:
            # Skip listeners removed after the snapshot was taken
            if not subscription.active:
                continue
            try:
                subscription.callback(alert.payload())
            except Exception as e:
                with self._lock:
                    self._stats["failed_callbacks"] += 1
                logger.error(f"[ALERTS] Listener for user={user_id} failed: {e}")
        return alert

    async def stream(self, user_id: str) -> AsyncIterator[dict]:
        """Yield alert payloads for a user as they arrive.

        The subscription is released when the consumer stops iterating.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=100)

        def _enqueue(payload: dict) -> None:
            loop.call_soon_threadsafe(self._offer, queue, payload)

        unsubscribe = self.subscribe(user_id, _enqueue)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()

    @staticmethod
    def _offer(queue: asyncio.Queue, payload: dict) -> None:
        try:
            queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("[ALERTS] Stream queue full, dropping alert")

    def subscriber_count(self, user_id: Optional[str] = None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._subscriptions.get(user_id, []))
            return sum(len(listeners) for listeners in self._subscriptions.values())

    def get_history(self, user_id: Optional[str] = None, count: int = 50) -> List[BurnoutAlert]:
        """Recent alerts, newest first."""
        with self._lock:
            alerts = [a for a in self._history if user_id is None or a.user_id == user_id]
        return alerts[-count:][::-1]

    def get_stats(self) -> dict:
        with self._lock:
            return {
                **self._stats,
                "current_subscribers": sum(len(v) for v in self._subscriptions.values()),
                "history_size": len(self._history),
            }

    def clear_history(self) -> None:
        """Clear the alert history buffer."""
        with self._lock:
            self._history.clear()
