"""
Plant Notification Bus

This module provides the publish/subscribe channel through which the core
announces discrete transitions to its collaborators (mainly the audio
layer): overdrive switching on and off, SCRAM, paid maintenance, a high
temperature crossing, core damage, random events starting and expiring,
and ambient sound level changes.

Subscribers never influence the simulation. A failing subscriber is logged
and skipped so it cannot interrupt a tick.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

OVERDRIVE_ACTIVATED = "overdrive_activated"
OVERDRIVE_DEACTIVATED = "overdrive_deactivated"
SCRAM_TRIGGERED = "scram_triggered"
MAINTENANCE_COMPLETED = "maintenance_completed"
HIGH_TEMPERATURE = "high_temperature"
REACTOR_DAMAGED = "reactor_damaged"
EVENT_STARTED = "event_started"
EVENT_EXPIRED = "event_expired"
AMBIENT_LEVEL_CHANGED = "ambient_level_changed"

ALL_KINDS = "*"


@dataclass
class PlantNotification:
    """A discrete transition reported by the core"""
    kind: str                                       # One of the module-level kind constants
    timestamp: float                                # Simulation time in ms
    data: Dict[str, Any] = field(default_factory=dict)


class PlantEventBus:
    """
    Central notification bus using a plain pub/sub pattern

    Subscribe to a specific kind, or to ``ALL_KINDS`` to receive everything.
    """

    def __init__(self, max_history_size: int = 200):
        self.subscribers: Dict[str, List[Callable[[PlantNotification], None]]] = defaultdict(list)
        self.history: List[PlantNotification] = []
        self.max_history_size = max_history_size

        self.notifications_published = 0
        self.delivery_failures = 0

        # Simulation time used for timestamps, advanced by the session
        self.current_time = 0.0

    def subscribe(self, kind: str, callback: Callable[[PlantNotification], None]) -> None:
        """
        Subscribe to plant notifications

        Args:
            kind: Notification kind, or ALL_KINDS
            callback: Function called with each matching notification
        """
        self.subscribers[kind].append(callback)

    def unsubscribe(self, kind: str, callback: Callable) -> None:
        """Remove a previously registered callback"""
        if callback in self.subscribers[kind]:
            self.subscribers[kind].remove(callback)

    def publish(self, kind: str, data: Optional[Dict[str, Any]] = None) -> PlantNotification:
        """
        Publish a notification

        Args:
            kind: Notification kind
            data: Payload for subscribers

        Returns:
            The notification that was delivered
        """
        notification = PlantNotification(kind=kind, timestamp=self.current_time, data=data or {})

        self.history.append(notification)
        if len(self.history) > self.max_history_size:
            self.history.pop(0)
        self.notifications_published += 1

        for callback in self.subscribers[kind] + self.subscribers[ALL_KINDS]:
            try:
                callback(notification)
            except Exception:
                self.delivery_failures += 1
                logger.exception("Subscriber failed while handling %s", kind)

        return notification

    def recent(self, kind: Optional[str] = None, limit: int = 10) -> List[PlantNotification]:
        """Most recent notifications, optionally filtered by kind"""
        matching = [n for n in self.history if kind is None or n.kind == kind]
        return matching[-limit:]

    def clear_history(self) -> None:
        self.history.clear()
