"""
In-process event bus for the ledger services

Events are the durable audit trail of the registry and the ledger: every
committed mutation appends one Event to the log, then subscribers matching
the event type are invoked. Subject patterns follow NATS wildcards
(``*`` matches one token, ``>`` matches the rest).
"""

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable[["Event"], Awaitable[None]]


class EventType(Enum):
    """Event types emitted by the registry and the ledger"""

    # User Events
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_SCORE_CHARGED = "user.score_charged"
    USER_SCORE_DEBITED = "user.score_debited"

    # Order Events
    ORDER_CREATED = "order.created"
    ORDER_PAYED = "order.payed"
    ORDER_LEDGER_INITIALIZED = "order.ledger_initialized"

    # Access Control Events
    ROLE_GRANTED = "access.role_granted"
    ROLE_REVOKED = "access.role_revoked"


class ServiceSource(Enum):
    """Service sources"""

    USER_SERVICE = "user_service"
    ORDER_SERVICE = "order_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        # Address of the emitting component
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        event = cls.__new__(cls)
        event.id = data.get("id")
        event.type = data.get("type")
        event.source = data.get("source")
        event.subject = data.get("subject")
        event.timestamp = data.get("timestamp")
        event.data = data.get("data", {})
        event.metadata = data.get("metadata", {})
        event.version = data.get("version", "1.0.0")
        return event


def matches_pattern(pattern: str, subject: str) -> bool:
    """Match a dotted subject against a NATS-style pattern"""
    pattern_tokens = pattern.split(".")
    subject_tokens = subject.split(".")

    for i, token in enumerate(pattern_tokens):
        if token == ">":
            return len(subject_tokens) > i
        if i >= len(subject_tokens):
            return False
        if token != "*" and token != subject_tokens[i]:
            return False

    return len(pattern_tokens) == len(subject_tokens)


class InMemoryEventBus:
    """
    Event bus keeping an append-only log of committed events.

    Subscribers are awaited in subscription order. A failing subscriber is
    logged and does not affect the log or the other subscribers.
    """

    def __init__(self):
        self.events: List[Event] = []
        self._subscriptions: List[tuple] = []

    async def publish_event(self, event: Event) -> bool:
        """Record an event and deliver it to matching subscribers"""
        self.record(event)
        await self.dispatch(event)
        return True

    def record(self, event: Event) -> None:
        """Append an event to the log without notifying subscribers"""
        self.events.append(event)
        logger.debug(f"Event recorded: {event.type} ({event.id})")

    async def dispatch(self, event: Event) -> None:
        """Deliver an already recorded event to matching subscribers"""
        for pattern, handler in list(self._subscriptions):
            if not matches_pattern(pattern, event.type):
                continue
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Event handler for {pattern} failed on {event.type}: {e}")

    async def subscribe_to_events(self, pattern: str, handler: EventHandler) -> str:
        """Subscribe an async handler to a subject pattern"""
        self._subscriptions.append((pattern, handler))
        logger.info(f"Subscribed to {pattern}")
        return pattern

    def get_events(self, pattern: Optional[str] = None) -> List[Event]:
        """Return logged events, optionally filtered by subject pattern"""
        if pattern is None:
            return list(self.events)
        return [e for e in self.events if matches_pattern(pattern, e.type)]

    async def close(self):
        self._subscriptions.clear()

