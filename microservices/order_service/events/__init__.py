"""
Order Service Events Module

Exports all event-related functionality for order service
"""

from .models import (
    OrderCreatedEvent,
    OrderPayedEvent,
    LedgerInitializedEvent,
)

from .publishers import (
    publish_order_created,
    publish_order_payed,
    publish_ledger_initialized,
)

from .handlers import OrderIndex, get_event_handlers, register_event_handlers

__all__ = [
    # Event Models
    "OrderCreatedEvent",
    "OrderPayedEvent",
    "LedgerInitializedEvent",
    # Publishers
    "publish_order_created",
    "publish_order_payed",
    "publish_ledger_initialized",
    # Handlers
    "OrderIndex",
    "get_event_handlers",
    "register_event_handlers",
]
