"""
Order Service Event Publishers

Functions to publish events from the order ledger
"""

import logging

from core.event_bus import Event, EventType, ServiceSource
from ..models import Order
from .models import (
    OrderCreatedEvent,
    OrderPayedEvent,
    LedgerInitializedEvent,
)

logger = logging.getLogger(__name__)


async def publish_order_created(event_bus, contract: str, sender: str, order: Order) -> bool:
    """Publish order.created event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.created event")
        return False

    try:
        event_data = OrderCreatedEvent(contract=contract, sender=sender, order=order)

        event = Event(
            event_type=EventType.ORDER_CREATED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json'),
            subject=contract,
        )

        await event_bus.publish_event(event)
        logger.debug(f"Published order.created event for order {order.id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish order.created event: {e}")
        return False


async def publish_order_payed(
    event_bus, contract: str, sender: str, amount: int, order: Order
) -> bool:
    """Publish order.payed event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.payed event")
        return False

    try:
        event_data = OrderPayedEvent(
            contract=contract,
            sender=sender,
            amount=amount,
            debited=order.fee,
            order=order,
        )

        event = Event(
            event_type=EventType.ORDER_PAYED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json'),
            subject=contract,
        )

        await event_bus.publish_event(event)
        logger.debug(f"Published order.payed event for order {order.id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish order.payed event: {e}")
        return False


async def publish_ledger_initialized(
    event_bus, contract: str, sender: str, registry_address: str
) -> bool:
    """Publish order.ledger_initialized event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.ledger_initialized event")
        return False

    try:
        event_data = LedgerInitializedEvent(
            contract=contract, sender=sender, registry_address=registry_address
        )

        event = Event(
            event_type=EventType.ORDER_LEDGER_INITIALIZED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json'),
            subject=contract,
        )

        await event_bus.publish_event(event)
        return True

    except Exception as e:
        logger.error(f"Failed to publish order.ledger_initialized event: {e}")
        return False
