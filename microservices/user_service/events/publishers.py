"""
User Service Event Publishers

Functions to publish events from the user registry. Inside an operation the
``event_bus`` argument is the running transaction, which buffers events
until commit.
"""

import logging

from core.event_bus import Event, EventType, ServiceSource

from ..models import User
from .models import create_score_changed_event_data, create_user_event_data

logger = logging.getLogger(__name__)


async def _publish(event_bus, event_type: EventType, contract: str, data) -> bool:
    if not event_bus:
        logger.warning(f"Event bus not available, skipping {event_type.value} event")
        return False

    try:
        event = Event(
            event_type=event_type,
            source=ServiceSource.USER_SERVICE,
            data=data.model_dump(mode="json"),
            subject=contract,
        )
        await event_bus.publish_event(event)
        logger.debug(f"Published {event_type.value} event from {contract}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish {event_type.value} event: {e}")
        return False


async def publish_user_created(event_bus, contract: str, sender: str, user: User) -> bool:
    """Publish user.created event"""
    return await _publish(
        event_bus,
        EventType.USER_CREATED,
        contract,
        create_user_event_data(contract, sender, user),
    )


async def publish_user_updated(event_bus, contract: str, sender: str, user: User) -> bool:
    """Publish user.updated event"""
    return await _publish(
        event_bus,
        EventType.USER_UPDATED,
        contract,
        create_user_event_data(contract, sender, user),
    )


async def publish_score_charged(
    event_bus, contract: str, sender: str, amount: int, previous_score: int, user: User
) -> bool:
    """Publish user.score_charged event"""
    return await _publish(
        event_bus,
        EventType.USER_SCORE_CHARGED,
        contract,
        create_score_changed_event_data(contract, sender, amount, previous_score, user),
    )


async def publish_score_debited(
    event_bus, contract: str, sender: str, amount: int, previous_score: int, user: User
) -> bool:
    """Publish user.score_debited event"""
    return await _publish(
        event_bus,
        EventType.USER_SCORE_DEBITED,
        contract,
        create_score_changed_event_data(contract, sender, amount, previous_score, user),
    )
