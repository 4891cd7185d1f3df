"""
Order Index Component Tests

Feeds hand-built events to the index handlers.
"""

import pytest

from core.event_bus import Event, EventType, InMemoryEventBus, ServiceSource
from microservices.order_service.events.handlers import (
    MAX_PROCESSED_EVENT_IDS,
    OrderIndex,
    register_event_handlers,
)
from microservices.order_service.models import Order
from tests.contracts.user.data_contract import UserTestDataFactory

LEDGER = UserTestDataFactory.make_address()
REGISTRY = UserTestDataFactory.make_address()


def order_event(event_type: EventType, order: Order, subject: str = LEDGER) -> Event:
    return Event(
        event_type,
        ServiceSource.ORDER_SERVICE,
        {"order": order.model_dump(mode="json")},
        subject=subject,
    )


@pytest.mark.component
@pytest.mark.asyncio
class TestOrderIndex:

    async def test_projection_via_event_bus(self):
        bus = InMemoryEventBus()
        index = OrderIndex(ledger_address=LEDGER, registry_address=REGISTRY)
        patterns = await register_event_handlers(bus, index)
        assert "user.*" in patterns

        order = Order(id=1, order_sn="SN-1", user_id=3, fee=10)
        await bus.publish_event(order_event(EventType.ORDER_CREATED, order))
        await bus.publish_event(
            order_event(EventType.ORDER_PAYED, order.model_copy(update={"is_payed": True}))
        )

        assert index.order_by_sn("SN-1").is_payed is True
        assert index.unpaid_orders() == []
        assert index.outstanding_fee(3) == 0

    async def test_other_ledgers_ignored(self):
        index = OrderIndex(ledger_address=LEDGER)
        index.apply_order_event(
            order_event(EventType.ORDER_CREATED, Order(id=1, user_id=3), subject=REGISTRY)
        )
        assert index.orders_for_user(3) == []

    async def test_event_applied_once(self):
        index = OrderIndex(ledger_address=LEDGER)
        created = order_event(EventType.ORDER_CREATED, Order(id=1, order_sn="A", user_id=3))
        payed = order_event(EventType.ORDER_PAYED, Order(id=1, order_sn="A", user_id=3, is_payed=True))

        index.apply_order_event(created)
        index.apply_order_event(payed)
        index.apply_order_event(created)

        assert index.order_by_sn("A").is_payed is True

    async def test_late_created_event_does_not_unpay_order(self):
        index = OrderIndex(ledger_address=LEDGER)
        order = Order(id=1, order_sn="A", user_id=3, fee=10)

        index.apply_order_event(
            order_event(EventType.ORDER_PAYED, order.model_copy(update={"is_payed": True}))
        )
        index.apply_order_event(order_event(EventType.ORDER_CREATED, order))

        assert index.order_by_sn("A").is_payed is True
        assert index.unpaid_orders() == []

    async def test_processed_ids_are_capped(self):
        index = OrderIndex(ledger_address=LEDGER)
        for order_id in range(1, MAX_PROCESSED_EVENT_IDS + 2):
            index.apply_order_event(
                order_event(EventType.ORDER_CREATED, Order(id=order_id, order_sn=f"SN-{order_id}"))
            )

        assert len(index._processed_event_ids) <= MAX_PROCESSED_EVENT_IDS
        assert len(index.unpaid_orders()) == MAX_PROCESSED_EVENT_IDS + 1

    async def test_user_scores(self):
        index = OrderIndex(registry_address=REGISTRY)
        event = Event(
            EventType.USER_SCORE_CHARGED,
            ServiceSource.USER_SERVICE,
            {"user": {"id": 4, "phone": 1, "score": 70}},
            subject=REGISTRY,
        )
        index.apply_user_event(event)
        assert index.user_score(4) == 70
        assert index.user_score(5) is None

    async def test_malformed_event_logged_not_raised(self):
        bus = InMemoryEventBus()
        index = OrderIndex()
        await register_event_handlers(bus, index)

        await bus.publish_event(
            Event(EventType.ORDER_CREATED, ServiceSource.ORDER_SERVICE, {}, subject=LEDGER)
        )

        assert index.unpaid_orders() == []
