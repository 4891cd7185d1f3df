"""
Order Service Event Handlers

Builds the order index (read model) from committed ledger events. The
index answers questions the ledger itself does not: orders of a user,
unpaid orders and lookup by external order code.
"""

import logging
from typing import Dict, List, Optional, Set

from core.event_bus import Event, EventType

from ..models import Order

logger = logging.getLogger(__name__)

MAX_PROCESSED_EVENT_IDS = 10000


class OrderIndex:
    """
    In-memory projection of order.* and user.* events.

    Only events whose subject is one of the tracked contract addresses are
    applied. Each event id is applied at most once, and a paid order never
    goes back to unpaid.
    """

    def __init__(self, ledger_address: Optional[str] = None, registry_address: Optional[str] = None):
        self.ledger_address = ledger_address
        self.registry_address = registry_address
        self._orders: Dict[int, Order] = {}
        self._by_sn: Dict[str, int] = {}
        self._user_scores: Dict[int, int] = {}
        self._processed_event_ids: Set[str] = set()

    # ---- queries ----

    def orders_for_user(self, user_id: int) -> List[Order]:
        return [o for _, o in sorted(self._orders.items()) if o.user_id == user_id]

    def unpaid_orders(self) -> List[Order]:
        return [o for _, o in sorted(self._orders.items()) if not o.is_payed]

    def order_by_sn(self, order_sn: str) -> Optional[Order]:
        order_id = self._by_sn.get(order_sn)
        return self._orders.get(order_id) if order_id is not None else None

    def user_score(self, user_id: int) -> Optional[int]:
        """Last score seen for the user, None if never seen"""
        return self._user_scores.get(user_id)

    def outstanding_fee(self, user_id: int) -> int:
        """Sum of fees of the user's unpaid orders"""
        return sum(o.fee for o in self.orders_for_user(user_id) if not o.is_payed)

    # ---- event application ----

    def _accept(self, event: Event, address: Optional[str]) -> bool:
        if event.id in self._processed_event_ids:
            logger.debug(f"Event {event.id} already processed, skipping")
            return False
        if address is not None and event.subject != address:
            return False
        self._mark_processed(event.id)
        return True

    def _mark_processed(self, event_id: str) -> None:
        self._processed_event_ids.add(event_id)
        if len(self._processed_event_ids) > MAX_PROCESSED_EVENT_IDS:
            self._processed_event_ids = set(
                list(self._processed_event_ids)[MAX_PROCESSED_EVENT_IDS // 2:]
            )

    def apply_order_event(self, event: Event) -> None:
        if not self._accept(event, self.ledger_address):
            return
        order = Order.model_validate(event.data["order"])
        stored = self._orders.get(order.id)
        if stored is not None and stored.is_payed and not order.is_payed:
            logger.warning(f"Stale {event.type} event {event.id} for payed order {order.id}, skipping")
            return
        self._orders[order.id] = order
        self._by_sn[order.order_sn] = order.id
        logger.debug(f"Indexed order {order.id} ({event.type})")

    def apply_user_event(self, event: Event) -> None:
        if not self._accept(event, self.registry_address):
            return
        user = event.data["user"]
        self._user_scores[user["id"]] = user["score"]


async def handle_order_changed(event: Event, index: OrderIndex) -> None:
    """Handle order.created / order.payed"""
    try:
        index.apply_order_event(event)
    except (KeyError, ValueError) as e:
        logger.error(f"Failed to index {event.type} event {event.id}: {e}")


async def handle_user_changed(event: Event, index: OrderIndex) -> None:
    """Handle user.* events"""
    try:
        index.apply_user_event(event)
    except (KeyError, TypeError) as e:
        logger.error(f"Failed to index {event.type} event {event.id}: {e}")


def get_event_handlers(index: OrderIndex):
    """
    Get all event handlers for the order index.

    Returns:
        Dict[str, callable]: Event pattern -> handler function mapping
    """
    return {
        EventType.ORDER_CREATED.value: lambda event: handle_order_changed(event, index),
        EventType.ORDER_PAYED.value: lambda event: handle_order_changed(event, index),
        "user.*": lambda event: handle_user_changed(event, index),
    }


async def register_event_handlers(event_bus, index: OrderIndex) -> List[str]:
    """Subscribe the index to the event bus, returns the subscribed patterns"""
    patterns = []
    for pattern, handler in get_event_handlers(index).items():
        patterns.append(await event_bus.subscribe_to_events(pattern, handler))
    logger.info(f"Order index subscribed to {len(patterns)} patterns")
    return patterns
