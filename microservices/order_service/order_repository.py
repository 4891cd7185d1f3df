"""
Order Repository

In-memory store of ledger orders plus the sequential id counter.
"""

from typing import Dict, List, Optional, Tuple
import logging

from .models import Order

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    Repository for order data operations

    Ids start at 1 and are never reused.
    """

    def __init__(self):
        self._orders: Dict[int, Order] = {}
        self._next_id = 1

    def current_id(self) -> int:
        return self._next_id

    def allocate_id(self) -> int:
        order_id = self._next_id
        self._next_id += 1
        return order_id

    async def get_order(self, order_id: int) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.model_copy() if order else None

    async def save_order(self, order: Order) -> Order:
        self._orders[order.id] = order.model_copy()
        return order

    async def list_orders(self) -> List[Order]:
        return [self._orders[k].model_copy() for k in sorted(self._orders)]

    def snapshot(self) -> Tuple[Dict[int, Order], int]:
        return dict(self._orders), self._next_id

    def restore(self, state: Tuple[Dict[int, Order], int]) -> None:
        orders, next_id = state
        self._orders = dict(orders)
        self._next_id = next_id
