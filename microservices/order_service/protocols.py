"""
Order Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import Order


# ============================================================================
# Custom Exceptions - defined here to avoid importing repository
# ============================================================================

class OrderServiceError(Exception):
    """Base exception for order service errors"""

    error_code = "Error_OrderService"


class OrderNotExistsError(OrderServiceError):
    """Raised when the referenced order id was never assigned"""

    error_code = "Error_OrderNotExists"

    def __init__(self, message: str, order_id: Optional[int] = None):
        super().__init__(message)
        self.order_id = order_id


class OrderAlreadyPayedError(OrderServiceError):
    """Raised when paying an order that is already paid"""

    error_code = "Error_OrderAlreadyPayed"

    def __init__(self, message: str, order_id: Optional[int] = None):
        super().__init__(message)
        self.order_id = order_id


class OrderUserNotEnoughScoreToPayError(OrderServiceError):
    """Raised when the order's user cannot cover the fee"""

    error_code = "Error_OrderUserNotEnoughScoreToPay"

    def __init__(
        self,
        message: str,
        order_id: Optional[int] = None,
        user_id: Optional[int] = None,
        fee: Optional[int] = None,
    ):
        super().__init__(message)
        self.order_id = order_id
        self.user_id = user_id
        self.fee = fee


class AlreadyInitializedError(OrderServiceError):
    """Raised when initialize is called a second time"""

    error_code = "Error_AlreadyInitialized"


class NotInitializedError(OrderServiceError):
    """Raised when the ledger is used before it is bound to a registry"""

    error_code = "Error_NotInitialized"


# ============================================================================
# Repository Protocol
# ============================================================================

@runtime_checkable
class OrderRepositoryProtocol(Protocol):
    """
    Interface for Order Repository.

    The id counter lives in the repository so that it is captured and
    restored together with the order records.
    """

    def current_id(self) -> int:
        """Id the next allocated order will receive"""
        ...

    def allocate_id(self) -> int:
        """Return the current id and advance the counter"""
        ...

    async def get_order(self, order_id: int) -> Optional[Order]:
        """Get order by internal id, None if absent"""
        ...

    async def save_order(self, order: Order) -> Order:
        """Insert or overwrite an order"""
        ...

    async def list_orders(self) -> List[Order]:
        """All orders by internal id"""
        ...

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...


# ============================================================================
# Registry Protocol
# ============================================================================

@runtime_checkable
class ScoreLedgerProtocol(Protocol):
    """
    Capability the ledger needs from the user registry.

    Both methods raise the registry's own errors.
    """

    @property
    def address(self) -> str:
        ...

    async def require_user(self, user_id: int) -> Any:
        """Return the user or raise the registry's not-exists error"""
        ...

    async def debit_score(self, caller: str, user_id: int, amount: int) -> Any:
        """Debit amount from the user's score on behalf of caller"""
        ...


# ============================================================================
# Index Protocol
# ============================================================================

@runtime_checkable
class OrderIndexProtocol(Protocol):
    """Read model built from committed order events"""

    def orders_for_user(self, user_id: int) -> List[Order]:
        ...

    def unpaid_orders(self) -> List[Order]:
        ...

    def order_by_sn(self, order_sn: str) -> Optional[Order]:
        ...



__all__ = [
    "OrderServiceError",
    "OrderNotExistsError",
    "OrderAlreadyPayedError",
    "OrderUserNotEnoughScoreToPayError",
    "AlreadyInitializedError",
    "NotInitializedError",
    "OrderRepositoryProtocol",
    "ScoreLedgerProtocol",
    "OrderIndexProtocol",
]
