"""
Order Service Component Test Fixtures

Provides mocks for order service component testing:
- MockOrderRepository: in-memory OrderRepositoryProtocol with call tracking
- MockScoreLedger: stands in for the user registry (ScoreLedgerProtocol)
"""

from typing import Dict, List, Optional

import pytest
import pytest_asyncio

from core.contract_runtime import ContractRuntime
from microservices.order_service.models import Order
from microservices.user_service.models import User
from microservices.user_service.protocols import (
    UserNotEnoughScoreError,
    UserNotExistsError,
)
from tests.contracts.order.data_contract import OrderTestDataFactory
from tests.contracts.user.data_contract import UserTestDataFactory


# =============================================================================
# Mock Repository Implementation
# =============================================================================


class MockOrderRepository:
    """Mock implementation of OrderRepositoryProtocol for testing"""

    def __init__(self):
        self.orders: Dict[int, Order] = {}
        self.next_id = 1
        self.method_calls = []

    def current_id(self) -> int:
        return self.next_id

    def allocate_id(self) -> int:
        self.method_calls.append(("allocate_id",))
        order_id = self.next_id
        self.next_id += 1
        return order_id

    async def get_order(self, order_id: int) -> Optional[Order]:
        self.method_calls.append(("get_order", order_id))
        return self.orders.get(order_id)

    async def save_order(self, order: Order) -> Order:
        self.method_calls.append(("save_order", order.id))
        self.orders[order.id] = order
        return order

    async def list_orders(self) -> List[Order]:
        return [self.orders[k] for k in sorted(self.orders)]

    def snapshot(self):
        return dict(self.orders), self.next_id

    def restore(self, state) -> None:
        orders, self.next_id = state
        self.orders = dict(orders)


# =============================================================================
# Mock Registry
# =============================================================================


class MockScoreLedger:
    """Mock user registry for testing the ledger in isolation"""

    def __init__(self):
        self.address: Optional[str] = None
        self.users: Dict[int, User] = {}
        self.method_calls = []

    def add_user(self, user_id: int, score: int = 0, phone: int = 0):
        self.users[user_id] = User(id=user_id, phone=phone, score=score)

    async def require_user(self, user_id: int) -> User:
        self.method_calls.append(("require_user", user_id))
        if user_id not in self.users:
            raise UserNotExistsError(f"User does not exist: {user_id}", user_id=user_id)
        return self.users[user_id]

    async def debit_score(self, caller: str, user_id: int, amount: int) -> User:
        self.method_calls.append(("debit_score", caller, user_id, amount))
        user = await self.require_user(user_id)
        if user.score < amount:
            raise UserNotEnoughScoreError(
                f"User {user_id} score {user.score} is less than {amount}",
                user_id=user_id,
                available=user.score,
                required=amount,
            )
        self.users[user_id] = user.model_copy(update={"score": user.score - amount})
        return self.users[user_id]


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture
def runtime():
    return ContractRuntime()


@pytest.fixture
def mock_repository():
    """Create mock order repository"""
    return MockOrderRepository()


@pytest.fixture
def mock_registry():
    """Create mock user registry"""
    return MockScoreLedger()


@pytest.fixture
def registry_address():
    return UserTestDataFactory.make_address()


@pytest.fixture
def uninitialized_order_service(runtime, mock_repository, mock_registry, deployer):
    """Ledger not yet bound to a registry"""
    from microservices.order_service.order_service import OrderService

    def registry_client_factory(_runtime, address):
        mock_registry.address = address
        return mock_registry

    return OrderService(
        runtime=runtime,
        repository=mock_repository,
        deployer=deployer,
        registry_client_factory=registry_client_factory,
    )


@pytest_asyncio.fixture
async def order_service(uninitialized_order_service, deployer, registry_address):
    """Ledger bound to the mock registry"""
    await uninitialized_order_service.initialize(deployer, registry_address)
    return uninitialized_order_service


@pytest.fixture
def data_factory():
    """Provide data factory for test data generation"""
    return OrderTestDataFactory
