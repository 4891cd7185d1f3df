"""
User Service Component Test Fixtures

Provides mocks for user service component testing:
- MockUserRepository: in-memory UserRepositoryProtocol with call tracking
- a fresh ContractRuntime per test (its event bus records committed events)
"""

from typing import Dict, List, Optional

import pytest

from core.contract_runtime import ContractRuntime
from microservices.user_service.models import User
from tests.contracts.user.data_contract import UserTestDataFactory


# =============================================================================
# Mock Repository Implementation
# =============================================================================


class MockUserRepository:
    """Mock implementation of UserRepositoryProtocol for testing"""

    def __init__(self):
        self.users: Dict[int, User] = {}

        # Track method calls for verification
        self.method_calls = []

    async def get_user(self, user_id: int) -> Optional[User]:
        self.method_calls.append(("get_user", user_id))
        return self.users.get(user_id)

    async def save_user(self, user: User) -> User:
        self.method_calls.append(("save_user", user.id))
        self.users[user.id] = user
        return user

    async def list_users(self) -> List[User]:
        self.method_calls.append(("list_users",))
        return [self.users[k] for k in sorted(self.users)]

    def snapshot(self):
        return dict(self.users)

    def restore(self, state) -> None:
        self.users = dict(state)

    def calls(self, name: str) -> list:
        return [c for c in self.method_calls if c[0] == name]


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture
def runtime():
    return ContractRuntime()


@pytest.fixture
def mock_repository():
    """Create mock user repository"""
    return MockUserRepository()


@pytest.fixture
def user_service(runtime, mock_repository, deployer):
    """Create user registry with mocked repository"""
    from microservices.user_service.user_service import UserService

    return UserService(runtime=runtime, repository=mock_repository, deployer=deployer)


@pytest.fixture
def data_factory():
    """Provide data factory for test data generation"""
    return UserTestDataFactory
