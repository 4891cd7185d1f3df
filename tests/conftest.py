"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - api/        : HTTP contract tests (FastAPI apps over ASGITransport)
    - integration/: Full stack tests (registry + ledger on one runtime)
    - component/  : Service tests with mocked repositories and registry
    - unit/       : Core building blocks (runtime, roles, event bus)
"""
import os
import sys
from typing import Dict, List

import pytest

# Set testing environment BEFORE any project imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.config import DEFAULT_DEPLOYER_ADDRESS  # noqa: E402
from tests.contracts.user.data_contract import UserTestDataFactory  # noqa: E402


# =============================================================================
# Accounts
# =============================================================================

@pytest.fixture
def deployer() -> str:
    """Account that deploys the components (holds admin + MANAGER)"""
    return DEFAULT_DEPLOYER_ADDRESS


@pytest.fixture
def stranger() -> str:
    """Account without any role"""
    return UserTestDataFactory.make_address()


# =============================================================================
# Assertion Helpers
# =============================================================================

class AssertionHelpers:
    """Custom assertion helpers for tests"""

    @staticmethod
    def assert_http_success(response, expected_status: int = 200):
        """Assert HTTP response is successful"""
        assert response.status_code == expected_status, \
            f"Expected {expected_status}, got {response.status_code}: {response.text}"

    @staticmethod
    def assert_error_code(response, expected_status: int, error_code: str):
        """Assert an HTTP error response with the given error code"""
        assert response.status_code == expected_status, \
            f"Expected {expected_status}, got {response.status_code}: {response.text}"
        assert response.json()["detail"]["error_code"] == error_code

    @staticmethod
    def assert_has_fields(data: Dict, fields: List[str]):
        """Assert dict has required fields"""
        missing = [f for f in fields if f not in data]
        assert not missing, f"Missing fields: {missing}"

    @staticmethod
    def assert_event_published(events, event_type: str, **kwargs):
        """Assert an event was published with expected data"""
        matching = [e for e in events if e.type == event_type]
        assert matching, f"Event '{event_type}' not found in {[e.type for e in events]}"

        if kwargs:
            for event in matching:
                if all(event.data.get(k) == v for k, v in kwargs.items()):
                    return event
            assert False, f"No event matched criteria: {kwargs}"

        return matching[0]


@pytest.fixture
def assertions() -> AssertionHelpers:
    """Provide assertion helpers"""
    return AssertionHelpers()


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "api: API contract tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")
