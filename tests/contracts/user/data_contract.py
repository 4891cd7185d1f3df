"""
User Service - Data Contract

Test data factory and request builders for user_service.
Zero hardcoded data - all test data generated through factory methods.
"""

from typing import Any, Dict
import random
import secrets

from core.access_control import DEFAULT_ADMIN_ROLE, MANAGER_ROLE


class UserTestDataFactory:
    """
    Test data factory for user_service.

    Factory methods are prefixed with make_ for valid data and
    make_invalid_ for invalid data scenarios.
    """

    # ========================================================================
    # Valid Data Generators
    # ========================================================================

    @staticmethod
    def make_address() -> str:
        """Generate a random lowercase account address"""
        return "0x" + secrets.token_hex(20)

    @staticmethod
    def make_user_id() -> int:
        """Generate valid (non-zero) user id"""
        return random.randint(1, 10**9)

    @staticmethod
    def make_phone() -> int:
        """Generate an 11 digit mobile number"""
        return random.randint(13000000000, 18999999999)

    @staticmethod
    def make_score(low: int = 0, high: int = 10000) -> int:
        return random.randint(low, high)

    @staticmethod
    def make_manager_role() -> str:
        return MANAGER_ROLE

    @staticmethod
    def make_admin_role() -> str:
        return DEFAULT_ADMIN_ROLE

    @staticmethod
    def make_role() -> str:
        """Generate an arbitrary 32-byte role identifier"""
        return "0x" + secrets.token_hex(32)

    @classmethod
    def make_user_fields(cls, **overrides) -> Dict[str, Any]:
        """user_id / phone / score keyword arguments for create_user"""
        fields = {
            "user_id": cls.make_user_id(),
            "phone": cls.make_phone(),
            "score": cls.make_score(),
        }
        fields.update(overrides)
        return fields

    @classmethod
    def make_create_request(cls, **overrides) -> Dict[str, Any]:
        """JSON body for POST /api/v1/users"""
        body = {
            "id": cls.make_user_id(),
            "phone": cls.make_phone(),
            "score": cls.make_score(),
        }
        body.update(overrides)
        return body

    # ========================================================================
    # Invalid Data Generators
    # ========================================================================

    @staticmethod
    def make_invalid_address() -> str:
        """Address with the wrong length"""
        return "0x" + secrets.token_hex(19)

    @staticmethod
    def make_invalid_user_id() -> int:
        """The reserved zero id"""
        return 0


def caller_headers(address: str) -> Dict[str, str]:
    """Headers identifying the calling account"""
    return {"X-Caller-Address": address}
