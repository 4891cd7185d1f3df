"""
User Service Protocols

Defines interfaces for dependency injection and testing.
NO import-time I/O dependencies - safe to import anywhere.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .models import User


# ====================
# Repository Protocol
# ====================


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Repository interface for user records"""

    async def get_user(self, user_id: int) -> Optional[User]:
        """
        Get user by id.

        Args:
            user_id: User identifier

        Returns:
            Stored user or None if absent
        """
        ...

    async def save_user(self, user: User) -> User:
        """
        Insert or overwrite a user record.

        Args:
            user: Full user record

        Returns:
            Stored record
        """
        ...

    async def list_users(self) -> List[User]:
        """List all users ordered by id"""
        ...

    def snapshot(self) -> Any:
        """Capture repository state for rollback"""
        ...

    def restore(self, state: Any) -> None:
        """Restore state captured by snapshot()"""
        ...


# ====================
# Custom Exceptions (no I/O operations)
# ====================


class UserServiceError(Exception):
    """Base exception for user service errors"""

    error_code = "Error_UserService"


class UserInfoParamsInvalidError(UserServiceError):
    """Raised when user parameters are invalid (id == 0)"""

    error_code = "Error_UserInfoParamsInvalid"


class UserAlreadyExistsError(UserServiceError):
    """Raised when creating a user whose id is already stored"""

    error_code = "Error_UserAlreadyExists"

    def __init__(self, message: str, user_id: Optional[int] = None):
        super().__init__(message)
        self.user_id = user_id


class UserNotExistsError(UserServiceError):
    """Raised when the referenced user is not stored"""

    error_code = "Error_UserNotExists"

    def __init__(self, message: str, user_id: Optional[int] = None):
        super().__init__(message)
        self.user_id = user_id


class UserNotEnoughScoreError(UserServiceError):
    """Raised when a debit exceeds the user's score"""

    error_code = "Error_UserNotEnoughScore"

    def __init__(
        self,
        message: str,
        user_id: Optional[int] = None,
        available: Optional[int] = None,
        required: Optional[int] = None,
    ):
        super().__init__(message)
        self.user_id = user_id
        self.available = available
        self.required = required


__all__ = [
    "UserRepositoryProtocol",
    "UserServiceError",
    "UserInfoParamsInvalidError",
    "UserAlreadyExistsError",
    "UserNotExistsError",
    "UserNotEnoughScoreError",
]
