"""
User Repository

In-memory keyed store of user records. Records are kept as immutable
pydantic models; every write replaces the stored instance, so snapshots
only need a shallow copy of the mapping.
"""

import logging
from typing import Dict, List, Optional

from .models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """User records keyed by id"""

    def __init__(self):
        self._users: Dict[int, User] = {}

    async def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def save_user(self, user: User) -> User:
        self._users[user.id] = user.model_copy()
        return user

    async def list_users(self) -> List[User]:
        return [self._users[k].model_copy() for k in sorted(self._users)]

    async def count(self) -> int:
        return len(self._users)

    def snapshot(self) -> Dict[int, User]:
        return dict(self._users)

    def restore(self, state: Dict[int, User]) -> None:
        self._users = dict(state)
