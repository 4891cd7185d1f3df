"""
User Registry Client for Order Service

In-process client the ledger uses to reach the user registry it was
initialized with. The registry is looked up in the shared runtime on every
call, so the ledger holds only the registry address.
"""

import logging

from core.contract_runtime import ContractRuntime
from core.access_control import normalize_address
from microservices.user_service.models import User
from microservices.user_service.protocols import (
    UserNotEnoughScoreError,
    UserNotExistsError,
)

from ..protocols import NotInitializedError

logger = logging.getLogger(__name__)


class UserRegistryClient:
    """ScoreLedgerProtocol implementation backed by a deployed UserService"""

    def __init__(self, runtime: ContractRuntime, registry_address: str):
        self.runtime = runtime
        self.address = normalize_address(registry_address)

    def _registry(self):
        registry = self.runtime.resolve(self.address)
        if registry is None:
            logger.error(f"No user registry deployed at {self.address}")
            raise NotInitializedError(f"No user registry deployed at {self.address}")
        return registry

    async def require_user(self, user_id: int) -> User:
        """Raises UserNotExistsError if the user is not registered"""
        return await self._registry().require_user(user_id)

    async def debit_score(self, caller: str, user_id: int, amount: int) -> User:
        """Raises UserNotEnoughScoreError if the user cannot cover amount"""
        return await self._registry().debit_score(caller, user_id, amount)


__all__ = ["UserRegistryClient", "UserNotEnoughScoreError", "UserNotExistsError"]
