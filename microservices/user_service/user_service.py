"""
User Service Business Logic

The user registry: role-gated user records with a non-negative score
balance. The order ledger settles payments through ``debit_score``.

Every public entry point runs as one operation of the shared
ContractRuntime, so a failure leaves no partial write and no event behind.
"""

import logging
from typing import List, Optional

from core.access_control import (
    AccessControlledMixin,
    RoleTable,
    MANAGER_ROLE,
    normalize_address,
)
from core.contract_runtime import ContractRuntime
from core.event_bus import ServiceSource

from .models import User
from .protocols import (
    UserRepositoryProtocol,
    UserInfoParamsInvalidError,
    UserAlreadyExistsError,
    UserNotExistsError,
    UserNotEnoughScoreError,
)
from .events.publishers import (
    publish_user_created,
    publish_user_updated,
    publish_score_charged,
    publish_score_debited,
)

logger = logging.getLogger(__name__)


class UserService(AccessControlledMixin):
    """
    User registry

    The deployer holds DEFAULT_ADMIN_ROLE and MANAGER after construction.
    """

    event_source = ServiceSource.USER_SERVICE

    def __init__(
        self,
        runtime: ContractRuntime,
        repository: UserRepositoryProtocol,
        deployer: str,
        address: Optional[str] = None,
    ):
        self.runtime = runtime
        self.repository = repository
        self.deployer = normalize_address(deployer)
        self.roles = RoleTable(self.deployer)
        self.roles.setup_role(MANAGER_ROLE, self.deployer)
        self.address = runtime.register(address or runtime.new_address(), self)

        logger.info(f"UserService initialized at {self.address}")

    # ====================
    # Manager operations
    # ====================

    async def create_user(self, caller: str, user_id: int, phone: int, score: int) -> User:
        """
        Register a new user.

        Raises:
            AccessControlError: caller lacks MANAGER
            UserInfoParamsInvalidError: user_id is 0 or a field is negative
            UserAlreadyExistsError: user_id is already registered
        """
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            if user_id == 0 or min(user_id, phone, score) < 0:
                logger.warning(f"Rejected user params id={user_id} phone={phone} score={score}")
                raise UserInfoParamsInvalidError(
                    f"Invalid user params: id={user_id}, phone={phone}, score={score}"
                )
            if await self.repository.get_user(user_id) is not None:
                logger.warning(f"User {user_id} already exists")
                raise UserAlreadyExistsError(f"User already exists: {user_id}", user_id=user_id)

            tx.enlist(self.repository)
            user = await self.repository.save_user(User(id=user_id, phone=phone, score=score))
            await publish_user_created(tx, self.address, normalize_address(caller), user)

            logger.info(f"User {user_id} created with score {score}")
            return user

    async def update_user(self, caller: str, user_id: int, phone: int, score: int) -> User:
        """Overwrite phone and score of an existing user"""
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            if min(phone, score) < 0:
                raise UserInfoParamsInvalidError(
                    f"Invalid user params: id={user_id}, phone={phone}, score={score}"
                )
            await self._get_existing(user_id)

            tx.enlist(self.repository)
            user = await self.repository.save_user(User(id=user_id, phone=phone, score=score))
            await publish_user_updated(tx, self.address, normalize_address(caller), user)

            logger.info(f"User {user_id} updated")
            return user

    async def charge_score(self, caller: str, user_id: int, amount: int) -> User:
        """Add amount to the user's score"""
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            if amount < 0:
                raise UserInfoParamsInvalidError(f"Invalid charge amount: {amount}")
            existing = await self._get_existing(user_id)

            tx.enlist(self.repository)
            user = await self.repository.save_user(
                existing.model_copy(update={"score": existing.score + amount})
            )
            await publish_score_charged(
                tx, self.address, normalize_address(caller), amount, existing.score, user
            )

            logger.info(f"User {user_id} charged {amount}, score {existing.score} -> {user.score}")
            return user

    async def debit_score(self, caller: str, user_id: int, amount: int) -> User:
        """
        Subtract amount from the user's score.

        Used by the order ledger to settle payments; the ledger's address
        must hold MANAGER on this registry.

        Raises:
            AccessControlError: caller lacks MANAGER
            UserNotExistsError: user is not registered
            UserNotEnoughScoreError: score < amount
        """
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            if amount < 0:
                raise UserInfoParamsInvalidError(f"Invalid debit amount: {amount}")
            existing = await self._get_existing(user_id)
            if existing.score < amount:
                logger.warning(
                    f"User {user_id} score {existing.score} is not enough for {amount}"
                )
                raise UserNotEnoughScoreError(
                    f"User {user_id} score {existing.score} is less than {amount}",
                    user_id=user_id,
                    available=existing.score,
                    required=amount,
                )

            tx.enlist(self.repository)
            user = await self.repository.save_user(
                existing.model_copy(update={"score": existing.score - amount})
            )
            await publish_score_debited(
                tx, self.address, normalize_address(caller), amount, existing.score, user
            )

            logger.info(f"User {user_id} debited {amount}, score {existing.score} -> {user.score}")
            return user

    # ====================
    # Queries
    # ====================

    async def get_user(self, user_id: int) -> User:
        """Return the user record, or the zero record if unknown"""
        async with self.runtime.transaction():
            user = await self.repository.get_user(user_id)
            return user if user is not None else User()

    async def user_exists(self, user_id: int) -> bool:
        async with self.runtime.transaction():
            return user_id != 0 and await self.repository.get_user(user_id) is not None

    async def require_user(self, user_id: int) -> User:
        """Return the user or raise UserNotExistsError"""
        async with self.runtime.transaction():
            return await self._get_existing(user_id)

    async def list_users(self) -> List[User]:
        async with self.runtime.transaction():
            return await self.repository.list_users()

    async def _get_existing(self, user_id: int) -> User:
        user = await self.repository.get_user(user_id) if user_id != 0 else None
        if user is None:
            logger.warning(f"User {user_id} does not exist")
            raise UserNotExistsError(f"User does not exist: {user_id}", user_id=user_id)
        return user
