"""
Order Service Business Logic

The order ledger: MANAGER holders create orders for registered users and
settle them by debiting the order fee from the user's score in the user
registry. An order goes Created -> Paid exactly once; there is no cancel
or refund.

The ledger must be bound to a registry with ``initialize`` and its own
address must hold MANAGER on that registry before payments can succeed.
"""

from typing import Callable, List, Optional
import logging

from core.access_control import (
    AccessControlledMixin,
    RoleTable,
    MANAGER_ROLE,
    normalize_address,
)
from core.contract_runtime import ContractRuntime
from core.event_bus import ServiceSource

from .models import Order, OrderType
from .protocols import (
    OrderRepositoryProtocol,
    ScoreLedgerProtocol,
    OrderNotExistsError,
    OrderAlreadyPayedError,
    OrderUserNotEnoughScoreToPayError,
    AlreadyInitializedError,
    NotInitializedError,
)
from .clients.user_client import UserRegistryClient, UserNotEnoughScoreError
from .events.publishers import (
    publish_order_created,
    publish_order_payed,
    publish_ledger_initialized,
)

logger = logging.getLogger(__name__)

RegistryClientFactory = Callable[[ContractRuntime, str], ScoreLedgerProtocol]


class OrderService(AccessControlledMixin):
    """
    Order ledger business logic service

    The deployer holds DEFAULT_ADMIN_ROLE and MANAGER after construction.
    """

    event_source = ServiceSource.ORDER_SERVICE

    def __init__(
        self,
        runtime: ContractRuntime,
        repository: OrderRepositoryProtocol,
        deployer: str,
        address: Optional[str] = None,
        registry_client_factory: RegistryClientFactory = UserRegistryClient,
    ):
        """
        Initialize Order Service

        Args:
            runtime: Shared runtime the registry is deployed on
            repository: Order store
            deployer: Account receiving DEFAULT_ADMIN_ROLE and MANAGER
            address: Ledger address (random if omitted)
            registry_client_factory: Builds the registry client on initialize
        """
        self.runtime = runtime
        self.repository = repository
        self.deployer = normalize_address(deployer)
        self.roles = RoleTable(self.deployer)
        self.roles.setup_role(MANAGER_ROLE, self.deployer)
        self.registry_client_factory = registry_client_factory
        self.registry: Optional[ScoreLedgerProtocol] = None
        self.address = runtime.register(address or runtime.new_address(), self)

        logger.info(f"OrderService initialized at {self.address}")

    @property
    def registry_address(self) -> Optional[str]:
        return self.registry.address if self.registry else None

    # ====================
    # Setup
    # ====================

    async def initialize(self, caller: str, registry_address: str) -> str:
        """
        Bind the ledger to a user registry. Callable once, by anyone.

        Raises:
            AlreadyInitializedError: ledger is already bound
            ValueError: malformed registry address
        """
        async with self.runtime.transaction() as tx:
            if self.registry is not None:
                logger.warning(f"Ledger {self.address} already initialized")
                raise AlreadyInitializedError(
                    f"Ledger already initialized with registry {self.registry_address}"
                )
            address = normalize_address(registry_address)

            tx.enlist(self)
            self.registry = self.registry_client_factory(self.runtime, address)
            await publish_ledger_initialized(tx, self.address, normalize_address(caller), address)

            logger.info(f"Ledger {self.address} bound to registry {address}")
            return address

    # ====================
    # Manager operations
    # ====================

    async def create_order(
        self,
        caller: str,
        order_id: int,
        order_sn: str,
        order_type: OrderType,
        start_at: int,
        end_at: int,
        user_id: int,
        fee: int,
        unite_count: int,
        is_payed: bool,
        start_position: str,
        end_position: str,
    ) -> Order:
        """
        Create an order for a registered user and return it.

        ``is_payed`` is accepted for interface compatibility; new orders are
        always unpaid.

        Raises:
            AccessControlError: caller lacks MANAGER
            NotInitializedError: ledger has no registry
            UserNotExistsError: user is not in the registry
        """
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            registry = self._require_registry()
            await registry.require_user(user_id)

            tx.enlist(self.repository)
            order = Order(
                id=self.repository.allocate_id(),
                order_id=order_id,
                order_sn=order_sn,
                order_type=OrderType(order_type),
                start_at=start_at,
                end_at=end_at,
                user_id=user_id,
                fee=fee,
                unite_count=unite_count,
                is_payed=False,
                start_position=start_position,
                end_position=end_position,
            )
            await self.repository.save_order(order)
            await publish_order_created(tx, self.address, normalize_address(caller), order)

            logger.info(f"Order {order.id} ({order_sn}) created for user {user_id}, fee {fee}")
            return order

    async def pay_order(self, caller: str, order_id: int, amount: int) -> Order:
        """
        Settle an order by debiting its fee from the user's score.

        ``amount`` is recorded in the order.payed event; the debit is
        always the stored fee.

        Raises:
            AccessControlError: caller lacks MANAGER, or the ledger lacks
                MANAGER on the registry
            OrderNotExistsError: unknown order id
            OrderAlreadyPayedError: order was paid before
            OrderUserNotEnoughScoreToPayError: user score < fee
        """
        async with self.runtime.transaction() as tx:
            self._require_manager(caller)
            if amount < 0:
                raise ValueError(f"Invalid payment amount: {amount}")
            registry = self._require_registry()

            order = await self.repository.get_order(order_id) if order_id != 0 else None
            if order is None:
                logger.warning(f"Order {order_id} does not exist")
                raise OrderNotExistsError(f"Order does not exist: {order_id}", order_id=order_id)
            if order.is_payed:
                logger.warning(f"Order {order_id} already payed")
                raise OrderAlreadyPayedError(f"Order already payed: {order_id}", order_id=order_id)

            try:
                await registry.debit_score(self.address, order.user_id, order.fee)
            except UserNotEnoughScoreError as e:
                logger.warning(f"User {order.user_id} cannot pay order {order_id}: {e}")
                raise OrderUserNotEnoughScoreToPayError(
                    f"User {order.user_id} score is not enough to pay order {order_id}",
                    order_id=order_id,
                    user_id=order.user_id,
                    fee=order.fee,
                ) from e

            tx.enlist(self.repository)
            order = await self.repository.save_order(order.model_copy(update={"is_payed": True}))
            await publish_order_payed(tx, self.address, normalize_address(caller), amount, order)

            logger.info(f"Order {order_id} payed, user {order.user_id} debited {order.fee}")
            return order

    # ====================
    # Queries
    # ====================

    async def get_order(self, order_id: int) -> Order:
        """Return the order, or the zero record if unknown"""
        async with self.runtime.transaction():
            order = await self.repository.get_order(order_id)
            return order if order is not None else Order()

    async def current_id(self) -> int:
        """Id the next successful create_order will assign"""
        async with self.runtime.transaction():
            return self.repository.current_id()

    async def list_orders(self) -> List[Order]:
        async with self.runtime.transaction():
            return await self.repository.list_orders()

    def _require_registry(self) -> ScoreLedgerProtocol:
        if self.registry is None:
            raise NotInitializedError(f"Ledger {self.address} is not initialized")
        return self.registry

    # ---- transaction support ----

    def snapshot(self):
        return self.registry

    def restore(self, state) -> None:
        self.registry = state
