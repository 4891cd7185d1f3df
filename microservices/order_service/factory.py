"""
Order Service Factory

Factory functions for creating the ledger and deploying the full stack.

Deployment is an explicit sequence:
    1. deploy the user registry
    2. deploy the order ledger
    3. ledger.initialize(registry.address)
    4. registry.grant_role(MANAGER, ledger.address)

Usage:
    from .factory import deploy_ledger_stack
    stack = await deploy_ledger_stack()
"""
from dataclasses import dataclass
from typing import Optional
import logging

from core.access_control import MANAGER_ROLE
from core.config import get_settings
from core.contract_runtime import ContractRuntime
from microservices.user_service.factory import create_user_service
from microservices.user_service.user_service import UserService

from .order_service import OrderService
from .events.handlers import OrderIndex, register_event_handlers

logger = logging.getLogger(__name__)


@dataclass
class LedgerStack:
    """Registry and ledger deployed on one runtime"""
    runtime: ContractRuntime
    deployer: str
    user_service: UserService
    order_service: OrderService
    index: Optional[OrderIndex] = None


def create_order_service(
    runtime: Optional[ContractRuntime] = None,
    deployer: Optional[str] = None,
    address: Optional[str] = None,
    repository=None,
    registry_client_factory=None,
) -> OrderService:
    """
    Deploy an order ledger (not yet initialized).

    Args:
        runtime: Shared runtime (a fresh one if omitted)
        deployer: Account receiving DEFAULT_ADMIN_ROLE and MANAGER
        address: Ledger address (random if omitted)
        repository: Order store (in-memory if omitted)
        registry_client_factory: Override for the registry client

    Returns:
        Deployed OrderService
    """
    from .order_repository import OrderRepository

    kwargs = {}
    if registry_client_factory is not None:
        kwargs["registry_client_factory"] = registry_client_factory

    return OrderService(
        runtime=runtime or ContractRuntime(),
        repository=repository or OrderRepository(),
        deployer=deployer or get_settings().deployer_address,
        address=address,
        **kwargs,
    )


async def deploy_ledger_stack(
    runtime: Optional[ContractRuntime] = None,
    deployer: Optional[str] = None,
    with_index: bool = True,
) -> LedgerStack:
    """Deploy registry and ledger, bind them and grant the ledger MANAGER on the registry"""
    runtime = runtime or ContractRuntime()
    deployer = (deployer or get_settings().deployer_address).lower()

    user_service = create_user_service(runtime=runtime, deployer=deployer)
    order_service = create_order_service(runtime=runtime, deployer=deployer)

    await order_service.initialize(deployer, user_service.address)
    await user_service.grant_role(deployer, MANAGER_ROLE, order_service.address)

    index = None
    if with_index:
        index = OrderIndex(
            ledger_address=order_service.address,
            registry_address=user_service.address,
        )
        await register_event_handlers(runtime.event_bus, index)

    logger.info(
        f"Ledger stack deployed: registry {user_service.address}, ledger {order_service.address}"
    )
    return LedgerStack(
        runtime=runtime,
        deployer=deployer,
        user_service=user_service,
        order_service=order_service,
        index=index,
    )


# Per-process stack served by the HTTP apps
_ledger_stack: Optional[LedgerStack] = None


async def get_ledger_stack() -> LedgerStack:
    """Get or deploy the process-wide ledger stack"""
    global _ledger_stack

    if _ledger_stack is None:
        _ledger_stack = await deploy_ledger_stack()

    return _ledger_stack


def reset_ledger_stack() -> None:
    """Forget the process-wide stack (next get_ledger_stack deploys a new one)"""
    global _ledger_stack
    _ledger_stack = None
