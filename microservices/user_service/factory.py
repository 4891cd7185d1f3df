"""
User Service Factory

Factory functions for creating the user registry with its dependencies.

Usage:
    from .factory import create_user_service
    registry = create_user_service(runtime, deployer=address)
"""
from typing import Optional

from core.config import get_settings
from core.contract_runtime import ContractRuntime

from .user_service import UserService


def create_user_service(
    runtime: Optional[ContractRuntime] = None,
    deployer: Optional[str] = None,
    address: Optional[str] = None,
    repository=None,
) -> UserService:
    """
    Deploy a user registry.

    Args:
        runtime: Shared runtime (a fresh one if omitted)
        deployer: Account receiving DEFAULT_ADMIN_ROLE and MANAGER
            (LEDGER_DEPLOYER_ADDRESS if omitted)
        address: Registry address (random if omitted)
        repository: User store (in-memory if omitted)

    Returns:
        Deployed UserService
    """
    from .user_repository import UserRepository

    return UserService(
        runtime=runtime or ContractRuntime(),
        repository=repository or UserRepository(),
        deployer=deployer or get_settings().deployer_address,
        address=address,
    )
