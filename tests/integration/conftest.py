"""
Integration test fixtures

Deploys the real registry and ledger on one runtime, wired the same way
the HTTP apps are (initialize + MANAGER grant for the ledger).
"""

import pytest_asyncio

from core.contract_runtime import ContractRuntime
from microservices.order_service.factory import deploy_ledger_stack


@pytest_asyncio.fixture
async def stack(deployer):
    """Fresh registry + ledger + order index"""
    return await deploy_ledger_stack(runtime=ContractRuntime(), deployer=deployer)


@pytest_asyncio.fixture
async def registry(stack):
    return stack.user_service


@pytest_asyncio.fixture
async def ledger(stack):
    return stack.order_service
