"""
API Test Layer Configuration

Runs the FastAPI apps in-process over httpx.ASGITransport. Each test gets
a freshly deployed stack installed on the app state.

Usage:
    pytest tests/api -v
"""

from typing import AsyncGenerator

import httpx
import pytest_asyncio

from core.contract_runtime import ContractRuntime
from microservices.order_service.factory import deploy_ledger_stack
from microservices.user_service.factory import create_user_service


@pytest_asyncio.fixture
async def stack(deployer):
    return await deploy_ledger_stack(runtime=ContractRuntime(), deployer=deployer)


@pytest_asyncio.fixture
async def order_api(stack) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client for the order app (serves the user routes too)"""
    from microservices.order_service.main import app

    app.state.user_service = stack.user_service
    app.state.order_service = stack.order_service
    app.state.order_index = stack.index

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def user_api(deployer) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client for the standalone user registry app"""
    from microservices.user_service.main import app

    app.state.user_service = create_user_service(runtime=ContractRuntime(), deployer=deployer)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
