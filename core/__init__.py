#!/usr/bin/env python3
"""
Core Module for the score ledger services

Shared components used by user_service and order_service.

COMPONENTS:
    - config/: dataclass configuration loaded from env / dotenv files
    - logger.py: service logger setup
    - event_bus.py: Event envelope and in-process event bus
    - access_control.py: per-component role tables
    - contract_runtime.py: serial, atomic operation runtime

USAGE:
    from core.contract_runtime import ContractRuntime
    from core.access_control import MANAGER_ROLE

    runtime = ContractRuntime()
"""

from .event_bus import Event, EventType, ServiceSource, InMemoryEventBus
from .access_control import (
    AccessControlError,
    RoleTable,
    DEFAULT_ADMIN_ROLE,
    MANAGER_ROLE,
)
from .contract_runtime import ContractRuntime, Transaction

__all__ = [
    "Event",
    "EventType",
    "ServiceSource",
    "InMemoryEventBus",
    "AccessControlError",
    "RoleTable",
    "DEFAULT_ADMIN_ROLE",
    "MANAGER_ROLE",
    "ContractRuntime",
    "Transaction",
]

__version__ = "1.0.0"
