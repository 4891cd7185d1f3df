"""
Order Service Clients Module

Clients for the user registry (in-process) and the ledger HTTP API
"""

from .user_client import UserRegistryClient
from .order_client import OrderServiceClient

__all__ = [
    "UserRegistryClient",
    "OrderServiceClient",
]
