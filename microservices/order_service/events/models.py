"""
Order Service Event Models

Pydantic models for events published by the order ledger
"""

from pydantic import BaseModel, Field

from ..models import Order


class OrderCreatedEvent(BaseModel):
    """Event published when an order is created"""
    contract: str = Field(..., description="Ledger address")
    sender: str = Field(..., description="Account that created the order")
    order: Order


class OrderPayedEvent(BaseModel):
    """Event published when an order is paid"""
    contract: str = Field(..., description="Ledger address")
    sender: str = Field(..., description="Account that paid the order")
    amount: int = Field(..., ge=0, description="Amount passed by the caller")
    debited: int = Field(..., ge=0, description="Score debited, always the order fee")
    order: Order


class LedgerInitializedEvent(BaseModel):
    """Event published when the ledger is bound to a registry"""
    contract: str
    sender: str
    registry_address: str
