"""
Order Service Data Models

Pydantic models for ledger orders, requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from enum import IntEnum


class OrderType(IntEnum):
    """Order type enumeration"""
    HIGHWAY = 0
    CHARGE = 1
    PARK = 2


# Core Order Models

class Order(BaseModel):
    """
    Ledger order record.

    ``id`` is the ledger-assigned sequential id; ``order_id`` and
    ``order_sn`` are the caller's external references. A record with
    id == 0 is the zero value returned for unknown ids.
    """
    id: int = Field(default=0, ge=0, description="Ledger-assigned internal id")
    order_id: int = Field(default=0, ge=0, description="External order reference")
    order_sn: str = Field(default="", description="External order code")
    order_type: OrderType = OrderType.HIGHWAY
    start_at: int = Field(default=0, ge=0, description="Start, unix seconds")
    end_at: int = Field(default=0, ge=0, description="End, unix seconds")
    user_id: int = Field(default=0, ge=0)
    fee: int = Field(default=0, ge=0, description="Score debited on payment")
    unite_count: int = Field(default=0, ge=0, description="Billed units")
    is_payed: bool = False
    start_position: str = ""
    end_position: str = ""

    @property
    def exists(self) -> bool:
        return self.id != 0


# Request Models

class OrderCreateRequest(BaseModel):
    """Create order request"""
    order_id: int = Field(..., ge=0)
    order_sn: str = Field(..., description="External order code")
    order_type: OrderType
    start_at: int = Field(..., ge=0)
    end_at: int = Field(..., ge=0)
    user_id: int = Field(..., ge=0)
    fee: int = Field(..., ge=0)
    unite_count: int = Field(default=0, ge=0)
    is_payed: bool = Field(default=False, description="Ignored, orders start unpaid")
    start_position: str = ""
    end_position: str = ""


class OrderPayRequest(BaseModel):
    """Pay order request"""
    amount: int = Field(..., ge=0, description="Amount offered, recorded with the payment")


class InitializeRequest(BaseModel):
    """Bind the ledger to a registry"""
    registry_address: str = Field(..., description="User registry address")


# Response Models

class OrderResponse(BaseModel):
    """Order response model"""
    success: bool
    order: Optional[Order] = None
    message: str
    error_code: Optional[str] = None


class OrderListResponse(BaseModel):
    """Order list response"""
    orders: List[Order]
    count: int


class CurrentIdResponse(BaseModel):
    """Next internal id"""
    current_id: int


class InitializeResponse(BaseModel):
    """Initialize response"""
    success: bool
    registry_address: str
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    contract_address: Optional[str] = None
    registry_address: Optional[str] = None


class ServiceInfo(BaseModel):
    """Service information"""
    service: str
    version: str
    description: str
    contract_address: Optional[str] = None
    registry_address: Optional[str] = None
    roles: Dict[str, str] = {}
    capabilities: List[str] = []
