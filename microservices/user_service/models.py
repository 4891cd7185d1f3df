"""
User Service Data Models

Pydantic models for user records, requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class User(BaseModel):
    """
    Core user record.

    A record with id == 0 is the zero value returned for unknown ids.
    """
    id: int = Field(default=0, ge=0, description="Caller-assigned user id")
    phone: int = Field(default=0, ge=0, description="Phone number")
    score: int = Field(default=0, ge=0, description="Score balance")

    @property
    def exists(self) -> bool:
        return self.id != 0


# Request Models

class UserCreateRequest(BaseModel):
    """Create user request"""
    id: int = Field(..., ge=0, description="User id, must be positive")
    phone: int = Field(..., ge=0, description="Phone number")
    score: int = Field(default=0, ge=0, description="Initial score")


class UserUpdateRequest(BaseModel):
    """Update user request, overwrites phone and score"""
    phone: int = Field(..., ge=0, description="New phone number")
    score: int = Field(..., ge=0, description="New score")


class ChargeScoreRequest(BaseModel):
    """Score top-up request"""
    amount: int = Field(..., ge=0, description="Score to add")


class RoleRequest(BaseModel):
    """Grant / revoke role request"""
    role: str = Field(..., description="32-byte hex role identifier")
    account: str = Field(..., description="20-byte hex account address")


# Response Models

class UserResponse(BaseModel):
    """User response model"""
    success: bool
    user: Optional[User] = None
    message: str
    error_code: Optional[str] = None


class RoleResponse(BaseModel):
    """Role query / change response"""
    role: str
    account: str
    has_role: bool
    changed: Optional[bool] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    contract_address: Optional[str] = None


class ServiceInfo(BaseModel):
    """Service information"""
    service: str
    version: str
    description: str
    contract_address: Optional[str] = None
    roles: Dict[str, str] = {}
    capabilities: List[str] = []
