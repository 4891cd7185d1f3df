"""
User Microservice

Responsibilities:
- User registration and score top-up (MANAGER only)
- User lookup
- Role administration of the registry

Callers identify themselves with the X-Caller-Address header.
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Path, Request, status

from core.access_control import AccessControlError
from core.config import get_settings
from core.logger import setup_service_logger

from .models import (
    ChargeScoreRequest,
    HealthResponse,
    RoleRequest,
    RoleResponse,
    ServiceInfo,
    User,
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from .protocols import (
    UserAlreadyExistsError,
    UserInfoParamsInvalidError,
    UserNotEnoughScoreError,
    UserNotExistsError,
    UserServiceError,
)
from .user_service import UserService

SERVICE_NAME = "user_service"
SERVICE_VERSION = "1.0.0"

logger = setup_service_logger(SERVICE_NAME)


def user_error_to_http(error: Exception) -> HTTPException:
    """Map registry and access errors to HTTP errors"""
    if isinstance(error, AccessControlError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, UserNotExistsError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, UserAlreadyExistsError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, UserNotEnoughScoreError):
        code = status.HTTP_402_PAYMENT_REQUIRED
    elif isinstance(error, (UserInfoParamsInvalidError, ValueError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(
        status_code=code,
        detail={
            "message": str(error),
            "error_code": getattr(error, "error_code", type(error).__name__),
        },
    )


# Dependency injection
def get_user_service(request: Request) -> UserService:
    """Get the registry deployed for this app"""
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User service not initialized",
        )
    return service


def get_caller(
    x_caller_address: str = Header(..., alias="X-Caller-Address", description="Calling account"),
) -> str:
    """Account the request acts as"""
    return x_caller_address

router = APIRouter(prefix="/api/v1/users", tags=["users"])


# Role administration (declared before /{user_id} routes)

@router.post("/roles", response_model=RoleResponse)
async def grant_role(
    request: RoleRequest,
    caller: str = Depends(get_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Grant a registry role"""
    try:
        changed = await user_service.grant_role(caller, request.role, request.account)
        return RoleResponse(
            role=request.role, account=request.account, has_role=True, changed=changed
        )
    except (AccessControlError, ValueError) as e:
        raise user_error_to_http(e)


@router.delete("/roles", response_model=RoleResponse)
async def revoke_role(
    request: RoleRequest,
    caller: str = Depends(get_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Revoke a registry role (renounce when caller == account)"""
    try:
        if caller.lower() == request.account.lower():
            changed = await user_service.renounce_role(caller, request.role, request.account)
        else:
            changed = await user_service.revoke_role(caller, request.role, request.account)
        return RoleResponse(
            role=request.role, account=request.account, has_role=False, changed=changed
        )
    except (AccessControlError, ValueError) as e:
        raise user_error_to_http(e)


@router.get("/roles/{role}/{account}", response_model=RoleResponse)
async def has_role(
    role: str = Path(..., description="Role identifier"),
    account: str = Path(..., description="Account address"),
    user_service: UserService = Depends(get_user_service),
):
    """Check a registry role"""
    try:
        held = await user_service.has_role(role, account)
        return RoleResponse(role=role, account=account, has_role=held)
    except ValueError as e:
        raise user_error_to_http(e)


# User endpoints

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreateRequest,
    caller: str = Depends(get_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Register a user"""
    try:
        user = await user_service.create_user(caller, request.id, request.phone, request.score)
        return UserResponse(success=True, user=user, message="User created successfully")
    except (UserServiceError, AccessControlError, ValueError) as e:
        raise user_error_to_http(e)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    request: UserUpdateRequest,
    user_id: int = Path(..., ge=0, description="User ID"),
    caller: str = Depends(get_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Overwrite phone and score"""
    try:
        user = await user_service.update_user(caller, user_id, request.phone, request.score)
        return UserResponse(success=True, user=user, message="User updated successfully")
    except (UserServiceError, AccessControlError, ValueError) as e:
        raise user_error_to_http(e)


@router.post("/{user_id}/charge", response_model=UserResponse)
async def charge_score(
    request: ChargeScoreRequest,
    user_id: int = Path(..., ge=0, description="User ID"),
    caller: str = Depends(get_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Top up a user's score"""
    try:
        user = await user_service.charge_score(caller, user_id, request.amount)
        return UserResponse(success=True, user=user, message="Score charged successfully")
    except (UserServiceError, AccessControlError, ValueError) as e:
        raise user_error_to_http(e)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int = Path(..., ge=0, description="User ID"),
    user_service: UserService = Depends(get_user_service),
):
    """Get a user (zero record if unknown)"""
    return await user_service.get_user(user_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    from .factory import create_user_service

    app.state.user_service = create_user_service()
    logger.info(f"User registry deployed at {app.state.user_service.address}")

    yield

    await app.state.user_service.runtime.event_bus.close()
    logger.info("User service shutdown completed")


# Create FastAPI application
app = FastAPI(
    title="User Service",
    description="Role-gated user registry with score balances",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)
app.include_router(router)


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Service health check"""
    service = getattr(request.app.state, "user_service", None)
    return HealthResponse(
        status="healthy" if service else "starting",
        service=SERVICE_NAME,
        port=get_settings().user_service_port,
        version=SERVICE_VERSION,
        contract_address=service.address if service else None,
    )


@app.get("/info", response_model=ServiceInfo)
async def service_info(request: Request):
    """Service information"""
    service = getattr(request.app.state, "user_service", None)
    return ServiceInfo(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        description="Role-gated user registry with score balances",
        contract_address=service.address if service else None,
        roles={
            "DEFAULT_ADMIN_ROLE": UserService.DEFAULT_ADMIN_ROLE,
            "MANAGER": UserService.MANAGER,
        },
        capabilities=["create_user", "update_user", "charge_score", "debit_score", "get_user"],
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().user_service_port)
