"""
Order Microservice

Responsibilities:
- Order creation for registered users (MANAGER only)
- Order payment by score debit through the user registry
- Order lookup and per-user order index

The app serves the user registry routes as well, since the ledger and the
registry it debits share one runtime. Callers identify themselves with
the X-Caller-Address header.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Path, Request, status

from core.access_control import AccessControlError
from core.config import get_settings
from core.logger import setup_service_logger
from microservices.user_service.main import (
    get_caller,
    router as user_router,
    user_error_to_http,
)
from microservices.user_service.protocols import UserServiceError

from .events.handlers import OrderIndex
from .factory import get_ledger_stack
from .models import (
    CurrentIdResponse,
    HealthResponse,
    InitializeRequest,
    InitializeResponse,
    Order,
    OrderCreateRequest,
    OrderListResponse,
    OrderPayRequest,
    OrderResponse,
    ServiceInfo,
)
from .order_service import OrderService
from .protocols import (
    AlreadyInitializedError,
    NotInitializedError,
    OrderAlreadyPayedError,
    OrderNotExistsError,
    OrderServiceError,
    OrderUserNotEnoughScoreToPayError,
)

SERVICE_NAME = "order_service"
SERVICE_VERSION = "1.0.0"

logger = setup_service_logger(SERVICE_NAME)


def order_error_to_http(error: Exception) -> HTTPException:
    """Map ledger errors to HTTP errors, registry errors are delegated"""
    if isinstance(error, OrderNotExistsError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (OrderAlreadyPayedError, AlreadyInitializedError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, OrderUserNotEnoughScoreToPayError):
        code = status.HTTP_402_PAYMENT_REQUIRED
    elif isinstance(error, NotInitializedError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        return user_error_to_http(error)
    return HTTPException(
        status_code=code,
        detail={"message": str(error), "error_code": error.error_code},
    )


# Dependency injection
def get_order_service(request: Request) -> OrderService:
    """Get the ledger deployed for this app"""
    service = getattr(request.app.state, "order_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order service not initialized",
        )
    return service


def get_order_index(request: Request) -> OrderIndex:
    index = getattr(request.app.state, "order_index", None)
    if index is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order index not available",
        )
    return index


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    stack = await get_ledger_stack()
    app.state.user_service = stack.user_service
    app.state.order_service = stack.order_service
    app.state.order_index = stack.index
    logger.info(
        f"Order ledger at {stack.order_service.address} bound to registry "
        f"{stack.user_service.address}"
    )

    yield

    await stack.runtime.event_bus.close()
    logger.info("Order service shutdown completed")


# Create FastAPI application
app = FastAPI(
    title="Order Service",
    description="Score-billed order ledger",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)
app.include_router(user_router)


# Health check endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Service health check"""
    service = getattr(request.app.state, "order_service", None)
    return HealthResponse(
        status="healthy" if service else "starting",
        service=SERVICE_NAME,
        port=get_settings().order_service_port,
        version=SERVICE_VERSION,
        contract_address=service.address if service else None,
        registry_address=service.registry_address if service else None,
    )


@app.get("/info", response_model=ServiceInfo)
async def service_info(request: Request):
    """Service information"""
    service = getattr(request.app.state, "order_service", None)
    return ServiceInfo(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        description="Score-billed order ledger",
        contract_address=service.address if service else None,
        registry_address=service.registry_address if service else None,
        roles={
            "DEFAULT_ADMIN_ROLE": OrderService.DEFAULT_ADMIN_ROLE,
            "MANAGER": OrderService.MANAGER,
        },
        capabilities=["initialize", "create_order", "pay_order", "get_order", "current_id", "orders_for_user"],
    )


# Core order endpoints

@app.post("/api/v1/orders/initialize", response_model=InitializeResponse)
async def initialize_ledger(
    request: InitializeRequest,
    caller: str = Depends(get_caller),
    order_service: OrderService = Depends(get_order_service),
):
    """Bind the ledger to a user registry (once)"""
    try:
        address = await order_service.initialize(caller, request.registry_address)
        return InitializeResponse(
            success=True, registry_address=address, message="Ledger initialized successfully"
        )
    except (OrderServiceError, ValueError) as e:
        raise order_error_to_http(e)


@app.post("/api/v1/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    caller: str = Depends(get_caller),
    order_service: OrderService = Depends(get_order_service),
):
    """Create a new order"""
    try:
        order = await order_service.create_order(
            caller,
            order_id=request.order_id,
            order_sn=request.order_sn,
            order_type=request.order_type,
            start_at=request.start_at,
            end_at=request.end_at,
            user_id=request.user_id,
            fee=request.fee,
            unite_count=request.unite_count,
            is_payed=request.is_payed,
            start_position=request.start_position,
            end_position=request.end_position,
        )
        return OrderResponse(success=True, order=order, message="Order created successfully")
    except (OrderServiceError, UserServiceError, AccessControlError, ValueError) as e:
        raise order_error_to_http(e)


@app.get("/api/v1/orders/current-id", response_model=CurrentIdResponse)
async def current_id(order_service: OrderService = Depends(get_order_service)):
    """Id the next order will receive"""
    return CurrentIdResponse(current_id=await order_service.current_id())


@app.get("/api/v1/orders/unpaid", response_model=OrderListResponse)
async def unpaid_orders(index: OrderIndex = Depends(get_order_index)):
    """Orders not paid yet"""
    orders = index.unpaid_orders()
    return OrderListResponse(orders=orders, count=len(orders))


@app.get("/api/v1/orders/users/{user_id}", response_model=OrderListResponse)
async def get_user_orders(
    user_id: int = Path(..., ge=0, description="User ID"),
    index: OrderIndex = Depends(get_order_index),
):
    """Orders of a user, from the order index"""
    orders = index.orders_for_user(user_id)
    return OrderListResponse(orders=orders, count=len(orders))


@app.get("/api/v1/orders/{order_id}", response_model=Order)
async def get_order(
    order_id: int = Path(..., ge=0, description="Internal order ID"),
    order_service: OrderService = Depends(get_order_service),
):
    """Get order details (zero record if unknown)"""
    return await order_service.get_order(order_id)


@app.post("/api/v1/orders/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    request: OrderPayRequest,
    order_id: int = Path(..., ge=0, description="Internal order ID"),
    caller: str = Depends(get_caller),
    order_service: OrderService = Depends(get_order_service),
):
    """Pay an order from the user's score"""
    try:
        order = await order_service.pay_order(caller, order_id, request.amount)
        return OrderResponse(success=True, order=order, message="Order payed successfully")
    except (OrderServiceError, UserServiceError, AccessControlError, ValueError) as e:
        raise order_error_to_http(e)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().order_service_port)
