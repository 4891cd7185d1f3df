"""
Order Service Client

HTTP client for the ledger API. Every mutating call sends the caller
account in the X-Caller-Address header.
"""

import httpx
import logging
from typing import Optional, List, Dict, Any

logger = logging.getLogger(__name__)


class OrderServiceClient:
    """Order Service HTTP client"""

    def __init__(
        self,
        caller: str,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Order Service client

        Args:
            caller: Account address sent with every request
            base_url: Order service base URL, defaults to localhost on ORDER_SERVICE_PORT
            transport: Optional httpx transport (e.g. ASGITransport in tests)
        """
        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            from core.config import get_settings
            self.base_url = f"http://localhost:{get_settings().order_service_port}"

        self.caller = caller
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-Caller-Address": caller},
            transport=transport,
            timeout=30.0,
        )

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _call(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"{method} {path} failed: {e.response.status_code} {e.response.text}"
            )
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error calling {method} {path}: {e}")
            return None

    # =============================================================================
    # Users
    # =============================================================================

    async def create_user(self, user_id: int, phone: int, score: int = 0) -> Optional[Dict[str, Any]]:
        """Register a user, returns the UserResponse body"""
        return await self._call(
            "POST", "/api/v1/users", json={"id": user_id, "phone": phone, "score": score}
        )

    async def charge_score(self, user_id: int, amount: int) -> Optional[Dict[str, Any]]:
        return await self._call(
            "POST", f"/api/v1/users/{user_id}/charge", json={"amount": amount}
        )

    async def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        return await self._call("GET", f"/api/v1/users/{user_id}")

    # =============================================================================
    # Orders
    # =============================================================================

    async def create_order(
        self,
        order_id: int,
        order_sn: str,
        order_type: int,
        start_at: int,
        end_at: int,
        user_id: int,
        fee: int,
        unite_count: int = 0,
        start_position: str = "",
        end_position: str = "",
    ) -> Optional[Dict[str, Any]]:
        """
        Create an order

        Returns:
            OrderResponse body, the new internal id is ``order["id"]``

        Example:
            >>> async with OrderServiceClient(caller=manager) as client:
            ...     created = await client.create_order(
            ...         order_id=1, order_sn="HW-001", order_type=0,
            ...         start_at=1700000000, end_at=1700003600,
            ...         user_id=1, fee=1000,
            ...     )
        """
        payload = {
            "order_id": order_id,
            "order_sn": order_sn,
            "order_type": order_type,
            "start_at": start_at,
            "end_at": end_at,
            "user_id": user_id,
            "fee": fee,
            "unite_count": unite_count,
            "start_position": start_position,
            "end_position": end_position,
        }
        return await self._call("POST", "/api/v1/orders", json=payload)

    async def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        """Get order by internal id (zero record if unknown)"""
        return await self._call("GET", f"/api/v1/orders/{order_id}")

    async def pay_order(self, order_id: int, amount: int) -> Optional[Dict[str, Any]]:
        """Pay an order; None if the payment was rejected"""
        return await self._call(
            "POST", f"/api/v1/orders/{order_id}/pay", json={"amount": amount}
        )

    async def current_id(self) -> Optional[int]:
        body = await self._call("GET", "/api/v1/orders/current-id")
        return body["current_id"] if body else None

    async def get_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        body = await self._call("GET", f"/api/v1/orders/users/{user_id}")
        return body["orders"] if body else []
