from __future__ import annotations

import logging

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shopagent.core.http import ShopAgentHTTPNetworkError, build_http_client, request_json

from .schemas import Cart, CartItem, Product, User, utc_now_iso

logger = logging.getLogger("shopagent.catalog")

_PRODUCT_LIST = TypeAdapter(list[Product])
_CART_LIST = TypeAdapter(list[Cart])
_CATEGORY_LIST = TypeAdapter(list[str])


def _parse(adapter: TypeAdapter, payload: object, what: str):
    try:
        return adapter.validate_python(payload)
    except PydanticValidationError as exc:
        raise ShopAgentHTTPNetworkError(f"Unexpected {what} payload from catalog") from exc


class CatalogClient:
    """Async client for the upstream product/cart/auth API.

    Reads are assumed reliable; cart mutations are accepted by the upstream but
    not durably persisted, so callers treat those results as advisory.
    """

    def __init__(self, base_url: str, *, timeout_s: float | None = None, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or build_http_client(self.base_url, timeout_s=timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def login(self, username: str, password: str) -> str:
        data = await request_json(self._client, "POST", "/auth/login", json={"username": username, "password": password})
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ShopAgentHTTPNetworkError("Login response did not include a token")
        return str(token)

    async def get_profile(self, token: str) -> User:
        data = await request_json(self._client, "GET", "/users/1", headers={"Authorization": f"Bearer {token}"})
        return _parse(TypeAdapter(User), data, "user")

    async def get_products(self) -> list[Product]:
        data = await request_json(self._client, "GET", "/products")
        return _parse(_PRODUCT_LIST, data, "product list")

    async def get_product(self, product_id: int) -> Product:
        data = await request_json(self._client, "GET", f"/products/{product_id}")
        if data is None:
            raise ShopAgentHTTPNetworkError(f"Product {product_id} not returned by catalog")
        return _parse(TypeAdapter(Product), data, "product")

    async def get_categories(self) -> list[str]:
        data = await request_json(self._client, "GET", "/products/categories")
        return _parse(_CATEGORY_LIST, data, "category list")

    async def get_user_cart(self, user_id: int) -> Cart:
        data = await request_json(self._client, "GET", f"/carts/user/{user_id}")
        carts = _parse(_CART_LIST, data or [], "cart list")
        if carts:
            return carts[0]
        return Cart(user_id=user_id, date=utc_now_iso(), products=[])

    async def create_cart(self, cart: Cart) -> Cart:
        body = cart.to_wire()
        body.pop("id", None)
        data = await request_json(self._client, "POST", "/carts", json=body)
        return _parse(TypeAdapter(Cart), data, "cart")

    async def update_cart(self, cart_id: int, products: list[CartItem]) -> None:
        body = {"products": [item.to_wire() for item in products]}
        await request_json(self._client, "PUT", f"/carts/{cart_id}", json=body)

    async def delete_cart(self, cart_id: int) -> dict[str, object]:
        data = await request_json(self._client, "DELETE", f"/carts/{cart_id}")
        logger.debug("catalog_cart_deleted", extra={"extra_fields": {"cart_id": cart_id, "returned": bool(data)}})
        return {
            "success": bool(data),
            "message": "Cart deleted successfully" if data else "Failed to delete cart",
        }
