from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from shopagent.core.catalog.client import CatalogClient
from shopagent.core.catalog.schemas import Cart, CartItem
from shopagent.core.http import ShopAgentHTTPNetworkError, ShopAgentHTTPStatusError, build_http_client

PRODUCT = {
    "id": 1,
    "title": "Fjallraven Backpack",
    "price": 109.95,
    "description": "Fits 15 inch laptops",
    "category": "men's clothing",
    "image": "https://img.local/1.jpg",
    "rating": {"rate": 3.9, "count": 120},
}


def _catalog(handler) -> CatalogClient:
    base_url = "https://store.local"
    client = build_http_client(base_url, transport=httpx.MockTransport(handler))
    return CatalogClient(base_url, client=client)


def test_reads_products_and_categories() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/products":
            return httpx.Response(200, json=[PRODUCT])
        if request.url.path == "/products/categories":
            return httpx.Response(200, json=["men's clothing"])
        return httpx.Response(404)

    catalog = _catalog(handler)

    products = asyncio.run(catalog.get_products())
    categories = asyncio.run(catalog.get_categories())

    assert products[0].title == "Fjallraven Backpack"
    assert products[0].rating.count == 120
    assert categories == ["men's clothing"]


def test_login_and_profile_use_bearer_token() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/login":
            seen["login"] = json.loads(request.content)
            return httpx.Response(200, json={"token": "jwt-123"})
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"id": 1, "email": "john@example.com", "username": "johnd", "phone": "1-570"})

    catalog = _catalog(handler)

    token = asyncio.run(catalog.login("johnd", "m38rmF$"))
    user = asyncio.run(catalog.get_profile(token))

    assert seen["login"] == {"username": "johnd", "password": "m38rmF$"}
    assert seen["auth"] == "Bearer jwt-123"
    assert user.username == "johnd"


def test_login_without_token_is_an_error() -> None:
    catalog = _catalog(lambda request: httpx.Response(200, json={}))

    with pytest.raises(ShopAgentHTTPNetworkError):
        asyncio.run(catalog.login("johnd", "x"))


def test_user_without_carts_gets_an_id_less_empty_cart() -> None:
    catalog = _catalog(lambda request: httpx.Response(200, json=[]))

    cart = asyncio.run(catalog.get_user_cart(4))

    assert cart.id is None
    assert cart.user_id == 4
    assert cart.products == []


def test_cart_writes_use_camel_case_bodies() -> None:
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append((request.method, request.url.path, json.loads(request.content) if request.content else None))
        if request.method == "POST":
            return httpx.Response(200, json={"id": 11, "userId": 1, "date": "2024-01-01", "products": [{"productId": 2, "quantity": 1}]})
        if request.method == "DELETE":
            return httpx.Response(200, json={"id": 11})
        return httpx.Response(200, json={"id": 11})

    catalog = _catalog(handler)

    created = asyncio.run(catalog.create_cart(Cart(id=99, user_id=1, products=[CartItem(product_id=2, quantity=1)])))
    asyncio.run(catalog.update_cart(11, [CartItem(product_id=2, quantity=3)]))
    deleted = asyncio.run(catalog.delete_cart(11))

    assert created.id == 11
    post, put, _ = bodies
    assert "id" not in post[2]
    assert post[2]["userId"] == 1
    assert put[:2] == ("PUT", "/carts/11")
    assert put[2] == {"products": [{"productId": 2, "quantity": 3}]}
    assert deleted == {"success": True, "message": "Cart deleted successfully"}


def test_missing_product_surfaces_status_error() -> None:
    catalog = _catalog(lambda request: httpx.Response(404))

    with pytest.raises(ShopAgentHTTPStatusError):
        asyncio.run(catalog.get_product(42))


def test_null_product_body_is_an_error() -> None:
    catalog = _catalog(lambda request: httpx.Response(200, content=b""))

    with pytest.raises(ShopAgentHTTPNetworkError):
        asyncio.run(catalog.get_product(42))
