from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from shopagent.core.catalog.client import CatalogClient
from shopagent.core.catalog.schemas import Cart, CartItem, now_ms, utc_now_iso
from shopagent.core.errors import CartError, NotFoundError
from shopagent.core.http import ShopAgentHTTPError
from shopagent.core.protocol.actions import (
    AddToCartRequest,
    CreateCartRequest,
    DeleteCartRequest,
    RemoveFromCartRequest,
    UpdateCartRequest,
)
from shopagent.core.state.store import InMemoryStore, KeyedStore

# No multi-tenant identity yet: every cart action acts on this user.
DEMO_USER_ID = 1


class CartStore:
    """Local source of truth for carts, mirrored best-effort to the upstream API.

    The upstream accepts cart writes without persisting them, so every mutation
    succeeds locally first and upstream calls only ever log on failure.
    """

    def __init__(self, catalog: CatalogClient, carts: KeyedStore[int, Cart] | None = None) -> None:
        self.catalog = catalog
        self.carts: KeyedStore[int, Cart] = carts if carts is not None else InMemoryStore()
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.logger = logging.getLogger("shopagent.cart")

    async def initialize_user_cart(self, user_id: int) -> Cart:
        cached = self.carts.get(user_id)
        if cached is not None:
            return cached
        try:
            cart = await self.catalog.get_user_cart(user_id)
        except ShopAgentHTTPError as exc:
            self.logger.warning(
                "cart_upstream_fetch_failed",
                extra={"extra_fields": {"user_id": user_id, "reason": str(exc)}},
            )
            cart = Cart(id=now_ms(), user_id=user_id, date=utc_now_iso(), products=[])
        # another coroutine may have populated the slot while we awaited upstream
        return self.carts.get_or_create(user_id, lambda: cart)

    async def get_user_cart(self, user_id: int) -> Cart:
        return await self.initialize_user_cart(user_id)

    async def get_cart(self) -> Cart:
        try:
            return await self.get_user_cart(DEMO_USER_ID)
        except Exception as exc:
            raise CartError("Failed to get user cart") from exc

    async def add_to_cart(self, payload: AddToCartRequest) -> Cart:
        async with self._locks[DEMO_USER_ID]:
            cart = await self._load_for_mutation(DEMO_USER_ID)
            products = [item.model_copy() for item in cart.products]
            for item in products:
                if item.product_id == payload.product_id:
                    item.quantity += payload.quantity
                    break
            else:
                products.append(CartItem(product_id=payload.product_id, quantity=payload.quantity))
            return await self._commit(cart, products)

    async def remove_from_cart(self, payload: RemoveFromCartRequest) -> Cart:
        async with self._locks[DEMO_USER_ID]:
            cart = await self._load_for_mutation(DEMO_USER_ID)
            products = [item.model_copy() for item in cart.products if item.product_id != payload.product_id]
            return await self._commit(cart, products)

    async def create_cart(self, payload: CreateCartRequest) -> Cart:
        draft = Cart(
            user_id=payload.user_id,
            date=utc_now_iso(),
            products=_merge_lines(item.to_item() for item in payload.products),
        )
        async with self._locks[payload.user_id]:
            try:
                created = await self.catalog.create_cart(draft)
            except ShopAgentHTTPError as exc:
                self.logger.warning(
                    "cart_upstream_create_failed",
                    extra={"extra_fields": {"user_id": payload.user_id, "reason": str(exc)}},
                )
                created = draft.model_copy(update={"id": now_ms()})
            return self.carts.set(payload.user_id, created)

    async def update_cart(self, payload: UpdateCartRequest) -> Cart:
        existing = self._find_by_id(payload.cart_id)
        if existing is None:
            raise NotFoundError(f"Cart with ID {payload.cart_id} not found")
        async with self._locks[existing.user_id]:
            current = self._find_by_id(payload.cart_id) or existing
            products = _merge_lines(item.to_item() for item in payload.products)
            return await self._commit(current, products)

    async def delete_cart(self, payload: DeleteCartRequest) -> dict[str, object]:
        existing = self._find_by_id(payload.cart_id)
        if existing is None:
            return {"success": False, "message": f"Cart with ID {payload.cart_id} not found"}
        async with self._locks[existing.user_id]:
            try:
                result = await self.catalog.delete_cart(payload.cart_id)
            except ShopAgentHTTPError as exc:
                self.logger.warning(
                    "cart_upstream_delete_failed",
                    extra={"extra_fields": {"cart_id": payload.cart_id, "reason": str(exc)}},
                )
                self.carts.pop(existing.user_id)
                return {"success": True, "message": "Cart deleted from local store"}
            if result.get("success"):
                self.carts.pop(existing.user_id)
            return result

    def _find_by_id(self, cart_id: int) -> Cart | None:
        for cart in self.carts.values():
            if cart.id == cart_id:
                return cart
        return None

    async def _load_for_mutation(self, user_id: int) -> Cart:
        try:
            return await self.get_user_cart(user_id)
        except Exception as exc:
            raise CartError("Failed to get user cart") from exc

    async def _commit(self, cart: Cart, products: list[CartItem]) -> Cart:
        updated = cart.model_copy(update={"products": products, "date": utc_now_iso()})
        self.carts.set(updated.user_id, updated)
        if updated.id is not None:
            try:
                await self.catalog.update_cart(updated.id, updated.products)
            except ShopAgentHTTPError as exc:
                self.logger.warning(
                    "cart_upstream_sync_failed",
                    extra={"extra_fields": {"cart_id": updated.id, "reason": str(exc)}},
                )
        return updated


def _merge_lines(items) -> list[CartItem]:
    merged: dict[int, CartItem] = {}
    for item in items:
        if item.product_id in merged:
            merged[item.product_id].quantity += item.quantity
        else:
            merged[item.product_id] = CartItem(product_id=item.product_id, quantity=item.quantity)
    return list(merged.values())
