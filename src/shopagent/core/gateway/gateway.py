from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from shopagent.core.cart.store import CartStore
from shopagent.core.catalog.client import CatalogClient
from shopagent.core.errors import ApiError, InternalError, NotFoundError, ShopAgentError, UnauthorizedError
from shopagent.core.http import ShopAgentHTTPError
from shopagent.core.logging.context import log_context
from shopagent.core.protocol.actions import (
    ActionType,
    AvailableOptions,
    GetProductRequest,
    LoginRequest,
    LoginResponse,
)
from shopagent.core.protocol.envelope import (
    ErrorEnvelope,
    RequestEnvelope,
    ResponseEnvelope,
    build_error,
    build_response,
)

from .stats import compute_store_stats

QUERY_EXAMPLES = [
    "Show me all products",
    "Find men's clothing under $50",
    "Show me jewelry with good ratings",
    "I'm looking for women's clothing",
    "What are your bestselling electronics?",
    "Show me items with a price less than $20",
    "Find products in the jewelery category",
    "Show me highly rated men's clothing",
]

Handler = Callable[[Any], Awaitable[Any]]


class ActionGateway:
    def __init__(self, catalog: CatalogClient, cart_store: CartStore) -> None:
        self.catalog = catalog
        self.cart_store = cart_store
        self.logger = logging.getLogger("shopagent.gateway")
        self._handlers: dict[ActionType, Handler] = {
            ActionType.LOGIN: self._login,
            ActionType.GET_PRODUCTS: self._get_products,
            ActionType.GET_PRODUCT: self._get_product,
            ActionType.ADD_TO_CART: self.cart_store.add_to_cart,
            ActionType.REMOVE_FROM_CART: self.cart_store.remove_from_cart,
            ActionType.GET_CART: lambda _payload: self.cart_store.get_cart(),
            ActionType.CREATE_CART: self.cart_store.create_cart,
            ActionType.UPDATE_CART: self.cart_store.update_cart,
            ActionType.DELETE_CART: self.cart_store.delete_cart,
            ActionType.GET_STORE_STATS: self._get_store_stats,
            ActionType.GET_AVAILABLE_OPTIONS: self._get_available_options,
        }
        missing = [action.value for action in ActionType if action not in self._handlers]
        if missing:
            raise RuntimeError(f"gateway has no handler for: {', '.join(missing)}")

    def supports(self, action: ActionType) -> bool:
        return action in self._handlers

    async def handle(self, request: RequestEnvelope) -> ResponseEnvelope | ErrorEnvelope:
        """Route a validated request to its handler; failures come back as error envelopes."""
        with log_context(request_id=request.request_id):
            handler = self._handlers.get(request.action)
            if handler is None:
                name = getattr(request.action, "value", request.action)
                self.logger.warning("action_unsupported", extra={"extra_fields": {"action": name}})
                return build_error(
                    f"Unsupported action: {name}",
                    request.request_id,
                    code="UNSUPPORTED_ACTION",
                )
            try:
                payload = await handler(request.payload)
            except ShopAgentError as exc:
                self.logger.warning(
                    "action_failed",
                    extra={"extra_fields": {"action": request.action.value, "code": exc.code, "reason": exc.message}},
                )
                return build_error(exc.message, request.request_id, code=exc.code, action=request.action)
            except Exception as exc:
                self.logger.exception("action_failed", extra={"extra_fields": {"action": request.action.value}})
                return build_error(
                    str(exc) or "An error occurred while processing the request",
                    request.request_id,
                    code="INTERNAL_ERROR",
                    action=request.action,
                )
            self.logger.info("action_handled", extra={"extra_fields": {"action": request.action.value}})
            return build_response(request.action, payload, request.request_id)

    async def _login(self, payload: LoginRequest) -> LoginResponse:
        try:
            token = await self.catalog.login(payload.username, payload.password)
        except ShopAgentHTTPError as exc:
            raise UnauthorizedError("Failed to authenticate user") from exc
        try:
            user = await self.catalog.get_profile(token)
        except ShopAgentHTTPError as exc:
            raise InternalError("Failed to retrieve user profile") from exc
        await self.cart_store.initialize_user_cart(user.id)
        return LoginResponse(token=token, user=user)

    async def _get_products(self, _payload: Any):
        try:
            return await self.catalog.get_products()
        except ShopAgentHTTPError as exc:
            raise ApiError("Failed to retrieve products") from exc

    async def _get_product(self, payload: GetProductRequest):
        try:
            return await self.catalog.get_product(payload.id)
        except ShopAgentHTTPError as exc:
            raise NotFoundError(f"Failed to retrieve product with ID {payload.id}") from exc

    async def _get_store_stats(self, _payload: Any):
        try:
            products = await self.catalog.get_products()
        except ShopAgentHTTPError as exc:
            raise ApiError("Failed to retrieve products for store statistics") from exc
        return compute_store_stats(products)

    async def _get_available_options(self, _payload: Any) -> AvailableOptions:
        try:
            categories = await self.catalog.get_categories()
        except ShopAgentHTTPError as exc:
            raise ApiError("Failed to retrieve product categories") from exc
        return AvailableOptions(
            available_actions=list(ActionType),
            product_categories=categories,
            query_examples=list(QUERY_EXAMPLES),
        )
