from __future__ import annotations

import asyncio
import logging
from typing import Any

from shopagent.core.errors import ActionFailedError, ShopAgentError, ValidationError
from shopagent.core.gateway.gateway import ActionGateway
from shopagent.core.protocol import (
    ActionType,
    ErrorEnvelope,
    build_request,
    is_void,
    payload_to_wire,
    validate_request,
    validate_response,
)

logger = logging.getLogger("shopagent.actions")


class ActionClient:
    """In-process caller of the gateway speaking the same envelopes as ``POST /api/mcp``."""

    def __init__(self, gateway: ActionGateway, enrich_concurrency: int = 4) -> None:
        self.gateway = gateway
        self.enrich_concurrency = max(1, enrich_concurrency)

    async def execute(self, action: str | ActionType, payload: Any = None) -> Any:
        try:
            action_type = ActionType(action)
        except ValueError as exc:
            raise ValidationError(f"Unknown action: {action}") from exc

        if is_void(action_type):
            payload = None
        request = validate_request(build_request(action_type, payload).to_wire())
        reply = await self.gateway.handle(request)
        if isinstance(reply, ErrorEnvelope):
            raise ActionFailedError(reply.error.message, code=reply.error.code, action=action_type.value)
        response = validate_response(reply.to_wire())
        return payload_to_wire(response.payload)

    async def products_for_cart(self, cart: dict[str, Any]) -> list[dict[str, Any]]:
        """Resolve cart lines to product details plus quantity, keeping cart order.

        Lookups run concurrently up to ``enrich_concurrency``; a failed lookup
        drops that line instead of failing the batch.
        """
        lines = [line for line in cart.get("products") or [] if isinstance(line, dict) and line.get("productId")]
        if not lines:
            return []
        semaphore = asyncio.Semaphore(self.enrich_concurrency)

        async def enrich(line: dict[str, Any]) -> dict[str, Any] | None:
            async with semaphore:
                try:
                    product = await self.execute(ActionType.GET_PRODUCT, {"id": line["productId"]})
                except ShopAgentError as exc:
                    logger.warning(
                        "cart_item_lookup_failed",
                        extra={"extra_fields": {"product_id": line["productId"], "reason": exc.message}},
                    )
                    return None
            if not product:
                return None
            return {**product, "quantity": line.get("quantity")}

        enriched = await asyncio.gather(*(enrich(line) for line in lines))
        return [item for item in enriched if item is not None]
