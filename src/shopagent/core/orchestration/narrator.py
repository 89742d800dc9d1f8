from __future__ import annotations

import json
import logging
import re
from typing import Any

from shopagent.core.errors import NarrationParseError
from shopagent.core.models.chat import ChatMessage
from shopagent.core.models.llm_provider import ShopAgentLLM
from shopagent.core.models.prompts import narration_prompt
from shopagent.core.protocol.actions import CART_RESULT_ACTIONS

from .action_client import ActionClient
from .fallback import fallback_answer
from .planner import extract_fenced_json
from .schemas import ActionResult, StructuredAnswer

logger = logging.getLogger("shopagent.narrator")

_BARE_OBJECT = re.compile(r"(\{[\s\S]*\})")
_CART_ACTION_NAMES = frozenset(action.value for action in CART_RESULT_ACTIONS)
EMPTY_ANSWER_TEXT = "Sorry, I wasn't able to put together an answer for that."


def parse_answer(text: str) -> StructuredAnswer:
    block = extract_fenced_json(text)
    if block is None:
        match = _BARE_OBJECT.search(text or "")
        block = match.group(1) if match else None
    if block is None:
        raise NarrationParseError("No JSON object in narration output")
    try:
        raw = json.loads(block)
    except json.JSONDecodeError as exc:
        raise NarrationParseError(f"Narration output is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, dict):
        raise NarrationParseError("Narration output must be a JSON object")

    answer_text = raw.get("text")
    items = raw.get("items")
    return StructuredAnswer(
        reasoning=str(raw.get("reasoning") or ""),
        items=items if isinstance(items, list) else [],
        text=answer_text if isinstance(answer_text, str) and answer_text.strip() else _fallback_text(text),
    )


def coerce_answer(text: str) -> StructuredAnswer:
    """Best-effort parse; unparseable output is shown to the user verbatim."""
    try:
        return parse_answer(text)
    except NarrationParseError as exc:
        logger.info("narration_unstructured", extra={"extra_fields": {"reason": exc.message}})
        return StructuredAnswer(text=_fallback_text(text))


def _fallback_text(raw: str) -> str:
    return raw if raw and raw.strip() else EMPTY_ANSWER_TEXT


def _product_label(item: dict[str, Any]) -> str:
    return str(item.get("title") or f"Product #{item.get('id')}")


def quantity_summary(items: list[dict[str, Any]]) -> str:
    lines = "\n".join(f"- {_product_label(item)}: Quantity {item.get('quantity')}" for item in items)
    return f"Your cart contains {len(items)} products with the following quantities:\n{lines}"


def last_cart_result(results: list[ActionResult]) -> dict[str, Any] | None:
    for result in reversed(results):
        if result.ok and result.action in _CART_ACTION_NAMES and isinstance(result.result, dict):
            return result.result
    return None


class Narrator:
    def __init__(self, llm: ShopAgentLLM, actions: ActionClient) -> None:
        self.llm = llm
        self.actions = actions

    async def narrate(self, history: list[ChatMessage], query: str, results: list[ActionResult]) -> StructuredAnswer:
        if self.llm.enabled:
            output = await self.llm.complete(
                [*history, ChatMessage.system(narration_prompt([item.to_wire() for item in results]))],
                mode="narrate",
            )
            answer = coerce_answer(output)
        else:
            answer = fallback_answer(query, results)
        return await self.augment_with_cart(answer, results)

    async def augment_with_cart(self, answer: StructuredAnswer, results: list[ActionResult]) -> StructuredAnswer:
        cart = last_cart_result(results)
        if cart is None or not cart.get("products"):
            return answer
        items = await self.actions.products_for_cart(cart)
        if not items:
            return answer

        text = answer.text
        lowered = text.casefold()
        if "quantity" not in lowered and "qty" not in lowered:
            text = f"{text}\n\n{quantity_summary(items)}"
        return answer.model_copy(update={"items": items, "text": text})
