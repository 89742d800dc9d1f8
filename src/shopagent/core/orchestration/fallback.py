"""Keyword matching used when no language model is configured.

The plan is chosen from the query text alone and the product list is filtered
with simple price, category and keyword rules instead of a narration call.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

from shopagent.core.protocol.actions import CART_RESULT_ACTIONS, ActionType

from .schemas import ActionPlan, ActionResult, PlannedAction, StructuredAnswer

_SHOW_ALL_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"show\s+all",
        r"all\s+products",
        r"list\s+all",
        r"get\s+all",
        r"display\s+all",
        r"view\s+all",
    )
)
_MAX_PRICE_PATTERNS = (
    re.compile(r"under\s+\$?(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"less\s+than\s+\$?(\d+(?:\.\d+)?)", re.IGNORECASE),
)
_MIN_PRICE_PATTERNS = (
    re.compile(r"over\s+\$?(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"more\s+than\s+\$?(\d+(?:\.\d+)?)", re.IGNORECASE),
)
_CART_PATTERN = re.compile(r"\bcart\b", re.IGNORECASE)
_WORD_PATTERN = re.compile(r"[a-z][a-z']*")

_STOPWORDS = frozenset(
    {
        "a", "all", "an", "and", "any", "are", "category", "display", "find", "for", "get", "have",
        "i", "i'm", "im", "in", "is", "item", "items", "less", "list", "looking", "me", "more", "my",
        "of", "on", "or", "over", "please", "price", "product", "products", "show", "some", "than",
        "the", "to", "under", "view", "want", "what", "which", "with", "you", "your",
    }
)

REASONING = "No language model is configured; products were matched by keyword."


def wants_everything(query: str) -> bool:
    return any(pattern.search(query) for pattern in _SHOW_ALL_PATTERNS)


def mentions_cart(query: str) -> bool:
    return bool(_CART_PATTERN.search(query))


def _first_amount(patterns: tuple[re.Pattern[str], ...], text: str) -> float | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return float(match.group(1))
    return None


def _mentions(text: str, phrase: str) -> bool:
    # whole-phrase match so "women's clothing" does not also select "men's clothing"
    return re.search(rf"(?<![a-z]){re.escape(phrase)}(?![a-z])", text) is not None


@dataclass
class ProductCriteria:
    min_price: float = 0.0
    max_price: float = math.inf
    categories: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_query(cls, query: str, categories: list[str]) -> "ProductCriteria":
        lowered = query.casefold()
        max_price = _first_amount(_MAX_PRICE_PATTERNS, lowered)
        min_price = _first_amount(_MIN_PRICE_PATTERNS, lowered)
        mentioned = [category for category in categories if _mentions(lowered, category.casefold())]

        covered = {word for category in mentioned for word in _WORD_PATTERN.findall(category.casefold())}
        keywords = [
            word
            for word in _WORD_PATTERN.findall(lowered)
            if word not in _STOPWORDS and word not in covered and len(word) > 2
        ]
        return cls(
            min_price=min_price if min_price is not None else 0.0,
            max_price=max_price if max_price is not None else math.inf,
            categories=mentioned,
            keywords=list(dict.fromkeys(keywords)),
        )

    def matches(self, product: dict[str, Any]) -> bool:
        price = float(product.get("price") or 0.0)
        if price < self.min_price or price > self.max_price:
            return False
        category = str(product.get("category") or "")
        if self.categories and category not in self.categories:
            return False
        if not self.keywords:
            return True
        haystack = " ".join(
            str(product.get(key) or "") for key in ("title", "description", "category")
        ).casefold()
        return any(keyword in haystack for keyword in self.keywords)


def match_products(query: str, products: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if wants_everything(query):
        return list(products)
    categories = list(dict.fromkeys(str(item.get("category")) for item in products if item.get("category")))
    criteria = ProductCriteria.from_query(query, categories)
    return [item for item in products if criteria.matches(item)]


def fallback_plan(query: str) -> ActionPlan:
    if mentions_cart(query):
        return ActionPlan(
            thoughts="The user is asking about their cart, so fetch it.",
            actions=[PlannedAction(action=ActionType.GET_CART.value, payload={})],
        )
    return ActionPlan(
        thoughts="Fetch the catalog and match products against the query.",
        actions=[PlannedAction(action=ActionType.GET_PRODUCTS.value, payload={})],
    )


def _last_ok(results: list[ActionResult], actions: set[str]) -> ActionResult | None:
    for result in reversed(results):
        if result.ok and result.action in actions:
            return result
    return None


def fallback_answer(query: str, results: list[ActionResult]) -> StructuredAnswer:
    cart = _last_ok(results, {action.value for action in CART_RESULT_ACTIONS})
    if cart is not None:
        lines = cart.result.get("products") if isinstance(cart.result, dict) else None
        text = "Here is your cart." if lines else "Your cart is empty."
        return StructuredAnswer(reasoning=REASONING, items=[], text=text)

    listing = _last_ok(results, {ActionType.GET_PRODUCTS.value})
    if listing is not None and isinstance(listing.result, list):
        matched = match_products(query, listing.result)
        if matched:
            text = f"I found {len(matched)} products matching your request."
        else:
            text = "I couldn't find any products matching your request."
        return StructuredAnswer(reasoning=REASONING, items=matched, text=text)

    failed = next((result for result in results if not result.ok), None)
    if failed is not None:
        return StructuredAnswer(reasoning=REASONING, text=f"I couldn't complete your request: {failed.error}")
    return StructuredAnswer(reasoning=REASONING, text="I couldn't find anything to answer that request.")
