from __future__ import annotations

import json
from typing import Any

from shopagent.core.protocol.actions import VOID_PAYLOAD_ACTIONS, ActionType

from .chat import ChatMessage

SYSTEM_PROMPT = """You are an AI shopping assistant for an e-commerce store.
Your task is to help users find and interact with products by calling store actions.

Here's how you should respond:
1. Analyze the user's request
2. Decide which store actions to use
3. Make the appropriate action calls
4. Process the data and respond to the user

NEVER make up information. Only use data from actual action results.
If you're unsure about something, ask for clarification.

IMPORTANT: When a user asks about available categories, ALWAYS use the getAvailableOptions action and then list the specific product categories by name from the response."""


def _void_action_names() -> list[str]:
    return [action.value for action in ActionType if action in VOID_PAYLOAD_ACTIONS]


def capabilities_prompt(capabilities: dict[str, Any]) -> str:
    actions = ", ".join(str(item) for item in capabilities.get("availableActions") or [])
    categories = ", ".join(str(item) for item in capabilities.get("productCategories") or [])
    void_lines = "\n".join(f"- {name}" for name in _void_action_names())
    return (
        "You have access to the following store capabilities:\n\n"
        f"Available actions: {actions}\n"
        f"Product categories: {categories}\n\n"
        "Here are examples of how you can use these actions:\n"
        "1. To get all products: Use getProducts with an empty payload\n"
        "2. To get product details: Use getProduct with a product id\n"
        "3. To add to cart: Use addToCart with productId and quantity\n"
        "4. To view cart: Use getCart with an empty payload\n"
        "5. To get store statistics: Use getStoreStats with an empty payload\n"
        "6. To get available options and categories: Use getAvailableOptions with an empty payload\n\n"
        "The following actions require NO PAYLOAD (use an empty object):\n"
        f"{void_lines}\n\n"
        "When responding about categories, always explicitly list each category name from productCategories."
    )


def seed_messages(capabilities: dict[str, Any] | None) -> list[ChatMessage]:
    messages = [ChatMessage.system(SYSTEM_PROMPT)]
    if capabilities:
        messages.append(ChatMessage.system(capabilities_prompt(capabilities)))
    return messages


def planning_prompt(available_actions: list[str]) -> str:
    schema = {
        "thoughts": "Your reasoning about what the user is asking for and how to fulfill it",
        "actions": [{"action": "ONE_OF_THE_AVAILABLE_ACTIONS", "payload": {}}],
    }
    void_lines = "\n".join(f"- {name} (use empty object {{}})" for name in _void_action_names())
    return (
        "Based on the user's request, decide which store actions to execute.\n"
        "Reply with a JSON object that describes the actions you want to take, "
        "inside a ```json fenced block:\n\n"
        f"```json\n{json.dumps(schema, indent=2)}\n```\n\n"
        "Some actions require NO PAYLOAD. For these actions you MUST use an EMPTY OBJECT {} as the payload:\n"
        f"{void_lines}\n\n"
        f"Available actions: {', '.join(available_actions) or 'Not yet initialized'}"
    )


def narration_prompt(action_results: list[dict[str, Any]]) -> str:
    return (
        "Here are the results of the actions you planned:\n"
        f"{json.dumps(action_results, indent=2, ensure_ascii=False)}\n\n"
        "Based on these results, provide a helpful response to the user's request.\n"
        "Focus on answering their question directly and providing the information they asked for.\n"
        "If you had to find something specific (like the cheapest item), highlight that in your response.\n\n"
        "If the user asked about available categories, list ALL the specific category names from the results.\n\n"
        "If the user asked about their cart, include the items in the cart with their quantity, for example: "
        '"Your cart contains 3 items: Item 1 (qty: 2), Item 2 (qty: 1)".\n\n'
        "Format your response as a JSON object with the following structure:\n"
        "{\n"
        '  "reasoning": "how you interpreted the request (not shown to the user)",\n'
        '  "items": [],\n'
        '  "text": "your answer to the user"\n'
        "}\n"
        "items holds the product objects relevant to the query; leave it empty if none are."
    )
