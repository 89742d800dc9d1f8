from __future__ import annotations

import json
import re

from pydantic import ValidationError as PydanticValidationError

from shopagent.core.errors import PlanParseError
from shopagent.core.models.chat import ChatMessage
from shopagent.core.models.llm_provider import ShopAgentLLM
from shopagent.core.models.prompts import planning_prompt

from .fallback import fallback_plan
from .schemas import ActionPlan

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


def extract_fenced_json(text: str) -> str | None:
    match = _FENCED_JSON.search(text or "")
    return match.group(1) if match else None


def parse_plan(text: str) -> ActionPlan:
    block = extract_fenced_json(text)
    if block is None:
        raise PlanParseError("Could not parse action plan from LLM response")
    try:
        raw = json.loads(block)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Action plan is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, dict) or not isinstance(raw.get("actions", []), list):
        raise PlanParseError("Action plan must be an object with an actions list")
    try:
        return ActionPlan.model_validate(raw)
    except PydanticValidationError as exc:
        raise PlanParseError("Action plan does not match the expected shape") from exc


class Planner:
    def __init__(self, llm: ShopAgentLLM) -> None:
        self.llm = llm

    async def plan(self, history: list[ChatMessage], query: str, available_actions: list[str]) -> ActionPlan:
        if not self.llm.enabled:
            return fallback_plan(query)
        output = await self.llm.complete(
            [*history, ChatMessage.system(planning_prompt(available_actions))],
            mode="plan",
        )
        return parse_plan(output)
