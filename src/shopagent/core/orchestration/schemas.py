from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlannedAction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # kept as the raw name so an unknown action fails on its own, not the whole plan
    action: str
    payload: Any = None


class ActionPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    thoughts: str = ""
    actions: list[PlannedAction] = Field(default_factory=list)

    @field_validator("thoughts", mode="before")
    @classmethod
    def _null_thoughts(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ActionResult(BaseModel):
    action: str
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_wire(self) -> dict[str, Any]:
        if self.error is not None:
            return {"action": self.action, "error": self.error}
        return {"action": self.action, "result": self.result}


class StructuredAnswer(BaseModel):
    reasoning: str = ""
    items: list[Any] = Field(default_factory=list)
    text: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class QueryResult(BaseModel):
    query: str
    plan: ActionPlan
    actions: list[ActionResult] = Field(default_factory=list)
    structured_response: StructuredAnswer

    @property
    def response(self) -> str:
        return self.structured_response.text

    def to_wire(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "plan": self.plan.to_wire(),
            "actions": [item.to_wire() for item in self.actions],
            "response": self.response,
            "structuredResponse": self.structured_response.to_wire(),
        }


@dataclass
class StreamEvent:
    event: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_sse(self) -> str:
        return f"event: {self.event}\ndata: {json.dumps(self.data, ensure_ascii=False, default=str)}\n\n"
