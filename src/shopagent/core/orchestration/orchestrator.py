from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from shopagent.core.errors import InternalError, ShopAgentError
from shopagent.core.logging.context import get_log_context
from shopagent.core.models.chat import ChatMessage
from shopagent.core.models.llm_provider import ShopAgentLLM
from shopagent.core.models.prompts import seed_messages
from shopagent.core.observability.trace import Phase, Trace
from shopagent.core.protocol.actions import ActionType

from .action_client import ActionClient
from .executor import Executor
from .history import ConversationStore
from .narrator import Narrator
from .planner import Planner
from .schemas import QueryResult, StreamEvent

DEFAULT_SESSION_ID = "default"


class Orchestrator:
    """Drives one plan, execute, narrate cycle per user query.

    ``run`` returns the finished result; ``stream`` yields the same cycle as
    ``thoughts``/``action``/``error`` events followed by ``complete``, or a
    single terminal ``error`` event when the cycle itself fails.
    """

    def __init__(
        self,
        actions: ActionClient,
        llm: ShopAgentLLM | None = None,
        conversations: ConversationStore | None = None,
    ) -> None:
        self.actions = actions
        self.llm = llm or ShopAgentLLM()
        self.conversations = conversations or ConversationStore()
        self.planner = Planner(self.llm)
        self.executor = Executor(actions)
        self.narrator = Narrator(self.llm, actions)
        self.capabilities: dict[str, Any] | None = None
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self.logger = logging.getLogger("shopagent.orchestrator")

    @property
    def ready(self) -> bool:
        return self._initialized

    @property
    def capabilities_loaded(self) -> bool:
        return self.capabilities is not None

    async def initialize(self) -> bool:
        if self.capabilities is not None:
            return True
        async with self._init_lock:
            if self.capabilities is None:
                try:
                    self.capabilities = await self.actions.execute(ActionType.GET_AVAILABLE_OPTIONS)
                except ShopAgentError as exc:
                    self.logger.warning("capability_discovery_failed", extra={"extra_fields": {"reason": exc.message}})
                else:
                    self.logger.info(
                        "capability_discovery_complete",
                        extra={"extra_fields": {"categories": len(self.capabilities.get("productCategories") or [])}},
                    )
            self._initialized = True
        return self.capabilities is not None

    def available_actions(self) -> list[str]:
        if self.capabilities:
            return [str(item) for item in self.capabilities.get("availableActions") or []]
        return [action.value for action in ActionType]

    async def _open_session(self, session_id: str) -> None:
        self.conversations.evict_idle()
        if self.conversations.has(session_id):
            return
        if not self.capabilities_loaded:
            await self.initialize()
        self.conversations.get_or_create(session_id, lambda: seed_messages(self.capabilities))

    async def _cycle(self, query: str, session_id: str) -> AsyncIterator[StreamEvent | QueryResult]:
        trace = Trace(query=query, session_id=session_id, correlation_id=get_log_context().get("correlation_id"))
        await self._open_session(session_id)
        self.conversations.append(session_id, ChatMessage.user(query))

        trace.enter(Phase.PLANNING)
        plan = await self.planner.plan(self.conversations.messages(session_id), query, self.available_actions())
        trace.emit("plan_ready", {"actions": [step.action for step in plan.actions]})
        if plan.thoughts:
            yield StreamEvent("thoughts", {"thoughts": plan.thoughts})

        trace.enter(Phase.EXECUTING)
        results = []
        async for result in self.executor.iter_execute(plan):
            results.append(result)
            yield StreamEvent("action" if result.ok else "error", result.to_wire())

        trace.enter(Phase.NARRATING)
        answer = await self.narrator.narrate(self.conversations.messages(session_id), query, results)
        self.conversations.append(session_id, ChatMessage.assistant(answer.text))

        trace.enter(Phase.IDLE)
        yield QueryResult(query=query, plan=plan, actions=results, structured_response=answer)

    async def run(self, query: str, session_id: str = DEFAULT_SESSION_ID) -> QueryResult:
        result: QueryResult | None = None
        async for item in self._cycle(query, session_id):
            if isinstance(item, QueryResult):
                result = item
        if result is None:
            raise InternalError("Query cycle ended without a result")
        return result

    async def stream(self, query: str, session_id: str = DEFAULT_SESSION_ID) -> AsyncIterator[StreamEvent]:
        try:
            async for item in self._cycle(query, session_id):
                if isinstance(item, QueryResult):
                    yield StreamEvent("complete", item.to_wire())
                else:
                    yield item
        except ShopAgentError as exc:
            self.logger.warning("stream_failed", extra={"extra_fields": {"code": exc.code, "reason": exc.message}})
            yield StreamEvent("error", {"error": exc.message})
        except Exception as exc:
            self.logger.exception("stream_failed")
            yield StreamEvent("error", {"error": str(exc) or "Unknown error in streaming process"})
