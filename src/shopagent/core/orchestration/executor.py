from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from shopagent.core.errors import ShopAgentError

from .action_client import ActionClient
from .schemas import ActionPlan, ActionResult

logger = logging.getLogger("shopagent.executor")


class Executor:
    def __init__(self, actions: ActionClient) -> None:
        self.actions = actions

    async def iter_execute(self, plan: ActionPlan) -> AsyncIterator[ActionResult]:
        # plan order, one action at a time
        for step in plan.actions:
            try:
                result = await self.actions.execute(step.action, step.payload)
            except ShopAgentError as exc:
                logger.info("plan_action_failed", extra={"extra_fields": {"action": step.action, "code": exc.code}})
                yield ActionResult(action=step.action, error=exc.message)
                continue
            except Exception as exc:
                logger.exception("plan_action_crashed", extra={"extra_fields": {"action": step.action}})
                yield ActionResult(action=step.action, error=str(exc) or exc.__class__.__name__)
                continue
            yield ActionResult(action=step.action, result=result)

    async def execute(self, plan: ActionPlan) -> list[ActionResult]:
        return [result async for result in self.iter_execute(plan)]
