from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger("shopagent.trace")


class Phase(str, Enum):
    IDLE = "idle"
    PLANNING = "planning"
    EXECUTING = "executing"
    NARRATING = "narrating"


@dataclass
class Trace:
    query: str
    session_id: str | None = None
    correlation_id: str | None = None
    phase: Phase = Phase.IDLE
    phases: list[str] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)
    started_at: float = field(default_factory=time.perf_counter)

    def enter(self, phase: Phase) -> None:
        self.phase = phase
        self.phases.append(phase.value)
        self.emit("cycle_phase", {"phase": phase.value})

    def emit(self, name: str, payload: dict[str, Any]) -> None:
        enriched_payload = dict(payload)
        if self.session_id:
            enriched_payload.setdefault("session_id", self.session_id)
        if self.correlation_id:
            enriched_payload.setdefault("correlation_id", self.correlation_id)
        enriched_payload.setdefault("elapsed_ms", int((time.perf_counter() - self.started_at) * 1000))
        self.events.append({"event": name, "payload": enriched_payload})
        logger.info(name, extra={"extra_fields": enriched_payload})
