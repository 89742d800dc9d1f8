from __future__ import annotations

from collections.abc import Callable

from shopagent.core.models.chat import ChatMessage
from shopagent.core.state.store import InMemoryStore, KeyedStore


class ConversationStore:
    """Per-session chat history; seeded once, then append-only."""

    def __init__(self, ttl_s: float = 0, store: KeyedStore[str, list[ChatMessage]] | None = None) -> None:
        self.ttl_s = ttl_s
        self._sessions: KeyedStore[str, list[ChatMessage]] = store if store is not None else InMemoryStore()

    def has(self, session_id: str) -> bool:
        return self._sessions.get(session_id) is not None

    def get_or_create(self, session_id: str, seed: Callable[[], list[ChatMessage]]) -> list[ChatMessage]:
        return self._sessions.get_or_create(session_id, lambda: list(seed()))

    def append(self, session_id: str, message: ChatMessage) -> None:
        history = self._sessions.get(session_id)
        if history is None:
            history = self._sessions.set(session_id, [])
        history.append(message)

    def messages(self, session_id: str) -> list[ChatMessage]:
        return list(self._sessions.get(session_id) or [])

    def evict_idle(self) -> int:
        return self._sessions.evict_older_than(self.ttl_s)
