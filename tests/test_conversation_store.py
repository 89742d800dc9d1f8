from __future__ import annotations

from shopagent.core.models.chat import ChatMessage
from shopagent.core.orchestration.history import ConversationStore
from shopagent.core.state.store import InMemoryStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_session_is_seeded_once() -> None:
    store = ConversationStore()
    calls = []

    def seed():
        calls.append(1)
        return [ChatMessage.system("hi")]

    store.get_or_create("s", seed)
    store.append("s", ChatMessage.user("question"))
    store.get_or_create("s", seed)

    assert len(calls) == 1
    assert [message.role for message in store.messages("s")] == ["system", "user"]


def test_messages_returns_a_copy() -> None:
    store = ConversationStore()
    store.get_or_create("s", lambda: [ChatMessage.system("hi")])

    store.messages("s").append(ChatMessage.user("sneaky"))

    assert len(store.messages("s")) == 1


def test_idle_sessions_are_evicted_after_ttl() -> None:
    clock = FakeClock()
    store = ConversationStore(ttl_s=60, store=InMemoryStore(clock=clock))
    store.get_or_create("old", lambda: [])
    clock.now += 30
    store.get_or_create("fresh", lambda: [])
    clock.now += 45

    assert store.evict_idle() == 1
    assert store.has("fresh") is True
    assert store.has("old") is False


def test_zero_ttl_never_evicts() -> None:
    clock = FakeClock()
    store = ConversationStore(ttl_s=0, store=InMemoryStore(clock=clock))
    store.get_or_create("s", lambda: [])
    clock.now += 10_000

    assert store.evict_idle() == 0
    assert store.has("s") is True
