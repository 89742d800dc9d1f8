from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from typing import Generic, Protocol, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class KeyedStore(Protocol[K, V]):
    def get(self, key: K) -> V | None: ...

    def set(self, key: K, value: V) -> V: ...

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V: ...

    def pop(self, key: K) -> V | None: ...

    def values(self) -> Iterator[V]: ...

    def evict_older_than(self, max_idle_s: float) -> int: ...


class InMemoryStore(Generic[K, V]):
    """Process-lifetime map with last-touched timestamps for optional idle eviction."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[K, tuple[float, V]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: K) -> V | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value = entry[1]
        self._data[key] = (self._clock(), value)
        return value

    def set(self, key: K, value: V) -> V:
        self._data[key] = (self._clock(), value)
        return value

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        existing = self.get(key)
        if existing is not None:
            return existing
        return self.set(key, factory())

    def pop(self, key: K) -> V | None:
        entry = self._data.pop(key, None)
        return entry[1] if entry is not None else None

    def values(self) -> Iterator[V]:
        return iter([value for _, value in self._data.values()])

    def evict_older_than(self, max_idle_s: float) -> int:
        if max_idle_s <= 0:
            return 0
        cutoff = self._clock() - max_idle_s
        stale = [key for key, (touched, _) in self._data.items() if touched < cutoff]
        for key in stale:
            self._data.pop(key, None)
        return len(stale)
