import copy
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ...application.ports.kv_store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store whose entries may carry an eviction deadline.

    Values are deep-copied on the way in and out so callers never hold a
    reference into the store. Expired entries are invisible to ``get`` and
    dropped lazily; ``purge_expired`` sweeps all of them at once.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: Dict[str, Tuple[Dict[str, Any], Optional[float]]] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._store)

    def _live(self, key: str) -> Optional[Dict[str, Any]]:
        rec = self._store.get(key)
        if rec is None:
            return None
        value, deadline = rec
        if deadline is not None and deadline <= self._clock():
            del self._store[key]
            return None
        return value

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._live(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any], ttl_seconds: Optional[int] = None) -> None:
        deadline = self._clock() + ttl_seconds if ttl_seconds is not None else None
        self._store[key] = (copy.deepcopy(value), deadline)

    def delete(self, key: str) -> bool:
        if self._live(key) is None:
            return False
        del self._store[key]
        return True

    def compare_and_delete(self, key: str, expected: Dict[str, Any]) -> bool:
        value = self._live(key)
        if value is None or value != expected:
            return False
        del self._store[key]
        return True

    def purge_expired(self) -> int:
        now = self._clock()
        # prune
        expired = [k for k, (_, deadline) in self._store.items() if deadline is not None and deadline <= now]
        for key in expired:
            del self._store[key]
        return len(expired)
