from typing import Any, Dict, Optional, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def set(self, key: str, value: Dict[str, Any], ttl_seconds: Optional[int] = None) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def compare_and_delete(self, key: str, expected: Dict[str, Any]) -> bool:
        """Remove ``key`` only if its current value equals ``expected``."""
        ...

    def purge_expired(self) -> int:
        ...
