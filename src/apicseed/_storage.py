"""
In-process key-value storage for session tokens.

Nothing is persisted to disk: a Storage lives as long as its SeedContext.
"""

from __future__ import annotations

import json
import threading
from typing import Any


def token_key(app: str) -> str:
    """Storage key of the bearer token for an app."""
    return f"token:{app}"


def consumer_context_key(app: str) -> str:
    """Storage key of the consumer context (`<providerOrg>.<catalog>`) for an app."""
    return f"consumer-context:{app}"


class Storage:
    """
    Thread-safe key-value cell.

    Written during sign-in/out, read by every authenticated request.

    Example:
        >>> storage = Storage()
        >>> storage.set("token:admin", "eyJ...")
        >>> storage.get("token:admin")
        'eyJ...'
        >>> storage.remove("token:admin")
        >>> storage.get("token:admin") is None
        True
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the value stored under key, or None."""
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        assert key, "Storage key can not be empty."
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        """Remove key if present."""
        with self._lock:
            self._values.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    def __str__(self) -> str:
        with self._lock:
            return json.dumps(self._values, default=str)
