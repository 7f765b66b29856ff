"""
Utility functions for the apicseed toolkit.

These helpers are internal and may change without notice.
"""

from __future__ import annotations

import re
import time
from collections.abc import Mapping
from typing import Any

REDACTED = "...hidden"

_SECRET_BODY_FIELDS = ("password", "client_secret", "apikey")


def sleep(seconds: float) -> None:
    """
    Block the current thread for the given number of seconds.

    Kept as a module-level function so retry pauses can be patched in tests.
    """
    assert seconds is not None, "Sleep duration can not be None."
    assert seconds >= 0, "Sleep duration must be >= 0."
    time.sleep(seconds)


def sanitize_url(url: str) -> str:
    """
    Collapse duplicate slashes in the path and strip the trailing slash.

    Example:
        >>> sanitize_url("https://host//api///orgs/")
        'https://host/api/orgs'
    """
    assert url, "URL can not be empty."
    collapsed = re.sub(r"([^:]/)/+", r"\1", url)
    return collapsed[:-1] if collapsed.endswith("/") else collapsed


def clean_string(value: str | None) -> str:
    """
    Flatten a response body for diagnostics: drop line breaks and squeeze spaces.

    Example:
        >>> clean_string('{\\n  "message":   "boom"\\n}')
        '{ "message": "boom" }'
    """
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def redact_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a copy of the headers with the Authorization value hidden."""
    redacted = dict(headers or {})
    for name in redacted:
        if name.lower() == "authorization":
            redacted[name] = REDACTED
    return redacted


def redact_body(body: Any) -> Any:
    """Return the body with sign-in secrets hidden. Non-dict bodies are returned as is."""
    if not isinstance(body, Mapping):
        return body
    return {k: (REDACTED if k in _SECRET_BODY_FIELDS and v else v) for k, v in body.items()}


def get_path(data: Any, path: str) -> Any:
    """
    Read a dotted path (``"a.b.0.c"``) from nested dicts and lists.

    Returns None when any segment is missing.

    Example:
        >>> get_path({"org": {"urls": ["u1", "u2"]}}, "org.urls.1")
        'u2'
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, list | tuple) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return None
        if current is None:
            return None
    return current
