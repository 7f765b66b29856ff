"""
Session context shared by the auth client and the request façade.

A SeedContext bundles the token storage, the HTTP client and the host
resolver of one seeding session. Functions that accept a `context` argument
fall back to a process-wide default, so simple scripts never deal with it,
while tests and multi-platform runs can inject their own.

Example:
    >>> from apicseed import SeedContext, sign_in, send_manager
    >>> ctx = SeedContext.create(http_client=MyHttpClient())
    >>> sign_in("manager", "user", "pass", context=ctx)
    >>> send_manager("/api/me", context=ctx)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from apicseed._hosts import HostResolver
from apicseed._http import HttpClient, default_http_client
from apicseed._storage import Storage


@dataclass(frozen=True)
class SeedContext:
    """
    Injected dependencies of a seeding session.

    Attributes:
        storage: Token and consumer context storage.
        http_client: Client used for every request of the session.
        host_resolver: Resolver holding the session's host cache.
    """

    storage: Storage
    http_client: HttpClient
    host_resolver: HostResolver

    @classmethod
    def create(
        cls,
        http_client: HttpClient | None = None,
        storage: Storage | None = None,
    ) -> SeedContext:
        """Build a context whose resolver probes through the same HTTP client."""
        client = http_client or default_http_client()
        return cls(
            storage=storage or Storage(),
            http_client=client,
            host_resolver=HostResolver(http_client=client),
        )


_default_context: SeedContext | None = None
_default_context_lock = threading.Lock()


def get_default_context() -> SeedContext:
    """Return the process-wide context, creating it on first use."""
    global _default_context
    with _default_context_lock:
        if _default_context is None:
            _default_context = SeedContext.create()
        return _default_context


def set_default_context(context: SeedContext | None) -> None:
    """Replace the process-wide context (None recreates it on next use)."""
    global _default_context
    with _default_context_lock:
        _default_context = context


def reset_default_context() -> None:
    """Drop stored tokens and cached hosts of the process-wide context."""
    set_default_context(None)


def resolve_context(context: SeedContext | None) -> SeedContext:
    """Return `context`, or the process-wide context when None."""
    return context if context is not None else get_default_context()
