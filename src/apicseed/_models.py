"""
Data models shared by the auth client and the request façade.

- App: The three role-scoped applications of the platform.
- ApiResult: Uniform outcome of an authenticated request.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from apicseed._config import ConfigurationError
from apicseed._http import HttpErrorDetail

CONSUMER_CONTEXT_HEADER = "X-IBM-Consumer-Context"


class App(enum.StrEnum):
    """
    Role-scoped application of the platform, each with its own auth domain.

    Attributes:
        ADMIN: Cloud administration app.
        MANAGER: API provider (manager) app.
        CONSUMER: Developer portal consumer app.
    """

    ADMIN = "admin"
    MANAGER = "manager"
    CONSUMER = "consumer"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, app: str | App) -> App:
        """
        Convert a role name to an App.

        Raises:
            ConfigurationError: If app is not one of admin, manager, consumer.
        """
        try:
            return cls(app)
        except ValueError as e:
            valid = ", ".join(a.value for a in cls)
            raise ConfigurationError(f"app must be one of [{valid}], got {app!r}") from e

    @property
    def idp_scope(self) -> str:
        """Scope segment used in identity provider endpoints."""
        return "provider" if self is App.MANAGER else self.value

    @property
    def api_root(self) -> str:
        """Root path of the app's REST API."""
        return "/consumer-api" if self is App.CONSUMER else "/api"


def consumer_context(provider_org: str, catalog: str) -> str:
    """Value of the consumer context header: `<providerOrg>.<catalog>`."""
    return f"{provider_org}.{catalog}"


@dataclass(frozen=True)
class ApiResult:
    """
    Outcome of an authenticated request sent through the façade.

    Attributes:
        status: HTTP status of the last response (None if every attempt raised).
        body: Parsed JSON body, if any.
        error: Diagnostic for HTTP 4xx or non-JSON bodies.
        retry_errors: Exceptions of every attempt when all of them failed.
    """

    status: int | None = None
    body: Any = None
    error: HttpErrorDetail | None = None
    retry_errors: tuple[Exception, ...] = ()

    @property
    def ok(self) -> bool:
        """True when neither an application error nor retry exhaustion occurred."""
        return self.error is None and not self.retry_errors
