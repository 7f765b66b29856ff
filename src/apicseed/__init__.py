"""
apicseed: data seeding and synthetic traffic toolkit for API Connect platforms.

Signs into the admin, manager (provider) and consumer apps of a platform
instance and issues REST calls against them, concurrently and with retries.

Quick Start:
    >>> from apicseed import SEED, sign_in, send_manager, concurrent
    >>> SEED.configure(
    ...     hosts={"cluster": "c1", "namespace": "ns1"},
    ...     auth={"client_id": "x", "client_secret": "y"},
    ... )
    >>> sign_in("manager", "owner", "password")
    >>> me = send_manager("/api/me")
    >>> results = concurrent(send_manager, lambda i: [f"/api/orgs/acme/apis", "POST", {"name": f"api-{i}"}], 50)

Global Configuration:
    >>> from apicseed import SEED
    >>>
    >>> # Pre-loaded with defaults + env vars (API_HOST, APICSEED_*)
    >>> limit = SEED.config.http.concurrency_limit
    >>>
    >>> # Flat option accessor used by seeding scripts
    >>> SEED.set_option("silentRetry")
    >>> SEED.get_option("retries")
    1

Requests:
    - send_admin / send_manager / send_consumer: Role helpers returning the JSON body or False.
    - send_request: Authenticated request returning an ApiResult.
    - send_request_to_url: Same, for absolute URLs returned by the platform.
    - api_get / api_find / get_role_urls: Lookup helpers.

Sessions:
    - sign_in / sign_out / set_auth_token: Bearer token management per app.
    - get_id_providers / get_default_id_provider: Identity provider listing.
    - SeedContext: Storage, HTTP client and host resolver of a session.

Hosts:
    - get_host: Resolve a host kind (or "all") of the platform.
    - HostKind: Endpoint kinds.
    - HostResolver: Memoizing resolver with reachability probing.

Execution:
    - concurrent: Bounded-concurrency runner (waves).
    - retry / Retrying / RetryOutcome: Fixed-pause retry engine.

Transport:
    - send_json / send: JSON and raw transport functions.
    - HttpClient / RequestsHttpClient: Swappable HTTP client.

Configuration and logging:
    - SEED: Global configuration singleton.
    - configure_logging: Install console and file handlers.
"""

from importlib.metadata import version as _get_version

__version__ = _get_version("apicseed")

from apicseed._auth import (
    AuthenticationError,
    get_default_id_provider,
    get_id_providers,
    set_auth_token,
    sign_in,
    sign_out,
)
from apicseed._clients import (
    RequestFailedError,
    send_admin,
    send_consumer,
    send_manager,
    send_request,
    send_request_to_url,
)
from apicseed._common import api_find, api_get, get_role_urls
from apicseed._concurrent import concurrent
from apicseed._config import (
    SEED,
    AuthConfig,
    ConfigEntry,
    ConfigEnvVarError,
    ConfigurationError,
    ConfigValidationError,
    HostsConfig,
    HttpConfig,
    OptionsConfig,
    SeedConfig,
)
from apicseed._context import SeedContext, get_default_context, reset_default_context
from apicseed._hosts import HostKind, HostResolver, HostUnreachableError, get_host
from apicseed._http import (
    HttpClient,
    HttpErrorDetail,
    JsonRequest,
    JsonResponse,
    RawResponse,
    RequestsHttpClient,
    ServerError,
    TransportError,
    send,
    send_json,
)
from apicseed._logging import VERBOSE, configure_logging
from apicseed._models import ApiResult, App
from apicseed._retry import MaxRetriesExceededError, Retrying, RetryOutcome, retry
from apicseed._storage import Storage

__all__ = [
    "__version__",
    # Requests
    "send_admin",
    "send_manager",
    "send_consumer",
    "send_request",
    "send_request_to_url",
    "api_get",
    "api_find",
    "get_role_urls",
    "ApiResult",
    "App",
    "RequestFailedError",
    # Sessions
    "sign_in",
    "sign_out",
    "set_auth_token",
    "get_id_providers",
    "get_default_id_provider",
    "AuthenticationError",
    "SeedContext",
    "get_default_context",
    "reset_default_context",
    "Storage",
    # Hosts
    "get_host",
    "HostKind",
    "HostResolver",
    "HostUnreachableError",
    # Execution
    "concurrent",
    "retry",
    "Retrying",
    "RetryOutcome",
    "MaxRetriesExceededError",
    # Transport
    "send_json",
    "send",
    "JsonRequest",
    "JsonResponse",
    "RawResponse",
    "HttpErrorDetail",
    "HttpClient",
    "RequestsHttpClient",
    "TransportError",
    "ServerError",
    # Configuration
    "SEED",
    "SeedConfig",
    "OptionsConfig",
    "HostsConfig",
    "HttpConfig",
    "AuthConfig",
    "ConfigEntry",
    "ConfigurationError",
    "ConfigEnvVarError",
    "ConfigValidationError",
    # Logging
    "configure_logging",
    "VERBOSE",
]
