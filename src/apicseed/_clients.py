"""
Authenticated request façade over the three platform apps.

Every request goes through the same pipeline: resolve the app host, attach
the stored bearer token (and consumer context), then run `send_json` under
`retry` with the configured pause. Outcomes are normalized into an ApiResult.

The role helpers (`send_admin`, `send_manager`, `send_consumer`) reduce that
result to what seeding scripts need: the JSON body, or False when the
request failed.

Example:
    >>> from apicseed import sign_in, send_manager
    >>> sign_in("manager", "owner", "secret")
    >>> orgs = send_manager("/api/orgs")
    >>> if orgs is False:
    ...     print("request failed")
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from apicseed._config import SEED, ConfigurationError
from apicseed._context import SeedContext, resolve_context
from apicseed._http import JsonRequest, JsonResponse, ServerError, send_json
from apicseed._models import CONSUMER_CONTEXT_HEADER, ApiResult, App, consumer_context
from apicseed._retry import retry
from apicseed._storage import consumer_context_key, token_key

logger = logging.getLogger(__name__)


class RequestFailedError(Exception):
    """
    Raised in strict mode when a request ends with an error or exhausts its retries.

    Attributes:
        result: The failed ApiResult.
    """

    def __init__(self, message: str, result: ApiResult):
        super().__init__(message)
        self.message = message
        self.result = result


def _auth_headers(app: App, ctx: SeedContext, skip_auth: bool) -> dict[str, str]:
    headers: dict[str, str] = {}
    if not skip_auth:
        token = ctx.storage.get(token_key(app))
        if not token:
            raise ConfigurationError(
                f"You must sign in before making an API request to {app} app"
                " or use skip_auth=True to send request without signing in"
            )
        headers["Authorization"] = f"Bearer {token}"

    stored_context = ctx.storage.get(consumer_context_key(app))
    if app is App.CONSUMER and stored_context:
        headers[CONSUMER_CONTEXT_HEADER] = stored_context
    return headers


def _to_result(outcome_result: JsonResponse | None, retry_errors: tuple[Exception, ...]) -> ApiResult:
    if outcome_result is not None:
        return ApiResult(
            status=outcome_result.status,
            body=outcome_result.json_body,
            error=outcome_result.error,
        )
    last = retry_errors[-1]
    return ApiResult(
        status=last.status if isinstance(last, ServerError) else None,
        retry_errors=retry_errors,
    )


def _send(
    app: App,
    url: str,
    method: str | None,
    body: Any,
    headers: dict[str, str] | None,
    skip_auth: bool,
    retries: int | None,
    log_errors: bool,
    ctx: SeedContext,
) -> ApiResult:
    request_headers = {**_auth_headers(app, ctx, skip_auth), **(headers or {})}
    max_retries = retries if retries is not None else SEED.config.options.retries
    assert max_retries >= 0, "retries must be >= 0."

    request = JsonRequest(url=url, method=method, headers=request_headers, body=body)
    outcome = retry(
        max_retries,
        send_json,
        SEED.config.http.retry_pause,
        request,
        http_client=ctx.http_client,
    )
    result = _to_result(outcome.result, outcome.retry_errors)

    if not result.ok and log_errors:
        message = f"{app} request failed: {request.method or SEED.config.http.default_method} {url}"
        if SEED.config.options.strict:
            raise RequestFailedError(message, result)
        retry_errors = [repr(e) for e in result.retry_errors]
        logger.error(f"{message} | retry_errors={retry_errors} error={result.error}")
    return result


def send_request(
    app: App | str,
    endpoint: str,
    method: str | None = None,
    body: Any = None,
    headers: dict[str, str] | None = None,
    *,
    skip_auth: bool = False,
    retries: int | None = None,
    log_errors: bool = True,
    context: SeedContext | None = None,
) -> ApiResult:
    """
    Send a request to an endpoint of an app with the stored bearer token.

    Args:
        app: Target app (admin, manager or consumer).
        endpoint: Path appended to the app host (e.g. "/api/orgs").
        method: HTTP method. Defaults to the `http.default_method` config.
        body: Request body, serialized to JSON.
        headers: Extra headers, merged over the auth headers.
        skip_auth: Send without a bearer token (sign-in, identity providers).
        retries: Retries after the first attempt. Defaults to the `retries` option.
        log_errors: Log (or, in strict mode, raise) failed requests.
        context: Session context. Defaults to the process-wide context.

    Returns:
        ApiResult with status, parsed body, error or retry errors.

    Raises:
        ConfigurationError: If app is invalid, no host can be resolved, or the
            app was not signed into and skip_auth is False.
        HostUnreachableError: If the platform does not answer the probe.
        RequestFailedError: In strict mode, if the request failed.
    """
    assert endpoint, "Endpoint can not be empty."
    role = App.parse(app)
    ctx = resolve_context(context)

    host = ctx.host_resolver.get(role)
    if not host:
        raise ConfigurationError(f"API host cannot be resolved for {role} app")

    return _send(role, f"{host}{endpoint}", method, body, headers, skip_auth, retries, log_errors, ctx)


def send_request_to_url(
    url: str,
    method: str | None = None,
    app: App | str = App.MANAGER,
    body: Any = None,
    headers: dict[str, str] | None = None,
    *,
    skip_auth: bool = False,
    retries: int | None = None,
    log_errors: bool = True,
    context: SeedContext | None = None,
) -> ApiResult:
    """
    Send a request to an absolute URL with the bearer token of an app.

    Used with the `url` fields the platform returns in its payloads.
    Same semantics as send_request(), without host resolution.
    """
    assert url, "URL can not be empty."
    role = App.parse(app)
    return _send(role, url, method, body, headers, skip_auth, retries, log_errors, resolve_context(context))


def send_admin(
    endpoint: str,
    method: str | None = None,
    body: Any = None,
    headers: dict[str, str] | None = None,
    retries: int | None = None,
    *,
    context: SeedContext | None = None,
) -> Any | Literal[False]:
    """Send a request to the admin app; return the JSON body, or False on failure."""
    result = send_request(App.ADMIN, endpoint, method, body, headers, retries=retries, context=context)
    return result.body if result.ok else False


def send_manager(
    endpoint: str,
    method: str | None = None,
    body: Any = None,
    headers: dict[str, str] | None = None,
    retries: int | None = None,
    log_errors: bool = True,
    *,
    context: SeedContext | None = None,
) -> Any | Literal[False]:
    """
    Send a request to the manager app; return the JSON body, or False on failure.

    Pass `log_errors=False` for lookups where a 404 is an expected answer.
    """
    result = send_request(
        App.MANAGER, endpoint, method, body, headers,
        retries=retries, log_errors=log_errors, context=context,
    )
    return result.body if result.ok else False


def send_consumer(
    endpoint: str,
    method: str | None,
    provider_org: str,
    catalog: str,
    body: Any = None,
    headers: dict[str, str] | None = None,
    retries: int | None = None,
    *,
    context: SeedContext | None = None,
) -> Any | Literal[False]:
    """
    Send a request to the consumer app of a provider org catalog.

    The `X-IBM-Consumer-Context` header is set to `<provider_org>.<catalog>`.

    Returns:
        The JSON body, or False on failure.
    """
    assert provider_org, "provider_org can not be empty."
    assert catalog, "catalog can not be empty."

    consumer_headers = {**(headers or {}), CONSUMER_CONTEXT_HEADER: consumer_context(provider_org, catalog)}
    result = send_request(App.CONSUMER, endpoint, method, body, consumer_headers, retries=retries, context=context)
    return result.body if result.ok else False
