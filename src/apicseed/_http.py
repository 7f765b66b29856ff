"""
JSON HTTP transport for the apicseed toolkit.

This module sends a single request and normalizes its outcome:

- status >= 500: raises ServerError (fatal at this layer, retried one level up)
- status 400..499: returns a JsonResponse with `error` populated
- status < 400: returns a JsonResponse with `body` and `json_body`
- no response at all (DNS, connection refused, timeout): raises TransportError

Available implementations of the underlying client:
    - HttpClient: Abstract base class, swap it to mock or instrument transport.
    - RequestsHttpClient: Default implementation backed by `requests`.

Example:
    >>> from apicseed._http import JsonRequest, send_json
    >>> response = send_json(JsonRequest(url="https://manager.host/api/me", headers={"Authorization": "Bearer ..."}))
    >>> if response.error:
    ...     print(response.error.response)
    ... else:
    ...     print(response.json_body)
"""

from __future__ import annotations

import json
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

import requests
import urllib3

from apicseed._logging import VERBOSE
from apicseed._utils import clean_string, redact_body, redact_headers, sanitize_url

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


# =============================================================================
# Exceptions
# =============================================================================


class TransportError(Exception):
    """
    Raised when a request could not be completed.

    Covers failures without any HTTP response (DNS, refused connection,
    timeout) and, through ServerError, HTTP 5xx responses.

    Attributes:
        message: Description of the failure.
        request: The request that failed, with the Authorization header redacted.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        request: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.request = request or {}
        self.cause = cause


class ServerError(TransportError):
    """
    Raised when the server answers with HTTP 5xx.

    Attributes:
        status: The HTTP status code.
        response: The cleaned response body.
    """

    def __init__(self, status: int, request: dict[str, Any], response: str):
        super().__init__(
            f"Server responded with HTTP {status} for {request.get('method')} {request.get('url')}: {response}",
            request=request,
        )
        self.status = status
        self.response = response


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class JsonRequest:
    """
    A JSON request to send.

    Attributes:
        url: Absolute URL of the endpoint.
        method: HTTP method. Defaults to the `http.default_method` config.
        headers: Caller headers, merged over the JSON defaults.
        body: Request body. Non-string bodies are serialized to JSON.
        timeout: Timeout in seconds. Defaults to the `http.request_timeout` config.
    """

    url: str
    method: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        assert self.url, "Request URL can not be empty."
        assert self.timeout is None or self.timeout > 0, "Timeout must be greater than 0."

    def resolved(self) -> JsonRequest:
        """Return a copy with URL sanitized, defaults applied and headers merged."""
        from apicseed._config import SEED

        http_cfg = SEED.config.http
        return replace(
            self,
            url=sanitize_url(self.url),
            method=(self.method or http_cfg.default_method).upper(),
            headers={**DEFAULT_HEADERS, **(self.headers or {})},
            timeout=self.timeout or http_cfg.request_timeout,
        )

    def serialized_body(self) -> str | None:
        if self.body is None:
            return None
        return self.body if isinstance(self.body, str) else json.dumps(self.body)

    def to_diagnostic(self) -> dict[str, Any]:
        """Describe the request for logs and errors, Authorization and secrets redacted."""
        return {
            "url": self.url,
            "method": self.method,
            "headers": redact_headers(self.headers),
            "body": redact_body(self.body),
            "timeout": self.timeout,
        }


@dataclass(frozen=True)
class HttpErrorDetail:
    """
    Diagnostic context of a failed or unparseable response.

    Attributes:
        request: The request, with the Authorization header redacted.
        response: The cleaned response body.
        message: Extra description (e.g. a JSON parse failure).
    """

    request: dict[str, Any]
    response: str
    message: str | None = None


@dataclass(frozen=True)
class RawResponse:
    """Status and raw body of a response, whatever the status."""

    status: int
    body: str


@dataclass(frozen=True)
class JsonResponse:
    """
    Normalized outcome of send_json().

    Attributes:
        status: The HTTP status code.
        body: Raw response body (None if empty).
        json_body: Parsed JSON body (None if empty or not JSON).
        error: Populated for HTTP 4xx and for bodies that are not JSON.
    """

    status: int
    body: str | None = None
    json_body: Any = None
    error: HttpErrorDetail | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Abstract Base Class
# =============================================================================


class HttpClient(ABC):
    """
    Abstract base class for the raw HTTP client.

    Implementations send exactly one request and return the response as is;
    status classification happens in send() and send_json().

    Example:
        >>> class MyHttpClient(HttpClient):
        ...     def request(self, method, url, headers=None, data=None, timeout=180.0):
        ...         return requests.request(method, url, headers=headers, data=data, timeout=timeout)
    """

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | None = None,
        timeout: float = 180.0,
    ) -> requests.Response:
        """
        Execute a single HTTP request.

        Args:
            method: The HTTP method.
            url: The full URL to request.
            headers: Request headers.
            data: Already-serialized request body.
            timeout: Seconds allowed to connect and for each read from the
                socket. It is not a deadline on the whole call.

        Returns:
            The HTTP response, whatever its status.

        Raises:
            requests.RequestException: If no response could be obtained.
        """
        pass


# =============================================================================
# Implementations
# =============================================================================


class RequestsHttpClient(HttpClient):
    """
    HTTP client backed by `requests`.

    The timeout is handed to `requests` unchanged, so it bounds the connect
    step and each socket read separately.

    TLS verification follows the `http.verify_tls` config unless `verify_tls`
    is given explicitly. Lab clusters serve self-signed certificates, so it
    is off by default.

    Args:
        verify_tls: Override for certificate verification.
        session: Optional `requests.Session` to reuse connections.
    """

    def __init__(
        self,
        verify_tls: bool | None = None,
        session: requests.Session | None = None,
    ):
        self._verify_tls = verify_tls
        self._session = session

    def _should_verify(self) -> bool:
        if self._verify_tls is not None:
            return self._verify_tls
        from apicseed._config import SEED
        return SEED.config.http.verify_tls

    @override
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | None = None,
        timeout: float = 180.0,
    ) -> requests.Response:
        assert url, "URL cannot be empty."
        assert method, "Method cannot be empty."
        assert timeout is not None, "Timeout cannot be None."
        assert timeout > 0, "Timeout must be greater than 0."

        verify = self._should_verify()
        if not verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        requester = self._session or requests
        return requester.request(
            method,
            url,
            headers=headers,
            data=data,
            timeout=timeout,
            verify=verify,
        )


_default_client: HttpClient | None = None


def default_http_client() -> HttpClient:
    """Return the process-wide RequestsHttpClient."""
    global _default_client
    if _default_client is None:
        _default_client = RequestsHttpClient()
    return _default_client


# =============================================================================
# Transport Functions
# =============================================================================


def send(
    url: str,
    method: str = "GET",
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
    http_client: HttpClient | None = None,
) -> RawResponse:
    """
    Send a request and return its status and body for any HTTP status.

    Only a missing response is an error. Used by host reachability probes,
    where a 401 is the expected answer.

    Raises:
        TransportError: If no response was received.
    """
    client = http_client or default_http_client()
    request = JsonRequest(url=url, method=method, headers=headers or {}, timeout=timeout).resolved()
    try:
        response = client.request(
            request.method,  # type: ignore[arg-type]
            request.url,
            headers=request.headers,
            timeout=request.timeout,  # type: ignore[arg-type]
        )
    except requests.RequestException as e:
        raise TransportError(
            f"Request failed: {request.method} {request.url}: {e}",
            request=request.to_diagnostic(),
            cause=e,
        ) from e

    logger.log(VERBOSE, f"Request: {request.to_diagnostic()} | Response: status={response.status_code}, body={clean_string(response.text)}")
    return RawResponse(status=response.status_code, body=response.text)


def send_json(
    request: JsonRequest,
    http_client: HttpClient | None = None,
) -> JsonResponse:
    """
    Send a JSON request and classify the outcome by status code.

    Args:
        request: The request to send.
        http_client: Client to use. Defaults to the process-wide RequestsHttpClient.

    Returns:
        JsonResponse; `error` is set for HTTP 4xx and for non-JSON bodies.

    Raises:
        ServerError: If the server answered with HTTP 5xx.
        TransportError: If no response was received.
    """
    assert request is not None, "Request can not be None."

    client = http_client or default_http_client()
    resolved = request.resolved()
    logger.debug(f"Sending JSON request to {resolved.url}")

    try:
        response = client.request(
            resolved.method,  # type: ignore[arg-type]
            resolved.url,
            headers=resolved.headers,
            data=resolved.serialized_body(),
            timeout=resolved.timeout,  # type: ignore[arg-type]
        )
    except requests.RequestException as e:
        diagnostic = resolved.to_diagnostic()
        logger.error(f"Request failed: {diagnostic} | {e}")
        raise TransportError(
            f"Request failed: {resolved.method} {resolved.url}: {e}",
            request=diagnostic,
            cause=e,
        ) from e

    status = response.status_code
    raw_body = response.text or ""
    diagnostic = resolved.to_diagnostic()
    error_detail = HttpErrorDetail(request=diagnostic, response=clean_string(raw_body))

    logger.log(VERBOSE, f"Request: {diagnostic} | Response: status={status}, body={error_detail.response}")

    if status >= 500:
        logger.error(f"Server error: status={status} | request={diagnostic} | response={error_detail.response}")
        raise ServerError(status=status, request=diagnostic, response=error_detail.response)

    error = error_detail if status >= 400 else None
    json_body = None
    if raw_body:
        try:
            json_body = json.loads(raw_body)
        except ValueError as e:
            msg = f"Server responded with non-JSON body for {resolved.url}."
            logger.warning(msg)
            error = replace(error_detail, message=f"{msg} {e}")

    return JsonResponse(
        status=status,
        body=raw_body or None,
        json_body=json_body,
        error=error,
    )
