"""Tests for the JSON HTTP transport."""

import json
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from apicseed import (
    SEED,
    HttpClient,
    JsonRequest,
    RequestsHttpClient,
    ServerError,
    TransportError,
    send,
    send_json,
)
from apicseed._utils import REDACTED


def make_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Creates a mock that behaves like requests.Response"""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    if body is None:
        resp.text = ""
    elif isinstance(body, str):
        resp.text = body
    else:
        resp.text = json.dumps(body)
    return resp


class MockHttpClient(HttpClient):
    """Mock HTTP client that records calls and returns a configurable response."""

    def __init__(self, response: MagicMock | None = None, error: Exception | None = None):
        self.response = response or make_response()
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def request(self, method, url, headers=None, data=None, timeout=180.0):
        self.calls.append({"method": method, "url": url, "headers": headers, "data": data, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def reset_config():
    SEED.reset()
    yield
    SEED.reset()


# =============================================================================
# JsonRequest Tests
# =============================================================================


class TestJsonRequest:
    """Tests for JsonRequest defaults and diagnostics."""

    def test_resolved_applies_config_defaults(self):
        request = JsonRequest(url="https://host/api/me").resolved()

        assert request.method == "GET"
        assert request.timeout == 180.0

    def test_resolved_uses_configured_defaults(self):
        SEED.configure(http={"default_method": "POST", "request_timeout": 30}, allow_env_override=False)

        request = JsonRequest(url="https://host/api/me").resolved()

        assert request.method == "POST"
        assert request.timeout == 30

    def test_resolved_sanitizes_url_and_uppercases_method(self):
        request = JsonRequest(url="https://host//api/orgs/", method="patch").resolved()

        assert request.url == "https://host/api/orgs"
        assert request.method == "PATCH"

    def test_resolved_merges_headers_caller_wins(self):
        request = JsonRequest(
            url="https://host/api",
            headers={"Accept": "text/plain", "Authorization": "Bearer t"},
        ).resolved()

        assert request.headers == {
            "Accept": "text/plain",
            "Content-Type": "application/json",
            "Authorization": "Bearer t",
        }

    def test_serialized_body(self):
        assert JsonRequest(url="u", body={"a": 1}).serialized_body() == '{"a": 1}'
        assert JsonRequest(url="u", body="raw").serialized_body() == "raw"
        assert JsonRequest(url="u").serialized_body() is None

    def test_diagnostic_redacts_authorization_and_password(self):
        request = JsonRequest(
            url="https://host/api/token",
            headers={"Authorization": "Bearer secret"},
            body={"username": "u", "password": "p"},
        )

        diagnostic = request.to_diagnostic()

        assert diagnostic["headers"]["Authorization"] == REDACTED
        assert diagnostic["body"]["password"] == REDACTED
        assert diagnostic["body"]["username"] == "u"

    def test_rejects_empty_url(self):
        with pytest.raises(AssertionError):
            JsonRequest(url="")


# =============================================================================
# send_json Tests
# =============================================================================


class TestSendJson:
    """Tests for send_json() status classification."""

    def test_200_with_json_body(self):
        client = MockHttpClient(make_response(200, {"id": "1"}))

        response = send_json(JsonRequest(url="https://host/api/me"), http_client=client)

        assert response.status == 200
        assert response.body == '{"id": "1"}'
        assert response.json_body == {"id": "1"}
        assert response.error is None
        assert response.ok

    def test_sends_serialized_body_and_merged_headers(self):
        client = MockHttpClient(make_response(201, {"id": "1"}))

        send_json(
            JsonRequest(url="https://host//api/orgs/", method="POST", body={"name": "acme"}, timeout=5),
            http_client=client,
        )

        call = client.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "https://host/api/orgs"
        assert call["data"] == '{"name": "acme"}'
        assert call["headers"]["Content-Type"] == "application/json"
        assert call["timeout"] == 5

    def test_404_returns_error_without_raising(self):
        client = MockHttpClient(make_response(404, {"message": ["Not found"]}))

        response = send_json(JsonRequest(url="https://host/api/orgs/x"), http_client=client)

        assert response.status == 404
        assert response.error is not None
        assert response.error.response == '{"message": ["Not found"]}'
        assert response.json_body == {"message": ["Not found"]}
        assert not response.ok

    def test_error_request_has_authorization_redacted(self):
        client = MockHttpClient(make_response(401, {"message": "nope"}))

        response = send_json(
            JsonRequest(url="https://host/api/me", headers={"Authorization": "Bearer secret"}),
            http_client=client,
        )

        assert response.error.request["headers"]["Authorization"] == REDACTED

    def test_500_raises_server_error(self):
        client = MockHttpClient(make_response(500, "Internal\n  error"))

        with pytest.raises(ServerError) as exc_info:
            send_json(
                JsonRequest(url="https://host/api/me", headers={"Authorization": "Bearer secret"}),
                http_client=client,
            )

        error = exc_info.value
        assert error.status == 500
        assert error.response == "Internal error"
        assert error.request["headers"]["Authorization"] == REDACTED
        assert isinstance(error, TransportError)

    def test_non_json_body_sets_error_and_keeps_raw_body(self):
        client = MockHttpClient(make_response(200, "<html>oops</html>"))

        response = send_json(JsonRequest(url="https://host/api/me"), http_client=client)

        assert response.status == 200
        assert response.body == "<html>oops</html>"
        assert response.json_body is None
        assert "non-JSON" in response.error.message

    def test_empty_body_is_not_an_error(self):
        client = MockHttpClient(make_response(204))

        response = send_json(JsonRequest(url="https://host/api/me/sign-out", method="POST"), http_client=client)

        assert response.status == 204
        assert response.body is None
        assert response.json_body is None
        assert response.error is None

    def test_no_response_raises_transport_error(self):
        cause = requests.ConnectionError("refused")
        client = MockHttpClient(error=cause)

        with pytest.raises(TransportError) as exc_info:
            send_json(JsonRequest(url="https://host/api/me"), http_client=client)

        assert exc_info.value.cause is cause
        assert not isinstance(exc_info.value, ServerError)


# =============================================================================
# send Tests
# =============================================================================


class TestSend:
    """Tests for the raw send() primitive."""

    @pytest.mark.parametrize("status", [200, 401, 404, 503])
    def test_returns_any_status(self, status):
        client = MockHttpClient(make_response(status, "body"))

        response = send("https://host/api/me", timeout=10, http_client=client)

        assert response.status == status
        assert response.body == "body"
        assert client.calls[0]["timeout"] == 10
        assert client.calls[0]["method"] == "GET"

    def test_raises_transport_error_without_response(self):
        client = MockHttpClient(error=requests.Timeout("timed out"))

        with pytest.raises(TransportError):
            send("https://host/api/me", http_client=client)


# =============================================================================
# RequestsHttpClient Tests
# =============================================================================


class TestRequestsHttpClient:
    """Tests for RequestsHttpClient."""

    @patch("apicseed._http.requests.request")
    def test_delegates_to_requests_without_tls_verification_by_default(self, mock_request: MagicMock):
        mock_request.return_value = make_response(200)

        RequestsHttpClient().request("GET", "https://host/api/me", headers={"A": "b"}, timeout=5)

        mock_request.assert_called_once_with(
            "GET", "https://host/api/me", headers={"A": "b"}, data=None, timeout=5, verify=False,
        )

    @patch("apicseed._http.requests.request")
    def test_verify_tls_follows_config(self, mock_request: MagicMock):
        SEED.configure(http={"verify_tls": True}, allow_env_override=False)
        mock_request.return_value = make_response(200)

        RequestsHttpClient().request("GET", "https://host/api/me")

        assert mock_request.call_args.kwargs["verify"] is True

    def test_explicit_verify_tls_wins(self):
        session = MagicMock(spec=requests.Session)
        session.request.return_value = make_response(200)

        RequestsHttpClient(verify_tls=True, session=session).request("POST", "https://host/api", data="{}")

        assert session.request.call_args.kwargs["verify"] is True
        assert session.request.call_args.kwargs["data"] == "{}"

    def test_rejects_invalid_timeout(self):
        with pytest.raises(AssertionError):
            RequestsHttpClient().request("GET", "https://host/api/me", timeout=0)
