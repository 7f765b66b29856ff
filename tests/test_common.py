"""Tests for the lookup helpers."""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from apicseed import SEED, ApiResult, HttpClient, SeedContext, api_find, api_get, get_role_urls, set_auth_token

MANAGER = "https://manager.example.com"
CONSUMER = "https://consumer.example.com"

ROLES = {
    "results": [
        {"name": "administrator", "url": f"{MANAGER}/api/roles/1"},
        {"name": "developer", "url": f"{MANAGER}/api/roles/2"},
        {"name": "viewer", "url": f"{MANAGER}/api/roles/3"},
    ]
}


def make_response(status_code: int = 200, body: Any = None) -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.text = "" if body is None else json.dumps(body)
    return resp


class MockHttpClient(HttpClient):
    """Mock HTTP client answering GETs from a url -> body map."""

    def __init__(self, bodies: dict[str, Any]):
        self.bodies = bodies
        self.calls: list[dict[str, Any]] = []

    def request(self, method, url, headers=None, data=None, timeout=180.0):
        self.calls.append({"method": method, "url": url, "headers": headers})
        if url not in self.bodies:
            return make_response(404, {"message": ["Not found"]})
        return make_response(200, self.bodies[url])


@pytest.fixture
def context():
    SEED.configure(
        hosts={"manager": MANAGER, "consumer": CONSUMER},
        http={"retry_pause": 0},
        options={"silent_retry": True},
        allow_env_override=False,
    )
    client = MockHttpClient({
        f"{MANAGER}/api/orgs/acme/roles": ROLES,
        f"{MANAGER}/api/orgs/empty/roles": {"total_results": 0, "results": []},
        f"{MANAGER}/api/orgs/acme": {"name": "acme", "owner": {"username": "owner"}},
        f"{CONSUMER}/consumer-api/apps": {"results": [{"name": "app-1"}]},
    })
    ctx = SeedContext.create(http_client=client)
    set_auth_token("manager", "tok", context=ctx)
    set_auth_token("consumer", "ctok", context=ctx)
    yield ctx
    SEED.reset()


class TestApiGet:

    def test_returns_results_of_list_endpoint(self, context):
        assert api_get("manager", "/api/orgs/acme/roles", context=context) == ROLES["results"]

    def test_returns_empty_results_of_empty_list_endpoint(self, context):
        assert api_get("manager", "/api/orgs/empty/roles", context=context) == []

    def test_returns_property_by_dotted_path(self, context):
        assert api_get("manager", "/api/orgs/acme", "owner.username", context=context) == "owner"

    def test_returns_whole_result_for_get_endpoint(self, context):
        result = api_get("manager", "/api/orgs/acme", context=context)

        assert isinstance(result, ApiResult)
        assert result.body["name"] == "acme"

    def test_consumer_sends_consumer_context(self, context):
        api_get("consumer", "/consumer-api/apps", None, "acme", "sandbox", context=context)

        assert context.http_client.calls[0]["headers"]["X-IBM-Consumer-Context"] == "acme.sandbox"


class TestApiFind:

    def test_finds_first_item_containing_value(self, context):
        item = api_find("manager", "/api/orgs/acme/roles", "name", "dev", context=context)

        assert item == {"name": "developer", "url": f"{MANAGER}/api/roles/2"}

    def test_returns_none_when_nothing_matches(self, context):
        assert api_find("manager", "/api/orgs/acme/roles", "name", "owner", context=context) is None

    def test_empty_list_endpoint_finds_nothing_without_error(self, context, caplog):
        with caplog.at_level("ERROR"):
            assert api_find("manager", "/api/orgs/empty/roles", "name", "dev", context=context) is None

        assert caplog.text == ""

    def test_logs_error_when_data_is_not_a_list(self, context, caplog):
        with caplog.at_level("ERROR", logger="apicseed._common"):
            assert api_find("manager", "/api/orgs/acme", "name", "acme", context=context) is None

        assert "is not an array" in caplog.text


class TestGetRoleUrls:

    def test_returns_urls_in_requested_order(self, context):
        urls = get_role_urls("manager", "/api/orgs/acme/roles", ["viewer", "administrator"], context=context)

        assert urls == [f"{MANAGER}/api/roles/3", f"{MANAGER}/api/roles/1"]

    def test_unknown_roles_are_skipped_with_warning(self, context, caplog):
        with caplog.at_level("WARNING", logger="apicseed._common"):
            urls = get_role_urls("manager", "/api/orgs/acme/roles", ["developer", "owner"], context=context)

        assert urls == [f"{MANAGER}/api/roles/2"]
        assert "Omitted invalid manager role owner" in caplog.text

    def test_empty_role_list_warns_about_each_role(self, context, caplog):
        with caplog.at_level("WARNING"):
            urls = get_role_urls("manager", "/api/orgs/empty/roles", ["developer"], context=context)

        assert urls == []
        assert "Omitted invalid manager role developer" in caplog.text
        assert "Failed to get" not in caplog.text

    def test_failed_lookup_returns_empty_list(self, context, caplog):
        with caplog.at_level("ERROR"):
            urls = get_role_urls("manager", "/api/orgs/missing/roles", ["developer"], context=context)

        assert urls == []
        assert "Failed to get manager roles" in caplog.text
