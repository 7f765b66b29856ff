"""
Lookup helpers shared by seeding scripts.

Thin reads on top of `send_request` for the common "get a list, pick an
item" patterns of the platform's list endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from apicseed._clients import send_request
from apicseed._context import SeedContext
from apicseed._models import CONSUMER_CONTEXT_HEADER, App, consumer_context
from apicseed._utils import get_path

logger = logging.getLogger(__name__)


def api_get(
    app: App | str,
    endpoint: str,
    prop: str | None = None,
    provider_org: str | None = None,
    catalog: str | None = None,
    *,
    context: SeedContext | None = None,
) -> Any:
    """
    Read data at an endpoint.

    Args:
        app: Target app (admin, manager or consumer).
        endpoint: Target endpoint.
        prop: Dotted path of the value to return from the response body.
        provider_org: Provider org name (consumer only).
        catalog: Catalog name (consumer only).
        context: Session context. Defaults to the process-wide context.

    Returns:
        `body[prop]` when prop is given, the `results` list of list
        endpoints, or the whole ApiResult otherwise.
    """
    assert endpoint, "Endpoint can not be empty."
    role = App.parse(app)
    logger.debug(f"Getting {role} data from {endpoint}")

    headers = {}
    if role is App.CONSUMER and provider_org and catalog:
        headers[CONSUMER_CONTEXT_HEADER] = consumer_context(provider_org, catalog)

    result = send_request(role, endpoint, headers=headers, context=context)
    if prop:
        return get_path(result.body, prop)
    if isinstance(result.body, dict) and "results" in result.body:
        return result.body["results"]
    return result


def api_find(
    app: App | str,
    endpoint: str,
    key: str,
    value: str,
    *,
    context: SeedContext | None = None,
) -> dict[str, Any] | None:
    """
    Find the first item at a list endpoint whose `key` contains `value`.

    Returns:
        The matching item, or None if nothing matches or the endpoint does not
        return a list.
    """
    assert key, "Key can not be empty."
    assert value, "Value can not be empty."

    data = api_get(app, endpoint, context=context)
    if not isinstance(data, list):
        logger.error(f"Data available at {endpoint} is not an array")
        return None

    logger.debug(f"Finding key-value pair {key}-{value} in {len(data)} items")
    return next((item for item in data if value in (item.get(key) or "")), None)


def get_role_urls(
    app: App | str,
    endpoint: str,
    roles: list[str],
    provider_org: str | None = None,
    catalog: str | None = None,
    *,
    context: SeedContext | None = None,
) -> list[str]:
    """
    Return the URLs of the named roles, in the order of `roles`.

    Unknown role names are skipped with a warning.

    Args:
        app: Target app (admin, manager or consumer).
        endpoint: Endpoint listing the role objects (e.g. `/api/orgs/acme/roles`).
        roles: Role names, e.g. "administrator", "developer", "viewer".
        provider_org: Provider org name (consumer only).
        catalog: Catalog name (consumer only).
        context: Session context. Defaults to the process-wide context.
    """
    assert roles is not None, "Roles can not be None."

    available = api_get(app, endpoint, None, provider_org, catalog, context=context)
    if not isinstance(available, list):
        logger.error(f"Failed to get {app} roles at endpoint {endpoint}")
        return []

    role_urls = []
    for role in roles:
        role_data = next((r for r in available if r.get("name") == role), None)
        if role_data:
            role_urls.append(role_data["url"])
        else:
            logger.warning(f"Omitted invalid {app} role {role}")
    return role_urls
