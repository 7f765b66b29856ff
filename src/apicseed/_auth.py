"""
Sign-in and session management for the platform apps.

Each app (admin, manager, consumer) is an independent auth domain: signing
into one stores a bearer token under `token:<app>` in the session storage,
which the request façade attaches to every later request of that app.

Sign-in uses the OAuth password grant against the app's identity provider
realm, with the client registration from `SEED.config.auth`.

Example:
    >>> from apicseed import SEED, sign_in, sign_out
    >>> SEED.configure(auth={"client_id": "...", "client_secret": "..."})
    >>> sign_in("admin", "admin", "password")
    >>> sign_in("consumer", "dev", "password", provider_org="acme", catalog="sandbox")
    >>> sign_out("admin")
"""

from __future__ import annotations

import logging
from typing import Any

from apicseed._clients import send_request
from apicseed._config import SEED, ConfigurationError
from apicseed._context import SeedContext, resolve_context
from apicseed._models import CONSUMER_CONTEXT_HEADER, ApiResult, App, consumer_context
from apicseed._storage import consumer_context_key, token_key

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


# =============================================================================
# Exceptions
# =============================================================================


class AuthenticationError(Exception):
    """
    Raised when signing in fails.

    Raised when no identity provider can be determined and, in strict mode,
    when the token endpoint does not return a token.

    Attributes:
        message: Description of the authentication failure.
        cause: The underlying exception that caused the failure, if any.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


# =============================================================================
# Identity Providers
# =============================================================================


def _consumer_headers(app: App, provider_org: str | None, catalog: str | None) -> dict[str, str]:
    if app is not App.CONSUMER:
        return {}
    if not provider_org or not catalog:
        raise ConfigurationError("provider_org and catalog are required for the consumer app")
    return {CONSUMER_CONTEXT_HEADER: consumer_context(provider_org, catalog)}


def get_id_providers(
    app: App | str,
    provider_org: str | None = None,
    catalog: str | None = None,
    *,
    context: SeedContext | None = None,
) -> list[dict[str, Any]] | None:
    """
    List the identity providers available for an app.

    Args:
        app: Target app (admin, manager or consumer).
        provider_org: Provider org name or id (consumer only).
        catalog: Catalog name or id (consumer only).
        context: Session context. Defaults to the process-wide context.

    Returns:
        The identity providers, or None if the request failed.
    """
    role = App.parse(app)
    logger.debug(f"Getting list of identity providers available for {role}")

    headers = _consumer_headers(role, provider_org, catalog)
    if role is App.CONSUMER:
        endpoint = f"/consumer-api/{role.idp_scope}/identity-providers"
    else:
        endpoint = f"/api/cloud/{role.idp_scope}/identity-providers"

    result = send_request(role, endpoint, headers=headers, skip_auth=True, context=context)
    return result.body.get("results") if isinstance(result.body, dict) else None


def get_default_id_provider(
    app: App | str,
    provider_org: str | None = None,
    catalog: str | None = None,
    *,
    context: SeedContext | None = None,
) -> dict[str, Any] | None:
    """Return the identity provider flagged `default` for an app, if any."""
    logger.debug(f"Getting default identity provider for {app}")
    idps = get_id_providers(app, provider_org, catalog, context=context) or []
    return next((idp for idp in idps if idp.get("default")), None)


# =============================================================================
# Session
# =============================================================================


def set_auth_token(app: App | str, token: str, *, context: SeedContext | None = None) -> None:
    """
    Manually set the bearer token of an app, e.g. for OIDC users.

    A leading `Bearer ` (as copied from an Authorization header) is dropped.
    """
    assert token, "Token can not be empty."
    role = App.parse(app)
    if token.startswith(_BEARER_PREFIX):
        token = token[len(_BEARER_PREFIX):]
    resolve_context(context).storage.set(token_key(role), token)


def sign_in(
    app: App | str,
    username: str,
    password: str,
    id_provider: str | None = None,
    provider_org: str | None = None,
    catalog: str | None = None,
    *,
    context: SeedContext | None = None,
) -> ApiResult | None:
    """
    Sign into an app and store its bearer token.

    Args:
        app: Target app (admin, manager or consumer).
        username: User name.
        password: User password.
        id_provider: Identity provider of the user. Defaults to the app's
            default identity provider.
        provider_org: Provider org name (consumer only, required).
        catalog: Catalog name (consumer only, required).
        context: Session context. Defaults to the process-wide context.

    Returns:
        The token endpoint result, or None if no token was returned.

    Raises:
        ConfigurationError: If app is invalid, or provider_org/catalog are
            missing for the consumer app.
        AuthenticationError: If no identity provider can be determined, or,
            in strict mode, if sign-in fails.
    """
    assert username, "Username can not be empty."
    assert password, "Password can not be empty."
    role = App.parse(app)
    ctx = resolve_context(context)
    headers = _consumer_headers(role, provider_org, catalog)
    logger.debug(f"Signing into {role}")

    if not id_provider:
        default_idp = get_default_id_provider(role, provider_org, catalog, context=ctx) or {}
        id_provider = default_idp.get("name")
    if not id_provider:
        raise AuthenticationError(f"Failed to get default identity provider for {role}")

    scope = f"consumer:{provider_org}:{catalog}" if role is App.CONSUMER else role.idp_scope
    client_id, client_secret = SEED.config.auth.credentials_for(consumer=role is App.CONSUMER)
    data = {
        "username": username,
        "password": password,
        "realm": f"{scope}/{id_provider}",
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "password",
    }

    logger.info(f"Signing into {role} as user: {username}")
    result = send_request(
        role, f"{role.api_root}/token", "POST", data, headers,
        skip_auth=True, log_errors=False, context=ctx,
    )
    token = result.body.get("access_token") if isinstance(result.body, dict) else None
    if not token:
        logger.error(f"Sign in failed! status={result.status} error={result.error}")
        if SEED.config.options.strict:
            cause = result.retry_errors[-1] if result.retry_errors else None
            raise AuthenticationError(f"Sign in to {role} failed for user: {username}", cause=cause)
        return None

    logger.info(f"Signed into {role} successfully!")
    ctx.storage.set(token_key(role), token)
    if role is App.CONSUMER:
        ctx.storage.set(consumer_context_key(role), headers[CONSUMER_CONTEXT_HEADER])
    return result


def sign_out(app: App | str, *, context: SeedContext | None = None) -> bool:
    """
    Sign out of an app.

    The stored token is only cleared when the platform confirms with HTTP 204.

    Returns:
        True if signed out, False otherwise.
    """
    role = App.parse(app)
    ctx = resolve_context(context)

    result = send_request(role, f"{role.api_root}/me/sign-out", "POST", context=ctx)
    if result.status != 204:
        logger.error(f"Sign out of {role} failed!")
        return False

    logger.info(f"Signed out of {role} successfully!")
    ctx.storage.remove(token_key(role))
    ctx.storage.remove(consumer_context_key(role))
    return True
