"""
Host resolution for the platform's services.

Given a base host (from `base_host`, `API_HOST` or cluster + namespace), the
resolver computes every service endpoint once and memoizes the set until the
base host changes or a reset is requested.

Resolution steps:
    1. A per-kind override in `SEED.config.hosts` is returned as is.
    2. The base host is derived from the hosts config.
    3. A cached host set for the same base host is reused.
    4. `manager.<host>` is probed; a 401 means the prefixed form
       (`admin.`, `manager.`, `consumer.`) is in use, anything else means
       the bare host serves every app.
    5. The chosen manager host is probed again; if it does not answer,
       HostUnreachableError is raised.
    6. Analytics, portal and gateway endpoints are derived by fixed rules.

Example:
    >>> from apicseed import get_host, HostKind
    >>> get_host(HostKind.ADMIN)
    'https://admin.ns1.cluster.dev.ciondemand.com'
    >>> get_host("all")["v5GatewayEndpoint"]
    'https://ns1-gwd.cluster.dev.ciondemand.com'
"""

from __future__ import annotations

import enum
import logging
import re
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from apicseed._config import ConfigurationError, EnvVars, option_field_name
from apicseed._http import HttpClient, TransportError, send

if TYPE_CHECKING:
    from apicseed._config import HostsConfig
    from apicseed._context import SeedContext

logger = logging.getLogger(__name__)

ALL = "all"

_APP_PREFIX_RE = re.compile(r"^https?://(manager\.|admin\.|consumer\.)?")


class HostKind(enum.StrEnum):
    """Endpoint kinds the resolver can compute."""

    ADMIN = "admin"
    MANAGER = "manager"
    CONSUMER = "consumer"
    ANALYTICS_ENDPOINT = "analyticsEndpoint"
    PORTAL_ENDPOINT = "portalEndpoint"
    PORTAL_ENDPOINT_BASE = "portalEndpointBase"
    CUSTOM_PORTAL_ENDPOINT_BASE = "customPortalEndpointBase"
    V5_GATEWAY_ENDPOINT = "v5GatewayEndpoint"
    V5_GATEWAY_ENDPOINT_BASE = "v5GatewayEndpointBase"
    V6_GATEWAY_ENDPOINT = "v6GatewayEndpoint"
    V6_GATEWAY_ENDPOINT_BASE = "v6GatewayEndpointBase"

    def __str__(self) -> str:
        return self.value

    @property
    def option_name(self) -> str:
        """Name of the HostsConfig field overriding this kind."""
        return option_field_name(self.value)


HOST_KINDS: tuple[HostKind, ...] = tuple(HostKind)


class HostUnreachableError(TransportError):
    """Raised when the resolved manager host does not answer the probe."""

    def __init__(self, host: str):
        super().__init__(f"API host {host} is unreachable")
        self.host = host


# =============================================================================
# Derivation rules
# =============================================================================


@dataclass(frozen=True)
class BaseHost:
    """
    Input of the derivation rules.

    Attributes:
        host: Bare host name, without scheme nor app prefix.
        protocol: `https://` or `http://`.
    """

    host: str
    protocol: str


def _gateway_prefix(host: str) -> str:
    return f"{host.split('.')[0]}-"


def _gateway_postfix(host: str) -> str:
    return "." + ".".join(host.split(".")[1:])


def _domain(host: str) -> str:
    return host[host.rfind("/") + 1:]


def gateway_host(base: BaseHost, infix: str, lab_domain_suffix: str) -> str:
    """
    Compose a gateway host.

    Regular clusters use `<first-label>-<infix>.<rest>`; the lab domain uses a
    direct subdomain `<infix>.<host>`.

    Example:
        >>> gateway_host(BaseHost("ns1.cluster.dev.example.com", "https://"), "gwd", ".fyre.ibm.com")
        'https://ns1-gwd.cluster.dev.example.com'
        >>> gateway_host(BaseHost("my-stack.fyre.ibm.com", "https://"), "gwd", ".fyre.ibm.com")
        'https://gwd.my-stack.fyre.ibm.com'
    """
    postfix = _gateway_postfix(base.host)
    if postfix == lab_domain_suffix:
        return f"{base.protocol}{infix}.{base.host}"
    return f"{base.protocol}{_gateway_prefix(base.host)}{infix}{postfix}"


def derive_service_hosts(base: BaseHost, lab_domain_suffix: str) -> dict[HostKind, str]:
    """Compute every non-app endpoint from the base host."""
    domain = _domain(base.host)
    return {
        HostKind.ANALYTICS_ENDPOINT: f"{base.protocol}ai.{domain}",
        HostKind.PORTAL_ENDPOINT: f"{base.protocol}api.portal.{domain}",
        HostKind.PORTAL_ENDPOINT_BASE: f"{base.protocol}portal.{domain}",
        HostKind.CUSTOM_PORTAL_ENDPOINT_BASE: f"{base.protocol}custom-portal.{domain}",
        HostKind.V5_GATEWAY_ENDPOINT: gateway_host(base, "gwd", lab_domain_suffix),
        HostKind.V5_GATEWAY_ENDPOINT_BASE: gateway_host(base, "gw", lab_domain_suffix),
        HostKind.V6_GATEWAY_ENDPOINT: gateway_host(base, "rgwd", lab_domain_suffix),
        HostKind.V6_GATEWAY_ENDPOINT_BASE: gateway_host(base, "rgw", lab_domain_suffix),
    }


def strip_app_prefix(api_host: str) -> str:
    """
    Drop the scheme and any `admin.`/`manager.`/`consumer.` prefix.

    Example:
        >>> strip_app_prefix("https://manager.ns1.cluster.dev.example.com")
        'ns1.cluster.dev.example.com'
    """
    return _APP_PREFIX_RE.sub("", api_host)


def resolve_base_host(config: HostsConfig) -> BaseHost:
    """
    Determine the base host from the hosts config.

    Raises:
        ConfigurationError: If no base host source is configured.
    """
    if config.use_host_options:
        if not config.base_host:
            kinds = ", ".join(HOST_KINDS)
            raise ConfigurationError(
                f"You must provide all required hosts ({kinds}) in"
                " options or provide the option baseHost to have hosts auto computed."
            )
        return BaseHost(host=strip_app_prefix(config.base_host), protocol=config.protocol)

    cluster, namespace = config.cluster, config.namespace
    # API_HOST may be exported after the config was built
    api_host = config.api_host or EnvVars.get("API_HOST")
    if not api_host and not (cluster and namespace):
        raise ConfigurationError(
            'Environment variable "API_HOST" is not set and'
            " cluster or namespace was not provided"
        )

    host = strip_app_prefix(api_host) if api_host else ""
    if cluster and namespace and not (config.use_api_host and api_host):
        host = f"{namespace}.{cluster}.{config.cluster_domain}"
    return BaseHost(host=host, protocol=config.protocol)


# =============================================================================
# Resolver
# =============================================================================


class HostResolver:
    """
    Computes and memoizes the host set of one platform instance.

    Thread-safe: concurrent callers share a single probe round.

    Args:
        http_client: Client used for reachability probes.
        config: Hosts config to resolve from. Defaults to `SEED.config.hosts`,
            read at every call so later `SEED.configure()` calls apply.
        probe_timeout: Probe timeout in seconds. Defaults to `http.probe_timeout`.
    """

    PROBE_PATH = "/api/me"

    def __init__(
        self,
        http_client: HttpClient | None = None,
        config: HostsConfig | None = None,
        probe_timeout: float | None = None,
    ):
        self._http_client = http_client
        self._config = config
        self._probe_timeout = probe_timeout
        self._base_host: str | None = None
        self._hosts: dict[HostKind, str] | None = None
        self._lock = threading.RLock()

    @property
    def config(self) -> HostsConfig:
        if self._config is not None:
            return self._config
        from apicseed._config import SEED
        return SEED.config.hosts

    @property
    def base_host(self) -> str | None:
        """Base host of the memoized host set, if any."""
        return self._base_host

    def reset(self) -> None:
        """Forget the memoized host set."""
        with self._lock:
            self._base_host = None
            self._hosts = None

    def get(self, kind: HostKind | str, reset_cache: bool = False) -> str | dict[str, str]:
        """
        Return the URL of a host kind, or a dict of every kind for "all".

        Args:
            kind: A HostKind, its string value, or "all".
            reset_cache: Forget the memoized host set first.

        Raises:
            ConfigurationError: If kind is unknown or no base host is configured.
            HostUnreachableError: If the platform does not answer the probe.
        """
        assert kind, "Host kind can not be empty."
        if reset_cache:
            self.reset()

        if kind == ALL:
            return {str(k): self.get(k) for k in HOST_KINDS}  # type: ignore[misc]

        try:
            host_kind = HostKind(kind)
        except ValueError as e:
            valid = ", ".join([*HOST_KINDS, ALL])
            raise ConfigurationError(f"kind must be one of [{valid}], got {kind!r}") from e

        config = self.config
        override = getattr(config, host_kind.option_name)
        if override:
            return override

        return self._compute_hosts(config)[host_kind]

    def _compute_hosts(self, config: HostsConfig) -> dict[HostKind, str]:
        base = resolve_base_host(config)
        with self._lock:
            if self._hosts is not None and self._base_host == base.host:
                return self._hosts

            logger.info(f"Computing hosts for {base.host}")
            hosts: dict[HostKind, str] = dict(self._app_hosts(base))
            hosts.update(derive_service_hosts(base, config.lab_domain_suffix))

            self._base_host = base.host
            self._hosts = hosts
            return hosts

    def _app_hosts(self, base: BaseHost) -> dict[HostKind, str]:
        protocol, host = base.protocol, base.host
        add_prefix = self.is_reachable(f"{protocol}manager.{host}")

        def app_host(app: str) -> str:
            return f"{protocol}{app}.{host}" if add_prefix else f"{protocol}{host}"

        hosts = {
            HostKind.ADMIN: app_host("admin"),
            HostKind.MANAGER: app_host("manager"),
            HostKind.CONSUMER: app_host("consumer"),
        }
        if not self.is_reachable(hosts[HostKind.MANAGER]):
            raise HostUnreachableError(host)
        return hosts

    def is_reachable(self, host: str) -> bool:
        """
        Probe a host: it is reachable if an unauthenticated call answers 401.

        Transport failures count as unreachable.
        """
        timeout = self._probe_timeout
        if timeout is None:
            from apicseed._config import SEED
            timeout = SEED.config.http.probe_timeout

        url = f"{host}{self.PROBE_PATH}"
        logger.debug(f"Probing {url}")
        try:
            response = send(url, timeout=timeout, http_client=self._http_client)
        except TransportError as e:
            logger.debug(f"Probe of {url} failed: {e}")
            return False
        return response.status == 401


def get_host(
    kind: HostKind | str,
    reset_cache: bool = False,
    context: SeedContext | None = None,
) -> str | dict[str, str]:
    """
    Resolve a host kind (or "all") using the context's resolver.

    Args:
        kind: A HostKind, its string value, or "all".
        reset_cache: Forget previously computed hosts first.
        context: Session context. Defaults to the process-wide context.
    """
    from apicseed._context import get_default_context

    ctx = context or get_default_context()
    return ctx.host_resolver.get(kind, reset_cache=reset_cache)
