"""
Global configuration for the apicseed toolkit.

This module provides a simple configuration system following Convention over Configuration (CoC).
Seeding scripts can optionally call SEED.configure() at startup to customize defaults.
If not called, sensible defaults are used.

Hierarchy of precedence (highest to lowest):
1. Arguments passed directly to functions (e.g. `retries=3`)
2. Values set via SEED.configure() or SEED.set_option()
3. Environment variables (API_HOST, APICSEED_*), including a `.env` file - when allow_env_override=True
4. Hardcoded defaults (in dataclass fields)

Example:
    >>> from apicseed import SEED
    >>>
    >>> # Pre-loaded with defaults + env vars
    >>> timeout = SEED.config.http.request_timeout
    >>>
    >>> # Custom configuration
    >>> SEED.configure(
    ...     options={"retries": 3, "silent_retry": True},
    ...     hosts={"cluster": "c1", "namespace": "ns1"},
    ... )
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Self

from dotenv import find_dotenv, load_dotenv

# Sections exposed through the flat SEED.get_option() / SEED.set_option() accessor
_OPTION_SECTIONS = ("options", "hosts")

_SECRET_FIELDS = ("client_secret", "consumer_client_secret")


# =============================================================================
# Exceptions
# =============================================================================


class ConfigurationError(ValueError):
    """
    Raised when required configuration is missing or invalid at call time.

    Covers missing host identifiers (cluster/namespace/API_HOST/base_host),
    unknown app roles and requests sent without a stored bearer token.
    """

    pass


class ConfigEnvVarError(ValueError):
    """Raised when an environment variable has an invalid value."""

    def __init__(
        self,
        env_var: str,
        value: str,
        expected_type: str,
        cause: Exception | None = None,
    ):
        self.env_var = env_var
        self.value = value
        self.expected_type = expected_type
        super().__init__(f"Invalid value for {env_var}: '{value}' (expected {expected_type})")
        self.__cause__ = cause


class ConfigValidationError(ValueError):
    """Raised when a configuration value fails validation."""

    def __init__(
        self,
        field: str,
        value: Any,
        message: str,
        section: str | None = None,
    ):
        self.field = field
        self.value = value
        self.section = section
        prefix = f"[{section}] " if section else ""
        super().__init__(f"{prefix}Invalid value for '{field}': {value!r}. {message}")


# =============================================================================
# Environment Variables
# =============================================================================


def load_env_file(path: str | Path | None = None) -> bool:
    """
    Load a `.env` file into the process environment.

    Variables already set in the environment are kept. Without a path the
    file is searched from the current working directory upwards.

    Returns:
        True if a file was found and loaded.
    """
    dotenv_path = path or find_dotenv(usecwd=True)
    if not dotenv_path:
        return False
    return load_dotenv(dotenv_path, override=False)



class EnvVars:
    """
    Utility class for reading environment variables with type conversion.

    Example:
        >>> EnvVars.get("APICSEED_HTTP_REQUEST_TIMEOUT", type_hint=float)
        180.0
        >>> EnvVars.get("API_HOST")
        'https://manager.ns1.cluster.dev.example.com'
        >>> EnvVars.get("UNDEFINED_VAR")
        None
    """

    @staticmethod
    def get(
        var_name: str,
        type_hint: Any = str,
        converter: Callable[[str], Any] | None = None,
    ) -> Any:
        """
        Read an environment variable with optional type conversion.

        Args:
            var_name: The environment variable name.
            type_hint: Type hint used to infer the converter (ignored if converter is provided).
            converter: Custom converter function (takes precedence over type_hint).

        Returns:
            The converted value, or None if env var is not set/empty.

        Raises:
            ConfigEnvVarError: If the value cannot be converted.
        """
        raw_value = os.environ.get(var_name)
        if not raw_value:  # None or empty string
            return None

        actual_converter = converter or EnvVars._infer_converter(type_hint)
        try:
            return actual_converter(raw_value)
        except (ValueError, TypeError) as e:
            raise ConfigEnvVarError(
                env_var=var_name,
                value=raw_value,
                expected_type=type_hint.__name__ if hasattr(type_hint, "__name__") else str(type_hint),
                cause=e,
            ) from e

    @staticmethod
    def _infer_converter(type_hint: Any) -> Callable[[str], Any]:
        """
        Infer converter function from type hint.

        Handles both actual types and string annotations (PEP 563).
        """
        type_str = str(type_hint)

        if type_hint is int or type_str == "int":
            return int
        if type_hint is float or type_str == "float":
            return float
        if type_hint is bool or type_str == "bool":
            return _to_bool
        return str


def _to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _to_bool_or_path(value: str) -> bool | str:
    """`log_to_file` accepts a flag or a file path."""
    if value.lower() in ("true", "1", "yes"):
        return True
    if value.lower() in ("false", "0", "no"):
        return False
    return value


# =============================================================================
# Base Class
# =============================================================================


@dataclass(frozen=True)
class OverridableConfig:
    """
    Base class for immutable configuration dataclasses.

    Provides `.with_overrides()` for creating new instances with partial
    field updates and `.with_env_vars()` for applying the environment
    variables declared in field metadata.

    Example:
        >>> config = HttpConfig()
        >>> custom = config.with_overrides({"request_timeout": 60})
        >>> custom.request_timeout
        60
    """

    def with_overrides(
        self,
        overrides: dict[str, Any],
        allow_none_fields: set[str] | None = None,
    ) -> Self:
        """
        Return a new instance with specified fields overridden.

        Args:
            overrides: Dict of field names to new values.
                       Only existing fields are allowed.
            allow_none_fields: Set of field names that accept None as a valid value.
                       By default, None values are filtered out.

        Returns:
            New instance with updated values.

        Raises:
            ValueError: If overrides contains unknown field names.
        """
        if not overrides:
            return self

        valid_fields = {f.name for f in fields(self)}
        invalid_fields = set(overrides.keys()) - valid_fields

        if invalid_fields:
            raise ValueError(
                f"Unknown config fields: {invalid_fields}. "
                f"Valid fields are: {valid_fields}"
            )

        allow_none = allow_none_fields or set()
        filtered = {k: v for k, v in overrides.items() if v is not None or k in allow_none}
        return replace(self, **filtered) if filtered else self

    def with_env_vars(self) -> Self:
        """
        Return new instance with environment variables applied.

        Reads env vars declared in field metadata and applies them as overrides.

        Raises:
            ConfigEnvVarError: If an env var has an invalid value.
        """
        overrides: dict[str, Any] = {}
        for f in fields(self):
            env_var = f.metadata.get("env")
            if env_var:
                value = EnvVars.get(
                    var_name=env_var,
                    type_hint=f.type,
                    converter=f.metadata.get("converter"),
                )
                if value is not None:
                    overrides[f.name] = value
        return self.with_overrides(overrides)


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass(frozen=True)
class OptionsConfig(OverridableConfig):
    """
    Run-time behaviour flags of a seeding run.

    These are the flags the outer CLI layer sets; the core only reads them.

    Attributes:
        config: Path to a seed config file (consumed by the domain layer).
            Env var: APICSEED_OPTIONS_CONFIG

        debug: Show debug output in the console.
            Env var: APICSEED_OPTIONS_DEBUG

        strict: Raise instead of only logging request and sign-in errors.
            Env var: APICSEED_OPTIONS_STRICT

        log_to_file: Write logs to a file. `True` uses `output/seed_<ms>.log`,
            a string is used as the file path.
            Env var: APICSEED_OPTIONS_LOG_TO_FILE

        org: Title of the provider org to seed (consumed by the domain layer).
            Env var: APICSEED_OPTIONS_ORG

        silent_retry: Do not log each failed retry attempt.
            Env var: APICSEED_OPTIONS_SILENT_RETRY

        silent: Disable logging to the console.
            Env var: APICSEED_OPTIONS_SILENT

        retries: Default number of retries for API requests.
            Env var: APICSEED_OPTIONS_RETRIES

        no_ts: Disable the timestamp prefix in console logging.
            Env var: APICSEED_OPTIONS_NO_TS

        verbose: Show request/response dumps in the console.
            Env var: APICSEED_OPTIONS_VERBOSE
    """

    config: str | None = field(default=None, metadata={"env": "APICSEED_OPTIONS_CONFIG"})
    debug: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_DEBUG"})
    strict: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_STRICT"})
    log_to_file: bool | str = field(
        default=False,
        metadata={"env": "APICSEED_OPTIONS_LOG_TO_FILE", "converter": _to_bool_or_path},
    )
    org: str | None = field(default=None, metadata={"env": "APICSEED_OPTIONS_ORG"})
    silent_retry: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_SILENT_RETRY"})
    silent: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_SILENT"})
    retries: int = field(default=1, metadata={"env": "APICSEED_OPTIONS_RETRIES"})
    no_ts: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_NO_TS"})
    verbose: bool = field(default=False, metadata={"env": "APICSEED_OPTIONS_VERBOSE"})

    def validate(self) -> Self:
        """Validate options fields."""
        if self.retries < 0:
            raise ConfigValidationError(
                "retries", self.retries,
                "Must be >= 0.", section="options"
            )
        if isinstance(self.log_to_file, str) and not self.log_to_file.strip():
            raise ConfigValidationError(
                "log_to_file", self.log_to_file,
                "Must not be an empty path.", section="options"
            )
        return self


@dataclass(frozen=True)
class HostsConfig(OverridableConfig):
    """
    Inputs of the host resolver.

    The base host comes either from `base_host` (with `use_host_options`),
    from `api_host` (the `API_HOST` env var) or from `cluster` + `namespace`.
    Each host kind can also be pinned explicitly, which bypasses resolution
    for that kind only.

    Attributes:
        use_api_host: Prefer `api_host` even when cluster and namespace are set.
        http: Use `http://` instead of `https://` for computed hosts.
        use_host_options: Take the base host from `base_host` instead of
            API_HOST/cluster/namespace.
        base_host: Base host used with `use_host_options`.
        api_host: Platform host, usually of the manager app.
            Env var: API_HOST
        cluster: Cluster name, composed with `namespace`.
            Env var: APICSEED_HOSTS_CLUSTER
        namespace: Namespace name, composed with `cluster`.
            Env var: APICSEED_HOSTS_NAMESPACE
        cluster_domain: Domain appended to `<namespace>.<cluster>`.
        lab_domain_suffix: Domain whose gateways use direct subdomains.
        admin ... v6_gateway_endpoint_base: Per-kind host overrides.
    """

    use_api_host: bool = field(default=False, metadata={"env": "APICSEED_HOSTS_USE_API_HOST"})
    http: bool = field(default=False, metadata={"env": "APICSEED_HOSTS_HTTP"})
    use_host_options: bool = field(default=False, metadata={"env": "APICSEED_HOSTS_USE_HOST_OPTIONS"})
    base_host: str | None = field(default=None, metadata={"env": "APICSEED_HOSTS_BASE_HOST"})
    api_host: str | None = field(default=None, metadata={"env": "API_HOST"})
    cluster: str | None = field(default=None, metadata={"env": "APICSEED_HOSTS_CLUSTER"})
    namespace: str | None = field(default=None, metadata={"env": "APICSEED_HOSTS_NAMESPACE"})
    cluster_domain: str = field(default="dev.ciondemand.com", metadata={"env": "APICSEED_HOSTS_CLUSTER_DOMAIN"})
    lab_domain_suffix: str = field(default=".fyre.ibm.com", metadata={"env": "APICSEED_HOSTS_LAB_DOMAIN_SUFFIX"})
    admin: str | None = None
    manager: str | None = None
    consumer: str | None = None
    analytics_endpoint: str | None = None
    portal_endpoint: str | None = None
    portal_endpoint_base: str | None = None
    custom_portal_endpoint_base: str | None = None
    v5_gateway_endpoint: str | None = None
    v5_gateway_endpoint_base: str | None = None
    v6_gateway_endpoint: str | None = None
    v6_gateway_endpoint_base: str | None = None

    @property
    def protocol(self) -> str:
        """Scheme prefix used for every computed host."""
        return "http://" if self.http else "https://"

    def validate(self) -> Self:
        """Validate hosts configuration fields."""
        if not self.cluster_domain or self.cluster_domain.startswith("."):
            raise ConfigValidationError(
                "cluster_domain", self.cluster_domain,
                "Must be a non-empty domain without a leading dot.", section="hosts"
            )
        if not self.lab_domain_suffix.startswith("."):
            raise ConfigValidationError(
                "lab_domain_suffix", self.lab_domain_suffix,
                "Must start with '.'.", section="hosts"
            )
        return self


@dataclass(frozen=True)
class HttpConfig(OverridableConfig):
    """
    HTTP transport settings.

    Attributes:
        request_timeout: Timeout in seconds for each request (3 minutes).
            Env var: APICSEED_HTTP_REQUEST_TIMEOUT
        default_method: Method used when a request does not specify one.
            Env var: APICSEED_HTTP_DEFAULT_METHOD
        verify_tls: Verify TLS certificates. Off by default since lab and
            dev clusters serve self-signed certificates.
            Env var: APICSEED_HTTP_VERIFY_TLS
        retry_pause: Seconds to pause between retry attempts.
            Env var: APICSEED_HTTP_RETRY_PAUSE
        concurrency_limit: Default number of calls per concurrent wave.
            Env var: APICSEED_HTTP_CONCURRENCY_LIMIT
        probe_timeout: Timeout in seconds for host reachability probes.
            Env var: APICSEED_HTTP_PROBE_TIMEOUT
    """

    request_timeout: float = field(default=180.0, metadata={"env": "APICSEED_HTTP_REQUEST_TIMEOUT"})
    default_method: str = field(default="GET", metadata={"env": "APICSEED_HTTP_DEFAULT_METHOD"})
    verify_tls: bool = field(default=False, metadata={"env": "APICSEED_HTTP_VERIFY_TLS"})
    retry_pause: float = field(default=3.0, metadata={"env": "APICSEED_HTTP_RETRY_PAUSE"})
    concurrency_limit: int = field(default=25, metadata={"env": "APICSEED_HTTP_CONCURRENCY_LIMIT"})
    probe_timeout: float = field(default=10.0, metadata={"env": "APICSEED_HTTP_PROBE_TIMEOUT"})

    def validate(self) -> Self:
        """Validate HTTP configuration fields."""
        if self.request_timeout <= 0:
            raise ConfigValidationError(
                "request_timeout", self.request_timeout,
                "Must be greater than 0.", section="http"
            )
        if self.default_method.upper() not in ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"):
            raise ConfigValidationError(
                "default_method", self.default_method,
                "Must be a valid HTTP method.", section="http"
            )
        if self.retry_pause < 0:
            raise ConfigValidationError(
                "retry_pause", self.retry_pause,
                "Must be >= 0.", section="http"
            )
        if self.concurrency_limit <= 0:
            raise ConfigValidationError(
                "concurrency_limit", self.concurrency_limit,
                "Must be greater than 0.", section="http"
            )
        if self.probe_timeout <= 0:
            raise ConfigValidationError(
                "probe_timeout", self.probe_timeout,
                "Must be greater than 0.", section="http"
            )
        return self


@dataclass(frozen=True)
class AuthConfig(OverridableConfig):
    """
    OAuth client registration used by the password grant on sign-in.

    The consumer app is registered separately from the admin and manager apps,
    so it has its own client id and secret.

    Attributes:
        client_id: Client id for the admin and manager apps.
            Env var: APICSEED_AUTH_CLIENT_ID
        client_secret: Client secret for the admin and manager apps.
            Env var: APICSEED_AUTH_CLIENT_SECRET
        consumer_client_id: Client id for the consumer app.
            Env var: APICSEED_AUTH_CONSUMER_CLIENT_ID
        consumer_client_secret: Client secret for the consumer app.
            Env var: APICSEED_AUTH_CONSUMER_CLIENT_SECRET
    """

    client_id: str | None = field(default=None, metadata={"env": "APICSEED_AUTH_CLIENT_ID"})
    client_secret: str | None = field(default=None, metadata={"env": "APICSEED_AUTH_CLIENT_SECRET"})
    consumer_client_id: str | None = field(default=None, metadata={"env": "APICSEED_AUTH_CONSUMER_CLIENT_ID"})
    consumer_client_secret: str | None = field(default=None, metadata={"env": "APICSEED_AUTH_CONSUMER_CLIENT_SECRET"})

    def credentials_for(self, consumer: bool) -> tuple[str | None, str | None]:
        """Return the (client_id, client_secret) pair for an app."""
        if consumer:
            return self.consumer_client_id, self.consumer_client_secret
        return self.client_id, self.client_secret

    def validate(self) -> Self:
        """Validate auth configuration fields."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None and value == "":
                raise ConfigValidationError(
                    f.name, value,
                    "Must not be empty string.", section="auth"
                )
        return self


@dataclass(frozen=True)
class ConfigEntry:
    """
    A configuration field with its resolved value and source.

    Attributes:
        name: The field name (e.g., "request_timeout").
        value: The resolved value.
        source: Where the value came from: "default", "env:VAR_NAME" or "user".
    """

    name: str
    value: Any
    source: str

    @property
    def formatted_value(self) -> str:
        """
        Return value formatted for display.

        Masks secrets showing only their last 4 characters and truncates long strings.

        Examples:
            >>> ConfigEntry("client_secret", "super-secret-key", "user").formatted_value
            '********-key'
        """
        if self.name in _SECRET_FIELDS and self.value is not None:
            secret = str(self.value)
            return f"********{secret[-4:]}" if len(secret) >= 8 else "********"

        if self.value is None:
            return "None"

        str_value = str(self.value)
        max_length = 50
        if len(str_value) > max_length:
            return str_value[: max_length - 3] + "..."
        return str_value


@dataclass(frozen=True)
class SeedConfig:
    """
    Root configuration aggregating every section.

    Access via the global `SEED.config` property.

    Example:
        >>> from apicseed import SEED
        >>> SEED.config.http.concurrency_limit
        25
        >>> SEED.config.options.retries
        1
    """

    options: OptionsConfig = field(default_factory=OptionsConfig)
    hosts: HostsConfig = field(default_factory=HostsConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    def with_env_vars(self) -> SeedConfig:
        """Return a new config with environment variables applied on top."""
        return SeedConfig(
            options=self.options.with_env_vars(),
            hosts=self.hosts.with_env_vars(),
            http=self.http.with_env_vars(),
            auth=self.auth.with_env_vars(),
        )

    def with_section_overrides(
        self,
        *,
        options: dict[str, Any] | None = None,
        hosts: dict[str, Any] | None = None,
        http: dict[str, Any] | None = None,
        auth: dict[str, Any] | None = None,
    ) -> SeedConfig:
        """
        Return a new config with overrides applied to nested sections.

        Each section dict is merged with the existing section config,
        only overriding the specified fields.
        """
        return SeedConfig(
            options=self.options.with_overrides(options or {}),
            hosts=self.hosts.with_overrides(hosts or {}),
            http=self.http.with_overrides(http or {}),
            auth=self.auth.with_overrides(auth or {}),
        )

    def validate(self) -> SeedConfig:
        self.options.validate()
        self.hosts.validate()
        self.http.validate()
        self.auth.validate()
        return self


# =============================================================================
# Option names
# =============================================================================


def option_field_name(name: str) -> str:
    """
    Normalize an option name to its config field name.

    Accepts both snake_case field names and the camelCase option names the
    seeding scripts use on the command line.

    Example:
        >>> option_field_name("silentRetry")
        'silent_retry'
        >>> option_field_name("v5GatewayEndpointBase")
        'v5_gateway_endpoint_base'
        >>> option_field_name("useAPIHost")
        'use_api_host'
    """
    assert name, "Option name can not be empty."
    snake = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    snake = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", snake)
    return snake.lower()


# =============================================================================
# Global Configuration Singleton
# =============================================================================


class _SEED:
    """
    Singleton for toolkit configuration.

    Use `SEED.configure()` to customize settings, `SEED.config` to access the
    current configuration and `SEED.get_option()` / `SEED.set_option()` as the
    flat option accessor used by seeding scripts.

    Example:
        >>> from apicseed import SEED
        >>> SEED.set_option("silentRetry")
        >>> SEED.get_option("silent_retry")
        True
    """

    def __init__(self) -> None:
        """Initialize with defaults and environment variables."""
        load_env_file()
        self._config: SeedConfig = SeedConfig().with_env_vars()
        self._user_fields: dict[str, set[str]] = {}

    def configure(
        self,
        *,
        options: dict[str, Any] | None = None,
        hosts: dict[str, Any] | None = None,
        http: dict[str, Any] | None = None,
        auth: dict[str, Any] | None = None,
        allow_env_override: bool = True,
    ) -> SeedConfig:
        """
        Configure toolkit settings.

        Args:
            options: Run-time flag overrides (debug, strict, retries, ...).
            hosts: Host resolution overrides (cluster, namespace, base_host, ...).
            http: HTTP transport overrides (request_timeout, retry_pause, ...).
            auth: OAuth client registration overrides.
            allow_env_override: If True (default), env vars are used as fallback
                for fields NOT provided. If False, ignores env vars entirely.

        Returns:
            The configured SeedConfig instance.

        Raises:
            ValueError: If any dict contains unknown field names.
            ConfigValidationError: If any config value fails validation.
        """
        base = SeedConfig()
        if allow_env_override:
            load_env_file()
            base = base.with_env_vars()

        self._config = base.with_section_overrides(
            options=options,
            hosts=hosts,
            http=http,
            auth=auth,
        )
        self._user_fields = {
            section: set(overrides)
            for section, overrides in (("options", options), ("hosts", hosts), ("http", http), ("auth", auth))
            if overrides
        }
        return self.validate()

    @property
    def config(self) -> SeedConfig:
        """Access current configuration (read-only)."""
        return self._config

    def reset(self) -> SeedConfig:
        """
        Reset configuration to defaults + env vars.

        Useful for testing to ensure clean state between tests.
        """
        load_env_file()
        self._config = SeedConfig().with_env_vars()
        self._user_fields = {}
        return self.validate()

    def validate(self) -> SeedConfig:
        """
        Validate current configuration.

        Raises:
            ConfigValidationError: If any config value is invalid.
        """
        return self._config.validate()

    def get_option(self, name: str) -> Any:
        """
        Get the value of an option by its name.

        Looks the name up in the `options` section, then in `hosts`.

        Raises:
            KeyError: If no section has a field with that name.
        """
        section_name, field_name = self._locate_option(name)
        return getattr(getattr(self._config, section_name), field_name)

    def set_option(self, name: str, value: Any = True) -> None:
        """
        Set the value of an option (a bare flag defaults to True).

        Raises:
            KeyError: If no section has a field with that name.
            ConfigValidationError: If the new value is invalid.
        """
        section_name, field_name = self._locate_option(name)
        section = getattr(self._config, section_name)
        updated = section.with_overrides({field_name: value}, allow_none_fields={field_name}).validate()
        self._config = replace(self._config, **{section_name: updated})
        self._user_fields.setdefault(section_name, set()).add(field_name)

    def _locate_option(self, name: str) -> tuple[str, str]:
        field_name = option_field_name(name)
        for section_name in _OPTION_SECTIONS:
            section = getattr(self._config, section_name)
            if field_name in {f.name for f in fields(section)}:
                return section_name, field_name
        raise KeyError(f"Unknown option: '{name}'")

    def explain_data(self) -> dict[str, list[ConfigEntry]]:
        """Return every config value with its source, grouped by section."""
        result: dict[str, list[ConfigEntry]] = {}
        for section_name in ("options", "hosts", "http", "auth"):
            section = getattr(self._config, section_name)
            user_fields = self._user_fields.get(section_name, set())
            entries = []
            for f in fields(section):
                env_var = f.metadata.get("env")
                if f.name in user_fields:
                    source = "user"
                elif env_var and os.environ.get(env_var):
                    source = f"env:{env_var}"
                else:
                    source = "default"
                entries.append(ConfigEntry(name=f.name, value=getattr(section, f.name), source=source))
            result[section_name] = entries
        return result

    def explain(
        self,
        output: Callable[[str], None] = print,
    ) -> None:
        """
        Print current configuration with sources.

        Args:
            output: Callable to output each line. Defaults to print.
                    Can be used with logging: `SEED.explain(logger.info)`
        """
        name_width = 30
        value_width = 50

        output("apicseed Configuration:")
        output("=" * (name_width + value_width + 16))
        for section_name, entries in self.explain_data().items():
            output(f"[{section_name}]")
            for entry in entries:
                dots = "." * (name_width - len(entry.name))
                marker = "*" if entry.source != "default" else " "
                output(f"  {entry.name} {dots} {entry.formatted_value.ljust(value_width)} {marker} {entry.source}")
        output("=" * (name_width + value_width + 16))

    def __repr__(self) -> str:
        return f"SEED(config={self._config!r})"


# Global singleton instance - always reflects current configuration
SEED: _SEED = _SEED()
SEED.validate()
