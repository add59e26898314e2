"""Retrieve configuration values."""

import json
import re
from dataclasses import dataclass, field
from os import getenv
from typing import Dict, Optional

from acapy_agent.config.base import BaseSettings
from acapy_agent.config.settings import Settings

SUPER_TENANT_DOMAIN = "carbon.super"
SUPER_TENANT_ID = -1234


class ConfigError(ValueError):
    """Base class for configuration errors."""

    def __init__(self, var: str, env: str):
        """Initialize a ConfigError."""
        super().__init__(
            f"Invalid {var} specified for OID4VCI issuer; use either "
            f"oid4vci.{var} plugin config value or environment variable {env}"
        )


def expand_vars(text: str) -> str:
    """Expand ${VAR} and ${VAR:-default} references from the environment."""

    def replacer(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default_value = var_expr.split(":-", 1)
            return getenv(var_name.strip(), default_value.strip())
        return getenv(var_expr.strip(), match.group(0))

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


@dataclass
class Config:
    """Configuration for the OID4VCI issuer plugin."""

    host: str
    port: int
    endpoint: str
    super_tenant_domain: str = SUPER_TENANT_DOMAIN
    super_tenant_id: int = SUPER_TENANT_ID
    tenants: Dict[str, int] = field(default_factory=dict)
    c_nonce_expires_in: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: BaseSettings) -> "Config":
        """Retrieve configuration from context."""
        assert isinstance(settings, Settings)
        plugin_settings = settings.for_plugin("oid4vci")

        host = plugin_settings.get("host") or getenv("OID4VCI_HOST")
        if not host:
            raise ConfigError("host", "OID4VCI_HOST")
        try:
            port = int(plugin_settings.get("port") or getenv("OID4VCI_PORT", "0"))
        except ValueError as err:
            raise ConfigError("port", "OID4VCI_PORT") from err
        if not port:
            raise ConfigError("port", "OID4VCI_PORT")

        # Environment wins so deployments can override the published base URL.
        endpoint = getenv("OID4VCI_ENDPOINT") or plugin_settings.get("endpoint")
        if not endpoint:
            raise ConfigError("endpoint", "OID4VCI_ENDPOINT")
        endpoint = expand_vars(endpoint).rstrip("/")

        super_tenant_domain = (
            getenv("OID4VCI_SUPER_TENANT_DOMAIN")
            or plugin_settings.get("super_tenant_domain")
            or SUPER_TENANT_DOMAIN
        )

        try:
            super_tenant_id = int(
                getenv("OID4VCI_SUPER_TENANT_ID")
                or plugin_settings.get("super_tenant_id")
                or SUPER_TENANT_ID
            )
        except ValueError as err:
            raise ConfigError("super_tenant_id", "OID4VCI_SUPER_TENANT_ID") from err

        tenants = plugin_settings.get("tenants") or {}
        tenants_env = getenv("OID4VCI_TENANTS")
        if tenants_env:
            try:
                tenants = json.loads(tenants_env)
            except ValueError as err:
                raise ConfigError("tenants", "OID4VCI_TENANTS") from err
        if not isinstance(tenants, dict):
            raise ConfigError("tenants", "OID4VCI_TENANTS")
        try:
            tenants = {domain: int(tenant_id) for domain, tenant_id in tenants.items()}
        except (TypeError, ValueError) as err:
            raise ConfigError("tenants", "OID4VCI_TENANTS") from err

        c_nonce_expires_in = getenv(
            "OID4VCI_C_NONCE_EXPIRES_IN"
        ) or plugin_settings.get("c_nonce_expires_in")
        if c_nonce_expires_in is not None:
            try:
                c_nonce_expires_in = int(c_nonce_expires_in)
            except ValueError as err:
                raise ConfigError(
                    "c_nonce_expires_in", "OID4VCI_C_NONCE_EXPIRES_IN"
                ) from err

        return cls(
            host=host,
            port=port,
            endpoint=endpoint,
            super_tenant_domain=super_tenant_domain,
            super_tenant_id=super_tenant_id,
            tenants=tenants,
            c_nonce_expires_in=c_nonce_expires_in,
        )
