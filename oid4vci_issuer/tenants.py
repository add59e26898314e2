"""Tenant id resolution."""

from typing import Mapping, Optional

from .config import SUPER_TENANT_DOMAIN, SUPER_TENANT_ID


class TenantNotFoundError(LookupError):
    """Raised for a tenant domain with no known tenant id."""


class ConfiguredTenantResolver:
    """Resolves tenant ids from the plugin configuration."""

    def __init__(
        self,
        tenants: Optional[Mapping[str, int]] = None,
        super_tenant_domain: str = SUPER_TENANT_DOMAIN,
        super_tenant_id: int = SUPER_TENANT_ID,
    ):
        """Initialize the resolver."""
        self.tenants = dict(tenants or {})
        self.super_tenant_domain = super_tenant_domain
        self.super_tenant_id = super_tenant_id

    def get_tenant_id(self, tenant_domain: str) -> int:
        """Return the numeric id of a tenant."""
        if tenant_domain == self.super_tenant_domain:
            return self.super_tenant_id
        try:
            return self.tenants[tenant_domain]
        except KeyError:
            raise TenantNotFoundError(
                f"Unknown tenant domain: {tenant_domain}"
            ) from None
