"""Tenant scoped service URLs."""

from urllib.parse import quote, urlparse

from .config import SUPER_TENANT_DOMAIN

TENANT_PATH_PREFIX = "/t"


class UrlBuildError(ValueError):
    """Raised when a service URL cannot be built."""


class TenantQualifiedUrlBuilder:
    """Builds public service URLs for a tenant.

    The super tenant is served from the bare context path; every other tenant
    is qualified with ``/t/{tenant_domain}``. Verifiers compare issuer URLs
    byte for byte, so this layout must stay stable.
    """

    def __init__(self, endpoint: str, super_tenant_domain: str = SUPER_TENANT_DOMAIN):
        """Initialize the builder with the public base URL."""
        parsed = urlparse(endpoint or "")
        if not parsed.scheme or not parsed.netloc:
            raise UrlBuildError(f"Invalid public endpoint: {endpoint!r}")
        self.endpoint = endpoint.rstrip("/")
        self.super_tenant_domain = super_tenant_domain

    def tenant_subpath(self, tenant_domain: str) -> str:
        """Return the path prefix for a tenant."""
        if not tenant_domain or tenant_domain == self.super_tenant_domain:
            return ""
        if "/" in tenant_domain:
            raise UrlBuildError(f"Invalid tenant domain: {tenant_domain!r}")
        return f"{TENANT_PATH_PREFIX}/{quote(tenant_domain, safe='')}"

    def build(self, tenant_domain: str, *path_segments: str) -> str:
        """Return the absolute public URL of the path segments for a tenant."""
        segments = [segment.strip("/") for segment in path_segments]
        if any(not segment for segment in segments):
            raise UrlBuildError(f"Invalid path segments: {path_segments!r}")
        path = "".join(f"/{quote(segment)}" for segment in segments)
        return f"{self.endpoint}{self.tenant_subpath(tenant_domain)}{path}"
