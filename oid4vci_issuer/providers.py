"""Collaborators the issuer depends on but does not own."""

from typing import List, Protocol

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .models.credential_config import CredentialConfiguration


class ConfigurationStore(Protocol):
    """Per-tenant store of credential configurations."""

    async def list(self, tenant_domain: str) -> List[CredentialConfiguration]:
        """Return the configurations visible to a tenant, in store order."""
        ...


class KeyStore(Protocol):
    """Source of tenant signing keys."""

    async def get_private_key(self, tenant_domain: str) -> RSAPrivateKey:
        """Return the tenant's RSA private key."""
        ...


class CertificateStore(Protocol):
    """Source of tenant signing certificates."""

    async def get_certificate(
        self, tenant_domain: str, tenant_id: int
    ) -> x509.Certificate:
        """Return the tenant's current signing certificate."""
        ...


class TenantResolver(Protocol):
    """Maps tenant domains to numeric tenant ids."""

    def get_tenant_id(self, tenant_domain: str) -> int:
        """Return the numeric id of a tenant."""
        ...


class ServiceUrlBuilder(Protocol):
    """Builds absolute public URLs scoped to a tenant."""

    def build(self, tenant_domain: str, *path_segments: str) -> str:
        """Return the URL for the path segments under the tenant."""
        ...
