"""Credential issuer metadata."""

import asyncio
import logging
from typing import Any, Dict, Optional

from .config import SUPER_TENANT_DOMAIN
from .error import IssuanceCancelledError, MetadataUnavailableError
from .providers import ConfigurationStore, ServiceUrlBuilder

LOGGER = logging.getLogger(__name__)

CONTEXT_OPENID4VCI = "oid4vci"
SEGMENT_CREDENTIAL = "credential"
SEGMENT_OAUTH2 = "oauth2"
SEGMENT_TOKEN = "token"


class CredentialIssuerMetadataProcessor:
    """Builds the OID4VCI credential issuer metadata of a tenant.

    OpenID4VCI 1.0 § 12.2.4: Credential Issuer Metadata Parameters
    https://openid.net/specs/openid-4-verifiable-credential-issuance-1_0.html#section-12.2.4
    """

    def __init__(
        self,
        config_store: Optional[ConfigurationStore],
        url_builder: ServiceUrlBuilder,
        *,
        super_tenant_domain: str = SUPER_TENANT_DOMAIN,
    ):
        """Initialize the processor."""
        self.config_store = config_store
        self.url_builder = url_builder
        self.super_tenant_domain = super_tenant_domain

    def resolve_tenant(self, tenant_domain: Optional[str]) -> str:
        """Fall back to the super tenant for a blank tenant domain."""
        if tenant_domain is None or not tenant_domain.strip():
            return self.super_tenant_domain
        return tenant_domain

    async def get_metadata(self, tenant_domain: Optional[str]) -> Dict[str, Any]:
        """Return the credential issuer metadata document for a tenant."""
        tenant_domain = self.resolve_tenant(tenant_domain)

        try:
            metadata = {
                "credential_issuer": self.url_builder.build(
                    tenant_domain, CONTEXT_OPENID4VCI
                ),
                "credential_endpoint": self.url_builder.build(
                    tenant_domain, CONTEXT_OPENID4VCI, SEGMENT_CREDENTIAL
                ),
                "authorization_servers": [
                    self.url_builder.build(tenant_domain, SEGMENT_OAUTH2, SEGMENT_TOKEN)
                ],
            }
        except Exception as err:
            raise MetadataUnavailableError(tenant_domain, "metadata URLs") from err

        metadata["credential_configurations_supported"] = (
            await self.get_credential_configurations(tenant_domain)
        )

        LOGGER.debug("METADATA: %s", metadata)
        return metadata

    async def get_credential_configurations(
        self, tenant_domain: str
    ) -> Dict[str, Any]:
        """Return credential_configurations_supported, keyed by configuration id."""
        if self.config_store is None:
            raise MetadataUnavailableError(tenant_domain, "configurations")

        try:
            configurations = await self.config_store.list(tenant_domain)
        except asyncio.CancelledError as err:
            raise IssuanceCancelledError(
                f"Metadata retrieval cancelled for tenant: {tenant_domain}"
            ) from err
        except Exception as err:
            raise MetadataUnavailableError(tenant_domain, "configurations") from err

        configurations_supported = {}
        for configuration in configurations or []:
            # Same first-match policy as credential issuance.
            configurations_supported.setdefault(
                configuration.configuration_id, configuration.to_issuer_metadata()
            )
        return configurations_supported
