"""Resolve a credential configuration for a tenant."""

import logging

from .error import ConfigurationNotFoundError, OID4VCIError, StoreUnavailableError
from .models.credential_config import CredentialConfiguration
from .providers import ConfigurationStore

LOGGER = logging.getLogger(__name__)


class ConfigurationResolver:
    """Look up credential configurations by their externally visible id."""

    def __init__(self, store: ConfigurationStore):
        """Initialize the resolver."""
        self.store = store

    async def resolve(
        self, tenant_domain: str, configuration_id: str
    ) -> CredentialConfiguration:
        """Return the tenant's configuration whose configuration_id matches exactly.

        When the store holds several records with the same configuration_id,
        the first one in store order is returned.
        """
        try:
            configurations = await self.store.list(tenant_domain)
        except OID4VCIError:
            raise
        except Exception as err:
            raise StoreUnavailableError(tenant_domain) from err

        matches = [
            configuration
            for configuration in configurations or []
            if configuration.configuration_id == configuration_id
        ]
        if not matches:
            raise ConfigurationNotFoundError(configuration_id, tenant_domain)
        if len(matches) > 1:
            LOGGER.warning(
                "Found %d credential configurations with ID %s for tenant %s; "
                "using the first",
                len(matches),
                configuration_id,
                tenant_domain,
            )
        return matches[0]
