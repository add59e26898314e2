"""Storage backed issuer collaborators.

Credential configurations, tenant signing keys and signing certificates are
provisioned by other components into the agent's storage; the issuer only
reads them. Records are scoped to a tenant with a ``tenant_domain`` tag.
"""

import json
import logging
from typing import List

from acapy_agent.core.profile import Profile, ProfileSession
from acapy_agent.storage.base import BaseStorage, StorageRecord
from acapy_agent.storage.error import StorageNotFoundError
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .models.credential_config import CredentialConfiguration

LOGGER = logging.getLogger(__name__)

CRED_CONFIG_RECORD_TYPE = "oid4vci_cred_config"
SIGNING_KEY_RECORD_TYPE = "oid4vci_signing_key"
SIGNING_CERT_RECORD_TYPE = "oid4vci_signing_cert"


def get_storage(session: ProfileSession) -> BaseStorage:
    """Get storage instance from session."""
    return session.inject(BaseStorage)


class StorageConfigurationStore:
    """Reads credential configurations from storage."""

    def __init__(self, profile: Profile):
        """Initialize the store."""
        self.profile = profile

    async def list(self, tenant_domain: str) -> List[CredentialConfiguration]:
        """Return the configurations of a tenant, in storage order."""
        async with self.profile.session() as session:
            records = await get_storage(session).find_all_records(
                type_filter=CRED_CONFIG_RECORD_TYPE,
                tag_query={"tenant_domain": tenant_domain},
            )

        LOGGER.debug(
            "Found %d credential configurations for tenant %s",
            len(records),
            tenant_domain,
        )
        return [self._deserialize(record) for record in records]

    @staticmethod
    def _deserialize(record: StorageRecord) -> CredentialConfiguration:
        value = json.loads(record.value)
        value.setdefault("id", record.id)
        return CredentialConfiguration.deserialize(value)


class StorageKeyStore:
    """Reads tenant RSA signing keys from storage."""

    def __init__(self, profile: Profile):
        """Initialize the store."""
        self.profile = profile

    async def get_private_key(self, tenant_domain: str) -> RSAPrivateKey:
        """Return the tenant's signing key."""
        async with self.profile.session() as session:
            record = await get_storage(session).get_record(
                SIGNING_KEY_RECORD_TYPE, tenant_domain
            )

        data = json.loads(record.value)
        private_key = serialization.load_pem_private_key(
            data["private_key_pem"].encode(), password=None
        )
        if not isinstance(private_key, RSAPrivateKey):
            raise ValueError(f"Signing key of tenant {tenant_domain} is not an RSA key")
        return private_key


class StorageCertificateStore:
    """Reads tenant signing certificates from storage."""

    def __init__(self, profile: Profile):
        """Initialize the store."""
        self.profile = profile

    async def get_certificate(
        self, tenant_domain: str, tenant_id: int
    ) -> x509.Certificate:
        """Return the most recently created signing certificate of the tenant."""
        async with self.profile.session() as session:
            records = await get_storage(session).find_all_records(
                type_filter=SIGNING_CERT_RECORD_TYPE,
                tag_query={"tenant_domain": tenant_domain},
            )

        if not records:
            raise StorageNotFoundError(
                f"No signing certificate for tenant {tenant_domain} ({tenant_id})"
            )

        certificates = [json.loads(record.value) for record in records]
        current = max(certificates, key=lambda data: data.get("created_at", ""))
        return x509.load_pem_x509_certificate(current["certificate_pem"].encode())
