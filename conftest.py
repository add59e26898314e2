"""Common fixtures for issuer tests."""

import base64
import json
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from jwt_vc_json.format_handler import JwtVcJsonFormatHandler
from oid4vci_issuer.format_handler import FormatHandlers
from oid4vci_issuer.models.credential_config import (
    ClaimMapping,
    CredentialConfiguration,
)
from oid4vci_issuer.tenants import ConfiguredTenantResolver
from oid4vci_issuer.urls import TenantQualifiedUrlBuilder

ENDPOINT = "https://localhost:9443"
SUPER_TENANT = "carbon.super"
TENANT = "wso2.com"


class InMemoryConfigurationStore:
    """Configuration store keeping records per tenant, in insertion order."""

    def __init__(self, configurations: Dict[str, List[CredentialConfiguration]]):
        self.configurations = configurations
        self.calls = []

    async def list(self, tenant_domain: str) -> List[CredentialConfiguration]:
        self.calls.append(tenant_domain)
        return list(self.configurations.get(tenant_domain, []))


def b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def decode_jws(jws: str):
    """Split a compact JWS into (headers, payload, signature, signing input)."""
    encoded_headers, encoded_payload, encoded_sig = jws.split(".")
    return (
        json.loads(b64url_decode(encoded_headers)),
        json.loads(b64url_decode(encoded_payload)),
        b64url_decode(encoded_sig),
        f"{encoded_headers}.{encoded_payload}".encode(),
    )


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate(rsa_key):
    subject = issuer = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "LK"),
            x509.NameAttribute(NameOID.COMMON_NAME, "localhost"),
        ]
    )
    utcnow = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(rsa_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(utcnow)
        .not_valid_after(utcnow + timedelta(days=365))
        .sign(rsa_key, hashes.SHA256())
    )


@pytest.fixture
def url_builder():
    return TenantQualifiedUrlBuilder(ENDPOINT, SUPER_TENANT)


@pytest.fixture
def tenant_resolver():
    return ConfiguredTenantResolver({TENANT: 1}, SUPER_TENANT, -1234)


@pytest.fixture
def key_store(rsa_key):
    store = MagicMock()
    store.get_private_key = AsyncMock(return_value=rsa_key)
    return store


@pytest.fixture
def cert_store(certificate):
    store = MagicMock()
    store.get_certificate = AsyncMock(return_value=certificate)
    return store


@pytest.fixture
def jwt_handler(url_builder, tenant_resolver, key_store, cert_store):
    return JwtVcJsonFormatHandler(
        url_builder=url_builder,
        tenant_resolver=tenant_resolver,
        key_store=key_store,
        cert_store=cert_store,
    )


@pytest.fixture
def format_handlers(jwt_handler):
    handlers = FormatHandlers()
    handlers.register(jwt_handler)
    return handlers.freeze()


@pytest.fixture
def degree_config():
    return CredentialConfiguration(
        id="7d3c1b2a",
        configuration_id="cfg-1",
        format="jwt_vc_json",
        scope="university_degree",
        credential_type="UniversityDegree",
        credential_signing_alg_values_supported="RS256",
        credential_metadata={
            "display": [{"name": "University Degree", "locale": "en-US"}]
        },
        claim_mappings=[
            ClaimMapping(
                claim_uri="http://wso2.org/claims/givenname", display="Given Name"
            ),
            ClaimMapping(claim_uri="http://wso2.org/claims/emailaddress"),
        ],
    )


@pytest.fixture
def config_store(degree_config):
    return InMemoryConfigurationStore({SUPER_TENANT: [degree_config]})
