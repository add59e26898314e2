"""Issue a jwt_vc_json credential."""

import logging
from typing import Any, Dict

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from oid4vci_issuer.error import (
    IssuerUrlError,
    KeyMaterialError,
    KeyMaterialStep,
    UnsupportedSigningAlgorithmError,
)
from oid4vci_issuer.issuance import IssuanceContext
from oid4vci_issuer.jwt import (
    RS256,
    jwt_sign,
    kid_for_certificate,
    legacy_cert_thumbprint,
)
from oid4vci_issuer.providers import (
    CertificateStore,
    KeyStore,
    ServiceUrlBuilder,
    TenantResolver,
)

LOGGER = logging.getLogger(__name__)

FORMAT = "jwt_vc_json"
CONTEXT_OPENID4VCI = "oid4vci"


class JwtVcJsonFormatHandler:
    """Credential format handler for jwt_vc_json.

    Signs with the tenant's RSA key; RS256 is the only supported algorithm.
    """

    format = FORMAT

    def __init__(
        self,
        url_builder: ServiceUrlBuilder,
        tenant_resolver: TenantResolver,
        key_store: KeyStore,
        cert_store: CertificateStore,
    ):
        """Initialize the handler with its key material collaborators."""
        self.url_builder = url_builder
        self.tenant_resolver = tenant_resolver
        self.key_store = key_store
        self.cert_store = cert_store

    async def issue_credential(self, context: IssuanceContext) -> str:
        """Return a signed credential in JWT format."""
        LOGGER.debug(
            "Issuing JWT VC JSON credential for configuration: %s",
            context.configuration_id,
        )
        claims = self.build_claims(context)
        return await self.sign(claims, context)

    def issuer_url(self, tenant_domain: str) -> str:
        """Return the credential issuer URL of a tenant."""
        try:
            return self.url_builder.build(tenant_domain, CONTEXT_OPENID4VCI)
        except Exception as err:
            raise IssuerUrlError(tenant_domain) from err

    def build_claims(self, context: IssuanceContext) -> Dict[str, Any]:
        """Return the JWT claims of the credential."""
        return {"iss": self.issuer_url(context.tenant_domain)}

    async def sign(self, claims: Dict[str, Any], context: IssuanceContext) -> str:
        """Sign the claims with the algorithm of the credential configuration."""
        algorithm = (
            context.credential_configuration.credential_signing_alg_values_supported
        )
        if algorithm != RS256:
            raise UnsupportedSigningAlgorithmError(algorithm, FORMAT)

        tenant_domain = context.tenant_domain
        tenant_id = self._tenant_id(tenant_domain)
        private_key = await self._private_key(tenant_domain)
        certificate = await self._certificate(tenant_domain, tenant_id)
        thumbprint = self._thumbprint(certificate, tenant_domain)
        kid = self._kid(certificate, tenant_domain)

        headers = {"alg": RS256, "kid": kid, "x5t": thumbprint}
        try:
            return jwt_sign(private_key, headers, claims)
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.SIGNATURE, tenant_domain) from err

    def _tenant_id(self, tenant_domain: str) -> int:
        try:
            return self.tenant_resolver.get_tenant_id(tenant_domain)
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.TENANT_ID, tenant_domain) from err

    async def _private_key(self, tenant_domain: str) -> RSAPrivateKey:
        try:
            private_key = await self.key_store.get_private_key(tenant_domain)
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.PRIVATE_KEY, tenant_domain) from err
        if not isinstance(private_key, RSAPrivateKey):
            raise KeyMaterialError(KeyMaterialStep.PRIVATE_KEY, tenant_domain)
        return private_key

    async def _certificate(
        self, tenant_domain: str, tenant_id: int
    ) -> x509.Certificate:
        try:
            certificate = await self.cert_store.get_certificate(
                tenant_domain, tenant_id
            )
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.CERTIFICATE, tenant_domain) from err
        if certificate is None:
            raise KeyMaterialError(KeyMaterialStep.CERTIFICATE, tenant_domain)
        return certificate

    def _thumbprint(self, certificate: x509.Certificate, tenant_domain: str) -> str:
        try:
            return legacy_cert_thumbprint(certificate)
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.THUMBPRINT, tenant_domain) from err

    def _kid(self, certificate: x509.Certificate, tenant_domain: str) -> str:
        try:
            return kid_for_certificate(certificate, RS256)
        except Exception as err:
            raise KeyMaterialError(KeyMaterialStep.KID, tenant_domain) from err
