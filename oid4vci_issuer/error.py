"""Errors raised while issuing credentials or building issuer metadata."""

from enum import Enum
from typing import Optional

from acapy_agent.core.error import BaseError


class OID4VCIError(BaseError):
    """Base class for credential issuer errors.

    ``client_error`` tells the transport layer whether the failure was caused
    by the request (400) or by the issuer and its collaborators (500).
    """

    client_error = False


class InvalidRequestError(OID4VCIError):
    """Raised when an issuance request is missing or malformed."""

    client_error = True


class ConfigurationNotFoundError(OID4VCIError):
    """Raised when no credential configuration matches the requested id."""

    client_error = True

    def __init__(self, configuration_id: str, tenant_domain: str):
        """Initialize the error."""
        super().__init__(
            f"No matching credential configuration found for ID: {configuration_id} "
            f"(tenant: {tenant_domain})"
        )
        self.configuration_id = configuration_id
        self.tenant_domain = tenant_domain


class UnsupportedFormatError(OID4VCIError):
    """Raised when no format handler is registered for a credential format."""

    client_error = True

    def __init__(self, format: Optional[str]):
        """Initialize the error."""
        super().__init__(f"No registered credential format handler for: {format}")
        self.format = format


class UnsupportedSigningAlgorithmError(OID4VCIError):
    """Raised when a configuration names an algorithm the handler cannot sign with."""

    def __init__(self, algorithm: Optional[str], format: str):
        """Initialize the error."""
        super().__init__(
            f"Invalid signature algorithm provided for {format}: {algorithm}"
        )
        self.algorithm = algorithm
        self.format = format


class StoreUnavailableError(OID4VCIError):
    """Raised when the credential configuration store cannot be read."""

    def __init__(self, tenant_domain: str):
        """Initialize the error."""
        super().__init__(
            f"Error retrieving credential configurations for tenant: {tenant_domain}"
        )
        self.tenant_domain = tenant_domain


class MetadataUnavailableError(OID4VCIError):
    """Raised when issuer metadata cannot be assembled for a tenant."""

    def __init__(self, tenant_domain: str, reason: str = "metadata"):
        """Initialize the error."""
        super().__init__(
            f"Error while building credential issuer {reason} for tenant: "
            f"{tenant_domain}"
        )
        self.tenant_domain = tenant_domain


class ServiceUnavailableError(OID4VCIError):
    """Raised when a required collaborator has not been provided."""


class IssuerUrlError(OID4VCIError):
    """Raised when the credential issuer URL cannot be built."""

    def __init__(self, tenant_domain: str):
        """Initialize the error."""
        super().__init__(
            f"Error building credential issuer URL for tenant: {tenant_domain}"
        )
        self.tenant_domain = tenant_domain


class KeyMaterialStep(str, Enum):
    """Signing steps that depend on tenant key material."""

    TENANT_ID = "tenant_id"
    PRIVATE_KEY = "private_key"
    CERTIFICATE = "certificate"
    THUMBPRINT = "thumbprint"
    KID = "kid"
    SIGNATURE = "signature"


_STEP_DESCRIPTIONS = {
    KeyMaterialStep.TENANT_ID: "resolving the tenant id",
    KeyMaterialStep.PRIVATE_KEY: "obtaining the private key",
    KeyMaterialStep.CERTIFICATE: "obtaining the certificate",
    KeyMaterialStep.THUMBPRINT: "obtaining the certificate thumbprint",
    KeyMaterialStep.KID: "obtaining the KID",
    KeyMaterialStep.SIGNATURE: "signing the JWT",
}


class KeyMaterialError(OID4VCIError):
    """Raised when a signing step fails; ``step`` names the failing step."""

    def __init__(self, step: KeyMaterialStep, tenant_domain: str):
        """Initialize the error."""
        super().__init__(
            f"Error {_STEP_DESCRIPTIONS[step]} for tenant: {tenant_domain}",
            error_code=step.value,
        )
        self.step = step
        self.tenant_domain = tenant_domain


class MissingCredentialError(OID4VCIError):
    """Raised when a credential response is built without a credential."""

    def __init__(self):
        """Initialize the error."""
        super().__init__("Credential is required")


class IssuanceCancelledError(OID4VCIError):
    """Raised when an issuance or metadata call is cancelled mid-flight."""
