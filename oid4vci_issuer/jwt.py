"""JWT utilities."""

import hashlib
import logging
from typing import Any, Dict, Mapping

from acapy_agent.wallet.jwt import dict_to_b64
from acapy_agent.wallet.util import bytes_to_b64
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

LOGGER = logging.getLogger(__name__)

RS256 = "RS256"


def cert_thumbprint(certificate: x509.Certificate, digest: str = "sha256") -> str:
    """Return the base64url encoded hex digest of a certificate's DER encoding.

    This is the thumbprint layout older verifiers of the platform expect: the
    lowercase hex digest is itself base64url encoded, without padding.
    """
    der = certificate.public_bytes(serialization.Encoding.DER)
    hex_digest = hashlib.new(digest, der).hexdigest()
    return bytes_to_b64(hex_digest.encode(), urlsafe=True, pad=False)


def legacy_cert_thumbprint(certificate: x509.Certificate) -> str:
    """Return the SHA-1 thumbprint published as ``x5t``."""
    return cert_thumbprint(certificate, "sha1")


def kid_for_certificate(certificate: x509.Certificate, algorithm: str) -> str:
    """Return the key id published for a certificate and algorithm."""
    return f"{cert_thumbprint(certificate)}_{algorithm}"


def rs256_sign(private_key: RSAPrivateKey, signing_input: bytes) -> bytes:
    """Sign with RSASSA-PKCS1-v1_5 using SHA-256."""
    if not isinstance(private_key, RSAPrivateKey):
        raise TypeError(
            f"RS256 requires an RSA private key, got {type(private_key).__name__}"
        )
    return private_key.sign(signing_input, padding.PKCS1v15(), hashes.SHA256())


def jwt_sign(
    private_key: RSAPrivateKey,
    headers: Dict[str, Any],
    payload: Mapping[str, Any],
) -> str:
    """Create a compact RS256 JWS over the payload."""
    headers = {"alg": RS256, **headers}
    if not headers.get("typ", None):
        headers["typ"] = "JWT"

    encoded_headers = dict_to_b64(headers)
    encoded_payload = dict_to_b64(payload)
    signing_input = f"{encoded_headers}.{encoded_payload}".encode()

    LOGGER.debug("Signing JWT with headers: %s", headers)
    sig_bytes = rs256_sign(private_key, signing_input)
    sig = bytes_to_b64(sig_bytes, urlsafe=True, pad=False)

    return f"{encoded_headers}.{encoded_payload}.{sig}"
