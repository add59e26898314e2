"""Credential response assembly."""

import json
from typing import Optional

from acapy_agent.messaging.models.openapi import OpenAPISchema
from marshmallow import fields, post_dump

from .error import MissingCredentialError


class CredentialEntrySchema(OpenAPISchema):
    """A single issued credential."""

    credential = fields.Str(
        required=True,
        metadata={"description": "The issued credential, e.g. a compact JWS."},
    )


class CredentialResponseSchema(OpenAPISchema):
    """Response schema for the /credential endpoint.

    OpenID4VCI 1.0 § 8.3: Credential Response
    https://openid.net/specs/openid-4-verifiable-credential-issuance-1_0.html#section-8.3
    """

    credentials = fields.List(
        fields.Nested(CredentialEntrySchema()),
        required=True,
        metadata={"description": "Issued credentials."},
    )
    c_nonce_expires_in = fields.Int(
        required=False,
        allow_none=True,
        metadata={
            "description": "Lifetime in seconds of the c_nonce.",
            "example": 86400,
        },
    )

    @post_dump
    def remove_unset(self, data, **kwargs):
        """Leave out c_nonce_expires_in when it was not set."""
        if data.get("c_nonce_expires_in") is None:
            data.pop("c_nonce_expires_in", None)
        return data


class CredentialIssuanceResponse:
    """Credential response; obtain instances through ``builder()``."""

    def __init__(self, credential: str, c_nonce_expires_in: Optional[int] = None):
        """Initialize the response."""
        self.credential = credential
        self.c_nonce_expires_in = c_nonce_expires_in

    @staticmethod
    def builder() -> "CredentialIssuanceResponseBuilder":
        """Return a new response builder."""
        return CredentialIssuanceResponseBuilder()

    def serialize(self) -> dict:
        """Return the wire representation of the response."""
        return CredentialResponseSchema().dump(
            {
                "credentials": [{"credential": self.credential}],
                "c_nonce_expires_in": self.c_nonce_expires_in,
            }
        )

    def to_json(self) -> str:
        """Return the response serialized as JSON."""
        return json.dumps(self.serialize())


class CredentialIssuanceResponseBuilder:
    """Builder for CredentialIssuanceResponse."""

    def __init__(self):
        """Initialize an empty builder."""
        self._credential: Optional[str] = None
        self._c_nonce_expires_in: Optional[int] = None

    def credential(self, credential: str) -> "CredentialIssuanceResponseBuilder":
        """Set the issued credential."""
        if credential is None:
            raise ValueError("Credential cannot be None")
        self._credential = credential
        return self

    def c_nonce_expires_in(
        self, expires_in: Optional[int]
    ) -> "CredentialIssuanceResponseBuilder":
        """Set the c_nonce lifetime in seconds."""
        self._c_nonce_expires_in = expires_in
        return self

    def build(self) -> CredentialIssuanceResponse:
        """Build the response; a credential must have been set."""
        if not self._credential:
            raise MissingCredentialError()
        return CredentialIssuanceResponse(self._credential, self._c_nonce_expires_in)
