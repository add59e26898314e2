"""Credential configuration model, as read from the configuration store."""

import json
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from acapy_agent.messaging.models.base import BaseModel, BaseModelSchema
from marshmallow import fields

LOGGER = logging.getLogger(__name__)


class StructuredDisplay:
    """Display value already held as a list or mapping."""

    def __init__(self, value: Union[Sequence, Mapping]):
        """Initialize the display value."""
        self.value = value

    def to_metadata(self) -> Any:
        """Return the display value unchanged."""
        return self.value

    def __eq__(self, other) -> bool:
        """Compare display values."""
        return isinstance(other, StructuredDisplay) and other.value == self.value


class EncodedDisplay:
    """Display value persisted as a JSON string."""

    def __init__(self, raw: str):
        """Initialize the display value."""
        self.raw = raw

    def to_metadata(self) -> Any:
        """Parse the JSON string; an unparseable value projects to an empty list."""
        try:
            return json.loads(self.raw)
        except ValueError:
            LOGGER.debug(
                "Invalid JSON in credential metadata display; returning empty list. "
                "JSON: %s",
                self.raw,
                exc_info=True,
            )
            return []

    def __eq__(self, other) -> bool:
        """Compare display values."""
        return isinstance(other, EncodedDisplay) and other.raw == self.raw


class AbsentDisplay:
    """No display value stored."""

    def to_metadata(self) -> Any:
        """Return an empty display list."""
        return []

    def __eq__(self, other) -> bool:
        """Compare display values."""
        return isinstance(other, AbsentDisplay)


DisplayValue = Union[StructuredDisplay, EncodedDisplay, AbsentDisplay]


def display_from_metadata(credential_metadata: Any) -> DisplayValue:
    """Decide the display variant of a stored ``credential_metadata`` value.

    ``credential_metadata`` has been persisted both as a mapping and as a
    JSON-encoded string. Either way, its ``display`` member may itself be a
    structure or a JSON string.
    """
    if credential_metadata is None:
        return AbsentDisplay()

    if isinstance(credential_metadata, (str, bytes)):
        try:
            credential_metadata = json.loads(credential_metadata)
        except ValueError:
            LOGGER.debug(
                "Unable to parse credential metadata; treating display as absent.",
                exc_info=True,
            )
            return AbsentDisplay()

    if not isinstance(credential_metadata, Mapping):
        return AbsentDisplay()

    display = credential_metadata.get("display")
    if display is None:
        return AbsentDisplay()
    if isinstance(display, str):
        return EncodedDisplay(display)
    if isinstance(display, (list, tuple, Mapping)):
        return StructuredDisplay(display)
    return AbsentDisplay()


class ClaimMapping(BaseModel):
    """Mapping of a claim URI to an optional display label."""

    class Meta:
        """ClaimMapping metadata."""

        schema_class = "ClaimMappingSchema"

    def __init__(self, *, claim_uri: str, display: Optional[str] = None, **kwargs):
        """Initialize a ClaimMapping."""
        super().__init__(**kwargs)
        self.claim_uri = claim_uri
        self.display = display

    def to_metadata(self) -> dict:
        """Return the claim as issuer metadata.

        The ``display`` key is left out when there is no label.
        """
        claim = {"path": [self.claim_uri]}
        if self.display is not None:
            claim["display"] = [{"name": self.display}]
        return claim


class ClaimMappingSchema(BaseModelSchema):
    """Schema for ClaimMapping."""

    class Meta:
        """ClaimMappingSchema metadata."""

        model_class = ClaimMapping

    claim_uri = fields.Str(
        required=True,
        metadata={"example": "http://wso2.org/claims/givenname"},
    )
    display = fields.Str(
        required=False, allow_none=True, metadata={"example": "Given Name"}
    )


class CredentialConfiguration(BaseModel):
    """A credential configuration registered for a tenant.

    Records are owned by the configuration store; the issuer only reads them.
    """

    class Meta:
        """CredentialConfiguration metadata."""

        schema_class = "CredentialConfigurationSchema"

    def __init__(
        self,
        *,
        id: Optional[str] = None,
        configuration_id: Optional[str] = None,
        format: Optional[str] = None,
        scope: Optional[str] = None,
        credential_type: Optional[str] = None,
        credential_signing_alg_values_supported: Optional[str] = None,
        credential_metadata: Any = None,
        claim_mappings: Optional[List[ClaimMapping]] = None,
        **kwargs,
    ):
        """Initialize a new CredentialConfiguration.

        Args:
            id (Optional[str]): Store identifier of the record.
            configuration_id (Optional[str]): Externally addressable identifier;
                the key used in credential requests and issuer metadata.
            format (Optional[str]): Credential format, e.g. jwt_vc_json.
            scope (Optional[str]): OAuth 2.0 scope of the credential.
            credential_type (Optional[str]): Credential type, published as vct.
            credential_signing_alg_values_supported (Optional[str]): The single
                signing algorithm for this configuration, e.g. RS256.
            credential_metadata (Any): Display metadata, either a mapping or a
                JSON-encoded string.
            claim_mappings (Optional[List[ClaimMapping]]): Claims published in
                the issuer metadata.
            kwargs: Keyword arguments passed to BaseModel.
        """
        super().__init__(**kwargs)
        self.id = id
        self.configuration_id = configuration_id
        self.format = format
        self.scope = scope
        self.credential_type = credential_type
        self.credential_signing_alg_values_supported = (
            credential_signing_alg_values_supported
        )
        self.credential_metadata = credential_metadata
        self.display = display_from_metadata(credential_metadata)
        self.claim_mappings = list(claim_mappings or [])

    def to_issuer_metadata(self) -> dict:
        """Return this configuration as a credential_configurations_supported entry."""
        alg_values = []
        if self.credential_signing_alg_values_supported is not None:
            alg_values.append(self.credential_signing_alg_values_supported)

        return {
            "id": self.configuration_id,
            "format": self.format,
            "scope": self.scope,
            "credential_signing_alg_values_supported": alg_values,
            "vct": self.credential_type,
            "credential_definition": {
                "type": [self.credential_type],
                "@context": [self.credential_type],
            },
            "credential_metadata": {
                "display": self.display.to_metadata(),
                "claims": [claim.to_metadata() for claim in self.claim_mappings],
            },
        }

    def __repr__(self) -> str:
        """Return a short representation of the configuration."""
        return (
            f"<CredentialConfiguration(id={self.id}, "
            f"configuration_id={self.configuration_id}, format={self.format})>"
        )


class CredentialConfigurationSchema(BaseModelSchema):
    """Schema for CredentialConfiguration."""

    class Meta:
        """CredentialConfigurationSchema metadata."""

        model_class = CredentialConfiguration

    id = fields.Str(required=False, metadata={"example": "3f2a6b1e"})
    configuration_id = fields.Str(
        required=True, metadata={"example": "UniversityDegreeCredential"}
    )
    format = fields.Str(required=True, metadata={"example": "jwt_vc_json"})
    scope = fields.Str(
        required=False, allow_none=True, metadata={"example": "university_degree"}
    )
    credential_type = fields.Str(
        required=False, allow_none=True, metadata={"example": "UniversityDegree"}
    )
    credential_signing_alg_values_supported = fields.Str(
        required=False, allow_none=True, metadata={"example": "RS256"}
    )
    credential_metadata = fields.Raw(
        required=False,
        allow_none=True,
        metadata={
            "example": {
                "display": [
                    {
                        "name": "University Degree",
                        "locale": "en-US",
                        "background_color": "#12107c",
                        "text_color": "#FFFFFF",
                    }
                ]
            }
        },
    )
    claim_mappings = fields.List(
        fields.Nested(ClaimMappingSchema()),
        required=False,
        allow_none=True,
    )
