"""Public routes for OID4VCI credential issuance.

The super tenant is served from the bare paths; other tenants are addressed
with a ``/t/{tenant_domain}`` prefix.
"""

import logging
from typing import Optional

from acapy_agent.admin.request_context import AdminRequestContext
from acapy_agent.messaging.models.openapi import OpenAPISchema
from aiohttp import web
from aiohttp_apispec import docs, request_schema, response_schema
from marshmallow import fields

from .config import SUPER_TENANT_DOMAIN, Config
from .error import (
    ConfigurationNotFoundError,
    OID4VCIError,
    UnsupportedFormatError,
)
from .issuance import CredentialIssuanceService, IssuanceRequest
from .metadata import CredentialIssuerMetadataProcessor
from .response import CredentialResponseSchema

LOGGER = logging.getLogger(__name__)

TENANT_SUBPATH = "/t/{tenant_domain}"


class CredentialRequestSchema(OpenAPISchema):
    """Request schema for the /credential endpoint.

    OpenID4VCI 1.0 § 8.2: Credential Request
    https://openid.net/specs/openid-4-verifiable-credential-issuance-1_0.html#section-8.2
    """

    credential_configuration_id = fields.Str(
        required=True,
        metadata={
            "description": "Identifier of a credential configuration published in "
            "credential_configurations_supported.",
            "example": "UniversityDegreeCredential",
        },
    )


class CredentialIssuerMetadataSchema(OpenAPISchema):
    """Credential issuer metadata schema.

    OpenID4VCI 1.0 § 12.2.4: Credential Issuer Metadata Parameters
    https://openid.net/specs/openid-4-verifiable-credential-issuance-1_0.html#section-12.2.4
    """

    credential_issuer = fields.Str(
        required=True,
        metadata={"description": "The credential issuer identifier."},
    )
    credential_endpoint = fields.Str(
        required=True,
        metadata={"description": "URL of the Credential Endpoint."},
    )
    authorization_servers = fields.List(
        fields.Str(),
        required=False,
        metadata={
            "description": "OAuth 2.0 Authorization Servers the Credential Issuer "
            "relies on for authorization."
        },
    )
    credential_configurations_supported = fields.Dict(
        required=True,
        metadata={
            "description": "Credential configurations keyed by their identifier."
        },
    )


def _error_response(error: str, description: str, status: int) -> web.Response:
    return web.json_response(
        {"error": error, "error_description": description}, status=status
    )


def _oid4vci_error_response(err: OID4VCIError) -> web.Response:
    if isinstance(err, ConfigurationNotFoundError):
        error = "unknown_credential_configuration"
    elif isinstance(err, UnsupportedFormatError):
        error = "unsupported_credential_format"
    elif err.client_error:
        error = "invalid_request"
    else:
        error = "server_error"
    return _error_response(error, err.roll_up, 400 if err.client_error else 500)


def tenant_domain_from_request(request: web.Request) -> str:
    """Return the tenant addressed by the request path."""
    context: AdminRequestContext = request["context"]
    tenant_domain: Optional[str] = request.match_info.get("tenant_domain")
    if tenant_domain:
        return tenant_domain
    config = context.inject_or(Config)
    return config.super_tenant_domain if config else SUPER_TENANT_DOMAIN


@docs(tags=["oid4vci"], summary="Issue a credential")
@request_schema(CredentialRequestSchema())
@response_schema(CredentialResponseSchema(), 200)
async def issue_credential(request: web.Request):
    """The Credential Endpoint issues a Credential.

    The caller has already been authenticated and scoped to the tenant.
    """
    context: AdminRequestContext = request["context"]
    tenant_domain = tenant_domain_from_request(request)

    try:
        body = await request.json()
    except ValueError:
        LOGGER.error("Invalid JSON payload in credential request")
        return _error_response("invalid_request", "Invalid JSON format", 400)

    if not isinstance(body, dict) or not body.get("credential_configuration_id"):
        return _error_response(
            "invalid_request",
            "Missing required field: credential_configuration_id",
            400,
        )

    service = context.inject_or(CredentialIssuanceService)
    if not service:
        LOGGER.error("Credential issuance service is unavailable")
        return _error_response(
            "server_error", "Credential issuance service is unavailable", 500
        )

    try:
        response = await service.issue_credential(
            IssuanceRequest(
                tenant_domain=tenant_domain,
                credential_configuration_id=str(body["credential_configuration_id"]),
                scope=body.get("scope"),
            )
        )
    except OID4VCIError as err:
        if err.client_error:
            LOGGER.debug(
                "Credential issuance failed for tenant: %s",
                tenant_domain,
                exc_info=True,
            )
        else:
            LOGGER.error(
                "Credential issuance failed for tenant %s: %s",
                tenant_domain,
                err.roll_up,
            )
        return _oid4vci_error_response(err)

    return web.json_response(response.serialize())


@docs(tags=["oid4vci"], summary="Get credential issuer metadata")
@response_schema(CredentialIssuerMetadataSchema(), 200)
async def credential_issuer_metadata(request: web.Request):
    """Credential issuer metadata endpoint.

    OpenID4VCI 1.0 § 12.2: Credential Issuer Metadata
    https://openid.net/specs/openid-4-verifiable-credential-issuance-1_0.html#section-12.2
    """
    context: AdminRequestContext = request["context"]
    tenant_domain = tenant_domain_from_request(request)

    processor = context.inject_or(CredentialIssuerMetadataProcessor)
    if not processor:
        LOGGER.error("Credential issuer metadata processor is unavailable")
        return _error_response(
            "server_error", "Credential issuer metadata is unavailable", 500
        )

    try:
        metadata = await processor.get_metadata(tenant_domain)
    except OID4VCIError as err:
        LOGGER.error(
            "Error building credential issuer metadata for tenant %s: %s",
            tenant_domain,
            err.roll_up,
        )
        return _oid4vci_error_response(err)

    return web.json_response(metadata)


async def register(app: web.Application):
    """Register the public routes for the super tenant and tenant-qualified paths."""
    routes = []
    for subpath in ("", TENANT_SUBPATH):
        routes.extend(
            [
                web.post(f"{subpath}/oid4vci/credential", issue_credential),
                web.get(
                    f"{subpath}/oid4vci/.well-known/openid-credential-issuer",
                    credential_issuer_metadata,
                    allow_head=False,
                ),
                web.get(
                    f"{subpath}/.well-known/openid-credential-issuer",
                    credential_issuer_metadata,
                    allow_head=False,
                ),
            ]
        )
    app.add_routes(routes)
