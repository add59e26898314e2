"""Credential issuance."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .config_lookup import ConfigurationResolver
from .error import (
    InvalidRequestError,
    IssuanceCancelledError,
    ServiceUnavailableError,
)
from .format_handler import FormatHandlers
from .models.credential_config import CredentialConfiguration
from .providers import ConfigurationStore
from .response import CredentialIssuanceResponse

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuanceRequest:
    """A request for a credential by a tenant-scoped, authenticated caller."""

    tenant_domain: str
    credential_configuration_id: str
    scope: Optional[str] = None


@dataclass(frozen=True)
class IssuanceContext:
    """Everything a format handler needs to issue one credential."""

    tenant_domain: str
    configuration_id: str
    credential_configuration: CredentialConfiguration


class CredentialIssuanceService:
    """Issues credentials for stored credential configurations."""

    def __init__(
        self,
        config_store: Optional[ConfigurationStore],
        format_handlers: FormatHandlers,
        *,
        c_nonce_expires_in: Optional[int] = None,
    ):
        """Initialize the service."""
        self.config_store = config_store
        self.format_handlers = format_handlers
        self.c_nonce_expires_in = c_nonce_expires_in

    async def issue_credential(
        self, request: Optional[IssuanceRequest]
    ) -> CredentialIssuanceResponse:
        """Issue the credential described by the request's configuration."""
        if request is None:
            raise InvalidRequestError("Credential issuance request cannot be None")
        if not request.tenant_domain:
            raise InvalidRequestError("Credential issuance request has no tenant")
        if not request.credential_configuration_id:
            raise InvalidRequestError(
                "Missing required field: credential_configuration_id"
            )
        if self.config_store is None:
            raise ServiceUnavailableError(
                "VC credential configuration store is not available"
            )

        try:
            configuration = await ConfigurationResolver(self.config_store).resolve(
                request.tenant_domain, request.credential_configuration_id
            )
            handler = self.format_handlers.handler_for_format(configuration.format)

            context = IssuanceContext(
                tenant_domain=request.tenant_domain,
                configuration_id=configuration.id,
                credential_configuration=configuration,
            )
            LOGGER.debug(
                "Issuing %s credential for configuration %s of tenant %s",
                configuration.format,
                configuration.configuration_id,
                request.tenant_domain,
            )
            credential = await handler.issue_credential(context)
        except asyncio.CancelledError as err:
            raise IssuanceCancelledError(
                "Credential issuance cancelled for tenant: "
                f"{request.tenant_domain}"
            ) from err

        builder = CredentialIssuanceResponse.builder().c_nonce_expires_in(
            self.c_nonce_expires_in
        )
        if credential is not None:
            builder.credential(credential)
        return builder.build()
