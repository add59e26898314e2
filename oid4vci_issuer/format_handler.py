"""CredentialFormatHandler interface and registry."""

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Protocol

from .error import OID4VCIError, UnsupportedFormatError

if TYPE_CHECKING:
    from .issuance import IssuanceContext

LOGGER = logging.getLogger(__name__)


class CredentialFormatHandler(Protocol):
    """Signing strategy for one credential format."""

    @property
    def format(self) -> str:
        """Return the credential format this handler issues."""
        ...

    async def issue_credential(self, context: "IssuanceContext") -> str:
        """Issue a credential and return its serialized form."""
        ...


class RegistryFrozenError(OID4VCIError):
    """Raised when registering a handler after the registry was frozen."""


class FormatHandlers:
    """Registry for credential format handlers.

    Populated while the plugin is being set up, then frozen; lookups are safe
    to share between concurrent requests afterwards.
    """

    def __init__(
        self, handlers: Optional[Mapping[str, CredentialFormatHandler]] = None
    ):
        """Initialize the handler registry."""
        self._handlers: Dict[str, CredentialFormatHandler] = (
            dict(handlers) if handlers else {}
        )
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the registry still accepts handlers."""
        return self._frozen

    @property
    def formats(self):
        """Return the registered formats, in registration order."""
        return tuple(self._handlers)

    def register(self, handler: CredentialFormatHandler, format: Optional[str] = None):
        """Register a handler under its own format, or under ``format``."""
        if self._frozen:
            raise RegistryFrozenError(
                "Credential format handlers can not be registered after startup"
            )
        format = format or handler.format
        if format in self._handlers:
            LOGGER.warning("Replacing credential format handler for %s", format)
        self._handlers[format] = handler
        LOGGER.info("Registered credential format handler for %s", format)

    def freeze(self) -> "FormatHandlers":
        """Stop accepting new handlers."""
        self._frozen = True
        return self

    def handler_for_format(self, format: Optional[str]) -> CredentialFormatHandler:
        """Return the handler for the given format."""
        handler = self._handlers.get(format) if format else None
        if not handler:
            raise UnsupportedFormatError(format)
        return handler

    def __contains__(self, format: str) -> bool:
        """Check whether a format has a handler."""
        return format in self._handlers
