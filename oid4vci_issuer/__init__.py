"""OID4VCI credential issuer plugin."""

import logging

from acapy_agent.config.injection_context import InjectionContext
from acapy_agent.core.event_bus import Event, EventBus
from acapy_agent.core.profile import Profile
from acapy_agent.core.util import SHUTDOWN_EVENT_PATTERN, STARTUP_EVENT_PATTERN

from .config import Config
from .format_handler import FormatHandlers
from .issuance import CredentialIssuanceService
from .metadata import CredentialIssuerMetadataProcessor
from .server import IssuerServer
from .storage import (
    StorageCertificateStore,
    StorageConfigurationStore,
    StorageKeyStore,
)
from .tenants import ConfiguredTenantResolver
from .urls import TenantQualifiedUrlBuilder

LOGGER = logging.getLogger(__name__)


async def setup(context: InjectionContext):
    """Setup the plugin."""
    LOGGER.info("Setting up OID4VCI issuer plugin...")
    event_bus = context.inject(EventBus)
    event_bus.subscribe(STARTUP_EVENT_PATTERN, startup)
    event_bus.subscribe(SHUTDOWN_EVENT_PATTERN, shutdown)

    # Format plugins register their handlers into this registry from their
    # own setup(); it is frozen on startup.
    context.injector.bind_instance(FormatHandlers, FormatHandlers())


async def startup(profile: Profile, event: Event):
    """Startup event handler; wire the issuer services to storage."""
    from jwt_vc_json.format_handler import FORMAT, JwtVcJsonFormatHandler

    LOGGER.info("OID4VCI issuer startup event triggered: %s", event.topic)
    config = Config.from_settings(profile.settings)
    url_builder = TenantQualifiedUrlBuilder(
        config.endpoint, config.super_tenant_domain
    )

    # Include jwt_vc_json by default
    handlers = profile.inject(FormatHandlers)
    if FORMAT not in handlers:
        handlers.register(
            JwtVcJsonFormatHandler(
                url_builder=url_builder,
                tenant_resolver=ConfiguredTenantResolver(
                    config.tenants,
                    config.super_tenant_domain,
                    config.super_tenant_id,
                ),
                key_store=StorageKeyStore(profile),
                cert_store=StorageCertificateStore(profile),
            )
        )
    handlers.freeze()
    LOGGER.info("Credential formats available: %s", ", ".join(handlers.formats))

    config_store = StorageConfigurationStore(profile)
    injector = profile.context.injector
    injector.bind_instance(Config, config)
    injector.bind_instance(
        CredentialIssuanceService,
        CredentialIssuanceService(
            config_store,
            handlers,
            c_nonce_expires_in=config.c_nonce_expires_in,
        ),
    )
    injector.bind_instance(
        CredentialIssuerMetadataProcessor,
        CredentialIssuerMetadataProcessor(
            config_store,
            url_builder,
            super_tenant_domain=config.super_tenant_domain,
        ),
    )

    try:
        server = IssuerServer(config.host, config.port, profile.context, profile)
        injector.bind_instance(IssuerServer, server)
        await server.start()
    except Exception:
        LOGGER.exception("Unable to start OID4VCI issuer server")
        raise


async def shutdown(profile: Profile, event: Event):
    """Teardown the plugin."""
    server = profile.inject_or(IssuerServer)
    if server:
        await server.stop()
