"""Public HTTP server for the credential issuer endpoints."""

import logging
from typing import Optional

from acapy_agent.admin.request_context import AdminRequestContext
from acapy_agent.config.injection_context import InjectionContext
from acapy_agent.core.profile import Profile
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec

from .public_routes import register as public_routes_register

LOGGER = logging.getLogger(__name__)


class IssuerServer:
    """Serves the OID4VCI issuer routes on their own host and port."""

    def __init__(
        self,
        host: str,
        port: int,
        context: InjectionContext,
        root_profile: Profile,
    ):
        """Initialize the server.

        Args:
            host: Host to listen on
            port: Port to listen on
            context: The application context instance
            root_profile: The root profile instance
        """
        self.host = host
        self.port = port
        self.context = context
        self.profile = root_profile
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    async def make_application(self) -> web.Application:
        """Get the aiohttp application instance."""

        @web.middleware
        async def setup_context(request: web.Request, handler):
            request["context"] = AdminRequestContext(
                profile=self.profile, root_profile=self.profile
            )
            return await handler(request)

        app = web.Application(middlewares=[setup_context])
        await public_routes_register(app)

        setup_aiohttp_apispec(
            app=app,
            title="OID4VCI Credential Issuer",
            version="v1",
            swagger_path="/api/doc",
        )
        return app

    async def start(self) -> None:
        """Start the webserver."""
        self.app = await self.make_application()
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, host=self.host, port=self.port)

        try:
            await self.site.start()
        except OSError:
            await self.runner.cleanup()
            self.runner = None
            self.site = None
            raise

        LOGGER.info("OID4VCI issuer server listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        """Stop the webserver."""
        if self.runner:
            await self.runner.cleanup()
        self.runner = None
        self.site = None
