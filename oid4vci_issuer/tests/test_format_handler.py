import pytest

from oid4vci_issuer.error import UnsupportedFormatError
from oid4vci_issuer.format_handler import FormatHandlers, RegistryFrozenError


class StubHandler:
    def __init__(self, format):
        self.format = format

    async def issue_credential(self, context):
        return f"{self.format}-credential"


class TestFormatHandlers:
    """Tests for the format handler registry."""

    def test_dispatch_by_format(self):
        jwt = StubHandler("jwt_vc_json")
        sd_jwt = StubHandler("dc+sd-jwt")
        handlers = FormatHandlers({"jwt_vc_json": jwt})
        handlers.register(sd_jwt)

        assert handlers.handler_for_format("jwt_vc_json") is jwt
        assert handlers.handler_for_format("dc+sd-jwt") is sd_jwt
        assert handlers.formats == ("jwt_vc_json", "dc+sd-jwt")

    def test_register_under_alias(self):
        jwt = StubHandler("jwt_vc_json")
        handlers = FormatHandlers()
        handlers.register(jwt)
        handlers.register(jwt, "jwt_vc")

        assert handlers.handler_for_format("jwt_vc") is jwt
        assert "jwt_vc" in handlers

    def test_unknown_format(self):
        handlers = FormatHandlers()
        handlers.register(StubHandler("jwt_vc_json"))

        with pytest.raises(UnsupportedFormatError) as exc_info:
            handlers.handler_for_format("unknown_fmt")
        assert exc_info.value.format == "unknown_fmt"
        assert exc_info.value.client_error

    def test_no_prefix_or_case_fallback(self):
        handlers = FormatHandlers()
        handlers.register(StubHandler("jwt_vc_json"))

        for format in ("JWT_VC_JSON", "jwt_vc", "jwt_vc_json ", "", None):
            with pytest.raises(UnsupportedFormatError):
                handlers.handler_for_format(format)

    def test_frozen_registry_rejects_registration(self):
        handlers = FormatHandlers()
        handlers.register(StubHandler("jwt_vc_json"))

        assert handlers.freeze() is handlers
        assert handlers.frozen
        with pytest.raises(RegistryFrozenError):
            handlers.register(StubHandler("mso_mdoc"))
        assert handlers.formats == ("jwt_vc_json",)
