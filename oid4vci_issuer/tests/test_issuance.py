import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import SUPER_TENANT, InMemoryConfigurationStore
from oid4vci_issuer.error import (
    ConfigurationNotFoundError,
    InvalidRequestError,
    IssuanceCancelledError,
    MissingCredentialError,
    ServiceUnavailableError,
    StoreUnavailableError,
    UnsupportedFormatError,
)
from oid4vci_issuer.format_handler import FormatHandlers
from oid4vci_issuer.issuance import (
    CredentialIssuanceService,
    IssuanceContext,
    IssuanceRequest,
)
from oid4vci_issuer.models.credential_config import CredentialConfiguration


class RecordingHandler:
    format = "jwt_vc_json"

    def __init__(self, credential="header.payload.signature"):
        self.credential = credential
        self.contexts = []

    async def issue_credential(self, context):
        self.contexts.append(context)
        return self.credential


def _service(store, handler, **kwargs):
    handlers = FormatHandlers()
    handlers.register(handler)
    return CredentialIssuanceService(store, handlers.freeze(), **kwargs)


@pytest.mark.asyncio
async def test_issue_credential(config_store, degree_config):
    handler = RecordingHandler()
    service = _service(config_store, handler)

    response = await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))

    assert response.credential == "header.payload.signature"
    assert response.c_nonce_expires_in is None
    assert handler.contexts == [
        IssuanceContext(
            tenant_domain=SUPER_TENANT,
            configuration_id="7d3c1b2a",
            credential_configuration=degree_config,
        )
    ]


@pytest.mark.asyncio
async def test_issue_credential_with_c_nonce_expires_in(config_store):
    service = _service(config_store, RecordingHandler(), c_nonce_expires_in=86400)

    response = await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))

    assert response.serialize()["c_nonce_expires_in"] == 86400


@pytest.mark.asyncio
async def test_invalid_requests(config_store):
    service = _service(config_store, RecordingHandler())

    with pytest.raises(InvalidRequestError):
        await service.issue_credential(None)
    with pytest.raises(InvalidRequestError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, ""))
    with pytest.raises(InvalidRequestError):
        await service.issue_credential(IssuanceRequest("", "cfg-1"))


@pytest.mark.asyncio
async def test_missing_store():
    service = _service(None, RecordingHandler())

    with pytest.raises(ServiceUnavailableError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))


@pytest.mark.asyncio
async def test_configuration_not_found(config_store):
    handler = RecordingHandler()
    service = _service(config_store, handler)

    with pytest.raises(ConfigurationNotFoundError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "missing"))
    assert handler.contexts == []


@pytest.mark.asyncio
async def test_unsupported_format():
    handler = RecordingHandler()
    store = InMemoryConfigurationStore(
        {
            SUPER_TENANT: [
                CredentialConfiguration(
                    id="9", configuration_id="cfg-2", format="unknown_fmt"
                )
            ]
        }
    )
    service = _service(store, handler)

    with pytest.raises(UnsupportedFormatError) as exc_info:
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-2"))

    assert exc_info.value.format == "unknown_fmt"
    assert handler.contexts == []


@pytest.mark.asyncio
async def test_store_failure():
    store = MagicMock()
    store.list = AsyncMock(side_effect=OSError("unreachable"))
    service = _service(store, RecordingHandler())

    with pytest.raises(StoreUnavailableError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))


@pytest.mark.asyncio
async def test_cancelled():
    store = MagicMock()
    store.list = AsyncMock(side_effect=asyncio.CancelledError())
    service = _service(store, RecordingHandler())

    with pytest.raises(IssuanceCancelledError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))


@pytest.mark.asyncio
async def test_handler_without_credential(config_store):
    service = _service(config_store, RecordingHandler(credential=None))

    with pytest.raises(MissingCredentialError):
        await service.issue_credential(IssuanceRequest(SUPER_TENANT, "cfg-1"))
