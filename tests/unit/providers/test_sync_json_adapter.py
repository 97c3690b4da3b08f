from __future__ import annotations

import httpx
import pytest

from src.jewelgen.generation.generation_errors import (
    MissingCredentials,
    TransportFailure,
    VendorError,
    VendorProtocolError,
    VendorResponseUnparsable,
)
from src.jewelgen.providers.providers_openai import SyncJsonAdapter
from tests.mocks.vendors import TRANSPARENT_PNG_BASE64, TRANSPARENT_PNG_BYTES, DummyHTTPResponse

pytestmark = pytest.mark.unit

API_URL = "https://api.openai.com/v1/images/generations"


def _adapter(api_key: str | None = "sk-test") -> SyncJsonAdapter:
    return SyncJsonAdapter(
        provider_key="openai",
        api_url=API_URL,
        api_key=api_key,
        params={"model": "dall-e-3", "size": "1024x1024"},
        timeout_seconds=30,
    )


@pytest.mark.asyncio
async def test_generate_returns_image_url(vendor) -> None:
    vendor.queue(DummyHTTPResponse(200, {"data": [{"url": "https://cdn.openai/ring.png"}]}))

    result = await _adapter().generate("ring prompt")

    assert result.provider_key == "openai"
    assert result.image_url == "https://cdn.openai/ring.png"
    assert result.image_bytes is None

    (request,) = vendor.requests
    assert request["method"] == "POST"
    assert request["url"] == API_URL
    assert request["headers"]["Authorization"] == "Bearer sk-test"
    assert request["json"] == {"prompt": "ring prompt", "model": "dall-e-3", "size": "1024x1024"}
    assert vendor.client_timeouts == [30]


@pytest.mark.asyncio
async def test_generate_falls_back_to_inline_base64(vendor) -> None:
    vendor.queue(DummyHTTPResponse(200, {"data": [{"b64_json": TRANSPARENT_PNG_BASE64}]}))

    result = await _adapter().generate("ring prompt")

    assert result.image_url is None
    assert result.image_bytes == TRANSPARENT_PNG_BYTES


@pytest.mark.asyncio
async def test_empty_data_is_protocol_error(vendor) -> None:
    vendor.queue(DummyHTTPResponse(200, {"data": []}))

    with pytest.raises(VendorProtocolError) as exc_info:
        await _adapter().generate("ring prompt")

    assert not isinstance(exc_info.value, VendorResponseUnparsable)
    assert exc_info.value.provider_key == "openai"
    assert exc_info.value.http_status == 200


@pytest.mark.asyncio
async def test_vendor_error_message_is_preserved(vendor) -> None:
    vendor.queue(
        DummyHTTPResponse(
            400,
            {
                "error": {
                    "type": "invalid_request_error",
                    "message": "Your request was rejected by the safety system.",
                }
            },
        )
    )

    with pytest.raises(VendorError) as exc_info:
        await _adapter().generate("ring prompt")

    error = exc_info.value
    assert error.http_status == 400
    assert error.vendor_message == (
        "invalid_request_error Your request was rejected by the safety system."
    )
    assert "status=400" in error.message


@pytest.mark.asyncio
async def test_non_json_body_is_unparsable(vendor) -> None:
    vendor.queue(DummyHTTPResponse(502, None, text="<html>Bad gateway</html>"))

    with pytest.raises(VendorResponseUnparsable) as exc_info:
        await _adapter().generate("ring prompt")

    assert exc_info.value.http_status == 502
    assert exc_info.value.vendor_message == "<html>Bad gateway</html>"


@pytest.mark.asyncio
async def test_transport_error_is_mapped(vendor) -> None:
    vendor.queue(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportFailure) as exc_info:
        await _adapter().generate("ring prompt")

    assert exc_info.value.retryable is True
    assert exc_info.value.provider_key == "openai"


@pytest.mark.asyncio
async def test_missing_key_fails_before_network(vendor) -> None:
    with pytest.raises(MissingCredentials, match="OPENAI_API_KEY"):
        await _adapter(api_key=None).generate("ring prompt")

    assert vendor.requests == []
