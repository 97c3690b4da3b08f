"""Failure semantics every adapter family shares at the HTTP boundary."""

from __future__ import annotations

import httpx
import pytest

from src.jewelgen.generation.generation_errors import (
    TransportFailure,
    VendorError,
    VendorProtocolError,
    VendorResponseUnparsable,
)
from src.jewelgen.generation.polling import PollingEngine
from src.jewelgen.providers import (
    AsyncPollAdapter,
    MultipartEditAdapter,
    SyncJsonAdapter,
    SyncWaitAdapter,
)
from src.jewelgen.providers.providers_http import extract_error
from tests.mocks.vendors import TRANSPARENT_PNG_BYTES, DummyHTTPResponse, no_sleep

pytestmark = pytest.mark.unit

SUBMITTED = DummyHTTPResponse(200, {"request_id": "abc"})
COMPLETED = DummyHTTPResponse(200, {"status": "COMPLETED"})


def _sync_json():
    return SyncJsonAdapter(provider_key="openai", api_url="https://x/gen", api_key="k")


def _sync_wait():
    return SyncWaitAdapter(
        provider_key="replicate", api_url="https://x/models", model="m/n", api_key="k"
    )


def _async_poll():
    return AsyncPollAdapter(
        provider_key="fal",
        api_url="https://x/queue",
        model="fal-ai/flux-pro",
        api_key="k",
        poller=PollingEngine(interval_seconds=0, max_polls=2, sleep=no_sleep),
    )


def _multipart_edit():
    return MultipartEditAdapter(provider_key="openai_image_edit", api_url="https://x/edit", api_key="k")


# (adapter factory, responses leading to the final call, 2xx body lacking an image)
FAMILIES = [
    pytest.param(_sync_json, [], {"data": []}, id="sync_json"),
    pytest.param(_sync_wait, [], {"status": "succeeded", "output": []}, id="sync_wait"),
    pytest.param(_async_poll, [SUBMITTED, COMPLETED], {"images": [{}]}, id="async_poll"),
    pytest.param(_multipart_edit, [], {"data": [{}]}, id="multipart_edit"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("factory", "lead", "body"), FAMILIES)
async def test_success_without_image_is_protocol_error(vendor, factory, lead, body) -> None:
    adapter = factory()
    vendor.queue(*lead, DummyHTTPResponse(200, body))

    with pytest.raises(VendorProtocolError) as exc_info:
        await adapter.generate("ring", [TRANSPARENT_PNG_BYTES])

    assert not isinstance(exc_info.value, VendorResponseUnparsable)
    assert exc_info.value.provider_key == adapter.provider_key


@pytest.mark.asyncio
@pytest.mark.parametrize(("factory", "lead", "body"), FAMILIES)
async def test_non_success_json_is_vendor_error(vendor, factory, lead, body) -> None:
    adapter = factory()
    vendor.queue(*lead, DummyHTTPResponse(500, {"error": {"message": "upstream exploded"}}))

    with pytest.raises(VendorError) as exc_info:
        await adapter.generate("ring", [TRANSPARENT_PNG_BYTES])

    assert exc_info.value.vendor_message == "upstream exploded"
    assert exc_info.value.http_status == 500


@pytest.mark.asyncio
@pytest.mark.parametrize(("factory", "lead", "body"), FAMILIES)
async def test_non_json_body_is_unparsable(vendor, factory, lead, body) -> None:
    adapter = factory()
    vendor.queue(*lead, DummyHTTPResponse(200, None, text="upstream maintenance"))

    with pytest.raises(VendorResponseUnparsable) as exc_info:
        await adapter.generate("ring", [TRANSPARENT_PNG_BYTES])

    assert exc_info.value.vendor_message == "upstream maintenance"


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"error": {"type": "invalid_request_error", "message": "bad size"}}, "invalid_request_error bad size"),
        ({"error": "quota exceeded"}, "quota exceeded"),
        ({"detail": "not found"}, "not found"),
        ({"detail": [{"msg": "field required"}, {"msg": "too long"}]}, "field required; too long"),
        ({"message": "rate limited"}, "rate limited"),
        ({"status": "ok"}, None),
        (["not", "a", "dict"], None),
    ],
)
def test_extract_error_shapes(body, expected) -> None:
    assert extract_error(body) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(("factory", "lead", "body"), FAMILIES)
async def test_undecodable_body_is_unparsable(vendor, factory, lead, body) -> None:
    adapter = factory()
    vendor.queue(*lead, httpx.DecodingError("bad gzip"))

    with pytest.raises(VendorResponseUnparsable) as exc_info:
        await adapter.generate("ring", [TRANSPARENT_PNG_BYTES])

    assert exc_info.value.kind.value == "vendor_protocol_error"
    assert exc_info.value.provider_key == adapter.provider_key
    assert "could not be decoded" in exc_info.value.message


@pytest.mark.asyncio
async def test_transport_errors_keep_their_own_kind(vendor) -> None:
    vendor.queue(httpx.RemoteProtocolError("peer closed connection"))

    with pytest.raises(TransportFailure):
        await _sync_json().generate("ring")
