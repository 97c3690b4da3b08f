from __future__ import annotations

import httpx
import pytest

from src.jewelgen.generation.generation_errors import (
    OrchestrationTimeout,
    TransportFailure,
    VendorError,
    VendorProtocolError,
)
from src.jewelgen.generation.polling import PollingEngine
from src.jewelgen.providers.providers_fal import AsyncPollAdapter
from tests.mocks.vendors import DummyHTTPResponse, no_sleep

pytestmark = pytest.mark.unit

MODEL_URL = "https://queue.fal.run/fal-ai/flux-pro"


def _adapter(max_polls: int = 10) -> AsyncPollAdapter:
    return AsyncPollAdapter(
        provider_key="fal",
        api_url="https://queue.fal.run",
        model="fal-ai/flux-pro",
        version="v1.1-ultra",
        api_key="fal-key",
        params={"num_images": 1},
        poller=PollingEngine(interval_seconds=15, max_polls=max_polls, sleep=no_sleep),
    )


def _submitted(request_id: str = "abc") -> DummyHTTPResponse:
    return DummyHTTPResponse(200, {"request_id": request_id, "status": "IN_QUEUE"})


@pytest.mark.asyncio
async def test_submit_poll_and_fetch_result(vendor) -> None:
    vendor.queue(
        _submitted(),
        DummyHTTPResponse(200, {"status": "IN_QUEUE"}),
        DummyHTTPResponse(200, {"status": "IN_PROGRESS"}),
        DummyHTTPResponse(200, {"status": "COMPLETED"}),
        DummyHTTPResponse(
            200, {"images": [{"url": "https://fal.media/out.png", "content_type": "image/png"}]}
        ),
    )

    result = await _adapter().generate("diamond ring")

    assert result.image_url == "https://fal.media/out.png"
    assert result.provider_key == "fal"

    submit, *status_calls, fetch = vendor.requests
    assert submit["method"] == "POST"
    assert submit["url"] == f"{MODEL_URL}/v1.1-ultra"
    assert submit["headers"]["Authorization"] == "Key fal-key"
    assert submit["json"] == {"prompt": "diamond ring", "num_images": 1}
    assert [call["url"] for call in status_calls] == [f"{MODEL_URL}/requests/abc/status"] * 3
    assert all(call["method"] == "GET" for call in status_calls)
    assert fetch["url"] == f"{MODEL_URL}/requests/abc"


@pytest.mark.asyncio
async def test_submit_without_request_id_stops_immediately(vendor) -> None:
    vendor.queue(DummyHTTPResponse(200, {"status": "IN_QUEUE"}))

    with pytest.raises(VendorProtocolError, match="request_id"):
        await _adapter().generate("ring")

    assert len(vendor.requests) == 1


@pytest.mark.asyncio
async def test_failed_status_is_vendor_error(vendor) -> None:
    vendor.queue(_submitted(), DummyHTTPResponse(200, {"status": "FAILED"}))

    with pytest.raises(VendorError) as exc_info:
        await _adapter().generate("ring")

    assert exc_info.value.provider_key == "fal"
    assert len(vendor.calls("GET")) == 1


@pytest.mark.asyncio
async def test_status_without_status_field_is_protocol_error(vendor) -> None:
    vendor.queue(_submitted(), DummyHTTPResponse(200, {"queue_position": 3}))

    with pytest.raises(VendorProtocolError, match="no status field"):
        await _adapter().generate("ring")


@pytest.mark.asyncio
async def test_result_error_is_vendor_error(vendor) -> None:
    vendor.queue(
        _submitted(),
        DummyHTTPResponse(200, {"status": "COMPLETED"}),
        DummyHTTPResponse(200, {"error": "content policy violation"}),
    )

    with pytest.raises(VendorError) as exc_info:
        await _adapter().generate("ring")

    assert exc_info.value.vendor_message == "content policy violation"


@pytest.mark.asyncio
async def test_result_without_images_is_protocol_error(vendor) -> None:
    vendor.queue(
        _submitted(),
        DummyHTTPResponse(200, {"status": "COMPLETED"}),
        DummyHTTPResponse(200, {"images": []}),
    )

    with pytest.raises(VendorProtocolError, match="no image URL"):
        await _adapter().generate("ring")


@pytest.mark.asyncio
async def test_never_completing_job_times_out(vendor) -> None:
    vendor.queue(_submitted(), *[DummyHTTPResponse(200, {"status": "IN_PROGRESS"})] * 3)

    with pytest.raises(OrchestrationTimeout):
        await _adapter(max_polls=3).generate("ring")

    assert len(vendor.calls("GET")) == 3


@pytest.mark.asyncio
async def test_status_transport_error_is_not_retried(vendor) -> None:
    vendor.queue(_submitted(), httpx.ReadTimeout("timed out"))

    with pytest.raises(TransportFailure):
        await _adapter().generate("ring")

    assert len(vendor.requests) == 2
