"""HTTP helpers shared by provider adapters.

They translate the three failure families at the boundary:

* ``httpx.TransportError`` becomes :class:`TransportFailure`;
* a body that is not JSON, or whose ``Content-Encoding`` cannot be decoded,
  becomes :class:`VendorResponseUnparsable`;
* a non-2xx JSON body becomes :class:`VendorError` with the vendor text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..generation.generation_errors import (
    MissingCredentials,
    TransportFailure,
    VendorError,
    VendorProtocolError,
    VendorResponseUnparsable,
)

logger = logging.getLogger(__name__)

BODY_PREVIEW_LIMIT = 500


async def send(
    method: str,
    url: str,
    *,
    provider_key: str,
    timeout: float,
    **kwargs: Any,
) -> httpx.Response:
    """Perform one request with a fresh client and map transport and decoding errors."""

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            if method == "GET":
                return await client.get(url, **kwargs)
            return await client.post(url, **kwargs)
    except httpx.TransportError as exc:
        logger.warning(
            "provider.transport.failure provider=%s method=%s error=%s",
            provider_key,
            method,
            exc.__class__.__name__,
            extra={"provider_key": provider_key, "url": url},
        )
        raise TransportFailure(
            f"{provider_key}: cannot reach vendor ({exc.__class__.__name__})",
            provider_key=provider_key,
        ) from exc
    except httpx.DecodingError as exc:
        # body arrived but its Content-Encoding could not be decoded
        raise protocol_violation(
            f"response body could not be decoded ({exc})",
            provider_key=provider_key,
            error_cls=VendorResponseUnparsable,
        ) from exc


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def parse_json(response: httpx.Response, *, provider_key: str) -> Any:
    """Decode a JSON body or raise :class:`VendorResponseUnparsable`."""

    try:
        return response.json()
    except ValueError as exc:
        preview = _preview(response)
        logger.error(
            "provider.response.unparsable provider=%s status=%s body_preview=%s",
            provider_key,
            response.status_code,
            preview,
            extra={"provider_key": provider_key, "http_status": response.status_code},
        )
        raise VendorResponseUnparsable(
            f"{provider_key}: response is not valid JSON",
            provider_key=provider_key,
            vendor_message=preview or None,
            http_status=response.status_code,
        ) from exc


def extract_error(data: Any) -> str | None:
    """Pull a human readable message out of common vendor error shapes."""

    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        message = str(error.get("message") or "").strip()
        err_type = str(error.get("type") or "").strip()
        return " ".join(part for part in (err_type, message) if part) or None
    if isinstance(error, str) and error.strip():
        return error.strip()
    detail = data.get("detail")
    if isinstance(detail, str) and detail.strip():
        return detail.strip()
    if isinstance(detail, list) and detail:
        return "; ".join(
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in detail
        )
    message = data.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def ensure_success(response: httpx.Response, *, provider_key: str, stage: str) -> Any:
    """Return the parsed JSON body of a 2xx response.

    Non-2xx responses raise :class:`VendorError` when the body is JSON and
    :class:`VendorResponseUnparsable` otherwise.
    """

    data = parse_json(response, provider_key=provider_key)
    if is_success(response):
        return data
    detail = extract_error(data)
    logger.error(
        "provider.response.error provider=%s stage=%s status=%s detail=%s",
        provider_key,
        stage,
        response.status_code,
        detail,
        extra={
            "provider_key": provider_key,
            "http_status": response.status_code,
            "provider_error_message": detail,
        },
    )
    raise VendorError(
        f"{provider_key} {stage} failed (status={response.status_code}): {detail or 'Unknown error'}",
        provider_key=provider_key,
        vendor_message=detail,
        http_status=response.status_code,
    )


def protocol_violation(
    message: str,
    *,
    provider_key: str,
    http_status: int | None = None,
    error_cls: type[VendorProtocolError] = VendorProtocolError,
) -> VendorProtocolError:
    """Log a response-shape mismatch and build the matching error."""

    logger.error(
        "provider.response.protocol_violation provider=%s detail=%s",
        provider_key,
        message,
        extra={"provider_key": provider_key, "http_status": http_status},
    )
    return error_cls(
        f"{provider_key}: {message}",
        provider_key=provider_key,
        http_status=http_status,
    )


def require_credential(api_key: str | None, *, provider_key: str, credential: str) -> str:
    if not api_key:
        raise MissingCredentials(
            f"{provider_key}: credential {credential} is not configured",
            provider_key=provider_key,
        )
    return api_key


def _preview(response: httpx.Response) -> str:
    text = getattr(response, "text", "") or ""
    return text[:BODY_PREVIEW_LIMIT]


__all__ = [
    "ensure_success",
    "extract_error",
    "is_success",
    "parse_json",
    "protocol_violation",
    "require_credential",
    "send",
]
