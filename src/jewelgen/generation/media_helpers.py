"""Helpers for normalizing image payloads handed to providers."""

from __future__ import annotations

import base64
import binascii
import re

from .generation_models import ImageInput

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")


def strip_data_url_prefix(value: str) -> str:
    """Remove a ``data:image/...;base64,`` prefix if present."""

    return _DATA_URL_PREFIX.sub("", value, count=1)


def decode_image_payload(data: ImageInput) -> bytes:
    """Return raw image bytes from bytes, base64 text or a data URL.

    Raw bytes are returned untouched unless they carry a data URL prefix.

    Raises:
        ValueError: If textual input is not valid base64.
    """

    if isinstance(data, bytes):
        if not data.startswith(b"data:"):
            return data
        text = data.decode("ascii")
    else:
        text = data
    try:
        return base64.b64decode(strip_data_url_prefix(text.strip()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("image payload is not valid base64") from exc


def to_data_url(data: ImageInput, *, mime: str = "image/png") -> str:
    """Render an image payload as a ``data:`` URL for vision requests."""

    if isinstance(data, str) and data.startswith("data:"):
        return data
    if isinstance(data, bytes) and data.startswith(b"data:"):
        return data.decode("ascii")
    raw = data if isinstance(data, bytes) else decode_image_payload(data)
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


__all__ = ["decode_image_payload", "strip_data_url_prefix", "to_data_url"]
