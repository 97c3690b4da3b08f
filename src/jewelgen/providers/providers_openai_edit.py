"""OpenAI image edits adapter (multipart upload, base64 output)."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence

from ..config import ProviderFamily
from ..generation.generation_errors import InvalidRequest
from ..generation.generation_models import GenerationResult, ImageInput
from ..generation.media_helpers import decode_image_payload
from .providers_base import ProviderAdapter
from .providers_http import ensure_success, protocol_violation, require_credential, send

logger = logging.getLogger(__name__)

FileField = tuple[str, tuple[str, bytes, str]]


@dataclass(slots=True)
class MultipartEditAdapter(ProviderAdapter):
    """Send input image(s) plus an instruction to the image edits endpoint."""

    family: ClassVar[ProviderFamily] = ProviderFamily.MULTIPART_EDIT

    provider_key: str
    api_url: str
    api_key: str | None
    params: dict[str, Any] = field(default_factory=dict)
    system_prompt: str | None = None
    credential: str = "OPENAI_API_KEY"
    timeout_seconds: float = 120.0
    log: logging.Logger = field(default_factory=lambda: logger)

    def build_prompt(self, prompt: str) -> str:
        """Place the fixed instruction before the enhanced prompt."""

        if not self.system_prompt:
            return prompt
        return f"{self.system_prompt}\n\n{prompt}"

    async def generate(
        self, prompt: str, aux_images: Sequence[ImageInput] = ()
    ) -> GenerationResult:
        if not aux_images:
            raise InvalidRequest(
                "image edit requires at least one input image", provider_key=self.provider_key
            )
        api_key = require_credential(
            self.api_key, provider_key=self.provider_key, credential=self.credential
        )

        files = _build_files(aux_images, provider_key=self.provider_key)
        data: dict[str, Any] = {"prompt": self.build_prompt(prompt)}
        for key, value in self.params.items():
            if value is not None:
                data[key] = str(value)

        self.log.info(
            "openai_edit.request.payload_meta "
            f"provider={self.provider_key} image_count={len(files)} "
            f"payload_bytes={sum(len(part[1][1]) for part in files)} prompt_len={len(prompt)}"
        )

        response = await send(
            "POST",
            self.api_url,
            provider_key=self.provider_key,
            timeout=self.timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"},
            data=data,
            files=files,
        )
        body = ensure_success(response, provider_key=self.provider_key, stage="image edit")
        payload = self._parse_response(body, http_status=response.status_code)
        self.log.info("openai_edit.request.success", extra={"provider_key": self.provider_key})
        return GenerationResult(
            provider_key=self.provider_key,
            image_bytes=payload,
            content_type=_content_type_for_format(self.params.get("output_format")),
        )

    def _parse_response(self, body: Any, *, http_status: int) -> bytes:
        items = body.get("data") if isinstance(body, dict) else None
        first = items[0] if isinstance(items, list) and items else None
        b64_json = first.get("b64_json") if isinstance(first, dict) else None
        if not b64_json:
            raise protocol_violation(
                "no base64 image data in response",
                provider_key=self.provider_key,
                http_status=http_status,
            )
        try:
            return base64.b64decode(b64_json, validate=True)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise protocol_violation(
                "response payload is not valid base64",
                provider_key=self.provider_key,
                http_status=http_status,
            ) from exc


def _build_files(images: Sequence[ImageInput], *, provider_key: str) -> list[FileField]:
    # a single upload uses "image", several use the array form
    field_name = "image" if len(images) == 1 else "image[]"
    files: list[FileField] = []
    for idx, image in enumerate(images, start=1):
        try:
            raw = decode_image_payload(image)
        except ValueError as exc:
            raise InvalidRequest(
                f"input image #{idx} is not valid image data", provider_key=provider_key
            ) from exc
        mime = sniff_mime(raw)
        files.append((field_name, (f"image-{idx}.{mime.split('/')[-1]}", raw, mime)))
    return files


def sniff_mime(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def _content_type_for_format(output_format: str | None) -> str:
    fmt = (output_format or "png").lower()
    if fmt in {"jpeg", "jpg"}:
        return "image/jpeg"
    if fmt == "webp":
        return "image/webp"
    return "image/png"
