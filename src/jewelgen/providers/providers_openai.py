"""OpenAI image generations adapter (single POST, image in response body)."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence

from ..config import ProviderFamily
from ..generation.generation_models import GenerationResult, ImageInput
from .providers_base import ProviderAdapter
from .providers_http import ensure_success, protocol_violation, require_credential, send

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncJsonAdapter(ProviderAdapter):
    """POST ``{prompt, **params}`` and read ``data[0].url`` from the answer."""

    family: ClassVar[ProviderFamily] = ProviderFamily.SYNC_JSON

    provider_key: str
    api_url: str
    api_key: str | None
    params: dict[str, Any] = field(default_factory=dict)
    credential: str = "OPENAI_API_KEY"
    timeout_seconds: float = 120.0
    log: logging.Logger = field(default_factory=lambda: logger)

    async def generate(
        self, prompt: str, aux_images: Sequence[ImageInput] = ()
    ) -> GenerationResult:
        api_key = require_credential(
            self.api_key, provider_key=self.provider_key, credential=self.credential
        )
        body = {"prompt": prompt, **self.params}
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self.log.info(
            "openai.request.start",
            extra={
                "provider_key": self.provider_key,
                "model": self.params.get("model"),
                "prompt_len": len(prompt),
            },
        )

        response = await send(
            "POST",
            self.api_url,
            provider_key=self.provider_key,
            timeout=self.timeout_seconds,
            headers=headers,
            json=body,
        )
        data = ensure_success(response, provider_key=self.provider_key, stage="generation")
        result = self._parse_response(data, http_status=response.status_code)
        self.log.info("openai.request.success", extra={"provider_key": self.provider_key})
        return result

    def _parse_response(self, data: Any, *, http_status: int) -> GenerationResult:
        images = data.get("data") if isinstance(data, dict) else None
        first = images[0] if isinstance(images, list) and images else None
        if not isinstance(first, dict):
            raise protocol_violation(
                "no image in response", provider_key=self.provider_key, http_status=http_status
            )

        url = first.get("url")
        if isinstance(url, str) and url:
            return GenerationResult(provider_key=self.provider_key, image_url=url)

        # gpt-image models only return inline data
        b64_json = first.get("b64_json")
        if isinstance(b64_json, str) and b64_json:
            try:
                payload = base64.b64decode(b64_json, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise protocol_violation(
                    "inline image is not valid base64",
                    provider_key=self.provider_key,
                    http_status=http_status,
                ) from exc
            return GenerationResult(provider_key=self.provider_key, image_bytes=payload)

        raise protocol_violation(
            "no image URL in response", provider_key=self.provider_key, http_status=http_status
        )
