"""Chat-completion client for vision prompts (image + text in, text out)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from ..config import GenerationConfig, VisionSettings
from ..generation.generation_errors import MissingCredentials, VisionMalformed, VisionUnavailable
from ..providers.providers_http import extract_error

logger = structlog.get_logger(__name__)

VISION_PROVIDER_KEY = "openai_vision"


@dataclass(slots=True)
class VisionClient:
    """Send one developer instruction plus a user text/image pair."""

    api_url: str
    model: str
    api_key: str | None
    system_prompt: str
    max_tokens: int = 300
    credential: str = "OPENAI_API_KEY"
    timeout_seconds: float = 60.0
    provider_key: str = VISION_PROVIDER_KEY

    @classmethod
    def from_settings(
        cls, settings: VisionSettings, config: GenerationConfig, *, provider_key: str = VISION_PROVIDER_KEY
    ) -> "VisionClient":
        return cls(
            api_url=settings.api_url,
            model=settings.model,
            api_key=config.resolve_credential(settings.credential),
            system_prompt=settings.system_prompt,
            max_tokens=settings.max_tokens,
            credential=settings.credential,
            timeout_seconds=config.request_timeout_seconds,
            provider_key=provider_key,
        )

    def build_body(self, *, text: str, image_url: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "developer", "content": self.system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": text},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            "max_tokens": self.max_tokens,
        }

    async def complete(self, *, text: str, image_url: str) -> str:
        """Return the stripped completion text.

        Raises:
            VisionUnavailable: Endpoint unreachable or non-2xx status.
            VisionMalformed: Body cannot be decoded, is not JSON or has no completion text.
        """

        if not self.api_key:
            raise MissingCredentials(
                f"{self.provider_key}: credential {self.credential} is not configured",
                provider_key=self.provider_key,
            )
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = self.build_body(text=text, image_url=image_url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.api_url, headers=headers, json=body)
        except httpx.TransportError as exc:
            logger.warning(
                "vision.transport.failure", provider_key=self.provider_key, error=exc.__class__.__name__
            )
            raise VisionUnavailable(
                f"{self.provider_key}: cannot reach vision endpoint ({exc.__class__.__name__})",
                provider_key=self.provider_key,
            ) from exc
        except httpx.DecodingError as exc:
            logger.error("vision.response.undecodable", provider_key=self.provider_key, error=str(exc))
            raise VisionMalformed(
                f"{self.provider_key}: vision response body could not be decoded",
                provider_key=self.provider_key,
            ) from exc

        if not 200 <= response.status_code < 300:
            detail = _safe_error_detail(response)
            logger.error(
                "vision.response.error",
                provider_key=self.provider_key,
                http_status=response.status_code,
                detail=detail,
            )
            raise VisionUnavailable(
                f"{self.provider_key}: vision API error {response.status_code}",
                provider_key=self.provider_key,
                vendor_message=detail,
                http_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("vision.response.unparsable", provider_key=self.provider_key)
            raise VisionMalformed(
                f"{self.provider_key}: vision response is not valid JSON",
                provider_key=self.provider_key,
                http_status=response.status_code,
            ) from exc

        content = _completion_text(data)
        if not content:
            logger.error("vision.response.malformed", provider_key=self.provider_key)
            raise VisionMalformed(
                f"{self.provider_key}: invalid response from vision API",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )
        return content


def _completion_text(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    return content.strip() or None


def _safe_error_detail(response: httpx.Response) -> str | None:
    try:
        return extract_error(response.json())
    except ValueError:
        return None


__all__ = ["VisionClient", "VISION_PROVIDER_KEY"]
