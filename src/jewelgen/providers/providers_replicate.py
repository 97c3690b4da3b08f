"""Replicate predictions adapter.

The request carries ``Prefer: wait`` so Replicate holds the connection until
the prediction finishes; there is no local polling loop. A 2xx body can still
carry a vendor ``error`` which is surfaced as :class:`VendorError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence

from ..config import ProviderFamily
from ..generation.generation_errors import VendorError
from ..generation.generation_models import GenerationResult, ImageInput
from .providers_base import ProviderAdapter
from .providers_http import ensure_success, protocol_violation, require_credential, send

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncWaitAdapter(ProviderAdapter):
    """POST a prediction and let the vendor block until it is ready."""

    family: ClassVar[ProviderFamily] = ProviderFamily.SYNC_WAIT

    provider_key: str
    api_url: str
    model: str
    api_key: str | None
    params: dict[str, Any] = field(default_factory=dict)
    credential: str = "REPLICATE_API_TOKEN"
    timeout_seconds: float = 120.0
    log: logging.Logger = field(default_factory=lambda: logger)

    @property
    def predictions_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.model}/predictions"

    async def generate(
        self, prompt: str, aux_images: Sequence[ImageInput] = ()
    ) -> GenerationResult:
        api_key = require_credential(
            self.api_key, provider_key=self.provider_key, credential=self.credential
        )
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }
        body = {"input": {"prompt": prompt, **self.params}}
        self.log.info(
            "replicate.request.start",
            extra={"provider_key": self.provider_key, "model": self.model, "prompt_len": len(prompt)},
        )

        response = await send(
            "POST",
            self.predictions_url,
            provider_key=self.provider_key,
            timeout=self.timeout_seconds,
            headers=headers,
            json=body,
        )
        data = ensure_success(response, provider_key=self.provider_key, stage="prediction")
        if not isinstance(data, dict):
            raise protocol_violation(
                "prediction body is not an object",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )

        error = data.get("error")
        if error:
            self.log.warning(
                "replicate.prediction.failed",
                extra={"provider_key": self.provider_key, "provider_error_message": str(error)},
            )
            raise VendorError(
                f"{self.provider_key} generation failed: {error}",
                provider_key=self.provider_key,
                vendor_message=str(error),
                http_status=response.status_code,
            )

        url = _first_output(data.get("output"))
        if not url:
            raise protocol_violation(
                f"no output URL in response (status={data.get('status')})",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )
        self.log.info(
            "replicate.request.success",
            extra={"provider_key": self.provider_key, "prediction_id": data.get("id")},
        )
        return GenerationResult(provider_key=self.provider_key, image_url=url)


def _first_output(output: Any) -> str | None:
    if isinstance(output, str) and output:
        return output
    if isinstance(output, list):
        for item in output:
            if isinstance(item, str) and item:
                return item
    return None
