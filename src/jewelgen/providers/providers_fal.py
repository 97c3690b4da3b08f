"""fal.ai queue adapter (submit, poll status, fetch result)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence

from ..config import ProviderFamily
from ..generation.generation_errors import VendorError
from ..generation.generation_models import GenerationResult, ImageInput, ProviderJob
from ..generation.polling import PollingEngine
from .providers_base import ProviderAdapter
from .providers_http import ensure_success, protocol_violation, require_credential, send

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AsyncPollAdapter(ProviderAdapter):
    """Submit to the fal queue and drive the request through :class:`PollingEngine`."""

    family: ClassVar[ProviderFamily] = ProviderFamily.ASYNC_POLL

    provider_key: str
    api_url: str
    model: str
    api_key: str | None
    version: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    credential: str = "FAL_KEY"
    timeout_seconds: float = 120.0
    poller: PollingEngine = field(default_factory=PollingEngine)
    log: logging.Logger = field(default_factory=lambda: logger)

    @property
    def model_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.model}"

    @property
    def submit_url(self) -> str:
        if self.version:
            return f"{self.model_url}/{self.version}"
        return self.model_url

    async def generate(
        self, prompt: str, aux_images: Sequence[ImageInput] = ()
    ) -> GenerationResult:
        api_key = require_credential(
            self.api_key, provider_key=self.provider_key, credential=self.credential
        )
        headers = {"Authorization": f"Key {api_key}"}

        job = await self._submit(prompt, headers=headers)
        self.log.info(
            "fal.queue.submitted",
            extra={"provider_key": self.provider_key, "request_id": job.request_id},
        )

        async def fetch_status() -> str | None:
            return await self._fetch_status(job.request_id, headers=headers)

        async def fetch_result() -> GenerationResult:
            return await self._fetch_result(job.request_id, headers=headers)

        return await self.poller.run(
            job,
            provider_key=self.provider_key,
            fetch_status=fetch_status,
            fetch_result=fetch_result,
        )

    async def _submit(self, prompt: str, *, headers: dict[str, str]) -> ProviderJob:
        response = await send(
            "POST",
            self.submit_url,
            provider_key=self.provider_key,
            timeout=self.timeout_seconds,
            headers={**headers, "Content-Type": "application/json"},
            json={"prompt": prompt, **self.params},
        )
        data = ensure_success(response, provider_key=self.provider_key, stage="submit")
        request_id = data.get("request_id") if isinstance(data, dict) else None
        if not request_id:
            raise protocol_violation(
                "no request_id in submit response",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )
        return ProviderJob(request_id=str(request_id))

    async def _fetch_status(self, request_id: str, *, headers: dict[str, str]) -> str | None:
        url = f"{self.model_url}/requests/{request_id}/status"
        response = await send(
            "GET", url, provider_key=self.provider_key, timeout=self.timeout_seconds, headers=headers
        )
        data = ensure_success(response, provider_key=self.provider_key, stage="status check")
        if not isinstance(data, dict) or "status" not in data:
            raise protocol_violation(
                "status response has no status field",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )
        status = data.get("status")
        return None if status is None else str(status)

    async def _fetch_result(self, request_id: str, *, headers: dict[str, str]) -> GenerationResult:
        url = f"{self.model_url}/requests/{request_id}"
        response = await send(
            "GET", url, provider_key=self.provider_key, timeout=self.timeout_seconds, headers=headers
        )
        data = ensure_success(response, provider_key=self.provider_key, stage="result fetch")
        if not isinstance(data, dict):
            raise protocol_violation(
                "result body is not an object",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )

        error = data.get("error")
        if error:
            raise VendorError(
                f"{self.provider_key} generation failed: {error}",
                provider_key=self.provider_key,
                vendor_message=str(error),
                http_status=response.status_code,
            )

        images = data.get("images")
        first = images[0] if isinstance(images, list) and images else None
        url_value = first.get("url") if isinstance(first, dict) else None
        if not url_value:
            raise protocol_violation(
                "no image URL in result",
                provider_key=self.provider_key,
                http_status=response.status_code,
            )
        content_type = first.get("content_type") or "image/png"
        self.log.info(
            "fal.request.success",
            extra={"provider_key": self.provider_key, "request_id": request_id},
        )
        return GenerationResult(
            provider_key=self.provider_key, image_url=str(url_value), content_type=content_type
        )
