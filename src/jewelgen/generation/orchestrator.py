"""Generation orchestrator.

Entry point used by the routing layer once quota and plan checks have
passed. It picks the adapter for the request's modality and provider key,
drives the two-step sketch pipeline when configured, and returns a single
:class:`GenerationResult`. Failures surface as
:class:`~.generation_errors.OrchestrationError` subclasses produced by the
adapters; the orchestrator only fills in ``provider_key`` when missing.

Dispatch rules:

* ``CAMERA``: camera edit provider with ``[camera, sketch?]`` images;
* ``SKETCH`` + ``DIRECT_EDIT``: edit provider with the sketch;
* ``SKETCH`` + ``TWO_STEP_DESCRIBE``: vision description, enhanced, sent to
  the requested text provider. A vision failure aborts the request;
* ``TEXT``: requested provider or the configured default.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from uuid import uuid4

import structlog

from ..config import GenerationConfig
from ..providers.providers_base import ProviderAdapter
from ..providers.providers_factory import build_adapters
from ..vision.vision_client import VisionClient
from ..vision.vision_sketch import SketchInterpreter
from .generation_errors import (
    InvalidRequest,
    OrchestrationError,
    OrchestrationTimeout,
    UnknownProvider,
)
from .generation_models import (
    GenerationRequest,
    GenerationResult,
    ImageInput,
    Modality,
    SketchMode,
)
from .prompt_enhancer import enhance

logger = structlog.get_logger(__name__)


def validate_request(request: GenerationRequest) -> None:
    """Check modality requirements before any I/O."""

    if request.modality is Modality.SKETCH and not request.sketch_raster:
        raise InvalidRequest("sketch generation requires a sketch image")
    if request.modality is Modality.CAMERA and not request.camera_raster:
        raise InvalidRequest("camera generation requires a camera image")


@dataclass(slots=True)
class Orchestrator:
    """Route generation requests to provider adapters."""

    adapters: Mapping[str, ProviderAdapter]
    default_provider: str
    sketch_mode: SketchMode = SketchMode.TWO_STEP_DESCRIBE
    sketch_interpreter: SketchInterpreter | None = None
    edit_provider: str = "openai_image_edit"
    camera_provider: str = "openai_camera_edit"
    request_deadline_seconds: float | None = None
    enhancer: Callable[[str], str] = field(default=enhance)

    def __post_init__(self) -> None:
        if self.sketch_mode is SketchMode.TWO_STEP_DESCRIBE and self.sketch_interpreter is None:
            raise ValueError("two-step sketch mode requires a sketch interpreter")

    def target_provider(self, request: GenerationRequest) -> str:
        """Return the provider key that will serve ``request``."""

        if request.modality is Modality.CAMERA:
            return self.camera_provider
        if request.modality is Modality.SKETCH and self.sketch_mode is SketchMode.DIRECT_EDIT:
            return self.edit_provider
        return request.provider_key or self.default_provider

    async def orchestrate(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation and return its image reference."""

        validate_request(request)
        key = self.target_provider(request)
        with structlog.contextvars.bound_contextvars(
            generation_id=uuid4().hex, modality=request.modality.value, provider_key=key
        ):
            try:
                async with asyncio.timeout(self.request_deadline_seconds):
                    return await self._dispatch(request, key)
            except TimeoutError as exc:
                logger.warning(
                    "orchestrator.deadline_exceeded", deadline=self.request_deadline_seconds
                )
                raise OrchestrationTimeout(
                    f"generation exceeded {self.request_deadline_seconds}s deadline",
                    provider_key=key,
                ) from exc

    async def _dispatch(self, request: GenerationRequest, key: str) -> GenerationResult:
        adapter = self._resolve(key)

        if request.modality is Modality.CAMERA:
            images: list[ImageInput] = [request.camera_raster]  # type: ignore[list-item]
            if request.sketch_raster:
                images.append(request.sketch_raster)
            images.extend(request.aux_images)
            return await self._call(key, adapter, self.enhancer(request.raw_prompt), images)

        if request.modality is Modality.SKETCH:
            if self.sketch_mode is SketchMode.DIRECT_EDIT:
                return await self._call(
                    key,
                    adapter,
                    self.enhancer(request.raw_prompt),
                    [request.sketch_raster],  # type: ignore[list-item]
                )
            return await self._two_step_sketch(request, key, adapter)

        return await self._call(
            key, adapter, self.enhancer(request.raw_prompt), request.aux_images
        )

    async def _two_step_sketch(
        self, request: GenerationRequest, key: str, adapter: ProviderAdapter
    ) -> GenerationResult:
        interpreter = self.sketch_interpreter
        if interpreter is None:
            raise ValueError("two-step sketch mode requires a sketch interpreter")
        logger.info("orchestrator.sketch.describe")
        description = await interpreter.describe(
            request.sketch_raster,  # type: ignore[arg-type]
            request.raw_prompt,
        )
        return await self._call(key, adapter, self.enhancer(description), request.aux_images)

    def _resolve(self, key: str) -> ProviderAdapter:
        adapter = self.adapters.get(key)
        if adapter is None:
            logger.warning("orchestrator.unknown_provider")
            raise UnknownProvider(f"Unknown generator: {key}", provider_key=key)
        return adapter

    async def _call(
        self,
        key: str,
        adapter: ProviderAdapter,
        prompt: str,
        images: Sequence[ImageInput],
    ) -> GenerationResult:
        log = logger.bind(family=adapter.family.value)
        log.info("orchestrator.dispatch", image_count=len(images))
        try:
            result = await adapter.generate(prompt, images)
        except OrchestrationError as exc:
            if exc.provider_key is None:
                exc.provider_key = key
            log.warning(
                "orchestrator.failed",
                kind=exc.kind.value,
                http_status=exc.http_status,
                retryable=exc.retryable,
            )
            raise
        log.info("orchestrator.success", inline=result.image_bytes is not None)
        return result


def create_orchestrator(config: GenerationConfig | None = None) -> Orchestrator:
    """Wire adapters and the sketch interpreter from configuration."""

    cfg = config or GenerationConfig.build_default()
    return Orchestrator(
        adapters=build_adapters(cfg),
        default_provider=cfg.default_provider,
        sketch_mode=cfg.sketch_mode,
        sketch_interpreter=SketchInterpreter(VisionClient.from_settings(cfg.vision, cfg)),
        edit_provider=cfg.edit_provider,
        camera_provider=cfg.camera_provider,
        request_deadline_seconds=cfg.request_deadline_seconds,
    )


__all__ = ["Orchestrator", "create_orchestrator", "validate_request"]
