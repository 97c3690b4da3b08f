"""Sketch interpreter for the two-step sketch path."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ..generation.generation_errors import InvalidRequest
from ..generation.generation_models import ImageInput
from ..generation.media_helpers import to_data_url
from .vision_client import VisionClient

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class SketchInterpreter:
    """Turn a hand-drawn sketch into a jewelry description."""

    client: VisionClient

    async def describe(self, raster: ImageInput, user_hint: str = "") -> str:
        """Return a non-empty description of the jewelry in ``raster``.

        ``user_hint`` is the user's own text, passed alongside the image so the
        model can honour explicit materials or stones.
        """

        try:
            image_url = to_data_url(raster)
        except ValueError as exc:
            raise InvalidRequest(
                "sketch is not valid image data", provider_key=self.client.provider_key
            ) from exc

        logger.info("sketch.describe.start", hint_len=len(user_hint))
        description = await self.client.complete(text=user_hint, image_url=image_url)
        logger.info("sketch.describe.success", description_len=len(description))
        return description


__all__ = ["SketchInterpreter"]
