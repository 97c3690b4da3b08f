"""Data structures for the generation pipeline."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum


class Modality(StrEnum):
    """Kind of creative input driving a generation."""

    TEXT = "text"
    SKETCH = "sketch"
    CAMERA = "camera"


class SketchMode(StrEnum):
    """Strategy used for sketch-driven generations."""

    DIRECT_EDIT = "direct_edit"
    TWO_STEP_DESCRIBE = "two_step_describe"


class JobStatus(StrEnum):
    """Lifecycle states of an async-poll provider job."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


ImageInput = bytes | str


@dataclass(slots=True)
class GenerationRequest:
    """Single generation call as received from the routing layer.

    Raster fields accept raw bytes, base64 text or ``data:`` URLs; adapters
    normalize them with :func:`decode_image_payload`.
    """

    raw_prompt: str = ""
    modality: Modality = Modality.TEXT
    provider_key: str | None = None
    sketch_raster: ImageInput | None = None
    sketch_vector: str | None = None
    camera_raster: ImageInput | None = None
    aux_images: list[ImageInput] = field(default_factory=list)


@dataclass(slots=True)
class GenerationResult:
    """Finished image reference returned to the caller.

    Exactly one of ``image_url`` / ``image_bytes`` is populated.
    """

    provider_key: str
    image_url: str | None = None
    image_bytes: bytes | None = None
    content_type: str = "image/png"

    def __post_init__(self) -> None:
        if (self.image_url is None) == (self.image_bytes is None):
            raise ValueError("exactly one of image_url or image_bytes must be set")

    def as_data_url(self) -> str:
        """Return the URL, or inline bytes rendered as a ``data:`` URL."""

        if self.image_url is not None:
            return self.image_url
        encoded = base64.b64encode(self.image_bytes or b"").decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass(slots=True)
class ProviderJob:
    """In-flight job tracked by the polling engine."""

    request_id: str
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    poll_count: int = 0


__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "ImageInput",
    "JobStatus",
    "Modality",
    "ProviderJob",
    "SketchMode",
]
