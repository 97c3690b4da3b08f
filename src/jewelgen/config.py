"""Configuration for the generation orchestrator.

Defaults reproduce the production provider catalog: OpenAI image
generations as the default text-to-image backend, Replicate with a
``Prefer: wait`` request, fal.ai queue polling every 15 seconds for at most
10 attempts, and OpenAI image edits for sketch and camera inputs. Secrets are
injected via ``JEWELGEN_PROVIDER_KEYS`` or the vendor's usual environment
variable.
"""

from __future__ import annotations

import os
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .generation.generation_models import SketchMode


class ProviderFamily(StrEnum):
    """Protocol families supported by the adapter layer."""

    SYNC_JSON = "sync_json"
    SYNC_WAIT = "sync_wait"
    ASYNC_POLL = "async_poll"
    MULTIPART_EDIT = "multipart_edit"


SKETCH_EDIT_SYSTEM_PROMPT = (
    "You are the professional jewelry sketch reader. Your mission is to view uploaded "
    "sketch file, interpret it and generate a photorealistic high quality image of the "
    "jewelry on a white background. You must try to identify jewelry type, shape, curves, "
    "style, materials, stones from the sketch if no additional information is provided in "
    "user prompt. We work only with 18k gold (white, rose, yellow) and natural stones "
    "(Diamonds, Rubies, Blue Sapphires, Emeralds) stones in sketch can marked with "
    "corresponding colors. Jewelry types: Ring, Bracelet, Necklace, Pendant, Earrings, "
    "Watch. You must generate jewelry piece anyway, you must identify the jewelry from the "
    "sketch (use the most likely type of jewelry, materials, stones). Use proper lighting "
    "to showcase the piece. Make it look like a professional product photo for a luxury "
    "jewelry brand."
)

CAMERA_EDIT_SYSTEM_PROMPT = (
    "You are a professional jewelry designer. The first image is a photo of a real "
    "jewelry piece or a reference object; an optional second image is a hand-drawn sketch "
    "with requested changes. Produce a photorealistic high quality product photo of the "
    "resulting jewelry piece on a white background. We work only with 18k gold (white, "
    "rose, yellow) and natural stones (Diamonds, Rubies, Blue Sapphires, Emeralds)."
)

SKETCH_VISION_SYSTEM_PROMPT = (
    "You are the professional jewelry sketch reader. Your mission is to view uploaded "
    "sketch file, interpret it and create a detailed description of the jewelry in the "
    "sketch. This description will be later used for AI jewelry generation. You must try "
    "to identify jewelry type, materials, stones from the sketch if no additional "
    "information is provided in user prompt. We work only with 18k gold (white, rose, "
    "yellow) and natural stones (Diamonds, Rubies, Blue Sapphires, Emeralds) stones in "
    "sketch can marked with corresponding colors. Jewelry types: Ring, Bracelet, Necklace, "
    "Pendant, Earrings, Watch. You must provide response anyway, you must identify the "
    "jewelry (use the most likely type of jewelry, materials, stones). Only give exact pure "
    "description of jewelry, nothing else, do not mention sketch."
)

ESTIMATE_SYSTEM_PROMPT = (
    "You are the professional jewelry appraiser. Your mission is to estimate uploaded "
    "jewelry design in terms of production cost. You must try to estimate jewelry based on "
    "approximate gold weight and stones quantity and total Carat from the image if no "
    "additional information is provided in user prompt. We work only with 18k gold (white, "
    "rose, yellow) and natural or lab grown stones (Diamonds, Rubies, Blue Sapphires, "
    "Emeralds). Consider if a jewelry has most likely spherical / 3D type of form (not "
    "flat), then it most likely has same stones quantity on the other (not visible) side, "
    "then simply double the visible quantity of stones. OUR COSTING SYSTEM: 1 gram of 18k "
    "gold - $140, 1 Carat of natural stones - $1,400, 1 Carat of lab grown stones - $320. "
    "Try to be as close to the price range as possible. Only give four comma-separated "
    "integer USD prices from lowest to highest, nothing else, do not mention image. "
    "Example: 120,180,950,2400"
)


class ProviderSettings(BaseModel):
    """Static configuration of a single provider key."""

    family: ProviderFamily
    api_url: str
    model: str | None = None
    version: str | None = None
    credential: str = Field(
        description="Name of the credential in provider_keys / environment.",
    )
    params: dict[str, Any] = Field(default_factory=dict)
    system_prompt: str | None = None
    enabled: bool = True


class VisionSettings(BaseModel):
    """Chat-completion endpoint used for sketch reading and estimation."""

    api_url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o-mini"
    credential: str = "OPENAI_API_KEY"
    system_prompt: str = SKETCH_VISION_SYSTEM_PROMPT
    max_tokens: int = Field(default=300, ge=1)


def _default_providers() -> dict[str, ProviderSettings]:
    openai_generations = ProviderSettings(
        family=ProviderFamily.SYNC_JSON,
        api_url="https://api.openai.com/v1/images/generations",
        credential="OPENAI_API_KEY",
        params={"model": "dall-e-3", "size": "1024x1024", "quality": "hd", "style": "natural"},
    )
    return {
        "openai": openai_generations,
        "openai_dalle": openai_generations.model_copy(deep=True),
        "openai_image": ProviderSettings(
            family=ProviderFamily.SYNC_JSON,
            api_url="https://api.openai.com/v1/images/generations",
            credential="OPENAI_API_KEY",
            params={"model": "gpt-image-1", "size": "1024x1024", "quality": "high"},
        ),
        "replicate": ProviderSettings(
            family=ProviderFamily.SYNC_WAIT,
            api_url="https://api.replicate.com/v1/models",
            model="black-forest-labs/flux-1.1-pro-ultra",
            credential="REPLICATE_API_TOKEN",
            params={
                "raw": True,
                "num_images": 1,
                "enable_safety_checker": True,
                "safety_tolerance": 2,
                "output_format": "png",
                "aspect_ratio": "1:1",
            },
        ),
        "fal": ProviderSettings(
            family=ProviderFamily.ASYNC_POLL,
            api_url="https://queue.fal.run",
            model="fal-ai/flux-pro",
            version="v1.1-ultra",
            credential="FAL_KEY",
            params={
                "sync_mode": False,
                "num_images": 1,
                "enable_safety_checker": True,
                "raw": True,
                "safety_tolerance": 2,
                "output_format": "png",
                "aspect_ratio": "1:1",
            },
        ),
        "openai_image_edit": ProviderSettings(
            family=ProviderFamily.MULTIPART_EDIT,
            api_url="https://api.openai.com/v1/images/edits",
            credential="OPENAI_API_KEY",
            params={"model": "gpt-image-1", "size": "1024x1024", "quality": "high"},
            system_prompt=SKETCH_EDIT_SYSTEM_PROMPT,
        ),
        "openai_camera_edit": ProviderSettings(
            family=ProviderFamily.MULTIPART_EDIT,
            api_url="https://api.openai.com/v1/images/edits",
            credential="OPENAI_API_KEY",
            params={"model": "gpt-image-1", "size": "1024x1024", "quality": "high"},
            system_prompt=CAMERA_EDIT_SYSTEM_PROMPT,
        ),
    }


class GenerationConfig(BaseSettings):
    """Settings container for the orchestrator and its adapters."""

    model_config = SettingsConfigDict(env_prefix="JEWELGEN_", env_nested_delimiter="__")

    default_provider: str = Field(
        default="openai",
        description="Provider key used when a text request does not name one.",
    )
    sketch_mode: SketchMode = Field(
        default=SketchMode.TWO_STEP_DESCRIBE,
        description="Strategy for sketch-driven generations.",
    )
    edit_provider: str = Field(
        default="openai_image_edit",
        description="Multipart-edit provider used by direct sketch mode.",
    )
    camera_provider: str = Field(
        default="openai_camera_edit",
        description="Multipart-edit provider used for camera inputs.",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        ge=0.1,
        description="Per-call timeout applied to every outbound HTTP request.",
    )
    poll_interval_seconds: float = Field(
        default=15.0,
        ge=0.0,
        description="Delay between status polls of async providers.",
    )
    max_poll_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum number of status polls before giving up.",
    )
    poll_deadline_seconds: float | None = Field(
        default=180.0,
        gt=0,
        description="Wall-clock budget for a polling sequence (None disables).",
    )
    request_deadline_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional wall-clock budget for a whole orchestrate() call.",
    )
    provider_keys: dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of credential names to API keys.",
    )
    providers: dict[str, ProviderSettings] = Field(
        default_factory=_default_providers,
        description="Provider catalog keyed by provider key.",
    )
    vision: VisionSettings = Field(default_factory=VisionSettings)
    estimate: VisionSettings = Field(
        default_factory=lambda: VisionSettings(system_prompt=ESTIMATE_SYSTEM_PROMPT),
    )

    def resolve_credential(self, name: str) -> str | None:
        """Return the API key for ``name`` from settings or the environment."""

        return self.provider_keys.get(name) or os.getenv(name) or None

    @classmethod
    def build_default(cls) -> "GenerationConfig":
        """Construct configuration from the environment."""

        return cls()


__all__ = [
    "GenerationConfig",
    "ProviderFamily",
    "ProviderSettings",
    "VisionSettings",
]
