"""Fixed style suffix applied to every prompt before it reaches a provider."""

from __future__ import annotations

PROMPT_PREFIX = "High quality jewelry: "
PROMPT_SUFFIX = (
    ". Professional photo, high detailed, ultra realistic, WHITE PLAIN background, "
    "high resolution, close up. Only jewelry piece in a scene, nothing else, isolated."
)


def enhance(raw_prompt: str) -> str:
    """Wrap ``raw_prompt`` with the jewelry product-photo instructions.

    Callers apply this exactly once per request; it is not idempotent.
    """

    return f"{PROMPT_PREFIX}{raw_prompt}{PROMPT_SUFFIX}"


__all__ = ["enhance"]
