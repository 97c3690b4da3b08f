"""Production-cost estimation of a generated piece via a vision prompt.

The model is asked for four comma-separated USD prices. Older prompt
versions answered with a single range such as ``$1,000 - $2,000``; when fewer
than four numbers can be read, the first amount is expanded into four prices
with fixed multipliers.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

import structlog

from ..config import GenerationConfig
from ..generation.generation_errors import VisionMalformed
from .vision_client import VisionClient

logger = structlog.get_logger(__name__)

FALLBACK_MULTIPLIERS = (0.5, 0.7, 1.0, 1.6)

_NOISE = re.compile(r"\$|USD|usd|\s")
_NON_NUMERIC = re.compile(r"[^0-9.]")
_AMOUNT = re.compile(r"\$?([0-9][0-9,.]+)")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_number(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True, slots=True)
class PriceEstimate:
    """Four integer USD prices, lowest first as returned by the model."""

    prices: tuple[int, int, int, int]

    def as_csv(self) -> str:
        return ",".join(str(price) for price in self.prices)


def parse_price_estimate(raw: str) -> PriceEstimate:
    """Parse the model answer into a :class:`PriceEstimate`.

    Raises:
        ValueError: No amount could be read from ``raw``.
    """

    cleaned = _NOISE.sub("", raw)
    cleaned = re.sub(r"[;|]", ",", cleaned)
    cleaned = re.sub(r",+", ",", cleaned)

    numbers: list[int] = []
    for part in cleaned.split(","):
        part = part.strip()
        if not part:
            continue
        # a label without digits ("Price") reads as 0, a lone "." is dropped
        digits = _NON_NUMERIC.sub("", part)
        value = _to_number(digits) if digits else 0.0
        if value is not None:
            numbers.append(_round_half_up(value))

    if len(numbers) >= 4:
        return PriceEstimate(prices=tuple(numbers[:4]))  # type: ignore[arg-type]

    for match in _AMOUNT.finditer(raw):
        amount = _to_number(match.group(1).replace(",", ""))
        if amount is None:
            continue
        base = _round_half_up(amount)
        prices = tuple(_round_half_up(base * factor) for factor in FALLBACK_MULTIPLIERS)
        return PriceEstimate(prices=prices)  # type: ignore[arg-type]

    raise ValueError("Failed to parse price estimation response")


@dataclass(slots=True)
class PriceEstimator:
    """Ask the appraiser prompt for a price range of a finished image."""

    client: VisionClient

    async def estimate(self, image_url: str, prompt: str = "") -> PriceEstimate:
        raw = await self.client.complete(text=prompt or "", image_url=image_url)
        try:
            estimate = parse_price_estimate(raw)
        except ValueError as exc:
            logger.error("estimate.parse.failed", raw_preview=raw[:200])
            raise VisionMalformed(
                f"{self.client.provider_key}: failed to parse price estimation response",
                provider_key=self.client.provider_key,
                vendor_message=raw[:200],
            ) from exc
        logger.info("estimate.success", prices=estimate.as_csv())
        return estimate


def create_price_estimator(config: GenerationConfig | None = None) -> PriceEstimator:
    """Build an estimator bound to the configured appraiser prompt."""

    cfg = config or GenerationConfig.build_default()
    return PriceEstimator(
        VisionClient.from_settings(cfg.estimate, cfg, provider_key="openai_estimate")
    )


__all__ = ["PriceEstimate", "PriceEstimator", "create_price_estimator", "parse_price_estimate"]
