"""Vision prompts: sketch reading and price estimation."""

from .vision_client import VisionClient
from .vision_estimate import (
    PriceEstimate,
    PriceEstimator,
    create_price_estimator,
    parse_price_estimate,
)
from .vision_sketch import SketchInterpreter

__all__ = [
    "PriceEstimate",
    "PriceEstimator",
    "SketchInterpreter",
    "VisionClient",
    "create_price_estimator",
    "parse_price_estimate",
]
