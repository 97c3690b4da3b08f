"""jewelgen: generation provider orchestrator for AI jewelry renders.

Turns a text prompt, sketch or camera photo into one finished image
reference by coordinating structurally different image-generation vendors
behind a single adapter contract.
"""

from .config import GenerationConfig
from .generation.generation_errors import ErrorKind, OrchestrationError
from .generation.generation_models import (
    GenerationRequest,
    GenerationResult,
    Modality,
    SketchMode,
)
from .generation.orchestrator import Orchestrator, create_orchestrator

__all__ = [
    "ErrorKind",
    "GenerationConfig",
    "GenerationRequest",
    "GenerationResult",
    "Modality",
    "OrchestrationError",
    "Orchestrator",
    "SketchMode",
    "create_orchestrator",
]
