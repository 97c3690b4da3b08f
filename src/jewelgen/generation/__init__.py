"""Generation request models, error taxonomy and prompt handling.

The orchestrator itself lives in :mod:`.orchestrator` and is re-exported from
the top-level package.
"""

from .generation_errors import ErrorKind, OrchestrationError
from .generation_models import (
    GenerationRequest,
    GenerationResult,
    JobStatus,
    Modality,
    ProviderJob,
    SketchMode,
)
from .prompt_enhancer import enhance

__all__ = [
    "ErrorKind",
    "GenerationRequest",
    "GenerationResult",
    "JobStatus",
    "Modality",
    "OrchestrationError",
    "ProviderJob",
    "SketchMode",
    "enhance",
]
