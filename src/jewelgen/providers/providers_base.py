"""Abstract provider adapter definition."""

from abc import ABC, abstractmethod
from typing import ClassVar, Sequence

from ..config import ProviderFamily
from ..generation.generation_models import GenerationResult, ImageInput


class ProviderAdapter(ABC):
    """Uniform generation contract implemented once per vendor family."""

    family: ClassVar[ProviderFamily]
    provider_key: str

    @abstractmethod
    async def generate(
        self, prompt: str, aux_images: Sequence[ImageInput] = ()
    ) -> GenerationResult:
        """Turn an already enhanced prompt into a finished image reference.

        Implementations raise :class:`~..generation.generation_errors.OrchestrationError`
        subclasses only; adapters that do not support image inputs ignore
        ``aux_images``.
        """
