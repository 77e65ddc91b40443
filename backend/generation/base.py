"""
Base class for image generation providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from .schemas import GenerationOptions


@dataclass
class GenerationResult:
    """Result from a single generate/edit request."""
    success: bool
    image_data: Optional[bytes] = None
    mime_type: str = "image/png"
    prompt_used: str = ""
    model: str = ""
    provider: str = ""
    elapsed_seconds: float = 0
    error: Optional[str] = None
    text_response: Optional[str] = None  # Any text the model returned


class ImageGenerator(ABC):
    """
    A hosted model that renders an image from a source photo, optional
    auxiliary images (product reference, mask, crop) and an instruction.

    Implementations never raise for API failures; they return a result with
    success=False and an error message.
    """

    name = "base"

    @abstractmethod
    async def generate(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
