"""
Image generation service.
Routes requests to the configured provider and falls back to Gemini when
FLUX fails.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

from .base import GenerationResult, ImageGenerator
from .gemini_client import GeminiImageClient
from .schemas import GenerationOptions

load_dotenv()

PROVIDERS = ("gemini", "flux")
DEFAULT_PROVIDER = os.getenv("IMAGE_MODEL_PROVIDER", "gemini").lower()


class ImageGenerationService(ImageGenerator):
    """
    Front door for image generation.

    Args:
        provider: 'gemini' or 'flux' (default from IMAGE_MODEL_PROVIDER)
        gemini: Gemini client; built from the environment when omitted
        flux: FLUX client; built from the environment when the provider is flux
    """

    name = "service"

    def __init__(
        self,
        provider: Optional[str] = None,
        gemini: Optional[ImageGenerator] = None,
        flux: Optional[ImageGenerator] = None,
    ):
        self.provider = (provider or DEFAULT_PROVIDER).lower()
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown image provider: {self.provider}")

        self.gemini = gemini or GeminiImageClient()
        self.flux = flux
        if self.provider == "flux" and self.flux is None:
            from .flux_client import FluxKontextClient
            self.flux = FluxKontextClient()

        print(f"[INFO] Image generation provider: {self.provider}")

    async def generate(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        if self.provider == "flux":
            result = await self.flux.generate(source_image, auxiliary_images, instruction, options)
            if result.success:
                return result
            print(f"[WARN] FLUX failed ({result.error}), falling back to Gemini")

        return await self.gemini.generate(source_image, auxiliary_images, instruction, options)
