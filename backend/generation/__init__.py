"""Product placement and image editing via hosted image models."""

from .prompt_templates import (
    LIGHTING_BANDS,
    STYLE_DESCRIPTIONS,
    PLACEMENT_HINTS,
)
from .prompt_builder import (
    PlacementPromptBuilder,
    Position,
    build_placement_prompt,
    build_lighting_edit_prompt,
    build_conversational_edit_prompt,
    build_masked_edit_prompt,
    build_region_edit_prompt,
    command_to_prompt,
    adjust_position_by_command,
    is_lighting_only_command,
    get_lighting_prompt,
    get_time_description,
    format_time_12_hour,
    get_style_description,
)
from .schemas import GenerationOptions, PlacementRequest
from .base import GenerationResult, ImageGenerator
from .gemini_client import GeminiImageClient, GeminiAPIError
from .flux_client import FluxKontextClient
from .provider import ImageGenerationService

__all__ = [
    # Prompt templates
    "LIGHTING_BANDS",
    "STYLE_DESCRIPTIONS",
    "PLACEMENT_HINTS",
    # Prompt builder
    "PlacementPromptBuilder",
    "Position",
    "build_placement_prompt",
    "build_lighting_edit_prompt",
    "build_conversational_edit_prompt",
    "build_masked_edit_prompt",
    "build_region_edit_prompt",
    "command_to_prompt",
    "adjust_position_by_command",
    "is_lighting_only_command",
    "get_lighting_prompt",
    "get_time_description",
    "format_time_12_hour",
    "get_style_description",
    # Options
    "GenerationOptions",
    "PlacementRequest",
    # Providers
    "GenerationResult",
    "ImageGenerator",
    "GeminiImageClient",
    "GeminiAPIError",
    "FluxKontextClient",
    "ImageGenerationService",
]
