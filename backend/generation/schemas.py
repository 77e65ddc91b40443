"""
Pydantic models for generation options and placement requests.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

ImageSize = Literal["1K", "2K", "4K"]
AccuracyMode = Literal["standard", "maximum", "ultra"]
Placement = Literal["center", "left", "right"]
Style = Literal["Realistic", "Cinematic", "Golden Hour", "Modern", "Rustic", "Architectural"]

DEFAULT_IMAGE_SIZES = {
    "standard": "1K",
    "maximum": "2K",
    "ultra": "4K",
}


class GenerationOptions(BaseModel):
    """Sampling and output settings passed through to the image provider."""
    temperature: float = Field(default=1.0, ge=0, le=2)
    top_p: Optional[float] = Field(default=None, gt=0, le=1)
    top_k: Optional[int] = Field(default=None, gt=0)
    image_size: Optional[ImageSize] = None
    aspect_ratio: Optional[str] = None  # Detected from the source image when unset
    accuracy_mode: AccuracyMode = "standard"
    enable_google_search: bool = False
    model: Optional[str] = None  # Provider default when unset

    class Config:
        json_schema_extra = {
            "example": {
                "temperature": 1.0,
                "top_p": 0.95,
                "image_size": "2K",
                "accuracy_mode": "maximum",
            }
        }

    def effective_image_size(self) -> str:
        return self.image_size or DEFAULT_IMAGE_SIZES[self.accuracy_mode]

    def search_enabled(self) -> bool:
        """Search grounding is on when asked for or above standard accuracy."""
        return self.enable_google_search or self.accuracy_mode in ("maximum", "ultra")


class PlacementRequest(BaseModel):
    """Parameters for placing a product into the uploaded photo."""
    product_id: str
    hour: Optional[int] = Field(default=None, ge=7, le=22, description="Time of day for lighting")
    placement: Optional[Placement] = None
    style: Optional[Style] = None
    person_height_cm: Optional[float] = Field(default=None, gt=0, le=250)
    preserve_lighting: Optional[bool] = None  # Preserve when no hour is given
    custom_instruction: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "deluxe-tiny-home",
                "hour": 18,
                "placement": "left",
            }
        }
