"""
Prompt builder for product placement and follow-up edits.
Turns semantic parameters (time of day, placement, accuracy, edit
instructions, masks and regions) into instruction text for the image model.
"""

import re
from dataclasses import dataclass, replace
from typing import List, Optional

from utils.products import Product, is_pool_model

from .prompt_templates import (
    CONVERSATIONAL_EDIT,
    DEFAULT_LIGHTING_PROMPT,
    DEFAULT_MASKED_INSTRUCTION,
    DEFAULT_REGION_INSTRUCTION,
    DEFAULT_TIME_DESCRIPTION,
    FINAL_VERIFICATION,
    LIGHTING_BANDS,
    LIGHTING_EDIT,
    LIGHTING_MATCH,
    LIGHTING_ONLY_COMMAND,
    LIGHTING_PRESERVATION,
    MASKED_EDIT,
    PERSON_SCALE_TEMPLATE,
    PLACEMENT_HINTS,
    POOL_PLACEMENT,
    PRESERVE_COMPOSITION,
    REGION_EDIT,
    REPOSITION_SUFFIX,
    REPOSITION_TEMPLATE,
    SITE_INTEGRATION,
    STYLE_DESCRIPTIONS,
    THINKING_STEP,
    TINY_HOME_PLACEMENT,
    ULTRA_ACCURACY,
    VERIFICATION_CHECKLIST,
)

MIN_HOUR = 7
MAX_HOUR = 22


# =============================================================================
# LIGHTING
# =============================================================================

def _lighting_band(hour: int):
    for start, end, description, prompt in LIGHTING_BANDS:
        if start <= hour < end:
            return description, prompt
    return None


def get_time_description(hour: int) -> str:
    """Short label for an hour of the day, e.g. 'golden hour'."""
    band = _lighting_band(hour)
    return band[0] if band else DEFAULT_TIME_DESCRIPTION


def get_lighting_prompt(hour: int) -> str:
    """Lighting instruction for an hour between 7 and 22."""
    band = _lighting_band(hour)
    return band[1] if band else DEFAULT_LIGHTING_PROMPT


def format_time_12_hour(hour: int) -> str:
    if hour == 0:
        return "12:00 AM"
    if hour < 12:
        return f"{hour}:00 AM"
    if hour == 12:
        return "12:00 PM"
    return f"{hour - 12}:00 PM"


def get_style_description(style: Optional[str]) -> str:
    if not style:
        return ""
    return STYLE_DESCRIPTIONS.get(style, "")


# =============================================================================
# POSITION COMMANDS
# =============================================================================

@dataclass
class Position:
    """Approximate product placement as percentages of the frame."""
    x: float = 50
    y: float = 50
    scale: float = 1.0
    rotation: float = 0


def is_lighting_only_command(command: str) -> bool:
    lower = command.lower()
    return "change lighting only" in lower or "maintain current position" in lower


def adjust_position_by_command(command: str, position: Position) -> Position:
    """
    Track where a quick command should have moved the product.
    x/y stay within 10-90, scale within 0.5-2.0, rotation wraps at 360.
    """
    lower = command.lower()
    new = replace(position)

    if "left" in lower:
        new.x = max(10, position.x - 10)
    elif "right" in lower:
        new.x = min(90, position.x + 10)

    if "up" in lower or "top" in lower:
        new.y = max(10, position.y - 10)
    elif "down" in lower or "bottom" in lower:
        new.y = min(90, position.y + 10)

    if "rotate" in lower:
        angle = re.search(r"(\d+)", lower)
        step = int(angle.group(1)) if angle else 45
        new.rotation = (position.rotation + step) % 360

    if "smaller" in lower or "shrink" in lower:
        new.scale = max(0.5, position.scale - 0.1)
    elif "larger" in lower or "bigger" in lower:
        new.scale = min(2.0, position.scale + 0.1)

    if "center" in lower:
        new.x, new.y = 50, 50
    elif "corner" in lower:
        vertical = "top" if "top" in lower else "bottom" if "bottom" in lower else None
        horizontal = "left" if "left" in lower else "right" if "right" in lower else None
        if vertical and horizontal:
            new.x = 20 if horizontal == "left" else 80
            new.y = 20 if vertical == "top" else 80

    return new


def command_to_prompt(
    command: str,
    product: Product,
    lighting_prompt: Optional[str] = None,
) -> str:
    """Instruction text for a quick positioning command."""
    lower = command.lower()

    if is_lighting_only_command(command):
        return LIGHTING_ONLY_COMMAND.format(lighting=lighting_prompt or "", kind=product.kind)

    prompt = REPOSITION_TEMPLATE.format(name=product.name, kind=product.kind)
    if "left" in lower:
        prompt += "move the structure to the left side of the scene, "
    if "right" in lower:
        prompt += "move the structure to the right side of the scene, "
    if "up" in lower or "back" in lower:
        prompt += "move the structure further back creating more distance from the camera viewpoint, "
    if "down" in lower or "forward" in lower:
        prompt += "move the structure closer to the camera viewpoint, "
    prompt += REPOSITION_SUFFIX

    if lighting_prompt:
        prompt += f" Adjust lighting and atmospheric conditions according to these specifications: {lighting_prompt}."
    return prompt


# =============================================================================
# PLACEMENT
# =============================================================================

class PlacementPromptBuilder:
    """
    Builder for the initial placement prompt.
    Supports chaining and customization.
    """

    def __init__(self, product: Product):
        self.product = product
        self.lighting_prompt: Optional[str] = None
        self.preserve_lighting = False
        self.placement: Optional[str] = None
        self.accuracy_mode = "standard"
        self.use_thinking: Optional[bool] = None
        self.geometric_verification = False
        self.person_height_cm: Optional[float] = None
        self.style: Optional[str] = None
        self.custom_instructions: List[str] = []

    def with_lighting(self, lighting_prompt: Optional[str]) -> "PlacementPromptBuilder":
        self.lighting_prompt = lighting_prompt
        return self

    def preserving_lighting(self, preserve: bool = True) -> "PlacementPromptBuilder":
        self.preserve_lighting = preserve
        return self

    def at(self, placement: Optional[str]) -> "PlacementPromptBuilder":
        """Placement preference: center, left or right."""
        if placement is not None and placement not in PLACEMENT_HINTS:
            raise ValueError(f"Unknown placement: {placement}")
        self.placement = placement
        return self

    def with_accuracy(
        self,
        mode: str,
        use_thinking: Optional[bool] = None,
        geometric_verification: bool = False,
    ) -> "PlacementPromptBuilder":
        self.accuracy_mode = mode
        self.use_thinking = use_thinking
        self.geometric_verification = geometric_verification
        return self

    def with_person_height(self, height_cm: Optional[float]) -> "PlacementPromptBuilder":
        self.person_height_cm = height_cm
        return self

    def with_style(self, style: Optional[str]) -> "PlacementPromptBuilder":
        self.style = style
        return self

    def with_instruction(self, instruction: Optional[str]) -> "PlacementPromptBuilder":
        if instruction:
            self.custom_instructions.append(instruction)
        return self

    def _thinking_enabled(self) -> bool:
        if self.use_thinking is not None:
            return self.use_thinking
        # Tiny homes always get the analysis step, pools only above standard
        return not is_pool_model(self.product) or self.accuracy_mode != "standard"

    def _product_section(self) -> str:
        dims = self.product.dimensions
        if is_pool_model(self.product):
            return POOL_PLACEMENT.format(
                name=self.product.name,
                length=dims.length,
                width=dims.width,
                depth=dims.depth,
            )
        return TINY_HOME_PLACEMENT.format(
            name=self.product.name,
            length=dims.length,
            width=dims.width,
        )

    def build(self) -> str:
        sections = [PRESERVE_COMPOSITION]

        if self._thinking_enabled():
            sections.append(THINKING_STEP)

        product_section = self._product_section()
        if self.person_height_cm:
            ratio = self.product.dimensions.length / (self.person_height_cm / 100)
            product_section += " " + PERSON_SCALE_TEMPLATE.format(
                height_cm=self.person_height_cm,
                ratio=ratio,
            )
        sections.append(product_section)

        if self.accuracy_mode == "ultra":
            sections.append(ULTRA_ACCURACY)

        if self.placement:
            sections.append(f"PLACEMENT: {PLACEMENT_HINTS[self.placement]}")

        if self.preserve_lighting and not self.lighting_prompt:
            sections.append(LIGHTING_PRESERVATION)
        else:
            lighting = LIGHTING_MATCH
            if self.lighting_prompt:
                lighting += f" Specific lighting requirements: {self.lighting_prompt}"
            sections.append(lighting)

        sections.append(SITE_INTEGRATION)

        if self.custom_instructions:
            sections.append(
                "Additional Requirements:\n"
                + "\n".join(f"- {i}" for i in self.custom_instructions)
            )

        style_description = get_style_description(self.style)
        if style_description:
            sections.append(
                f'STYLE INSTRUCTION: Apply a "{self.style}" aesthetic to the final image.\n'
                f"{style_description}"
            )

        sections.append(VERIFICATION_CHECKLIST if self.geometric_verification else FINAL_VERIFICATION)
        return "\n\n".join(sections)


def build_placement_prompt(
    product: Product,
    lighting_prompt: Optional[str] = None,
    placement: Optional[str] = None,
    accuracy_mode: str = "standard",
    person_height_cm: Optional[float] = None,
    style: Optional[str] = None,
    preserve_lighting: bool = False,
    custom_instruction: Optional[str] = None,
) -> str:
    """
    Build the prompt for placing a product into the property photo.

    Args:
        product: Tiny home or pool to place
        lighting_prompt: Output of get_lighting_prompt, if lighting is set
        placement: center, left or right
        accuracy_mode: standard, maximum or ultra
        person_height_cm: Height of a person in the photo used for scale
        style: One of STYLE_DESCRIPTIONS
        preserve_lighting: Keep the photo's lighting when no lighting_prompt
        custom_instruction: Extra free-text requirement

    Returns:
        Complete prompt string
    """
    return (
        PlacementPromptBuilder(product)
        .with_lighting(lighting_prompt)
        .preserving_lighting(preserve_lighting)
        .at(placement)
        .with_accuracy(accuracy_mode)
        .with_person_height(person_height_cm)
        .with_style(style)
        .with_instruction(custom_instruction)
        .build()
    )


# =============================================================================
# EDITS
# =============================================================================

def build_lighting_edit_prompt(lighting_prompt: str) -> str:
    return LIGHTING_EDIT.format(lighting=lighting_prompt)


def build_conversational_edit_prompt(instruction: str) -> str:
    return CONVERSATIONAL_EDIT.format(instruction=instruction)


def build_masked_edit_prompt(instruction: Optional[str] = None) -> str:
    """Prompt for an edit restricted to the white area of the mask (image [1])."""
    return MASKED_EDIT.format(instruction=instruction or DEFAULT_MASKED_INSTRUCTION)


def build_region_edit_prompt(region, instruction: Optional[str] = None) -> str:
    """
    Prompt for an edit focused on a normalized region.

    Args:
        region: NormalizedRegion; rendered as [top, left, bottom, right]
        instruction: What to do with the region (defaults to crop and zoom)
    """
    return REGION_EDIT.format(
        region=str(region),
        instruction=instruction or DEFAULT_REGION_INSTRUCTION,
    )
