"""
Editing session for one uploaded property photo.

Wires the mask, history and region selection to the prompt builder and an
image generator:

    gesture -> MaskCapture / RegionSelector -> prompt -> generator
            -> result image -> EditHistory -> displayed image

Every edit runs on the image currently shown (the latest result, or the
upload before anything has been generated). Placement always runs on the
upload itself.
"""

from typing import List, Optional

from generation.base import GenerationResult, ImageGenerator
from generation.prompt_builder import (
    MAX_HOUR,
    MIN_HOUR,
    Position,
    adjust_position_by_command,
    build_conversational_edit_prompt,
    build_lighting_edit_prompt,
    build_masked_edit_prompt,
    build_placement_prompt,
    build_region_edit_prompt,
    command_to_prompt,
    get_lighting_prompt,
    get_time_description,
)
from generation.schemas import GenerationOptions, PlacementRequest
from utils.image_processing import add_watermark, crop_to_region, get_image_size, mask_coverage
from utils.products import Product, get_product, load_reference_image

from .edit_history import EditHistory
from .geometry import Size
from .mask_capture import MaskCapture
from .region_selector import NORMALIZED_SCALE, RegionSelector


class EditingSession:
    """
    Owns the source image and exactly one MaskCapture, EditHistory and
    RegionSelector. Loading a new image resets all three.

    Edit methods return the GenerationResult of the request, or None when
    there was nothing to submit (no image, empty mask, no selection, or a
    request already in flight).
    """

    def __init__(
        self,
        generator: ImageGenerator,
        product: Product,
        reference_image: Optional[bytes] = None,
        options: Optional[GenerationOptions] = None,
        person_height_cm: Optional[float] = None,
        style: Optional[str] = None,
        custom_instruction: Optional[str] = None,
        preserve_lighting: Optional[bool] = None,
        send_region_crop: bool = True,
    ):
        self.generator = generator
        self.product = product
        self.reference_image = reference_image
        self.options = options or GenerationOptions()
        self.person_height_cm = person_height_cm
        self.style = style
        self.custom_instruction = custom_instruction
        self.preserve_lighting = preserve_lighting
        self.send_region_crop = send_region_crop

        self.mask = MaskCapture()
        self.history: EditHistory[bytes] = EditHistory()
        self.selector = RegionSelector()

        self.original_image: Optional[bytes] = None
        self.displayed_size: Optional[Size] = None
        self.position = Position()
        self.time_of_day: Optional[int] = None
        self.showing_original = False
        self.processing = False
        self.last_error: Optional[str] = None

    @classmethod
    def from_request(
        cls,
        generator: ImageGenerator,
        request: PlacementRequest,
        **kwargs,
    ) -> "EditingSession":
        """Build a session from a validated placement request."""
        product = get_product(request.product_id)
        if product is None:
            raise ValueError(f"Unknown product: {request.product_id}")

        session = cls(
            generator,
            product,
            person_height_cm=request.person_height_cm,
            style=request.style,
            custom_instruction=request.custom_instruction,
            preserve_lighting=request.preserve_lighting,
            **kwargs,
        )
        session.time_of_day = request.hour
        return session

    # -------------------------------------------------------------------------
    # Image state
    # -------------------------------------------------------------------------

    def load_image(self, image_bytes: bytes, displayed_size: Optional[Size] = None) -> None:
        """Start over with a new upload."""
        self.original_image = image_bytes
        self.displayed_size = displayed_size
        self.history.reset()
        self.position = Position()
        self.showing_original = False
        self.last_error = None
        self._attach_surfaces(image_bytes)

        width, height = get_image_size(image_bytes)
        print(f"[INFO] Loaded property photo {width}x{height}")

    def resize_display(self, displayed_size: Size) -> None:
        """The displayed element changed size; strokes are kept, selection is not."""
        self.displayed_size = displayed_size
        self.mask.resize_display(displayed_size)
        if self.mask.is_attached:
            width, height = self.mask.pixel_size
            self.selector.attach(displayed_size, Size(width, height))

    def _attach_surfaces(self, image_bytes: bytes) -> None:
        width, height = get_image_size(image_bytes)
        natural = Size(width, height)
        displayed = self.displayed_size or natural
        self.mask.attach(natural, displayed)
        self.selector.attach(displayed, natural)

    @property
    def current_image(self) -> Optional[bytes]:
        """Latest result at the history cursor, or the upload."""
        return self.history.current() or self.original_image

    @property
    def display_image(self) -> Optional[bytes]:
        if self.showing_original:
            return self.original_image
        return self.current_image

    def toggle_original(self) -> bool:
        """Flip between the upload and the current result."""
        if len(self.history) == 0:
            self.showing_original = False
        else:
            self.showing_original = not self.showing_original
        return self.showing_original

    def undo(self) -> Optional[bytes]:
        entry = self.history.undo()
        if entry is not None:
            self.showing_original = False
            self._attach_surfaces(entry)
        return entry

    def redo(self) -> Optional[bytes]:
        entry = self.history.redo()
        if entry is not None:
            self.showing_original = False
            self._attach_surfaces(entry)
        return entry

    def export_image(self, watermark: bool = True, logo_bytes: Optional[bytes] = None) -> Optional[bytes]:
        """Current image for download, watermarked by default."""
        image = self.current_image
        if image is None:
            return None
        if not watermark:
            return image
        return add_watermark(image, logo_bytes)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def _lighting_prompt(self) -> Optional[str]:
        if self.time_of_day is None:
            return None
        return get_lighting_prompt(self.time_of_day)

    def _preserve_lighting(self, lighting_prompt: Optional[str]) -> bool:
        """Keep the photo's own lighting unless told otherwise or an hour is set."""
        if self.preserve_lighting is not None:
            return self.preserve_lighting
        return lighting_prompt is None

    def _reference(self) -> bytes:
        if self.reference_image is None:
            self.reference_image = load_reference_image(self.product)
        return self.reference_image

    async def _submit(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        label: str,
    ) -> GenerationResult:
        """Run one generation and push a successful result into history."""
        self.processing = True
        self.mask.disabled = True
        self.last_error = None
        print(f"[INFO] Submitting {label}")

        try:
            result = await self.generator.generate(
                source_image, auxiliary_images, instruction, self.options
            )
        finally:
            self.processing = False
            self.mask.disabled = False

        if not result.success or not result.image_data:
            self.last_error = result.error or "Generation returned no image"
            print(f"[ERR] {label} failed: {self.last_error}")
            return result

        self.history.append(result.image_data)
        self.showing_original = False
        self._attach_surfaces(result.image_data)
        print(f"[OK] {label} added to history ({self.history.index + 1}/{len(self.history)})")
        return result

    async def generate_placement(self, placement: Optional[str] = None) -> Optional[GenerationResult]:
        """Place the product into the uploaded photo."""
        if self.original_image is None or self.processing:
            return None

        lighting_prompt = self._lighting_prompt()
        prompt = build_placement_prompt(
            self.product,
            lighting_prompt=lighting_prompt,
            placement=placement,
            accuracy_mode=self.options.accuracy_mode,
            person_height_cm=self.person_height_cm,
            style=self.style,
            preserve_lighting=self._preserve_lighting(lighting_prompt),
            custom_instruction=self.custom_instruction,
        )
        result = await self._submit(
            self.original_image,
            [self._reference()],
            prompt,
            f"{self.product.name} placement",
        )
        if result.success:
            self.position = Position()
        return result

    async def apply_lighting(self, hour: int) -> Optional[GenerationResult]:
        """
        Relight the current result for an hour between 7 and 22.
        Before the first placement the hour is only remembered for it.
        """
        if not MIN_HOUR <= hour <= MAX_HOUR:
            raise ValueError(f"Hour must be between {MIN_HOUR} and {MAX_HOUR}, got {hour}")

        self.time_of_day = hour
        if len(self.history) == 0 or self.processing:
            return None

        return await self._submit(
            self.current_image,
            [],
            build_lighting_edit_prompt(get_lighting_prompt(hour)),
            f"{get_time_description(hour)} lighting",
        )

    async def quick_command(self, command: str) -> Optional[GenerationResult]:
        """Reposition the placed product with a short command like 'move left'."""
        if len(self.history) == 0 or self.processing or not command.strip():
            return None

        prompt = command_to_prompt(command, self.product, self._lighting_prompt())
        result = await self._submit(self.current_image, [], prompt, f"command '{command}'")
        if result.success:
            self.position = adjust_position_by_command(command, self.position)
        return result

    async def conversational_edit(self, instruction: str) -> Optional[GenerationResult]:
        """Free-text change to the current image."""
        if self.current_image is None or self.processing or not instruction.strip():
            return None

        return await self._submit(
            self.current_image,
            [],
            build_conversational_edit_prompt(instruction),
            "conversational edit",
        )

    async def masked_edit(self, instruction: Optional[str] = None) -> Optional[GenerationResult]:
        """Edit only the painted area; the mask goes along as image [1]."""
        if self.current_image is None or self.processing:
            return None

        mask = self.mask.export_mask()
        if mask is None or mask_coverage(mask) == 0:
            print("[WARN] Masked edit skipped: nothing painted")
            return None

        return await self._submit(
            self.current_image,
            [mask],
            build_masked_edit_prompt(instruction),
            "masked edit",
        )

    async def region_edit(self, instruction: Optional[str] = None) -> Optional[GenerationResult]:
        """Edit focused on the committed selection; the selection is dropped on success."""
        if self.current_image is None or self.processing:
            return None

        region = self.selector.normalized()
        if region is None:
            return None

        source = self.current_image
        auxiliary = [crop_to_region(source, region, NORMALIZED_SCALE)] if self.send_region_crop else []
        result = await self._submit(
            source,
            auxiliary,
            build_region_edit_prompt(region, instruction),
            f"region edit {region}",
        )
        if result.success:
            self.selector.cancel()
        return result
