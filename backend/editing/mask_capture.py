"""
Freehand mask capture for masked edits.

Pointer gestures are recorded as a stroke log in source-image pixels, and
the black/white mask is always rebuilt in full from that log:

- begin_stroke / extend_stroke / end_stroke mirror pointer down/move/up
- every point keeps the brush size it was drawn with
- export_mask fills black and strokes every sealed stroke in white
- a translucent preview layer gives live feedback but is never exported

Pointer-leave is expected to call end_stroke like pointer-up does, so a
stroke dragged off the surface is sealed rather than discarded.
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from PIL import Image, ImageDraw

from .geometry import Point, Size, to_image_space
from .raster import BLACK, WHITE, PillowRaster, RasterSurface, disc_box

DEFAULT_BRUSH_SIZE = 30
MIN_BRUSH_SIZE = 5
MAX_BRUSH_SIZE = 100

PREVIEW_COLOR = (255, 50, 50, 178)

# Debug mode - set DEBUG_MASK=true to save every exported mask
DEBUG_MASK = os.environ.get("DEBUG_MASK", "false").lower() == "true"
DEBUG_OUTPUT_DIR = Path(__file__).parent.parent.parent / "debug_masks"


@dataclass(frozen=True)
class StrokePoint:
    """A recorded point in source pixels with the brush diameter at that time."""
    x: float
    y: float
    size: float


Stroke = List[StrokePoint]


def clamp_brush_size(size: float) -> float:
    return max(MIN_BRUSH_SIZE, min(MAX_BRUSH_SIZE, size))


def split_runs(stroke: Stroke) -> List[Stroke]:
    """
    Split a stroke into runs of constant brush size.

    Each run after the first starts with the last point of the previous run
    so the rendered path stays connected. A run is drawn at the size of its
    last point.
    """
    if not stroke:
        return []

    runs: List[Stroke] = []
    current: Stroke = [stroke[0]]
    for prev, point in zip(stroke, stroke[1:]):
        if point.size == current[-1].size:
            current.append(point)
        else:
            runs.append(current)
            current = [prev, point]
    runs.append(current)
    return runs


def _save_debug_mask(mask_png: bytes) -> None:
    """Write an exported mask to the debug output directory."""
    if not DEBUG_MASK:
        return

    DEBUG_OUTPUT_DIR.mkdir(exist_ok=True)
    filepath = DEBUG_OUTPUT_DIR / f"mask_{int(time.time() * 1000)}.png"
    filepath.write_bytes(mask_png)
    print(f"[DEBUG_MASK] Saved: {filepath}")


class MaskCapture:
    """
    Stroke recorder and mask rasterizer for one source image.

    Nothing happens until `attach` is called with the image's natural size;
    until then every operation is a no-op returning None. This tolerates
    pointer events that arrive before the image has finished loading.
    """

    def __init__(
        self,
        raster_factory: Callable[[int, int], RasterSurface] = PillowRaster,
        on_mask: Optional[Callable[[bytes], None]] = None,
        brush_size: float = DEFAULT_BRUSH_SIZE,
    ):
        """
        Args:
            raster_factory: Builds a blank surface of (width, height) pixels
            on_mask: Called with every freshly exported mask
            brush_size: Initial brush diameter in source pixels
        """
        self.raster_factory = raster_factory
        self.on_mask = on_mask
        self.disabled = False
        self.preview: Optional[Image.Image] = None
        self.last_mask: Optional[bytes] = None

        self._brush_size = clamp_brush_size(brush_size)
        self._natural_size: Optional[Size] = None
        self._displayed_size: Optional[Size] = None
        self._strokes: List[Stroke] = []
        self._active: Optional[Stroke] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def brush_size(self) -> float:
        return self._brush_size

    @brush_size.setter
    def brush_size(self, size: float) -> None:
        self._brush_size = clamp_brush_size(size)

    @property
    def is_attached(self) -> bool:
        return self._natural_size is not None and not self._natural_size.is_empty

    @property
    def is_drawing(self) -> bool:
        return self._active is not None

    @property
    def strokes(self) -> Tuple[Tuple[StrokePoint, ...], ...]:
        """Sealed strokes in drawing order."""
        return tuple(tuple(stroke) for stroke in self._strokes)

    @property
    def pixel_size(self) -> Optional[Tuple[int, int]]:
        if not self.is_attached:
            return None
        return (
            max(1, int(round(self._natural_size.width))),
            max(1, int(round(self._natural_size.height))),
        )

    def attach(self, natural_size: Size, displayed_size: Optional[Size] = None) -> None:
        """
        Bind to a loaded source image. Any previous strokes belong to the
        old image and are dropped.
        """
        self._natural_size = natural_size
        self._displayed_size = displayed_size or natural_size
        self._strokes = []
        self._active = None
        self.last_mask = None
        self._reset_preview()

    def resize_display(self, displayed_size: Size) -> None:
        """Track a responsive resize of the displayed element."""
        self._displayed_size = displayed_size

    def _to_image_space(self, screen_point: Point) -> Optional[Point]:
        if not self.is_attached or self._displayed_size is None:
            return None
        return to_image_space(screen_point, self._displayed_size, self._natural_size)

    # -------------------------------------------------------------------------
    # Gestures
    # -------------------------------------------------------------------------

    def begin_stroke(self, screen_point: Point, brush_size: Optional[float] = None) -> None:
        if self.disabled:
            return
        if brush_size is not None:
            self.brush_size = brush_size

        point = self._to_image_space(screen_point)
        if point is None:
            return

        self._active = [StrokePoint(point.x, point.y, self._brush_size)]

    def extend_stroke(self, screen_point: Point) -> None:
        if self._active is None or self.disabled:
            return

        point = self._to_image_space(screen_point)
        if point is None:
            return

        stroke_point = StrokePoint(point.x, point.y, self._brush_size)
        self._paint_preview(self._active[-1], stroke_point)
        self._active.append(stroke_point)

    def end_stroke(self) -> Optional[bytes]:
        """Seal the active stroke and return the rebuilt mask."""
        if self._active is None:
            return None

        self._strokes.append(self._active)
        self._active = None
        return self.export_mask()

    def clear(self) -> Optional[bytes]:
        """Drop every stroke and return the now all-black mask."""
        if not self.is_attached:
            return None

        self._strokes = []
        self._active = None
        self._reset_preview()
        return self.export_mask()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def export_mask(self) -> Optional[bytes]:
        """
        Rebuild the mask from the stroke log.

        Returns:
            PNG bytes at the source's natural size: black background,
            white strokes. None if no image is attached yet.
        """
        size = self.pixel_size
        if size is None:
            return None

        surface = self.raster_factory(*size)
        surface.draw_background(BLACK)
        for stroke in self._strokes:
            for run in split_runs(stroke):
                surface.stroke_path(
                    [(p.x, p.y) for p in run],
                    run[-1].size,
                    WHITE,
                )

        mask = surface.encode()
        self.last_mask = mask
        _save_debug_mask(mask)

        if self.on_mask is not None:
            self.on_mask(mask)
        return mask

    def _reset_preview(self) -> None:
        size = self.pixel_size
        self.preview = Image.new("RGBA", size, (0, 0, 0, 0)) if size else None

    def _paint_preview(self, start: StrokePoint, end: StrokePoint) -> None:
        if self.preview is None:
            return

        draw = ImageDraw.Draw(self.preview)
        width = max(1, int(round(end.size)))
        draw.line([(start.x, start.y), (end.x, end.y)], fill=PREVIEW_COLOR, width=width)
        draw.ellipse(disc_box(end.x, end.y, end.size), fill=PREVIEW_COLOR)
