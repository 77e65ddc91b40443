"""
Minimal 2D raster backend used to rebuild masks from the stroke log.

The mask algorithm only needs three primitives, so any backend that can fill
a background, stroke a round-capped path and encode itself can stand in for
the Pillow implementation below.
"""

import io
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple, Union

from PIL import Image, ImageDraw

from utils.image_processing import binarize_mask

Color = Union[int, Tuple[int, ...]]

BLACK = 0
WHITE = 255


def disc_box(x: float, y: float, diameter: float) -> List[float]:
    """
    Bounding box for a disc of `diameter` pixels centred on (x, y).
    Pillow fills both box corners, so the far edge sits one pixel in.
    """
    radius = diameter / 2
    span = max(diameter - 1, 0)
    return [x - radius, y - radius, x - radius + span, y - radius + span]


class RasterSurface(ABC):
    """A fixed-size drawing surface."""

    @abstractmethod
    def draw_background(self, color: Color) -> None:
        pass

    @abstractmethod
    def stroke_path(
        self,
        points: Sequence[Tuple[float, float]],
        width: float,
        color: Color,
    ) -> None:
        """
        Stroke a connected path with round caps and joins.
        A single point renders as a dot of diameter `width`.
        """
        pass

    @abstractmethod
    def encode(self) -> bytes:
        pass


class PillowRaster(RasterSurface):
    """Grayscale Pillow canvas encoded as a strict black/white RGB PNG."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.image = Image.new("L", (width, height), BLACK)
        self._draw = ImageDraw.Draw(self.image)

    def draw_background(self, color: Color) -> None:
        self._draw.rectangle([0, 0, self.width, self.height], fill=color)

    def stroke_path(
        self,
        points: Sequence[Tuple[float, float]],
        width: float,
        color: Color,
    ) -> None:
        if not points:
            return

        line_width = max(1, int(round(width)))
        if len(points) > 1:
            self._draw.line(list(points), fill=color, width=line_width)

        # Round caps and joins: stamp a disc on every vertex
        for x, y in points:
            self._draw.ellipse(disc_box(x, y, width), fill=color)

    def encode(self) -> bytes:
        mask = binarize_mask(self.image).convert("RGB")
        buffer = io.BytesIO()
        mask.save(buffer, format="PNG")
        return buffer.getvalue()
