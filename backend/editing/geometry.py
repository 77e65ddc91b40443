"""
Coordinate helpers shared by the mask and region editors.

Screen points are CSS pixels relative to the displayed image element's
top-left corner. Image points are pixels of the source image's natural grid.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def aspect_ratio(self) -> float:
        """Width over height, 0 for an empty size."""
        if self.is_empty:
            return 0.0
        return self.width / self.height


def to_image_space(
    screen_point: Point,
    displayed_size: Size,
    natural_size: Size,
) -> Optional[Point]:
    """
    Convert a point on the displayed element into source pixel coordinates.

    The backing raster always has the source's natural dimensions while the
    element may be rendered at any CSS size, so each axis is scaled by
    natural / displayed. Returns None while either size is still unknown.
    """
    if displayed_size.is_empty or natural_size.is_empty:
        return None

    scale_x = natural_size.width / displayed_size.width
    scale_y = natural_size.height / displayed_size.height
    return Point(screen_point.x * scale_x, screen_point.y * scale_y)
