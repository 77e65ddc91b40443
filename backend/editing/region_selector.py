"""
Rectangular region selection over a displayed image.

A drag over the displayed (possibly scaled-down) image becomes a rectangle
that keeps the source image's aspect ratio and stays inside the element.
The committed rectangle is then mapped onto a fixed 0-1000 grid so the
remote model receives a resolution-independent region of interest.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .geometry import Point, Size

MIN_SELECTION_SIZE = 20  # CSS pixels of the displayed image
NORMALIZED_SCALE = 1000


@dataclass(frozen=True)
class SelectionRect:
    """Rectangle in CSS pixels relative to the displayed image's top-left."""
    x: float
    y: float
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 0.0


@dataclass(frozen=True)
class NormalizedRegion:
    """Region on a 0-1000 grid, independent of pixel resolution."""
    top: int
    left: int
    bottom: int
    right: int

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """Ordered top, left, bottom, right as the edit instruction expects."""
        return (self.top, self.left, self.bottom, self.right)

    def __str__(self) -> str:
        return "[{}, {}, {}, {}]".format(*self.as_tuple())


def compute_selection(
    anchor: Point,
    point: Point,
    element_size: Size,
    aspect_ratio: float,
) -> Optional[SelectionRect]:
    """
    Build the aspect-locked rectangle for a drag from `anchor` to `point`.

    Steps:
    1. Reject raw drags under the minimum size on either axis
    2. Shrink the longer side so width / height == aspect_ratio
    3. Shrink again (keeping the ratio) so the rectangle fits between the
       anchor and the element edge in the drag direction
    4. Place the rectangle on the anchor corner matching the drag direction

    Returns:
        The rectangle, or None for "no selection"
    """
    if element_size.is_empty or aspect_ratio <= 0:
        return None

    anchor_x = min(max(anchor.x, 0), element_size.width)
    anchor_y = min(max(anchor.y, 0), element_size.height)
    dx = point.x - anchor_x
    dy = point.y - anchor_y

    width = abs(dx)
    height = abs(dy)
    if width < MIN_SELECTION_SIZE or height < MIN_SELECTION_SIZE:
        return None

    if width / height > aspect_ratio:
        width = height * aspect_ratio
    else:
        height = width / aspect_ratio

    available_width = element_size.width - anchor_x if dx >= 0 else anchor_x
    available_height = element_size.height - anchor_y if dy >= 0 else anchor_y

    if width > available_width:
        width = available_width
        height = width / aspect_ratio
    if height > available_height:
        height = available_height
        width = height * aspect_ratio

    if width < MIN_SELECTION_SIZE or height < MIN_SELECTION_SIZE:
        return None

    x = anchor_x if dx >= 0 else anchor_x - width
    y = anchor_y if dy >= 0 else anchor_y - height
    return SelectionRect(x=x, y=y, width=width, height=height)


def _to_grid(value: float, extent: float) -> int:
    scaled = int(round(value / extent * NORMALIZED_SCALE))
    return min(NORMALIZED_SCALE, max(0, scaled))


def to_normalized(rect: SelectionRect, element_size: Size) -> Optional[NormalizedRegion]:
    """Map a rectangle on the displayed element onto the 0-1000 grid."""
    if element_size.is_empty:
        return None

    return NormalizedRegion(
        top=_to_grid(rect.y, element_size.height),
        left=_to_grid(rect.x, element_size.width),
        bottom=_to_grid(rect.y + rect.height, element_size.height),
        right=_to_grid(rect.x + rect.width, element_size.width),
    )


class RegionSelector:
    """
    Drag state machine for one displayed image.

    begin/update/end follow pointer down/move/up. The rectangle computed at
    the last update is committed on end; a drag whose last position is too
    small commits no selection.
    """

    def __init__(self):
        self._element_size: Optional[Size] = None
        self._natural_size: Optional[Size] = None
        self._anchor: Optional[Point] = None
        self._pending: Optional[SelectionRect] = None
        self._selection: Optional[SelectionRect] = None

    @property
    def is_attached(self) -> bool:
        return (
            self._element_size is not None
            and not self._element_size.is_empty
            and self._natural_size is not None
            and not self._natural_size.is_empty
        )

    @property
    def is_dragging(self) -> bool:
        return self._anchor is not None

    @property
    def selection(self) -> Optional[SelectionRect]:
        """The committed rectangle, if any."""
        return self._selection

    @property
    def pending(self) -> Optional[SelectionRect]:
        """The rectangle being dragged, if currently valid."""
        return self._pending

    def attach(self, element_size: Size, natural_size: Size) -> None:
        """Bind to a displayed image; any previous selection is discarded."""
        self._element_size = element_size
        self._natural_size = natural_size
        self.reset()

    def begin(self, point: Point) -> None:
        if not self.is_attached:
            return
        self._anchor = point
        self._pending = None

    def update(self, point: Point) -> Optional[SelectionRect]:
        if self._anchor is None:
            return None
        self._pending = compute_selection(
            self._anchor,
            point,
            self._element_size,
            self._natural_size.aspect_ratio,
        )
        return self._pending

    def end(self) -> Optional[SelectionRect]:
        if self._anchor is None:
            return self._selection
        self._selection = self._pending
        self._anchor = None
        self._pending = None
        return self._selection

    def cancel(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._anchor = None
        self._pending = None
        self._selection = None

    def normalized(self) -> Optional[NormalizedRegion]:
        """The committed selection on the 0-1000 grid."""
        if self._selection is None or not self.is_attached:
            return None
        return to_normalized(self._selection, self._element_size)
