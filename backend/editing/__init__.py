"""Interactive editing state: mask strokes, version history and region selection."""

from .geometry import Point, Size, to_image_space
from .raster import RasterSurface, PillowRaster
from .mask_capture import (
    MaskCapture,
    StrokePoint,
    Stroke,
    split_runs,
    DEFAULT_BRUSH_SIZE,
    MIN_BRUSH_SIZE,
    MAX_BRUSH_SIZE,
)
from .edit_history import EditHistory
from .region_selector import (
    RegionSelector,
    SelectionRect,
    NormalizedRegion,
    compute_selection,
    to_normalized,
    MIN_SELECTION_SIZE,
    NORMALIZED_SCALE,
)
from .session import EditingSession

__all__ = [
    # Geometry
    "Point",
    "Size",
    "to_image_space",
    # Mask
    "RasterSurface",
    "PillowRaster",
    "MaskCapture",
    "StrokePoint",
    "Stroke",
    "split_runs",
    "DEFAULT_BRUSH_SIZE",
    "MIN_BRUSH_SIZE",
    "MAX_BRUSH_SIZE",
    # History
    "EditHistory",
    # Region selection
    "RegionSelector",
    "SelectionRect",
    "NormalizedRegion",
    "compute_selection",
    "to_normalized",
    "MIN_SELECTION_SIZE",
    "NORMALIZED_SCALE",
    # Session
    "EditingSession",
]
