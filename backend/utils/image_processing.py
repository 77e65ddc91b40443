"""
Image processing utilities using Pillow and numpy.
"""

import base64
import io
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont


WATERMARK_TEXT = "www.unit2go.co.nz"
WATERMARK_LOGO_MAX = 120
WATERMARK_PADDING = 20
WATERMARK_OPACITY = 0.6

# Aspect ratios accepted by the image model's imageConfig (width:height)
ASPECT_RATIOS: Dict[str, Tuple[int, int]] = {
    "1:1": (1, 1),
    "4:3": (4, 3),
    "3:4": (3, 4),
    "16:9": (16, 9),
    "9:16": (9, 16),
    "3:2": (3, 2),
    "2:3": (2, 3),
    "5:4": (5, 4),
    "4:5": (4, 5),
    "21:9": (21, 9),
}


def load_image_from_bytes(image_bytes: bytes) -> Image.Image:
    """Load an image from bytes into an RGB Pillow image."""
    img = Image.open(io.BytesIO(image_bytes))
    return img.convert("RGB")


def get_image_size(image_bytes: bytes) -> Tuple[int, int]:
    """Natural (width, height) of an encoded image."""
    with Image.open(io.BytesIO(image_bytes)) as img:
        return img.size


def detect_mime_type(image_bytes: bytes, default: str = "image/png") -> str:
    """Sniff the MIME type of an encoded image."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            return Image.MIME.get(img.format or "", default)
    except (IOError, OSError):
        return default


def encode_image_to_base64(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("utf-8")


def image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(image_bytes: bytes, mime_type: Optional[str] = None) -> str:
    mime_type = mime_type or detect_mime_type(image_bytes)
    return f"data:{mime_type};base64,{encode_image_to_base64(image_bytes)}"


def split_data_url(data_url: str) -> Tuple[Optional[str], bytes]:
    """
    Split a data URL into (mime_type, raw bytes).

    A bare base64 payload (no "data:" header) is accepted as well and
    yields a None MIME type.
    """
    if "base64," in data_url:
        header, payload = data_url.split("base64,", 1)
        mime_type = header[len("data:"):].rstrip(";") if header.startswith("data:") else None
        return mime_type or None, base64.b64decode(payload)
    return None, base64.b64decode(data_url)


# =============================================================================
# ASPECT RATIO
# =============================================================================

def map_to_aspect_ratio(ratio: float) -> str:
    """
    Map a width/height ratio to the closest supported aspect ratio string.
    Exact matches within 0.1 win; otherwise fall back to coarse buckets.
    """
    for name, (w, h) in ASPECT_RATIOS.items():
        if abs(ratio - w / h) < 0.1:
            return name

    if ratio > 1.5:
        return "16:9"
    if ratio > 1.2:
        return "4:3"
    if ratio > 0.9:
        return "1:1"
    if ratio > 0.6:
        return "3:4"
    return "9:16"


def detect_aspect_ratio(image_bytes: bytes) -> str:
    width, height = get_image_size(image_bytes)
    if height == 0:
        return "1:1"
    return map_to_aspect_ratio(width / height)


# =============================================================================
# MASKS
# =============================================================================

def binarize_mask(mask: Image.Image, threshold: int = 128) -> Image.Image:
    """
    Force a mask to pure black (0) and pure white (255).
    Any anti-aliased edge pixels are snapped to the nearer extreme.
    """
    arr = np.asarray(mask.convert("L"))
    binary = np.where(arr >= threshold, 255, 0).astype(np.uint8)
    return Image.fromarray(binary)


def mask_coverage(mask_png: bytes) -> float:
    """Fraction of mask pixels that are white (editable)."""
    arr = np.asarray(Image.open(io.BytesIO(mask_png)).convert("L"))
    if arr.size == 0:
        return 0.0
    return float(np.count_nonzero(arr >= 128)) / arr.size


# =============================================================================
# CROPPING
# =============================================================================

def crop_to_region(image_bytes: bytes, region, scale: int = 1000) -> bytes:
    """
    Crop an image to a normalized region.

    Args:
        image_bytes: Encoded source image
        region: Object with integer top/left/bottom/right on a 0..scale grid
        scale: Size of the normalized coordinate space

    Returns:
        PNG bytes of the cropped area
    """
    img = load_image_from_bytes(image_bytes)
    width, height = img.size

    left = int(round(region.left / scale * width))
    top = int(round(region.top / scale * height))
    right = int(round(region.right / scale * width))
    bottom = int(round(region.bottom / scale * height))

    # Keep at least one pixel in each direction
    right = max(right, left + 1)
    bottom = max(bottom, top + 1)

    return image_to_png_bytes(img.crop((left, top, min(right, width), min(bottom, height))))


# =============================================================================
# WATERMARK
# =============================================================================

def add_watermark(
    image_bytes: bytes,
    logo_bytes: Optional[bytes] = None,
    text: str = WATERMARK_TEXT,
) -> bytes:
    """
    Composite the brand logo and caption into the bottom-left corner.

    The logo is scaled to fit a 120px box and drawn at 60% opacity, the
    caption sits to its right. Without a logo only the caption is drawn.
    """
    base = load_image_from_bytes(image_bytes).convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    alpha = int(255 * WATERMARK_OPACITY)

    logo_width = logo_height = 0
    if logo_bytes:
        try:
            logo = Image.open(io.BytesIO(logo_bytes)).convert("RGBA")
        except (IOError, OSError) as e:
            print(f"[WARN] Failed to load watermark logo: {e}")
            logo = None

        if logo is not None:
            aspect = logo.width / logo.height
            if aspect > 1:
                logo_width = WATERMARK_LOGO_MAX
                logo_height = int(WATERMARK_LOGO_MAX / aspect)
            else:
                logo_height = WATERMARK_LOGO_MAX
                logo_width = int(WATERMARK_LOGO_MAX * aspect)
            logo = logo.resize((max(1, logo_width), max(1, logo_height)))

            # Scale the logo's own alpha channel down to the watermark opacity
            logo_alpha = logo.getchannel("A").point(lambda a: a * alpha // 255)
            logo.putalpha(logo_alpha)

            y = base.height - logo_height - WATERMARK_PADDING
            overlay.alpha_composite(logo, (WATERMARK_PADDING, y))

    try:
        font = ImageFont.truetype("DejaVuSans-Bold.ttf", 18)
    except (IOError, OSError):
        font = ImageFont.load_default()

    draw = ImageDraw.Draw(overlay)
    text_x = WATERMARK_PADDING + (logo_width + 12 if logo_width else 0)
    _, text_top, _, text_bottom = font.getbbox(text)
    if logo_height:
        # Centre the caption on the logo
        text_y = base.height - WATERMARK_PADDING - logo_height // 2 - (text_top + text_bottom) // 2
    else:
        text_y = base.height - WATERMARK_PADDING - text_bottom
    draw.text((text_x, text_y), text, font=font, fill=(255, 255, 255, alpha))

    composited = Image.alpha_composite(base, overlay).convert("RGB")
    return image_to_png_bytes(composited)
