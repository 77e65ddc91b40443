"""Utility modules."""

from .image_processing import (
    ASPECT_RATIOS,
    load_image_from_bytes,
    get_image_size,
    detect_mime_type,
    encode_image_to_base64,
    image_to_png_bytes,
    to_data_url,
    split_data_url,
    map_to_aspect_ratio,
    detect_aspect_ratio,
    binarize_mask,
    mask_coverage,
    crop_to_region,
    add_watermark,
)
from .products import (
    TinyHomeModel,
    PoolModel,
    Product,
    TINY_HOME_MODELS,
    POOL_MODELS,
    get_product,
    is_pool_model,
    load_reference_image,
)

__all__ = [
    "ASPECT_RATIOS",
    "load_image_from_bytes",
    "get_image_size",
    "detect_mime_type",
    "encode_image_to_base64",
    "image_to_png_bytes",
    "to_data_url",
    "split_data_url",
    "map_to_aspect_ratio",
    "detect_aspect_ratio",
    "binarize_mask",
    "mask_coverage",
    "crop_to_region",
    "add_watermark",
    "TinyHomeModel",
    "PoolModel",
    "Product",
    "TINY_HOME_MODELS",
    "POOL_MODELS",
    "get_product",
    "is_pool_model",
    "load_reference_image",
]
