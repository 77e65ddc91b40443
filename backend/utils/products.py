"""
Product catalog for the visualiser.
Tiny homes and pools that can be placed into a property photo.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from dotenv import load_dotenv

load_dotenv()

PRODUCT_ASSETS_DIR = Path(os.getenv("PRODUCT_ASSETS_DIR", Path(__file__).parent.parent / "assets"))
PRODUCT_URL = "https://unit2go.co.nz"


@dataclass
class TinyHomeDimensions:
    length: float  # metres
    width: float
    height: float


@dataclass
class PoolDimensions:
    length: float  # metres
    width: float
    depth: float


@dataclass
class TinyHomeModel:
    """A tiny home product with its reference render."""
    id: str
    name: str
    dimensions: TinyHomeDimensions
    price: int
    image_path: str  # Relative to the assets directory
    description: str
    features: List[str] = field(default_factory=list)
    product_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return "tiny home"


@dataclass
class PoolModel:
    """A pool product with its reference diagram."""
    id: str
    name: str
    dimensions: PoolDimensions
    price: int
    image_path: str
    description: str
    features: List[str] = field(default_factory=list)
    product_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return "pool"


Product = Union[TinyHomeModel, PoolModel]

_TINY_HOME_FEATURES = [
    "Modern architectural design",
    "Premium interior finishes",
    "Energy-efficient construction",
    "Full kitchen and bathroom",
    "Smart home ready",
    "Sustainable materials",
]

_POOL_FEATURES = [
    "Professional construction",
    "Energy-efficient filtration",
    "LED lighting options",
    "Customizable finishes",
    "Durable materials",
]

TINY_HOME_MODELS: List[TinyHomeModel] = [
    TinyHomeModel(
        id="deluxe-tiny-home",
        name="Deluxe Tiny Home",
        dimensions=TinyHomeDimensions(length=13.0, width=5.0, height=3.5),
        price=89900,
        image_path="tiny-home-models/deluxe-tiny-home.png",
        description="Our premium deluxe model featuring modern design and quality craftsmanship",
        features=list(_TINY_HOME_FEATURES),
        product_url=PRODUCT_URL,
    ),
    TinyHomeModel(
        id="blue-lagoon",
        name="Blue Lagoon",
        dimensions=TinyHomeDimensions(length=13.0, width=5.0, height=3.5),
        price=89900,
        image_path="tiny-home-models/blue-lagoon.png",
        description="Our premium Blue Lagoon model featuring modern design and quality craftsmanship",
        features=list(_TINY_HOME_FEATURES),
        product_url=PRODUCT_URL,
    ),
    TinyHomeModel(
        id="deluxe-perspective",
        name="Deluxe Tiny Home - Perspective",
        dimensions=TinyHomeDimensions(length=13.0, width=5.0, height=3.5),
        price=89900,
        image_path="tiny-home-models/tiny-home-perspective.png",
        description="Premium deluxe model with a perspective view for more accurate placement",
        features=list(_TINY_HOME_FEATURES),
        product_url=PRODUCT_URL,
    ),
]

POOL_MODELS: List[PoolModel] = [
    PoolModel(
        id="pool-1",
        name="Pool Design 1",
        dimensions=PoolDimensions(length=8.0, width=4.0, depth=1.5),
        price=45000,
        image_path="pool-models/pool-1.png",
        description="Modern swimming pool design with contemporary styling",
        features=["Modern pool design"] + _POOL_FEATURES,
        product_url=PRODUCT_URL,
    ),
    PoolModel(
        id="pool-2",
        name="Pool Design 2",
        dimensions=PoolDimensions(length=10.0, width=5.0, depth=1.8),
        price=52000,
        image_path="pool-models/pool-2.png",
        description="Elegant swimming pool design with premium features",
        features=["Elegant pool design"] + _POOL_FEATURES,
        product_url=PRODUCT_URL,
    ),
]

PRODUCTS_BY_ID: Dict[str, Product] = {
    p.id: p for p in [*TINY_HOME_MODELS, *POOL_MODELS]
}


def get_product(product_id: str) -> Optional[Product]:
    """Look up a product by id."""
    return PRODUCTS_BY_ID.get(product_id)


def is_pool_model(product: Product) -> bool:
    return isinstance(product, PoolModel)


def load_reference_image(product: Product, assets_dir: Optional[Path] = None) -> bytes:
    """
    Read the product's reference image from the assets directory.

    Raises:
        FileNotFoundError: if the reference image is missing
    """
    path = Path(assets_dir or PRODUCT_ASSETS_DIR) / product.image_path
    return path.read_bytes()
