"""
Tests for image utilities, options and the product catalog
"""

import pytest
import io
from collections import namedtuple
from PIL import Image
import numpy as np
from pydantic import ValidationError

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from utils.image_processing import (
    add_watermark,
    binarize_mask,
    crop_to_region,
    detect_aspect_ratio,
    detect_mime_type,
    get_image_size,
    mask_coverage,
    map_to_aspect_ratio,
    split_data_url,
    to_data_url,
)
from utils.products import get_product, is_pool_model, load_reference_image
from generation.schemas import GenerationOptions, PlacementRequest


Region = namedtuple('Region', 'top left bottom right')


def create_test_image(width: int, height: int, color: tuple, fmt: str = 'PNG') -> bytes:
    """Create a test image with a solid color."""
    img = Image.new('RGB', (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def create_half_white_mask(width: int, height: int) -> bytes:
    """Left half black, right half white."""
    img = Image.new('L', (width, height), 0)
    img.paste(255, (width // 2, 0, width, height))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


class TestAspectRatio:
    @pytest.mark.parametrize('ratio,expected', [
        (16 / 9, '16:9'),
        (1.0, '1:1'),
        (4 / 3, '4:3'),
        (9 / 16, '9:16'),
        (21 / 9, '21:9'),
        (3.5, '16:9'),
        (0.2, '9:16'),
    ])
    def test_map_to_aspect_ratio(self, ratio, expected):
        assert map_to_aspect_ratio(ratio) == expected

    def test_detect_from_image(self):
        assert detect_aspect_ratio(create_test_image(1920, 1080, (0, 0, 0))) == '16:9'
        assert detect_aspect_ratio(create_test_image(300, 400, (0, 0, 0))) == '3:4'


class TestEncoding:
    def test_detect_mime_type(self):
        assert detect_mime_type(create_test_image(10, 10, (1, 1, 1), fmt='JPEG')) == 'image/jpeg'
        assert detect_mime_type(create_test_image(10, 10, (1, 1, 1))) == 'image/png'
        assert detect_mime_type(b'not an image') == 'image/png'

    def test_data_url(self):
        png = create_test_image(8, 8, (255, 0, 0))
        url = to_data_url(png)
        assert url.startswith('data:image/png;base64,')
        assert split_data_url(url) == ('image/png', png)

    def test_bare_base64(self):
        png = create_test_image(8, 8, (255, 0, 0))
        mime, data = split_data_url(to_data_url(png).split(',', 1)[1])
        assert mime is None
        assert data == png

    def test_get_image_size(self):
        assert get_image_size(create_test_image(33, 21, (0, 0, 0))) == (33, 21)


class TestMasks:
    def test_binarize_snaps_to_extremes(self):
        img = Image.fromarray(np.array([[0, 100, 127], [128, 200, 255]], dtype=np.uint8))
        arr = np.asarray(binarize_mask(img))
        assert arr.tolist() == [[0, 0, 0], [255, 255, 255]]

    def test_mask_coverage(self):
        assert mask_coverage(create_half_white_mask(100, 40)) == pytest.approx(0.5)
        assert mask_coverage(create_test_image(20, 20, (0, 0, 0))) == 0


class TestCrop:
    def test_crop_to_region(self):
        image = create_test_image(400, 200, (10, 10, 10))
        cropped = Image.open(io.BytesIO(crop_to_region(image, Region(250, 100, 750, 600))))
        assert cropped.size == (200, 100)

    def test_degenerate_region_keeps_a_pixel(self):
        image = create_test_image(100, 100, (10, 10, 10))
        cropped = Image.open(io.BytesIO(crop_to_region(image, Region(500, 500, 500, 500))))
        assert cropped.size == (1, 1)


class TestWatermark:
    def test_caption_only(self):
        image = create_test_image(400, 300, (0, 0, 0))
        marked = Image.open(io.BytesIO(add_watermark(image))).convert('RGB')
        assert marked.size == (400, 300)
        # Caption lands in the bottom-left corner
        corner = np.asarray(marked)[220:300, 0:250]
        assert corner.max() > 0
        assert np.asarray(marked)[0:100, 300:400].max() == 0

    def test_with_logo(self):
        image = create_test_image(400, 300, (0, 0, 0))
        logo = create_test_image(240, 120, (255, 255, 255))
        marked = np.asarray(Image.open(io.BytesIO(add_watermark(image, logo))).convert('RGB'))

        # Logo scaled to 120x60 at 60% opacity, 20px from the left and bottom
        pixel = marked[300 - 20 - 30, 20 + 60]
        assert 140 <= pixel[0] <= 165

    def test_logo_opacity_applied_once(self):
        image = create_test_image(300, 300, (0, 0, 0))
        logo = create_test_image(120, 120, (255, 0, 0))
        marked = np.asarray(Image.open(io.BytesIO(add_watermark(image, logo))).convert('RGB'))

        # Centre of the logo: 60% red over black
        red, green, blue = marked[300 - 20 - 60, 20 + 60]
        assert abs(int(red) - 153) <= 2
        assert green == 0 and blue == 0

    def test_caption_stays_inside_padding(self):
        image = create_test_image(400, 300, (0, 0, 0))
        marked = np.asarray(Image.open(io.BytesIO(add_watermark(image))).convert('RGB'))
        # Nothing drawn in the bottom padding strip
        assert marked[300 - 20 + 1:, :].max() == 0
        assert marked[220:300, 0:250].max() > 0

    def test_caption_centred_on_logo(self):
        image = create_test_image(400, 300, (0, 0, 0))
        logo = create_test_image(240, 120, (0, 0, 0))
        marked = np.asarray(Image.open(io.BytesIO(add_watermark(image, logo))).convert('RGB'))

        # Logo box spans rows 220-279; caption sits right of it, within that band
        caption = marked[:, 152:400]
        rows = np.nonzero(caption.max(axis=(1, 2)))[0]
        assert rows.min() >= 220
        assert rows.max() < 280
        assert abs((rows.min() + rows.max()) / 2 - 250) <= 4

    def test_bad_logo_still_captions(self):
        image = create_test_image(200, 200, (0, 0, 0))
        marked = add_watermark(image, b'garbage')
        assert Image.open(io.BytesIO(marked)).size == (200, 200)


class TestSchemas:
    def test_effective_image_size(self):
        assert GenerationOptions().effective_image_size() == '1K'
        assert GenerationOptions(accuracy_mode='maximum').effective_image_size() == '2K'
        assert GenerationOptions(accuracy_mode='ultra').effective_image_size() == '4K'
        assert GenerationOptions(accuracy_mode='ultra', image_size='1K').effective_image_size() == '1K'

    def test_search_enabled(self):
        assert not GenerationOptions().search_enabled()
        assert GenerationOptions(enable_google_search=True).search_enabled()
        assert GenerationOptions(accuracy_mode='maximum').search_enabled()

    def test_option_bounds(self):
        with pytest.raises(ValidationError):
            GenerationOptions(temperature=3)
        with pytest.raises(ValidationError):
            GenerationOptions(image_size='8K')

    def test_placement_request_bounds(self):
        assert PlacementRequest(product_id='pool-1', hour=22).hour == 22
        with pytest.raises(ValidationError):
            PlacementRequest(product_id='pool-1', hour=6)
        with pytest.raises(ValidationError):
            PlacementRequest(product_id='pool-1', person_height_cm=0)
        with pytest.raises(ValidationError):
            PlacementRequest(product_id='pool-1', placement='behind')


class TestProducts:
    def test_lookup(self):
        assert get_product('blue-lagoon').name == 'Blue Lagoon'
        assert get_product('missing') is None

    def test_kind(self):
        pool = get_product('pool-2')
        assert is_pool_model(pool)
        assert pool.kind == 'pool'
        assert pool.dimensions.depth == 1.8
        assert not is_pool_model(get_product('deluxe-tiny-home'))

    def test_load_reference_image(self, tmp_path):
        product = get_product('pool-1')
        target = tmp_path / product.image_path
        target.parent.mkdir(parents=True)
        target.write_bytes(b'png-bytes')
        assert load_reference_image(product, tmp_path) == b'png-bytes'

    def test_missing_reference_image(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_reference_image(get_product('pool-1'), tmp_path)
