"""
Tests for the editing session workflow
"""

import pytest
import asyncio
import io
from typing import List, Optional
from PIL import Image
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from editing.geometry import Point, Size
from editing.session import EditingSession
from generation.base import GenerationResult, ImageGenerator
from generation.schemas import GenerationOptions, PlacementRequest
from utils.products import get_product


def create_test_image(width: int, height: int, color: tuple) -> bytes:
    """Create a test image with a solid color."""
    img = Image.new('RGB', (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


PHOTO = create_test_image(200, 150, (90, 140, 60))
REFERENCE = create_test_image(64, 64, (200, 200, 200))


class FakeGenerator(ImageGenerator):
    """Returns a new solid-colour image per call, or fails on demand."""

    name = "fake"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []
        self.state_during_call = []
        self.session: Optional[EditingSession] = None

    async def generate(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        self.calls.append((source_image, auxiliary_images, instruction))
        if self.session is not None:
            self.state_during_call.append((self.session.processing, self.session.mask.disabled))

        if self.fail:
            return GenerationResult(success=False, error="quota exceeded", provider=self.name)

        shade = min(255, 20 * len(self.calls))
        return GenerationResult(
            success=True,
            image_data=create_test_image(200, 150, (shade, shade, shade)),
            prompt_used=instruction,
            provider=self.name,
        )


def make_session(fail: bool = False, product_id: str = 'deluxe-tiny-home'):
    generator = FakeGenerator(fail=fail)
    session = EditingSession(generator, get_product(product_id), reference_image=REFERENCE)
    generator.session = session
    session.load_image(PHOTO)
    return session, generator


def paint(session: EditingSession, point=(100, 75)):
    session.mask.begin_stroke(Point(*point), brush_size=20)
    session.mask.end_stroke()


class TestLoadImage:
    def test_load_resets_state(self):
        session, _ = make_session()
        asyncio.run(session.generate_placement())
        paint(session)

        other = create_test_image(300, 300, (1, 2, 3))
        session.load_image(other)

        assert len(session.history) == 0
        assert session.current_image == other
        assert session.mask.strokes == ()
        assert session.mask.pixel_size == (300, 300)
        assert session.selector.selection is None

    def test_nothing_to_do_without_image(self):
        generator = FakeGenerator()
        session = EditingSession(generator, get_product('pool-1'), reference_image=REFERENCE)
        assert asyncio.run(session.generate_placement()) is None
        assert asyncio.run(session.conversational_edit('add a tree')) is None
        assert session.export_image() is None
        assert generator.calls == []


class TestPlacement:
    def test_success_appends_to_history(self):
        session, generator = make_session()
        result = asyncio.run(session.generate_placement('left'))

        assert result.success
        assert len(session.history) == 1
        assert session.current_image == result.image_data

        source, auxiliary, prompt = generator.calls[0]
        assert source == PHOTO
        assert auxiliary == [REFERENCE]
        assert 'Deluxe Tiny Home' in prompt
        assert 'left side' in prompt

    def test_failure_leaves_history_untouched(self):
        session, _ = make_session(fail=True)
        result = asyncio.run(session.generate_placement())

        assert not result.success
        assert len(session.history) == 0
        assert session.last_error == 'quota exceeded'
        assert session.current_image == PHOTO
        assert not session.processing

    def test_processing_flag_during_request(self):
        session, generator = make_session()
        asyncio.run(session.generate_placement())

        assert generator.state_during_call == [(True, True)]
        assert not session.processing
        assert not session.mask.disabled

    def test_hour_adds_lighting(self):
        session, generator = make_session()
        session.time_of_day = 19
        asyncio.run(session.generate_placement())
        assert 'SUNSET' in generator.calls[0][2]

    def test_from_request(self):
        request = PlacementRequest(product_id='pool-2', hour=8, person_height_cm=180)
        session = EditingSession.from_request(FakeGenerator(), request, reference_image=REFERENCE)
        assert session.product.id == 'pool-2'
        assert session.time_of_day == 8
        assert session.person_height_cm == 180

    def test_lighting_preserved_by_default(self):
        session, generator = make_session()
        asyncio.run(session.generate_placement())
        assert 'LIGHTING PRESERVATION MODE' in generator.calls[0][2]

    def test_request_can_turn_off_lighting_preservation(self):
        generator = FakeGenerator()
        request = PlacementRequest(product_id='deluxe-tiny-home', preserve_lighting=False)
        session = EditingSession.from_request(generator, request, reference_image=REFERENCE)
        session.load_image(PHOTO)
        asyncio.run(session.generate_placement())

        prompt = generator.calls[0][2]
        assert 'LIGHTING PRESERVATION MODE' not in prompt
        assert 'Lighting & Environmental Integration' in prompt

    def test_from_request_unknown_product(self):
        with pytest.raises(ValueError):
            EditingSession.from_request(FakeGenerator(), PlacementRequest(product_id='nope'))


class TestEdits:
    def test_lighting_before_placement_is_remembered(self):
        session, generator = make_session()
        assert asyncio.run(session.apply_lighting(12)) is None
        assert session.time_of_day == 12
        assert generator.calls == []

    def test_lighting_edits_current_result(self):
        session, generator = make_session()
        placed = asyncio.run(session.generate_placement())
        asyncio.run(session.apply_lighting(21))

        source, auxiliary, prompt = generator.calls[1]
        assert source == placed.image_data
        assert auxiliary == []
        assert 'NIGHT' in prompt
        assert len(session.history) == 2

    def test_lighting_hour_out_of_range(self):
        session, _ = make_session()
        with pytest.raises(ValueError):
            asyncio.run(session.apply_lighting(3))

    def test_quick_command_moves_position(self):
        session, generator = make_session()
        asyncio.run(session.generate_placement())
        asyncio.run(session.quick_command('move left'))

        assert session.position.x == 40
        assert 'left side of the scene' in generator.calls[1][2]

    def test_conversational_edit(self):
        session, generator = make_session()
        result = asyncio.run(session.conversational_edit('add a garden bed'))
        assert result.success
        assert 'add a garden bed' in generator.calls[0][2]
        assert generator.calls[0][0] == PHOTO

    def test_masked_edit_needs_paint(self):
        session, generator = make_session()
        assert asyncio.run(session.masked_edit('remove the shed')) is None
        assert generator.calls == []

    def test_masked_edit_sends_mask(self):
        session, generator = make_session()
        paint(session)
        result = asyncio.run(session.masked_edit('remove the shed'))

        assert result.success
        source, auxiliary, prompt = generator.calls[0]
        assert len(auxiliary) == 1
        mask = np.asarray(Image.open(io.BytesIO(auxiliary[0])).convert('L'))
        assert mask.shape == (150, 200)
        assert mask[75, 100] == 255
        assert 'remove the shed' in prompt
        # The new result gets a fresh mask
        assert session.mask.strokes == ()

    def test_failed_masked_edit_keeps_strokes(self):
        session, _ = make_session(fail=True)
        paint(session)
        asyncio.run(session.masked_edit())
        assert len(session.mask.strokes) == 1

    def test_region_edit_needs_selection(self):
        session, generator = make_session()
        assert asyncio.run(session.region_edit('zoom in')) is None
        assert generator.calls == []

    def test_region_edit_sends_region_and_crop(self):
        session, generator = make_session()
        session.selector.begin(Point(20, 15))
        session.selector.update(Point(120, 90))
        session.selector.end()

        result = asyncio.run(session.region_edit())
        assert result.success

        source, auxiliary, prompt = generator.calls[0]
        assert '[100, 100, 600, 600]' in prompt
        crop = Image.open(io.BytesIO(auxiliary[0]))
        assert crop.size == (100, 75)
        assert session.selector.selection is None

    def test_failed_region_edit_keeps_selection(self):
        session, _ = make_session(fail=True)
        session.selector.begin(Point(20, 15))
        session.selector.update(Point(120, 90))
        session.selector.end()

        asyncio.run(session.region_edit('zoom in'))
        assert session.selector.selection is not None


class TestNavigation:
    def test_undo_redo(self):
        session, _ = make_session()
        first = asyncio.run(session.generate_placement()).image_data
        second = asyncio.run(session.conversational_edit('add a path')).image_data

        assert session.undo() == first
        assert session.current_image == first
        assert session.undo() is None
        assert session.redo() == second
        assert session.redo() is None

    def test_edit_after_undo_drops_redo_branch(self):
        session, _ = make_session()
        asyncio.run(session.generate_placement())
        asyncio.run(session.conversational_edit('add a path'))
        session.undo()
        third = asyncio.run(session.conversational_edit('add a fence')).image_data

        assert len(session.history) == 2
        assert session.current_image == third
        assert session.redo() is None

    def test_toggle_original(self):
        session, _ = make_session()
        assert session.toggle_original() is False

        result = asyncio.run(session.generate_placement())
        assert session.toggle_original() is True
        assert session.display_image == PHOTO
        assert session.toggle_original() is False
        assert session.display_image == result.image_data

    def test_export_watermarked(self):
        session, _ = make_session()
        asyncio.run(session.generate_placement())

        raw = session.export_image(watermark=False)
        marked = session.export_image()
        assert raw == session.current_image
        assert marked != raw
        assert Image.open(io.BytesIO(marked)).size == (200, 150)

    def test_resize_display_maps_strokes(self):
        session, _ = make_session()
        session.resize_display(Size(100, 75))
        session.mask.begin_stroke(Point(50, 37.5), brush_size=10)
        mask = session.mask.end_stroke()

        arr = np.asarray(Image.open(io.BytesIO(mask)).convert('L'))
        assert arr[75, 100] == 255
