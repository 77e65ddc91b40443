"""
Tests for the FLUX Kontext queue client (HTTP mocked with httpx.MockTransport)
"""

import pytest
import asyncio
import io
import json
import httpx
from PIL import Image

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from generation.flux_client import FluxKontextClient, MULTI_IMAGE_MODEL
from generation.schemas import GenerationOptions


def create_test_image(width: int, height: int, color: tuple) -> bytes:
    img = Image.new('RGB', (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


SOURCE = create_test_image(320, 180, (100, 150, 100))
REFERENCE = create_test_image(32, 32, (250, 250, 250))
RESULT = create_test_image(320, 180, (5, 5, 5))

STATUS_URL = 'https://queue.fal.run/fal-ai/flux-pro/requests/req-1/status'
RESPONSE_URL = 'https://queue.fal.run/fal-ai/flux-pro/requests/req-1'
IMAGE_URL = 'https://v3.fal.media/files/result.png'


class FalQueue:
    """Fake fal.ai queue: submit, a few IN_PROGRESS polls, then COMPLETED."""

    def __init__(self, polls_before_done: int = 1, final_status: str = 'COMPLETED'):
        self.polls_before_done = polls_before_done
        self.final_status = final_status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method == 'POST':
            return httpx.Response(200, json={
                'request_id': 'req-1',
                'status_url': STATUS_URL,
                'response_url': RESPONSE_URL,
            })
        if url == STATUS_URL:
            if self.polls_before_done > 0:
                self.polls_before_done -= 1
                return httpx.Response(202, json={'status': 'IN_PROGRESS'})
            return httpx.Response(200, json={'status': self.final_status})
        if url == RESPONSE_URL:
            return httpx.Response(200, json={
                'images': [{'url': IMAGE_URL, 'content_type': 'image/png'}],
            })
        if url == IMAGE_URL:
            return httpx.Response(200, content=RESULT)
        return httpx.Response(404, text='not found')

    @property
    def submitted(self) -> httpx.Request:
        return next(r for r in self.requests if r.method == 'POST')


def make_client(queue: FalQueue) -> FluxKontextClient:
    return FluxKontextClient(
        api_key='fal-key',
        model_name='fal-ai/flux-pro/kontext',
        poll_interval=0,
        transport=httpx.MockTransport(queue),
    )


class TestFluxKontextClient:
    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv('FAL_API_KEY', raising=False)
        with pytest.raises(ValueError):
            FluxKontextClient()

    def test_single_image_edit(self):
        queue = FalQueue(polls_before_done=2)
        result = asyncio.run(make_client(queue).generate(SOURCE, [], 'Add a deck'))

        assert result.success
        assert result.image_data == RESULT
        assert result.provider == 'flux'
        assert result.model == 'fal-ai/flux-pro/kontext'

        submitted = queue.submitted
        assert str(submitted.url) == 'https://queue.fal.run/fal-ai/flux-pro/kontext'
        assert submitted.headers['Authorization'] == 'Key fal-key'

        body = json.loads(submitted.content)
        assert body['prompt'] == 'Add a deck'
        assert body['aspect_ratio'] == '16:9'
        assert body['image_url'].startswith('data:image/png;base64,')
        assert 'image_urls' not in body

    def test_auxiliary_images_use_multi_endpoint(self):
        queue = FalQueue()
        result = asyncio.run(make_client(queue).generate(SOURCE, [REFERENCE], 'Place the pool'))

        assert result.success
        assert result.model == MULTI_IMAGE_MODEL
        body = json.loads(queue.submitted.content)
        assert len(body['image_urls']) == 2
        assert 'image_url' not in body

    def test_failed_generation(self):
        queue = FalQueue(final_status='FAILED')
        result = asyncio.run(make_client(queue).generate(SOURCE, [], 'Add a deck'))

        assert not result.success
        assert 'failed' in result.error

    def test_unsupported_ratio_falls_back_to_square(self):
        client = make_client(FalQueue())
        body = client.build_input(SOURCE, [], 'x', GenerationOptions(aspect_ratio='5:4'))
        assert body['aspect_ratio'] == '1:1'
