"""
FLUX Kontext client (fal.ai queue API).

Image-to-image alternative to Gemini. Requests are submitted to the fal
queue, polled until complete, and the first output image is downloaded.
"""

import asyncio
import os
import time
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv

from utils.image_processing import detect_aspect_ratio, detect_mime_type, to_data_url

from .base import GenerationResult, ImageGenerator
from .schemas import GenerationOptions

load_dotenv()

FAL_QUEUE_BASE = "https://queue.fal.run"
DEFAULT_FLUX_MODEL = os.getenv("FLUX_MODEL", "fal-ai/flux-pro/kontext")
MULTI_IMAGE_MODEL = "fal-ai/flux-pro/kontext/max/multi"

# Kontext only accepts these ratios
FLUX_ASPECT_RATIOS = ["21:9", "16:9", "4:3", "3:2", "1:1", "2:3", "3:4", "9:16", "9:21"]


class FluxKontextClient(ImageGenerator):
    """
    Client for image editing with FLUX.1 Kontext on fal.ai.

    Single-image requests go to the configured model; requests with
    auxiliary images (product reference, mask) go to the multi-image model.
    """

    name = "flux"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        poll_interval: float = 1.0,
        max_wait_seconds: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("FAL_API_KEY")
        if not self.api_key:
            raise ValueError("FAL_API_KEY environment variable not set")

        self.model_name = model_name or DEFAULT_FLUX_MODEL
        self.poll_interval = poll_interval
        self.max_wait_seconds = max_wait_seconds
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Key {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_input(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: GenerationOptions,
    ) -> Dict[str, Any]:
        """Build the queue request body."""
        aspect_ratio = options.aspect_ratio or detect_aspect_ratio(source_image)
        if aspect_ratio not in FLUX_ASPECT_RATIOS:
            aspect_ratio = "1:1"

        body: Dict[str, Any] = {
            "prompt": instruction,
            "aspect_ratio": aspect_ratio,
            "output_format": "png",
            "num_images": 1,
            "guidance_scale": 3.5,
        }

        images = [source_image, *auxiliary_images]
        urls = [to_data_url(image, detect_mime_type(image)) for image in images]
        if auxiliary_images:
            body["image_urls"] = urls
        else:
            body["image_url"] = urls[0]
        return body

    def _endpoint(self, auxiliary_images: List[bytes]) -> str:
        return MULTI_IMAGE_MODEL if auxiliary_images else self.model_name

    async def _run_queue(self, client: httpx.AsyncClient, model: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Submit to the queue and wait for the result payload."""
        response = await client.post(f"{FAL_QUEUE_BASE}/{model}", headers=self.headers, json=body)
        if response.status_code not in (200, 201, 202):
            raise Exception(f"FLUX submit failed {response.status_code}: {response.text[:500]}")

        submission = response.json()
        status_url = submission.get("status_url")
        response_url = submission.get("response_url")
        if not status_url or not response_url:
            raise Exception(f"Unexpected FLUX queue response: {submission}")

        print(f"[INFO] FLUX request queued: {submission.get('request_id', '?')}")
        deadline = time.time() + self.max_wait_seconds

        while True:
            status_response = await client.get(status_url, headers=self.headers)
            if status_response.status_code not in (200, 202):
                raise Exception(f"FLUX status failed {status_response.status_code}: {status_response.text[:500]}")

            status = status_response.json().get("status")
            if status == "COMPLETED":
                break
            if status in ("FAILED", "ERROR", "CANCELLED"):
                raise Exception(f"FLUX generation {status.lower()}")
            if time.time() > deadline:
                raise Exception(f"FLUX generation timed out after {self.max_wait_seconds}s")
            await asyncio.sleep(self.poll_interval)

        result_response = await client.get(response_url, headers=self.headers)
        if result_response.status_code != 200:
            raise Exception(f"FLUX result failed {result_response.status_code}: {result_response.text[:500]}")
        return result_response.json()

    async def generate(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        options = options or GenerationOptions()
        model = self._endpoint(auxiliary_images)
        start_time = time.time()

        try:
            body = self.build_input(source_image, auxiliary_images, instruction, options)
            print(f"[INFO] Calling FLUX ({model}) with {1 + len(auxiliary_images)} image(s)")

            async with httpx.AsyncClient(timeout=120.0, transport=self.transport) as client:
                result = await self._run_queue(client, model, body)
                images = result.get("images") or []
                if not images or not images[0].get("url"):
                    raise Exception("No image URL in FLUX result")

                image_response = await client.get(images[0]["url"])
                if image_response.status_code != 200:
                    raise Exception(f"Failed to download FLUX image: {image_response.status_code}")
                image_data = image_response.content

            elapsed = time.time() - start_time
            print(f"[OK] FLUX image received in {elapsed:.1f}s")
            return GenerationResult(
                success=True,
                image_data=image_data,
                mime_type=images[0].get("content_type") or detect_mime_type(image_data),
                prompt_used=instruction,
                model=model,
                provider=self.name,
                elapsed_seconds=elapsed,
            )

        except Exception as e:
            elapsed = time.time() - start_time
            print(f"[ERR] FLUX generation failed: {e}")
            return GenerationResult(
                success=False,
                prompt_used=instruction,
                model=model,
                provider=self.name,
                elapsed_seconds=elapsed,
                error=str(e),
            )
