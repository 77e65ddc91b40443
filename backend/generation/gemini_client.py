"""
Gemini API client for product placement and image edits.
Calls the generateContent REST endpoint of an image-output Gemini model.
"""

import asyncio
import base64
import os
import time
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv

from utils.image_processing import detect_aspect_ratio, detect_mime_type

from .base import GenerationResult, ImageGenerator
from .schemas import GenerationOptions

load_dotenv()

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-3-pro-image-preview")

RETRYABLE_MARKERS = ["429", "resource_exhausted", "500", "502", "503", "504"]


class GeminiAPIError(Exception):
    """Non-success HTTP response from the Gemini API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code


class GeminiImageClient(ImageGenerator):
    """
    Client for image generation with Google Gemini.

    Handles:
    - API key configuration
    - Request construction (source image, auxiliary images, then text)
    - Aspect ratio detection for imageConfig
    - Retry with backoff on rate limits and server errors
    """

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Google AI Studio API key (or set GEMINI_API_KEY env var)
            model_name: Image model to call (or set GEMINI_IMAGE_MODEL)
            max_retries: Number of attempts for transient errors
            retry_delay: Base seconds between retries, multiplied per attempt
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set")

        self.model_name = model_name or DEFAULT_GEMINI_MODEL
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.transport = transport

    def _is_retryable_error(self, error: Exception) -> bool:
        """Check if the error is retryable (rate limits, server errors)."""
        if isinstance(error, httpx.TransportError):
            return True
        if isinstance(error, GeminiAPIError):
            return error.status_code == 429 or error.status_code >= 500
        message = str(error).lower()
        return any(marker in message for marker in RETRYABLE_MARKERS)

    def build_payload(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: GenerationOptions,
    ) -> Dict[str, Any]:
        """Build the generateContent request body."""
        parts: List[Dict[str, Any]] = []
        for image in [source_image, *auxiliary_images]:
            parts.append({
                "inlineData": {
                    "mimeType": detect_mime_type(image),
                    "data": base64.b64encode(image).decode("utf-8"),
                }
            })
        parts.append({"text": instruction})

        generation_config: Dict[str, Any] = {
            "responseModalities": ["IMAGE"],
            "temperature": options.temperature,
            "imageConfig": {
                "aspectRatio": options.aspect_ratio or detect_aspect_ratio(source_image),
                "imageSize": options.effective_image_size(),
            },
        }
        if options.top_p is not None:
            generation_config["topP"] = options.top_p
        if options.top_k is not None:
            generation_config["topK"] = options.top_k

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }
        if options.search_enabled():
            payload["tools"] = [{"googleSearch": {}}]
        return payload

    @staticmethod
    def parse_response(data: Dict[str, Any]):
        """
        Pull the first inline image out of a generateContent response.

        Returns:
            (image_bytes, mime_type, text) where image_bytes is None if the
            model answered with text only
        """
        texts = []
        for candidate in data.get("candidates", [])[:1]:
            for part in candidate.get("content", {}).get("parts", []):
                inline = part.get("inlineData")
                if inline and inline.get("data"):
                    return (
                        base64.b64decode(inline["data"]),
                        inline.get("mimeType", "image/png"),
                        None,
                    )
                if part.get("text"):
                    texts.append(part["text"])
        return None, None, "".join(texts) or None

    async def _post_with_retry(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST to generateContent, retrying transient failures."""
        url = f"{GEMINI_API_BASE}/{model}:generateContent"
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.post(
                        url,
                        params={"key": self.api_key},
                        json=payload,
                        headers={"Content-Type": "application/json"},
                    )
                if response.status_code == 200:
                    return response.json()

                last_error = GeminiAPIError(response.status_code, response.text[:500])
                if response.status_code == 429:
                    print(f"[WARN] Gemini rate limited, retrying ({attempt + 1}/{self.max_retries})")
                elif response.status_code < 500:
                    raise last_error

            except Exception as e:
                last_error = e
                if not self._is_retryable_error(e):
                    raise
                print(f"[WARN] Gemini error (attempt {attempt + 1}): {e}")

            if attempt < self.max_retries - 1:
                delay = self.retry_delay * (attempt + 1)
                print(f"[INFO] Retrying in {delay}s...")
                await asyncio.sleep(delay)

        raise last_error or Exception("Failed after all retries")

    async def generate(
        self,
        source_image: bytes,
        auxiliary_images: List[bytes],
        instruction: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        """
        Render an image from the source photo and instruction.

        Args:
            source_image: Property photo or current result (image [0])
            auxiliary_images: Product reference, mask or crop (images [1..])
            instruction: Prompt text
            options: Sampling and output settings

        Returns:
            GenerationResult with image data, or the error on failure
        """
        options = options or GenerationOptions()
        model = options.model or self.model_name
        start_time = time.time()

        try:
            payload = self.build_payload(source_image, auxiliary_images, instruction, options)
            print(f"[INFO] Calling Gemini ({model}) with {1 + len(auxiliary_images)} image(s)")
            data = await self._post_with_retry(model, payload)
            image_data, mime_type, text = self.parse_response(data)
            elapsed = time.time() - start_time

            if image_data is None:
                error = f"No image generated. API Response: {text or 'No response text'}"
                print(f"[ERR] {error[:200]}")
                return GenerationResult(
                    success=False,
                    prompt_used=instruction,
                    model=model,
                    provider=self.name,
                    elapsed_seconds=elapsed,
                    error=error,
                    text_response=text,
                )

            print(f"[OK] Gemini image received in {elapsed:.1f}s")
            return GenerationResult(
                success=True,
                image_data=image_data,
                mime_type=mime_type,
                prompt_used=instruction,
                model=model,
                provider=self.name,
                elapsed_seconds=elapsed,
            )

        except Exception as e:
            elapsed = time.time() - start_time
            print(f"[ERR] Gemini generation failed: {e}")
            return GenerationResult(
                success=False,
                prompt_used=instruction,
                model=model,
                provider=self.name,
                elapsed_seconds=elapsed,
                error=str(e),
            )
