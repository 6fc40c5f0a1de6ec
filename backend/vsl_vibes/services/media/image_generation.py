"""
AI image generation (OpenAI Images over HTTP, Gemini Imagen via google-genai).

Both providers receive the same photographic prefix and return an image URL:
OpenAI returns a hosted URL, Gemini returns inline bytes which are wrapped
in a ``data:image/png;base64`` URL.
"""

import asyncio
import base64
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ...config import GEMINI_IMAGE_MODEL, OPENAI_IMAGES_URL, get_api_key
from ...core.exceptions import TransportError, UpstreamError, error_for_status
from ...core.logging import get_logger
from .http import require_key, send_json

logger = get_logger(__name__, component="image_generation")

IMAGE_PROVIDERS = ("openai", "gemini")
PROMPT_PREFIX = "Ultra realistic, professional: "


@dataclass
class GeneratedImage:
    image_url: str
    provider: str
    revised_prompt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"imageUrl": self.image_url, "provider": self.provider}
        if self.revised_prompt:
            data["revisedPrompt"] = self.revised_prompt
        return data


class ImageGenerator:
    """
    Generate a single 16:9 image from a prompt.

    ``gemini_client_factory`` builds a ``genai.Client`` from an API key and is
    replaced in tests.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        gemini_client_factory: Optional[Callable[[str], Any]] = None,
        openai_url: str = OPENAI_IMAGES_URL,
        gemini_model: str = GEMINI_IMAGE_MODEL,
    ):
        self.client = client
        self.gemini_client_factory = gemini_client_factory or (lambda key: genai.Client(api_key=key))
        self.openai_url = openai_url
        self.gemini_model = gemini_model

    async def generate(self, prompt: str, provider: str, api_key: Optional[str] = None) -> GeneratedImage:
        """
        Raises:
            ValueError: for an unknown provider
            ProviderError: for upstream failures (status preserved)
        """
        if provider == "openai":
            return await self._generate_openai(prompt, api_key)
        if provider == "gemini":
            return await self._generate_gemini(prompt, api_key)
        raise ValueError('Invalid provider. Use "openai" or "gemini".')

    async def _generate_openai(self, prompt: str, api_key: Optional[str]) -> GeneratedImage:
        key = require_key(get_api_key("OPENAI_API_KEY", api_key), "OpenAI API key is required", "openai")
        data = await send_json(
            "POST",
            self.openai_url,
            provider="openai",
            client=self.client,
            timeout=120.0,
            headers={"Authorization": f"Bearer {key}"},
            json={
                "model": "dall-e-3",
                "prompt": f"{PROMPT_PREFIX}{prompt}",
                "n": 1,
                "size": "1792x1024",
                "quality": "hd",
                "style": "natural",
            },
        )
        first = (data.get("data") or [{}])[0]
        if not first.get("url"):
            raise UpstreamError("No image returned from OpenAI", provider="openai", status_code=500)
        logger.info("Image generated", extra={"provider": "openai"})
        return GeneratedImage(image_url=first["url"], provider="openai",
                              revised_prompt=first.get("revised_prompt"))

    async def _generate_gemini(self, prompt: str, api_key: Optional[str]) -> GeneratedImage:
        key = require_key(get_api_key("GEMINI_API_KEY", api_key), "Gemini API key is required", "gemini")
        client = self.gemini_client_factory(key)
        config = types.GenerateImagesConfig(number_of_images=1, aspect_ratio="16:9")
        try:
            # The SDK call is synchronous; keep it off the event loop
            response = await asyncio.to_thread(
                client.models.generate_images,
                model=self.gemini_model,
                prompt=f"{PROMPT_PREFIX}{prompt}",
                config=config,
            )
        except genai_errors.APIError as e:
            raise error_for_status(e.code or 500, e.message or str(e), provider="gemini") from e
        except httpx.HTTPError as e:
            raise TransportError(f"gemini request failed: {e}", provider="gemini") from e

        images = getattr(response, "generated_images", None) or []
        image_bytes = images[0].image.image_bytes if images and images[0].image else None
        if not image_bytes:
            raise UpstreamError("No image returned from Gemini", provider="gemini", status_code=500)
        encoded = base64.b64encode(image_bytes).decode("ascii")
        logger.info("Image generated", extra={"provider": "gemini"})
        return GeneratedImage(image_url=f"data:image/png;base64,{encoded}", provider="gemini")


__all__ = ["GeneratedImage", "ImageGenerator", "IMAGE_PROVIDERS"]
