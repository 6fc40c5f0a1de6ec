"""
Image prompt generation through an optional external webhook.

When no webhook is configured, or the webhook fails, a local template
prompt is returned instead. Callers always get a prompt.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ...config import IMAGE_PROMPT_WEBHOOK_URL
from ...core.exceptions import ProviderError
from ...core.logging import get_logger
from .http import send

logger = get_logger(__name__, component="prompt_webhook")

PROMPT_STYLE = "ultra realistic, professional, high quality, 4K, cinematic lighting"


@dataclass
class ImagePrompt:
    prompt: str
    source: str  # "webhook" | "fallback"


def fallback_prompt(slide_text: str, image_keyword: Optional[str] = None) -> str:
    subject = f" Subject: {image_keyword}." if image_keyword else ""
    return (
        f"Ultra realistic, professional photograph. {slide_text}.{subject} "
        "High quality, 4K resolution, cinematic lighting, clean composition."
    )


def extract_prompt(data: Any) -> Optional[str]:
    """The webhook may answer with a bare string or one of several keys."""
    if isinstance(data, str):
        return data.strip() or None
    if isinstance(data, list) and data:
        return extract_prompt(data[0])
    if isinstance(data, dict):
        for key in ("prompt", "output", "text", "message"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


class ImagePromptService:
    def __init__(self, webhook_url: Optional[str] = IMAGE_PROMPT_WEBHOOK_URL,
                 client: Optional[httpx.AsyncClient] = None):
        self.webhook_url = webhook_url
        self.client = client

    async def generate(
        self,
        slide_text: str,
        image_keyword: Optional[str] = None,
        scene_title: Optional[str] = None,
        emotion: Optional[str] = None,
    ) -> ImagePrompt:
        if not self.webhook_url:
            return ImagePrompt(prompt=fallback_prompt(slide_text, image_keyword), source="fallback")

        try:
            response = await send(
                "POST",
                self.webhook_url,
                provider="prompt_webhook",
                client=self.client,
                json={
                    "slideText": slide_text,
                    "imageKeyword": image_keyword or "",
                    "sceneTitle": scene_title or "",
                    "emotion": emotion or "",
                    "style": PROMPT_STYLE,
                },
            )
            try:
                data = response.json()
            except ValueError:
                data = response.text
        except ProviderError as e:
            logger.warning("Prompt webhook failed, using local prompt", extra={"error": str(e)})
            return ImagePrompt(prompt=fallback_prompt(slide_text, image_keyword), source="fallback")

        prompt = extract_prompt(data)
        if not prompt:
            logger.warning("Prompt webhook returned no prompt, using local prompt")
            return ImagePrompt(prompt=fallback_prompt(slide_text, image_keyword), source="fallback")
        return ImagePrompt(prompt=prompt, source="webhook")
