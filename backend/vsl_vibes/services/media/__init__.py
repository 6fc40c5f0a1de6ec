"""
Media adapters - third-party HTTP APIs for photos, images and speech.
"""

from .http import require_key, send, send_json, send_with_retry, with_retry
from .image_generation import IMAGE_PROVIDERS, GeneratedImage, ImageGenerator
from .prompt_webhook import ImagePrompt, ImagePromptService, fallback_prompt
from .stock_photos import PexelsClient, PixabayClient, StockPhoto
from .tts import ElevenLabsClient, SpeechResult, estimate_duration

__all__ = [
    "require_key",
    "send",
    "send_json",
    "send_with_retry",
    "with_retry",
    "IMAGE_PROVIDERS",
    "GeneratedImage",
    "ImageGenerator",
    "ImagePrompt",
    "ImagePromptService",
    "fallback_prompt",
    "PexelsClient",
    "PixabayClient",
    "StockPhoto",
    "ElevenLabsClient",
    "SpeechResult",
    "estimate_duration",
]
