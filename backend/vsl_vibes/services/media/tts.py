"""
ElevenLabs text-to-speech, voice catalog and subscription info.

Audio is returned as a ``data:audio/mpeg;base64`` URL so it can be stored
directly on the slide document.
"""

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ...config import ELEVENLABS_BASE_URL, ELEVENLABS_MODEL_ID, get_api_key
from ...core.logging import get_logger
from .http import require_key, send, send_json

logger = get_logger(__name__, component="elevenlabs")

WORDS_PER_MINUTE = 150
PROVIDER = "elevenlabs"


def estimate_duration(text: str) -> float:
    """Narration length in seconds at ~150 words per minute."""
    return len(text.split()) / WORDS_PER_MINUTE * 60


def clamp(value: Optional[float], low: float, high: float, default: float) -> float:
    if value is None:
        return default
    return max(low, min(high, float(value)))


@dataclass
class SpeechResult:
    audio_content: str
    duration: float

    def to_dict(self) -> Dict[str, Any]:
        return {"audioContent": self.audio_content, "duration": self.duration}


class ElevenLabsClient:
    """
    Usage:
        client = ElevenLabsClient(api_key="...")
        speech = await client.synthesize("Hello there", voice_id="abc")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = ELEVENLABS_BASE_URL,
        model_id: str = ELEVENLABS_MODEL_ID,
    ):
        self.api_key = api_key
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id

    def _headers(self) -> Dict[str, str]:
        key = require_key(get_api_key("ELEVENLABS_API_KEY", self.api_key), "API key is required", PROVIDER)
        return {"xi-api-key": key}

    async def synthesize(
        self,
        text: str,
        voice_id: str,
        stability: Optional[float] = None,
        similarity_boost: Optional[float] = None,
        speed: Optional[float] = None,
    ) -> SpeechResult:
        headers = self._headers()
        response = await send(
            "POST",
            f"{self.base_url}/text-to-speech/{voice_id}",
            provider=PROVIDER,
            client=self.client,
            headers={**headers, "Accept": "audio/mpeg"},
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": {
                    "stability": clamp(stability, 0.0, 1.0, 0.5),
                    "similarity_boost": clamp(similarity_boost, 0.0, 1.0, 0.75),
                    "speed": clamp(speed, 0.7, 1.2, 1.0),
                },
            },
        )
        encoded = base64.b64encode(response.content).decode("ascii")
        duration = estimate_duration(text)
        logger.info("Speech generated", extra={"voice_id": voice_id, "duration_seconds": duration})
        return SpeechResult(audio_content=f"data:audio/mpeg;base64,{encoded}", duration=duration)

    async def list_voices(self) -> List[Dict[str, Any]]:
        """Voices with cloned voices first; order is otherwise preserved."""
        data = await send_json("GET", f"{self.base_url}/voices", provider=PROVIDER,
                               client=self.client, headers=self._headers())
        voices = [
            {
                "voice_id": voice.get("voice_id"),
                "name": voice.get("name"),
                "category": voice.get("category"),
            }
            for voice in data.get("voices") or []
        ]
        return sorted(voices, key=lambda voice: voice["category"] != "cloned")

    async def subscription(self) -> Dict[str, int]:
        data = await send_json("GET", f"{self.base_url}/user/subscription", provider=PROVIDER,
                               client=self.client, headers=self._headers())
        count = int(data.get("character_count") or 0)
        limit = int(data.get("character_limit") or 0)
        return {
            "character_count": count,
            "character_limit": limit,
            "remaining_characters": limit - count,
        }
