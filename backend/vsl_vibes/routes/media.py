"""
Media proxy endpoints: AI images, stock photo search, ElevenLabs speech.

Credentials come from the request body (``apiKey``) or the environment.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..models import (
    ApiKeyRequest,
    GenerateImageRequest,
    PhotoSearchRequest,
    PhotoSearchResponse,
    TtsRequest,
    TtsResponse,
)
from ..services.media import IMAGE_PROVIDERS, ElevenLabsClient, ImageGenerator, PexelsClient, PixabayClient
from .dependencies import get_image_generator
from .errors import HANDLED_ERRORS, http_error

router = APIRouter(tags=["media"])


@router.post("/generate-image")
async def generate_image(request: GenerateImageRequest,
                         generator: ImageGenerator = Depends(get_image_generator)) -> Dict[str, Any]:
    """Generate one 16:9 image with OpenAI or Gemini"""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")
    if request.provider not in IMAGE_PROVIDERS:
        raise HTTPException(status_code=400, detail='Invalid provider. Use "openai" or "gemini".')
    try:
        image = await generator.generate(request.prompt, request.provider, request.api_key)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return image.to_dict()


@router.post("/pexels-search", response_model=PhotoSearchResponse)
async def pexels_search(request: PhotoSearchRequest):
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    try:
        photos = await PexelsClient(api_key=request.api_key).search(request.query, request.per_page or 5)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return PhotoSearchResponse(photos=[photo.to_dict() for photo in photos])


@router.post("/pixabay-search", response_model=PhotoSearchResponse)
async def pixabay_search(request: PhotoSearchRequest):
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    try:
        photos = await PixabayClient(api_key=request.api_key).search(request.query, request.per_page or 1)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return PhotoSearchResponse(photos=[photo.to_dict() for photo in photos])


@router.post("/elevenlabs-tts", response_model=TtsResponse)
async def elevenlabs_tts(request: TtsRequest):
    """Narrate text; returns a base64 MP3 data URL and an estimated duration"""
    if not request.text.strip() or not request.voice_id:
        raise HTTPException(status_code=400, detail="Text and voiceId are required")
    try:
        speech = await ElevenLabsClient(api_key=request.api_key).synthesize(
            request.text,
            request.voice_id,
            stability=request.stability,
            similarity_boost=request.similarity_boost,
            speed=request.speed,
        )
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return TtsResponse(audio_content=speech.audio_content, duration=speech.duration)


@router.post("/elevenlabs-voices")
async def elevenlabs_voices(request: ApiKeyRequest) -> Dict[str, List[Dict[str, Any]]]:
    """Available voices, cloned voices first"""
    try:
        voices = await ElevenLabsClient(api_key=request.api_key).list_voices()
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return {"voices": voices}


@router.post("/elevenlabs-user")
async def elevenlabs_user(request: ApiKeyRequest) -> Dict[str, int]:
    """Character quota of the ElevenLabs subscription"""
    try:
        return await ElevenLabsClient(api_key=request.api_key).subscription()
    except HANDLED_ERRORS as e:
        raise http_error(e)
