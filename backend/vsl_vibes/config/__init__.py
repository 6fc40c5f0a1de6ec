"""
Application configuration and settings
"""

import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Model configuration
from .models import (
    ModelConfig,
    PipelineModels,
    LLMProviderType,
    ACTIVE_PIPELINE,
    ACTIVE_PROVIDER,
    DEFAULT_PIPELINE_MODELS,
    CLAUDE_TO_OPENAI_MAP,
    get_active_provider,
    get_model_config,
    get_model_name,
    get_openai_equivalent,
    list_pipeline_steps,
)

from .paths import APP_DIR, BACKEND_DIR, DATA_DIR, PROJECT_DATA_DIR, EXPORT_DIR
from .constants import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    CORS_ORIGINS,
    MAX_REQUEST_BODY_BYTES,
    SLIDE_WIDTH,
    SLIDE_HEIGHT,
)


def get_api_key(name: str, override: str | None = None) -> str | None:
    """Resolve a provider credential.

    A key supplied by the caller (e.g. stored client-side and sent in the
    request body) wins over the server environment.
    """
    if override:
        return override
    value = os.getenv(name)
    if not value and name == "OPENAI_API_KEY":
        value = os.getenv("OPEN_AI_API_KEY")
    return value or None


# Upstream service endpoints
PEXELS_SEARCH_URL = os.getenv("PEXELS_SEARCH_URL", "https://api.pexels.com/v1/search")
PIXABAY_SEARCH_URL = os.getenv("PIXABAY_SEARCH_URL", "https://pixabay.com/api/")
ELEVENLABS_BASE_URL = os.getenv("ELEVENLABS_BASE_URL", "https://api.elevenlabs.io/v1")
HCTI_URL = os.getenv("HCTI_URL", "https://hcti.io/v1/image")
JSON2VIDEO_URL = os.getenv("JSON2VIDEO_URL", "https://api.json2video.com/v2/movies")
OPENAI_IMAGES_URL = os.getenv("OPENAI_IMAGES_URL", "https://api.openai.com/v1/images/generations")
IMAGE_PROMPT_WEBHOOK_URL = os.getenv("IMAGE_PROMPT_WEBHOOK_URL")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "imagen-3.0-generate-002")
ELEVENLABS_MODEL_ID = os.getenv("ELEVENLABS_MODEL_ID", "eleven_monolingual_v1")
# Hosts the movie file proxy may stream from
JSON2VIDEO_FILE_HOSTS = tuple(
    host.strip() for host in os.getenv("JSON2VIDEO_FILE_HOSTS", "json2video.com").split(",") if host.strip()
)

__all__ = [
    "ModelConfig",
    "PipelineModels",
    "LLMProviderType",
    "ACTIVE_PIPELINE",
    "ACTIVE_PROVIDER",
    "DEFAULT_PIPELINE_MODELS",
    "CLAUDE_TO_OPENAI_MAP",
    "get_active_provider",
    "get_model_config",
    "get_model_name",
    "get_openai_equivalent",
    "list_pipeline_steps",
    "APP_DIR",
    "BACKEND_DIR",
    "DATA_DIR",
    "PROJECT_DATA_DIR",
    "EXPORT_DIR",
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "MAX_REQUEST_BODY_BYTES",
    "SLIDE_WIDTH",
    "SLIDE_HEIGHT",
    "get_api_key",
    "PEXELS_SEARCH_URL",
    "PIXABAY_SEARCH_URL",
    "ELEVENLABS_BASE_URL",
    "HCTI_URL",
    "JSON2VIDEO_URL",
    "OPENAI_IMAGES_URL",
    "IMAGE_PROMPT_WEBHOOK_URL",
    "GEMINI_IMAGE_MODEL",
    "ELEVENLABS_MODEL_ID",
    "JSON2VIDEO_FILE_HOSTS",
]
