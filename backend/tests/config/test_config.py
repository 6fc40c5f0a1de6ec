"""
Tests for config module

Paths, constants, credential resolution, pipeline tuning and per-step model settings.
"""

import pytest

from vsl_vibes.config import (
    API_TITLE,
    API_VERSION,
    APP_DIR,
    CORS_ORIGINS,
    EXPORT_DIR,
    PROJECT_DATA_DIR,
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
    get_api_key,
)
from vsl_vibes.config import pipeline
from vsl_vibes.config.models import (
    LLMProviderType,
    ModelConfig,
    PipelineModels,
    get_active_provider,
    get_model_config,
    get_model_name,
    get_openai_equivalent,
    list_pipeline_steps,
)


class TestPathsAndConstants:
    def test_app_dir_is_package(self):
        assert APP_DIR.name == "vsl_vibes"
        assert (APP_DIR / "main.py").exists()

    def test_data_directories_exist(self):
        assert PROJECT_DATA_DIR.is_dir()
        assert EXPORT_DIR.is_dir()

    def test_api_constants(self):
        assert API_TITLE == "VSL Vibes API"
        assert API_VERSION
        assert "http://localhost:5173" in CORS_ORIGINS

    def test_slide_canvas_is_full_hd(self):
        assert (SLIDE_WIDTH, SLIDE_HEIGHT) == (1920, 1080)


class TestGetApiKey:
    def test_override_wins(self, monkeypatch):
        monkeypatch.setenv("PEXELS_API_KEY", "from-env")
        assert get_api_key("PEXELS_API_KEY", "from-request") == "from-request"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PEXELS_API_KEY", "from-env")
        assert get_api_key("PEXELS_API_KEY") == "from-env"

    def test_missing_is_none(self):
        assert get_api_key("PEXELS_API_KEY") is None
        assert get_api_key("PEXELS_API_KEY", "") is None

    def test_legacy_openai_variable(self, monkeypatch):
        monkeypatch.setenv("OPEN_AI_API_KEY", "legacy")
        assert get_api_key("OPENAI_API_KEY") == "legacy"


class TestPipelineTuning:
    def test_defaults(self):
        assert pipeline.SPLIT_BATCH_SIZE == 40
        assert pipeline.STYLE_CHUNK_SIZE == 20
        assert pipeline.ALLOWED_STYLE_CHUNK_SIZES == (20, 50)
        assert pipeline.EXPORT_MAX_RETRIES == 3
        assert pipeline.EXPORT_RETRY_BASE_DELAY == 1.0

    def test_env_int_parsing(self, monkeypatch):
        monkeypatch.setenv("TUNING_VALUE", "7")
        assert pipeline._env_int("TUNING_VALUE", 3) == 7
        monkeypatch.setenv("TUNING_VALUE", "-4")
        assert pipeline._env_int("TUNING_VALUE", 3, minimum=1) == 1
        monkeypatch.setenv("TUNING_VALUE", "lots")
        assert pipeline._env_int("TUNING_VALUE", 3) == 3

    def test_env_float_parsing(self, monkeypatch):
        monkeypatch.delenv("TUNING_DELAY", raising=False)
        assert pipeline._env_float("TUNING_DELAY", 0.3) == 0.3
        monkeypatch.setenv("TUNING_DELAY", "1.5")
        assert pipeline._env_float("TUNING_DELAY", 0.3) == 1.5


class TestModelConfig:
    def test_every_step_configured(self):
        steps = list_pipeline_steps()
        assert set(steps) == {
            "script_splitting",
            "style_direction",
            "image_keyword",
            "infographic_visual",
            "infographic_lines",
        }

    def test_unknown_step(self):
        with pytest.raises(ValueError, match="Unknown pipeline step"):
            get_model_config("video_rendering")

    def test_openai_equivalent(self):
        assert get_openai_equivalent("claude-3-5-haiku-20241022") == "gpt-4o-mini"
        assert get_openai_equivalent("claude-sonnet-4-20250514") == "gpt-4o"
        assert get_openai_equivalent("claude-haiku-9") == "gpt-4o-mini"
        assert get_openai_equivalent("something-else") == "gpt-4o"

    def test_model_for_provider(self):
        config = ModelConfig(model_name="claude-sonnet-4-20250514")
        assert config.get_model_for_provider(LLMProviderType.ANTHROPIC) == "claude-sonnet-4-20250514"
        assert config.get_model_for_provider(LLMProviderType.OPENAI) == "gpt-4o"
        pinned = ModelConfig(model_name="claude-sonnet-4-20250514", openai_model="gpt-4.1")
        assert pinned.get_model_for_provider(LLMProviderType.OPENAI) == "gpt-4.1"

    def test_get_model_name(self):
        assert get_model_name("style_direction") == PipelineModels().style_direction.model_name
        assert get_model_name("script_splitting", LLMProviderType.OPENAI) == "gpt-4o-mini"

    @pytest.mark.parametrize("value,expected", [
        ("anthropic", LLMProviderType.ANTHROPIC),
        ("OpenAI", LLMProviderType.OPENAI),
        ("", None),
        ("ollama", None),
    ])
    def test_active_provider(self, monkeypatch, value, expected):
        monkeypatch.setenv("LLM_PROVIDER", value)
        assert get_active_provider() is expected
