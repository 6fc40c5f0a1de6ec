from unittest.mock import AsyncMock, MagicMock

import pytest

from vsl_vibes.models.deck import Project, new_slide_from_text
from vsl_vibes.services.export.exporter import set_exporter
from vsl_vibes.services.infrastructure.orchestration import get_generation_registry
from vsl_vibes.services.infrastructure.storage import FileProjectRepository, set_project_repository
from vsl_vibes.services.llm import clear_provider_cache
from vsl_vibes.services.pipeline.orchestrator import set_orchestrator
from vsl_vibes.services.use_cases.project_commands import clear_sessions

PROVIDER_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "OPEN_AI_API_KEY",
    "GEMINI_API_KEY",
    "PEXELS_API_KEY",
    "PIXABAY_API_KEY",
    "ELEVENLABS_API_KEY",
    "HCTI_USER_ID",
    "HCTI_API_KEY",
    "JSON2VIDEO_API_KEY",
    "LLM_PROVIDER",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """No test ever talks to a real provider: credentials are stripped from the environment."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_provider_cache()
    yield
    clear_provider_cache()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop shared state (sessions, runs, lazily built services) between tests."""
    from vsl_vibes import main

    clear_sessions()
    get_generation_registry().clear()
    set_orchestrator(None)
    set_exporter(None)
    main._rate_limit_buckets.clear()
    yield
    clear_sessions()
    get_generation_registry().clear()
    set_orchestrator(None)
    set_exporter(None)
    set_project_repository(None)


@pytest.fixture
def repository(tmp_path):
    """File repository in a temporary directory, installed as the shared one."""
    repo = FileProjectRepository(storage_dir=tmp_path / "projects")
    set_project_repository(repo)
    return repo


@pytest.fixture
def make_project(repository):
    """Factory: persist a project, optionally with (reviewed) slides built from texts."""
    def _make(texts=(), name="Launch VSL", script=None, owner="local", reviewed=False):
        slides = [new_slide_from_text(text) for text in texts]
        for slide in slides:
            slide.reviewed = reviewed
        project = Project(
            owner=owner,
            name=name,
            original_script=script if script is not None else "\n".join(texts),
            slides=slides,
        )
        repository.save(project)
        return project
    return _make


@pytest.fixture
def failing_engine():
    """A prompting engine whose every call fails like a rejected credential."""
    from vsl_vibes.core.exceptions import CredentialError

    engine = MagicMock()
    error = CredentialError("ANTHROPIC_API_KEY not configured", provider="anthropic")
    engine.generate = AsyncMock(side_effect=error)
    engine.generate_json = AsyncMock(side_effect=error)
    return engine


@pytest.fixture
def json_engine():
    """Factory: a prompting engine answering ``generate_json`` with the given payloads in order."""
    def _make(*payloads):
        engine = MagicMock()
        engine.generate_json = AsyncMock(side_effect=list(payloads))
        return engine
    return _make
