"""
Tests for vsl_vibes.services.infrastructure.orchestration.generation_runs
"""

import pytest

from vsl_vibes.core.exceptions import InvalidTransitionError
from vsl_vibes.models.status import GenerationState
from vsl_vibes.services.infrastructure.orchestration import GenerationRegistry, GenerationRun


class TestGenerationRun:
    def test_advance_records_history_and_progress(self):
        run = GenerationRun(project_id="p1")
        run.advance(GenerationState.SPLITTING, "Splitting")
        run.advance(GenerationState.STYLING)
        assert run.state is GenerationState.STYLING
        assert run.progress == 30.0
        assert run.message == "styling"
        assert run.history == ["splitting", "styling"]

    def test_illegal_advance(self):
        run = GenerationRun(project_id="p1")
        with pytest.raises(InvalidTransitionError):
            run.advance(GenerationState.DONE)
        assert run.state is GenerationState.IDLE

    def test_fail(self):
        run = GenerationRun(project_id="p1")
        run.advance(GenerationState.SPLITTING)
        run.fail("disk full")
        assert run.state is GenerationState.ERROR
        assert run.error == "disk full"
        assert run.message == "Generation failed: disk full"

    def test_to_dict(self):
        data = GenerationRun(project_id="p1").to_dict()
        assert data["state"] == "idle"
        assert data["cancel_requested"] is False
        assert set(data) >= {"project_id", "progress", "message", "error", "stats", "history", "updated_at"}


class TestGenerationRegistry:
    @pytest.fixture
    def registry(self):
        return GenerationRegistry()

    def test_start_registers_splitting_run(self, registry):
        run = registry.start("p1")
        assert run.state is GenerationState.SPLITTING
        assert run.started_at is not None
        assert registry.get("p1") is run
        assert registry.is_active("p1")

    def test_second_start_while_active_is_rejected(self, registry):
        first = registry.start("p1")
        with pytest.raises(InvalidTransitionError):
            registry.start("p1")
        assert registry.get("p1") is first

    def test_restart_after_finish(self, registry):
        run = registry.start("p1")
        run.fail("boom")
        second = registry.start("p1")
        assert second is not run
        assert second.state is GenerationState.SPLITTING

    def test_status_of_unknown_project_is_idle(self, registry):
        assert registry.status("nope")["state"] == "idle"

    def test_cancel_sets_token(self, registry):
        run = registry.start("p1")
        assert registry.cancel("p1") is run
        assert run.cancel_token.cancelled
        assert registry.status("p1")["cancel_requested"] is True

    def test_cancel_without_active_run(self, registry):
        assert registry.cancel("p1") is None
        run = registry.start("p1")
        run.fail("x")
        assert registry.cancel("p1") is None

    def test_cancel_all(self, registry):
        a = registry.start("a")
        b = registry.start("b")
        registry.start("c").fail("x")
        assert registry.cancel_all() == 2
        assert a.cancel_token.cancelled and b.cancel_token.cancelled

    def test_forget_and_clear(self, registry):
        registry.start("a")
        registry.start("b")
        registry.forget("a")
        assert registry.get("a") is None
        registry.clear()
        assert registry.get("b") is None
