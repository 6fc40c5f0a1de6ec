"""
Tests for project commands, rollback and sessions.
"""

import pytest

from vsl_vibes.core.exceptions import SlideNotFoundError
from vsl_vibes.models.deck import AudioSettings, Project, ProjectSettings, new_slide_from_text
from vsl_vibes.services.use_cases.project_commands import (
    AttachAudio,
    MarkAllReviewed,
    ProjectSession,
    RenameProject,
    ReplaceSlides,
    UpdateScript,
    UpdateSettings,
    UpdateSlide,
    apply_command,
    clear_sessions,
    drop_session,
    get_session,
    rollback,
)


@pytest.fixture
def project():
    return Project(
        owner="local",
        name="Launch VSL",
        original_script="Stop scrolling\nRead this",
        slides=[new_slide_from_text("Stop scrolling"), new_slide_from_text("Read this")],
    )


class TestApplyCommand:
    def test_input_is_never_mutated(self, project):
        slide_id = project.slides[0].id
        result = apply_command(project, UpdateSlide(slide_id, {"full_script_text": "Changed"}))

        assert project.slides[0].full_script_text == "Stop scrolling"
        assert result.previous.slides[0].full_script_text == "Stop scrolling"
        assert result.project.slides[0].full_script_text == "Changed"

    def test_rollback_returns_previous(self, project):
        result = apply_command(project, RenameProject("New name"))
        assert rollback(result).name == "Launch VSL"

    def test_update_slide_rebuilds_segments(self, project):
        slide_id = project.slides[0].id
        result = apply_command(project, UpdateSlide(slide_id, {"bold_words": ["scrolling"]}))
        emphasis = [segment.emphasis for segment in result.project.slides[0].segments]
        assert emphasis == ["none", "bold"]

    def test_update_slide_merges_style_and_snaps_size(self, project):
        slide_id = project.slides[0].id
        result = apply_command(project, UpdateSlide(slide_id, {"style": {"background": "dark", "text_size": 61}}))
        style = result.project.slides[0].style
        assert style.background == "dark"
        assert style.text_weight == "bold"
        assert style.text_size == 60

    def test_update_slide_ignores_id(self, project):
        slide_id = project.slides[0].id
        result = apply_command(project, UpdateSlide(slide_id, {"id": "hijack", "reviewed": True}))
        assert result.project.slides[0].id == slide_id
        assert result.project.slides[0].reviewed

    def test_unknown_slide(self, project):
        with pytest.raises(SlideNotFoundError):
            apply_command(project, UpdateSlide("missing", {"reviewed": True}))
        with pytest.raises(SlideNotFoundError):
            apply_command(project, AttachAudio("missing", "data:audio/mpeg;base64,AA==", 1.0))

    def test_replace_slides(self, project):
        replacement = [new_slide_from_text("Only one")]
        result = apply_command(project, ReplaceSlides(replacement))
        assert [s.full_script_text for s in result.project.slides] == ["Only one"]
        assert result.project.slides[0] is not replacement[0]

    def test_rename_keeps_name_when_blank(self, project):
        assert apply_command(project, RenameProject("   ")).project.name == "Launch VSL"

    def test_update_settings_merges_audio(self, project):
        project.settings = ProjectSettings(audio=AudioSettings(voice_id="v1", stability=0.3))
        result = apply_command(project, UpdateSettings({"audio": {"speed": 1.1}, "theme": "dark"}))
        settings = result.project.settings
        assert settings.theme == "dark"
        assert settings.audio.voice_id == "v1"
        assert settings.audio.stability == 0.3
        assert settings.audio.speed == 1.1

    def test_update_settings_creates_audio(self, project):
        result = apply_command(project, UpdateSettings({"audio": {"voice_id": "v2"}}))
        assert result.project.settings.audio.voice_id == "v2"
        assert result.project.settings.audio.similarity_boost == 0.75

    def test_update_script_and_review(self, project):
        result = apply_command(project, UpdateScript("new script"))
        assert result.project.original_script == "new script"
        result = apply_command(result.project, MarkAllReviewed())
        assert all(slide.reviewed for slide in result.project.slides)

    def test_attach_audio(self, project):
        slide_id = project.slides[1].id
        result = apply_command(project, AttachAudio(slide_id, "data:audio/mpeg;base64,AA==", 2.4))
        slide = result.project.slides[1]
        assert slide.audio_url.startswith("data:audio/mpeg")
        assert slide.audio_duration == 2.4
        assert slide.audio_generated

    def test_unknown_command(self, project):
        with pytest.raises(TypeError):
            apply_command(project, object())


class TestProjectSession:
    def test_execute_persists(self, repository, make_project):
        project = make_project(["a"])
        session = ProjectSession.load(repository, project.id)

        session.execute(RenameProject("Renamed"))

        assert repository.get(project.id).name == "Renamed"

    def test_failed_save_rolls_back(self, repository, make_project, monkeypatch):
        project = make_project(["a"])
        session = ProjectSession.load(repository, project.id)

        def broken_save(project):
            raise OSError("read-only file system")

        monkeypatch.setattr(repository, "save", broken_save)

        with pytest.raises(OSError):
            session.execute(RenameProject("Renamed"))

        assert session.project.name == "Launch VSL"

    def test_sessions_are_shared_per_project(self, repository, make_project):
        project = make_project(["a"])
        assert get_session(repository, project.id) is get_session(repository, project.id)
        first = get_session(repository, project.id)
        drop_session(project.id)
        assert get_session(repository, project.id) is not first
        clear_sessions()
