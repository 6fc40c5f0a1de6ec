from unittest.mock import patch

from vsl_vibes.core.runtime import (
    LOCAL_VIDEO_TOOLS,
    PROVIDER_CREDENTIALS,
    credential_report,
    directory_is_writable,
    missing_runtime_tools,
    parse_bool_env,
    run_startup_runtime_checks,
)


def test_parse_bool_env():
    assert parse_bool_env("true")
    assert parse_bool_env(" YES ")
    assert parse_bool_env("1")
    assert not parse_bool_env("off")
    assert parse_bool_env(None, default=True)
    assert not parse_bool_env(None)


def test_missing_runtime_tools_uses_path_lookup():
    with patch("vsl_vibes.core.runtime.shutil.which", side_effect=lambda tool: None if tool == "ffprobe" else "/usr/bin/x"):
        assert missing_runtime_tools(LOCAL_VIDEO_TOOLS) == ["ffprobe"]


def test_startup_checks_create_writable_directories(tmp_path):
    report = run_startup_runtime_checks(directories={
        "projects": tmp_path / "projects",
        "exports": tmp_path / "exports",
    })
    assert report["ok"] is True
    assert report["directories"]["projects"]["writable"] is True
    assert (tmp_path / "exports").is_dir()
    assert report["tools"]["optional"] == list(LOCAL_VIDEO_TOOLS)


def test_missing_ffmpeg_is_not_fatal(tmp_path):
    with patch("vsl_vibes.core.runtime.shutil.which", return_value=None):
        report = run_startup_runtime_checks(directories={"data": tmp_path})
    assert report["ok"] is True
    assert report["tools"]["missing"] == ["ffmpeg", "ffprobe"]


def test_unwritable_directory_is_reported(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    report = run_startup_runtime_checks(directories={"projects": blocker / "projects"})
    assert report["ok"] is False
    assert report["directories"]["projects"]["writable"] is False


def test_startup_report_lists_unconfigured_providers(tmp_path, monkeypatch):
    monkeypatch.setenv("PEXELS_API_KEY", "pk")
    report = run_startup_runtime_checks(directories={"data": tmp_path})
    assert "PEXELS_API_KEY" not in report["unconfigured_providers"]
    assert "ANTHROPIC_API_KEY" in report["unconfigured_providers"]


def test_credential_report_accepts_openai_alias():
    report = credential_report({"OPEN_AI_API_KEY": "sk", "HCTI_USER_ID": ""})
    assert report["OPENAI_API_KEY"] is True
    assert report["HCTI_USER_ID"] is False
    assert set(report) == set(PROVIDER_CREDENTIALS)


def test_directory_is_writable_does_not_create(tmp_path):
    assert directory_is_writable(tmp_path)
    assert not directory_is_writable(tmp_path / "missing")
    assert not (tmp_path / "missing").exists()
