from __future__ import annotations

import pytest

from config import (
    ComposioSettings,
    LLMSettings,
    OutputSettings,
    PipelineSettings,
    ResearchSettings,
    Settings,
    VideoSettings,
    VoiceSettings,
)
from utils.exceptions import ConfigurationError


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "COMPOSIO_API_KEY",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "LLM_PROVIDER",
        "HEYGEN_AUTH_CONFIG_ID",
        "COMPOSIO_HEYGEN_AUTH_CONFIG_ID",
        "VIDEO_POLL_INTERVAL_S",
    ):
        monkeypatch.delenv(name, raising=False)


def test_video_defaults_match_provider_contract(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    video = VideoSettings()
    assert (video.width, video.height) == (720, 1280)
    assert video.avatar_id == "109cdee34a164003b0e847ffce93828e"
    assert video.avatar_style == "normal"
    assert video.background_color == "#FFFFFF"
    assert video.test_mode is False
    assert video.poll_interval_s == 15.0
    assert video.max_poll_attempts == 40


def test_research_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    research = ResearchSettings()
    assert research.trend_window_days == 30
    assert research.social_window_days == 90
    assert research.min_likes == 1000
    assert research.min_comments == 10
    assert research.transcripts_placeholder.startswith("Transcription disabled")


def test_env_overrides_with_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("VIDEO_POLL_INTERVAL_S", "2.5")
    assert VideoSettings().poll_interval_s == 2.5


def test_unprefixed_auth_config_alias(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("HEYGEN_AUTH_CONFIG_ID", "ac_heygen")
    composio = ComposioSettings()
    assert composio.auth_config_for("heygen") == "ac_heygen"
    assert composio.auth_config_for("HeyGen") == "ac_heygen"
    assert composio.auth_config_for("unknown") is None


def _settings(**composio) -> Settings:
    return Settings(
        composio=ComposioSettings(**composio),
        llm=LLMSettings(),
        research=ResearchSettings(),
        voice=VoiceSettings(),
        video=VideoSettings(),
        output=OutputSettings(),
        pipeline=PipelineSettings(),
    )


def test_validate_required_lists_every_issue(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    settings = _settings()
    with pytest.raises(ConfigurationError) as exc_info:
        settings.validate_required()
    issues = exc_info.value.details["issues"]
    assert any("COMPOSIO_API_KEY" in item for item in issues)
    assert any("OPENAI_API_KEY" in item for item in issues)


def test_validate_required_passes_with_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("COMPOSIO_API_KEY", "ck")
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    settings = _settings()
    assert settings.missing_required() == []
    settings.validate_required()


def test_anthropic_provider_requires_its_key(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("COMPOSIO_API_KEY", "ck")
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    assert any("ANTHROPIC_API_KEY" in item for item in _settings().missing_required())
