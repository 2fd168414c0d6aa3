"""
Settings Configuration
Pydantic-validated configuration for every pipeline stage
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from utils.exceptions import ConfigurationError


class ComposioSettings(BaseSettings):
    """Integration broker configuration"""
    api_key: Optional[str] = Field(default=None, description="Composio API key")
    user_id: str = Field(default="default-user", description="Broker user whose connections are used")
    connect_host: str = Field(default="connect.composio.dev", description="Host of account-connect links")

    # Per-toolkit auth configs keep the unprefixed names used in .env files
    youtube_auth_config_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("YOUTUBE_AUTH_CONFIG_ID", "COMPOSIO_YOUTUBE_AUTH_CONFIG_ID"),
    )
    exa_auth_config_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("EXA_AUTH_CONFIG_ID", "COMPOSIO_EXA_AUTH_CONFIG_ID"),
    )
    twitter_auth_config_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TWITTER_AUTH_CONFIG_ID", "COMPOSIO_TWITTER_AUTH_CONFIG_ID"),
    )
    elevenlabs_auth_config_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_AUTH_CONFIG_ID", "COMPOSIO_ELEVENLABS_AUTH_CONFIG_ID"),
    )
    heygen_auth_config_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HEYGEN_AUTH_CONFIG_ID", "COMPOSIO_HEYGEN_AUTH_CONFIG_ID"),
    )

    class Config:
        env_prefix = "COMPOSIO_"
        populate_by_name = True

    def auth_config_for(self, toolkit: str) -> Optional[str]:
        return getattr(self, f"{toolkit.lower()}_auth_config_id", None)


class LLMSettings(BaseSettings):
    """LLM configuration"""
    provider: str = Field(default="openai", description="Scripting provider: openai, anthropic")
    model_name: str = Field(default="gpt-4o", description="Model for scripting and toolkit agents")
    agent_model: Optional[str] = Field(default=None, description="Override model for toolkit agents")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=1024, description="Max completion tokens")
    timeout: float = Field(default=60.0, description="Request timeout (s)")

    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "LLM_OPENAI_API_KEY"),
    )
    anthropic_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "LLM_ANTHROPIC_API_KEY"),
    )

    class Config:
        env_prefix = "LLM_"
        populate_by_name = True

    @property
    def toolkit_agent_model(self) -> str:
        return self.agent_model or self.model_name


class ResearchSettings(BaseSettings):
    """Research stage configuration"""
    video_limit: int = Field(default=5, description="Short videos to collect")
    trend_results: int = Field(default=5, description="News results requested from the search tool")
    trend_window_days: int = Field(default=30, description="News freshness window")
    social_limit: int = Field(default=5, description="Social posts to keep")
    social_search_results: int = Field(default=10, description="Posts requested from the search tool")
    social_window_days: int = Field(default=90, description="Social freshness window")
    min_likes: int = Field(default=1000, description="Engagement threshold: likes")
    min_comments: int = Field(default=10, description="Engagement threshold: replies")
    transcripts_placeholder: str = Field(
        default="Transcription disabled (no transcript provider configured).",
    )

    class Config:
        env_prefix = "RESEARCH_"


class VoiceSettings(BaseSettings):
    """Text-to-speech configuration"""
    voice_id: str = Field(default="EIsgvJT3rwoPvRFG6c4n", description="TTS voice id")
    model_id: str = Field(default="eleven_multilingual_v2", description="TTS model id")

    class Config:
        env_prefix = "VOICE_"


class VideoSettings(BaseSettings):
    """Avatar video configuration"""
    avatar_id: str = Field(default="109cdee34a164003b0e847ffce93828e", description="Avatar id")
    avatar_style: str = Field(default="normal")
    background_color: str = Field(default="#FFFFFF")
    width: int = Field(default=720)
    height: int = Field(default=1280)
    test_mode: bool = Field(default=False, description="Provider watermark/test mode")
    poll_interval_s: float = Field(default=15.0, description="Seconds between status checks")
    max_poll_attempts: int = Field(default=40, description="Status checks before timing out")

    class Config:
        env_prefix = "VIDEO_"


class OutputSettings(BaseSettings):
    """Local output configuration"""
    download_enabled: bool = Field(default=True, description="Download the finished video")
    download_dir: str = Field(default=str(Path.home() / "Downloads"))
    runs_dir: str = Field(default="./data/runs", description="Per-run artifact directory")
    download_timeout_s: float = Field(default=120.0)

    class Config:
        env_prefix = "OUTPUT_"


class PipelineSettings(BaseSettings):
    """Pipeline loop configuration"""
    default_topic: str = Field(default="AI Agents in 2025")
    max_revisions: int = Field(default=5, description="Script drafts before the review loop aborts")

    class Config:
        env_prefix = "PIPELINE_"


class Settings(BaseSettings):
    """Top-level settings aggregating every group"""

    composio: ComposioSettings = Field(default_factory=ComposioSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    research: ResearchSettings = Field(default_factory=ResearchSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings after applying an optional .env file (config/.env by default)."""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            composio=ComposioSettings(),
            llm=LLMSettings(),
            research=ResearchSettings(),
            voice=VoiceSettings(),
            video=VideoSettings(),
            output=OutputSettings(),
            pipeline=PipelineSettings(),
        )

    def missing_required(self) -> List[str]:
        missing = []
        if not self.composio.api_key:
            missing.append("COMPOSIO_API_KEY is required")
        # toolkit agents always run on OpenAI
        if not self.llm.openai_api_key:
            missing.append("OPENAI_API_KEY is required")
        if self.llm.provider == "anthropic" and not self.llm.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY is required when LLM_PROVIDER=anthropic")
        return missing

    def validate_required(self) -> None:
        """Raise ConfigurationError listing every missing required value."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                "Environment validation failed",
                {"issues": missing},
            )


@lru_cache()
def get_settings() -> Settings:
    """Global settings singleton"""
    return Settings.load_from_env_file()


def get_composio_settings() -> ComposioSettings:
    return get_settings().composio


def get_llm_settings() -> LLMSettings:
    return get_settings().llm
