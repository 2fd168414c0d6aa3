"""
Configuration Management Module
Environment-driven settings for every stage
"""
from .settings import (
    Settings,
    ComposioSettings,
    LLMSettings,
    ResearchSettings,
    VoiceSettings,
    VideoSettings,
    OutputSettings,
    PipelineSettings,
    get_settings,
    get_composio_settings,
    get_llm_settings,
)

__all__ = [
    "Settings",
    "ComposioSettings",
    "LLMSettings",
    "ResearchSettings",
    "VoiceSettings",
    "VideoSettings",
    "OutputSettings",
    "PipelineSettings",
    "get_settings",
    "get_composio_settings",
    "get_llm_settings",
]
