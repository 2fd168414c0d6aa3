"""Core contracts and shared types for the pipeline."""

from .contracts import (
    PipelineState,
    ResearchData,
    ReviewDecision,
    ScriptRevision,
    SocialInsight,
    StageName,
    ToolkitSession,
    VideoJob,
    VideoReference,
    VideoResult,
)

__all__ = [
    "PipelineState",
    "ResearchData",
    "ReviewDecision",
    "ScriptRevision",
    "SocialInsight",
    "StageName",
    "ToolkitSession",
    "VideoJob",
    "VideoReference",
    "VideoResult",
]
