"""Canonical data contracts passed between pipeline stages."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StageName(str, Enum):
    """Pipeline stages in execution order."""

    PENDING = "pending"
    RESEARCH = "research"
    SCRIPTING = "scripting"
    REVIEW = "review"
    AUDIO = "audio"
    VIDEO = "video"
    COMPLETED = "completed"
    FAILED = "failed"


def _to_int(value: Any) -> int:
    """Engagement counters arrive as ints, floats or strings like "1,204"."""
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    digits = str(value).replace(",", "").strip()
    try:
        return int(float(digits))
    except ValueError:
        return 0


class VideoReference(BaseModel):
    """A short-form video surfaced during research."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    url: str = ""
    video_id: str = Field(default="", alias="videoId")
    view_count: Optional[str] = Field(default=None, alias="viewCount")

    @field_validator("view_count", mode="before")
    @classmethod
    def _count_as_text(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


class SocialInsight(BaseModel):
    """A high-engagement social post surfaced during research."""

    text: str
    url: str = ""
    likes: int = 0
    comments: int = 0
    views: int = 0

    @field_validator("likes", "comments", "views", mode="before")
    @classmethod
    def _counter(cls, value: Any) -> int:
        return _to_int(value)


class ResearchData(BaseModel):
    """Combined output of the research stage."""

    videos: List[VideoReference] = Field(default_factory=list)
    raw_transcripts: str = ""
    trends: str = ""
    social_insights: List[SocialInsight] = Field(default_factory=list)


class ReviewDecision(BaseModel):
    """Outcome of one human review round."""

    approved: bool
    feedback: Optional[str] = None


class ToolkitSession(BaseModel):
    """Broker-issued MCP session scoped to named toolkits."""

    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    session_id: Optional[str] = None
    toolkits: List[str] = Field(default_factory=list)


class VideoJob(BaseModel):
    """Submitted avatar video job."""

    video_id: str
    connection_id: str


class VideoResult(BaseModel):
    """Finished avatar video, optionally saved locally."""

    video_url: str
    video_id: Optional[str] = None
    saved_path: Optional[str] = None


class ScriptRevision(BaseModel):
    """One drafted script and the feedback it received."""

    revision: int
    script: str
    approved: bool = False
    feedback: Optional[str] = None


class PipelineState(BaseModel):
    """Mutable state threaded through the four stages."""

    run_id: str = ""
    topic: str
    stage: StageName = StageName.PENDING
    research: Optional[ResearchData] = None
    script: Optional[str] = None
    feedback: Optional[str] = None
    revisions: List[ScriptRevision] = Field(default_factory=list)
    audio_url: Optional[str] = None
    video: Optional[VideoResult] = None
    errors: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("topic", mode="before")
    @classmethod
    def _topic_text(cls, value: Any) -> str:
        return str(value or "").strip()

    def advance(self, stage: StageName) -> None:
        self.stage = stage
        self.updated_at = datetime.now(timezone.utc)
