from __future__ import annotations

from datetime import datetime, timezone
import json
from typing import Any, Dict, List, Optional

import pytest

from config import ComposioSettings, ResearchSettings
from core import ToolkitSession
from intelligence.agents import ResearchAgent
from intelligence.agents.research_agent import NO_TRENDS


NOW = datetime(2025, 3, 31, tzinfo=timezone.utc)


class _FakeBroker:
    def __init__(self):
        self.settings = ComposioSettings(api_key="ck", youtube_auth_config_id="ac_yt")
        self.sessions: List[Dict[str, Any]] = []

    def create_toolkit_session(self, toolkits, auth_config_id: Optional[str] = None) -> ToolkitSession:
        self.sessions.append({"toolkits": list(toolkits), "auth_config_id": auth_config_id})
        return ToolkitSession(url=f"https://mcp.example.com/{toolkits[0]}", toolkits=list(toolkits))


class _ScriptedRunner:
    """Returns canned output per agent name and records every call."""

    def __init__(self, outputs: Dict[str, str]):
        self.outputs = outputs
        self.calls: List[Dict[str, Any]] = []

    async def run(self, *, name: str, instructions: str, prompt: str, session: ToolkitSession) -> str:
        self.calls.append({"name": name, "instructions": instructions, "prompt": prompt, "session": session})
        return self.outputs.get(name, "")


def _agent(outputs: Dict[str, str]) -> tuple:
    broker = _FakeBroker()
    runner = _ScriptedRunner(outputs)
    agent = ResearchAgent(broker=broker, runner=runner, settings=ResearchSettings())
    return agent, broker, runner


@pytest.mark.asyncio
async def test_research_runs_three_scouts_in_order() -> None:
    videos = [
        {"title": "Agents in 60s", "url": "https://youtube.com/shorts/a", "videoId": "a", "viewCount": 120000},
        {"title": "Bad item"},
        {"url": "https://youtube.com/shorts/missing-title"},
    ]
    posts = [{"text": "Agents shipped", "url": "https://twitter.com/u/status/1", "likes": "1,204", "comments": 33}]
    agent, broker, runner = _agent(
        {
            "YouTube Scout": "```json\n" + json.dumps(videos) + "\n```",
            "Trend Researcher": "1. Lab ships agent framework",
            "Twitter Scout": "Found these:\n" + json.dumps(posts),
        }
    )

    research = await agent.run("AI Agents in 2025", now=NOW)

    assert [call["name"] for call in runner.calls] == ["YouTube Scout", "Trend Researcher", "Twitter Scout"]
    assert [s["toolkits"] for s in broker.sessions] == [["youtube"], ["exa"], ["twitter"]]
    assert broker.sessions[0]["auth_config_id"] == "ac_yt"

    assert [v.title for v in research.videos] == ["Agents in 60s", "Bad item"]
    assert research.videos[0].video_id == "a"
    assert research.videos[0].view_count == "120000"
    assert research.trends == "1. Lab ships agent framework"
    assert research.social_insights[0].likes == 1204
    assert research.raw_transcripts.startswith("Transcription disabled")


@pytest.mark.asyncio
async def test_prompts_carry_topic_window_and_thresholds() -> None:
    agent, _, runner = _agent({})
    await agent.run("claude code for development and coding", now=NOW)

    video_call, trend_call, social_call = runner.calls
    assert '"claude code for development and coding #shorts"' in video_call["instructions"]
    assert video_call["prompt"] == "Find the top 5 viral shorts."

    assert '"query": "claude code for development and coding"' in trend_call["instructions"]
    assert '"category": "news"' in trend_call["instructions"]
    assert '"startPublishedDate": "2025-03-01"' in trend_call["instructions"]
    assert trend_call["prompt"] == "Find fresh news."

    assert '"claude code development"' in social_call["instructions"]
    assert "1000+ likes" in social_call["instructions"]
    assert "10+ comments/replies" in social_call["instructions"]
    assert "2024-12-31" in social_call["instructions"]
    assert social_call["prompt"] == "Find viral threads."


@pytest.mark.asyncio
async def test_empty_outputs_degrade_to_defaults() -> None:
    agent, _, _ = _agent({"YouTube Scout": "I could not search today.", "Trend Researcher": "   "})
    research = await agent.run("quantum batteries", now=NOW)

    assert research.videos == []
    assert research.social_insights == []
    assert research.trends == NO_TRENDS


@pytest.mark.asyncio
async def test_results_are_capped_at_limits() -> None:
    videos = [{"title": f"v{i}"} for i in range(9)]
    agent, _, _ = _agent({"YouTube Scout": json.dumps(videos)})
    agent.settings = ResearchSettings(video_limit=3)
    research = await agent.run("topic", now=NOW)
    assert [v.title for v in research.videos] == ["v0", "v1", "v2"]
