"""
Research Agent
Collects viral short videos, fresh news and high-engagement social posts for a topic.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from config import ComposioSettings, ResearchSettings, get_settings
from core import ResearchData, SocialInsight, VideoReference
from integrations import ComposioBroker, get_broker
from utils.parsing import days_ago_iso, extract_json_array, extract_key_terms

from .toolkit_runner import ToolkitAgentRunner


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

NO_TRENDS = "No trends found."

_VIDEO_INSTRUCTIONS = """Search YouTube for "{topic} #shorts".
Use parameters: type='video', duration='short', order='viewCount'.

OUTPUT RULES:
1. Reply with a JSON array and nothing else.
2. No markdown, no code fences, no commentary.
3. Each element must look like:
   {{ "title": "string", "url": "string", "videoId": "string" }}
"""

_TREND_INSTRUCTIONS = """You research news about ONE specific topic.

TOPIC: "{topic}"

Call EXA_SEARCH exactly once with:
  "query": "{topic}"
  "numResults": {num_results}
  "type": "neural"
  "category": "news"
  "startPublishedDate": "{start_date}"

Keep the query exactly as written. Do not broaden it to generic industry news.
Then summarise the 3 most relevant articles about "{topic}".
"""

_SOCIAL_INSTRUCTIONS = """You find VIRAL posts on Twitter/X.

1. SEARCH with query "{query}" (use it verbatim), max_results: {max_results},
   sort_order: "relevancy".
2. KEEP posts with:
   - {min_likes}+ likes
   - {min_comments}+ comments/replies
   - High views/engagement
   - Posted after {start_date}
   If nothing qualifies, keep the most engaged posts you found.
3. RETURN the top {limit} by engagement.

OUTPUT RULES:
- Reply with a JSON array and nothing else. No markdown.
- Each element must look like:
  {{ "text": "post text", "url": "https://twitter.com/user/status/id",
     "likes": 150, "comments": 10, "views": 5000 }}
- Report the real metrics, even when they fall below the thresholds.
"""


def _validate_items(items: List[Dict[str, Any]], model: Type[ModelT], label: str) -> List[ModelT]:
    validated: List[ModelT] = []
    for idx, item in enumerate(items):
        try:
            validated.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(f"{label}: skipping item {idx}: {exc.errors()[0].get('msg', exc)}")
    return validated


class ResearchAgent:
    """Research stage: three toolkit agents run one after another."""

    def __init__(
        self,
        *,
        broker: Optional[ComposioBroker] = None,
        runner: Optional[ToolkitAgentRunner] = None,
        settings: Optional[ResearchSettings] = None,
        composio_settings: Optional[ComposioSettings] = None,
    ) -> None:
        self.broker = broker or get_broker()
        self.runner = runner or ToolkitAgentRunner()
        self.settings = settings or get_settings().research
        self.composio_settings = composio_settings or self.broker.settings

    async def run(self, topic: str, *, now: Optional[datetime] = None) -> ResearchData:
        logger.info(f'--- STAGE 1: RESEARCHING "{topic}" ---')

        videos = await self.find_videos(topic)
        trends = await self.find_trends(topic, now=now)
        social = await self.find_social(topic, now=now)

        return ResearchData(
            videos=videos,
            raw_transcripts=self.settings.transcripts_placeholder,
            trends=trends,
            social_insights=social,
        )

    async def find_videos(self, topic: str) -> List[VideoReference]:
        session = await asyncio.to_thread(
            self.broker.create_toolkit_session,
            ["youtube"], self.composio_settings.auth_config_for("youtube")
        )
        logger.info("Finding viral shorts...")
        output = await self.runner.run(
            name="YouTube Scout",
            instructions=_VIDEO_INSTRUCTIONS.format(topic=topic),
            prompt=f"Find the top {self.settings.video_limit} viral shorts.",
            session=session,
        )
        items = extract_json_array(output, label="youtube")
        videos = _validate_items(items, VideoReference, "youtube")[: self.settings.video_limit]
        logger.info(f"Found {len(videos)} videos")
        return videos

    async def find_trends(self, topic: str, *, now: Optional[datetime] = None) -> str:
        session = await asyncio.to_thread(
            self.broker.create_toolkit_session,
            ["exa"], self.composio_settings.auth_config_for("exa")
        )
        start_date = days_ago_iso(self.settings.trend_window_days, now=now)
        logger.info(f"Finding trends (last {self.settings.trend_window_days} days)...")
        output = await self.runner.run(
            name="Trend Researcher",
            instructions=_TREND_INSTRUCTIONS.format(
                topic=topic,
                num_results=self.settings.trend_results,
                start_date=start_date,
            ),
            prompt="Find fresh news.",
            session=session,
        )
        return output.strip() or NO_TRENDS

    async def find_social(self, topic: str, *, now: Optional[datetime] = None) -> List[SocialInsight]:
        session = await asyncio.to_thread(
            self.broker.create_toolkit_session,
            ["twitter"], self.composio_settings.auth_config_for("twitter")
        )
        query = extract_key_terms(topic)
        logger.info(f'Twitter search query: "{query}"')
        output = await self.runner.run(
            name="Twitter Scout",
            instructions=_SOCIAL_INSTRUCTIONS.format(
                query=query,
                max_results=self.settings.social_search_results,
                min_likes=self.settings.min_likes,
                min_comments=self.settings.min_comments,
                start_date=days_ago_iso(self.settings.social_window_days, now=now),
                limit=self.settings.social_limit,
            ),
            prompt="Find viral threads.",
            session=session,
        )
        items = extract_json_array(output, label="twitter")
        insights = _validate_items(items, SocialInsight, "twitter")[: self.settings.social_limit]
        logger.info(f"Twitter items: {len(insights)}")
        return insights
