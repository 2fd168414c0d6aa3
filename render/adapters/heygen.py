"""HeyGen avatar video adapter, called through the broker proxy."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import ComposioSettings, VideoSettings, get_settings
from core import VideoJob, VideoResult
from integrations import ComposioBroker, get_broker
from utils.exceptions import BrokerError, VideoGenerationError

from ..poller import BoundedPoller
from .base import BaseVideoAdapter


logger = logging.getLogger(__name__)

TOOLKIT = "heygen"
GENERATE_ENDPOINT = "/v2/video/generate"
STATUS_ENDPOINT = "/v1/video_status.get"


class HeyGenAdapter(BaseVideoAdapter):
    """Submits a talking-avatar job driven by an audio URL and waits for it."""

    provider = "heygen"

    def __init__(
        self,
        *,
        broker: Optional[ComposioBroker] = None,
        settings: Optional[VideoSettings] = None,
        composio_settings: Optional[ComposioSettings] = None,
        poller: Optional[BoundedPoller] = None,
    ) -> None:
        self.broker = broker or get_broker()
        self.settings = settings or get_settings().video
        self.composio_settings = composio_settings or self.broker.settings
        self.poller = poller or BoundedPoller(
            interval_s=self.settings.poll_interval_s,
            max_attempts=self.settings.max_poll_attempts,
        )

    def build_payload(self, audio_url: str) -> Dict[str, Any]:
        # audio_url must be publicly reachable, not a local path
        return {
            "test": bool(self.settings.test_mode),
            "dimension": {"width": self.settings.width, "height": self.settings.height},
            "video_inputs": [
                {
                    "character": {
                        "type": "avatar",
                        "avatar_id": self.settings.avatar_id,
                        "avatar_style": self.settings.avatar_style,
                    },
                    "voice": {
                        "type": "audio",
                        "audio_url": audio_url,
                    },
                    "background": {
                        "type": "color",
                        "value": self.settings.background_color,
                    },
                }
            ],
        }

    def resolve_connection(self) -> str:
        connection_id = self.broker.get_active_connection_id(
            TOOLKIT,
            self.composio_settings.auth_config_for(TOOLKIT),
            newest_first=True,
        )
        logger.info(f"Using HeyGen connection id: {connection_id}")
        return connection_id

    def submit(self, audio_url: str) -> VideoJob:
        connection_id = self.resolve_connection()

        logger.info("Sending request to HeyGen...")
        body = self.broker.proxy_execute(
            connection_id=connection_id,
            method="POST",
            endpoint=GENERATE_ENDPOINT,
            body=self.build_payload(audio_url),
        )

        if body.get("error"):
            raise VideoGenerationError(
                f"HeyGen start error: {json.dumps(body['error'], default=str)}",
                payload=body["error"],
            )

        video_id = str((body.get("data") or {}).get("video_id") or "").strip()
        if not video_id:
            raise VideoGenerationError("No video id received from HeyGen.", payload=body)

        logger.info(f"Generation started! Video ID: {video_id}")
        return VideoJob(video_id=video_id, connection_id=connection_id)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(BrokerError),
        reraise=True,
    )
    async def fetch_status(self, job: VideoJob) -> Dict[str, Any]:
        body = await asyncio.to_thread(
            self.broker.proxy_execute,
            connection_id=job.connection_id,
            method="GET",
            endpoint=STATUS_ENDPOINT,
            query={"video_id": job.video_id},
        )
        return dict(body.get("data") or {})

    async def generate(self, audio_url: str) -> VideoResult:
        logger.info("--- STAGE 4: VIDEO GENERATION (HEYGEN) ---")
        job = await asyncio.to_thread(self.submit, audio_url)

        async def _fetch() -> Dict[str, Any]:
            return await self.fetch_status(job)

        payload = await self.poller.wait(_fetch, job_id=job.video_id)
        video_url = str(payload.get("video_url") or "").strip()
        if not video_url:
            raise VideoGenerationError("Completed job has no video_url.", payload=payload, video_id=job.video_id)

        logger.info("Video generation complete!")
        return VideoResult(video_url=video_url, video_id=job.video_id)
