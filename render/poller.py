"""Bounded polling of a remote render job."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from utils.exceptions import RenderTimeoutError, VideoGenerationError


logger = logging.getLogger(__name__)

StatusFetcher = Callable[[], Awaitable[Dict[str, Any]]]
SleepFn = Callable[[float], Awaitable[Any]]

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class BoundedPoller:
    """Polls until a job completes, fails, or the attempt budget runs out."""

    def __init__(
        self,
        *,
        interval_s: float = 15.0,
        max_attempts: int = 40,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.interval_s = max(0.0, float(interval_s))
        self.max_attempts = int(max_attempts)
        self._sleep = sleep or asyncio.sleep

    async def wait(self, fetch_status: StatusFetcher, *, job_id: str = "") -> Dict[str, Any]:
        """
        Return the status payload of the completed job.

        Raises:
            VideoGenerationError: the job reported ``failed``
            RenderTimeoutError: no terminal state within ``max_attempts`` checks
        """
        for attempt in range(1, self.max_attempts + 1):
            payload = dict(await fetch_status() or {})
            status = str(payload.get("status") or "").strip().lower()
            logger.info(f"Status: {status or 'unknown'} (attempt {attempt}/{self.max_attempts})")

            if status == STATUS_COMPLETED:
                return payload
            if status == STATUS_FAILED:
                error = payload.get("error")
                raise VideoGenerationError(
                    f"Generation Failed: {json.dumps(error, default=str)}",
                    payload=error,
                    video_id=job_id or None,
                )

            if attempt < self.max_attempts:
                await self._sleep(self.interval_s)

        raise RenderTimeoutError(
            f"Job {job_id or '?'} did not finish after {self.max_attempts} checks "
            f"({self.max_attempts * self.interval_s:.0f}s)",
            video_id=job_id or None,
            attempts=self.max_attempts,
            interval_s=self.interval_s,
        )
