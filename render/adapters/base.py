"""Video adapter abstractions."""

from __future__ import annotations

from core import VideoResult


class BaseVideoAdapter:
    """Base adapter that can be replaced by another avatar provider or mocks."""

    provider = "base"

    async def generate(self, audio_url: str) -> VideoResult:
        raise NotImplementedError
