from __future__ import annotations

import re
import threading
from typing import Any, Dict, List, Optional

import pytest

from config import ComposioSettings, VideoSettings
from core import VideoJob
from render import BoundedPoller, HeyGenAdapter
from utils.exceptions import BrokerError, ConnectionNotFoundError, RenderTimeoutError, VideoGenerationError


AUDIO_URL = "https://storage.example.com/audio/abc.mp3"


class _FakeBroker:
    def __init__(self, start: Dict[str, Any], statuses: Optional[List[Dict[str, Any]]] = None, connection: str = "ca_heygen"):
        self.settings = ComposioSettings(api_key="ck", heygen_auth_config_id="ac_heygen")
        self.start = start
        self.statuses = list(statuses or [])
        self.connection = connection
        self.lookups: List[Dict[str, Any]] = []
        self.requests: List[Dict[str, Any]] = []

    def get_active_connection_id(self, toolkit_slug, auth_config_id=None, *, newest_first=False) -> str:
        self.lookups.append({"toolkit": toolkit_slug, "auth_config_id": auth_config_id, "newest_first": newest_first})
        if not self.connection:
            raise ConnectionNotFoundError(f"No active connection found for {toolkit_slug}.", toolkit=toolkit_slug)
        return self.connection

    def proxy_execute(self, **kwargs) -> Dict[str, Any]:
        self.requests.append(kwargs)
        if kwargs["method"] == "POST":
            return self.start
        return self.statuses.pop(0)


async def _no_sleep(_: float) -> None:
    return None


def _adapter(broker: _FakeBroker, max_attempts: int = 5) -> HeyGenAdapter:
    return HeyGenAdapter(
        broker=broker,
        settings=VideoSettings(),
        poller=BoundedPoller(interval_s=15, max_attempts=max_attempts, sleep=_no_sleep),
    )


def test_payload_shape() -> None:
    payload = _adapter(_FakeBroker(start={})).build_payload(AUDIO_URL)

    assert payload["test"] is False
    assert payload["dimension"] == {"width": 720, "height": 1280}
    (video_input,) = payload["video_inputs"]
    assert video_input["character"] == {
        "type": "avatar",
        "avatar_id": "109cdee34a164003b0e847ffce93828e",
        "avatar_style": "normal",
    }
    assert video_input["voice"] == {"type": "audio", "audio_url": AUDIO_URL}
    assert video_input["background"] == {"type": "color", "value": "#FFFFFF"}


def test_submit_uses_newest_connection_and_generate_endpoint() -> None:
    broker = _FakeBroker(start={"error": None, "data": {"video_id": "vid_1"}})

    job = _adapter(broker).submit(AUDIO_URL)

    assert job == VideoJob(video_id="vid_1", connection_id="ca_heygen")
    assert broker.lookups == [{"toolkit": "heygen", "auth_config_id": "ac_heygen", "newest_first": True}]
    request = broker.requests[0]
    assert request["method"] == "POST"
    assert request["endpoint"] == "/v2/video/generate"
    assert request["connection_id"] == "ca_heygen"
    assert request["body"]["video_inputs"][0]["voice"]["audio_url"] == AUDIO_URL


def test_submit_provider_error() -> None:
    broker = _FakeBroker(start={"error": {"code": "invalid_audio"}, "data": None})
    with pytest.raises(VideoGenerationError, match="HeyGen start error"):
        _adapter(broker).submit(AUDIO_URL)


def test_submit_without_video_id() -> None:
    broker = _FakeBroker(start={"data": {}})
    with pytest.raises(VideoGenerationError, match="No video id"):
        _adapter(broker).submit(AUDIO_URL)


def test_submit_without_connection() -> None:
    broker = _FakeBroker(start={}, connection="")
    with pytest.raises(ConnectionNotFoundError):
        _adapter(broker).submit(AUDIO_URL)


@pytest.mark.asyncio
async def test_fetch_status_returns_inner_data() -> None:
    broker = _FakeBroker(start={}, statuses=[{"code": 100, "data": {"status": "processing"}}])
    status = await _adapter(broker).fetch_status(VideoJob(video_id="vid_1", connection_id="ca_heygen"))

    assert status == {"status": "processing"}
    assert broker.requests[0]["endpoint"] == "/v1/video_status.get"
    assert broker.requests[0]["query"] == {"video_id": "vid_1"}


@pytest.mark.asyncio
async def test_generate_polls_until_completed() -> None:
    broker = _FakeBroker(
        start={"data": {"video_id": "vid_1"}},
        statuses=[
            {"data": {"status": "pending"}},
            {"data": {"status": "processing"}},
            {"data": {"status": "completed", "video_url": "https://cdn.example.com/vid_1.mp4"}},
        ],
    )

    result = await _adapter(broker).generate(AUDIO_URL)

    assert result.video_url == "https://cdn.example.com/vid_1.mp4"
    assert result.video_id == "vid_1"
    assert len(broker.requests) == 4


@pytest.mark.asyncio
async def test_generate_failure_surfaces_provider_error() -> None:
    broker = _FakeBroker(
        start={"data": {"video_id": "vid_2"}},
        statuses=[{"data": {"status": "failed", "error": {"message": "avatar missing"}}}],
    )
    with pytest.raises(VideoGenerationError, match=re.escape('Generation Failed: {"message": "avatar missing"}')):
        await _adapter(broker).generate(AUDIO_URL)


@pytest.mark.asyncio
async def test_generate_times_out() -> None:
    broker = _FakeBroker(
        start={"data": {"video_id": "vid_3"}},
        statuses=[{"data": {"status": "processing"}}] * 2,
    )
    with pytest.raises(RenderTimeoutError):
        await _adapter(broker, max_attempts=2).generate(AUDIO_URL)


@pytest.mark.asyncio
async def test_fetch_status_retries_transient_broker_error() -> None:
    class _FlakyBroker(_FakeBroker):
        def __init__(self):
            super().__init__(start={}, statuses=[{"data": {"status": "processing"}}])
            self.failed_once = False

        def proxy_execute(self, **kwargs) -> Dict[str, Any]:
            if not self.failed_once:
                self.failed_once = True
                raise BrokerError("proxy GET /v1/video_status.get failed: 502")
            return super().proxy_execute(**kwargs)

    broker = _FlakyBroker()
    status = await _adapter(broker).fetch_status(VideoJob(video_id="vid_1", connection_id="ca_heygen"))

    assert status == {"status": "processing"}
    assert broker.failed_once is True


@pytest.mark.asyncio
async def test_broker_calls_run_off_the_event_loop_thread() -> None:
    class _ThreadRecordingBroker(_FakeBroker):
        def __init__(self):
            super().__init__(
                start={"data": {"video_id": "vid_4"}},
                statuses=[{"data": {"status": "completed", "video_url": "https://cdn.example.com/vid_4.mp4"}}],
            )
            self.threads: List[int] = []

        def proxy_execute(self, **kwargs) -> Dict[str, Any]:
            self.threads.append(threading.get_ident())
            return super().proxy_execute(**kwargs)

    broker = _ThreadRecordingBroker()
    await _adapter(broker).generate(AUDIO_URL)

    loop_thread = threading.get_ident()
    assert len(broker.threads) == 2
    assert loop_thread not in broker.threads
