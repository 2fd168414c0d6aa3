"""Avatar video rendering, polling and media download."""

from .adapters import BaseVideoAdapter, HeyGenAdapter
from .downloader import download_files, video_download_path
from .poller import BoundedPoller

__all__ = [
    "BaseVideoAdapter",
    "BoundedPoller",
    "HeyGenAdapter",
    "download_files",
    "video_download_path",
]
