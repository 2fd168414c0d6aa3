"""Parallel downloads of rendered media to local disk."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

import httpx

from utils.exceptions import DownloadError


logger = logging.getLogger(__name__)

DownloadTarget = Tuple[str, Path]


def video_download_path(directory: Path | str, now_ms: Optional[int] = None) -> Path:
    """Return ``<directory>/heygen_video_<epoch ms>.mp4``."""
    stamp = int(now_ms if now_ms is not None else time.time() * 1000)
    return Path(directory).expanduser() / f"heygen_video_{stamp}.mp4"


async def _download_one(client: httpx.AsyncClient, url: str, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.parent / f".{path.name}.{uuid4().hex}.tmp"
    try:
        async with client.stream("GET", url) as response:
            if response.status_code >= 400:
                raise DownloadError(
                    f"Download failed with HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            with tmp.open("wb") as handle:
                async for chunk in response.aiter_bytes():
                    handle.write(chunk)
        os.replace(tmp, path)
    except httpx.TimeoutException as exc:
        raise DownloadError("Download timed out", url=url) from exc
    except httpx.RequestError as exc:
        raise DownloadError(f"Download request failed: {exc}", url=url) from exc
    finally:
        if tmp.exists():
            tmp.unlink()

    logger.info(f"Saved {url} -> {path}")
    return path


async def download_files(
    targets: List[DownloadTarget],
    *,
    timeout_s: float = 120.0,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Path]:
    """
    Download every ``(url, path)`` pair concurrently.

    Returns a mapping of url to the saved path. The first failure is raised
    as ``DownloadError`` once all transfers have settled.
    """
    if not targets:
        return {}

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)
    try:
        results = await asyncio.gather(
            *(_download_one(http, url, Path(path)) for url, path in targets),
            return_exceptions=True,
        )
    finally:
        if owns_client:
            await http.aclose()

    saved: Dict[str, Path] = {}
    for (url, _), result in zip(targets, results):
        if isinstance(result, BaseException):
            raise result
        saved[url] = result
    return saved
