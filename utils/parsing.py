"""Text helpers for semi-structured LLM output."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse


logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?|```", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_URL_RE = re.compile(r"https?://[^\s)]+")

AUTH_LINK_HOSTS = ("connect.composio.dev",)

FILLER_WORDS = frozenset(
    {
        "for", "and", "the", "a", "an", "in", "on", "with", "about",
        "how", "to", "of", "is", "are", "was", "were", "be", "been",
        "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "must", "shall",
    }
)


def strip_code_fences(text: Optional[str]) -> str:
    """Remove markdown code fences (any language tag) and trim."""
    return _FENCE_RE.sub("", str(text or "")).strip()


def _dict_items(parsed: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(parsed, list):
        return None
    return [item for item in parsed if isinstance(item, dict)]


def extract_json_array(text: Optional[str], label: str = "response") -> List[Dict[str, Any]]:
    """
    Best-effort extraction of a JSON array of objects from model output.

    Strict parse after fence stripping, then the first ``[...]`` span, then
    an empty list. Never raises.
    """
    raw = str(text or "")
    if not raw.strip():
        return []

    cleaned = strip_code_fences(raw)
    try:
        items = _dict_items(json.loads(cleaned))
        if items is not None:
            return items
        logger.warning(f"{label}: JSON is not an array, scanning for one")
    except ValueError as exc:
        logger.warning(f"{label}: JSON parse failed: {exc}")
        logger.warning(f"{label}: raw output: {raw}")

    match = _ARRAY_RE.search(raw)
    if not match:
        logger.error(f"{label}: no JSON array found in output: {raw}")
        return []

    try:
        items = _dict_items(json.loads(match.group(0)))
    except ValueError as exc:
        logger.error(f"{label}: fallback parse also failed: {exc}")
        logger.error(f"{label}: raw output: {raw}")
        return []

    if items is None:
        logger.error(f"{label}: fallback span is not an array: {raw}")
        return []
    logger.info(f"{label}: recovered {len(items)} items from fallback")
    return items


def extract_first_url(text: Optional[str]) -> Optional[str]:
    match = _URL_RE.search(str(text or ""))
    return match.group(0) if match else None


def is_http_url(value: Optional[str]) -> bool:
    parsed = urlparse(str(value or "").strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_auth_link(url: Optional[str], hosts: Sequence[str] = AUTH_LINK_HOSTS) -> bool:
    """True when the URL points at the broker's account-connect flow."""
    host = (urlparse(str(url or "")).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in hosts)


def extract_key_terms(topic: str, limit: int = 3) -> str:
    """Shorten a topic into a compact search query.

    "claude code for development and coding" -> "claude code development"
    """
    words = str(topic or "").lower().split()
    keep = [w for w in words if w not in FILLER_WORDS and len(w) > 2]
    return " ".join(keep[:limit]) or topic


def days_ago_iso(days: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=int(days))).date().isoformat()
