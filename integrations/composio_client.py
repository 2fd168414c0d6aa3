"""
Composio Broker
Toolkit sessions, connected-account lookup and proxied provider calls.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Optional, Sequence

from config import ComposioSettings, get_composio_settings
from core import ToolkitSession
from utils.exceptions import BrokerError, ConfigurationError, ConnectionNotFoundError


logger = logging.getLogger(__name__)


def _field(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key; SDK responses are models or dicts."""
    for name in names:
        if obj is None:
            return default
        if isinstance(obj, dict):
            if name in obj and obj[name] is not None:
                return obj[name]
            continue
        value = getattr(obj, name, None)
        if value is not None:
            return value
    return default


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value or "").strip()
    if not text:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _as_dict(payload: Any) -> Dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return payload
    dump = getattr(payload, "model_dump", None)
    if callable(dump):
        return dict(dump())
    return dict(getattr(payload, "__dict__", {}) or {})


class ComposioBroker:
    """Thin wrapper over the Composio SDK used by every stage."""

    def __init__(
        self,
        settings: Optional[ComposioSettings] = None,
        *,
        client: Any = None,
    ) -> None:
        self.settings = settings or get_composio_settings()
        self._client = client

    @property
    def user_id(self) -> str:
        return self.settings.user_id

    def _get_client(self):
        if self._client is None:
            if not self.settings.api_key:
                raise ConfigurationError("COMPOSIO_API_KEY is required")
            from composio import Composio
            self._client = Composio(api_key=self.settings.api_key)
        return self._client

    def create_toolkit_session(
        self,
        toolkits: Sequence[str],
        auth_config_id: Optional[str] = None,
    ) -> ToolkitSession:
        """Open a tool-router session scoped to the given toolkits."""
        names = [str(t).strip() for t in toolkits if str(t).strip()]
        if not names:
            raise ValueError("at least one toolkit is required")

        logger.info(f"Connecting to tools: {', '.join(names)}...")
        toolkit_config: List[Any] = [
            {"toolkit": name, "auth_config_id": auth_config_id} if auth_config_id else name
            for name in names
        ]

        client = self._get_client()
        try:
            raw = client.experimental.tool_router.create_session(
                user_id=self.user_id,
                toolkits=toolkit_config,
            )
        except Exception as exc:
            raise BrokerError(f"session creation failed: {exc}", toolkit=",".join(names)) from exc

        url = str(_field(raw, "url", "mcp_url", default="") or "").strip()
        if not url:
            raise BrokerError("session response missing url", toolkit=",".join(names))

        headers = _field(raw, "headers", default={}) or {}
        return ToolkitSession(
            url=url,
            headers={str(k): str(v) for k, v in dict(headers).items()},
            session_id=_field(raw, "session_id", "id"),
            toolkits=names,
        )

    def list_active_connections(self) -> List[Any]:
        client = self._get_client()
        try:
            response = client.connected_accounts.list(
                user_ids=[self.user_id],
                statuses=["ACTIVE"],
            )
        except Exception as exc:
            raise BrokerError(f"listing connected accounts failed: {exc}") from exc
        return list(_field(response, "items", default=[]) or [])

    def get_active_connection_id(
        self,
        toolkit_slug: str,
        auth_config_id: Optional[str] = None,
        *,
        newest_first: bool = False,
    ) -> str:
        """Resolve the connected account id for a toolkit."""
        items = self.list_active_connections()
        if newest_first:
            items = sorted(items, key=lambda c: _as_datetime(_field(c, "created_at", "createdAt")), reverse=True)

        slug = toolkit_slug.lower()
        for conn in items:
            conn_slug = str(_field(_field(conn, "toolkit"), "slug", default="")).lower()
            if conn_slug != slug:
                continue
            if auth_config_id and _field(_field(conn, "auth_config", "authConfig"), "id") != auth_config_id:
                continue
            return str(_field(conn, "id"))

        raise ConnectionNotFoundError(
            f"No active connection found for {toolkit_slug}. Please authenticate User: {self.user_id}",
            toolkit=toolkit_slug,
        )

    def proxy_execute(
        self,
        *,
        connection_id: str,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send an authenticated request through the broker and return the JSON body."""
        parameters = [
            {"name": name, "value": str(value), "in": "query"}
            for name, value in (query or {}).items()
        ]
        request: Dict[str, Any] = {
            "endpoint": endpoint,
            "method": method.upper(),
            "connected_account_id": connection_id,
        }
        if body is not None:
            request["body"] = body
        if parameters:
            request["parameters"] = parameters

        client = self._get_client()
        try:
            response = client.tools.proxy(**request)
        except Exception as exc:
            raise BrokerError(f"proxy {method.upper()} {endpoint} failed: {exc}") from exc

        data = _field(response, "data")
        return _as_dict(data if data is not None else response)


_BROKER: Optional[ComposioBroker] = None


def get_broker() -> ComposioBroker:
    """Process-wide broker built from settings."""
    global _BROKER
    if _BROKER is None:
        _BROKER = ComposioBroker()
    return _BROKER
