"""Shared process state for the view service."""

from flowview.config import get_settings
from flowview.runtime import LiveSession
from flowview.sdk.client import PatternClient
from flowview.stream.event_log import EventLog

# one log per process; views are cheap and built per request
event_log = EventLog()

_client: PatternClient | None = None
_session: LiveSession | None = None


def get_client() -> PatternClient:
    global _client
    if _client is None:
        settings = get_settings()
        _client = PatternClient(settings.api_base_url, timeout=settings.http_timeout)
    return _client


def set_client(client: PatternClient | None) -> None:
    """Swap the pattern client (tests inject one backed by a mock transport)."""
    global _client
    _client = client


def get_session() -> LiveSession:
    global _session
    if _session is None:
        _session = LiveSession.from_settings(get_settings(), log=event_log)
    return _session


def is_connected() -> bool:
    return _session is not None and _session.connected
