"""Runtime settings for flowview.

Values come from environment variables (optionally loaded from a .env file)
so the same code runs against a local backend or a deployed one.
"""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()  # load environment variables from .env file


class Settings(BaseModel):
    """Connection, transport and canvas settings."""

    api_base_url: str = "http://localhost:8080/api"
    ws_url: str = "ws://localhost:8080/ws/websocket"  # raw websocket behind SockJS
    event_topic: str = "/topic/events"

    reconnect_delay: float = 5.0  # seconds between reconnect attempts
    heartbeat_ms: int = 4000  # requested heartbeat in both directions
    http_timeout: float = 30.0

    canvas_width: float = 800
    canvas_height: float = 400

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    connect_on_startup: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from FLOWVIEW_* environment variables."""
        defaults = cls()
        return cls(
            api_base_url=os.getenv("FLOWVIEW_API_BASE_URL", defaults.api_base_url),
            ws_url=os.getenv("FLOWVIEW_WS_URL", defaults.ws_url),
            event_topic=os.getenv("FLOWVIEW_EVENT_TOPIC", defaults.event_topic),
            reconnect_delay=float(
                os.getenv("FLOWVIEW_RECONNECT_DELAY", defaults.reconnect_delay)
            ),
            heartbeat_ms=int(os.getenv("FLOWVIEW_HEARTBEAT_MS", defaults.heartbeat_ms)),
            http_timeout=float(os.getenv("FLOWVIEW_HTTP_TIMEOUT", defaults.http_timeout)),
            canvas_width=float(os.getenv("FLOWVIEW_CANVAS_WIDTH", defaults.canvas_width)),
            canvas_height=float(
                os.getenv("FLOWVIEW_CANVAS_HEIGHT", defaults.canvas_height)
            ),
            # comma-separated values for multiple origins, or "*" for all
            cors_origins=os.getenv("FLOWVIEW_CORS_ORIGINS", "*").split(","),
            log_level=os.getenv("FLOWVIEW_LOG_LEVEL", defaults.log_level),
            connect_on_startup=os.getenv("FLOWVIEW_CONNECT", "0").lower()
            in ("1", "true", "yes"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings.from_env()


def configure_logging(level: str | int = "INFO") -> None:
    """Install a basic stream handler. Only entry points call this."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
