"""Event de-duplication and routing."""

from flowview.stream.event_log import EventLog

__all__ = ["EventLog"]
