"""Adapters for the event transport and event delivery."""

from flowview.adapters.channel import ConnectionState, StompChannel
from flowview.adapters.sinks import EventSink, ListSink, PatternSink

__all__ = [
    "ConnectionState",
    "StompChannel",
    "EventSink",
    "ListSink",
    "PatternSink",
]
