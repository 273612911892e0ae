"""Event sinks that receive routed events from the event log."""

from typing import Callable, Protocol

from flowview.models.agent_event import AgentEvent


class EventSink(Protocol):
    """Protocol for receiving agent events."""

    def append(self, event: AgentEvent) -> None:
        """Append an event to the sink."""
        ...


class ListSink:
    """stores events in a list."""

    def __init__(self) -> None:
        self.events: list[AgentEvent] = []

    def append(self, event: AgentEvent) -> None:
        """Append an event to the list."""
        self.events.append(event)

    def clear(self) -> None:
        """Clear all events."""
        self.events.clear()


class PatternSink:
    """forwards only one pattern's events to a callback."""

    def __init__(self, pattern_name: str, callback: Callable[[AgentEvent], None]) -> None:
        self.pattern_name = pattern_name
        self.callback = callback

    def append(self, event: AgentEvent) -> None:
        if event.pattern_name == self.pattern_name:
            self.callback(event)
