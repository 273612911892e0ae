"""Process-wide append-only event log with de-duplication.

Every event delivered by the channel (or carried in a synchronous execution
result) goes through one EventLog. The log grows for the life of the
connection; per-pattern views query it with restartable filters and never
clear it.
"""

import logging
from typing import Iterator

from flowview.adapters.sinks import EventSink
from flowview.errors import MalformedEventError
from flowview.models.agent_event import AgentEvent, parse_event

logger = logging.getLogger(__name__)


class EventLog:
    """Canonical ordered log of unique events.

    Example:
        log = EventLog()
        log.subscribe(sink)
        log.ingest('{"eventId": "e1", "patternName": "sequence", ...}')
        events = list(log.filter_by_pattern("sequence"))
    """

    def __init__(self) -> None:
        self._events: list[AgentEvent] = []
        self._seen_ids: set[str] = set()
        self._sinks: list[EventSink] = []
        self.rejected_count = 0
        self.duplicate_count = 0

    @property
    def events(self) -> list[AgentEvent]:
        """A copy of the log in arrival order."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def seen(self, event_id: str) -> bool:
        return event_id in self._seen_ids

    def ingest(self, raw: str | bytes | dict) -> AgentEvent | None:
        """Parse a raw payload and append it unless it is a repeat.

        Malformed payloads are dropped (logged); subsequent payloads are
        unaffected.

        Returns:
            The appended event, or None if the payload was dropped.
        """
        try:
            event = parse_event(raw)
        except MalformedEventError as e:
            self.rejected_count += 1
            logger.warning("dropping malformed event payload: %s", e)
            return None
        return event if self.append(event) else None

    def append(self, event: AgentEvent) -> bool:
        """Append an already-parsed event.

        Returns:
            False if an event with the same id was already logged.
        """
        if event.event_id:
            if event.event_id in self._seen_ids:
                # re-delivery is expected from the transport
                self.duplicate_count += 1
                logger.debug("duplicate event %s dropped", event.event_id)
                return False
            self._seen_ids.add(event.event_id)

        self._events.append(event)
        logger.debug(
            "event %s %s/%s routed",
            event.event_type.value,
            event.pattern_name,
            event.agent_name,
        )
        for sink in list(self._sinks):
            # one failing subscriber does not stop delivery to the rest
            try:
                sink.append(event)
            except Exception:
                logger.exception("event sink %r failed on %s", sink, event.event_id)
        return True

    def filter_by_pattern(self, pattern_name: str, start: int = 0) -> Iterator[AgentEvent]:
        """Lazily yield one pattern's events in arrival order.

        Iterates over a snapshot taken at call time, so calling it again on an
        unchanged log reproduces the same sequence. ``start`` is a log
        position (see ``__len__``); earlier events are skipped.
        """
        snapshot = tuple(self._events[start:])
        return (event for event in snapshot if event.pattern_name == pattern_name)

    def subscribe(self, sink: EventSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def unsubscribe(self, sink: EventSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def clear(self) -> None:
        """Drop every logged event and forget seen ids."""
        self._events.clear()
        self._seen_ids.clear()
        self.rejected_count = 0
        self.duplicate_count = 0
