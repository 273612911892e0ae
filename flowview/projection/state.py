"""Execution-state projection folded from a pattern's event sequence.

``apply`` is a pure transition: it never mutates its inputs and returns a new
projection. ``ExecutionProjector`` owns the current projection for one
pattern run and feeds events through ``apply``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable

from flowview.models.agent_event import AgentEvent, EventType
from flowview.models.execution import ExecutionResult, HumanInputRequest
from flowview.models.layout import NodeStatus

logger = logging.getLogger(__name__)

# history key for events that are not attributed to an agent
PATTERN_HISTORY_KEY = ""


@dataclass(frozen=True)
class ExecutionProjection:
    """Derived per-run state.

    Note: a node is never in more than one of the active, completed and
    errored sets at the same time.
    """

    active_agents: frozenset[str] = frozenset()
    completed_agents: frozenset[str] = frozenset()
    errored_agents: frozenset[str] = frozenset()
    scope: dict[str, Any] = field(default_factory=dict)
    pending_human_request: HumanInputRequest | None = None
    handled_request_ids: frozenset[str] = frozenset()
    history: dict[str, tuple[AgentEvent, ...]] = field(default_factory=dict)
    event_count: int = 0
    last_event_type: EventType | None = None
    final_result: str | None = None


def _with_history(projection: ExecutionProjection, event: AgentEvent) -> dict:
    key = event.agent_name or PATTERN_HISTORY_KEY
    history = dict(projection.history)
    history[key] = history.get(key, ()) + (event,)
    return history


def apply(projection: ExecutionProjection, event: AgentEvent) -> ExecutionProjection:
    """Fold one event into the projection."""
    changes: dict[str, Any] = {
        "history": _with_history(projection, event),
        "event_count": projection.event_count + 1,
        "last_event_type": event.event_type,
    }
    agent = event.agent_name
    event_type = event.event_type

    if event_type == EventType.AGENT_INVOKED and agent:
        changes["active_agents"] = projection.active_agents | {agent}
        # loops re-invoke completed agents
        changes["completed_agents"] = projection.completed_agents - {agent}
        changes["errored_agents"] = projection.errored_agents - {agent}

    elif event_type == EventType.AGENT_COMPLETED and agent:
        changes["active_agents"] = projection.active_agents - {agent}
        changes["completed_agents"] = projection.completed_agents | {agent}
        changes["errored_agents"] = projection.errored_agents - {agent}

    elif event_type == EventType.STATE_UPDATED:
        if "key" in event.data:
            scope = dict(projection.scope)
            scope[str(event.data["key"])] = event.data.get("value")
            changes["scope"] = scope
        else:
            logger.warning("STATE_UPDATED without a key in %s", event.event_id)

    elif event_type == EventType.HUMAN_INPUT_REQUIRED:
        request_id = event.request_id
        if request_id is None:
            # no id means the prompt can never be answered or suppressed
            logger.warning(
                "HUMAN_INPUT_REQUIRED without requestId ignored (%s)", event.event_id
            )
        elif request_id not in projection.handled_request_ids:
            changes["pending_human_request"] = HumanInputRequest(
                request_id=request_id, prompt_text=event.message
            )

    elif event_type == EventType.ERROR and agent:
        changes["active_agents"] = projection.active_agents - {agent}
        changes["completed_agents"] = projection.completed_agents - {agent}
        changes["errored_agents"] = projection.errored_agents | {agent}

    elif event_type == EventType.COMPLETED:
        result = event.data.get("finalResult")
        changes["final_result"] = str(result) if result is not None else event.message

    return replace(projection, **changes)


def accept_human_input(
    projection: ExecutionProjection, request_id: str
) -> ExecutionProjection:
    """Mark a request as answered locally and clear it if it is the pending one."""
    pending = projection.pending_human_request
    return replace(
        projection,
        handled_request_ids=projection.handled_request_ids | {request_id},
        pending_human_request=None
        if pending and pending.request_id == request_id
        else pending,
    )


def status_of(projection: ExecutionProjection, node_id: str) -> NodeStatus:
    if node_id in projection.errored_agents:
        return NodeStatus.error
    if node_id in projection.active_agents:
        return NodeStatus.active
    if node_id in projection.completed_agents:
        return NodeStatus.completed
    return NodeStatus.idle


def fold(events: Iterable[AgentEvent]) -> ExecutionProjection:
    """Full refold of an event sequence from an empty projection."""
    projection = ExecutionProjection()
    for event in events:
        projection = apply(projection, event)
    return projection


class ExecutionProjector:
    """Owns the projection for one pattern run.

    Events for other patterns are ignored, so the projector can be
    subscribed straight to the global log.
    """

    def __init__(
        self,
        pattern_name: str,
        on_change: Callable[[ExecutionProjection], None] | None = None,
        handled_request_ids: Iterable[str] = (),
    ) -> None:
        """
        Args:
            pattern_name: only events tagged with this pattern are applied
            on_change: called with every new projection
            handled_request_ids: requests already answered earlier, so a
                replayed prompt for them stays suppressed
        """
        self.pattern_name = pattern_name
        self.on_change = on_change
        self._projection = ExecutionProjection(
            handled_request_ids=frozenset(handled_request_ids)
        )

    @property
    def projection(self) -> ExecutionProjection:
        return self._projection

    def _set(self, projection: ExecutionProjection) -> None:
        self._projection = projection
        if self.on_change:
            self.on_change(projection)

    def feed(self, event: AgentEvent) -> bool:
        """Apply one event. Returns False if it belongs to another pattern."""
        if event.pattern_name != self.pattern_name:
            return False
        self._set(apply(self._projection, event))
        return True

    # EventSink protocol, so the projector can subscribe to an EventLog
    append = feed

    def replay(self, events: Iterable[AgentEvent]) -> None:
        """Feed a sequence of events (for example a filtered log)."""
        projection = self._projection
        for event in events:
            if event.pattern_name == self.pattern_name:
                projection = apply(projection, event)
        self._set(projection)

    def submit_human_input(self, request_id: str) -> None:
        """Record local acceptance of an answer for request_id."""
        self._set(accept_human_input(self._projection, request_id))

    def restore_pending(self, request: HumanInputRequest) -> bool:
        """Surface a prompt recovered from the backend's pending list.

        Returns False (and changes nothing) if the request was already answered.
        """
        if request.request_id in self._projection.handled_request_ids:
            return False
        self._set(replace(self._projection, pending_human_request=request))
        return True

    def reset_for_new_run(self) -> None:
        self._set(ExecutionProjection())

    def apply_result(self, result: ExecutionResult) -> None:
        """Apply the authoritative scope snapshot of a synchronous result."""
        changes: dict[str, Any] = {}
        if result.scope_snapshot is not None:
            # replaces, not merges
            changes["scope"] = dict(result.scope_snapshot)
        if result.result is not None:
            changes["final_result"] = result.result
        if changes:
            self._set(replace(self._projection, **changes))

    def status_of(self, node_id: str) -> NodeStatus:
        return status_of(self._projection, node_id)

    def statuses(self, node_ids: Iterable[str]) -> dict[str, NodeStatus]:
        return {node_id: status_of(self._projection, node_id) for node_id in node_ids}
