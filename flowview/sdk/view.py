"""Pattern view: one pattern's projection and layout over the global log.

A view can attach after the pattern's events started arriving; it replays
the filtered log first and then follows new events. Switching the viewed
pattern resets the projection but never clears the log or stops the
backend run.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel

from flowview.adapters.sinks import PatternSink
from flowview.errors import FlowViewError, HumanInputSubmissionError
from flowview.layout.engine import layout
from flowview.models.agent_event import AgentEvent
from flowview.models.execution import ExecutionRequest, ExecutionResult, HumanInputRequest
from flowview.models.layout import Layout, NodeStatus
from flowview.models.pattern import PatternInfo
from flowview.projection.state import ExecutionProjector
from flowview.sdk.client import PatternClient
from flowview.stream.event_log import EventLog

logger = logging.getLogger(__name__)


class ViewSnapshot(BaseModel):
    """Everything a renderer needs for one frame."""

    pattern_id: str
    pattern_name: str
    layout: Layout
    statuses: dict[str, NodeStatus]
    scope: dict[str, Any]
    pending_human_request: HumanInputRequest | None = None
    history: dict[str, list[AgentEvent]] = {}
    event_count: int = 0
    final_result: str | None = None
    connected: bool = False


class PatternView:
    """Projection + layout for the currently viewed pattern.

    Usage:
        view = PatternView(client, log)
        view.open("sequence")
        snapshot = view.render()
    """

    def __init__(
        self,
        client: PatternClient,
        log: EventLog,
        canvas_width: float = 800,
        canvas_height: float = 400,
        is_connected: Callable[[], bool] | None = None,
    ) -> None:
        self.client = client
        self.log = log
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self._is_connected = is_connected or (lambda: False)
        self.pattern: PatternInfo | None = None
        self.projector: ExecutionProjector | None = None
        self._sink: PatternSink | None = None
        # per pattern id; survive switching away and back
        self._handled: dict[str, set[str]] = {}
        self._run_start: dict[str, int] = {}

    def _require_open(self) -> tuple[PatternInfo, ExecutionProjector]:
        if self.pattern is None or self.projector is None:
            raise FlowViewError("no pattern is open")
        return self.pattern, self.projector

    def open(self, pattern_id: str) -> PatternInfo:
        """Load a pattern, replay its logged events and follow new ones."""
        pattern = self.client.get_pattern(pattern_id)
        self.close()

        # events are tagged with the pattern id as their pattern name
        projector = ExecutionProjector(
            pattern.id, handled_request_ids=self._handled.get(pattern.id, ())
        )
        # only the latest run started from this view is replayed
        start = self._run_start.get(pattern.id, 0)
        projector.replay(self.log.filter_by_pattern(pattern.id, start=start))
        self._sink = PatternSink(pattern.id, projector.feed)
        self.log.subscribe(self._sink)

        self.pattern = pattern
        self.projector = projector
        logger.info("viewing pattern %s", pattern.id)
        return pattern

    def switch(self, pattern_id: str) -> PatternInfo:
        """Change the viewed pattern. The log and any backend run are untouched."""
        return self.open(pattern_id)

    def close(self) -> None:
        if self._sink is not None:
            self.log.unsubscribe(self._sink)
            self._sink = None
        self.pattern = None
        self.projector = None

    def execute(self, prompt: str, parameters: dict[str, Any] | None = None) -> ExecutionResult:
        """Start a fresh run of the open pattern and apply its final result."""
        pattern, projector = self._require_open()
        projector.reset_for_new_run()
        self._run_start[pattern.id] = len(self.log)
        result = self.client.execute(
            ExecutionRequest(pattern_id=pattern.id, prompt=prompt, parameters=parameters)
        )
        # events already seen on the stream are dropped by id
        for event in result.events:
            self.log.append(event)
        projector.apply_result(result)
        return result

    @property
    def pending_human_request(self) -> HumanInputRequest | None:
        if self.projector is None:
            return None
        return self.projector.projection.pending_human_request

    def submit_human_input(self, answer: str) -> HumanInputRequest:
        """Answer the pending prompt.

        On failure the prompt stays pending so it can be resubmitted.

        Raises:
            FlowViewError: nothing is pending
            HumanInputSubmissionError: the backend rejected the answer
        """
        pattern, projector = self._require_open()
        pending = projector.projection.pending_human_request
        if pending is None:
            raise FlowViewError("no human input is pending")
        try:
            self.client.submit_human_input(pending.request_id, answer)
        except HumanInputSubmissionError:
            logger.warning("human input for %s was not accepted", pending.request_id)
            raise
        projector.submit_human_input(pending.request_id)
        self._handled.setdefault(pattern.id, set()).add(pending.request_id)
        return pending

    def recover_pending_prompts(self) -> HumanInputRequest | None:
        """Surface a prompt left outstanding from before this view attached."""
        _, projector = self._require_open()
        projection = projector.projection
        if projection.pending_human_request is not None:
            return projection.pending_human_request
        for request_id, prompt_text in self.client.pending_human_inputs().items():
            if request_id in projection.handled_request_ids:
                continue
            projector.restore_pending(
                HumanInputRequest(request_id=request_id, prompt_text=prompt_text)
            )
            return projector.projection.pending_human_request
        return None

    def render(self, width: float | None = None, height: float | None = None) -> ViewSnapshot:
        """Lay out the open pattern with its current statuses."""
        pattern, projector = self._require_open()
        projection = projector.projection
        geometry = layout(
            pattern.topology,
            pattern.agents,
            width or self.canvas_width,
            height or self.canvas_height,
            active_agents=projection.active_agents,
            completed_agents=projection.completed_agents,
            errored_agents=projection.errored_agents,
        )
        return ViewSnapshot(
            pattern_id=pattern.id,
            pattern_name=pattern.name,
            layout=geometry,
            statuses={node.id: node.status for node in geometry.nodes},
            scope=dict(projection.scope),
            pending_human_request=projection.pending_human_request,
            history={key: list(events) for key, events in projection.history.items()},
            event_count=projection.event_count,
            final_result=projection.final_result,
            connected=self._is_connected(),
        )
