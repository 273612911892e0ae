"""Tests for the pattern view over a shared event log."""

import pytest

from flowview.errors import FlowViewError, HumanInputSubmissionError
from flowview.models.agent_event import (
    agent_completed,
    agent_invoked,
    completed,
    human_input_required,
    state_updated,
)
from flowview.models.layout import NodeStatus
from flowview.sdk.view import PatternView
from flowview.stream.event_log import EventLog

HITL = "human-in-loop"


def _wire(event) -> dict:
    return event.model_dump(by_alias=True, mode="json")


@pytest.fixture
def log():
    return EventLog()


@pytest.fixture
def view(client, log):
    return PatternView(client, log)


class TestAttach:
    """Test late attach and live following."""

    def test_late_attach_replays_log(self, view, log):
        """A view opened mid-run shows everything logged so far."""
        log.append(agent_invoked("sequence", "A"))
        log.append(agent_completed("sequence", "A"))
        log.append(agent_invoked("sequence", "B"))
        log.append(agent_invoked("parallel", "Food"))

        view.open("sequence")
        snapshot = view.render()

        assert snapshot.statuses == {
            "A": NodeStatus.completed,
            "B": NodeStatus.active,
            "C": NodeStatus.idle,
        }
        assert snapshot.event_count == 3

    def test_follows_new_events(self, view, log):
        view.open("sequence")
        log.append(agent_invoked("sequence", "A"))
        log.append(agent_invoked("parallel", "Food"))
        assert view.render().statuses["A"] == NodeStatus.active
        assert view.render().event_count == 1

    def test_render_parallel_includes_virtual_nodes(self, view):
        view.open("parallel")
        snapshot = view.render()
        assert snapshot.statuses["start"] == NodeStatus.completed
        assert snapshot.statuses["combiner"] == NodeStatus.idle
        assert snapshot.layout.width == 800

    def test_render_without_open_pattern(self, view):
        with pytest.raises(FlowViewError):
            view.render()

    def test_connected_flag(self, client, log):
        view = PatternView(client, log, is_connected=lambda: True)
        view.open("sequence")
        assert view.render().connected is True


class TestSwitch:
    """Test switching the viewed pattern."""

    def test_switch_resets_projection_but_keeps_log(self, view, log):
        log.append(agent_invoked("sequence", "A"))
        view.open("sequence")
        view.switch("parallel")

        assert len(log) == 1
        assert view.render().statuses["Food"] == NodeStatus.idle

        # the old pattern's events keep landing in the log, not the new view
        log.append(agent_completed("sequence", "A"))
        assert view.render().event_count == 0

        view.switch("sequence")
        assert view.render().statuses["A"] == NodeStatus.completed

    def test_close_stops_following(self, view, log):
        view.open("sequence")
        view.close()
        log.append(agent_invoked("sequence", "A"))
        assert view.projector is None


class TestExecute:
    """Test a synchronous run through the view."""

    def test_execute_applies_events_and_snapshot(self, view, log, backend):
        streamed = agent_invoked("sequence", "A")
        log.append(streamed)
        view.open("sequence")

        events = [
            streamed,
            agent_completed("sequence", "A", "draft"),
            state_updated("sequence", "story", "draft"),
            completed("sequence", "The end"),
        ]
        backend.execution_result = {
            "executionId": "x-1",
            "patternId": "sequence",
            "status": "COMPLETED",
            "result": "The end",
            "events": [_wire(e) for e in events],
            "scopeSnapshot": {"story": "final"},
            "startTime": "2026-01-01T00:00:00Z",
        }

        view.execute("Write a story")
        snapshot = view.render()

        # the streamed copy of the first event is not counted twice
        assert len(log) == 4
        assert snapshot.scope == {"story": "final"}
        assert snapshot.final_result == "The end"
        assert snapshot.statuses["A"] == NodeStatus.completed

    def test_execute_resets_previous_run(self, view, log, backend):
        log.append(agent_invoked("sequence", "C"))
        view.open("sequence")
        backend.execution_result = {
            "executionId": "x-2",
            "patternId": "sequence",
            "status": "COMPLETED",
            "startTime": "2026-01-01T00:00:00Z",
        }
        view.execute("again")
        assert view.render().statuses["C"] == NodeStatus.idle

    def test_reopen_after_execute_replays_only_latest_run(self, view, log, backend):
        """Events from before a re-execution stay out of the reopened view."""
        log.append(agent_invoked("sequence", "A"))
        log.append(agent_completed("sequence", "A"))
        view.open("sequence")
        backend.execution_result = {
            "executionId": "x-3",
            "patternId": "sequence",
            "status": "COMPLETED",
            "events": [_wire(agent_invoked("sequence", "B"))],
            "startTime": "2026-01-01T00:00:00Z",
        }
        view.execute("go")
        assert view.render().statuses["A"] == NodeStatus.idle

        view.switch("parallel")
        view.switch("sequence")

        statuses = view.render().statuses
        assert statuses["A"] == NodeStatus.idle
        assert statuses["B"] == NodeStatus.active
        assert len(log) == 3


class TestHumanInput:
    """Test answering prompts through the view."""

    def test_failed_submit_keeps_prompt(self, view, log, backend):
        view.open(HITL)
        log.append(human_input_required(HITL, "Approve?", "7"))
        backend.reject_human_input = True

        with pytest.raises(HumanInputSubmissionError):
            view.submit_human_input("yes")
        assert view.pending_human_request.request_id == "7"

        backend.reject_human_input = False
        view.submit_human_input("yes")
        assert backend.submitted == [("7", "yes")]
        assert view.pending_human_request is None

    def test_redelivered_prompt_not_shown_again(self, view, log):
        view.open(HITL)
        log.append(human_input_required(HITL, "Approve?", "7"))
        view.submit_human_input("yes")

        log.append(human_input_required(HITL, "Approve?", "7"))
        assert view.pending_human_request is None

    def test_answered_prompt_stays_answered_after_switching_back(self, view, log, backend):
        """Returning to a pattern does not resurface a prompt answered earlier."""
        view.open(HITL)
        log.append(human_input_required(HITL, "Approve?", "7"))
        view.submit_human_input("approve")

        view.switch("sequence")
        view.switch(HITL)

        assert view.pending_human_request is None
        assert "7" in view.projector.projection.handled_request_ids
        assert backend.submitted == [("7", "approve")]

    def test_nothing_pending(self, view):
        view.open(HITL)
        with pytest.raises(FlowViewError):
            view.submit_human_input("yes")

    def test_recover_pending_prompt(self, view, backend):
        """A prompt issued before the view attached is fetched from the backend."""
        backend.pending = {"9": "Publish?"}
        view.open(HITL)
        recovered = view.recover_pending_prompts()
        assert recovered.request_id == "9"
        assert view.render().pending_human_request.prompt_text == "Publish?"

    def test_recover_skips_handled(self, view, log, backend):
        view.open(HITL)
        log.append(human_input_required(HITL, "Approve?", "7"))
        view.submit_human_input("yes")
        backend.pending = {"7": "Approve?"}
        assert view.recover_pending_prompts() is None
