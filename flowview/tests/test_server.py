"""Tests for the FastAPI view service."""

import httpx
import pytest
from fastapi.testclient import TestClient

from flowview.models.agent_event import agent_invoked, human_input_required
from flowview.sdk.client import PatternClient
from flowview.server import state
from flowview.server.app import app


@pytest.fixture
def api(client):
    state.set_client(client)
    state.event_log.clear()
    yield TestClient(app)
    state.set_client(None)
    state.event_log.clear()


def _wire(event) -> dict:
    return event.model_dump(by_alias=True, mode="json")


class TestRoot:
    def test_health(self, api):
        response = api.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["connected"] is False
        assert body["event_count"] == 0


class TestEvents:
    """Test pushing and listing events."""

    def test_ingest_counts(self, api):
        event = _wire(agent_invoked("sequence", "A"))
        response = api.post(
            "/api/events",
            json={"events": [event, event, {"eventId": "bad"}]},
        )
        assert response.status_code == 200
        assert response.json() == {"accepted": 1, "duplicates": 1, "rejected": 1}

    def test_list_filters_by_pattern(self, api):
        api.post(
            "/api/events",
            json={
                "events": [
                    _wire(agent_invoked("sequence", "A")),
                    _wire(agent_invoked("parallel", "Food")),
                ]
            },
        )
        everything = api.get("/api/events").json()
        assert len(everything) == 2

        sequence = api.get("/api/events", params={"pattern": "sequence"}).json()
        assert [e["agentName"] for e in sequence] == ["A"]

    def test_list_pagination(self, api):
        for name in ["A", "B", "C"]:
            state.event_log.append(agent_invoked("sequence", name))
        page = api.get("/api/events", params={"limit": 1, "offset": 1}).json()
        assert [e["agentName"] for e in page] == ["B"]


class TestViews:
    """Test the per-pattern view endpoint."""

    def test_view_reflects_log(self, api):
        state.event_log.append(agent_invoked("sequence", "B"))
        response = api.get("/api/views/sequence")
        assert response.status_code == 200
        body = response.json()
        assert body["statuses"] == {"A": "idle", "B": "active", "C": "idle"}
        assert [n["id"] for n in body["layout"]["nodes"]] == ["A", "B", "C"]

    def test_view_canvas_size(self, api):
        body = api.get("/api/views/parallel", params={"width": 1000, "height": 500}).json()
        assert body["layout"]["width"] == 1000
        combiner = next(n for n in body["layout"]["nodes"] if n["id"] == "combiner")
        assert combiner["x"] == 1000 - 80

    def test_view_pending_prompt(self, api):
        state.event_log.append(human_input_required("human-in-loop", "Approve?", "7"))
        body = api.get("/api/views/human-in-loop").json()
        assert body["pending_human_request"] == {"request_id": "7", "prompt_text": "Approve?"}

    def test_unknown_pattern(self, api):
        assert api.get("/api/views/nope").status_code == 404

    def test_backend_failure(self, api):
        state.set_client(
            PatternClient(
                "http://backend.test/api",
                transport=httpx.MockTransport(lambda request: httpx.Response(500)),
            )
        )
        assert api.get("/api/views/sequence").status_code == 502

    def test_view_does_not_leak_subscriptions(self, api):
        api.get("/api/views/sequence")
        api.get("/api/views/sequence")
        assert state.event_log._sinks == []
