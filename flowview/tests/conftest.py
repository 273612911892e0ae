"""Shared fixtures: a small pattern catalogue and a mock pattern API."""

import json

import httpx
import pytest

from flowview.sdk.client import PatternClient

SEQUENCE_PATTERN = {
    "id": "sequence",
    "name": "Sequential Workflow",
    "description": "Agents run one after another",
    "category": "workflow",
    "agents": ["A", "B", "C"],
    "topology": {"type": "SEQUENCE", "edges": [{"from": "A", "to": "B"}, {"from": "B", "to": "C"}]},
    "examplePrompt": "Write a story",
}

PARALLEL_PATTERN = {
    "id": "parallel",
    "name": "Parallel Workflow",
    "description": "Fan out, then combine",
    "category": "workflow",
    "agents": ["Food", "Movie"],
    "topology": {
        "type": "PARALLEL",
        "edges": [
            {"from": "start", "to": "Food"},
            {"from": "start", "to": "Movie"},
            {"from": "Food", "to": "combiner"},
            {"from": "Movie", "to": "combiner"},
        ],
    },
    "examplePrompt": "Plan an evening",
}

HUMAN_PATTERN = {
    "id": "human-in-loop",
    "name": "Human in the Loop",
    "description": "Waits for approval",
    "category": "agentic",
    "agents": ["Drafter", "human", "Publisher"],
    "topology": {
        "type": "SEQUENCE",
        "edges": [{"from": "Drafter", "to": "human"}, {"from": "human", "to": "Publisher"}],
        "hasHuman": True,
    },
    "examplePrompt": "Draft a post",
}


class MockBackend:
    """In-memory stand-in for the orchestration backend's HTTP API."""

    def __init__(self) -> None:
        self.patterns = {
            p["id"]: p for p in (SEQUENCE_PATTERN, PARALLEL_PATTERN, HUMAN_PATTERN)
        }
        self.pending: dict[str, str] = {}
        self.submitted: list[tuple[str, str]] = []
        self.reject_human_input = False
        self.execution_result: dict | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if request.method == "GET" and path == "/patterns":
            return httpx.Response(200, json=list(self.patterns.values()))
        if request.method == "GET" and path.startswith("/patterns/"):
            pattern = self.patterns.get(path.split("/")[2])
            if pattern is None:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json=pattern)
        if request.method == "POST" and path.endswith("/execute"):
            return httpx.Response(200, json=self.execution_result)
        if request.method == "GET" and path == "/human-input/pending":
            return httpx.Response(200, json=self.pending)
        if request.method == "POST" and path.startswith("/human-input/"):
            if self.reject_human_input:
                return httpx.Response(500, json={"detail": "boom"})
            request_id = path.split("/")[2]
            self.submitted.append((request_id, json.loads(request.content)["input"]))
            self.pending.pop(request_id, None)
            return httpx.Response(200)
        return httpx.Response(404)


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def client(backend: MockBackend) -> PatternClient:
    return PatternClient(
        base_url="http://backend.test/api",
        transport=httpx.MockTransport(backend.handler),
    )
