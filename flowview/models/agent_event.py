"""
Agent lifecycle events emitted by the orchestration backend.

For the data models, we choose pydantic, a library for data type validation.
Wire payloads use camelCase keys; attributes are snake_case.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from flowview.errors import MalformedEventError
from flowview.utils.identifiers import generate_event_id, utc_timestamp


class EventType(str, Enum):
    """Types of lifecycle events in a pattern run."""

    STARTED = "STARTED"
    AGENT_INVOKED = "AGENT_INVOKED"
    AGENT_COMPLETED = "AGENT_COMPLETED"
    STATE_UPDATED = "STATE_UPDATED"
    HUMAN_INPUT_REQUIRED = "HUMAN_INPUT_REQUIRED"
    HUMAN_INPUT_RECEIVED = "HUMAN_INPUT_RECEIVED"
    ERROR = "ERROR"
    COMPLETED = "COMPLETED"


class AgentEvent(BaseModel):
    """A single immutable lifecycle event."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event_id: str | None = Field(default=None, alias="eventId")  # UUID for deduping
    pattern_name: str = Field(alias="patternName")
    agent_name: str | None = Field(default=None, alias="agentName")
    event_type: EventType = Field(alias="eventType")
    message: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str

    @property
    def request_id(self) -> str | None:
        """The human-input request id carried in data, if any."""
        value = self.data.get("requestId")
        return str(value) if value not in (None, "") else None


def parse_event(raw: str | bytes | dict) -> AgentEvent:
    """Parse a raw payload into an AgentEvent.

    Raises:
        MalformedEventError: payload is not JSON, not an object, or does not
            match the event shape.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedEventError(f"event payload is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise MalformedEventError(
            f"event payload must be a JSON object, got {type(raw).__name__}"
        )
    # older payloads send null data
    if raw.get("data") is None:
        raw = {**raw, "data": {}}
    if raw.get("message") is None:
        raw = {**raw, "message": ""}
    try:
        return AgentEvent.model_validate(raw)
    except ValidationError as e:
        raise MalformedEventError(f"invalid event payload: {e}") from e


def _make(
    event_type: EventType,
    pattern_name: str,
    message: str,
    agent_name: str | None = None,
    data: dict[str, Any] | None = None,
) -> AgentEvent:
    return AgentEvent(
        event_id=generate_event_id(),
        pattern_name=pattern_name,
        agent_name=agent_name,
        event_type=event_type,
        message=message,
        data=data or {},
        timestamp=utc_timestamp(),
    )


def started(pattern_name: str, message: str) -> AgentEvent:
    return _make(EventType.STARTED, pattern_name, message)


def agent_invoked(pattern_name: str, agent_name: str, message: str = "") -> AgentEvent:
    return _make(EventType.AGENT_INVOKED, pattern_name, message, agent_name)


def agent_completed(pattern_name: str, agent_name: str, result: str = "") -> AgentEvent:
    return _make(
        EventType.AGENT_COMPLETED, pattern_name, result, agent_name, {"result": result}
    )


def state_updated(pattern_name: str, key: str, value: Any) -> AgentEvent:
    return _make(
        EventType.STATE_UPDATED,
        pattern_name,
        f"State updated: {key}",
        data={"key": key, "value": value},
    )


def human_input_required(pattern_name: str, prompt: str, request_id: str) -> AgentEvent:
    return _make(
        EventType.HUMAN_INPUT_REQUIRED,
        pattern_name,
        prompt,
        "human",
        {"requestId": request_id},
    )


def human_input_received(pattern_name: str, request_id: str, answer: str) -> AgentEvent:
    return _make(
        EventType.HUMAN_INPUT_RECEIVED,
        pattern_name,
        answer,
        "human",
        {"requestId": request_id},
    )


def completed(pattern_name: str, result: str) -> AgentEvent:
    return _make(
        EventType.COMPLETED, pattern_name, result, data={"finalResult": result}
    )


def error(pattern_name: str, agent_name: str | None, message: str) -> AgentEvent:
    return _make(EventType.ERROR, pattern_name, message, agent_name)
