"""Request/response models for the execute and human-input calls.

An execution is a synchronous call: pattern + prompt in, final result,
event list and authoritative scope snapshot out.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from flowview.models.agent_event import AgentEvent


class ExecutionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"
    PENDING_HUMAN_INPUT = "PENDING_HUMAN_INPUT"


class ExecutionRequest(BaseModel):
    """Request body for the execute call."""

    model_config = ConfigDict(populate_by_name=True)

    pattern_id: str = Field(alias="patternId")
    prompt: str
    parameters: dict[str, Any] | None = None


class ExecutionResult(BaseModel):
    """Synchronous result of a pattern execution."""

    model_config = ConfigDict(populate_by_name=True)

    execution_id: str = Field(alias="executionId")
    pattern_id: str = Field(alias="patternId")
    status: ExecutionStatus
    result: str | None = None
    events: list[AgentEvent] = Field(default_factory=list)
    # authoritative final scope; replaces the projected scope wholesale
    scope_snapshot: dict[str, Any] | None = Field(default=None, alias="scopeSnapshot")
    start_time: str = Field(alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    duration_ms: int = Field(default=0, alias="durationMs")


class HumanInputRequest(BaseModel):
    """A prompt the backend is waiting on."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    prompt_text: str
