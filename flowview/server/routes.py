"""API routes for the event log and pattern views."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from flowview.config import get_settings
from flowview.errors import PatternClientError, PatternNotFoundError
from flowview.models.agent_event import AgentEvent
from flowview.sdk.view import PatternView, ViewSnapshot
from flowview.server import state

router = APIRouter()


class EventIngestRequest(BaseModel):
    """Request body for pushing raw event payloads."""

    events: list[dict]


class EventIngestResponse(BaseModel):
    accepted: int
    duplicates: int
    rejected: int


@router.get("/events")
def list_events(
    pattern: str | None = None, limit: int = 100, offset: int = 0
) -> list[AgentEvent]:
    """List logged events in arrival order, optionally for one pattern."""
    log = state.event_log
    events = list(log.filter_by_pattern(pattern)) if pattern else log.events
    return events[offset : offset + limit]


@router.post("/events")
def ingest_events(request: EventIngestRequest) -> EventIngestResponse:
    """Append raw event payloads to the log, dropping repeats and malformed ones."""
    log = state.event_log
    accepted = 0
    duplicates_before = log.duplicate_count
    rejected_before = log.rejected_count
    for payload in request.events:
        if log.ingest(payload) is not None:
            accepted += 1
    return EventIngestResponse(
        accepted=accepted,
        duplicates=log.duplicate_count - duplicates_before,
        rejected=log.rejected_count - rejected_before,
    )


@router.get("/views/{pattern_id}")
def get_view(
    pattern_id: str, width: float | None = None, height: float | None = None
) -> ViewSnapshot:
    """Projection and layout of one pattern, replayed from the log."""
    settings = get_settings()
    view = PatternView(
        state.get_client(),
        state.event_log,
        canvas_width=settings.canvas_width,
        canvas_height=settings.canvas_height,
        is_connected=state.is_connected,
    )
    try:
        view.open(pattern_id)
    except PatternNotFoundError:
        raise HTTPException(status_code=404, detail=f"Pattern not found: {pattern_id}")
    except PatternClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    try:
        return view.render(width, height)
    finally:
        view.close()
