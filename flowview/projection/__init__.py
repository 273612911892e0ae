"""Execution-state projection over a pattern's events."""

from flowview.projection.state import (
    ExecutionProjection,
    ExecutionProjector,
    accept_human_input,
    apply,
    fold,
    status_of,
)

__all__ = [
    "ExecutionProjection",
    "ExecutionProjector",
    "accept_human_input",
    "apply",
    "fold",
    "status_of",
]
