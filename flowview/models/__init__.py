"""Core data models for flowview."""

from flowview.models.agent_event import (
    AgentEvent,
    EventType,
    parse_event,
)
from flowview.models.execution import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
    HumanInputRequest,
)
from flowview.models.layout import (
    EdgeGeometry,
    Layout,
    LayoutEdge,
    LayoutNode,
    NodeStatus,
    Point,
)
from flowview.models.pattern import (
    PatternInfo,
    Topology,
    TopologyEdge,
    TopologyType,
)

__all__ = [
    # Events
    "AgentEvent",
    "EventType",
    "parse_event",
    # Execution
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "HumanInputRequest",
    # Layout
    "EdgeGeometry",
    "Layout",
    "LayoutEdge",
    "LayoutNode",
    "NodeStatus",
    "Point",
    # Patterns
    "PatternInfo",
    "Topology",
    "TopologyEdge",
    "TopologyType",
]
