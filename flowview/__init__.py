"""flowview - execution state and topology layout for multi-agent pattern runs."""

__version__ = "0.1.0"

from flowview.models.agent_event import AgentEvent, EventType, parse_event
from flowview.models.pattern import PatternInfo, Topology, TopologyEdge, TopologyType
from flowview.models.layout import Layout, LayoutEdge, LayoutNode, NodeStatus
from flowview.stream.event_log import EventLog
from flowview.projection.state import ExecutionProjection, ExecutionProjector, apply
from flowview.sdk.client import PatternClient
from flowview.sdk.view import PatternView

__all__ = [
    # Events
    "AgentEvent",
    "EventType",
    "parse_event",
    # Patterns
    "PatternInfo",
    "Topology",
    "TopologyEdge",
    "TopologyType",
    # Layout output
    "Layout",
    "LayoutEdge",
    "LayoutNode",
    "NodeStatus",
    # High-level APIs
    "EventLog",
    "ExecutionProjection",
    "ExecutionProjector",
    "apply",
    "PatternClient",
    "PatternView",
]
