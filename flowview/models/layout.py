"""Geometry produced by the layout engine.

The renderer draws these records as-is; it never needs to know which
topology produced them.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class NodeStatus(str, Enum):
    idle = "idle"
    active = "active"
    completed = "completed"
    error = "error"


class Point(BaseModel):
    x: float
    y: float


class LayoutNode(BaseModel):
    """a positioned node, typically an agent."""

    id: str
    label: str
    status: NodeStatus = NodeStatus.idle
    virtual: bool = False  # synthesized from edges, not a declared agent
    x: float | None = None
    y: float | None = None


class EdgeGeometry(BaseModel):
    """Drawable path for one edge."""

    kind: Literal["line", "quadratic", "empty"]
    start: Point | None = None
    end: Point | None = None
    control: Point | None = None  # quadratic curves only
    label_position: Point | None = None

    @classmethod
    def empty(cls) -> "EdgeGeometry":
        return cls(kind="empty")

    @property
    def is_empty(self) -> bool:
        return self.kind == "empty"

    def svg_path(self) -> str:
        """SVG path data, or "" for empty geometry."""
        if self.is_empty or self.start is None or self.end is None:
            return ""
        if self.kind == "quadratic" and self.control is not None:
            return (
                f"M {self.start.x} {self.start.y} "
                f"Q {self.control.x} {self.control.y} {self.end.x} {self.end.y}"
            )
        return f"M {self.start.x} {self.start.y} L {self.end.x} {self.end.y}"


class LayoutEdge(BaseModel):
    """a directed edge with resolved geometry."""

    source: str
    target: str
    label: str | None = None
    bidirectional: bool = False
    active: bool = False
    geometry: EdgeGeometry


class Layout(BaseModel):
    """the full positioned graph for one pattern."""

    topology_type: str
    width: float
    height: float
    nodes: list[LayoutNode]
    edges: list[LayoutEdge]

    def node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
