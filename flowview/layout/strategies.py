"""Placement strategies, one per topology shape.

Each strategy maps the resolved node list to a point per node id. Adding a
shape means writing one function and registering it; nothing else changes.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Callable, Sequence

from flowview.layout.nodes import VIRTUAL_COMBINER, VIRTUAL_START
from flowview.models.layout import LayoutNode, Point
from flowview.models.pattern import TopologyEdge, TopologyType

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 80.0
MAX_STACK_SPACING = 80.0
# floor for the usable span when the canvas is smaller than twice the padding
MIN_INNER_SPAN = 40.0


@dataclass(frozen=True)
class Canvas:
    width: float
    height: float
    padding: float = DEFAULT_PADDING

    @property
    def center_x(self) -> float:
        return self.width / 2

    @property
    def center_y(self) -> float:
        return self.height / 2

    @property
    def short_side(self) -> float:
        return min(self.width, self.height)

    @property
    def inner_width(self) -> float:
        return max(self.width - 2 * self.padding, MIN_INNER_SPAN)

    @property
    def inner_height(self) -> float:
        return max(self.height - 2 * self.padding, MIN_INNER_SPAN)


LayoutStrategy = Callable[[Sequence[LayoutNode], Sequence[TopologyEdge], Canvas], dict[str, Point]]

LAYOUT_STRATEGIES: dict[TopologyType, LayoutStrategy] = {}


def register_strategy(*topology_types: TopologyType) -> Callable[[LayoutStrategy], LayoutStrategy]:
    """Register a placement function for one or more topology types."""

    def decorator(fn: LayoutStrategy) -> LayoutStrategy:
        for topology_type in topology_types:
            LAYOUT_STRATEGIES[topology_type] = fn
        return fn

    return decorator


def strategy_for(topology_type: TopologyType | None) -> LayoutStrategy:
    """Strategy for a type; unknown types fall back to the sequence layout."""
    if topology_type is None:
        return sequence_layout
    return LAYOUT_STRATEGIES.get(topology_type, sequence_layout)


@register_strategy(TopologyType.SEQUENCE)
def sequence_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Evenly spaced along the horizontal midline."""
    step = canvas.inner_width / ((len(nodes) - 1) or 1)
    return {
        node.id: Point(x=canvas.padding + i * step, y=canvas.center_y)
        for i, node in enumerate(nodes)
    }


def _stack(ids: Sequence[str], x: float, canvas: Canvas) -> dict[str, Point]:
    spacing = min(MAX_STACK_SPACING, canvas.inner_height / (len(ids) + 1))
    top = canvas.center_y - (len(ids) - 1) * spacing / 2
    return {node_id: Point(x=x, y=top + i * spacing) for i, node_id in enumerate(ids)}


@register_strategy(TopologyType.PARALLEL)
def parallel_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Fan-out on the left, workers stacked in the middle, fan-in on the right."""
    ids = [node.id for node in nodes]
    has_start = VIRTUAL_START in ids
    has_combiner = VIRTUAL_COMBINER in ids
    if not (has_start or has_combiner):
        return _stack(ids, canvas.center_x, canvas)

    workers = [i for i in ids if i not in (VIRTUAL_START, VIRTUAL_COMBINER)]
    points = _stack(workers, canvas.padding + canvas.inner_width / 2, canvas)
    if has_start:
        points[VIRTUAL_START] = Point(x=canvas.padding, y=canvas.center_y)
    if has_combiner:
        points[VIRTUAL_COMBINER] = Point(x=canvas.padding + canvas.inner_width, y=canvas.center_y)
    return points


@register_strategy(TopologyType.LOOP)
def loop_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Evenly around an ellipse, first node at the top."""
    n = len(nodes)
    rx = canvas.short_side / 3
    ry = canvas.short_side / 4
    points = {}
    for i, node in enumerate(nodes):
        angle = (i / n) * 2 * math.pi - math.pi / 2
        points[node.id] = Point(
            x=canvas.center_x + math.cos(angle) * rx,
            y=canvas.center_y + math.sin(angle) * ry,
        )
    return points


@register_strategy(TopologyType.STAR, TopologyType.CONDITIONAL)
def star_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Hub at the centre, spokes evenly around it."""
    if not nodes:
        return {}
    hub, spokes = nodes[0], nodes[1:]
    points = {hub.id: Point(x=canvas.center_x, y=canvas.center_y)}
    rx = canvas.short_side / 3
    ry = canvas.short_side / 3.5
    for i, node in enumerate(spokes):
        angle = (i / len(spokes)) * 2 * math.pi - math.pi / 2
        points[node.id] = Point(
            x=canvas.center_x + math.cos(angle) * rx,
            y=canvas.center_y + math.sin(angle) * ry,
        )
    return points


def goap_levels(node_ids: Sequence[str], edges: Sequence[TopologyEdge]) -> dict[str, int]:
    """Longest-path-from-source rank of every node (Kahn's algorithm).

    Edges naming unknown nodes are ignored. Cyclic input is not supported:
    nodes on a cycle are never dequeued and keep the highest level their
    processed predecessors gave them (0 if none).
    """
    known = set(node_ids)
    in_degree = {node_id: 0 for node_id in node_ids}
    successors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.source not in known or edge.target not in known:
            continue
        in_degree[edge.target] += 1
        successors[edge.source].append(edge.target)

    levels: dict[str, int] = {}
    queue: deque[str] = deque()
    for node_id in node_ids:
        if in_degree[node_id] == 0:
            levels[node_id] = 0
            queue.append(node_id)

    processed = 0
    while queue:
        current = queue.popleft()
        processed += 1
        for target in successors[current]:
            levels[target] = max(levels.get(target, 0), levels[current] + 1)
            in_degree[target] -= 1
            if in_degree[target] == 0:
                queue.append(target)

    if processed < len(node_ids):
        logger.warning(
            "GOAP topology has a cycle; %d node(s) could not be leveled",
            len(node_ids) - processed,
        )
    return {node_id: levels.get(node_id, 0) for node_id in node_ids}


@register_strategy(TopologyType.GOAP)
def goap_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Columns by dependency level, left to right."""
    if not nodes:
        return {}
    levels = goap_levels([node.id for node in nodes], edges)

    by_level: dict[int, list[str]] = {}
    for node in nodes:
        by_level.setdefault(levels[node.id], []).append(node.id)

    max_level = max(levels.values())
    column_width = canvas.inner_width / (max_level + 1)
    inner_height = canvas.inner_height

    points = {}
    for level, ids in by_level.items():
        x = canvas.padding + level * column_width + column_width / 2
        spacing = inner_height / (len(ids) + 1)
        for i, node_id in enumerate(ids):
            points[node_id] = Point(x=x, y=canvas.padding + (i + 1) * spacing)
    return points


@register_strategy(TopologyType.P2P)
def mesh_layout(
    nodes: Sequence[LayoutNode], edges: Sequence[TopologyEdge], canvas: Canvas
) -> dict[str, Point]:
    """Evenly around a slightly flattened circle."""
    n = len(nodes)
    radius = canvas.short_side / 3
    points = {}
    for i, node in enumerate(nodes):
        angle = (i / n) * 2 * math.pi - math.pi / 2
        points[node.id] = Point(
            x=canvas.center_x + math.cos(angle) * radius,
            y=canvas.center_y + math.sin(angle) * radius * 0.8,
        )
    return points
