"""Edge geometry derived from placed node coordinates."""

import logging
import math
from typing import Mapping

from flowview.models.layout import EdgeGeometry, Point
from flowview.models.pattern import TopologyEdge

logger = logging.getLogger(__name__)

NODE_RADIUS = 25.0
CURVE_OFFSET = 0.2  # control point offset as a fraction of edge length
LABEL_FRACTION = 0.4  # labels sit 40% of the way from source to target
LABEL_LIFT = 8.0


def label_position(start: Point, end: Point) -> Point:
    return Point(
        x=start.x + (end.x - start.x) * LABEL_FRACTION,
        y=start.y + (end.y - start.y) * LABEL_FRACTION - LABEL_LIFT,
    )


def straight_edge(start: Point, end: Point) -> EdgeGeometry:
    """Centre-to-centre line."""
    return EdgeGeometry(
        kind="line",
        start=start,
        end=end,
        label_position=label_position(start, end),
    )


def curved_edge(start: Point, end: Point, node_radius: float = NODE_RADIUS) -> EdgeGeometry:
    """Quadratic curve bowed to one side, trimmed at both node boundaries.

    Reciprocal edges (a->b and b->a) bow to opposite sides, so they never
    overlap.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length == 0:
        return EdgeGeometry.empty()

    offset = length * CURVE_OFFSET
    control = Point(
        x=(start.x + end.x) / 2 - (dy / length) * offset,
        y=(start.y + end.y) / 2 + (dx / length) * offset,
    )
    inset = node_radius / length
    return EdgeGeometry(
        kind="quadratic",
        start=Point(x=start.x + dx * inset, y=start.y + dy * inset),
        end=Point(x=end.x - dx * inset, y=end.y - dy * inset),
        control=control,
        label_position=label_position(start, end),
    )


def edge_geometry(
    edge: TopologyEdge,
    positions: Mapping[str, Point],
    curved: bool = False,
) -> EdgeGeometry:
    """Geometry for one edge, or empty geometry if an endpoint is unknown."""
    start = positions.get(edge.source)
    end = positions.get(edge.target)
    if start is None or end is None:
        logger.warning("edge %s -> %s references an unknown node", edge.source, edge.target)
        return EdgeGeometry.empty()
    if curved:
        return curved_edge(start, end)
    return straight_edge(start, end)
