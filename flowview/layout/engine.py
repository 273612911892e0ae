"""Topology layout: pure function from topology + status to geometry.

Same arguments always give the same coordinates, so a status-only change
re-renders without moving anything.
"""

from typing import Iterable

from flowview.layout.geometry import edge_geometry
from flowview.layout.nodes import resolve_nodes
from flowview.layout.strategies import DEFAULT_PADDING, Canvas, strategy_for
from flowview.models.layout import Layout, LayoutEdge, LayoutNode
from flowview.models.pattern import PatternInfo, Topology, TopologyType

# topologies whose edges are drawn as curves
CURVED_TOPOLOGIES = {TopologyType.P2P}


def layout(
    topology: Topology,
    declared_agent_ids: Iterable[str],
    canvas_width: float,
    canvas_height: float,
    active_agents: Iterable[str] = (),
    completed_agents: Iterable[str] = (),
    errored_agents: Iterable[str] = (),
    padding: float = DEFAULT_PADDING,
) -> Layout:
    """Position a topology's nodes and edges on a canvas.

    Args:
        topology: the pattern topology
        declared_agent_ids: agents declared by the pattern, in display order
        canvas_width: canvas width in px
        canvas_height: canvas height in px
        active_agents: ids currently running (drives node status and edge highlight)
        completed_agents: ids that have finished
        errored_agents: ids that reported an error
        padding: margin kept free on every side

    Returns:
        Layout with every node positioned and every edge resolved. Edges that
        reference unknown nodes get empty geometry.
    """
    active = frozenset(active_agents)
    nodes = resolve_nodes(
        topology, declared_agent_ids, active, completed_agents, errored_agents
    )
    canvas = Canvas(width=canvas_width, height=canvas_height, padding=padding)
    topology_type = topology.topology_type

    positions = strategy_for(topology_type)(nodes, topology.edges, canvas)
    placed = [
        node.model_copy(update={"x": positions[node.id].x, "y": positions[node.id].y})
        if node.id in positions
        else node
        for node in nodes
    ]

    curved = topology_type in CURVED_TOPOLOGIES
    edges = [
        LayoutEdge(
            source=edge.source,
            target=edge.target,
            label=edge.display_label,
            bidirectional=edge.bidirectional,
            active=edge.source in active or edge.target in active,
            geometry=edge_geometry(edge, positions, curved=curved),
        )
        for edge in topology.edges
    ]

    return Layout(
        topology_type=topology.type,
        width=canvas_width,
        height=canvas_height,
        nodes=placed,
        edges=edges,
    )


def layout_pattern(
    pattern: PatternInfo,
    canvas_width: float,
    canvas_height: float,
    active_agents: Iterable[str] = (),
    completed_agents: Iterable[str] = (),
    errored_agents: Iterable[str] = (),
) -> Layout:
    """Convenience wrapper taking a catalogue entry."""
    return layout(
        pattern.topology,
        pattern.agents,
        canvas_width,
        canvas_height,
        active_agents=active_agents,
        completed_agents=completed_agents,
        errored_agents=errored_agents,
    )
