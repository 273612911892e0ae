"""Node-set construction ahead of placement.

Strategies only ever see a fully resolved node list; whether a node was
declared or synthesized from edges is recorded on the node itself.
"""

from typing import Iterable

from flowview.models.layout import LayoutNode, NodeStatus
from flowview.models.pattern import Topology, TopologyType

VIRTUAL_START = "start"
VIRTUAL_COMBINER = "combiner"


def _status(
    node_id: str,
    active: frozenset[str],
    completed: frozenset[str],
    errored: frozenset[str],
    default: NodeStatus = NodeStatus.idle,
) -> NodeStatus:
    if node_id in errored:
        return NodeStatus.error
    if node_id in active:
        return NodeStatus.active
    if node_id in completed:
        return NodeStatus.completed
    return default


def resolve_nodes(
    topology: Topology,
    declared_agent_ids: Iterable[str],
    active_agents: Iterable[str] = (),
    completed_agents: Iterable[str] = (),
    errored_agents: Iterable[str] = (),
) -> list[LayoutNode]:
    """Build the ordered node list for a topology.

    Declared agents come first, in order, without repeats. For PARALLEL
    topologies the fan-out/fan-in points ``start`` and ``combiner`` are
    synthesized when an edge references them and no agent declares them:
    ``start`` is prepended as completed, ``combiner`` appended as idle.
    """
    active = frozenset(active_agents)
    completed = frozenset(completed_agents)
    errored = frozenset(errored_agents)

    declared = list(dict.fromkeys(declared_agent_ids))
    nodes = [
        LayoutNode(id=agent, label=agent, status=_status(agent, active, completed, errored))
        for agent in declared
    ]

    if topology.topology_type == TopologyType.PARALLEL:
        referenced = set(topology.referenced_ids())
        if VIRTUAL_START in referenced and VIRTUAL_START not in declared:
            nodes.insert(
                0,
                LayoutNode(
                    id=VIRTUAL_START,
                    label=VIRTUAL_START,
                    virtual=True,
                    status=_status(
                        VIRTUAL_START, active, completed, errored, NodeStatus.completed
                    ),
                ),
            )
        if VIRTUAL_COMBINER in referenced and VIRTUAL_COMBINER not in declared:
            nodes.append(
                LayoutNode(
                    id=VIRTUAL_COMBINER,
                    label=VIRTUAL_COMBINER,
                    virtual=True,
                    status=_status(VIRTUAL_COMBINER, active, completed, errored),
                )
            )

    return nodes
