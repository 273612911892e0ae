"""Data model for pattern catalogue entries and their topology.

A pattern is a fixed orchestration topology plus the agents that take part
in it. The catalogue is fetched once per view and treated as read-only.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TopologyType(str, Enum):
    """Shapes of agent interaction graphs."""

    SEQUENCE = "SEQUENCE"
    PARALLEL = "PARALLEL"
    LOOP = "LOOP"
    STAR = "STAR"
    CONDITIONAL = "CONDITIONAL"
    GOAP = "GOAP"  # goal-oriented planning DAG
    P2P = "P2P"


class TopologyEdge(BaseModel):
    """a directed edge between two nodes."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    label: str | None = None
    condition: str | None = None
    bidirectional: bool = False

    @property
    def display_label(self) -> str | None:
        """label wins, condition is shown when there is no label."""
        return self.label or self.condition


class Topology(BaseModel):
    """the graph shape of a pattern."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # kept as a plain string so unknown shapes still load
    type: str
    edges: list[TopologyEdge] = Field(default_factory=list)
    max_iterations: int | None = Field(default=None, alias="maxIterations")
    has_human: bool | None = Field(default=None, alias="hasHuman")

    @property
    def topology_type(self) -> TopologyType | None:
        """The known topology type, or None for an unrecognised one."""
        try:
            return TopologyType(self.type)
        except ValueError:
            return None

    def referenced_ids(self) -> list[str]:
        """Node ids referenced by edges, in first-seen order."""
        seen: dict[str, None] = {}
        for edge in self.edges:
            seen.setdefault(edge.source)
            seen.setdefault(edge.target)
        return list(seen)


class PatternInfo(BaseModel):
    """A catalogue entry as returned by the pattern API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    category: str = ""
    agents: list[str] = Field(default_factory=list)
    topology: Topology
    example_prompt: str = Field(default="", alias="examplePrompt")
