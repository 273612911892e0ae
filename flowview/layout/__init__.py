"""Topology layout engine."""

from flowview.layout.engine import layout, layout_pattern
from flowview.layout.nodes import VIRTUAL_COMBINER, VIRTUAL_START, resolve_nodes
from flowview.layout.strategies import (
    LAYOUT_STRATEGIES,
    Canvas,
    goap_levels,
    register_strategy,
    strategy_for,
)

__all__ = [
    "layout",
    "layout_pattern",
    "resolve_nodes",
    "VIRTUAL_START",
    "VIRTUAL_COMBINER",
    "LAYOUT_STRATEGIES",
    "Canvas",
    "goap_levels",
    "register_strategy",
    "strategy_for",
]
