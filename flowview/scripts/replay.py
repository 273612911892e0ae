#!/usr/bin/env python3
"""CLI script to replay a recorded event stream against a pattern.

Usage:
    python -m flowview.scripts.replay <events.jsonl> <pattern.json>

    # or with JSON output
    python -m flowview.scripts.replay <events.jsonl> <pattern.json> --json
"""

import argparse
import json
import sys
from pathlib import Path

from flowview.layout.engine import layout_pattern
from flowview.models.layout import Layout
from flowview.models.pattern import PatternInfo
from flowview.projection.state import ExecutionProjection, fold
from flowview.stream.event_log import EventLog


def load_event_log(events_file: Path) -> EventLog:
    """Ingest every line of a JSONL file; bad lines and repeats are dropped."""
    log = EventLog()
    with open(events_file) as f:
        for line in f:
            line = line.strip()
            if line:
                log.ingest(line)
    return log


def load_pattern(pattern_file: Path) -> PatternInfo:
    with open(pattern_file) as f:
        return PatternInfo.model_validate(json.load(f))


def replay_to_dict(pattern: PatternInfo, projection: ExecutionProjection, geometry: Layout) -> dict:
    """Convert a replay result to a JSON-serializable dict."""
    return {
        "pattern": pattern.id,
        "active_agents": sorted(projection.active_agents),
        "completed_agents": sorted(projection.completed_agents),
        "errored_agents": sorted(projection.errored_agents),
        "scope": projection.scope,
        "pending_human_request": (
            projection.pending_human_request.model_dump()
            if projection.pending_human_request
            else None
        ),
        "final_result": projection.final_result,
        "event_count": projection.event_count,
        "layout": geometry.model_dump(mode="json"),
    }


def format_replay(pattern: PatternInfo, projection: ExecutionProjection, geometry: Layout) -> str:
    lines = [
        f"Pattern: {pattern.name} ({pattern.topology.type})",
        f"Events:  {projection.event_count}",
        "",
        "Nodes:",
    ]
    for node in geometry.nodes:
        marker = " (virtual)" if node.virtual else ""
        lines.append(f"  {node.id:<20} {node.status.value:<10} ({node.x:.1f}, {node.y:.1f}){marker}")
    lines.append("")
    lines.append("Edges:")
    for edge in geometry.edges:
        label = f" [{edge.label}]" if edge.label else ""
        path = edge.geometry.svg_path() or "<unresolved>"
        lines.append(f"  {edge.source} -> {edge.target}{label}: {path}")
    if projection.scope:
        lines.append("")
        lines.append("Scope:")
        for key, value in projection.scope.items():
            lines.append(f"  {key} = {value!r}")
    if projection.pending_human_request:
        lines.append("")
        lines.append(f"Waiting on human input: {projection.pending_human_request.prompt_text}")
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description="Replay recorded events for a pattern and print its projection and layout."
    )
    parser.add_argument("events_file", type=Path, help="path to the JSONL events file")
    parser.add_argument("pattern_file", type=Path, help="path to the pattern JSON file")
    parser.add_argument("--width", type=float, default=800, help="canvas width")
    parser.add_argument("--height", type=float, default=400, help="canvas height")
    parser.add_argument(
        "--json",
        action="store_true",
        help="output as JSON instead of human-readable format",
    )

    args = parser.parse_args()

    for path in (args.events_file, args.pattern_file):
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            sys.exit(1)

    pattern = load_pattern(args.pattern_file)
    log = load_event_log(args.events_file)
    projection = fold(log.filter_by_pattern(pattern.id))
    geometry = layout_pattern(
        pattern,
        args.width,
        args.height,
        active_agents=projection.active_agents,
        completed_agents=projection.completed_agents,
        errored_agents=projection.errored_agents,
    )

    if args.json:
        print(json.dumps(replay_to_dict(pattern, projection, geometry), indent=2, default=str))
    else:
        print(format_replay(pattern, projection, geometry))


if __name__ == "__main__":
    main()
