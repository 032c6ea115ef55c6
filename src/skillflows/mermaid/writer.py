"""
Graph → Mermaid writer.

Serializes a (possibly visually edited) :class:`FlowGraph` back into
flowchart source, the inverse of :func:`skillflows.mermaid.parser.mermaid_to_graph`.
"""

from __future__ import annotations

import re
from typing import Literal

from skillflows.mermaid.generator import escape_label
from skillflows.models import FlowEdge, FlowGraph, FlowNode

Direction = Literal["TB", "LR", "BT", "RL"]


def graph_to_mermaid(
    graph: FlowGraph,
    direction: Direction = "TB",
    include_styles: bool = True,
    include_comments: bool = True,
) -> str:
    """
    Convert a graph to Mermaid flowchart syntax.

    Group nodes become subgraphs (nested by ``parent_id``), members are
    written inside their subgraph, and edges are written last.
    """
    lines: list[str] = [f"flowchart {direction}", ""]

    if include_styles:
        class_defs = _collect_class_defs(graph.nodes)
        if class_defs:
            if include_comments:
                lines.append("  %% Node styles")
            lines.extend(class_defs)
            lines.append("")

    groups: dict[str, FlowNode] = {}
    members: dict[str, list[FlowNode]] = {}
    root_nodes: list[FlowNode] = []
    for node in graph.nodes:
        if node.type == "group":
            groups[node.id] = node
        elif node.parent_id:
            members.setdefault(node.parent_id, []).append(node)
        else:
            root_nodes.append(node)

    def write_group(group: FlowNode, depth: int) -> None:
        indent = "  " * depth
        lines.append(f'{indent}subgraph {group.id}["{escape_label(group.label)}"]')
        if group.data.get("direction"):
            lines.append(f"{indent}  direction {group.data['direction']}")
        for child in members.get(group.id, []):
            lines.append(f"{indent}  {_node_line(child)}")
        for nested in groups.values():
            if nested.parent_id == group.id:
                write_group(nested, depth + 1)
        lines.append(f"{indent}end")

    for group in groups.values():
        if group.parent_id is None or group.parent_id not in groups:
            write_group(group, 1)
            lines.append("")

    # Members of groups that no longer exist are written at the top level
    orphans = [n for parent, nodes in members.items() if parent not in groups for n in nodes]
    top_level = root_nodes + orphans
    if top_level:
        if include_comments:
            lines.append("  %% Root nodes")
        lines.extend(f"  {_node_line(node)}" for node in top_level)
        lines.append("")

    if graph.edges:
        if include_comments:
            lines.append("  %% Connections")
        lines.extend(f"  {_edge_line(edge)}" for edge in graph.edges)
        lines.append("")

    return "\n".join(lines)


def _node_line(node: FlowNode) -> str:
    line = f'{node.id}["{escape_label(node.label)}"]'
    if node.node_type != "default":
        line += f":::{node.node_type}"
    return line


def _edge_line(edge: FlowEdge) -> str:
    edge_type = edge.data.get("edge_type")
    arrow = "-->"
    if edge_type == "dotted" or edge.animated:
        arrow = "-.->"
    elif edge_type == "thick":
        arrow = "==>"

    if edge.label:
        return f'{edge.source} {arrow}|"{escape_label(edge.label)}"| {edge.target}'
    return f"{edge.source} {arrow} {edge.target}"


def _collect_class_defs(nodes: list[FlowNode]) -> list[str]:
    class_defs: list[str] = []
    seen: set[str] = set()
    for node in nodes:
        style = node.data.get("style")
        node_type = node.node_type
        if node.type == "group" or node_type == "default" or node_type in seen or not style:
            continue
        seen.add(node_type)
        style_str = ",".join(f"{_kebab_case(key)}:{value}" for key, value in style.items())
        class_defs.append(f"  classDef {node_type} {style_str}")
    return class_defs


def _kebab_case(key: str) -> str:
    """``strokeWidth`` → ``stroke-width``."""
    return re.sub(r"([A-Z])", r"-\1", key).lower()
