"""
Mermaid → graph reader.

Reads ``flowchart``/``graph`` source into a :class:`FlowGraph` of nodes and
edges. This is a structural parse of the diagram language only; it knows
nothing about skills.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field

from skillflows.models import DiagramMetadata, FlowEdge, FlowGraph, FlowNode, SourceType

_HEADER_PATTERN = re.compile(r"^(?:flowchart|graph)\s+(TB|TD|LR|BT|RL)\b", re.IGNORECASE)
_CLASS_DEF_PATTERN = re.compile(r"^classDef\s+(\w+)\s+(.+)$")
_SUBGRAPH_PATTERN = re.compile(r'^subgraph\s+(\w+)(?:\["([^"]+)"\])?')
_DIRECTION_PATTERN = re.compile(r"^direction\s+(TB|TD|LR|BT|RL)\b", re.IGNORECASE)
_EDGE_PATTERN = re.compile(
    r'^(\w+)(?:\["[^"]*"\])?(?::::\w+)?\s*(-->|---|-\.->|==>|--\s*[^>]*\s*-->?)'
    r'\s*(?:\|"?([^"|]+)"?\|)?\s*(\w+)'
)
_NODE_PATTERN = re.compile(r'^(\w+)(?:\["([^"]*)"\])?(?::::(\w+))?$')

NODE_WIDTH = 180
NODE_HEIGHT = 60
HORIZONTAL_GAP = 50
VERTICAL_GAP = 80
SUBGRAPH_PADDING = 40


@dataclass
class _Node:
    id: str
    label: str
    class_name: str | None = None


@dataclass
class _Edge:
    source: str
    target: str
    label: str | None
    kind: str  # solid, dotted, thick


@dataclass
class _Subgraph:
    id: str
    label: str
    parent: str | None = None
    direction: str | None = None
    members: list[str] = field(default_factory=list)


@dataclass
class _Parsed:
    direction: str = "TB"
    nodes: dict[str, _Node] = field(default_factory=dict)
    edges: list[_Edge] = field(default_factory=list)
    subgraphs: dict[str, _Subgraph] = field(default_factory=dict)
    class_defs: dict[str, str] = field(default_factory=dict)


def _normalize_direction(value: str) -> str:
    value = value.upper()
    return "TB" if value == "TD" else value


def mermaid_to_graph(source: str, metadata: DiagramMetadata | None = None) -> FlowGraph:
    """Parse Mermaid flowchart source into a graph with simple layered positions."""
    parsed = _parse(source)
    return _to_graph(parsed, metadata)


def _parse(source: str) -> _Parsed:
    result = _Parsed()
    current: str | None = None
    stack: list[str | None] = []

    for raw_line in source.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("%%"):
            continue

        if line.startswith(("flowchart", "graph")):
            header = _HEADER_PATTERN.match(line)
            if header:
                result.direction = _normalize_direction(header.group(1))
            continue

        class_def = _CLASS_DEF_PATTERN.match(line)
        if class_def:
            result.class_defs[class_def.group(1)] = class_def.group(2).strip()
            continue

        subgraph = _SUBGRAPH_PATTERN.match(line)
        if subgraph:
            sg_id = subgraph.group(1)
            result.subgraphs[sg_id] = _Subgraph(
                id=sg_id, label=subgraph.group(2) or sg_id, parent=current
            )
            stack.append(current)
            current = sg_id
            continue

        if line == "end":
            current = stack.pop() if stack else None
            continue

        direction = _DIRECTION_PATTERN.match(line)
        if direction:
            if current is not None:
                result.subgraphs[current].direction = _normalize_direction(direction.group(1))
            continue

        edge = _EDGE_PATTERN.match(line)
        if edge:
            source_id, arrow, label, target_id = edge.groups()
            kind = "solid"
            if "-." in arrow:
                kind = "dotted"
            if "==" in arrow:
                kind = "thick"
            result.edges.append(
                _Edge(source=source_id, target=target_id, label=label.strip() if label else None, kind=kind)
            )
            _ensure_node(result, source_id, current)
            _ensure_node(result, target_id, current)
            continue

        node = _NODE_PATTERN.match(line)
        if node:
            node_id, label, class_name = node.groups()
            existing = result.nodes.get(node_id)
            if existing is None:
                result.nodes[node_id] = _Node(id=node_id, label=label or node_id, class_name=class_name)
            else:
                if label:
                    existing.label = label
                if class_name:
                    existing.class_name = class_name
            _add_member(result, node_id, current)

    return result


def _ensure_node(result: _Parsed, node_id: str, current: str | None) -> None:
    # Edges may point at a subgraph; that is a link to the group, not a new node
    if node_id in result.subgraphs:
        return
    if node_id not in result.nodes:
        result.nodes[node_id] = _Node(id=node_id, label=node_id)
    _add_member(result, node_id, current)


def _add_member(result: _Parsed, node_id: str, current: str | None) -> None:
    if current is None:
        return
    members = result.subgraphs[current].members
    if node_id not in members:
        members.append(node_id)


def _to_graph(parsed: _Parsed, metadata: DiagramMetadata | None) -> FlowGraph:
    nodes: list[FlowNode] = []
    edges: list[FlowEdge] = []
    positions = _calculate_positions(parsed)

    for sg_id, sg in parsed.subgraphs.items():
        child_positions = [positions[m] for m in sg.members if m in positions]
        if not child_positions:
            continue
        min_x = min(p["x"] for p in child_positions) - SUBGRAPH_PADDING
        min_y = min(p["y"] for p in child_positions) - SUBGRAPH_PADDING - 30
        max_x = max(p["x"] for p in child_positions) + NODE_WIDTH + SUBGRAPH_PADDING
        max_y = max(p["y"] for p in child_positions) + NODE_HEIGHT + SUBGRAPH_PADDING
        data = {
            "label": sg.label,
            "node_type": "subgraph",
            "width": max_x - min_x,
            "height": max_y - min_y,
        }
        if sg.direction:
            data["direction"] = sg.direction
        nodes.append(
            FlowNode(
                id=sg_id,
                type="group",
                position={"x": min_x, "y": min_y},
                data=data,
                parent_id=sg.parent,
            )
        )

    for node_id, node in parsed.nodes.items():
        parent_id = next(
            (sg_id for sg_id, sg in parsed.subgraphs.items() if node_id in sg.members),
            None,
        )
        style: dict[str, str] = {}
        if node.class_name and node.class_name in parsed.class_defs:
            style = parse_class_def_style(parsed.class_defs[node.class_name])
        nodes.append(
            FlowNode(
                id=node_id,
                type="default",
                position=positions.get(node_id, {"x": 0, "y": 0}),
                data={
                    "label": node.label.replace("\\n", "\n"),
                    "node_type": node.class_name or "default",
                    "style": style,
                },
                parent_id=parent_id,
            )
        )

    for edge in parsed.edges:
        edges.append(
            FlowEdge(
                id=f"{edge.source}-{edge.target}",
                source=edge.source,
                target=edge.target,
                label=edge.label,
                type="smoothstep" if edge.kind == "solid" else "step",
                animated=edge.kind == "dotted",
                data={"edge_type": edge.kind},
            )
        )

    if metadata is None:
        metadata = DiagramMetadata(source_type=SourceType.WORKFLOW, source_path="mermaid")
    return FlowGraph(nodes=nodes, edges=edges, metadata=metadata)


def _calculate_positions(parsed: _Parsed) -> dict[str, dict[str, float]]:
    """Breadth-first layering from the root nodes; one row (or column) per layer."""
    children: dict[str, list[str]] = {node_id: [] for node_id in parsed.nodes}
    has_parent: set[str] = set()
    for edge in parsed.edges:
        if edge.source in children and edge.target in parsed.nodes:
            children[edge.source].append(edge.target)
            has_parent.add(edge.target)

    roots = [node_id for node_id in parsed.nodes if node_id not in has_parent]
    start = roots or list(parsed.nodes)

    layers: dict[str, int] = {}
    queue = deque((node_id, 0) for node_id in start)
    while queue:
        node_id, layer = queue.popleft()
        if node_id in layers:
            continue
        layers[node_id] = layer
        for child in children[node_id]:
            if child not in layers:
                queue.append((child, layer + 1))

    for node_id in parsed.nodes:
        layers.setdefault(node_id, 0)

    horizontal = parsed.direction in ("LR", "RL")
    index_in_layer: dict[int, int] = {}
    positions: dict[str, dict[str, float]] = {}
    for node_id, layer in layers.items():
        idx = index_in_layer.get(layer, 0)
        index_in_layer[layer] = idx + 1
        if horizontal:
            x = layer * (NODE_WIDTH + HORIZONTAL_GAP)
            y = idx * (NODE_HEIGHT + VERTICAL_GAP)
        else:
            x = idx * (NODE_WIDTH + HORIZONTAL_GAP)
            y = layer * (NODE_HEIGHT + VERTICAL_GAP)
        positions[node_id] = {"x": x, "y": y}
    return positions


def parse_class_def_style(style_def: str) -> dict[str, str]:
    """``"fill:#fff,stroke-width:2px"`` → ``{"fill": "#fff", "strokeWidth": "2px"}``."""
    style: dict[str, str] = {}
    for part in style_def.split(","):
        key, _, value = part.partition(":")
        key, value = key.strip(), value.strip()
        if key and value:
            css_key = re.sub(r"-([a-z])", lambda m: m.group(1).upper(), key)
            style[css_key] = value
    return style
