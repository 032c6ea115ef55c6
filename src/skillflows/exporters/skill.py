"""
Skill exporter.

Converts Mermaid diagrams back into ``SKILL.md`` documents so a skill can be
parsed, edited visually, and written back out.

The record parsed at generation time (``metadata.original_data``) is the
preferred source. Without it, a record is rebuilt from the diagram's graph
structure; that path cannot recover principle prose.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import yaml

from skillflows.config import ExportDefaults
from skillflows.logging import get_logger
from skillflows.mermaid.generator import workflow_stem
from skillflows.mermaid.parser import mermaid_to_graph
from skillflows.models import (
    RECORD_FIELDS,
    ApproximateSkill,
    ExactSkill,
    FlowEdge,
    FlowGraph,
    FlowNode,
    MermaidDiagram,
    ParsedSkill,
    SkillPrinciple,
    SkillReference,
    SkillRouting,
    SkillSourceData,
    SkillWorkflow,
    SourceType,
)

logger = get_logger("exporters.skill")

# Decorations the projector puts in front of labels
_EMOJI_PREFIX = re.compile(r"^(?:🎯|⚡|📋|📚|📁)\s*")

# Characters that cannot appear in an exported skill directory name
_UNSAFE_PATH_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

# Frontmatter keys written on export, in order
FRONTMATTER_KEYS = ("name", "description", "version", "author")


@dataclass
class SkillExportOptions:
    """Switches for :func:`export_to_skill`."""

    include_frontmatter: bool = True
    include_principle_placeholders: bool = True
    include_workflow_index: bool = True

    @classmethod
    def from_defaults(cls, defaults: ExportDefaults) -> SkillExportOptions:
        return cls(
            include_frontmatter=defaults.include_frontmatter,
            include_principle_placeholders=defaults.include_principle_placeholders,
            include_workflow_index=defaults.include_workflow_index,
        )


@dataclass
class ExportedSkill:
    """One exported document from a skills-directory diagram."""

    name: str
    content: str


ExportResult = Union[str, list[ExportedSkill]]


# ---------------------------------------------------------------------------
# Choosing the record to export
# ---------------------------------------------------------------------------


def resolve_skill_source(diagram: MermaidDiagram) -> SkillSourceData:
    """
    Pick the record to export.

    The diagram's recorded record wins field by field. An empty name or
    description, and any field the record does not carry at all (see
    ``ParsedSkill.absent``), is taken from the graph instead.

    Returns :class:`ExactSkill` when every exported field came from the
    record (a filled-in name or description still counts), and
    :class:`ApproximateSkill` when any section had to be rebuilt from the
    graph or there is no record.
    """
    graph = mermaid_to_graph(diagram.source, diagram.metadata)
    derived = extract_skill_data(graph)

    original = diagram.metadata.original_data
    if isinstance(original, ParsedSkill):
        frontmatter = dict(original.frontmatter)
        for key in ("name", "description"):
            if not frontmatter.get(key) and derived.frontmatter.get(key):
                frontmatter[key] = derived.frontmatter[key]

        from_graph = [name for name in RECORD_FIELDS if name in original.absent and getattr(derived, name)]
        if frontmatter == original.frontmatter and not from_graph:
            return ExactSkill(original)

        fields = {name: getattr(derived if name in from_graph else original, name) for name in RECORD_FIELDS}
        merged = ParsedSkill(frontmatter=frontmatter, raw_content=original.raw_content, **fields)
        if from_graph:
            logger.debug("Recorded skill lacks %s; taking them from the graph", ", ".join(from_graph))
            return ApproximateSkill(merged)
        return ExactSkill(merged)

    logger.debug("No original record for %s; exporting from graph", diagram.metadata.source_path)
    return ApproximateSkill(derived)


def extract_skill_data(graph: FlowGraph) -> ParsedSkill:
    """
    Rebuild a skill record from graph structure alone.

    Roles come from the node's style class, or failing that from id and
    parent-id substrings. Principle content is always empty.
    """
    content_nodes = [node for node in graph.nodes if node.type != "group"]

    frontmatter: dict[str, Any] = {}
    skill_node = next((n for n in content_nodes if n.node_type == "skill"), None)
    if skill_node is None:
        skill_node = next((n for n in content_nodes if "skill" in n.id and not n.parent_id), None)
    if skill_node is not None:
        frontmatter["name"] = _strip_prefix(skill_node.label)

    principles: list[SkillPrinciple] = []
    workflows: list[SkillWorkflow] = []
    references: list[SkillReference] = []
    workflow_nodes: dict[str, SkillWorkflow] = {}

    for node in content_nodes:
        if node is skill_node:
            continue
        role = _node_role(node)
        if role == "principle":
            principles.append(SkillPrinciple(name=_strip_prefix(node.label), content=""))
        elif role == "workflow":
            name, _, purpose = node.label.partition("\n")
            name = _strip_prefix(name)
            workflow = SkillWorkflow(name=name, path=f"workflows/{name}.md", purpose=purpose or None)
            workflows.append(workflow)
            workflow_nodes[node.id] = workflow
        elif role == "reference":
            name = _strip_prefix(node.label)
            references.append(SkillReference(name=name, path=f"references/{name}.md"))

    routing = [
        SkillRouting(response=edge.label or "", workflow=workflow_nodes[edge.target].path)
        for edge in graph.edges
        if _is_route(edge, workflow_nodes)
    ]

    return ParsedSkill(
        frontmatter=frontmatter,
        principles=principles,
        routing=routing,
        references=references,
        workflows=workflows,
    )


def _node_role(node: FlowNode) -> str | None:
    if node.node_type in ("principle", "workflow"):
        return node.node_type
    if node.node_type == "reference":
        return "reference"
    parent = node.parent_id or ""
    if "principle" in node.id or "principle" in parent:
        return "principle"
    if "workflow" in node.id or "workflow" in parent:
        return "workflow"
    if "ref" in node.id or "ref" in parent:
        return "reference"
    return None


def _is_route(edge: FlowEdge, workflow_nodes: dict[str, SkillWorkflow]) -> bool:
    return bool(edge.label) and edge.target in workflow_nodes


def _strip_prefix(label: str) -> str:
    return _EMOJI_PREFIX.sub("", label).strip()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def export_to_skill(diagram: MermaidDiagram, options: SkillExportOptions | None = None) -> str:
    """Export a single-skill diagram to ``SKILL.md`` text."""
    return render_skill(resolve_skill_source(diagram), options)


def render_skill(source: SkillSourceData, options: SkillExportOptions | None = None) -> str:
    """
    Render a record as a skill document.

    Sections come out in a fixed order and only when they have content:
    frontmatter, title, description, intake, principles, workflow index,
    routing, references.
    """
    options = options or SkillExportOptions()
    skill = source.record
    lines: list[str] = []

    if options.include_frontmatter:
        lines.append("---")
        lines.extend(_render_frontmatter(skill.frontmatter))
        lines.append("---")
        lines.append("")

    lines.append(f"# {skill.name or 'Skill'}")
    lines.append("")

    if skill.description:
        lines.append(skill.description)
        lines.append("")

    if skill.intake:
        lines.append("<intake>")
        lines.append(skill.intake)
        lines.append("</intake>")
        lines.append("")

    if skill.principles:
        lines.append("## Principles")
        lines.append("")
        for principle in skill.principles:
            lines.append(f'<principle name="{principle.name}">')
            if principle.content:
                lines.append(principle.content)
            elif options.include_principle_placeholders:
                lines.append(f"<!-- {principle.name} principle content -->")
            lines.append("</principle>")
            lines.append("")

    if skill.workflows and options.include_workflow_index:
        lines.append("## Workflows")
        lines.append("")
        lines.append("<workflows_index>")
        lines.append("")
        lines.append("| Workflow | Purpose |")
        lines.append("|----------|---------|")
        for workflow in skill.workflows:
            lines.append(f"| {workflow.name} | {workflow.purpose or ''} |")
        lines.append("")
        lines.append("</workflows_index>")
        lines.append("")

    if skill.routing:
        lines.append("## Routing")
        lines.append("")
        lines.append("<routing>")
        lines.append("")
        lines.append("| Response | Workflow |")
        lines.append("|----------|----------|")
        for route in skill.routing:
            lines.append(f"| {route.response} | `{_route_target(skill, route)}` |")
        lines.append("")
        lines.append("</routing>")
        lines.append("")

    if skill.references:
        lines.append("## References")
        lines.append("")
        lines.append("Reference files in `references/` directory:")
        lines.append("")
        for reference in skill.references:
            lines.append(f"- [{reference.name}]({reference.path})")
        lines.append("")

    return "\n".join(lines)


def _render_frontmatter(frontmatter: dict[str, Any]) -> list[str]:
    lines: list[str] = []
    for key in FRONTMATTER_KEYS:
        value = frontmatter.get(key)
        if value:
            lines.append(f"{key}: {_yaml_scalar(value)}")
    tags = frontmatter.get("tags")
    if isinstance(tags, list) and tags:
        lines.append("tags:")
        lines.extend(f"  - {_yaml_scalar(tag)}" for tag in tags)
    return lines


def _yaml_scalar(value: Any) -> str:
    """Double-quoted YAML scalar that parses back to ``str(value)``."""
    dumped = yaml.safe_dump(str(value), default_style='"', allow_unicode=True, width=10**6)
    return dumped.strip().removesuffix("...").strip()


def _route_target(skill: ParsedSkill, route: SkillRouting) -> str:
    """Routes naming a known workflow are written as that workflow's path."""
    workflow = skill.find_workflow(workflow_stem(route.workflow))
    return workflow.path if workflow else route.workflow


# ---------------------------------------------------------------------------
# Batch and dispatch
# ---------------------------------------------------------------------------


def export_skills_directory(
    diagram: MermaidDiagram,
    options: SkillExportOptions | None = None,
) -> list[ExportedSkill]:
    """
    Export every skill recorded in a skills-directory diagram.

    Without recorded skills, the whole diagram is exported as one document
    named ``skill``.
    """
    original = diagram.metadata.original_data
    if not isinstance(original, list):
        return [ExportedSkill(name="skill", content=export_to_skill(diagram, options))]

    exported: list[ExportedSkill] = []
    for index, skill in enumerate(original, start=1):
        exported.append(
            ExportedSkill(
                name=skill.name or f"skill-{index}",
                content=render_skill(ExactSkill(skill), options),
            )
        )
    return exported


def auto_export(diagram: MermaidDiagram, options: SkillExportOptions | None = None) -> ExportResult:
    """
    Export a diagram back to its source format based on ``metadata.source_type``.

    Raises:
        ValueError: If no exporter exists for the source type
    """
    source_type = diagram.metadata.source_type
    if source_type == SourceType.SKILL:
        return export_to_skill(diagram, options)
    if source_type == SourceType.SKILLS_DIRECTORY:
        return export_skills_directory(diagram, options)
    raise ValueError(
        f"No exporter available for source type: {getattr(source_type, 'value', source_type)}"
    )


def write_exports(result: ExportResult, target: str | Path) -> list[Path]:
    """
    Write an export result to disk.

    A single document is written to *target*; a batch is written as
    ``<target>/<name>/SKILL.md`` per skill. Names are reduced to a single
    path component inside *target*, and repeated names get ``-2``, ``-3``...
    """
    target = Path(target)
    if isinstance(result, str):
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result, encoding="utf-8")
        return [target]

    written: list[Path] = []
    used: set[str] = set()
    for exported in result:
        path = target / _directory_name(exported.name, used) / "SKILL.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(exported.content, encoding="utf-8")
        written.append(path)
    logger.info("Exported %d skills to %s", len(written), target)
    return written


def _directory_name(name: str, used: set[str]) -> str:
    """``"../x"`` → ``"_x"``; a name already in *used* gets a numeric suffix."""
    base = _UNSAFE_PATH_CHARS.sub("_", name).strip(" .") or "skill"
    candidate = base
    suffix = 2
    while candidate.lower() in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate.lower())
    return candidate
