"""
Skill → Mermaid generator.

Renders parsed skills as ``flowchart TB`` diagrams. The parsed record rides
along in the diagram metadata so exports can be exact.
"""

from __future__ import annotations

import posixpath
import re

from skillflows.config import FlowsConfig
from skillflows.models import (
    DiagramMetadata,
    MermaidDiagram,
    NamedSkill,
    ParsedSkill,
    SourceType,
)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

SKILL_CLASS_DEFS = [
    "classDef skill fill:#6366f1,stroke:#4f46e5,color:#fff",
    "classDef principle fill:#818cf8,stroke:#6366f1,color:#fff",
    "classDef workflow fill:#34d399,stroke:#10b981,color:#fff",
    "classDef reference fill:#fbbf24,stroke:#f59e0b,color:#000",
    "classDef routing fill:#f472b6,stroke:#ec4899,color:#fff",
]

DIRECTORY_CLASS_DEFS = [
    "classDef skillsRoot fill:#1e1b4b,stroke:#312e81,color:#fff",
    "classDef skill fill:#6366f1,stroke:#4f46e5,color:#fff",
    "classDef principle fill:#818cf8,stroke:#6366f1,color:#fff",
    "classDef workflow fill:#34d399,stroke:#10b981,color:#fff",
    "classDef reference fill:#fbbf24,stroke:#f59e0b,color:#000",
]

# Subgraph ids used by the single-skill diagram
PRINCIPLES_GROUP = "principles"
WORKFLOWS_GROUP = "workflows"
REFERENCES_GROUP = "refs"


def sanitize_id(value: str) -> str:
    """Mermaid-safe id: every non-alphanumeric character becomes ``_``, lowercased."""
    return _NON_ALNUM.sub("_", value).lower()


def escape_label(value: str) -> str:
    """Make text safe inside a quoted Mermaid label."""
    return value.replace('"', "'").replace("\n", "\\n")


def truncate(value: str, length: int) -> str:
    return value[:length] + "..." if len(value) > length else value


def workflow_stem(reference: str) -> str:
    """``"`workflows/build.md`"`` → ``"build"``."""
    name = posixpath.basename(reference.replace("`", "").strip())
    return name[:-3] if name.endswith(".md") else name


def principle_node_id(name: str) -> str:
    return f"principle_{sanitize_id(name)}"


def workflow_node_id(name: str) -> str:
    return f"workflow_{sanitize_id(name)}"


def reference_node_id(name: str) -> str:
    return f"ref_{sanitize_id(name)}"


def skill_to_mermaid(skill: ParsedSkill, config: FlowsConfig | None = None) -> MermaidDiagram:
    """Project one parsed skill to a Mermaid flowchart."""
    config = config or FlowsConfig()
    skill_id = sanitize_id(skill.name) or "skill"
    lines: list[str] = ["flowchart TB", ""]

    lines.append("  %% Node styles")
    lines.extend(f"  {class_def}" for class_def in SKILL_CLASS_DEFS)
    lines.append("")

    lines.append(f'  {skill_id}["🎯 {escape_label(skill.name)}"]:::skill')
    lines.append("")

    if skill.principles:
        lines.append(f'  subgraph {PRINCIPLES_GROUP}["📋 Principles"]')
        lines.append("    direction LR")
        for principle in skill.principles:
            lines.append(
                f'    {principle_node_id(principle.name)}["{escape_label(principle.name)}"]:::principle'
            )
        lines.append("  end")
        lines.append(f"  {skill_id} --> {PRINCIPLES_GROUP}")
        lines.append("")

    if skill.workflows:
        lines.append(f'  subgraph {WORKFLOWS_GROUP}["⚡ Workflows"]')
        lines.append("    direction LR")
        for workflow in skill.workflows:
            label = workflow.name
            if workflow.purpose:
                label = f"{workflow.name}\n{truncate(workflow.purpose, config.purpose_max_length)}"
            lines.append(f'    {workflow_node_id(workflow.name)}["{escape_label(label)}"]:::workflow')
        lines.append("  end")
        lines.append(f"  {skill_id} --> {WORKFLOWS_GROUP}")
        lines.append("")

    if skill.references:
        lines.append(f'  subgraph {REFERENCES_GROUP}["📚 References"]')
        lines.append("    direction LR")
        for reference in skill.references:
            lines.append(
                f'    {reference_node_id(reference.name)}["{escape_label(reference.name)}"]:::reference'
            )
        lines.append("  end")
        lines.append(f"  {skill_id} --> {REFERENCES_GROUP}")
        lines.append("")

    if skill.routing:
        lines.append("  %% Routing")
        for route in skill.routing:
            if not route.workflow:
                continue
            name = workflow_stem(route.workflow)
            # Routes to unknown workflows are dropped
            if skill.find_workflow(name) is None:
                continue
            label = truncate(route.response or "", config.route_label_max_length)
            lines.append(f'  {skill_id} -->|"{escape_label(label)}"| {workflow_node_id(name)}')
        lines.append("")

    return MermaidDiagram(
        source="\n".join(lines),
        metadata=DiagramMetadata(
            source_type=SourceType.SKILL,
            source_path=skill.name,
            version=config.diagram_version,
            original_data=skill,
        ),
    )


def skills_to_mermaid(
    skills: list[NamedSkill],
    source_path: str,
    config: FlowsConfig | None = None,
) -> MermaidDiagram:
    """
    Project a whole skills directory to one flowchart.

    Each skill is a subgraph under a shared root showing only how many
    principles, workflows and references it has.
    """
    config = config or FlowsConfig()
    lines: list[str] = ["flowchart TB", ""]

    lines.append("  %% Node styles")
    lines.extend(f"  {class_def}" for class_def in DIRECTORY_CLASS_DEFS)
    lines.append("")

    lines.append(f'  root["📁 Skills ({len(skills)})"]:::skillsRoot')
    lines.append("")

    for entry in skills:
        skill_id = f"skill_{sanitize_id(entry.name)}"
        parsed = entry.parsed
        display_name = escape_label(parsed.name or entry.name)

        lines.append(f'  subgraph {skill_id}["{display_name}"]')
        lines.append("    direction TB")

        main_id = f"{skill_id}_main"
        lines.append(f'    {main_id}["🎯 {display_name}"]:::skill')

        if parsed.principles:
            principles_id = f"{skill_id}_principles"
            lines.append(f'    {principles_id}["📋 {len(parsed.principles)} principles"]:::principle')
            lines.append(f"    {main_id} --> {principles_id}")

        if parsed.workflows:
            workflows_id = f"{skill_id}_workflows"
            lines.append(f'    {workflows_id}["⚡ {len(parsed.workflows)} workflows"]:::workflow')
            lines.append(f"    {main_id} --> {workflows_id}")

        if parsed.references:
            refs_id = f"{skill_id}_refs"
            lines.append(f'    {refs_id}["📚 {len(parsed.references)} references"]:::reference')
            lines.append(f"    {main_id} --> {refs_id}")

        lines.append("  end")
        lines.append(f"  root --> {skill_id}")
        lines.append("")

    return MermaidDiagram(
        source="\n".join(lines),
        metadata=DiagramMetadata(
            source_type=SourceType.SKILLS_DIRECTORY,
            source_path=source_path,
            version=config.diagram_version,
            original_data=[entry.parsed for entry in skills],
        ),
    )
