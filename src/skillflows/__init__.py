"""
skillflows - Skill documents as Mermaid diagrams, and back again.

Parses ``SKILL.md`` documents (YAML frontmatter plus ``<principle>``,
``<intake>``, ``<routing>`` and ``<workflows_index>`` blocks) into a record,
projects that record to a Mermaid flowchart for visual editing, and exports
diagrams back to ``SKILL.md``.

Example:
    from skillflows import SkillParser, skill_to_mermaid, export_to_skill

    parsed = await SkillParser().parse("./skills/github")
    diagram = skill_to_mermaid(parsed)
    print(diagram.source)

    # ...edit, then write back
    print(export_to_skill(diagram))
"""

from skillflows.config import FlowsConfig
from skillflows.exporters import (
    ExportedSkill,
    SkillExportOptions,
    auto_export,
    export_skills_directory,
    export_to_skill,
    extract_skill_data,
    resolve_skill_source,
)
from skillflows.loaders import SkillParser, SkillsDirectoryResult, parse_skills_directory
from skillflows.mermaid import graph_to_mermaid, mermaid_to_graph, skill_to_mermaid, skills_to_mermaid
from skillflows.models import (
    ApproximateSkill,
    DiagramMetadata,
    ExactSkill,
    FlowEdge,
    FlowGraph,
    FlowNode,
    MermaidDiagram,
    NamedSkill,
    ParsedSkill,
    SkillPrinciple,
    SkillReference,
    SkillRouting,
    SkillWorkflow,
    SkippedEntry,
    SourceType,
)
from skillflows.pipeline import auto_detect, detect_source_type, to_flows
from skillflows.store import WorkflowDocument, WorkflowNotFoundError, WorkflowStore

__version__ = "0.1.0"

__all__ = [
    "ApproximateSkill",
    "DiagramMetadata",
    "ExactSkill",
    "ExportedSkill",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "FlowsConfig",
    "MermaidDiagram",
    "NamedSkill",
    "ParsedSkill",
    "SkillExportOptions",
    "SkillParser",
    "SkillPrinciple",
    "SkillReference",
    "SkillRouting",
    "SkillWorkflow",
    "SkillsDirectoryResult",
    "SkippedEntry",
    "SourceType",
    "WorkflowDocument",
    "WorkflowNotFoundError",
    "WorkflowStore",
    "auto_detect",
    "auto_export",
    "detect_source_type",
    "export_skills_directory",
    "export_to_skill",
    "extract_skill_data",
    "graph_to_mermaid",
    "mermaid_to_graph",
    "parse_skills_directory",
    "resolve_skill_source",
    "skill_to_mermaid",
    "skills_to_mermaid",
    "to_flows",
]
