"""
Core data models for skillflows.

These models describe a parsed skill document, the Mermaid diagram it is
projected to, and the graph view recovered from diagram source. They are
plain dataclasses with ``to_dict``/``from_dict`` helpers for the JSON form
written by the CLI (camelCase keys).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Union


class SourceType(str, Enum):
    """What a diagram was generated from."""

    SKILL = "skill"
    SKILLS_DIRECTORY = "skills-directory"
    # Reserved; no parser or exporter exists for these yet
    AGENT = "agent"
    MCP_SCHEMA = "mcp-schema"
    WORKFLOW = "workflow"
    FILESYSTEM = "filesystem"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2026-01-01T00:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Skill records
# ---------------------------------------------------------------------------


@dataclass
class SkillPrinciple:
    """A named prose block: ``<principle name="...">...</principle>``."""

    name: str
    content: str = ""


@dataclass
class SkillRouting:
    """One row of the routing table: response/condition -> workflow reference."""

    response: str
    workflow: str


@dataclass
class SkillReference:
    """A sibling file under ``references/``."""

    name: str
    path: str
    description: str | None = None


@dataclass
class SkillWorkflow:
    """A sibling file under ``workflows/``, optionally annotated with a purpose."""

    name: str
    path: str
    purpose: str | None = None


@dataclass
class ParsedSkill:
    """
    Normalized record for one skill document.

    ``references`` and ``workflows`` come from the filesystem next to the
    document, never from the document text. The exporter treats instances
    as read-only.
    """

    frontmatter: dict[str, Any] = field(default_factory=dict)
    principles: list[SkillPrinciple] = field(default_factory=list)
    intake: str | None = None
    routing: list[SkillRouting] = field(default_factory=list)
    references: list[SkillReference] = field(default_factory=list)
    workflows: list[SkillWorkflow] = field(default_factory=list)
    raw_content: str = ""
    # Record fields the JSON form this was loaded from did not carry
    absent: frozenset[str] = field(default=frozenset(), compare=False, repr=False)

    @property
    def name(self) -> str:
        return str(self.frontmatter.get("name") or "")

    @property
    def description(self) -> str:
        return str(self.frontmatter.get("description") or "")

    def find_workflow(self, name: str) -> SkillWorkflow | None:
        """Get a workflow by name."""
        for workflow in self.workflows:
            if workflow.name == name:
                return workflow
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "frontmatter": dict(self.frontmatter),
            "principles": [{"name": p.name, "content": p.content} for p in self.principles],
            "routing": [{"response": r.response, "workflow": r.workflow} for r in self.routing],
            "references": [_drop_none({"name": r.name, "path": r.path, "description": r.description})
                           for r in self.references],
            "workflows": [_drop_none({"name": w.name, "path": w.path, "purpose": w.purpose})
                          for w in self.workflows],
            "rawContent": self.raw_content,
        }
        if self.intake is not None:
            data["intake"] = self.intake
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParsedSkill:
        """
        Load a record from its JSON form.

        Keys missing from *data* are listed in ``absent`` so an exporter can
        tell "not recorded" apart from "recorded as empty".
        """
        frontmatter = data.get("frontmatter") or {}
        return cls(
            frontmatter=dict(frontmatter) if isinstance(frontmatter, dict) else {},
            principles=[
                SkillPrinciple(name=str(p.get("name", "")), content=str(p.get("content") or ""))
                for p in data.get("principles") or []
            ],
            intake=data.get("intake"),
            routing=[
                SkillRouting(response=str(r.get("response", "")), workflow=str(r.get("workflow", "")))
                for r in data.get("routing") or []
            ],
            references=[
                SkillReference(name=str(r.get("name", "")), path=str(r.get("path", "")),
                               description=r.get("description"))
                for r in data.get("references") or []
            ],
            workflows=[
                SkillWorkflow(name=str(w.get("name", "")), path=str(w.get("path", "")),
                              purpose=w.get("purpose"))
                for w in data.get("workflows") or []
            ],
            raw_content=str(data.get("rawContent", data.get("raw_content", "")) or ""),
            absent=frozenset(key for key in RECORD_FIELDS if key not in data),
        )


# Record fields that can be recovered from a diagram when not recorded
RECORD_FIELDS = ("principles", "intake", "routing", "references", "workflows")


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class NamedSkill:
    """A skill found while scanning a skills directory."""

    name: str
    parsed: ParsedSkill


@dataclass
class SkippedEntry:
    """A directory entry left out of a batch parse, with the reason why."""

    path: Path
    reason: str


# ---------------------------------------------------------------------------
# Fidelity of the record used for export
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExactSkill:
    """Record captured at parse time; exports reproduce it faithfully."""

    record: ParsedSkill
    is_exact: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ApproximateSkill:
    """Record rebuilt, wholly or in part, from diagram structure; principle prose may be lost."""

    record: ParsedSkill
    is_exact: bool = field(default=False, init=False)


SkillSourceData = Union[ExactSkill, ApproximateSkill]


# ---------------------------------------------------------------------------
# Diagrams
# ---------------------------------------------------------------------------

OriginalData = Union[ParsedSkill, list[ParsedSkill], None]


@dataclass
class DiagramMetadata:
    """Provenance of a diagram plus the record(s) it was generated from."""

    source_type: str
    source_path: str
    generated_at: str = field(default_factory=utc_timestamp)
    version: str = "0.1.0"
    original_data: OriginalData = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sourceType": str(getattr(self.source_type, "value", self.source_type)),
            "sourcePath": self.source_path,
            "generatedAt": self.generated_at,
            "version": self.version,
        }
        if isinstance(self.original_data, list):
            data["originalData"] = [skill.to_dict() for skill in self.original_data]
        elif self.original_data is not None:
            data["originalData"] = self.original_data.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiagramMetadata:
        raw_type = str(data.get("sourceType", SourceType.SKILL.value))
        try:
            source_type: str = SourceType(raw_type)
        except ValueError:
            source_type = raw_type

        raw_original = data.get("originalData")
        original: OriginalData = None
        if isinstance(raw_original, list):
            original = [ParsedSkill.from_dict(item) for item in raw_original if isinstance(item, dict)]
        elif isinstance(raw_original, dict):
            original = ParsedSkill.from_dict(raw_original)

        return cls(
            source_type=source_type,
            source_path=str(data.get("sourcePath", "")),
            generated_at=str(data.get("generatedAt") or utc_timestamp()),
            version=str(data.get("version", "0.1.0")),
            original_data=original,
        )


@dataclass
class MermaidDiagram:
    """Mermaid source text plus metadata for round-trip editing."""

    source: str
    metadata: DiagramMetadata
    type: str = "flowchart"

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "type": self.type,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MermaidDiagram:
        return cls(
            source=str(data.get("source", "")),
            type=str(data.get("type", "flowchart")),
            metadata=DiagramMetadata.from_dict(data.get("metadata") or {}),
        )


# ---------------------------------------------------------------------------
# Graph view (recovered from Mermaid source)
# ---------------------------------------------------------------------------


@dataclass
class FlowNode:
    """A node in the graph view. Subgraphs appear as ``type == "group"``."""

    id: str
    type: str = "default"
    position: dict[str, float] = field(default_factory=lambda: {"x": 0, "y": 0})
    data: dict[str, Any] = field(default_factory=dict)
    parent_id: str | None = None

    @property
    def label(self) -> str:
        return str(self.data.get("label") or self.id)

    @property
    def node_type(self) -> str:
        return str(self.data.get("node_type") or "default")


@dataclass
class FlowEdge:
    """A directed edge in the graph view."""

    id: str
    source: str
    target: str
    label: str | None = None
    type: str = "smoothstep"
    animated: bool = False
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class FlowGraph:
    """Nodes and edges parsed from a Mermaid flowchart."""

    nodes: list[FlowNode] = field(default_factory=list)
    edges: list[FlowEdge] = field(default_factory=list)
    metadata: DiagramMetadata | None = None

    def get_node(self, node_id: str) -> FlowNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
