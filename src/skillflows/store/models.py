"""Persisted workflow document models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from skillflows.models import utc_timestamp


@dataclass
class ExecutionConfig:
    """Which adapter runs the workflow and for how long."""

    adapter: str
    timeout: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"adapter": self.adapter}
        if self.timeout is not None:
            data["timeout"] = self.timeout
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionConfig:
        return cls(adapter=str(data.get("adapter", "")), timeout=data.get("timeout"))


@dataclass
class WorkflowDocument:
    """
    A workflow saved as ``{id}.workflow.json``.

    ``nodes`` and ``connections`` are kept as plain JSON objects; their
    shape belongs to the editor that produced them.
    """

    id: str
    name: str
    version: str = "1.0.0"
    description: str | None = None
    nodes: list[dict[str, Any]] = field(default_factory=list)
    connections: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = field(default_factory=utc_timestamp)
    updated_at: str = field(default_factory=utc_timestamp)
    tags: list[str] | None = None
    execution_config: ExecutionConfig | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "nodes": self.nodes,
            "connections": self.connections,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.tags is not None:
            data["tags"] = self.tags
        if self.execution_config is not None:
            data["executionConfig"] = self.execution_config.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowDocument:
        """
        Build a document from its JSON form.

        Raises:
            ValueError: If ``id`` or ``name`` is missing, or a field has the wrong type
        """
        if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
            raise ValueError("Workflow document requires 'id' and 'name'")
        for key in ("nodes", "connections", "tags"):
            if data.get(key) is not None and not isinstance(data[key], list):
                raise ValueError(f"Workflow document field '{key}' must be a list")
        if data.get("executionConfig") is not None and not isinstance(data["executionConfig"], dict):
            raise ValueError("Workflow document field 'executionConfig' must be an object")
        execution = data.get("executionConfig")
        now = utc_timestamp()
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            version=str(data.get("version") or "1.0.0"),
            description=data.get("description"),
            nodes=list(data.get("nodes") or []),
            connections=list(data.get("connections") or []),
            created_at=str(data.get("createdAt") or now),
            updated_at=str(data.get("updatedAt") or now),
            tags=data.get("tags"),
            execution_config=ExecutionConfig.from_dict(execution) if isinstance(execution, dict) else None,
        )

    @property
    def summary(self) -> WorkflowSummary:
        return WorkflowSummary(
            id=self.id,
            name=self.name,
            version=self.version,
            description=self.description,
            updated_at=self.updated_at,
            tags=self.tags,
        )


@dataclass
class WorkflowSummary:
    """Listing entry for a stored workflow."""

    id: str
    name: str
    version: str
    updated_at: str
    description: str | None = None
    tags: list[str] | None = None


@dataclass
class SaveWorkflowInput:
    """Fields accepted by :meth:`WorkflowStore.save`; ``id`` is generated when omitted."""

    name: str
    nodes: list[dict[str, Any]] = field(default_factory=list)
    connections: list[dict[str, Any]] = field(default_factory=list)
    id: str | None = None
    version: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    execution_config: ExecutionConfig | None = None
