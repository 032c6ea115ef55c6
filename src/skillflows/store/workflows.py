"""
JSON file store for workflow documents.

Each workflow is one ``{id}.workflow.json`` file in the store directory
(``SKILLFLOWS_WORKFLOWS_DIR``, else ``WORKFLOWS_DIR``, else
``~/.skillflows/workflows``). The directory is created on first write.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path

from skillflows.config import default_workflows_dir
from skillflows.logging import get_logger
from skillflows.models import utc_timestamp
from skillflows.store.models import SaveWorkflowInput, WorkflowDocument, WorkflowSummary

logger = get_logger("store.workflows")

WORKFLOW_SUFFIX = ".workflow.json"


class WorkflowNotFoundError(KeyError):
    """Raised when a workflow id has no document in the store."""

    def __init__(self, workflow_id: str, action: str = "find") -> None:
        super().__init__(workflow_id)
        self.workflow_id = workflow_id
        self.action = action

    def __str__(self) -> str:
        if self.action == "delete":
            return f"Failed to delete workflow: {self.workflow_id}"
        return f"Workflow not found: {self.workflow_id}"


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class WorkflowStore:
    """
    Saves, loads, lists and deletes workflow documents.

    Example:
        store = WorkflowStore()
        doc = await store.save(SaveWorkflowInput(name="Deploy"))
        again = await store.load(doc.id)
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or default_workflows_dir()

    def path_for(self, workflow_id: str) -> Path:
        return self.directory / f"{workflow_id}{WORKFLOW_SUFFIX}"

    async def save(self, data: SaveWorkflowInput) -> WorkflowDocument:
        """Create or update a document; ``createdAt`` survives updates."""
        return await asyncio.to_thread(self._save, data)

    async def load(self, workflow_id: str) -> WorkflowDocument:
        """
        Raises:
            WorkflowNotFoundError: If the document is missing or unreadable
        """
        return await asyncio.to_thread(self._load, workflow_id)

    async def delete(self, workflow_id: str) -> None:
        """
        Raises:
            WorkflowNotFoundError: If the document does not exist
        """
        await asyncio.to_thread(self._delete, workflow_id)

    async def list(self, filter: str | None = None) -> list[WorkflowSummary]:
        """Stored workflows, newest ``updatedAt`` first, optionally filtered by name."""
        return await asyncio.to_thread(self._list, filter)

    async def export_json(self, workflow_id: str) -> str:
        doc = await self.load(workflow_id)
        return json.dumps(doc.to_dict(), indent=2, ensure_ascii=False)

    async def import_json(self, text: str) -> WorkflowDocument:
        """
        Store a workflow from its JSON form under a fresh id.

        Raises:
            ValueError: If *text* is not a valid workflow document
        """
        doc = WorkflowDocument.from_dict(json.loads(text))
        return await self.save(
            SaveWorkflowInput(
                id=str(uuid.uuid4()),
                name=doc.name,
                version=doc.version,
                description=doc.description,
                nodes=doc.nodes,
                connections=doc.connections,
                tags=doc.tags,
                execution_config=doc.execution_config,
            )
        )

    # ------------------------------------------------------------------
    # Blocking implementations
    # ------------------------------------------------------------------

    def _save(self, data: SaveWorkflowInput) -> WorkflowDocument:
        self.directory.mkdir(parents=True, exist_ok=True)
        now = utc_timestamp()
        workflow_id = data.id or str(uuid.uuid4())

        created_at = now
        try:
            created_at = self._load(workflow_id).created_at
        except WorkflowNotFoundError:
            pass

        doc = WorkflowDocument(
            id=workflow_id,
            name=data.name,
            version=data.version or "1.0.0",
            description=data.description,
            nodes=data.nodes,
            connections=data.connections,
            created_at=created_at,
            updated_at=now,
            tags=data.tags,
            execution_config=data.execution_config,
        )
        self.path_for(workflow_id).write_text(
            json.dumps(doc.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        logger.info("Saved workflow: %s (%s)", workflow_id, doc.name)
        return doc

    def _load(self, workflow_id: str) -> WorkflowDocument:
        path = self.path_for(workflow_id)
        try:
            doc = WorkflowDocument.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            raise WorkflowNotFoundError(workflow_id) from e
        logger.debug("Loaded workflow: %s (%s)", workflow_id, doc.name)
        return doc

    def _delete(self, workflow_id: str) -> None:
        try:
            self.path_for(workflow_id).unlink()
        except FileNotFoundError as e:
            raise WorkflowNotFoundError(workflow_id, action="delete") from e
        logger.info("Deleted workflow: %s", workflow_id)

    def _list(self, filter: str | None) -> list[WorkflowSummary]:
        if not self.directory.is_dir():
            return []

        needle = filter.lower() if filter else None
        summaries: list[WorkflowSummary] = []
        for path in self.directory.glob(f"*{WORKFLOW_SUFFIX}"):
            try:
                doc = WorkflowDocument.from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError) as e:
                logger.debug("Skipping invalid workflow file %s: %s", path, e)
                continue
            if needle and needle not in doc.name.lower():
                continue
            summaries.append(doc.summary)

        summaries.sort(key=lambda s: _parse_timestamp(s.updated_at), reverse=True)
        logger.debug("Listed %d workflows", len(summaries))
        return summaries
