"""Tests for the workflow store."""

import json
from pathlib import Path

import pytest

from skillflows.store import (
    ExecutionConfig,
    SaveWorkflowInput,
    WorkflowDocument,
    WorkflowNotFoundError,
    WorkflowStore,
)


def write_document(directory: Path, workflow_id: str, name: str, updated_at: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    doc = WorkflowDocument(id=workflow_id, name=name, created_at=updated_at, updated_at=updated_at)
    (directory / f"{workflow_id}.workflow.json").write_text(json.dumps(doc.to_dict()))


class TestWorkflowDocument:
    """Tests for WorkflowDocument."""

    def test_to_dict_camel_case(self) -> None:
        """JSON keys use camelCase and optional fields are omitted."""
        doc = WorkflowDocument(id="w1", name="Deploy", created_at="c", updated_at="u")

        data = doc.to_dict()

        assert data == {
            "id": "w1",
            "name": "Deploy",
            "version": "1.0.0",
            "nodes": [],
            "connections": [],
            "createdAt": "c",
            "updatedAt": "u",
        }

    def test_from_dict(self) -> None:
        """Documents load from their JSON form."""
        doc = WorkflowDocument.from_dict(
            {
                "id": "w1",
                "name": "Deploy",
                "tags": ["ops"],
                "executionConfig": {"adapter": "shell", "timeout": 30},
            }
        )

        assert doc.version == "1.0.0"
        assert doc.tags == ["ops"]
        assert doc.execution_config == ExecutionConfig(adapter="shell", timeout=30)

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"id": "x"},
            {"name": "x"},
            ["not", "a", "dict"],
            {"id": "x", "name": "y", "nodes": 5},
            {"id": "x", "name": "y", "tags": "ops"},
            {"id": "x", "name": "y", "executionConfig": "shell"},
        ],
    )
    def test_from_dict_invalid(self, data) -> None:
        """id and name are required and list fields must be lists."""
        with pytest.raises(ValueError):
            WorkflowDocument.from_dict(data)


class TestWorkflowStore:
    """Tests for WorkflowStore."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path: Path) -> None:
        """Saved documents load back unchanged."""
        store = WorkflowStore(tmp_path / "store")

        saved = await store.save(
            SaveWorkflowInput(name="Deploy", nodes=[{"id": "n1"}], description="Ship it")
        )
        loaded = await store.load(saved.id)

        assert loaded == saved
        assert store.path_for(saved.id).is_file()
        assert saved.created_at.endswith("Z")

    @pytest.mark.asyncio
    async def test_update_keeps_created_at(self, tmp_path: Path) -> None:
        """Updating a document keeps its creation time."""
        store = WorkflowStore(tmp_path)
        write_document(tmp_path, "w1", "Old", "2020-01-01T00:00:00.000Z")

        updated = await store.save(SaveWorkflowInput(id="w1", name="New", version="2.0.0"))

        assert updated.created_at == "2020-01-01T00:00:00.000Z"
        assert updated.updated_at != updated.created_at
        assert (await store.load("w1")).name == "New"

    @pytest.mark.asyncio
    async def test_load_missing(self, tmp_path: Path) -> None:
        """Loading an unknown id raises."""
        store = WorkflowStore(tmp_path)

        with pytest.raises(WorkflowNotFoundError, match="Workflow not found: nope"):
            await store.load("nope")

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path: Path) -> None:
        """Deleted documents are gone; deleting again raises."""
        store = WorkflowStore(tmp_path)
        saved = await store.save(SaveWorkflowInput(name="Temp"))

        await store.delete(saved.id)

        assert not store.path_for(saved.id).exists()
        with pytest.raises(WorkflowNotFoundError) as exc_info:
            await store.delete(saved.id)
        assert str(exc_info.value) == f"Failed to delete workflow: {saved.id}"

    @pytest.mark.asyncio
    async def test_list_sorted_and_filtered(self, tmp_path: Path) -> None:
        """Listings are newest first and filter by name, case-insensitively."""
        store = WorkflowStore(tmp_path)
        write_document(tmp_path, "a", "Deploy API", "2024-01-01T00:00:00.000Z")
        write_document(tmp_path, "b", "Backup", "2024-03-01T00:00:00.000Z")
        write_document(tmp_path, "c", "deploy web", "2024-02-01T00:00:00.000Z")

        everything = await store.list()
        deploys = await store.list("DEPLOY")

        assert [s.id for s in everything] == ["b", "c", "a"]
        assert [s.id for s in deploys] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_list_skips_invalid_files(self, tmp_path: Path) -> None:
        """Unreadable documents are left out of listings."""
        store = WorkflowStore(tmp_path)
        write_document(tmp_path, "good", "Good", "2024-01-01T00:00:00.000Z")
        (tmp_path / "bad.workflow.json").write_text("{not json")
        (tmp_path / "partial.workflow.json").write_text('{"id": "partial"}')

        summaries = await store.list()

        assert [s.id for s in summaries] == ["good"]

    @pytest.mark.asyncio
    async def test_list_missing_directory(self, tmp_path: Path) -> None:
        """A store that was never written to is empty."""
        assert await WorkflowStore(tmp_path / "never").list() == []

    @pytest.mark.asyncio
    async def test_export_and_import(self, tmp_path: Path) -> None:
        """Imported documents get a fresh id."""
        store = WorkflowStore(tmp_path)
        saved = await store.save(SaveWorkflowInput(name="Deploy", tags=["ops"]))

        text = await store.export_json(saved.id)
        imported = await store.import_json(text)

        assert imported.id != saved.id
        assert imported.name == "Deploy"
        assert imported.tags == ["ops"]
        assert len(await store.list()) == 2

    @pytest.mark.asyncio
    async def test_import_invalid(self, tmp_path: Path) -> None:
        """Documents without a name cannot be imported."""
        store = WorkflowStore(tmp_path)

        with pytest.raises(ValueError):
            await store.import_json('{"id": "x"}')

    @pytest.mark.asyncio
    async def test_mistyped_file(self, tmp_path: Path) -> None:
        """A file with a non-list ``nodes`` is skipped, unloadable, and can be overwritten."""
        store = WorkflowStore(tmp_path)
        write_document(tmp_path, "good", "Good", "2024-01-01T00:00:00.000Z")
        store.path_for("bad").write_text(json.dumps({"id": "bad", "name": "Bad", "nodes": 5}))

        assert [s.id for s in await store.list()] == ["good"]
        with pytest.raises(WorkflowNotFoundError):
            await store.load("bad")

        saved = await store.save(SaveWorkflowInput(id="bad", name="Fixed"))

        assert (await store.load("bad")) == saved
        assert saved.nodes == []

    def test_directory_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The default directory comes from the environment."""
        monkeypatch.setenv("SKILLFLOWS_WORKFLOWS_DIR", str(tmp_path / "env"))

        assert WorkflowStore().directory == tmp_path / "env"

    def test_legacy_environment_variable(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """WORKFLOWS_DIR is honored when the newer variable is unset."""
        monkeypatch.delenv("SKILLFLOWS_WORKFLOWS_DIR", raising=False)
        monkeypatch.setenv("WORKFLOWS_DIR", str(tmp_path / "legacy"))

        assert WorkflowStore().directory == tmp_path / "legacy"
