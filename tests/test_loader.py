"""Tests for the skill parser."""

from pathlib import Path
from textwrap import dedent

import pytest

from skillflows.loaders import SkillParser, split_frontmatter
from skillflows.models import SkillRouting


class TestSplitFrontmatter:
    """Tests for split_frontmatter."""

    def test_mapping(self) -> None:
        """Should parse YAML frontmatter and return the remaining body."""
        frontmatter, body = split_frontmatter('---\nname: x\ndescription: "y"\n---\n\nBody')

        assert frontmatter == {"name": "x", "description": "y"}
        assert body == "\nBody"

    def test_missing(self) -> None:
        """No frontmatter leaves the content untouched."""
        frontmatter, body = split_frontmatter("# Title\n")

        assert frontmatter == {}
        assert body == "# Title\n"

    def test_invalid_yaml(self) -> None:
        """Unparseable frontmatter becomes an empty mapping."""
        frontmatter, body = split_frontmatter("---\nname: [unclosed\n---\nBody")

        assert frontmatter == {}
        assert body == "Body"

    def test_non_mapping(self) -> None:
        """A YAML list is not frontmatter."""
        frontmatter, _ = split_frontmatter("---\n- a\n- b\n---\nBody")

        assert frontmatter == {}

    def test_empty_block(self) -> None:
        """An empty block gives an empty mapping."""
        frontmatter, body = split_frontmatter("---\n---\nBody")

        assert frontmatter == {}
        assert body == "Body"


class TestSkillParser:
    """Tests for SkillParser."""

    def test_can_load(self, example_skill_dir: Path, tmp_path: Path) -> None:
        """Should accept skill directories and markdown files."""
        parser = SkillParser()
        txt_file = tmp_path / "skill.txt"
        txt_file.write_text("x")

        assert parser.can_load(example_skill_dir)
        assert parser.can_load(example_skill_dir / "SKILL.md")
        assert not parser.can_load(txt_file)
        assert not parser.can_load(tmp_path / "nothing")

    def test_example_skill(self, example_skill_dir: Path) -> None:
        """Should parse frontmatter, principles, routing and workflows."""
        skill = SkillParser().load(example_skill_dir)

        assert skill.frontmatter == {"name": "Example"}
        assert skill.name == "Example"
        assert [(p.name, p.content) for p in skill.principles] == [("Setup", "Do X")]
        assert skill.routing == [SkillRouting(response="done", workflow="workflow-a")]
        assert [(w.name, w.path) for w in skill.workflows] == [
            ("workflow-a", "workflows/workflow-a.md")
        ]
        assert skill.references == []
        assert skill.intake is None

    def test_load_from_file_path(self, example_skill_dir: Path) -> None:
        """Passing SKILL.md uses its parent as the skill directory."""
        skill = SkillParser().load(example_skill_dir / "SKILL.md")

        assert [w.name for w in skill.workflows] == ["workflow-a"]

    def test_full_skill(self, full_skill_dir: Path) -> None:
        """Should parse every block type."""
        skill = SkillParser().load(full_skill_dir)

        assert skill.description == "GitHub CLI integration"
        assert skill.frontmatter["version"] == "1.2.0"
        assert skill.intake == "What would you like to do?"
        assert [(p.name, p.content) for p in skill.principles] == [
            ("Safety", "Never force-push to main."),
            ("Clarity", "Explain every command."),
        ]

    def test_routing_strips_backticks_and_skips_header(self, full_skill_dir: Path) -> None:
        """Header and separator rows are dropped; backticks removed from targets."""
        skill = SkillParser().load(full_skill_dir)

        assert [(r.response, r.workflow) for r in skill.routing] == [
            ("review a PR", "workflows/review.md"),
            ("ship it", "release"),
            ("something else", "missing"),
        ]

    def test_workflows_get_purpose_from_index(self, full_skill_dir: Path) -> None:
        """Workflow purposes come from the workflows_index table."""
        skill = SkillParser().load(full_skill_dir)

        assert [(w.name, w.path, w.purpose) for w in skill.workflows] == [
            ("release", "workflows/release.md", "Cut a release"),
            ("review", "workflows/review.md", "Review an open pull request carefully"),
        ]

    def test_references_recursive_markdown_only(self, full_skill_dir: Path) -> None:
        """References include nested markdown files and nothing else."""
        skill = SkillParser().load(full_skill_dir)

        assert [(r.name, r.path) for r in skill.references] == [
            ("rest", "references/api/rest.md"),
            ("cli", "references/cli.md"),
        ]

    def test_raw_content_is_body(self, full_skill_dir: Path) -> None:
        """raw_content excludes the frontmatter."""
        skill = SkillParser().load(full_skill_dir)

        assert skill.raw_content.lstrip().startswith("# GitHub")
        assert "name: github" not in skill.raw_content

    def test_plain_document(self, tmp_path: Path) -> None:
        """A document with no blocks yields empty collections."""
        skill_dir = tmp_path / "plain"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_text("# Plain\n\nJust text.\n")

        skill = SkillParser().load(skill_dir)

        assert skill.frontmatter == {}
        assert skill.name == ""
        assert skill.principles == []
        assert skill.routing == []
        assert skill.workflows == []
        assert skill.references == []
        assert skill.intake is None

    def test_malformed_blocks_ignored(self, tmp_path: Path) -> None:
        """Unclosed tags are skipped without raising."""
        skill_dir = tmp_path / "broken"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_text(dedent("""
            <principle name="Open">never closed

            <principle name="Closed">ok</principle>
            <routing>
            | a | b |
        """))

        skill = SkillParser().load(skill_dir)

        assert [p.name for p in skill.principles] == ["Closed"]
        assert skill.routing == []

    def test_missing_document_raises(self, tmp_path: Path) -> None:
        """A directory without SKILL.md is an error."""
        (tmp_path / "empty").mkdir()

        with pytest.raises(FileNotFoundError):
            SkillParser().load(tmp_path / "empty")

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        """A path that does not exist is an error."""
        with pytest.raises(FileNotFoundError):
            SkillParser().load(tmp_path / "nope" / "SKILL.md")

    @pytest.mark.asyncio
    async def test_async_parse(self, example_skill_dir: Path) -> None:
        """parse() runs load() off the event loop."""
        skill = await SkillParser().parse(str(example_skill_dir))

        assert skill.name == "Example"

    def test_rereads_filesystem(self, example_skill_dir: Path) -> None:
        """Every call sees the current files."""
        parser = SkillParser()
        parser.load(example_skill_dir)
        (example_skill_dir / "workflows" / "workflow-b.md").write_text("# B\n")

        skill = parser.load(example_skill_dir)

        assert [w.name for w in skill.workflows] == ["workflow-a", "workflow-b"]
