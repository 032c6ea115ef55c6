"""Tests for skills directory parsing."""

from pathlib import Path

import pytest

from skillflows.config import FlowsConfig
from skillflows.loaders import parse_skills_directory
from skillflows.models import SourceType


class TestParseSkillsDirectory:
    """Tests for parse_skills_directory."""

    @pytest.mark.asyncio
    async def test_collects_skills_in_name_order(self, skills_root: Path) -> None:
        """Skill directories and loose markdown files are parsed in name order."""
        result = await parse_skills_directory(skills_root)

        assert [s.name for s in result.skills] == ["alpha", "beta", "gamma-skill"]
        assert result.skills[0].parsed.description == "First skill"
        assert result.skills[1].parsed.frontmatter == {}

    @pytest.mark.asyncio
    async def test_readme_and_other_files_ignored(self, skills_root: Path) -> None:
        """README.md and non-markdown files are never skills."""
        result = await parse_skills_directory(skills_root)

        paths = {entry.path.name for entry in result.skipped}
        assert "README.md" not in paths
        assert "notes.txt" not in paths
        assert all(s.name != "README" for s in result.skills)

    @pytest.mark.asyncio
    async def test_directory_without_skill_md_is_skipped(self, skills_root: Path) -> None:
        """A subdirectory without SKILL.md is recorded as skipped."""
        result = await parse_skills_directory(skills_root)

        assert [(e.path.name, e.reason) for e in result.skipped] == [("empty", "no SKILL.md")]

    @pytest.mark.asyncio
    async def test_valid_count_matches(self, tmp_path: Path) -> None:
        """N valid skill directories and M invalid ones give exactly N skills."""
        for name in ["one", "two", "three"]:
            (tmp_path / name).mkdir()
            (tmp_path / name / "SKILL.md").write_text(f"---\nname: {name}\n---\n")
        for name in ["junk-a", "junk-b"]:
            (tmp_path / name).mkdir()
            (tmp_path / name / "notes.md").write_text("# not a skill\n")

        result = await parse_skills_directory(tmp_path)

        assert len(result.skills) == 3
        assert len(result.skipped) == 2

    @pytest.mark.asyncio
    async def test_unreadable_entry_does_not_fail_batch(self, skills_root: Path) -> None:
        """A document that cannot be decoded is skipped with a reason."""
        (skills_root / "broken.md").write_bytes(b"\xff\xfe\x00 not utf-8")

        result = await parse_skills_directory(skills_root)

        assert [s.name for s in result.skills] == ["alpha", "beta", "gamma-skill"]
        broken = [e for e in result.skipped if e.path.name == "broken.md"]
        assert len(broken) == 1
        assert broken[0].reason

    @pytest.mark.asyncio
    async def test_loose_file_without_name_uses_stem(self, tmp_path: Path) -> None:
        """A loose file with no frontmatter name is named after the file."""
        (tmp_path / "loose.md").write_text("# Loose\n")

        result = await parse_skills_directory(tmp_path)

        assert [s.name for s in result.skills] == ["loose"]

    @pytest.mark.asyncio
    async def test_diagram(self, skills_root: Path) -> None:
        """The combined diagram has one subgraph per skill."""
        result = await parse_skills_directory(skills_root)
        diagram = result.diagram

        assert diagram.metadata.source_type == SourceType.SKILLS_DIRECTORY
        assert diagram.metadata.source_path == str(skills_root)
        assert len(diagram.metadata.original_data) == 3
        assert 'root["📁 Skills (3)"]:::skillsRoot' in diagram.source
        assert 'subgraph skill_alpha["alpha"]' in diagram.source
        assert 'skill_alpha_principles["📋 1 principles"]:::principle' in diagram.source
        assert "root --> skill_gamma_skill" in diagram.source

    @pytest.mark.asyncio
    async def test_config_version(self, skills_root: Path) -> None:
        """The diagram version comes from config."""
        result = await parse_skills_directory(skills_root, config=FlowsConfig(diagram_version="9.9.9"))

        assert result.diagram.metadata.version == "9.9.9"

    @pytest.mark.asyncio
    async def test_missing_directory_raises(self, tmp_path: Path) -> None:
        """A missing root directory is an error."""
        with pytest.raises(FileNotFoundError):
            await parse_skills_directory(tmp_path / "nope")
