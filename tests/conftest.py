"""Shared pytest fixtures for skillflows tests."""

from pathlib import Path
from textwrap import dedent

import pytest

from skillflows.config import FlowsConfig


def write_skill(directory: Path, content: str) -> Path:
    """Create ``directory/SKILL.md`` with dedented *content*."""
    directory.mkdir(parents=True, exist_ok=True)
    skill_file = directory / "SKILL.md"
    skill_file.write_text(dedent(content).lstrip(), encoding="utf-8")
    return skill_file


@pytest.fixture
def example_skill_dir(tmp_path: Path) -> Path:
    """Minimal skill: one principle routed to one workflow."""
    skill_dir = tmp_path / "example"
    write_skill(
        skill_dir,
        """
        ---
        name: "Example"
        ---

        <principle name="Setup">Do X</principle>

        <routing>
        | Response | Workflow |
        |----------|----------|
        | done | workflow-a |
        </routing>
        """,
    )
    (skill_dir / "workflows").mkdir()
    (skill_dir / "workflows" / "workflow-a.md").write_text("# Workflow A\n")
    return skill_dir


@pytest.fixture
def full_skill_dir(tmp_path: Path) -> Path:
    """Skill using every block type plus references and workflows."""
    skill_dir = tmp_path / "github"
    write_skill(
        skill_dir,
        """
        ---
        name: github
        description: "GitHub CLI integration"
        version: "1.2.0"
        ---

        # GitHub

        <intake>
        What would you like to do?
        </intake>

        <principle name="Safety">
        Never force-push to main.
        </principle>

        <principle name="Clarity">Explain every command.</principle>

        <principle>Nameless principles are ignored.</principle>

        <workflows_index>
        | Workflow | Purpose |
        |----------|---------|
        | `review` | Review an open pull request carefully |
        | release | Cut a release |
        </workflows_index>

        <routing>
        | Response | Workflow |
        |----------|----------|
        | review a PR | `workflows/review.md` |
        | ship it | release |
        | something else | missing |
        </routing>
        """,
    )
    (skill_dir / "workflows").mkdir()
    (skill_dir / "workflows" / "review.md").write_text("# Review\n")
    (skill_dir / "workflows" / "release.md").write_text("# Release\n")
    (skill_dir / "references").mkdir()
    (skill_dir / "references" / "cli.md").write_text("# gh CLI\n")
    (skill_dir / "references" / "api").mkdir()
    (skill_dir / "references" / "api" / "rest.md").write_text("# REST\n")
    (skill_dir / "references" / "notes.txt").write_text("not markdown")
    return skill_dir


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
    """Skills directory with two skill dirs, a loose skill, and noise."""
    root = tmp_path / "skills"
    write_skill(
        root / "alpha",
        """
        ---
        name: alpha
        description: First skill
        ---

        <principle name="One">First.</principle>
        """,
    )
    write_skill(root / "beta", "# Beta\n\nNo frontmatter here.\n")
    (root / "empty").mkdir()
    (root / "README.md").write_text("# My skills\n")
    (root / "gamma.md").write_text("---\nname: gamma-skill\n---\n\nLoose skill.\n")
    (root / "notes.txt").write_text("ignored")
    return root


@pytest.fixture
def config(tmp_path: Path) -> FlowsConfig:
    """Config with the workflow store inside tmp_path."""
    return FlowsConfig(workflows_dir=tmp_path / "workflows-store")
