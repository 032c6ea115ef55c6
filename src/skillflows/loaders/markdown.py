"""
Markdown skill parser with YAML frontmatter support.

A skill lives in its own directory:

```text
my-skill/
  SKILL.md
  references/*.md
  workflows/*.md
```

and ``SKILL.md`` looks like:

```markdown
---
name: my-skill
description: "A brief description"
---

<principle name="Setup">Do X first.</principle>

<intake>What would you like to do?</intake>

<routing>
| Response | Workflow |
|----------|----------|
| build    | `workflows/build.md` |
</routing>

<workflows_index>
| Workflow | Purpose |
|----------|---------|
| build    | Build the thing |
</workflows_index>
```
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

import yaml

from skillflows.loaders.base import SkillLoader
from skillflows.loaders.tags import find_blocks, find_first, is_header_row, parse_table_rows
from skillflows.logging import get_logger
from skillflows.models import (
    ParsedSkill,
    SkillPrinciple,
    SkillReference,
    SkillRouting,
    SkillWorkflow,
)

logger = get_logger("loaders.markdown")

SKILL_FILENAME = "SKILL.md"
REFERENCES_DIR = "references"
WORKFLOWS_DIR = "workflows"

# Regex to match YAML frontmatter
FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split a document into (frontmatter, body).

    Frontmatter that is missing, fails to parse, or is not a mapping comes
    back as an empty dict.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    body = content[match.end() :]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug("Ignoring unparseable frontmatter: %s", e)
        return {}, body
    if not isinstance(data, dict):
        return {}, body
    return data, body


def strip_backticks(value: str) -> str:
    return value.replace("`", "").strip()


class SkillParser(SkillLoader):
    """
    Parses a skill directory (or its ``SKILL.md``) into a :class:`ParsedSkill`.

    Every call reads the filesystem again; nothing is cached.
    """

    def can_load(self, path: Path) -> bool:
        if path.is_dir():
            return (path / SKILL_FILENAME).is_file()
        return path.is_file() and path.suffix.lower() == ".md"

    async def parse(self, path: str | Path) -> ParsedSkill:
        return await asyncio.to_thread(self.load, Path(path))

    def load(self, path: Path) -> ParsedSkill:
        """
        Parse a skill from disk.

        Args:
            path: Skill directory containing ``SKILL.md``, or the document itself

        Raises:
            FileNotFoundError: If the primary document does not exist
        """
        if path.is_dir():
            skill_dir = path
            skill_file = path / SKILL_FILENAME
        else:
            skill_dir = path.parent
            skill_file = path

        content = skill_file.read_text(encoding="utf-8")
        skill = self.parse_document(content, skill_dir)
        logger.debug(
            "Parsed %s: %d principles, %d routes, %d workflows, %d references",
            skill_file,
            len(skill.principles),
            len(skill.routing),
            len(skill.workflows),
            len(skill.references),
        )
        return skill

    def parse_document(self, content: str, skill_dir: Path) -> ParsedSkill:
        """Build a record from document text plus the sibling directories of *skill_dir*."""
        frontmatter, body = split_frontmatter(content)
        return ParsedSkill(
            frontmatter=frontmatter,
            principles=self._parse_principles(body),
            intake=self._parse_intake(body),
            routing=self._parse_routing(body),
            references=self._find_references(skill_dir),
            workflows=self._find_workflows(skill_dir, body),
            raw_content=body,
        )

    def _parse_principles(self, content: str) -> list[SkillPrinciple]:
        principles: list[SkillPrinciple] = []
        for block in find_blocks(content, "principle"):
            name = block.attrs.get("name")
            if not name:
                continue
            principles.append(SkillPrinciple(name=name, content=block.body.strip()))
        return principles

    def _parse_intake(self, content: str) -> str | None:
        block = find_first(content, "intake")
        return block.body.strip() if block else None

    def _parse_routing(self, content: str) -> list[SkillRouting]:
        block = find_first(content, "routing")
        if block is None:
            return []

        routing: list[SkillRouting] = []
        for response, workflow in parse_table_rows(block.body):
            if is_header_row(response, "response"):
                continue
            workflow = strip_backticks(workflow)
            if workflow:
                routing.append(SkillRouting(response=response, workflow=workflow))
        return routing

    def _find_references(self, skill_dir: Path) -> list[SkillReference]:
        refs_dir = skill_dir / REFERENCES_DIR
        if not refs_dir.is_dir():
            return []
        return [
            SkillReference(name=file.stem, path=f"{REFERENCES_DIR}/{rel}")
            for file, rel in _list_markdown(refs_dir)
        ]

    def _find_workflows(self, skill_dir: Path, content: str) -> list[SkillWorkflow]:
        workflows_dir = skill_dir / WORKFLOWS_DIR
        if not workflows_dir.is_dir():
            return []

        purposes = self._parse_workflows_index(content)
        return [
            SkillWorkflow(
                name=file.stem,
                path=f"{WORKFLOWS_DIR}/{rel}",
                purpose=purposes.get(rel) or purposes.get(file.stem),
            )
            for file, rel in _list_markdown(workflows_dir)
        ]

    def _parse_workflows_index(self, content: str) -> dict[str, str]:
        block = find_first(content, "workflows_index")
        if block is None:
            return {}

        purposes: dict[str, str] = {}
        for name, purpose in parse_table_rows(block.body):
            if is_header_row(name, "workflow"):
                continue
            purposes[strip_backticks(name)] = purpose
        return purposes


def _list_markdown(directory: Path) -> list[tuple[Path, str]]:
    """Markdown files below *directory* as (path, posix path relative to it), sorted."""
    files = sorted(p for p in directory.rglob("*.md") if p.is_file())
    return [(p, p.relative_to(directory).as_posix()) for p in files]
