"""
Skills directory parser.

Scans a directory such as ``~/.claude/skills`` where each skill is either a
subdirectory holding ``SKILL.md`` or a loose markdown file, and builds one
combined diagram.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from skillflows.config import FlowsConfig
from skillflows.loaders.markdown import SKILL_FILENAME, SkillParser
from skillflows.logging import get_logger
from skillflows.mermaid.generator import skills_to_mermaid
from skillflows.models import MermaidDiagram, NamedSkill, ParsedSkill, SkippedEntry

logger = get_logger("loaders.directory")

# Loose markdown files that are never skills
IGNORED_FILES = {"README.md"}


@dataclass
class SkillsDirectoryResult:
    """Skills found in a directory, the combined diagram, and what was skipped."""

    skills: list[NamedSkill]
    diagram: MermaidDiagram
    skipped: list[SkippedEntry] = field(default_factory=list)


async def parse_skills_directory(
    directory: str | Path,
    parser: SkillParser | None = None,
    config: FlowsConfig | None = None,
) -> SkillsDirectoryResult:
    """
    Parse every skill in *directory*.

    Entries are parsed concurrently but reported in name order. An entry
    that fails to parse is skipped and recorded in ``skipped``; it never
    fails the batch.

    Raises:
        FileNotFoundError: If *directory* itself does not exist
    """
    directory = Path(directory)
    parser = parser or SkillParser()

    entries = sorted(await asyncio.to_thread(lambda: list(directory.iterdir())), key=lambda p: p.name)
    skipped: list[SkippedEntry] = []
    candidates: list[tuple[Path, Path]] = []  # (entry, document)

    for entry in entries:
        if entry.is_dir():
            document = entry / SKILL_FILENAME
            if not document.is_file():
                skipped.append(SkippedEntry(path=entry, reason=f"no {SKILL_FILENAME}"))
                continue
            candidates.append((entry, document))
        elif entry.suffix == ".md" and entry.name not in IGNORED_FILES:
            candidates.append((entry, entry))

    results = await asyncio.gather(
        *(parser.parse(document) for _, document in candidates),
        return_exceptions=True,
    )

    skills: list[NamedSkill] = []
    for (entry, _), result in zip(candidates, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.debug("Skipping %s: %s", entry, result)
            skipped.append(SkippedEntry(path=entry, reason=str(result) or type(result).__name__))
            continue
        skills.append(NamedSkill(name=_skill_name(entry, result), parsed=result))

    logger.info("Parsed %d skills from %s (%d skipped)", len(skills), directory, len(skipped))
    diagram = skills_to_mermaid(skills, str(directory), config)
    return SkillsDirectoryResult(skills=skills, diagram=diagram, skipped=skipped)


def _skill_name(entry: Path, parsed: ParsedSkill) -> str:
    if entry.is_dir():
        return entry.name
    return parsed.name or entry.stem
