"""
Pipeline entry points: turn a path on disk into a Mermaid diagram.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from skillflows.config import FlowsConfig
from skillflows.loaders.directory import parse_skills_directory
from skillflows.loaders.markdown import SKILL_FILENAME, SkillParser
from skillflows.logging import get_logger
from skillflows.mermaid.generator import skill_to_mermaid
from skillflows.models import MermaidDiagram, SourceType

logger = get_logger("pipeline")


async def to_flows(
    source_type: SourceType | str,
    path: str | Path,
    config: FlowsConfig | None = None,
) -> MermaidDiagram:
    """
    Convert a skill or a skills directory into a Mermaid diagram.

    Raises:
        ValueError: If *source_type* is not ``skill`` or ``skills-directory``
        FileNotFoundError: If the skill document or directory is missing
    """
    if source_type == SourceType.SKILL:
        parsed = await SkillParser().parse(path)
        return skill_to_mermaid(parsed, config)
    if source_type == SourceType.SKILLS_DIRECTORY:
        result = await parse_skills_directory(path, config=config)
        return result.diagram
    raise ValueError(f"Unknown type: {getattr(source_type, 'value', source_type)}")


async def detect_source_type(path: str | Path) -> SourceType:
    """
    Work out what *path* holds.

    A directory with ``SKILL.md`` is a skill; a directory with skill
    subdirectories is a skills directory; a markdown file is a skill.

    Raises:
        FileNotFoundError: If *path* does not exist
        ValueError: If the type cannot be determined
    """
    path = Path(path)
    return await asyncio.to_thread(_detect_source_type, path)


def _detect_source_type(path: Path) -> SourceType:
    if not path.exists():
        raise FileNotFoundError(f"No such file or directory: {path}")

    if path.is_dir():
        if (path / SKILL_FILENAME).is_file():
            return SourceType.SKILL
        if any(child.is_dir() and (child / SKILL_FILENAME).is_file() for child in path.iterdir()):
            return SourceType.SKILLS_DIRECTORY
        raise ValueError(f"Could not detect source type for: {path}")

    if path.is_file():
        if path.suffix == ".md":
            return SourceType.SKILL
        raise ValueError(f"Unsupported file type: {path}")

    raise ValueError(f"Could not detect source type for: {path}")


async def auto_detect(path: str | Path, config: FlowsConfig | None = None) -> MermaidDiagram:
    """Detect the source type of *path* and convert it."""
    source_type = await detect_source_type(path)
    logger.debug("Detected %s as %s", path, source_type.value)
    return await to_flows(source_type, path, config)
