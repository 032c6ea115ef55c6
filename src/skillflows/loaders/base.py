"""
Base skill loader interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from skillflows.models import ParsedSkill


class SkillLoader(ABC):
    """
    Abstract base class for skill loaders.

    Implement this interface to read skills from other document formats.
    ``parse`` is a coroutine; blocking file access belongs in a worker
    thread so callers stay responsive.
    """

    @abstractmethod
    def can_load(self, path: Path) -> bool:
        """Check if this loader can handle the given file or directory."""
        pass

    @abstractmethod
    def load(self, path: Path) -> ParsedSkill:
        """Load a skill synchronously."""
        pass

    @abstractmethod
    async def parse(self, path: str | Path) -> ParsedSkill:
        """Load a skill without blocking the event loop."""
        pass
