"""
Skill loaders for single documents and whole skills directories.
"""

from skillflows.loaders.base import SkillLoader
from skillflows.loaders.directory import SkillsDirectoryResult, parse_skills_directory
from skillflows.loaders.markdown import SkillParser, split_frontmatter

__all__ = [
    "SkillLoader",
    "SkillParser",
    "SkillsDirectoryResult",
    "parse_skills_directory",
    "split_frontmatter",
]
