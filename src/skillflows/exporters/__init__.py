"""
Export adapters.

Convert Mermaid diagrams back to their source formats:
source → Mermaid → visual edit → back to source.
"""

from skillflows.exporters.skill import (
    ExportedSkill,
    ExportResult,
    SkillExportOptions,
    auto_export,
    export_skills_directory,
    export_to_skill,
    extract_skill_data,
    render_skill,
    resolve_skill_source,
    write_exports,
)

__all__ = [
    "ExportResult",
    "ExportedSkill",
    "SkillExportOptions",
    "auto_export",
    "export_skills_directory",
    "export_to_skill",
    "extract_skill_data",
    "render_skill",
    "resolve_skill_source",
    "write_exports",
]
