"""
Configuration for skillflows.

Settings can be loaded from a YAML file, constructed programmatically,
or overridden through environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Version stamped into generated diagram metadata
DIAGRAM_VERSION = "0.1.0"

WORKFLOWS_DIR_ENV = "SKILLFLOWS_WORKFLOWS_DIR"
LEGACY_WORKFLOWS_DIR_ENV = "WORKFLOWS_DIR"
LOG_LEVEL_ENV = "SKILLFLOWS_LOG_LEVEL"


def default_workflows_dir() -> Path:
    """Resolve the workflow store directory from the environment."""
    override = os.environ.get(WORKFLOWS_DIR_ENV) or os.environ.get(LEGACY_WORKFLOWS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".skillflows" / "workflows"


@dataclass
class ExportDefaults:
    """Default switches for SKILL.md export."""

    include_frontmatter: bool = True
    include_principle_placeholders: bool = True
    include_workflow_index: bool = True


@dataclass
class FlowsConfig:
    """
    Main configuration for skillflows.

    Example YAML:
        diagram_version: "0.1.0"
        purpose_max_length: 30
        route_label_max_length: 20
        workflows_dir: ~/.skillflows/workflows
        log_level: WARNING
        export:
          include_frontmatter: true
          include_principle_placeholders: false
    """

    diagram_version: str = DIAGRAM_VERSION
    purpose_max_length: int = 30  # Workflow purpose shown in node labels
    route_label_max_length: int = 20  # Routing edge labels
    workflows_dir: Path = field(default_factory=default_workflows_dir)
    log_level: str = field(default_factory=lambda: os.environ.get(LOG_LEVEL_ENV, "WARNING"))
    export: ExportDefaults = field(default_factory=ExportDefaults)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlowsConfig:
        """
        Create config from a dictionary.

        Raises:
            ValueError: If *data* or its ``export`` section is not a mapping
        """
        if not isinstance(data, dict):
            raise ValueError("Config must be a mapping")
        export_data = data.get("export", {}) or {}
        if not isinstance(export_data, dict):
            raise ValueError("Config 'export' section must be a mapping")
        config = cls(
            diagram_version=str(data.get("diagram_version", DIAGRAM_VERSION)),
            purpose_max_length=int(data.get("purpose_max_length", 30)),
            route_label_max_length=int(data.get("route_label_max_length", 20)),
            export=ExportDefaults(
                include_frontmatter=export_data.get("include_frontmatter", True),
                include_principle_placeholders=export_data.get(
                    "include_principle_placeholders", True
                ),
                include_workflow_index=export_data.get("include_workflow_index", True),
            ),
        )
        # Environment wins over file values
        if data.get("workflows_dir") and not (
            os.environ.get(WORKFLOWS_DIR_ENV) or os.environ.get(LEGACY_WORKFLOWS_DIR_ENV)
        ):
            config.workflows_dir = Path(data["workflows_dir"]).expanduser()
        if data.get("log_level") and not os.environ.get(LOG_LEVEL_ENV):
            config.log_level = str(data["log_level"])
        return config

    @classmethod
    def from_yaml(cls, path: Path) -> FlowsConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> FlowsConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "diagram_version": self.diagram_version,
            "purpose_max_length": self.purpose_max_length,
            "route_label_max_length": self.route_label_max_length,
            "workflows_dir": str(self.workflows_dir),
            "log_level": self.log_level,
            "export": {
                "include_frontmatter": self.export.include_frontmatter,
                "include_principle_placeholders": self.export.include_principle_placeholders,
                "include_workflow_index": self.export.include_workflow_index,
            },
        }
