"""
Mermaid utilities: skill projection plus a two-way flowchart ⇄ graph bridge.
"""

from skillflows.mermaid.generator import (
    escape_label,
    sanitize_id,
    skill_to_mermaid,
    skills_to_mermaid,
    truncate,
    workflow_stem,
)
from skillflows.mermaid.parser import mermaid_to_graph
from skillflows.mermaid.writer import graph_to_mermaid

__all__ = [
    "escape_label",
    "graph_to_mermaid",
    "mermaid_to_graph",
    "sanitize_id",
    "skill_to_mermaid",
    "skills_to_mermaid",
    "truncate",
    "workflow_stem",
]
