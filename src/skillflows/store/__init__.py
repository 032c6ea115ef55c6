"""
Workflow document persistence.
"""

from skillflows.store.models import (
    ExecutionConfig,
    SaveWorkflowInput,
    WorkflowDocument,
    WorkflowSummary,
)
from skillflows.store.workflows import WorkflowNotFoundError, WorkflowStore

__all__ = [
    "ExecutionConfig",
    "SaveWorkflowInput",
    "WorkflowDocument",
    "WorkflowNotFoundError",
    "WorkflowStore",
    "WorkflowSummary",
]
