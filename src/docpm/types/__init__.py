# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from models.py, service.py, or codec.py; this prevents circular imports.
"""Typed return-value contracts for docpm's model and metrics layers."""

from __future__ import annotations

from docpm.types.core import (
    CompletionPredictionDict,
    ISOTimestamp,
    PhaseProgressDict,
    ProjectConfig,
    TaskDict,
    TransitionDict,
    WorkItemDict,
    WorkItemMetricsDict,
)

__all__ = [
    "CompletionPredictionDict",
    "ISOTimestamp",
    "PhaseProgressDict",
    "ProjectConfig",
    "TaskDict",
    "TransitionDict",
    "WorkItemDict",
    "WorkItemMetricsDict",
]
