"""Core architectural components for reposentry.

This module provides:
- Strict layer separation (evaluation, reporting, fixing)
- Dependency injection for file system access
- Dependency-ordered practice evaluation with fault isolation
- Best-effort fix invocation
"""

from .interfaces import FileSystem, OverrideStore
from .injection import DependencyContainer, MockFileSystem, RealFileSystem, get_container
from .resolver import DependencyCycleError, DependencyGraphResolver
from .pipeline import (
    ComponentEvaluation,
    EvaluationPipeline,
    PipelineConfig,
    PracticeOutcome,
    ScanResult,
    deduplicate_report_only_once,
)
from .fixer import FixerInvoker, FixOutcome, FixStatus

__all__ = [
    # Interfaces
    "FileSystem",
    "OverrideStore",
    # Dependency Injection
    "DependencyContainer",
    "MockFileSystem",
    "RealFileSystem",
    "get_container",
    # Ordering
    "DependencyCycleError",
    "DependencyGraphResolver",
    # Evaluation
    "ComponentEvaluation",
    "EvaluationPipeline",
    "PipelineConfig",
    "PracticeOutcome",
    "ScanResult",
    "deduplicate_report_only_once",
    # Fixing
    "FixerInvoker",
    "FixOutcome",
    "FixStatus",
]
