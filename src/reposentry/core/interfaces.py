"""Abstract interfaces defining strict layer separation.

Architecture:
┌─────────────────────────────────────────────────────────────────┐
│                     EVALUATION LAYER                             │
│  - Orders practices by their declared dependencies               │
│  - Runs each applicable practice once per component              │
│  - NO side effects on the scanned repository (read-only)         │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                     REPORTING LAYER                              │
│  - Formats evaluation records                                    │
│  - Multiple output formats (text, JSON, HTML)                    │
│  - Impact aggregation and filtering                              │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                     FIXING LAYER                                 │
│  - Applies practice fixes based on evaluation records            │
│  - Only runs when explicitly requested (--fix)                   │
│  - Best effort, no rollback                                      │
└─────────────────────────────────────────────────────────────────┘
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from ..practices.types import PracticeOverride


# =============================================================================
# FILE SYSTEM INTERFACE - Abstraction for all repository access (Dependency Injection)
# =============================================================================


@dataclass
class CommandResult:
    """Result from running a shell command."""

    stdout: str
    stderr: str
    returncode: int
    timed_out: bool = False


class FileSystem(Protocol):
    """Protocol defining all file system and process interactions.

    Practices never touch the disk directly; they go through this interface
    so tests can swap in an in-memory implementation.
    """

    def run_command(
        self,
        args: Sequence[str],
        timeout: float = 30.0,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """Execute a command and return results.

        Args:
            args: Command and arguments to execute
            timeout: Maximum seconds to wait
            cwd: Working directory for the command

        Returns:
            CommandResult with stdout, stderr, and return code
        """
        ...

    def read_file(self, path: Path) -> Optional[str]:
        """Read file contents as string.

        Returns:
            File contents or None if unreadable
        """
        ...

    def write_file(self, path: Path, content: str) -> None:
        """Write string content to a file, creating parent directories."""
        ...

    def file_exists(self, path: Path) -> bool:
        """Check if a regular file exists."""
        ...

    def is_directory(self, path: Path) -> bool:
        """Check if a directory exists."""
        ...

    def list_directory(self, path: Path) -> List[Path]:
        """List directory contents, empty when unreadable."""
        ...


# =============================================================================
# OVERRIDE STORE - Per-component practice configuration
# =============================================================================


class OverrideStore(Protocol):
    """Read-only source of practice toggles and impact overrides."""

    def get_override(self, practice_id: str, component_id: str) -> PracticeOverride:
        """Return the override for a practice on a component.

        Implementations return a default ``PracticeOverride()`` when nothing
        is configured.
        """
        ...
