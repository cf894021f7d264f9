"""Dependency injection container for file system interactions.

This module provides a clean way to inject dependencies, making all
repository access mockable for testing. The real implementation wraps
actual file I/O and subprocess calls, while tests can inject an in-memory
file system.

Usage:
    # Production code
    container = get_container()
    content = container.fs.read_file(root / ".gitignore")

    # Test code
    mock_fs = MockFileSystem()
    mock_fs.mock_file_content(Path("/repo/.gitignore"), "node_modules\\n")
    container = DependencyContainer(file_system=mock_fs)
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .interfaces import CommandResult, FileSystem

logger = logging.getLogger(__name__)

# Global container instance (singleton pattern)
_container: Optional["DependencyContainer"] = None


class RealFileSystem:
    """Production implementation of FileSystem."""

    def run_command(
        self,
        args: Sequence[str],
        timeout: float = 30.0,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """Execute a command."""
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=cwd,
                check=False,  # We handle errors ourselves
            )
            return CommandResult(
                stdout=result.stdout,
                stderr=result.stderr,
                returncode=result.returncode,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("Command timed out: %s", args[0])
            return CommandResult(
                stdout=exc.stdout if isinstance(exc.stdout, str) else "",
                stderr=exc.stderr if isinstance(exc.stderr, str) else "",
                returncode=-1,
                timed_out=True,
            )
        except FileNotFoundError:
            logger.error("Command not found: %s", args[0])
            return CommandResult(
                stdout="",
                stderr=f"Command not found: {args[0]}",
                returncode=-1,
            )
        except OSError as exc:
            logger.error("OS error running %s: %s", args[0], exc)
            return CommandResult(stdout="", stderr=str(exc), returncode=-1)

    def read_file(self, path: Path) -> Optional[str]:
        """Read file contents as string."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read file %s: %s", path, exc)
            return None

    def write_file(self, path: Path, content: str) -> None:
        """Write file contents, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def file_exists(self, path: Path) -> bool:
        return path.is_file()

    def is_directory(self, path: Path) -> bool:
        return path.is_dir()

    def list_directory(self, path: Path) -> List[Path]:
        """List directory contents."""
        try:
            return sorted(path.iterdir())
        except OSError:
            return []


class MockFileSystem:
    """In-memory implementation of FileSystem for testing.

    Configure contents using the mock_* methods, then inject this into the
    DependencyContainer or hand it to the pipeline directly. Writes land in
    the same in-memory store so fixes can be asserted on.

    Example:
        fs = MockFileSystem()
        fs.mock_file_content(Path("/repo/package.json"), "{}")
        fs.mock_command_response(["git", "clone"], CommandResult("", "", 0))
    """

    def __init__(self) -> None:
        self._files: Dict[Path, str] = {}
        self._directories: set[Path] = set()
        self._command_responses: Dict[tuple, CommandResult] = {}
        self.commands_run: List[tuple] = []
        self._default_command_response = CommandResult(
            stdout="", stderr="Command not mocked", returncode=1
        )

    def mock_file_content(self, path: Path, content: str) -> None:
        """Set up mock file content."""
        self._files[path] = content
        self._register_parents(path)

    def mock_directory(self, path: Path) -> None:
        """Set up an (empty) mock directory."""
        self._directories.add(path)
        self._register_parents(path)

    def mock_command_response(self, args: Sequence[str], response: CommandResult) -> None:
        """Set up a mock response for a command (prefix match)."""
        self._command_responses[tuple(args)] = response

    def clear(self) -> None:
        self._files.clear()
        self._directories.clear()

    def _register_parents(self, path: Path) -> None:
        for parent in path.parents:
            self._directories.add(parent)

    def run_command(
        self,
        args: Sequence[str],
        timeout: float = 30.0,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """Return mock command response."""
        key = tuple(args)
        self.commands_run.append(key)
        if key in self._command_responses:
            return self._command_responses[key]
        # Try prefix matching (for commands with variable arguments)
        for cmd_key, response in self._command_responses.items():
            if key[: len(cmd_key)] == cmd_key:
                return response
        return self._default_command_response

    def read_file(self, path: Path) -> Optional[str]:
        return self._files.get(path)

    def write_file(self, path: Path, content: str) -> None:
        self.mock_file_content(path, content)

    def file_exists(self, path: Path) -> bool:
        return path in self._files

    def is_directory(self, path: Path) -> bool:
        return path in self._directories

    def list_directory(self, path: Path) -> List[Path]:
        children = {p for p in self._files if p.parent == path}
        children.update(d for d in self._directories if d.parent == path and d != path)
        return sorted(children)


@dataclass
class DependencyContainer:
    """Container for all injectable dependencies.

    Attributes:
        file_system: Implementation of FileSystem to use
    """

    file_system: FileSystem

    @property
    def fs(self) -> FileSystem:
        """Shorthand accessor for the file system."""
        return self.file_system


def get_container() -> DependencyContainer:
    """Get the global dependency container.

    Returns the singleton container instance, creating it with the real
    file system if it doesn't exist.
    """
    global _container
    if _container is None:
        _container = DependencyContainer(file_system=RealFileSystem())
    return _container


def set_container(container: DependencyContainer) -> None:
    """Set the global dependency container (used by tests)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container so the next get_container() rebuilds it."""
    global _container
    _container = None
