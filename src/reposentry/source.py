"""Resolution of the scan target to a local directory."""
from __future__ import annotations

import logging
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .core.injection import get_container
from .core.interfaces import FileSystem

logger = logging.getLogger(__name__)

REMOTE_PATTERN = re.compile(r"^(https?://|ssh://|git@)")
CLONE_TIMEOUT = 300.0


class ScanTargetError(RuntimeError):
    """Raised when the scan target cannot be made available locally."""


@dataclass
class ScanTarget:
    """A local directory to scan, possibly a temporary clone."""

    root: Path
    repository_url: Optional[str] = None
    temporary: bool = False

    @property
    def repository_path(self) -> str:
        return self.repository_url or str(self.root)

    def cleanup(self) -> None:
        if self.temporary and self.root.exists():
            shutil.rmtree(self.root, ignore_errors=True)
            logger.debug("Removed temporary clone %s", self.root)

    def __enter__(self) -> "ScanTarget":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()


def is_remote(target: str) -> bool:
    return bool(REMOTE_PATTERN.match(target))


def resolve_scan_target(target: str, fs: Optional[FileSystem] = None) -> ScanTarget:
    """Return a local ``ScanTarget`` for a path or a git URL."""

    fs = fs or get_container().fs
    if is_remote(target):
        return _clone(target, fs)

    root = Path(target).expanduser().resolve()
    if not fs.is_directory(root):
        raise ScanTargetError(f"Scan target is not a directory: {target}")
    return ScanTarget(root=root)


def _clone(url: str, fs: FileSystem) -> ScanTarget:
    destination = Path(tempfile.mkdtemp(prefix="reposentry-"))
    logger.info("Cloning %s into %s", url, destination)
    result = fs.run_command(
        ["git", "clone", "--depth", "1", url, str(destination)],
        timeout=CLONE_TIMEOUT,
    )
    if result.returncode != 0:
        shutil.rmtree(destination, ignore_errors=True)
        reason = "timed out" if result.timed_out else (result.stderr.strip() or f"exit code {result.returncode}")
        raise ScanTargetError(f"Failed to clone {url}: {reason}")
    return ScanTarget(root=destination, repository_url=url, temporary=True)
