"""Tests for scan target resolution."""
from __future__ import annotations

from pathlib import Path

import pytest

from reposentry.core.injection import MockFileSystem, RealFileSystem
from reposentry.core.interfaces import CommandResult
from reposentry.source import ScanTarget, ScanTargetError, is_remote, resolve_scan_target


class TestIsRemote:
    @pytest.mark.parametrize(
        "target",
        [
            "https://github.com/org/repo",
            "http://example.com/repo.git",
            "ssh://git@example.com/repo.git",
            "git@github.com:org/repo.git",
        ],
    )
    def test_remote(self, target):
        assert is_remote(target)

    @pytest.mark.parametrize("target", [".", "/tmp/repo", "github.com/org/repo"])
    def test_local(self, target):
        assert not is_remote(target)


class TestLocalTargets:
    def test_existing_directory(self, tmp_path):
        target = resolve_scan_target(str(tmp_path), fs=RealFileSystem())

        assert target.root == tmp_path.resolve()
        assert target.temporary is False
        assert target.repository_path == str(tmp_path.resolve())

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ScanTargetError, match="not a directory"):
            resolve_scan_target(str(tmp_path / "missing"), fs=RealFileSystem())

    def test_cleanup_keeps_local_directory(self, tmp_path):
        target = resolve_scan_target(str(tmp_path), fs=RealFileSystem())
        target.cleanup()

        assert tmp_path.exists()


class TestRemoteTargets:
    URL = "https://github.com/org/repo.git"

    def test_successful_clone(self):
        fs = MockFileSystem()
        fs.mock_command_response(["git", "clone"], CommandResult(stdout="", stderr="", returncode=0))

        with resolve_scan_target(self.URL, fs=fs) as target:
            assert target.temporary is True
            assert target.repository_url == self.URL
            assert target.repository_path == self.URL
            assert target.root.exists()
            command = fs.commands_run[0]
            assert command[:5] == ("git", "clone", "--depth", "1", self.URL)
            assert command[5] == str(target.root)

        assert not target.root.exists()

    def test_failed_clone_raises_and_removes_directory(self):
        fs = MockFileSystem()
        fs.mock_command_response(
            ["git", "clone"],
            CommandResult(stdout="", stderr="fatal: repository not found", returncode=128),
        )

        with pytest.raises(ScanTargetError, match="repository not found"):
            resolve_scan_target(self.URL, fs=fs)

        destination = Path(fs.commands_run[0][5])
        assert not destination.exists()

    def test_timed_out_clone(self):
        fs = MockFileSystem()
        fs.mock_command_response(
            ["git", "clone"],
            CommandResult(stdout="", stderr="", returncode=-1, timed_out=True),
        )

        with pytest.raises(ScanTargetError, match="timed out"):
            resolve_scan_target(self.URL, fs=fs)


def test_scan_target_context_manager_cleans_temporary(tmp_path):
    clone = tmp_path / "clone"
    clone.mkdir()

    with ScanTarget(root=clone, repository_url="https://x", temporary=True):
        pass

    assert not clone.exists()
