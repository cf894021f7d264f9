"""Unit tests for the file system abstraction and dependency container."""
from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from reposentry.core.injection import (
    CommandResult,
    DependencyContainer,
    MockFileSystem,
    RealFileSystem,
    get_container,
    reset_container,
    set_container,
)


class TestMockFileSystem(unittest.TestCase):
    """Test MockFileSystem for testing scenarios."""

    def setUp(self) -> None:
        self.mock_fs = MockFileSystem()

    def test_mock_command_response(self) -> None:
        """Should return mocked command responses and record the call."""
        self.mock_fs.mock_command_response(
            ["git", "clone"],
            CommandResult(stdout="Cloning...", stderr="", returncode=0),
        )

        result = self.mock_fs.run_command(["git", "clone", "--depth", "1", "https://x/y.git", "/tmp/y"])

        self.assertEqual(result.stdout, "Cloning...")
        self.assertEqual(self.mock_fs.commands_run[0][:2], ("git", "clone"))

    def test_unmocked_command_returns_error(self) -> None:
        result = self.mock_fs.run_command(["unmocked", "command"])

        self.assertEqual(result.returncode, 1)
        self.assertIn("not mocked", result.stderr)

    def test_mock_file_content(self) -> None:
        path = Path("/repo/package.json")
        self.mock_fs.mock_file_content(path, "{}")

        self.assertEqual(self.mock_fs.read_file(path), "{}")
        self.assertTrue(self.mock_fs.file_exists(path))
        self.assertTrue(self.mock_fs.is_directory(Path("/repo")))

    def test_unmocked_file_returns_none(self) -> None:
        self.assertIsNone(self.mock_fs.read_file(Path("/unmocked/file.txt")))
        self.assertFalse(self.mock_fs.file_exists(Path("/unmocked/file.txt")))

    def test_directories_are_not_files(self) -> None:
        self.mock_fs.mock_directory(Path("/repo/web"))

        self.assertTrue(self.mock_fs.is_directory(Path("/repo/web")))
        self.assertFalse(self.mock_fs.file_exists(Path("/repo/web")))

    def test_list_directory_returns_direct_children(self) -> None:
        self.mock_fs.mock_file_content(Path("/repo/b.txt"), "")
        self.mock_fs.mock_file_content(Path("/repo/web/package.json"), "{}")
        self.mock_fs.mock_directory(Path("/repo/api"))

        self.assertEqual(
            self.mock_fs.list_directory(Path("/repo")),
            [Path("/repo/api"), Path("/repo/b.txt"), Path("/repo/web")],
        )

    def test_write_file_is_readable(self) -> None:
        path = Path("/repo/.gitignore")
        self.mock_fs.write_file(path, "dist/\n")

        self.assertEqual(self.mock_fs.read_file(path), "dist/\n")

    def test_clear(self) -> None:
        self.mock_fs.mock_file_content(Path("/repo/a"), "")
        self.mock_fs.clear()

        self.assertFalse(self.mock_fs.file_exists(Path("/repo/a")))
        self.assertFalse(self.mock_fs.is_directory(Path("/repo")))


class TestRealFileSystem(unittest.TestCase):
    """Test RealFileSystem against a temporary directory."""

    def setUp(self) -> None:
        self.real_fs = RealFileSystem()
        self.tmp = Path(tempfile.mkdtemp())

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_run_simple_command(self) -> None:
        result = self.real_fs.run_command(["echo", "hello"])

        self.assertEqual(result.stdout.strip(), "hello")
        self.assertEqual(result.returncode, 0)
        self.assertFalse(result.timed_out)

    def test_command_not_found(self) -> None:
        result = self.real_fs.run_command(["nonexistent_command_xyz"])

        self.assertEqual(result.returncode, -1)
        self.assertIn("not found", result.stderr.lower())

    def test_write_then_read(self) -> None:
        path = self.tmp / "nested" / "file.txt"

        self.real_fs.write_file(path, "content")

        self.assertEqual(self.real_fs.read_file(path), "content")
        self.assertTrue(self.real_fs.file_exists(path))
        self.assertTrue(self.real_fs.is_directory(path.parent))

    def test_read_nonexistent_file(self) -> None:
        self.assertIsNone(self.real_fs.read_file(self.tmp / "missing.txt"))

    def test_directory_is_not_a_file(self) -> None:
        self.assertFalse(self.real_fs.file_exists(self.tmp))

    def test_list_directory(self) -> None:
        (self.tmp / "b").write_text("")
        (self.tmp / "a").mkdir()

        self.assertEqual(self.real_fs.list_directory(self.tmp), [self.tmp / "a", self.tmp / "b"])
        self.assertEqual(self.real_fs.list_directory(self.tmp / "missing"), [])


class TestGlobalContainer(unittest.TestCase):
    """Test global container management."""

    def tearDown(self) -> None:
        reset_container()

    def test_fs_shorthand(self) -> None:
        mock_fs = MockFileSystem()
        self.assertIs(DependencyContainer(file_system=mock_fs).fs, mock_fs)

    def test_get_container_creates_default(self) -> None:
        container = get_container()

        self.assertIsInstance(container.file_system, RealFileSystem)
        self.assertIs(get_container(), container)

    def test_set_container_overrides_global(self) -> None:
        custom = DependencyContainer(file_system=MockFileSystem())

        set_container(custom)

        self.assertIs(get_container(), custom)

    def test_reset_container_clears_global(self) -> None:
        custom = DependencyContainer(file_system=MockFileSystem())
        set_container(custom)
        reset_container()

        self.assertIsNot(get_container(), custom)


if __name__ == "__main__":
    unittest.main()
