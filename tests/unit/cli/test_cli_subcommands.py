"""CLI subcommand behavior tests.

Runs ``dualpane.cli.main`` against temporary directories with stdout
captured, an isolated config file, and an isolated bookmark store.
"""

from __future__ import annotations

import io
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from dualpane import cli
from dualpane.sidebar import MountPoint


class _CliCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.work = self.root / "work"
        (self.work / "docs").mkdir(parents=True)
        (self.work / "notes.txt").write_text("hello\n", encoding="utf-8")
        (self.work / ".secret").write_text("s\n", encoding="utf-8")
        self._patches = [
            mock.patch("dualpane.config.CONFIG_PATH", self.root / "config.json"),
            mock.patch("dualpane.config.BOOKMARKS_PATH", self.root / "bookmarks.json"),
        ]
        for patcher in self._patches:
            patcher.start()

    def tearDown(self) -> None:
        for patcher in reversed(self._patches):
            patcher.stop()
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", io.StringIO()):
            cli.main(list(argv), default_path=self.work)
        return stdout.getvalue()


class CliListingTests(_CliCase):
    def test_ls_lists_directories_first_and_hides_dotfiles(self) -> None:
        lines = self.run_cli("ls").splitlines()

        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].endswith("docs/"))
        self.assertTrue(lines[1].endswith("notes.txt"))

    def test_ls_all_filter_and_reverse(self) -> None:
        self.assertIn(".secret", self.run_cli("ls", "-a"))
        self.assertNotIn("docs/", self.run_cli("ls", "--filter", "*.txt"))
        reversed_lines = self.run_cli("ls", "--sort", "size", "-r").splitlines()
        self.assertTrue(reversed_lines[0].endswith("notes.txt"))

    def test_ls_on_a_file_prints_that_entry(self) -> None:
        lines = self.run_cli("ls", "notes.txt").splitlines()

        self.assertEqual(len(lines), 1)
        self.assertIn("rw", lines[0])
        self.assertTrue(lines[0].endswith("notes.txt"))

    def test_ls_does_not_persist_hidden_preference(self) -> None:
        self.run_cli("ls", "-a")

        self.assertFalse((self.root / "config.json").exists())

    def test_missing_start_path_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["ls"], default_path=self.root / "missing")

        self.assertIn("Path not found", str(ctx.exception))


class CliFileOperationTests(_CliCase):
    def test_cp_copies_and_reports_summary(self) -> None:
        output = self.run_cli("cp", "notes.txt", "docs")

        self.assertIn("copy: 1 of 1 succeeded", output)
        self.assertEqual((self.work / "docs" / "notes.txt").read_text(encoding="utf-8"), "hello\n")

    def test_cp_collision_exits_with_failure_summary(self) -> None:
        (self.work / "docs" / "notes.txt").write_text("old\n", encoding="utf-8")

        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("cp", "notes.txt", "docs")

        self.assertIn("0 of 1 succeeded", str(ctx.exception))
        self.assertEqual((self.work / "docs" / "notes.txt").read_text(encoding="utf-8"), "old\n")

    def test_mv_and_rm_permanent(self) -> None:
        self.run_cli("mv", "notes.txt", "docs")
        self.assertTrue((self.work / "docs" / "notes.txt").exists())
        self.assertFalse((self.work / "notes.txt").exists())

        output = self.run_cli("rm", "--permanent", "docs")

        self.assertIn("delete: 2 of 2 succeeded", output)
        self.assertFalse((self.work / "docs").exists())

    def test_zip_and_unzip(self) -> None:
        self.run_cli("zip", "bundle.zip", "notes.txt", "docs")
        with zipfile.ZipFile(self.work / "bundle.zip") as archive:
            self.assertEqual(sorted(archive.namelist()), ["docs/", "notes.txt"])

        output = self.run_cli("unzip", "bundle.zip", "out")

        self.assertIn("extract: 2 of 2 succeeded", output)
        self.assertTrue((self.work / "out" / "notes.txt").exists())
        self.assertTrue((self.work / "out" / "docs").is_dir())

    def test_mkdir_and_rename(self) -> None:
        created = self.run_cli("mkdir", "fresh").strip()
        renamed = self.run_cli("rename", "notes.txt", "readme.txt").strip()

        self.assertEqual(created, str(self.work / "fresh"))
        self.assertEqual(renamed, str(self.work / "readme.txt"))
        self.assertTrue((self.work / "readme.txt").exists())

    def test_rename_collision_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("rename", "notes.txt", "docs")

        self.assertIn("already exists", str(ctx.exception))


class CliSearchDiffTests(_CliCase):
    def test_search_prints_matching_paths(self) -> None:
        (self.work / "docs" / "guide.txt").write_text("needle\n", encoding="utf-8")

        output = self.run_cli("search", "--name", "*.txt")

        self.assertEqual(
            output.splitlines(),
            [str(self.work / "docs" / "guide.txt"), str(self.work / "notes.txt")],
        )

    def test_search_by_content(self) -> None:
        (self.work / "docs" / "guide.txt").write_text("needle\n", encoding="utf-8")

        output = self.run_cli("search", "--content", "needle")

        self.assertEqual(output.strip(), str(self.work / "docs" / "guide.txt"))

    def test_diff_renders_plain_unified_text(self) -> None:
        (self.work / "other.txt").write_text("hello\nworld\n", encoding="utf-8")

        output = self.run_cli("diff", "notes.txt", "other.txt")

        self.assertIn("@@ -1,1 +1,2 @@", output)
        self.assertIn("+world", output)
        self.assertNotIn("\x1b[", output)


class CliSidebarTests(_CliCase):
    def test_bookmarks_add_list_remove(self) -> None:
        self.assertIn("added docs", self.run_cli("bookmarks", "add", "docs"))
        self.assertIn(str(self.work / "docs"), self.run_cli("bookmarks"))
        self.assertIn("removed docs", self.run_cli("bookmarks", "remove", "docs"))

        with self.assertRaises(SystemExit):
            self.run_cli("bookmarks", "remove", "docs")

    def test_mounts_output(self) -> None:
        mount = MountPoint("/dev/sdb1", Path("/media/user/STICK"), "vfat", 1000, 950, True)
        with mock.patch("dualpane.commands.handlers.list_mounts", return_value=[mount]):
            output = self.run_cli("mounts")

        self.assertIn("/media/user/STICK", output)
        self.assertIn("95.0%", output)
        self.assertIn("critical", output)

    def test_trash_without_location_exits(self) -> None:
        with mock.patch("dualpane.cli.trash_path", return_value=None):
            with self.assertRaises(SystemExit) as ctx:
                self.run_cli("trash")

        self.assertIn("No trash directory", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
