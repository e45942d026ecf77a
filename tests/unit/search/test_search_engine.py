"""Tests for criteria-driven recursive search and the content scanner."""

from __future__ import annotations

import errno
import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

from dualpane.errors import NotFound
from dualpane.operations import CancelToken
from dualpane.search import EntryTypeFilter, SearchCriteria, collect, file_contains, search
from dualpane.text import BINARY_SNIFF_BYTES


def _names(entries) -> set[str]:
    return {entry.name for entry in entries}


class SearchEngineTests(unittest.TestCase):
    def test_wildcard_name_search_recurses(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "a.txt").write_text("a", encoding="utf-8")
            (root / "b.md").write_text("b", encoding="utf-8")
            (root / "sub").mkdir()
            (root / "sub" / "c.txt").write_text("c", encoding="utf-8")

            run = search(root, SearchCriteria(name_pattern="*.txt"))
            found = list(run)

            self.assertEqual(_names(found), {"a.txt", "c.txt"})
            self.assertEqual([entry.path for entry in found], [root / "a.txt", root / "sub" / "c.txt"])
            self.assertEqual(run.summary.matched, 2)
            self.assertEqual(run.summary.scanned, 4)

    def test_runs_are_restartable(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "one.txt").write_text("1", encoding="utf-8")
            (root / "two.txt").write_text("2", encoding="utf-8")
            run = search(root, SearchCriteria(name_pattern="txt"))

            first = list(run)
            second = list(run)

            self.assertEqual([entry.path for entry in first], [entry.path for entry in second])
            self.assertEqual(run.summary.matched, 2)

    def test_content_search_skips_directories_and_binaries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "alpha.txt").write_text("the needle is here", encoding="utf-8")
            (root / "other.txt").write_text("nothing to see", encoding="utf-8")
            (root / "blob.bin").write_bytes(b"\0needle")
            (root / "needle_dir").mkdir()

            run = search(root, SearchCriteria(content_substring="NEEDLE"))
            found = list(run)

            self.assertEqual(_names(found), {"alpha.txt"})
            self.assertEqual(run.summary.skipped_files, 1)

    def test_hidden_entries_are_excluded_unless_requested(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".secret.txt").write_text("s", encoding="utf-8")
            (root / ".hid").mkdir()
            (root / ".hid" / "inner.txt").write_text("i", encoding="utf-8")
            (root / "shown.txt").write_text("v", encoding="utf-8")

            hidden_off = list(search(root, SearchCriteria(name_pattern="*.txt")))
            hidden_on = list(search(root, SearchCriteria(name_pattern="*.txt", include_hidden=True)))

            self.assertEqual(_names(hidden_off), {"shown.txt"})
            self.assertEqual(_names(hidden_on), {".secret.txt", "inner.txt", "shown.txt"})

    def test_type_and_size_filters(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "tiny.txt").write_text("a", encoding="utf-8")
            (root / "big.txt").write_text("0123456789", encoding="utf-8")
            (root / "folder").mkdir()

            sized = list(search(root, SearchCriteria(min_size=3)))
            files_only = list(search(root, SearchCriteria(entry_type_filter=EntryTypeFilter.FILES, max_size=5)))
            dirs_only = list(search(root, SearchCriteria(entry_type_filter=EntryTypeFilter.DIRECTORIES)))

            self.assertEqual(_names(sized), {"big.txt", "folder"})
            self.assertEqual(_names(files_only), {"tiny.txt"})
            self.assertEqual(_names(dirs_only), {"folder"})

    def test_modified_within_days(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            old = root / "old.txt"
            old.write_text("o", encoding="utf-8")
            (root / "fresh.txt").write_text("f", encoding="utf-8")
            ten_days_ago = time.time() - 10 * 86_400
            os.utime(old, (ten_days_ago, ten_days_ago))

            found = list(search(root, SearchCriteria(modified_within_days=1)))

            self.assertEqual(_names(found), {"fresh.txt"})

    def test_case_sensitivity(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "README.md").write_text("r", encoding="utf-8")

            self.assertEqual(len(list(search(root, SearchCriteria(name_pattern="readme")))), 1)
            self.assertEqual(list(search(root, SearchCriteria(name_pattern="readme", case_sensitive=True))), [])

    def test_cancel_before_and_during_run(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for index in range(5):
                (root / f"f{index}.txt").write_text("x", encoding="utf-8")

            cancelled_early = CancelToken()
            cancelled_early.cancel()
            early = search(root, SearchCriteria(), cancelled_early)
            self.assertEqual(list(early), [])
            self.assertTrue(early.summary.cancelled)

            token = CancelToken()
            run = search(root, SearchCriteria(), token)
            iterator = iter(run)
            next(iterator)
            token.cancel()

            self.assertEqual(list(iterator), [])
            self.assertTrue(run.summary.cancelled)
            self.assertEqual(run.summary.matched, 1)

    def test_unreadable_subdirectory_is_skipped_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "locked").mkdir()
            (root / "locked" / "inside.txt").write_text("i", encoding="utf-8")
            (root / "open").mkdir()
            (root / "open" / "visible.txt").write_text("v", encoding="utf-8")
            real_scandir = os.scandir

            def guarded_scandir(path):
                if Path(path).name == "locked":
                    raise PermissionError(errno.EACCES, "Permission denied", str(path))
                return real_scandir(path)

            with mock.patch("dualpane.search.engine.os.scandir", side_effect=guarded_scandir):
                run = search(root, SearchCriteria(name_pattern="*.txt"))
                found = list(run)

            self.assertEqual(_names(found), {"visible.txt"})
            self.assertEqual(run.summary.skipped_dirs, 1)
            self.assertIn("locked", run.summary.warnings[0])

    def test_missing_or_file_root_raises_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "plain.txt").write_text("p", encoding="utf-8")

            with self.assertRaises(NotFound):
                search(root / "missing", SearchCriteria())
            with self.assertRaises(NotFound):
                search(root / "plain.txt", SearchCriteria())

    def test_collect_stops_at_limit(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for index in range(4):
                (root / f"f{index}.txt").write_text("x", encoding="utf-8")

            self.assertEqual(len(collect(search(root, SearchCriteria()), limit=2)), 2)
            self.assertEqual(len(collect(search(root, SearchCriteria()))), 4)


class FileContainsTests(unittest.TestCase):
    def test_match_spanning_read_boundary(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "long.txt"
            path.write_text("x" * (BINARY_SNIFF_BYTES - 3) + "needle" + "y" * 10, encoding="utf-8")

            self.assertTrue(file_contains(path, "needle"))
            self.assertFalse(file_contains(path, "absent"))

    def test_binary_and_invalid_utf8_return_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            binary = Path(tmp) / "data.bin"
            binary.write_bytes(b"abc\0def")
            latin = Path(tmp) / "latin.txt"
            latin.write_bytes(b"caf\xe9 needle")

            self.assertIsNone(file_contains(binary, "abc"))
            self.assertIsNone(file_contains(latin, "needle"))

    def test_case_sensitive_scan(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "mixed.txt"
            path.write_text("Hello World", encoding="utf-8")

            self.assertTrue(file_contains(path, "hello"))
            self.assertFalse(file_contains(path, "hello", case_sensitive=True))


if __name__ == "__main__":
    unittest.main()
