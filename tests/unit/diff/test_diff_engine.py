"""Tests for line alignment, modified-line pairing, and unified rendering."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from dualpane.diff import DiffKind, diff, diff_lines, highlight_diff, render_unified
from dualpane.errors import NotComparable, NotFound


def _write(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class DiffEngineTests(unittest.TestCase):
    def test_same_file_is_identical(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp) / "same.txt", ["one", "two"])

            result = diff(path, path)

            self.assertTrue(result.identical)
            self.assertEqual(result.equal_count, 2)
            self.assertEqual([line.left_number for line in result.lines], [1, 2])

    def test_modified_and_added_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            left = _write(Path(tmp) / "left.txt", ["alpha", "beta = 1", "gamma"])
            right = _write(Path(tmp) / "right.txt", ["alpha", "beta = 2", "gamma", "delta"])

            result = diff(left, right)

            self.assertEqual(
                [line.kind for line in result.lines],
                [DiffKind.EQUAL, DiffKind.MODIFIED, DiffKind.EQUAL, DiffKind.ADDED],
            )
            modified = result.lines[1]
            self.assertEqual((modified.left_number, modified.right_number), (2, 2))
            self.assertEqual((modified.left_line, modified.right_line), ("beta = 1", "beta = 2"))
            added = result.lines[3]
            self.assertEqual((added.left_number, added.right_number), (None, 4))
            self.assertEqual(
                (result.equal_count, result.modified_count, result.added_count, result.removed_count),
                (2, 1, 1, 0),
            )
            self.assertFalse(result.identical)

    def test_unrelated_lines_are_removed_then_added(self) -> None:
        lines = diff_lines(["apple"], ["zebra"])

        self.assertEqual([line.kind for line in lines], [DiffKind.REMOVED, DiffKind.ADDED])
        self.assertEqual(lines[0].left_number, 1)
        self.assertEqual(lines[1].right_number, 1)

    def test_pure_removal_keeps_numbering(self) -> None:
        lines = diff_lines(["a", "b", "c"], ["a", "c"])

        self.assertEqual([line.kind for line in lines], [DiffKind.EQUAL, DiffKind.REMOVED, DiffKind.EQUAL])
        self.assertEqual((lines[2].left_number, lines[2].right_number), (3, 2))

    def test_sequence_matcher_fallback_gives_same_alignment(self) -> None:
        left = ["alpha", "beta = 1", "gamma"]
        right = ["alpha", "beta = 2", "gamma", "delta"]
        expected = [line.kind for line in diff_lines(left, right)]

        with mock.patch("dualpane.diff.engine.MAX_LCS_CELLS", 0):
            fallback = [line.kind for line in diff_lines(left, right)]

        self.assertEqual(fallback, expected)

    def test_binary_and_non_utf8_inputs_are_not_comparable(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            text = _write(Path(tmp) / "text.txt", ["hello"])
            binary = Path(tmp) / "blob.bin"
            binary.write_bytes(b"\0\1\2")
            latin = Path(tmp) / "latin.txt"
            latin.write_bytes(b"caf\xe9\n")

            for other in (binary, latin):
                result = diff(text, other)
                self.assertFalse(result.comparable)
                self.assertFalse(result.identical)
                self.assertEqual(result.lines, [])

    def test_directories_and_missing_files_raise(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            text = _write(root / "text.txt", ["hello"])

            with self.assertRaises(NotComparable):
                diff(root, text)
            with self.assertRaises(NotFound):
                diff(text, root / "missing.txt")


class UnifiedRenderTests(unittest.TestCase):
    def test_hunk_header_counts_each_side(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            left = _write(Path(tmp) / "left.txt", ["alpha", "beta = 1", "gamma"])
            right = _write(Path(tmp) / "right.txt", ["alpha", "beta = 2", "gamma", "delta"])

            text = render_unified(diff(left, right))

            self.assertEqual(
                text.splitlines(),
                [
                    f"--- {left}",
                    f"+++ {right}",
                    "@@ -1,3 +1,4 @@",
                    " alpha",
                    "-beta = 1",
                    "+beta = 2",
                    " gamma",
                    "+delta",
                ],
            )

    def test_identical_renders_header_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp) / "same.txt", ["one"])

            self.assertEqual(render_unified(diff(path, path)), f"--- {path}\n+++ {path}\n")

    def test_binary_renders_single_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            text = _write(Path(tmp) / "text.txt", ["hello"])
            binary = Path(tmp) / "blob.bin"
            binary.write_bytes(b"\0")

            self.assertEqual(render_unified(diff(text, binary)), f"Binary files {text} and {binary} differ\n")

    def test_identical_binary_files_render_header_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            first = Path(tmp) / "first.bin"
            first.write_bytes(b"\0\1\2")
            second = Path(tmp) / "second.bin"
            second.write_bytes(b"\0\1\2")

            same_path = diff(first, first)
            same_content = diff(first, second)

            self.assertFalse(same_path.comparable)
            self.assertTrue(same_path.identical)
            self.assertTrue(same_content.identical)
            self.assertEqual(render_unified(same_path), f"--- {first}\n+++ {first}\n")
            self.assertEqual(render_unified(same_content), f"--- {first}\n+++ {second}\n")

    def test_context_limits_hunk(self) -> None:
        left = [f"line {n}" for n in range(1, 21)]
        right = list(left)
        right[9] = "LINE TEN CHANGED"
        with tempfile.TemporaryDirectory() as tmp:
            left_path = _write(Path(tmp) / "left.txt", left)
            right_path = _write(Path(tmp) / "right.txt", right)

            rendered = render_unified(diff(left_path, right_path), context=2).splitlines()

        self.assertEqual(rendered[2], "@@ -8,5 +8,5 @@")
        self.assertNotIn(" line 7", rendered)
        self.assertIn(" line 12", rendered)
        self.assertNotIn(" line 13", rendered)

    def test_highlight_adds_terminal_colors(self) -> None:
        colored = highlight_diff("--- a\n+++ b\n@@ -1,1 +1,1 @@\n-old\n+new\n")

        self.assertIn("\x1b[", colored)
        self.assertIn("old", colored)


if __name__ == "__main__":
    unittest.main()
