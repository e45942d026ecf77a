"""Tests for locating, browsing, restoring from, and purging the trash."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from dualpane.errors import InvalidOperation, NotFound
from dualpane.sidebar import (
    is_trash_path,
    list_trash,
    purge,
    restore,
    send_to_trash,
    trash_display_name,
    trash_path,
)


def _xdg_trash(home: Path) -> Path:
    trash = home / ".local" / "share" / "Trash" / "files"
    trash.mkdir(parents=True)
    return trash


class TrashPathTests(unittest.TestCase):
    def test_platform_locations(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            home = Path(tmp).resolve()

            self.assertIsNone(trash_path(home, platform="linux"))
            self.assertEqual(trash_path(home, platform="darwin"), home / ".Trash")
            self.assertIsNone(trash_path(home, platform="win32"))

            (home / ".Trash").mkdir()
            self.assertEqual(trash_path(home, platform="linux"), home / ".Trash")

            xdg = _xdg_trash(home)
            self.assertEqual(trash_path(home, platform="linux"), xdg)

    def test_display_name(self) -> None:
        self.assertEqual(trash_display_name("win32"), "Recycle Bin")
        self.assertEqual(trash_display_name("linux"), "Trash")

    def test_is_trash_path(self) -> None:
        trash = Path("/home/user/.local/share/Trash/files")

        self.assertTrue(is_trash_path(trash / "old.txt", trash))
        self.assertTrue(is_trash_path(trash, trash))
        self.assertFalse(is_trash_path(Path("/home/user/old.txt"), trash))


class TrashContentsTests(unittest.TestCase):
    def test_list_trash_shows_hidden_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            trash = _xdg_trash(Path(tmp).resolve())
            (trash / "report.txt").write_text("r", encoding="utf-8")
            (trash / ".dotfile").write_text("d", encoding="utf-8")

            listing = list_trash(trash=trash)

            self.assertEqual({entry.name for entry in listing.entries}, {"report.txt", ".dotfile"})

    def test_missing_trash_raises_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(NotFound):
                list_trash(trash=Path(tmp) / "nowhere")

    def test_restore_copies_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            trash = _xdg_trash(root)
            (trash / "report.txt").write_text("r", encoding="utf-8")
            destination = root / "restored"
            destination.mkdir()

            result = restore([trash / "report.txt"], destination)

            self.assertTrue(result.ok)
            self.assertEqual((destination / "report.txt").read_text(encoding="utf-8"), "r")

    def test_purge_only_accepts_paths_inside_trash(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            trash = _xdg_trash(root)
            doomed = trash / "doomed.txt"
            doomed.write_text("d", encoding="utf-8")
            outside = root / "keep.txt"
            outside.write_text("k", encoding="utf-8")

            with self.assertRaises(InvalidOperation):
                purge([doomed, outside], trash=trash)
            with self.assertRaises(InvalidOperation):
                purge([trash], trash=trash)
            self.assertTrue(doomed.exists())

            result = purge([doomed], trash=trash)

            self.assertTrue(result.ok)
            self.assertFalse(doomed.exists())
            self.assertTrue(outside.exists())

    def test_send_to_trash_delegates_to_send2trash(self) -> None:
        with mock.patch("dualpane.sidebar.trash.send2trash") as send:
            send_to_trash(Path("/tmp/example.txt"))

        send.assert_called_once_with("/tmp/example.txt")


if __name__ == "__main__":
    unittest.main()
