"""Persistent bookmark list and the quick-access locations."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .. import config
from ..errors import AlreadyExists, FileManagerError, NotFound
from .trash import trash_display_name, trash_path

LOGGER = logging.getLogger(__name__)

QUICK_ACCESS_FOLDERS = ("Documents", "Downloads", "Pictures", "Music", "Videos", "Desktop")


@dataclass(frozen=True)
class Bookmark:
    label: str
    path: Path

    def to_json(self) -> dict[str, str]:
        return {"label": self.label, "path": str(self.path)}


def _parse_bookmarks(data: object) -> list[Bookmark]:
    if not isinstance(data, list):
        return []
    out: list[Bookmark] = []
    seen: set[Path] = set()
    for item in data:
        if not isinstance(item, dict):
            continue
        label = item.get("label")
        raw_path = item.get("path")
        if not isinstance(raw_path, str) or not raw_path:
            continue
        path = Path(raw_path)
        if path in seen:
            continue
        seen.add(path)
        out.append(Bookmark(label if isinstance(label, str) and label else path.name or str(path), path))
    return out


class BookmarkStore:
    """Ordered bookmark list, unique by path, saved on every change.

    A missing or malformed file loads as an empty list. Write failures raise
    ``FileManagerError`` so callers can tell the user the change was not kept.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = config.BOOKMARKS_PATH if path is None else path
        self._bookmarks = self._load()

    def _load(self) -> list[Bookmark]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            LOGGER.warning("ignoring unreadable bookmarks file %s: %s", self.path, exc)
            return []
        return _parse_bookmarks(data)

    def _save(self) -> None:
        payload = json.dumps([bookmark.to_json() for bookmark in self._bookmarks], indent=2) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise FileManagerError(f"cannot save bookmarks to {self.path}: {exc}", path=self.path) from exc

    def __iter__(self):
        return iter(list(self._bookmarks))

    def __len__(self) -> int:
        return len(self._bookmarks)

    def entries(self) -> list[Bookmark]:
        return list(self._bookmarks)

    def contains(self, path: Path) -> bool:
        target = Path(path)
        return any(bookmark.path == target for bookmark in self._bookmarks)

    def add(self, path: Path, label: str | None = None) -> Bookmark:
        """Append a bookmark for ``path``; raises ``AlreadyExists`` for duplicates."""
        target = Path(path)
        if self.contains(target):
            raise AlreadyExists(f"{target} is already bookmarked", path=target)
        bookmark = Bookmark(label or target.name or str(target), target)
        self._bookmarks.append(bookmark)
        self._save()
        return bookmark

    def remove(self, path: Path) -> Bookmark:
        """Remove the bookmark for ``path``; raises ``NotFound`` if absent."""
        target = Path(path)
        for index, bookmark in enumerate(self._bookmarks):
            if bookmark.path == target:
                del self._bookmarks[index]
                self._save()
                return bookmark
        raise NotFound(f"{target} is not bookmarked", path=target)


def quick_access(home: Path | None = None) -> list[Bookmark]:
    """Home, the usual user folders, and the trash, limited to those that exist."""
    home = Path.home() if home is None else home
    items = [Bookmark("Home", home)]
    items.extend(Bookmark(name, home / name) for name in QUICK_ACCESS_FOLDERS)
    trash = trash_path(home)
    if trash is not None:
        items.append(Bookmark(trash_display_name(), trash))
    return [item for item in items if item.path.exists()]


__all__ = [
    "Bookmark",
    "BookmarkStore",
    "QUICK_ACCESS_FOLDERS",
    "quick_access",
]
