"""Sidebar stores: bookmarks, quick access, mounts, and the trash."""

from __future__ import annotations

from .trash import is_trash_path, list_trash, purge, restore, send_to_trash, trash_display_name, trash_path
from .bookmarks import Bookmark, BookmarkStore, quick_access
from .mounts import MountPoint, UsageLevel, list_mounts, usage_level

__all__ = [
    "Bookmark",
    "BookmarkStore",
    "MountPoint",
    "UsageLevel",
    "is_trash_path",
    "list_mounts",
    "list_trash",
    "purge",
    "quick_access",
    "restore",
    "send_to_trash",
    "trash_display_name",
    "trash_path",
    "usage_level",
]
