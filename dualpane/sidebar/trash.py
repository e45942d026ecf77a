"""Platform trash location, listing, restore, and purge.

Sending to the trash goes through ``send2trash``; browsing the trash is an
ordinary directory listing of the platform's trash files directory.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from send2trash import send2trash

from ..errors import InvalidOperation, NotFound
from ..file_model import Listing, list_entries
from ..operations import CancelToken, OperationResult, ProgressCallback, copy, delete, is_within
from ..operations.plan import absolute

LOGGER = logging.getLogger(__name__)


def trash_path(home: Path | None = None, platform: str | None = None) -> Path | None:
    """Return the directory holding trashed files, or ``None`` when unknown.

    Linux prefers the XDG location and falls back to ``~/.Trash``; both must
    exist. macOS always uses ``~/.Trash``. Windows has no browsable path.
    """
    home = Path.home() if home is None else home
    platform = sys.platform if platform is None else platform
    if platform.startswith("win"):
        return None
    if platform == "darwin":
        return home / ".Trash"
    xdg_trash = home / ".local" / "share" / "Trash" / "files"
    if xdg_trash.is_dir():
        return xdg_trash
    legacy_trash = home / ".Trash"
    if legacy_trash.is_dir():
        return legacy_trash
    return None


def trash_display_name(platform: str | None = None) -> str:
    platform = sys.platform if platform is None else platform
    return "Recycle Bin" if platform.startswith("win") else "Trash"


def is_trash_path(path: Path, trash: Path | None = None) -> bool:
    """Whether ``path`` is the trash directory or lies inside it."""
    trash = trash_path() if trash is None else trash
    if trash is None:
        return False
    return is_within(absolute(path), absolute(trash))


def send_to_trash(path: Path) -> None:
    """Move ``path`` to the platform trash; raises ``OSError`` on failure."""
    LOGGER.debug("sending %s to trash", path)
    send2trash(str(path))


def _require_trash(trash: Path | None) -> Path:
    trash = trash_path() if trash is None else trash
    if trash is None or not trash.is_dir():
        raise NotFound("no trash directory on this platform", path=trash)
    return trash


def list_trash(include_hidden: bool = True, trash: Path | None = None) -> Listing:
    """List the trash directory's entries."""
    return list_entries(_require_trash(trash), include_hidden=include_hidden)


def restore(
    paths: list[Path],
    destination: Path,
    overwrite: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Copy trashed ``paths`` back into ``destination``."""
    return copy(paths, destination, overwrite=overwrite, token=token, progress=progress)


def purge(
    paths: list[Path],
    trash: Path | None = None,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Permanently delete ``paths``, all of which must live inside the trash."""
    trash = _require_trash(trash)
    outside = [path for path in paths if not is_trash_path(path, trash) or absolute(path) == absolute(trash)]
    if outside:
        raise InvalidOperation(f"{outside[0]} is not inside the trash", path=outside[0])
    return delete(paths, permanent=True, token=token, progress=progress)


__all__ = [
    "is_trash_path",
    "list_trash",
    "purge",
    "restore",
    "send_to_trash",
    "trash_display_name",
    "trash_path",
]
