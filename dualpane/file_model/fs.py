"""Filesystem scanning for pane listings."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from ..errors import NotFound, convert_os_error
from .types import Entry, GitStatus, Listing

LOGGER = logging.getLogger(__name__)


def _stat_child(child: os.DirEntry[str]) -> os.stat_result:
    """Stat a child following symlinks; broken links fall back to ``lstat``."""
    try:
        return child.stat(follow_symlinks=True)
    except FileNotFoundError:
        return child.stat(follow_symlinks=False)


def entry_for_path(path: Path, git_status: GitStatus | None = None) -> Entry:
    """Build an ``Entry`` for a single path, raising engine errors on failure."""
    try:
        st = path.stat()
    except OSError as exc:
        raise convert_os_error(exc, path) from exc
    return Entry(
        name=path.name or str(path),
        path=path,
        is_dir=stat.S_ISDIR(st.st_mode),
        size=0 if stat.S_ISDIR(st.st_mode) else int(st.st_size),
        modified_time=float(st.st_mtime),
        permission_bits=stat.S_IMODE(st.st_mode),
        git_status=git_status,
    )


def list_entries(
    directory: Path,
    include_hidden: bool = True,
    git_status_overlay: dict[Path, GitStatus] | None = None,
) -> Listing:
    """List the children of ``directory``.

    Children that cannot be stat'ed are skipped and reported through
    ``Listing.skipped``/``Listing.warnings``. An unreadable or missing
    ``directory`` raises ``NotFound`` or ``PermissionDenied``.
    """
    try:
        root_stat = directory.stat()
    except OSError as exc:
        raise convert_os_error(exc, directory) from exc
    if not stat.S_ISDIR(root_stat.st_mode):
        raise NotFound(f"{directory}: not a directory", path=directory)

    try:
        resolved_directory = directory.resolve()
    except OSError:
        resolved_directory = directory

    listing = Listing(path=directory)
    try:
        with os.scandir(directory) as children:
            for child in children:
                name = child.name
                if not include_hidden and name.startswith("."):
                    continue
                child_path = Path(child.path)
                try:
                    st = _stat_child(child)
                except OSError as exc:
                    listing.skipped += 1
                    listing.warnings.append(f"{child_path}: {exc.strerror or exc}")
                    LOGGER.debug("skipping unreadable entry %s: %s", child_path, exc)
                    continue

                is_dir = stat.S_ISDIR(st.st_mode)
                git_status: GitStatus | None = None
                if git_status_overlay is not None:
                    git_status = git_status_overlay.get(resolved_directory / name, GitStatus.UNMODIFIED)

                listing.entries.append(
                    Entry(
                        name=name,
                        path=child_path,
                        is_dir=is_dir,
                        size=0 if is_dir else int(st.st_size),
                        modified_time=float(st.st_mtime),
                        permission_bits=stat.S_IMODE(st.st_mode),
                        git_status=git_status,
                    )
                )
    except OSError as exc:
        raise convert_os_error(exc, directory) from exc

    listing.entries.sort(key=lambda item: (not item.is_dir, item.name.lower()))
    return listing


def directory_stats(entries: list[Entry]) -> tuple[int, int, int]:
    """Return ``(folder_count, file_count, total_file_size)`` for a listing."""
    folders = sum(1 for entry in entries if entry.is_dir)
    files = len(entries) - folders
    total_size = sum(entry.size for entry in entries if not entry.is_dir)
    return folders, files, total_size


def format_size(size: int) -> str:
    """Format a byte count as ``B``/``KB``/``MB``/``GB`` with two decimals."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if size >= gb:
        return f"{size / gb:.2f} GB"
    if size >= mb:
        return f"{size / mb:.2f} MB"
    if size >= kb:
        return f"{size / kb:.2f} KB"
    return f"{size} B"


__all__ = [
    "directory_stats",
    "entry_for_path",
    "format_size",
    "list_entries",
]
