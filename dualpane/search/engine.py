"""Recursive, cancellable, criteria-driven filesystem search."""

from __future__ import annotations

import logging
import os
import stat
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import NotFound, convert_os_error
from ..file_model import Entry
from ..operations.progress import CancelToken
from .content import file_contains
from .criteria import SearchCriteria

LOGGER = logging.getLogger(__name__)


@dataclass
class SearchSummary:
    """Counters for one traversal."""

    matched: int = 0
    scanned: int = 0
    skipped_dirs: int = 0
    skipped_files: int = 0
    cancelled: bool = False
    warnings: list[str] = field(default_factory=list)


class SearchRun:
    """Lazy, restartable sequence of matching entries under ``root``.

    Every ``iter()`` starts a fresh depth-first traversal and resets
    ``summary``. Directories are descended into whether or not they match;
    symlinked directories are reported but not followed.
    """

    def __init__(self, root: Path, criteria: SearchCriteria, token: CancelToken | None = None) -> None:
        self.root = root
        self.criteria = criteria
        self.token = token
        self.summary = SearchSummary()

    def __iter__(self) -> Iterator[Entry]:
        self.summary = SearchSummary()
        return self._walk_root()

    def _walk_root(self) -> Iterator[Entry]:
        now = time.time()
        yield from self._walk(self.root, now)

    def _cancelled(self) -> bool:
        if self.token is not None and self.token.cancelled:
            self.summary.cancelled = True
            return True
        return False

    def _walk(self, directory: Path, now: float) -> Iterator[Entry]:
        try:
            with os.scandir(directory) as children:
                names = sorted((child.name for child in children), key=str.lower)
        except OSError as exc:
            self.summary.skipped_dirs += 1
            self.summary.warnings.append(f"{directory}: {exc.strerror or exc}")
            LOGGER.debug("skipping unreadable directory %s: %s", directory, exc)
            return

        for name in names:
            if self._cancelled():
                return
            if not self.criteria.include_hidden and name.startswith("."):
                continue
            path = directory / name
            try:
                link_stat = os.lstat(path)
            except OSError as exc:
                self.summary.skipped_files += 1
                LOGGER.debug("cannot stat %s: %s", path, exc)
                continue
            st = link_stat
            if stat.S_ISLNK(link_stat.st_mode):
                try:
                    st = os.stat(path)
                except OSError:
                    LOGGER.debug("dangling symlink %s", path)

            self.summary.scanned += 1
            is_dir = stat.S_ISDIR(st.st_mode)
            entry = Entry(
                name=name,
                path=path,
                is_dir=is_dir,
                size=0 if is_dir else int(st.st_size),
                modified_time=float(st.st_mtime),
                permission_bits=stat.S_IMODE(st.st_mode),
            )
            if self._matches(entry, now):
                self.summary.matched += 1
                yield entry
            if is_dir and not stat.S_ISLNK(link_stat.st_mode):
                yield from self._walk(path, now)
                if self.summary.cancelled:
                    return

    def _matches(self, entry: Entry, now: float) -> bool:
        if not self.criteria.matches_metadata(entry, now):
            return False
        if not self.criteria.content_substring:
            return True
        try:
            found = file_contains(entry.path, self.criteria.content_substring, self.criteria.case_sensitive)
        except OSError as exc:
            self.summary.skipped_files += 1
            LOGGER.debug("cannot read %s: %s", entry.path, exc)
            return False
        if found is None:
            self.summary.skipped_files += 1
            return False
        return found


def search(root: Path, criteria: SearchCriteria, token: CancelToken | None = None) -> SearchRun:
    """Validate ``root`` and return a lazy ``SearchRun`` over it.

    An unreadable or missing root raises immediately; everything below it is
    best-effort.
    """
    root = Path(os.path.abspath(root))
    try:
        with os.scandir(root):
            pass
    except NotADirectoryError as exc:
        raise NotFound(f"{root}: not a directory", path=root) from exc
    except OSError as exc:
        raise convert_os_error(exc, root) from exc
    return SearchRun(root, criteria, token)


def collect(run: SearchRun, limit: int | None = None) -> list[Entry]:
    """Materialize ``run`` into a list, stopping after ``limit`` matches."""
    out: list[Entry] = []
    for entry in run:
        out.append(entry)
        if limit is not None and len(out) >= limit:
            break
    return out


__all__ = [
    "SearchRun",
    "SearchSummary",
    "collect",
    "search",
]
