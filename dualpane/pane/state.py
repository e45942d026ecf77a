"""Per-pane browsing state: location, cached entries, view, and selection.

Only ``navigate``/``back``/``forward``/``up``/``refresh`` touch the disk.
Sorting, filtering, and hidden-file toggling permute or re-derive the view
from the cached entries.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..file_model import (
    Entry,
    GitRepoInfo,
    GitStatus,
    Listing,
    collect_git_status_overlay,
    find_repo_root,
    git_repo_info,
    list_entries,
)
from .history import NavigationHistory

LOGGER = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 0.5


class SortKey(str, Enum):
    NAME = "name"
    SIZE = "size"
    MODIFIED = "modified"
    TYPE = "type"


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


_SORT_VALUES: dict[SortKey, Callable[[Entry], object]] = {
    SortKey.SIZE: lambda entry: entry.size,
    SortKey.MODIFIED: lambda entry: entry.modified_time,
    SortKey.TYPE: lambda entry: entry.extension,
}


def sort_entries(entries: list[Entry], key: SortKey, direction: SortDirection) -> list[Entry]:
    """Return ``entries`` sorted stably by ``key``.

    Ties always fall back to case-insensitive name order. Name sorting keeps
    directories ahead of files in both directions.
    """
    descending = direction == SortDirection.DESCENDING
    if key == SortKey.NAME:
        ordered = sorted(entries, key=lambda entry: entry.name.lower(), reverse=descending)
        return sorted(ordered, key=lambda entry: not entry.is_dir)
    ordered = sorted(entries, key=lambda entry: entry.name.lower())
    return sorted(ordered, key=_SORT_VALUES[key], reverse=descending)


def matches_filter(name: str, pattern: str, case_sensitive: bool = False) -> bool:
    """Substring match, or wildcard match when ``pattern`` contains ``*``/``?``."""
    if not case_sensitive:
        name = name.lower()
        pattern = pattern.lower()
    if "*" in pattern or "?" in pattern:
        return fnmatch.fnmatchcase(name, pattern)
    return pattern in name


@dataclass
class PaneState:
    """One panel's directory, entry cache, derived view, and selection.

    ``entries`` always holds the full listing (hidden files included);
    ``view`` is the derived subsequence shown to the user and selection
    indices refer to it.
    """

    current_path: Path
    entries: list[Entry] = field(default_factory=list)
    selection: set[int] = field(default_factory=set)
    sort_key: SortKey = SortKey.NAME
    sort_direction: SortDirection = SortDirection.ASCENDING
    filter_pattern: str | None = None
    hidden_files_visible: bool = False
    show_git_status: bool = False
    git_repo_root: Path | None = None
    history: NavigationHistory = field(default_factory=NavigationHistory)
    warnings: list[str] = field(default_factory=list)
    view: list[Entry] = field(default_factory=list)

    @classmethod
    def open(cls, path: Path, hidden_files_visible: bool = False, show_git_status: bool = False) -> PaneState:
        """Create a pane showing ``path``; raises if it cannot be listed."""
        pane = cls(
            current_path=path.resolve(),
            hidden_files_visible=hidden_files_visible,
            show_git_status=show_git_status,
        )
        pane._load(pane.current_path)
        return pane

    def _list(self, path: Path) -> tuple[Listing, Path | None]:
        """List ``path``; inside a worktree with git status on, attach the overlay."""
        overlay: dict[Path, GitStatus] | None = None
        repo_root = find_repo_root(path, GIT_TIMEOUT_SECONDS) if self.show_git_status else None
        if repo_root is not None:
            overlay = collect_git_status_overlay(path, GIT_TIMEOUT_SECONDS, repo_root=repo_root)
        return list_entries(path, include_hidden=True, git_status_overlay=overlay), repo_root

    def _load(self, path: Path) -> None:
        listing, repo_root = self._list(path)
        self.current_path = path
        self.git_repo_root = repo_root
        self.entries = sort_entries(listing.entries, self.sort_key, self.sort_direction)
        self.warnings = list(listing.warnings)
        if listing.skipped:
            LOGGER.warning("%s: skipped %d unreadable entries", path, listing.skipped)
        self.selection.clear()
        self._rebuild_view()

    def _rebuild_view(self, keep_selected: list[Path] | None = None) -> None:
        view = self.entries
        if not self.hidden_files_visible:
            view = [entry for entry in view if not entry.is_hidden]
        if self.filter_pattern:
            view = [entry for entry in view if matches_filter(entry.name, self.filter_pattern)]
        self.view = list(view)

        self.selection.clear()
        if keep_selected:
            wanted = set(keep_selected)
            self.selection.update(index for index, entry in enumerate(self.view) if entry.path in wanted)

    def navigate(self, path: Path) -> None:
        """Show ``path``, recording the previous location in history."""
        target = path if path.is_absolute() else self.current_path / path
        target = target.resolve()
        previous = self.current_path
        self._load(target)
        self.history.record(previous)

    def back(self) -> bool:
        """Step back in history; returns ``False`` when there is nowhere to go."""
        target = self.history.go_back(self.current_path)
        if target is None:
            return False
        try:
            self._load(target)
        except Exception:
            self.history.undo_back(target, self.current_path)
            raise
        return True

    def forward(self) -> bool:
        """Step forward in history; returns ``False`` when there is nowhere to go."""
        target = self.history.go_forward(self.current_path)
        if target is None:
            return False
        try:
            self._load(target)
        except Exception:
            self.history.undo_forward(target, self.current_path)
            raise
        return True

    def up(self) -> bool:
        parent = self.current_path.parent
        if parent == self.current_path:
            return False
        self.navigate(parent)
        return True

    def refresh(self) -> None:
        """Re-list the current directory, keeping still-present selections."""
        selected = [entry.path for entry in self.selected_entries()]
        self._load(self.current_path)
        self._rebuild_view(keep_selected=selected)

    def repo_info(self) -> GitRepoInfo | None:
        """Branch summary of the worktree being browsed, if any."""
        if self.git_repo_root is None:
            return None
        return git_repo_info(self.current_path, GIT_TIMEOUT_SECONDS, repo_root=self.git_repo_root)

    def sort(self, key: SortKey, direction: SortDirection = SortDirection.ASCENDING) -> None:
        selected = [entry.path for entry in self.selected_entries()]
        self.sort_key = SortKey(key)
        self.sort_direction = SortDirection(direction)
        self.entries = sort_entries(self.entries, self.sort_key, self.sort_direction)
        self._rebuild_view(keep_selected=selected)

    def filter(self, pattern: str | None) -> list[Entry]:
        """Apply a name filter to the view; empty clears it."""
        selected = [entry.path for entry in self.selected_entries()]
        self.filter_pattern = pattern or None
        self._rebuild_view(keep_selected=selected)
        return self.view

    def toggle_hidden(self) -> bool:
        selected = [entry.path for entry in self.selected_entries()]
        self.hidden_files_visible = not self.hidden_files_visible
        self._rebuild_view(keep_selected=selected)
        return self.hidden_files_visible

    def select(self, index: int) -> None:
        """Replace the selection with the single ``index``."""
        self._check_index(index)
        self.selection = {index}

    def toggle_selection(self, index: int) -> None:
        self._check_index(index)
        if index in self.selection:
            self.selection.discard(index)
        else:
            self.selection.add(index)

    def select_range(self, start: int, end: int) -> None:
        low, high = min(start, end), max(start, end)
        self._check_index(low)
        self._check_index(high)
        self.selection = set(range(low, high + 1))

    def select_all(self) -> None:
        self.selection = set(range(len(self.view)))

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_entries(self) -> list[Entry]:
        return [self.view[index] for index in sorted(self.selection) if index < len(self.view)]

    def selected_paths(self) -> list[Path]:
        return [entry.path for entry in self.selected_entries()]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.view):
            raise IndexError(f"selection index {index} out of range (0..{len(self.view) - 1})")


__all__ = [
    "PaneState",
    "SortDirection",
    "SortKey",
    "matches_filter",
    "sort_entries",
]
