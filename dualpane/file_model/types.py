"""Domain datatypes for directory listings."""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .preview import is_previewable


class GitStatus(str, Enum):
    """Working-tree state reported by ``git status`` for one path."""

    UNMODIFIED = ""
    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNTRACKED = "?"
    IGNORED = "!"


@dataclass(frozen=True)
class GitRepoInfo:
    """Branch summary of the worktree a pane is browsing."""

    root: Path
    branch: str
    ahead: int = 0
    behind: int = 0
    has_changes: bool = False


@dataclass(frozen=True)
class Entry:
    """One directory child plus the metadata observed when it was listed."""

    name: str
    path: Path
    is_dir: bool
    size: int = 0
    modified_time: float = 0.0
    permission_bits: int = 0
    git_status: GitStatus | None = None

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")

    @property
    def extension(self) -> str:
        if self.is_dir:
            return ""
        return self.path.suffix.lower().lstrip(".")

    @property
    def is_previewable(self) -> bool:
        return not self.is_dir and is_previewable(self.path)

    def permission_string(self) -> str:
        """Render permission bits as ``rwxr-xr-x (755)``."""
        return f"{stat.filemode(self.permission_bits)[1:]} ({self.permission_bits & 0o777:o})"


@dataclass
class Listing:
    """Result of listing one directory.

    ``skipped`` counts children that could not be stat'ed; each one also
    contributes a line to ``warnings``.
    """

    path: Path
    entries: list[Entry] = field(default_factory=list)
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "Entry",
    "GitRepoInfo",
    "GitStatus",
    "Listing",
]
