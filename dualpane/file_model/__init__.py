"""Domain model for directory listings.

This package contains non-UI listing primitives:
- entry/listing datatypes
- filesystem scanning with best-effort skipping of unreadable children
- git status overlay collection
- extension-based preview classification
"""

from __future__ import annotations

from .types import Entry, GitRepoInfo, GitStatus, Listing
from .fs import directory_stats, entry_for_path, format_size, list_entries
from .git_status import collect_git_status_overlay, find_repo_root, git_repo_info
from .preview import is_previewable

__all__ = [
    "Entry",
    "GitRepoInfo",
    "GitStatus",
    "Listing",
    "directory_stats",
    "entry_for_path",
    "format_size",
    "list_entries",
    "collect_git_status_overlay",
    "find_repo_root",
    "git_repo_info",
    "is_previewable",
]
