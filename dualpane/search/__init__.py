"""Search package exports.

Combines criteria evaluation, content scanning, and the lazy traversal in
one import surface.
"""

from __future__ import annotations

from .content import file_contains
from .criteria import EntryTypeFilter, SearchCriteria
from .engine import SearchRun, SearchSummary, collect, search

__all__ = [
    "EntryTypeFilter",
    "SearchCriteria",
    "SearchRun",
    "SearchSummary",
    "collect",
    "file_contains",
    "search",
]
