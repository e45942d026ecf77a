"""Pane browsing state and navigation history."""

from __future__ import annotations

from .history import MAX_HISTORY, NavigationHistory
from .state import PaneState, SortDirection, SortKey, matches_filter, sort_entries

__all__ = [
    "MAX_HISTORY",
    "NavigationHistory",
    "PaneState",
    "SortDirection",
    "SortKey",
    "matches_filter",
    "sort_entries",
]
