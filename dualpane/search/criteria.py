"""Search criteria and per-entry predicate evaluation."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

from ..file_model import Entry
from ..pane.state import matches_filter

SECONDS_PER_DAY = 86_400


class EntryTypeFilter(str, Enum):
    ALL = "all"
    FILES = "files"
    DIRECTORIES = "directories"


@dataclass(frozen=True)
class SearchCriteria:
    """Conjunctive search filters; ``None`` fields are not applied.

    ``name_pattern`` is a wildcard pattern when it contains ``*`` or ``?``
    and a substring otherwise. Size bounds apply to files only.
    """

    name_pattern: str | None = None
    content_substring: str | None = None
    entry_type_filter: EntryTypeFilter = EntryTypeFilter.ALL
    min_size: int | None = None
    max_size: int | None = None
    modified_within_days: float | None = None
    case_sensitive: bool = False
    include_hidden: bool = False

    def matches_metadata(self, entry: Entry, now: float | None = None) -> bool:
        """Test every criterion except the content scan."""
        if self.entry_type_filter == EntryTypeFilter.FILES and entry.is_dir:
            return False
        if self.entry_type_filter == EntryTypeFilter.DIRECTORIES and not entry.is_dir:
            return False
        if self.content_substring and entry.is_dir:
            return False
        if self.name_pattern and not matches_filter(entry.name, self.name_pattern, self.case_sensitive):
            return False
        if not entry.is_dir:
            if self.min_size is not None and entry.size < self.min_size:
                return False
            if self.max_size is not None and entry.size > self.max_size:
                return False
        if self.modified_within_days is not None:
            current = time.time() if now is None else now
            if entry.modified_time < current - self.modified_within_days * SECONDS_PER_DAY:
                return False
        return True


__all__ = [
    "EntryTypeFilter",
    "SECONDS_PER_DAY",
    "SearchCriteria",
]
