"""Line-level comparison of two text files.

The edit script comes from a longest-common-subsequence table over the lines
that remain after trimming the common head and tail. Runs of removals that are
directly followed by additions are paired into ``MODIFIED`` lines when the two
sides visibly belong together.
"""

from __future__ import annotations

import difflib
import filecmp
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..errors import NotComparable, raise_for_os_error
from ..text import read_text_lines

LOGGER = logging.getLogger(__name__)

# Above this many table cells the alignment falls back to difflib's matcher.
MAX_LCS_CELLS = 4_000_000
MIN_SHARED_EDGE = 2


class DiffKind(str, Enum):
    EQUAL = "equal"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class DiffLine:
    kind: DiffKind
    left_line: str | None = None
    right_line: str | None = None
    left_number: int | None = None
    right_number: int | None = None


@dataclass
class DiffResult:
    """Ordered diff lines of ``left_path`` against ``right_path``.

    ``comparable`` is ``False`` when either side is binary; ``lines`` is then
    empty, every count is zero, and ``same_bytes`` tells whether the two
    files hold the same content.
    """

    left_path: Path
    right_path: Path
    lines: list[DiffLine] = field(default_factory=list)
    comparable: bool = True
    same_bytes: bool = False

    def _count(self, kind: DiffKind) -> int:
        return sum(1 for line in self.lines if line.kind == kind)

    @property
    def equal_count(self) -> int:
        return self._count(DiffKind.EQUAL)

    @property
    def added_count(self) -> int:
        return self._count(DiffKind.ADDED)

    @property
    def removed_count(self) -> int:
        return self._count(DiffKind.REMOVED)

    @property
    def modified_count(self) -> int:
        return self._count(DiffKind.MODIFIED)

    @property
    def identical(self) -> bool:
        if not self.comparable:
            return self.same_bytes
        return all(line.kind == DiffKind.EQUAL for line in self.lines)


# Edit operations: ("=", i, j), ("-", i, None), ("+", None, j)
_Op = tuple[str, "int | None", "int | None"]


def _lcs_ops(left: list[str], right: list[str]) -> list[_Op]:
    n, m = len(left), len(right)
    # lengths[i][j] is the LCS length of left[i:] and right[j:]
    lengths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = lengths[i], lengths[i + 1]
        for j in range(m - 1, -1, -1):
            if left[i] == right[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops: list[_Op] = []
    i = j = 0
    while i < n and j < m:
        if left[i] == right[j]:
            ops.append(("=", i, j))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            ops.append(("-", i, None))
            i += 1
        else:
            ops.append(("+", None, j))
            j += 1
    ops.extend(("-", k, None) for k in range(i, n))
    ops.extend(("+", None, k) for k in range(j, m))
    return ops


def _matcher_ops(left: list[str], right: list[str]) -> list[_Op]:
    ops: list[_Op] = []
    matcher = difflib.SequenceMatcher(a=left, b=right, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            ops.extend(("=", i1 + k, j1 + k) for k in range(i2 - i1))
            continue
        ops.extend(("-", k, None) for k in range(i1, i2))
        ops.extend(("+", None, k) for k in range(j1, j2))
    return ops


def edit_script(left: list[str], right: list[str]) -> list[_Op]:
    """Return the edit operations turning ``left`` into ``right``."""
    head = 0
    limit = min(len(left), len(right))
    while head < limit and left[head] == right[head]:
        head += 1
    tail = 0
    while tail < limit - head and left[-1 - tail] == right[-1 - tail]:
        tail += 1

    middle_left = left[head : len(left) - tail]
    middle_right = right[head : len(right) - tail]
    if len(middle_left) * len(middle_right) > MAX_LCS_CELLS:
        LOGGER.debug("diff of %d x %d lines uses the sequence matcher", len(middle_left), len(middle_right))
        middle = _matcher_ops(middle_left, middle_right)
    else:
        middle = _lcs_ops(middle_left, middle_right)

    ops: list[_Op] = [("=", k, k) for k in range(head)]
    for op, i, j in middle:
        ops.append((op, None if i is None else i + head, None if j is None else j + head))
    left_tail = len(left) - tail
    right_tail = len(right) - tail
    ops.extend(("=", left_tail + k, right_tail + k) for k in range(tail))
    return ops


def _shares_edge(first: str, second: str) -> bool:
    """Whether two lines share a common prefix or suffix worth pairing on."""
    if not first.strip() or not second.strip():
        return False
    need = min(MIN_SHARED_EDGE, len(first), len(second))
    prefix = len(os.path.commonprefix([first, second]))
    suffix = len(os.path.commonprefix([first[::-1], second[::-1]]))
    return max(prefix, suffix) >= need


def _flush_change(
    removed: list[int],
    added: list[int],
    left: list[str],
    right: list[str],
    out: list[DiffLine],
) -> None:
    for k in range(max(len(removed), len(added))):
        i = removed[k] if k < len(removed) else None
        j = added[k] if k < len(added) else None
        if i is not None and j is not None and _shares_edge(left[i], right[j]):
            out.append(DiffLine(DiffKind.MODIFIED, left[i], right[j], i + 1, j + 1))
            continue
        if i is not None:
            out.append(DiffLine(DiffKind.REMOVED, left_line=left[i], left_number=i + 1))
        if j is not None:
            out.append(DiffLine(DiffKind.ADDED, right_line=right[j], right_number=j + 1))


def diff_lines(left: list[str], right: list[str]) -> list[DiffLine]:
    """Align two line lists into ``DiffLine`` records with 1-based numbers."""
    if left == right:
        return [DiffLine(DiffKind.EQUAL, line, line, n, n) for n, line in enumerate(left, start=1)]

    out: list[DiffLine] = []
    removed: list[int] = []
    added: list[int] = []
    for op, i, j in edit_script(left, right):
        if op == "-":
            if added:
                _flush_change(removed, added, left, right, out)
                removed, added = [], []
            removed.append(i)
        elif op == "+":
            added.append(j)
        else:
            if removed or added:
                _flush_change(removed, added, left, right, out)
                removed, added = [], []
            out.append(DiffLine(DiffKind.EQUAL, left[i], right[j], i + 1, j + 1))
    if removed or added:
        _flush_change(removed, added, left, right, out)
    return out


def _load(path: Path) -> list[str] | None:
    if path.is_dir():
        raise NotComparable(f"{path} is a directory", path=path)
    try:
        return read_text_lines(path)
    except IsADirectoryError as exc:
        raise NotComparable(f"{path} is a directory", path=path) from exc
    except OSError as exc:
        raise_for_os_error(exc, path)


def diff(left_path: Path, right_path: Path) -> DiffResult:
    """Compare two files line by line.

    Directories raise ``NotComparable``; binary or non-UTF-8 input yields a
    result with ``comparable=False``.
    """
    left_path = Path(left_path)
    right_path = Path(right_path)
    left = _load(left_path)
    right = _load(right_path)
    if left is None or right is None:
        LOGGER.debug("not comparing binary input %s / %s", left_path, right_path)
        try:
            same_bytes = filecmp.cmp(left_path, right_path, shallow=False)
        except OSError as exc:
            raise_for_os_error(exc, left_path)
        return DiffResult(left_path, right_path, comparable=False, same_bytes=same_bytes)
    return DiffResult(left_path, right_path, diff_lines(left, right))


__all__ = [
    "DiffKind",
    "DiffLine",
    "DiffResult",
    "diff",
    "diff_lines",
    "edit_script",
]
