"""Unified-style text rendering of a ``DiffResult`` and terminal coloring."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import DiffLexer

from .engine import DiffKind, DiffLine, DiffResult


def _hunk_header(lines: list[DiffLine]) -> str:
    left = [line.left_number for line in lines if line.left_number is not None]
    right = [line.right_number for line in lines if line.right_number is not None]
    left_start = left[0] if left else 0
    right_start = right[0] if right else 0
    return f"@@ -{left_start},{len(left)} +{right_start},{len(right)} @@"


def _body(line: DiffLine) -> list[str]:
    if line.kind == DiffKind.EQUAL:
        return [f" {line.left_line}"]
    if line.kind == DiffKind.REMOVED:
        return [f"-{line.left_line}"]
    if line.kind == DiffKind.ADDED:
        return [f"+{line.right_line}"]
    return [f"-{line.left_line}", f"+{line.right_line}"]


def _hunks(lines: list[DiffLine], context: int) -> list[list[DiffLine]]:
    changed = [index for index, line in enumerate(lines) if line.kind != DiffKind.EQUAL]
    hunks: list[list[DiffLine]] = []
    start = end = -1
    for index in changed:
        lo = max(0, index - context)
        hi = min(len(lines), index + context + 1)
        if start >= 0 and lo <= end:
            end = max(end, hi)
            continue
        if start >= 0:
            hunks.append(lines[start:end])
        start, end = lo, hi
    if start >= 0:
        hunks.append(lines[start:end])
    return hunks


def render_unified(result: DiffResult, context: int = 3) -> str:
    """Render ``result`` as unified diff text with ``context`` lines around changes.

    Identical inputs render only the file header, binary ones included;
    differing binary inputs render a single ``Binary files ... differ`` line.
    """
    if not result.comparable and not result.same_bytes:
        return f"Binary files {result.left_path} and {result.right_path} differ\n"

    out = [f"--- {result.left_path}", f"+++ {result.right_path}"]
    for hunk in _hunks(result.lines, context):
        out.append(_hunk_header(hunk))
        for line in hunk:
            out.extend(_body(line))
    return "\n".join(out) + "\n"


def highlight_diff(text: str) -> str:
    """Colorize unified diff text for a terminal."""
    return highlight(text, DiffLexer(), TerminalFormatter())


__all__ = ["highlight_diff", "render_unified"]
