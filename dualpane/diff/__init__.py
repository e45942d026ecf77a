"""Line-level diff of two text files."""

from .engine import DiffKind, DiffLine, DiffResult, diff, diff_lines, edit_script
from .render import highlight_diff, render_unified

__all__ = [
    "DiffKind",
    "DiffLine",
    "DiffResult",
    "diff",
    "diff_lines",
    "edit_script",
    "highlight_diff",
    "render_unified",
]
