"""Bounded back/forward navigation stacks for one pane."""

from __future__ import annotations

from pathlib import Path

MAX_HISTORY = 50


def _normalized(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path


class NavigationHistory:
    """Bounded back/forward stacks of visited directories.

    Each stack holds at most ``max_entries`` paths; pushing past the cap evicts
    the oldest. Adjacent duplicates are suppressed so back/forward never step
    onto the directory already shown.
    """

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        self.max_entries = max(1, max_entries)
        self.back: list[Path] = []
        self.forward: list[Path] = []

    def _append_unique(self, stack: list[Path], path: Path) -> None:
        path = _normalized(path)
        if stack and stack[-1] == path:
            return
        stack.append(path)
        overflow = len(stack) - self.max_entries
        if overflow > 0:
            del stack[:overflow]

    def record(self, origin: Path) -> None:
        """Push ``origin`` onto the back stack and clear forward history."""
        self._append_unique(self.back, origin)
        self.forward.clear()

    def go_back(self, current: Path) -> Path | None:
        """Pop the next back target, pushing ``current`` onto the forward stack."""
        current = _normalized(current)
        while self.back and self.back[-1] == current:
            self.back.pop()
        if not self.back:
            return None
        target = self.back.pop()
        self._append_unique(self.forward, current)
        return target

    def go_forward(self, current: Path) -> Path | None:
        """Pop the next forward target, pushing ``current`` onto the back stack."""
        current = _normalized(current)
        while self.forward and self.forward[-1] == current:
            self.forward.pop()
        if not self.forward:
            return None
        target = self.forward.pop()
        self._append_unique(self.back, current)
        return target

    def undo_back(self, target: Path, current: Path) -> None:
        """Restore stacks after a back step whose target could not be listed."""
        if self.forward and self.forward[-1] == _normalized(current):
            self.forward.pop()
        self._append_unique(self.back, target)

    def undo_forward(self, target: Path, current: Path) -> None:
        """Restore stacks after a forward step whose target could not be listed."""
        if self.back and self.back[-1] == _normalized(current):
            self.back.pop()
        self._append_unique(self.forward, target)

    @property
    def can_go_back(self) -> bool:
        return bool(self.back)

    @property
    def can_go_forward(self) -> bool:
        return bool(self.forward)


__all__ = ["MAX_HISTORY", "NavigationHistory"]
