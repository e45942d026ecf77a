"""Explicit application state shared by every command handler."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .. import config
from ..errors import NotFound
from ..operations import TaskRunner
from ..pane import PaneState
from ..sidebar import BookmarkStore

LOGGER = logging.getLogger(__name__)


class ClipboardOperation(str, Enum):
    COPY = "copy"
    CUT = "cut"


@dataclass(frozen=True)
class Clipboard:
    """Paths staged for a later paste.

    Sources may disappear after they were staged; ``valid_sources`` and
    ``missing_sources`` re-check the filesystem on every call.
    """

    operation: ClipboardOperation
    sources: tuple[Path, ...]

    def valid_sources(self) -> list[Path]:
        return [path for path in self.sources if os.path.lexists(path)]

    def missing_sources(self) -> list[Path]:
        return [path for path in self.sources if not os.path.lexists(path)]


class PaneSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def other(self) -> PaneSide:
        return PaneSide.RIGHT if self is PaneSide.LEFT else PaneSide.LEFT


@dataclass
class AppState:
    """Both panes, the active side, the clipboard, bookmarks, and background tasks."""

    left: PaneState
    right: PaneState
    bookmarks: BookmarkStore
    tasks: TaskRunner = field(default_factory=TaskRunner)
    active: PaneSide = PaneSide.LEFT
    clipboard: Clipboard | None = None
    use_trash: bool = True

    @classmethod
    def create(
        cls,
        left_path: Path,
        right_path: Path | None = None,
        bookmarks: BookmarkStore | None = None,
        tasks: TaskRunner | None = None,
    ) -> AppState:
        """Open both panes using the persisted listing and trash preferences."""
        show_hidden = config.load_show_hidden()
        show_git_status = config.load_show_git_status()
        sort_key, sort_direction = config.load_sort_preference()
        panes = []
        for path in (left_path, right_path if right_path is not None else left_path):
            pane = PaneState.open(Path(path), hidden_files_visible=show_hidden, show_git_status=show_git_status)
            pane.sort(sort_key, sort_direction)
            panes.append(pane)
        return cls(
            left=panes[0],
            right=panes[1],
            bookmarks=bookmarks if bookmarks is not None else BookmarkStore(),
            tasks=tasks if tasks is not None else TaskRunner(),
            use_trash=config.load_use_trash(),
        )

    def pane(self, side: PaneSide | str) -> PaneState:
        return self.left if PaneSide(side) is PaneSide.LEFT else self.right

    @property
    def active_pane(self) -> PaneState:
        return self.pane(self.active)

    @property
    def inactive_pane(self) -> PaneState:
        return self.pane(self.active.other)

    def switch_pane(self) -> PaneSide:
        self.active = self.active.other
        return self.active


def refresh_pane(pane: PaneState) -> None:
    """Re-list ``pane``; if its directory vanished, fall back to the nearest existing ancestor."""
    try:
        pane.refresh()
        return
    except NotFound:
        LOGGER.info("%s no longer exists", pane.current_path)
    for ancestor in pane.current_path.parents:
        if ancestor.is_dir():
            pane.navigate(ancestor)
            return


__all__ = [
    "AppState",
    "Clipboard",
    "ClipboardOperation",
    "PaneSide",
    "refresh_pane",
]
