"""Command enum and the single dispatch table every front end goes through.

Handlers take the ``AppState`` and a ``Command`` and return a typed result.
Arguments a command leaves out default to the active pane: its selection for
sources, its directory for parents and search roots, and the inactive pane's
directory for copy/move/extract destinations.

Copy, move, paste, delete, compress, extract, and search run on the
``TaskRunner``. With ``wait=True`` the handler blocks, refreshes both panes,
and returns the task's result; otherwise it returns the ``TaskHandle`` and
the front end dispatches ``REFRESH`` once the task's result event arrives.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from .. import config
from ..diff import DiffResult, diff
from ..errors import FileManagerError, InvalidOperation, NotFound
from ..file_model import Entry
from ..operations.plan import absolute
from ..operations import (
    CancelToken,
    OperationResult,
    ProgressCallback,
    compress,
    copy,
    delete,
    extract,
    mkdir,
    move,
    rename,
)
from ..pane import PaneState, SortDirection, SortKey
from ..search import SearchCriteria, SearchSummary, search
from ..sidebar import Bookmark, MountPoint, list_mounts
from .state import AppState, Clipboard, ClipboardOperation, PaneSide, refresh_pane

LOGGER = logging.getLogger(__name__)


class CommandKind(str, Enum):
    NAVIGATE = "navigate"
    BACK = "back"
    FORWARD = "forward"
    UP = "up"
    REFRESH = "refresh"
    SORT = "sort"
    FILTER = "filter"
    TOGGLE_HIDDEN = "toggle_hidden"
    COPY = "copy"
    MOVE = "move"
    DELETE = "delete"
    COMPRESS = "compress"
    EXTRACT = "extract"
    SEARCH = "search"
    DIFF = "diff"
    RENAME = "rename"
    MKDIR = "mkdir"
    COPY_TO_CLIPBOARD = "copy_to_clipboard"
    CUT_TO_CLIPBOARD = "cut_to_clipboard"
    PASTE = "paste"
    ADD_BOOKMARK = "add_bookmark"
    REMOVE_BOOKMARK = "remove_bookmark"
    MOUNTS = "mounts"
    SWITCH_PANE = "switch_pane"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    args: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def of(cls, kind: CommandKind | str, **args: object) -> Command:
        return cls(CommandKind(kind), MappingProxyType(dict(args)))

    def get(self, name: str, default: object = None) -> object:
        value = self.args.get(name)
        return default if value is None else value


@dataclass
class SearchResults:
    root: Path
    entries: list[Entry]
    summary: SearchSummary


Handler = Callable[[AppState, Command], object]
TaskBody = Callable[[CancelToken, ProgressCallback, Callable[[object], None]], object]


def _path(value: object) -> Path:
    if isinstance(value, (str, Path)):
        return Path(value).expanduser()
    raise InvalidOperation(f"expected a path, got {value!r}")


def _resolve(pane: PaneState, value: object) -> Path:
    path = _path(value)
    return absolute(path if path.is_absolute() else pane.current_path / path)


def _required(command: Command, name: str) -> object:
    value = command.args.get(name)
    if value is None or value == "":
        raise InvalidOperation(f"{command.kind.value}: missing argument {name!r}")
    return value


def _sources(state: AppState, command: Command, name: str = "sources") -> list[Path]:
    value = command.args.get(name)
    if value is None:
        paths = state.active_pane.selected_paths()
    elif isinstance(value, (str, Path)):
        paths = [_resolve(state.active_pane, value)]
    else:
        paths = [_resolve(state.active_pane, item) for item in value]
    if not paths:
        raise InvalidOperation(f"{command.kind.value}: nothing selected")
    return paths


def _single_selected(state: AppState, command: Command, name: str) -> Path:
    value = command.args.get(name)
    if value is not None:
        return _resolve(state.active_pane, value)
    selected = state.active_pane.selected_paths()
    if len(selected) != 1:
        raise InvalidOperation(f"{command.kind.value}: select exactly one entry")
    return selected[0]


def _destination(state: AppState, command: Command) -> Path:
    value = command.args.get("destination")
    if value is None:
        return state.inactive_pane.current_path
    return _resolve(state.active_pane, value)


def _refresh_all(state: AppState) -> None:
    refresh_pane(state.left)
    refresh_pane(state.right)


def _refresh_after_task(state: AppState) -> None:
    """Refresh both panes without masking the task's own result or error."""
    for pane in (state.left, state.right):
        try:
            refresh_pane(pane)
        except FileManagerError as exc:
            LOGGER.warning("could not refresh %s after task: %s", pane.current_path, exc)


def _run_task(
    state: AppState,
    command: Command,
    body: TaskBody,
    locked: Iterable[Path],
) -> object:
    handle = state.tasks.submit(command.kind.value, body, paths=locked)
    if not command.get("wait", False):
        return handle
    try:
        return handle.wait()
    finally:
        _refresh_after_task(state)


def _transfer_locks(sources: list[Path], destination: Path) -> list[Path]:
    return [*sources, *(destination / source.name for source in sources)]


# Navigation and view


def _navigate(state: AppState, command: Command) -> PaneState:
    pane = state.active_pane
    pane.navigate(_resolve(pane, _required(command, "path")))
    return pane


def _back(state: AppState, command: Command) -> bool:
    return state.active_pane.back()


def _forward(state: AppState, command: Command) -> bool:
    return state.active_pane.forward()


def _up(state: AppState, command: Command) -> bool:
    return state.active_pane.up()


def _refresh(state: AppState, command: Command) -> PaneState:
    if command.get("both", False):
        _refresh_all(state)
    else:
        refresh_pane(state.active_pane)
    return state.active_pane


def _sort(state: AppState, command: Command) -> PaneState:
    pane = state.active_pane
    key = SortKey(command.get("key", pane.sort_key))
    direction = SortDirection(command.get("direction", SortDirection.ASCENDING))
    pane.sort(key, direction)
    if command.get("persist", False):
        config.save_sort_preference(key, direction)
    return pane


def _filter(state: AppState, command: Command) -> list[Entry]:
    pattern = command.args.get("pattern")
    return state.active_pane.filter(str(pattern) if pattern else None)


def _toggle_hidden(state: AppState, command: Command) -> bool:
    visible = state.active_pane.toggle_hidden()
    config.save_show_hidden(visible)
    return visible


def _switch_pane(state: AppState, command: Command) -> PaneSide:
    return state.switch_pane()


# File operations


def _copy(state: AppState, command: Command) -> object:
    sources = _sources(state, command)
    destination = _destination(state, command)
    overwrite = bool(command.get("overwrite", False))

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        return copy(sources, destination, overwrite=overwrite, token=token, progress=on_progress)

    return _run_task(state, command, body, _transfer_locks(sources, destination))


def _move(state: AppState, command: Command) -> object:
    sources = _sources(state, command)
    destination = _destination(state, command)
    overwrite = bool(command.get("overwrite", False))

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        return move(sources, destination, overwrite=overwrite, token=token, progress=on_progress)

    return _run_task(state, command, body, _transfer_locks(sources, destination))


def _delete(state: AppState, command: Command) -> object:
    paths = _sources(state, command, "paths")
    permanent = bool(command.get("permanent", not state.use_trash))

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        return delete(paths, permanent=permanent, token=token, progress=on_progress)

    return _run_task(state, command, body, paths)


def _compress(state: AppState, command: Command) -> object:
    sources = _sources(state, command)
    value = command.args.get("archive_path")
    if value is None:
        stem = sources[0].name if len(sources) == 1 else "archive"
        archive_path = state.inactive_pane.current_path / f"{stem}.zip"
    else:
        archive_path = _resolve(state.active_pane, value)
    overwrite = bool(command.get("overwrite", False))

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        return compress(sources, archive_path, overwrite=overwrite, token=token, progress=on_progress)

    return _run_task(state, command, body, [*sources, archive_path])


def _extract(state: AppState, command: Command) -> object:
    archive_path = _single_selected(state, command, "archive_path")
    destination = _destination(state, command)
    overwrite = bool(command.get("overwrite", False))

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        return extract(archive_path, destination, overwrite=overwrite, token=token, progress=on_progress)

    return _run_task(state, command, body, [archive_path, destination])


def _rename(state: AppState, command: Command) -> Path:
    path = _single_selected(state, command, "path")
    renamed = rename(path, str(_required(command, "new_name")))
    refresh_pane(state.active_pane)
    return renamed


def _mkdir(state: AppState, command: Command) -> Path:
    parent = _resolve(state.active_pane, command.get("parent", state.active_pane.current_path))
    created = mkdir(parent, str(_required(command, "name")))
    refresh_pane(state.active_pane)
    return created


# Clipboard


def _stage(operation: ClipboardOperation) -> Handler:
    def handler(state: AppState, command: Command) -> Clipboard:
        state.clipboard = Clipboard(operation, tuple(_sources(state, command, "paths")))
        return state.clipboard

    return handler


def _paste(state: AppState, command: Command) -> object:
    clipboard = state.clipboard
    if clipboard is None:
        raise InvalidOperation("clipboard is empty")
    sources = clipboard.valid_sources()
    if not sources:
        state.clipboard = None
        raise NotFound("none of the clipboard entries exist any more")
    missing = clipboard.missing_sources()
    destination = command.get("destination")
    destination = state.active_pane.current_path if destination is None else _resolve(state.active_pane, destination)
    overwrite = bool(command.get("overwrite", False))
    operation = copy if clipboard.operation is ClipboardOperation.COPY else move

    def body(token: CancelToken, on_progress: ProgressCallback, _on_item: Callable[[object], None]) -> OperationResult:
        result = operation(sources, destination, overwrite=overwrite, token=token, progress=on_progress)
        result.warnings.extend(f"{path}: no longer exists, skipped" for path in missing)
        if clipboard.operation is ClipboardOperation.CUT and result.ok and state.clipboard is clipboard:
            state.clipboard = None
        return result

    return _run_task(state, command, body, _transfer_locks(sources, destination))


# Search and diff


def _search(state: AppState, command: Command) -> object:
    root = _resolve(state.active_pane, command.get("root", state.active_pane.current_path))
    criteria = command.get("criteria", SearchCriteria())
    if not isinstance(criteria, SearchCriteria):
        raise InvalidOperation(f"search: expected SearchCriteria, got {criteria!r}")
    limit = command.args.get("limit")
    run = search(root, criteria)

    def body(token: CancelToken, _on_progress: ProgressCallback, on_item: Callable[[object], None]) -> SearchResults:
        run.token = token
        entries: list[Entry] = []
        for entry in run:
            entries.append(entry)
            on_item(entry)
            if limit is not None and len(entries) >= int(limit):
                break
        return SearchResults(run.root, entries, run.summary)

    handle = state.tasks.submit(command.kind.value, body)
    if command.get("wait", False):
        return handle.wait()
    return handle


def _diff_pair(state: AppState, command: Command) -> tuple[Path, Path]:
    left, right = command.args.get("left"), command.args.get("right")
    if left is not None and right is not None:
        return _resolve(state.active_pane, left), _resolve(state.inactive_pane, right)
    active = state.active_pane.selected_paths()
    if len(active) == 2:
        return active[0], active[1]
    inactive = state.inactive_pane.selected_paths()
    if len(active) == 1 and len(inactive) == 1:
        return active[0], inactive[0]
    raise InvalidOperation("diff: select two files in one pane or one file in each pane")


def _diff(state: AppState, command: Command) -> DiffResult:
    left, right = _diff_pair(state, command)
    return diff(left, right)


# Sidebar


def _add_bookmark(state: AppState, command: Command) -> Bookmark:
    path = _resolve(state.active_pane, command.get("path", state.active_pane.current_path))
    label = command.args.get("label")
    return state.bookmarks.add(path, str(label) if label else None)


def _remove_bookmark(state: AppState, command: Command) -> Bookmark:
    return state.bookmarks.remove(_resolve(state.active_pane, _required(command, "path")))


def _mounts(state: AppState, command: Command) -> list[MountPoint]:
    return list_mounts()


DISPATCH: Mapping[CommandKind, Handler] = MappingProxyType(
    {
        CommandKind.NAVIGATE: _navigate,
        CommandKind.BACK: _back,
        CommandKind.FORWARD: _forward,
        CommandKind.UP: _up,
        CommandKind.REFRESH: _refresh,
        CommandKind.SORT: _sort,
        CommandKind.FILTER: _filter,
        CommandKind.TOGGLE_HIDDEN: _toggle_hidden,
        CommandKind.COPY: _copy,
        CommandKind.MOVE: _move,
        CommandKind.DELETE: _delete,
        CommandKind.COMPRESS: _compress,
        CommandKind.EXTRACT: _extract,
        CommandKind.SEARCH: _search,
        CommandKind.DIFF: _diff,
        CommandKind.RENAME: _rename,
        CommandKind.MKDIR: _mkdir,
        CommandKind.COPY_TO_CLIPBOARD: _stage(ClipboardOperation.COPY),
        CommandKind.CUT_TO_CLIPBOARD: _stage(ClipboardOperation.CUT),
        CommandKind.PASTE: _paste,
        CommandKind.ADD_BOOKMARK: _add_bookmark,
        CommandKind.REMOVE_BOOKMARK: _remove_bookmark,
        CommandKind.MOUNTS: _mounts,
        CommandKind.SWITCH_PANE: _switch_pane,
    }
)


def dispatch(state: AppState, command: Command) -> object:
    """Run ``command`` against ``state`` and return the handler's result.

    Handler errors propagate as ``FileManagerError`` subclasses.
    """
    handler = DISPATCH.get(command.kind)
    if handler is None:
        raise InvalidOperation(f"unknown command {command.kind!r}")
    LOGGER.debug("dispatch %s %s", command.kind.value, dict(command.args))
    try:
        return handler(state, command)
    except FileManagerError:
        raise
    except OSError as exc:
        raise FileManagerError(f"{command.kind.value}: {exc}") from exc


__all__ = [
    "Command",
    "CommandKind",
    "DISPATCH",
    "Handler",
    "SearchResults",
    "dispatch",
]
