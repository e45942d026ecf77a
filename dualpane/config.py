"""Persistent JSON config helpers.

Stores listing and delete preferences (hidden files, default sort, trash use,
git status). All access is defensive: malformed or missing config falls back
safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

from .pane.state import SortDirection, SortKey

APP_NAME = "dualpane"
CONFIG_FILENAME = "config.json"
BOOKMARKS_FILENAME = "bookmarks.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
DEFAULT_CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
BOOKMARKS_PATH = CONFIG_DIR / BOOKMARKS_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    value = load_config().get("show_hidden")
    return bool(value) if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_sort_preference() -> tuple[SortKey, SortDirection]:
    """Return the persisted default sort, ``(name, asc)`` when unset or invalid."""
    config = load_config()
    try:
        key = SortKey(config.get("sort_key", SortKey.NAME.value))
    except ValueError:
        key = SortKey.NAME
    try:
        direction = SortDirection(config.get("sort_direction", SortDirection.ASCENDING.value))
    except ValueError:
        direction = SortDirection.ASCENDING
    return key, direction


def save_sort_preference(key: SortKey, direction: SortDirection) -> None:
    config = load_config()
    config["sort_key"] = SortKey(key).value
    config["sort_direction"] = SortDirection(direction).value
    save_config(config)


def load_use_trash() -> bool:
    """Whether deletes go to the trash; defaults to ``True``."""
    value = load_config().get("use_trash")
    return value if isinstance(value, bool) else True


def save_use_trash(use_trash: bool) -> None:
    config = load_config()
    config["use_trash"] = bool(use_trash)
    save_config(config)


def load_show_git_status() -> bool:
    """Whether listings inside a git worktree carry status flags; defaults to ``True``."""
    value = load_config().get("show_git_status")
    return value if isinstance(value, bool) else True


def save_show_git_status(show_git_status: bool) -> None:
    config = load_config()
    config["show_git_status"] = bool(show_git_status)
    save_config(config)


__all__ = [
    "APP_NAME",
    "BOOKMARKS_PATH",
    "CONFIG_PATH",
    "load_config",
    "load_show_git_status",
    "load_show_hidden",
    "load_sort_preference",
    "load_use_trash",
    "save_config",
    "save_show_git_status",
    "save_show_hidden",
    "save_sort_preference",
    "save_use_trash",
]
