"""Application state and the command dispatch table."""

from __future__ import annotations

from .state import AppState, Clipboard, ClipboardOperation, PaneSide, refresh_pane
from .handlers import DISPATCH, Command, CommandKind, Handler, SearchResults, dispatch

__all__ = [
    "AppState",
    "Clipboard",
    "ClipboardOperation",
    "Command",
    "CommandKind",
    "DISPATCH",
    "Handler",
    "PaneSide",
    "SearchResults",
    "dispatch",
    "refresh_pane",
]
