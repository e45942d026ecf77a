"""Command-line front door for dualpane.

Every subcommand builds an ``AppState`` rooted at the working directory and
goes through the same command dispatch table an interactive front end uses.
Engine errors surface as ``SystemExit`` messages.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path

from .commands import AppState, Command, CommandKind, SearchResults, dispatch
from .diff import DiffResult, highlight_diff, render_unified
from .errors import FileManagerError
from .file_model import Entry, GitRepoInfo, directory_stats, entry_for_path, format_size
from .operations import OperationResult
from .pane import SortDirection, SortKey
from .search import EntryTypeFilter, SearchCriteria
from .sidebar import list_trash, purge, quick_access, restore, trash_path


def _non_negative_int(value: str) -> int:
    """argparse type for sizes and counts."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _format_entry(entry: Entry) -> str:
    marker = entry.git_status.value if entry.git_status is not None and entry.git_status.value else " "
    size = "-" if entry.is_dir else format_size(entry.size)
    stamp = time.strftime("%Y-%m-%d %H:%M", time.localtime(entry.modified_time))
    name = f"{entry.name}/" if entry.is_dir else entry.name
    return f"{marker} {entry.permission_string():<16} {size:>10}  {stamp}  {name}"


def _format_repo_info(info: GitRepoInfo) -> str:
    text = f"git: {info.branch} (ahead {info.ahead}, behind {info.behind})"
    if info.has_changes:
        text += ", uncommitted changes"
    return text


def _print_result(result: OperationResult) -> None:
    print(result.summary())
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    result.raise_for_failures()


def _cmd_ls(state: AppState, args: argparse.Namespace) -> None:
    target = Path(args.path).expanduser()
    if not target.is_absolute():
        target = state.active_pane.current_path / target
    if target.exists() and not target.is_dir():
        print(_format_entry(entry_for_path(target)))
        return
    if args.no_git:
        state.active_pane.show_git_status = False
    pane = dispatch(state, Command.of(CommandKind.NAVIGATE, path=args.path))
    if args.all != pane.hidden_files_visible:
        pane.toggle_hidden()
    direction = SortDirection.DESCENDING if args.reverse else SortDirection.ASCENDING
    dispatch(state, Command.of(CommandKind.SORT, key=args.sort, direction=direction))
    if args.filter:
        dispatch(state, Command.of(CommandKind.FILTER, pattern=args.filter))
    for entry in pane.view:
        print(_format_entry(entry))
    for warning in pane.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    folders, files, total_size = directory_stats(pane.view)
    print(f"{folders} folders, {files} files, {format_size(total_size)}", file=sys.stderr)
    info = pane.repo_info()
    if info is not None:
        print(_format_repo_info(info), file=sys.stderr)


def _cmd_search(state: AppState, args: argparse.Namespace) -> None:
    criteria = SearchCriteria(
        name_pattern=args.name,
        content_substring=args.content,
        entry_type_filter=EntryTypeFilter(args.type),
        min_size=args.min_size,
        max_size=args.max_size,
        modified_within_days=args.days,
        case_sensitive=args.case_sensitive,
        include_hidden=args.hidden,
    )
    results: SearchResults = dispatch(
        state,
        Command.of(CommandKind.SEARCH, root=args.root, criteria=criteria, limit=args.limit, wait=True),
    )
    for entry in results.entries:
        print(entry.path)
    summary = results.summary
    print(
        f"{summary.matched} matches, {summary.scanned} scanned, "
        f"{summary.skipped_dirs} unreadable directories skipped",
        file=sys.stderr,
    )


def _cmd_diff(state: AppState, args: argparse.Namespace) -> None:
    result: DiffResult = dispatch(state, Command.of(CommandKind.DIFF, left=args.left, right=args.right))
    text = render_unified(result, context=args.context)
    if not args.no_color and sys.stdout.isatty():
        text = highlight_diff(text)
    sys.stdout.write(text)
    if result.comparable:
        print(
            f"{result.equal_count} equal, {result.modified_count} modified, "
            f"{result.added_count} added, {result.removed_count} removed",
            file=sys.stderr,
        )


def _transfer(kind: CommandKind) -> Callable[[AppState, argparse.Namespace], None]:
    def run(state: AppState, args: argparse.Namespace) -> None:
        command = Command.of(
            kind,
            sources=args.sources,
            destination=args.destination,
            overwrite=args.overwrite,
            wait=True,
        )
        _print_result(dispatch(state, command))

    return run


def _cmd_rm(state: AppState, args: argparse.Namespace) -> None:
    permanent = args.permanent or None
    _print_result(dispatch(state, Command.of(CommandKind.DELETE, paths=args.paths, permanent=permanent, wait=True)))


def _cmd_zip(state: AppState, args: argparse.Namespace) -> None:
    command = Command.of(
        CommandKind.COMPRESS,
        sources=args.sources,
        archive_path=args.archive,
        overwrite=args.overwrite,
        wait=True,
    )
    _print_result(dispatch(state, command))


def _cmd_unzip(state: AppState, args: argparse.Namespace) -> None:
    command = Command.of(
        CommandKind.EXTRACT,
        archive_path=args.archive,
        destination=args.destination or ".",
        overwrite=args.overwrite,
        wait=True,
    )
    _print_result(dispatch(state, command))


def _cmd_mkdir(state: AppState, args: argparse.Namespace) -> None:
    target = Path(args.path)
    print(dispatch(state, Command.of(CommandKind.MKDIR, parent=target.parent, name=target.name)))


def _cmd_rename(state: AppState, args: argparse.Namespace) -> None:
    print(dispatch(state, Command.of(CommandKind.RENAME, path=args.path, new_name=args.new_name)))


def _cmd_bookmarks(state: AppState, args: argparse.Namespace) -> None:
    if args.action == "add":
        bookmark = dispatch(state, Command.of(CommandKind.ADD_BOOKMARK, path=args.path, label=args.label))
        print(f"added {bookmark.label}: {bookmark.path}")
        return
    if args.action == "remove":
        bookmark = dispatch(state, Command.of(CommandKind.REMOVE_BOOKMARK, path=args.path))
        print(f"removed {bookmark.label}: {bookmark.path}")
        return
    for bookmark in quick_access():
        print(f"* {bookmark.label:<12} {bookmark.path}")
    for bookmark in state.bookmarks:
        print(f"  {bookmark.label:<12} {bookmark.path}")


def _cmd_mounts(state: AppState, args: argparse.Namespace) -> None:
    for mount in dispatch(state, Command.of(CommandKind.MOUNTS)):
        flag = "R" if mount.is_removable else " "
        print(
            f"{flag} {str(mount.mount_path):<24} {mount.filesystem_type:<8} "
            f"{format_size(mount.used_bytes):>10} / {format_size(mount.total_bytes):<10} "
            f"{mount.usage_percent:5.1f}% {mount.usage_level.value}"
        )


def _cmd_trash(state: AppState, args: argparse.Namespace) -> None:
    if args.action == "restore":
        if not args.paths:
            raise SystemExit("trash restore: nothing to restore")
        destination = Path(args.to) if args.to else state.active_pane.current_path
        _print_result(restore([Path(path) for path in args.paths], destination))
        return
    if args.action == "purge":
        if not args.paths:
            raise SystemExit("trash purge: nothing to purge")
        _print_result(purge([Path(path) for path in args.paths]))
        return
    location = trash_path()
    if location is None:
        raise SystemExit("No trash directory on this platform.")
    for entry in list_trash().entries:
        print(_format_entry(entry))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Two-pane file manager engine: browse, copy, search, and diff files.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine activity to stderr.")
    commands = parser.add_subparsers(dest="command", required=True)

    ls_parser = commands.add_parser("ls", help="List a directory.")
    ls_parser.add_argument("path", nargs="?", default=".", help="Directory to list. Defaults to current directory.")
    ls_parser.add_argument("-a", "--all", action="store_true", help="Show hidden entries.")
    ls_parser.add_argument("--sort", choices=[key.value for key in SortKey], default=SortKey.NAME.value)
    ls_parser.add_argument("-r", "--reverse", action="store_true", help="Sort descending.")
    ls_parser.add_argument("--filter", default=None, help="Only show names matching PATTERN (substring or glob).")
    ls_parser.add_argument("--no-git", action="store_true", help="Skip the git status column and branch summary.")
    ls_parser.set_defaults(handler=_cmd_ls)

    search_parser = commands.add_parser("search", help="Search a directory tree.")
    search_parser.add_argument("root", nargs="?", default=".")
    search_parser.add_argument("--name", default=None, help="Wildcard name pattern, e.g. '*.txt'.")
    search_parser.add_argument("--content", default=None, help="Text the file must contain.")
    search_parser.add_argument("--type", choices=[kind.value for kind in EntryTypeFilter], default="all")
    search_parser.add_argument("--min-size", type=_non_negative_int, default=None)
    search_parser.add_argument("--max-size", type=_non_negative_int, default=None)
    search_parser.add_argument("--days", type=float, default=None, help="Modified within the last DAYS days.")
    search_parser.add_argument("--case-sensitive", action="store_true")
    search_parser.add_argument("--hidden", action="store_true", help="Include hidden entries.")
    search_parser.add_argument("--limit", type=_non_negative_int, default=None)
    search_parser.set_defaults(handler=_cmd_search)

    diff_parser = commands.add_parser("diff", help="Compare two text files line by line.")
    diff_parser.add_argument("left")
    diff_parser.add_argument("right")
    diff_parser.add_argument("-U", "--context", type=_non_negative_int, default=3)
    diff_parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    diff_parser.set_defaults(handler=_cmd_diff)

    for name, kind, help_text in (
        ("cp", CommandKind.COPY, "Copy files and directories into DESTINATION."),
        ("mv", CommandKind.MOVE, "Move files and directories into DESTINATION."),
    ):
        transfer_parser = commands.add_parser(name, help=help_text)
        transfer_parser.add_argument("sources", nargs="+")
        transfer_parser.add_argument("destination")
        transfer_parser.add_argument("--overwrite", action="store_true", help="Replace existing destinations.")
        transfer_parser.set_defaults(handler=_transfer(kind))

    rm_parser = commands.add_parser("rm", help="Delete to the trash, or permanently.")
    rm_parser.add_argument("paths", nargs="+")
    rm_parser.add_argument("--permanent", action="store_true", help="Skip the trash.")
    rm_parser.set_defaults(handler=_cmd_rm)

    zip_parser = commands.add_parser("zip", help="Compress sources into a new ZIP archive.")
    zip_parser.add_argument("archive")
    zip_parser.add_argument("sources", nargs="+")
    zip_parser.add_argument("--overwrite", action="store_true")
    zip_parser.set_defaults(handler=_cmd_zip)

    unzip_parser = commands.add_parser("unzip", help="Extract a ZIP archive.")
    unzip_parser.add_argument("archive")
    unzip_parser.add_argument("destination", nargs="?", default=None)
    unzip_parser.add_argument("--overwrite", action="store_true")
    unzip_parser.set_defaults(handler=_cmd_unzip)

    mkdir_parser = commands.add_parser("mkdir", help="Create a directory.")
    mkdir_parser.add_argument("path")
    mkdir_parser.set_defaults(handler=_cmd_mkdir)

    rename_parser = commands.add_parser("rename", help="Rename an entry within its directory.")
    rename_parser.add_argument("path")
    rename_parser.add_argument("new_name")
    rename_parser.set_defaults(handler=_cmd_rename)

    bookmarks_parser = commands.add_parser("bookmarks", help="List, add, or remove bookmarks.")
    bookmarks_parser.add_argument("action", nargs="?", choices=["list", "add", "remove"], default="list")
    bookmarks_parser.add_argument("path", nargs="?", default=".")
    bookmarks_parser.add_argument("--label", default=None)
    bookmarks_parser.set_defaults(handler=_cmd_bookmarks)

    mounts_parser = commands.add_parser("mounts", help="Show mounted filesystems and usage.")
    mounts_parser.set_defaults(handler=_cmd_mounts)

    trash_parser = commands.add_parser("trash", help="List, restore from, or purge the trash.")
    trash_parser.add_argument("action", nargs="?", choices=["list", "restore", "purge"], default="list")
    trash_parser.add_argument("paths", nargs="*")
    trash_parser.add_argument("--to", default=None, help="Restore destination. Defaults to current directory.")
    trash_parser.set_defaults(handler=_cmd_trash)
    return parser


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and run one subcommand.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used as the active pane.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    start = Path(default_path) if default_path is not None else Path.cwd()
    if not start.exists():
        raise SystemExit(f"Path not found: {start}")
    try:
        state = AppState.create(start)
        args.handler(state, args)
    except FileManagerError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
