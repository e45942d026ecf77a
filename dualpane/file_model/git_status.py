"""Git status overlay for directory listings.

Collects per-path working-tree flags with ``git status --porcelain`` and
propagates them to ancestor directories so folders show that they contain
changes.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .types import GitRepoInfo, GitStatus

_STATUS_CODES = {
    "M": GitStatus.MODIFIED,
    "T": GitStatus.MODIFIED,
    "A": GitStatus.ADDED,
    "D": GitStatus.DELETED,
    "R": GitStatus.RENAMED,
    "C": GitStatus.COPIED,
}


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def find_repo_root(path: Path, timeout_seconds: float = 0.25) -> Path | None:
    """Return the worktree root containing ``path`` or ``None``."""
    proc = _run_git(path, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top = proc.stdout.strip()
    return Path(top).resolve() if top else None


def _iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        records.append((status, token[3:]))

        # Renames and copies carry the source path as an extra token.
        if "R" in status or "C" in status:
            index += 1

    return records


def parse_status_code(code: str) -> GitStatus:
    """Map a porcelain ``XY`` code to a ``GitStatus``, worktree column first."""
    if code == "??":
        return GitStatus.UNTRACKED
    if code == "!!":
        return GitStatus.IGNORED
    for char in (code[1:2], code[:1]):
        status = _STATUS_CODES.get(char)
        if status is not None:
            return status
    return GitStatus.UNMODIFIED


def collect_git_status_overlay(
    directory: Path,
    timeout_seconds: float = 0.25,
    repo_root: Path | None = None,
) -> dict[Path, GitStatus]:
    """Return git status for paths under ``directory``.

    Outside a worktree, or when git is unavailable, the overlay is empty.
    Pass ``repo_root`` when it is already known to skip the lookup.
    """
    directory = directory.resolve()
    if repo_root is None:
        repo_root = find_repo_root(directory, timeout_seconds)
    if repo_root is None:
        return {}

    proc = _run_git(
        repo_root,
        ["status", "--porcelain=v1", "-z", "--untracked-files=normal", "--ignored"],
        timeout_seconds,
    )
    if proc is None or proc.returncode != 0:
        return {}

    overlay: dict[Path, GitStatus] = {}
    for code, rel_path in _iter_porcelain_records(proc.stdout):
        if not rel_path:
            continue
        status = parse_status_code(code)
        target = repo_root / rel_path.rstrip("/")
        overlay[target] = status
        if status == GitStatus.IGNORED:
            continue

        parent = target.parent
        while parent != repo_root and parent.is_relative_to(repo_root):
            overlay.setdefault(parent, GitStatus.MODIFIED)
            parent = parent.parent

    return overlay


def parse_branch_status(output: str) -> tuple[str, int, int, bool]:
    """Read ``(branch, ahead, behind, has_changes)`` from ``status --porcelain=v2 --branch``."""
    branch = "HEAD"
    ahead = behind = 0
    has_changes = False
    for line in output.splitlines():
        if line.startswith("# branch.head "):
            head = line[len("# branch.head ") :].strip()
            branch = "HEAD (detached)" if head == "(detached)" else head
        elif line.startswith("# branch.ab "):
            for token in line[len("# branch.ab ") :].split():
                if token.startswith("+") and token[1:].isdigit():
                    ahead = int(token[1:])
                elif token.startswith("-") and token[1:].isdigit():
                    behind = int(token[1:])
        elif line and not line.startswith("#"):
            has_changes = True
    return branch, ahead, behind, has_changes


def git_repo_info(path: Path, timeout_seconds: float = 0.25, repo_root: Path | None = None) -> GitRepoInfo | None:
    """Return branch, ahead/behind counts, and dirtiness for the worktree holding ``path``."""
    if repo_root is None:
        repo_root = find_repo_root(path, timeout_seconds)
    if repo_root is None:
        return None
    proc = _run_git(repo_root, ["status", "--porcelain=v2", "--branch", "--untracked-files=normal"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    branch, ahead, behind, has_changes = parse_branch_status(proc.stdout)
    return GitRepoInfo(repo_root, branch, ahead, behind, has_changes)


__all__ = [
    "collect_git_status_overlay",
    "find_repo_root",
    "git_repo_info",
    "parse_branch_status",
    "parse_status_code",
]
