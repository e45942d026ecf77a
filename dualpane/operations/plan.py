"""Plan phase for copy/move: enumerate and validate before any mutation.

A plan is an ordered list of ``(source, destination)`` items where every
directory precedes its children, plus the top-level items rejected during
validation (missing sources, collisions, self-containment).
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..errors import ErrorKind, error_kind_for

LOGGER = logging.getLogger(__name__)


class ItemKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class PlanItem:
    source: Path
    destination: Path
    kind: ItemKind
    size: int = 0
    root: Path | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind == ItemKind.DIRECTORY


@dataclass
class TransferPlan:
    """Validated copy/move plan.

    ``roots`` maps each accepted top-level source to its destination;
    ``cross_device`` lists the accepted sources living on another filesystem
    than the destination directory.
    """

    destination_dir: Path
    items: list[PlanItem] = field(default_factory=list)
    roots: dict[Path, Path] = field(default_factory=dict)
    rejected: list[tuple[Path, ErrorKind, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cross_device: set[Path] = field(default_factory=set)
    overwrite: bool = False

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.items if item.kind == ItemKind.FILE)

    def items_for(self, root: Path) -> list[PlanItem]:
        return [item for item in self.items if item.root == root]


def absolute(path: Path) -> Path:
    """Absolute, normalized path without following the final symlink."""
    return Path(os.path.abspath(path))


def is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` equals ``root`` or lies underneath it."""
    return path == root or root in path.parents


def same_device(first: Path, second: Path) -> bool:
    """Return whether both paths live on the same filesystem."""
    try:
        return os.lstat(first).st_dev == os.stat(second).st_dev
    except OSError:
        return False


def _item_kind(st: os.stat_result) -> ItemKind:
    if stat.S_ISLNK(st.st_mode):
        return ItemKind.SYMLINK
    if stat.S_ISDIR(st.st_mode):
        return ItemKind.DIRECTORY
    return ItemKind.FILE


def iter_tree(
    source: Path,
    destination: Path,
    root: Path | None = None,
    errors: list[tuple[Path, ErrorKind, str]] | None = None,
) -> Iterator[PlanItem]:
    """Yield plan items for ``source`` depth-first, directories before children.

    Symlinks are never followed. Children are visited in case-insensitive
    name order so plans are deterministic. When ``errors`` is given,
    unreadable subdirectories are recorded there and not descended into;
    otherwise the ``OSError`` propagates.
    """
    st = os.lstat(source)
    kind = _item_kind(st)
    yield PlanItem(
        source=source,
        destination=destination,
        kind=kind,
        size=int(st.st_size) if kind == ItemKind.FILE else 0,
        root=root if root is not None else source,
    )
    if kind != ItemKind.DIRECTORY:
        return
    try:
        with os.scandir(source) as children:
            names = sorted((child.name for child in children), key=str.lower)
    except OSError as exc:
        if errors is None or root is None:
            raise
        errors.append((source, error_kind_for(exc), exc.strerror or str(exc)))
        LOGGER.warning("cannot enumerate %s: %s", source, exc)
        return
    for name in names:
        yield from iter_tree(source / name, destination / name, root if root is not None else source, errors)


def build_transfer_plan(
    sources: list[Path],
    destination_dir: Path,
    overwrite: bool = False,
    for_move: bool = False,
) -> TransferPlan:
    """Enumerate and validate a copy/move of ``sources`` into ``destination_dir``.

    Rejected top-level sources are recorded with a reason and excluded from
    ``items``; the remaining sources are planned in the given order. For
    moves only cross-device sources count toward the free-space estimate.
    """
    destination_dir = absolute(destination_dir)
    plan = TransferPlan(destination_dir=destination_dir, overwrite=overwrite)

    if not destination_dir.is_dir():
        for source in sources:
            plan.rejected.append((absolute(source), ErrorKind.NOT_FOUND, f"destination {destination_dir} is not a directory"))
        return plan

    resolved_destination = destination_dir.resolve()
    for raw_source in sources:
        source = absolute(raw_source)
        target = destination_dir / source.name
        if not os.path.lexists(source):
            plan.rejected.append((source, ErrorKind.NOT_FOUND, "source does not exist"))
            continue
        if source in plan.roots:
            continue
        if target == source:
            plan.rejected.append((source, ErrorKind.INVALID, "source and destination are the same"))
            continue
        if source.is_dir() and not source.is_symlink() and is_within(resolved_destination, source.resolve()):
            plan.rejected.append((source, ErrorKind.INVALID, "destination is inside the source directory"))
            continue
        if os.path.lexists(target) and not overwrite:
            plan.rejected.append((source, ErrorKind.ALREADY_EXISTS, f"{target} already exists"))
            continue

        try:
            items = list(iter_tree(source, target, errors=plan.rejected))
        except OSError as exc:
            plan.rejected.append((source, error_kind_for(exc), exc.strerror or str(exc)))
            continue

        plan.items.extend(items)
        plan.roots[source] = target
        if not same_device(source, destination_dir):
            plan.cross_device.add(source)

    _estimate_space(plan, for_move)
    return plan


def _estimate_space(plan: TransferPlan, for_move: bool) -> None:
    needed = sum(
        item.size
        for item in plan.items
        if item.kind == ItemKind.FILE and (not for_move or item.root in plan.cross_device)
    )
    if needed <= 0:
        return
    try:
        free = shutil.disk_usage(plan.destination_dir).free
    except OSError as exc:
        LOGGER.debug("disk usage unavailable for %s: %s", plan.destination_dir, exc)
        return
    if needed > free:
        plan.warnings.append(f"needs {needed} bytes but only {free} bytes are free on {plan.destination_dir}")


__all__ = [
    "ItemKind",
    "PlanItem",
    "TransferPlan",
    "absolute",
    "build_transfer_plan",
    "is_within",
    "iter_tree",
    "same_device",
]
