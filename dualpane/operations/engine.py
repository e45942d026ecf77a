"""Best-effort copy, move, delete, rename, and mkdir.

Each function executes item by item: one failure never rolls back items that
already succeeded, and every failure is recorded in the returned
``OperationResult``. Cancellation is checked between items only.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from ..errors import AlreadyExists, ErrorKind, InvalidOperation, raise_for_os_error
from .plan import ItemKind, PlanItem, TransferPlan, absolute, build_transfer_plan, is_within
from .progress import CancelToken, OperationResult, ProgressCallback, ProgressReporter

LOGGER = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".dualpane-partial"


def _partial_path(destination: Path) -> Path:
    return destination.with_name(f".{destination.name}{PARTIAL_SUFFIX}")


def _remove_existing(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def copy_file(source: Path, destination: Path, overwrite: bool = False) -> None:
    """Copy one regular file without ever leaving a truncated ``destination``.

    Data goes to a hidden sibling first and is renamed into place once
    complete; the partial file is removed when the copy fails.
    """
    if os.path.lexists(destination) and not overwrite:
        raise FileExistsError(errno.EEXIST, "destination exists", str(destination))
    partial = _partial_path(destination)
    try:
        shutil.copy2(source, partial, follow_symlinks=False)
        if os.path.lexists(destination) and destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
        os.replace(partial, destination)
    except BaseException:
        if os.path.lexists(partial):
            try:
                partial.unlink()
            except OSError as cleanup_exc:
                LOGGER.warning("could not remove partial copy %s: %s", partial, cleanup_exc)
        raise


def _copy_item(item: PlanItem, overwrite: bool) -> None:
    if item.kind == ItemKind.DIRECTORY:
        if os.path.lexists(item.destination):
            if not overwrite:
                raise FileExistsError(errno.EEXIST, "destination exists", str(item.destination))
            if not item.destination.is_dir() or item.destination.is_symlink():
                _remove_existing(item.destination)
                item.destination.mkdir()
        else:
            item.destination.mkdir()
        return

    if item.kind == ItemKind.SYMLINK:
        if os.path.lexists(item.destination):
            if not overwrite:
                raise FileExistsError(errno.EEXIST, "destination exists", str(item.destination))
            _remove_existing(item.destination)
        os.symlink(os.readlink(item.source), item.destination)
        return

    copy_file(item.source, item.destination, overwrite=overwrite)


def _apply_directory_modes(directories: list[PlanItem]) -> None:
    """Copy permission bits onto created directories, deepest first.

    Runs after the children are written so a read-only source directory
    does not block its own contents.
    """
    for item in reversed(directories):
        try:
            shutil.copymode(item.source, item.destination)
        except OSError as exc:
            LOGGER.warning("cannot copy mode of %s to %s: %s", item.source, item.destination, exc)


def _execute_copy_items(
    items: list[PlanItem],
    overwrite: bool,
    result: OperationResult,
    reporter: ProgressReporter,
    token: CancelToken | None,
    check_cancel: bool = True,
) -> bool:
    """Copy ``items`` in order; returns ``False`` if any item failed or was skipped."""
    failed_dirs: list[Path] = []
    created_dirs: list[PlanItem] = []
    all_ok = True
    try:
        for item in items:
            if check_cancel and token is not None and token.cancelled:
                result.cancelled = True
                return False
            if not _copy_one(item, overwrite, result, failed_dirs, created_dirs):
                all_ok = False
            reporter.advance(item.source)
    finally:
        _apply_directory_modes(created_dirs)
    return all_ok


def _copy_one(
    item: PlanItem,
    overwrite: bool,
    result: OperationResult,
    failed_dirs: list[Path],
    created_dirs: list[PlanItem],
) -> bool:
    parent_failure = next((failed for failed in failed_dirs if is_within(item.source, failed)), None)
    if parent_failure is not None:
        result.record_failure(item.source, ErrorKind.IO_ERROR, f"parent directory {parent_failure} was not copied")
        return False
    try:
        _copy_item(item, overwrite)
    except OSError as exc:
        LOGGER.warning("copy %s -> %s failed: %s", item.source, item.destination, exc)
        result.record_failure(item.source, exc)
        if item.is_dir:
            failed_dirs.append(item.source)
        return False
    if item.kind == ItemKind.DIRECTORY:
        created_dirs.append(item)
    result.record_success()
    return True


def _start_result(
    operation: str,
    plan: TransferPlan,
    total: int,
    rejected: list[tuple[Path, ErrorKind, str]] | None = None,
) -> OperationResult:
    rejected = plan.rejected if rejected is None else rejected
    result = OperationResult(operation=operation, total=total + len(rejected))
    result.failures.extend(rejected)
    result.warnings.extend(plan.warnings)
    return result


def copy(
    sources: list[Path],
    destination_dir: Path,
    overwrite: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Copy ``sources`` (files and directory trees) into ``destination_dir``.

    Each planned file/directory is one item of the result.
    """
    plan = build_transfer_plan(sources, destination_dir, overwrite=overwrite)
    result = _start_result("copy", plan, len(plan.items))
    reporter = ProgressReporter("copy", len(plan.items), progress)
    _execute_copy_items(plan.items, overwrite, result, reporter, token)
    LOGGER.info(result.summary())
    return result


def _verify_copy(items: list[PlanItem]) -> bool:
    for item in items:
        if item.kind != ItemKind.FILE:
            continue
        try:
            if item.destination.lstat().st_size != item.size:
                return False
        except OSError:
            return False
    return True


def _remove_tree(path: Path, result: OperationResult | None = None) -> bool:
    """Remove ``path`` deepest-first; returns ``True`` when nothing is left."""
    failures: list[tuple[Path, OSError]] = []
    removed = _remove_deepest_first(path, failures, lambda _path: None)
    if result is not None:
        for failed_path, exc in failures:
            result.record_failure(failed_path, exc)
    return removed and not failures


def _rename_root(source: Path, target: Path, overwrite: bool) -> None:
    if os.path.lexists(target):
        if not overwrite:
            raise FileExistsError(errno.EEXIST, "destination exists", str(target))
        _remove_existing(target)
    os.rename(source, target)


def _cross_device_move(
    source: Path,
    plan: TransferPlan,
    result: OperationResult,
) -> bool:
    """Copy ``source`` to its planned target, then delete the original.

    The original is only removed when every item copied and the sizes match.
    """
    if any(is_within(rejected, source) for rejected, _kind, _message in plan.rejected):
        result.record_failure(source, ErrorKind.IO_ERROR, "source could not be fully enumerated")
        return False
    items = plan.items_for(source)
    scratch = OperationResult(operation="move")
    reporter = ProgressReporter("move", len(items), None)
    copied = _execute_copy_items(items, plan.overwrite, scratch, reporter, None, check_cancel=False)
    if not copied or not _verify_copy(items):
        reason = scratch.failures[0][2] if scratch.failures else "copied sizes do not match"
        result.record_failure(source, scratch.failures[0][1] if scratch.failures else ErrorKind.IO_ERROR, reason)
        return False
    if not _remove_tree(source, result):
        LOGGER.warning("moved %s but could not fully remove the original", source)
        return False
    return True


def move(
    sources: list[Path],
    destination_dir: Path,
    overwrite: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Move ``sources`` into ``destination_dir``.

    Same-device sources are renamed atomically; cross-device sources (or a
    rename failing with ``EXDEV``) fall back to copy, verify, delete. Each
    top-level source is one item of the result.
    """
    plan = build_transfer_plan(sources, destination_dir, overwrite=overwrite, for_move=True)
    roots = list(plan.roots.items())
    top_level_rejected = [
        entry for entry in plan.rejected if not any(is_within(entry[0], root) for root in plan.roots)
    ]
    result = _start_result("move", plan, len(roots), top_level_rejected)
    reporter = ProgressReporter("move", len(roots), progress)

    for source, target in roots:
        if token is not None and token.cancelled:
            result.cancelled = True
            break
        moved = False
        if source not in plan.cross_device:
            try:
                _rename_root(source, target, overwrite)
                moved = True
            except OSError as exc:
                if exc.errno != errno.EXDEV:
                    result.record_failure(source, exc)
                    reporter.advance(source)
                    continue
                plan.cross_device.add(source)

        if not moved:
            LOGGER.info("cross-device move of %s, falling back to copy and delete", source)
            result.cross_device += 1
            moved = _cross_device_move(source, plan, result)

        if moved:
            result.record_success()
        reporter.advance(source)

    LOGGER.info(result.summary())
    return result


def _remove_deepest_first(
    path: Path,
    failures: list[tuple[Path, OSError]],
    on_removed: Callable[[Path], None],
) -> bool:
    """Remove ``path`` and its children, children first.

    Failures are appended to ``failures`` and siblings still get removed;
    a directory is only removed when all of its children were.
    """
    try:
        is_dir = path.is_dir() and not path.is_symlink()
    except OSError as exc:
        failures.append((path, exc))
        return False

    if is_dir:
        try:
            with os.scandir(path) as children:
                names = sorted(child.name for child in children)
        except OSError as exc:
            failures.append((path, exc))
            return False
        children_removed = True
        for name in names:
            if not _remove_deepest_first(path / name, failures, on_removed):
                children_removed = False
        if not children_removed:
            failures.append((path, OSError(errno.ENOTEMPTY, "directory not empty", str(path))))
            return False
        try:
            path.rmdir()
        except OSError as exc:
            failures.append((path, exc))
            return False
    else:
        try:
            path.unlink()
        except OSError as exc:
            failures.append((path, exc))
            return False
    on_removed(path)
    return True


def delete(
    paths: list[Path],
    permanent: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Delete ``paths``, to the platform trash by default.

    Permanent deletes remove trees deepest-first and count every removed
    file or directory; trash deletes count top-level paths.
    """
    from ..sidebar.trash import send_to_trash

    targets = [absolute(path) for path in paths]
    result = OperationResult(operation="delete" if permanent else "trash")
    reporter = ProgressReporter(result.operation, len(targets), progress)

    for target in targets:
        if token is not None and token.cancelled:
            result.cancelled = True
            break
        if target.parent == target:
            result.total += 1
            result.record_failure(target, ErrorKind.INVALID, "refusing to delete a filesystem root")
            reporter.advance(target)
            continue
        if not os.path.lexists(target):
            result.total += 1
            result.record_failure(target, ErrorKind.NOT_FOUND, "path does not exist")
            reporter.advance(target)
            continue

        if not permanent:
            result.total += 1
            try:
                send_to_trash(target)
            except OSError as exc:
                LOGGER.warning("trash %s failed: %s", target, exc)
                result.record_failure(target, exc)
            else:
                result.record_success()
            reporter.advance(target)
            continue

        failures: list[tuple[Path, OSError]] = []

        def on_removed(_path: Path) -> None:
            result.total += 1
            result.record_success()

        _remove_deepest_first(target, failures, on_removed)
        for failed_path, exc in failures:
            LOGGER.warning("delete %s failed: %s", failed_path, exc)
            result.total += 1
            result.record_failure(failed_path, exc)
        reporter.advance(target)

    LOGGER.info(result.summary())
    return result


def _validate_name(name: str) -> None:
    if not name or name in {".", ".."} or "/" in name or os.sep in name or "\0" in name:
        raise InvalidOperation(f"invalid file name: {name!r}")


def rename(path: Path, new_name: str) -> Path:
    """Rename ``path`` within its directory and return the new path."""
    _validate_name(new_name)
    source = absolute(path)
    target = source.with_name(new_name)
    if target == source:
        return target
    if os.path.lexists(target):
        raise AlreadyExists(f"{target} already exists", path=target)
    try:
        os.rename(source, target)
    except OSError as exc:
        raise_for_os_error(exc, source)
    return target


def mkdir(parent: Path, name: str) -> Path:
    """Create directory ``name`` under ``parent`` and return its path."""
    _validate_name(name)
    target = absolute(parent) / name
    try:
        target.mkdir()
    except OSError as exc:
        raise_for_os_error(exc, target)
    return target


__all__ = [
    "copy",
    "copy_file",
    "delete",
    "mkdir",
    "move",
    "rename",
]
