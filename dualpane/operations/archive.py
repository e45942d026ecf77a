"""ZIP compress/extract with per-entry failure handling.

A source that cannot be read aborts only its own entry; entries already
written stay valid. On extract, an unreadable container is a hard
``CorruptArchive`` error while a single corrupt entry is a per-entry failure.
"""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from ..errors import AlreadyExists, CorruptArchive, ErrorKind, convert_os_error
from .plan import ItemKind, PlanItem, absolute, is_within, iter_tree
from .progress import CancelToken, OperationResult, ProgressCallback, ProgressReporter

LOGGER = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


def _archive_items(
    sources: list[Path],
    archive_path: Path,
    rejected: list[tuple[Path, ErrorKind, str]],
) -> list[tuple[PlanItem, str]]:
    """Plan ``(item, arcname)`` pairs relative to each source's parent."""
    planned: list[tuple[PlanItem, str]] = []
    for raw_source in sources:
        source = absolute(raw_source)
        if not os.path.lexists(source):
            rejected.append((source, ErrorKind.NOT_FOUND, "source does not exist"))
            continue
        if source == archive_path:
            rejected.append((source, ErrorKind.INVALID, "cannot add the archive to itself"))
            continue
        base = source.parent
        try:
            items = list(iter_tree(source, source, errors=rejected))
        except OSError as exc:
            rejected.append((source, ErrorKind.IO_ERROR, exc.strerror or str(exc)))
            continue
        for item in items:
            if item.source == archive_path:
                continue
            arcname = PurePosixPath(*item.source.relative_to(base).parts).as_posix()
            planned.append((item, arcname))
    return planned


def _write_entry(archive: zipfile.ZipFile, item: PlanItem, arcname: str) -> None:
    info = zipfile.ZipInfo.from_file(item.source, arcname)
    if item.kind == ItemKind.DIRECTORY:
        archive.writestr(info, b"")
        return
    info.compress_type = zipfile.ZIP_DEFLATED
    with open(item.source, "rb") as src, archive.open(info, "w") as dst:
        shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)


def compress(
    sources: list[Path],
    archive_path: Path,
    overwrite: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Stream ``sources`` into a new ZIP archive at ``archive_path``.

    Entry names are relative to each source's parent directory, so
    compressing ``/a/b`` stores ``b/...``.
    """
    archive_path = absolute(archive_path)
    if os.path.lexists(archive_path) and not overwrite:
        raise AlreadyExists(f"{archive_path} already exists", path=archive_path)

    rejected: list[tuple[Path, ErrorKind, str]] = []
    planned = _archive_items(sources, archive_path, rejected)
    result = OperationResult(operation="compress", total=len(planned) + len(rejected))
    result.failures.extend(rejected)
    reporter = ProgressReporter("compress", len(planned), progress)

    try:
        archive = zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED)
    except OSError as exc:
        raise convert_os_error(exc, archive_path) from exc

    with archive:
        for item, arcname in planned:
            if token is not None and token.cancelled:
                result.cancelled = True
                break
            try:
                _write_entry(archive, item, arcname)
            except OSError as exc:
                LOGGER.warning("cannot add %s to %s: %s", item.source, archive_path, exc)
                result.record_failure(item.source, exc)
            else:
                result.record_success()
            reporter.advance(item.source)

    LOGGER.info(result.summary())
    return result


def _safe_target(destination: Path, name: str) -> Path | None:
    """Return the extraction target for ``name`` or ``None`` if it escapes."""
    member = PurePosixPath(name)
    if member.is_absolute() or ".." in member.parts or not member.parts:
        return None
    target = destination.joinpath(*member.parts)
    if not is_within(absolute(target), destination):
        return None
    return target


def _restore_mode(info: zipfile.ZipInfo, target: Path) -> None:
    mode = (info.external_attr >> 16) & 0o777
    if not mode:
        return
    try:
        os.chmod(target, mode)
    except OSError as exc:
        LOGGER.debug("cannot restore mode of %s: %s", target, exc)


def _extract_file(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_name(f".{target.name}.dualpane-partial")
    try:
        with archive.open(info, "r") as src, open(partial, "wb") as dst:
            shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)
        os.replace(partial, target)
    except BaseException:
        if os.path.lexists(partial):
            partial.unlink()
        raise


def _extract_entry(
    archive: zipfile.ZipFile,
    archive_path: Path,
    info: zipfile.ZipInfo,
    target: Path,
    overwrite: bool,
    result: OperationResult,
    created_dirs: list[tuple[zipfile.ZipInfo, Path]],
) -> None:
    if info.is_dir():
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            result.record_failure(target, exc)
        else:
            created_dirs.append((info, target))
            result.record_success()
        return
    if os.path.lexists(target) and not overwrite:
        result.record_failure(target, ErrorKind.ALREADY_EXISTS, f"{target} already exists")
        return
    try:
        _extract_file(archive, info, target)
    except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
        LOGGER.warning("corrupt entry %s in %s: %s", info.filename, archive_path, exc)
        result.record_failure(target, ErrorKind.CORRUPT, str(exc))
    except (RuntimeError, NotImplementedError) as exc:
        # zipfile raises these for encrypted entries and unknown compression methods
        LOGGER.warning("cannot read entry %s in %s: %s", info.filename, archive_path, exc)
        result.record_failure(target, ErrorKind.CORRUPT, str(exc))
    except OSError as exc:
        result.record_failure(target, exc)
    else:
        _restore_mode(info, target)
        result.record_success()


def extract(
    archive_path: Path,
    destination: Path,
    overwrite: bool = False,
    token: CancelToken | None = None,
    progress: ProgressCallback | None = None,
) -> OperationResult:
    """Extract every entry of ``archive_path`` under ``destination``.

    Directory modes are restored after all entries are written, deepest
    first, so read-only directories still receive their contents.
    """
    archive_path = absolute(archive_path)
    destination = absolute(destination)
    try:
        archive = zipfile.ZipFile(archive_path, "r")
    except zipfile.BadZipFile as exc:
        raise CorruptArchive(f"{archive_path}: {exc}", path=archive_path) from exc
    except OSError as exc:
        raise convert_os_error(exc, archive_path) from exc

    with archive:
        infos = archive.infolist()
        result = OperationResult(operation="extract", total=len(infos))
        reporter = ProgressReporter("extract", len(infos), progress)
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise convert_os_error(exc, destination) from exc

        created_dirs: list[tuple[zipfile.ZipInfo, Path]] = []
        try:
            for info in infos:
                if token is not None and token.cancelled:
                    result.cancelled = True
                    break
                target = _safe_target(destination, info.filename)
                entry_path = destination / info.filename
                if target is None:
                    result.record_failure(entry_path, ErrorKind.INVALID, "entry escapes the destination directory")
                else:
                    _extract_entry(archive, archive_path, info, target, overwrite, result, created_dirs)
                reporter.advance(target if target is not None else entry_path)
        finally:
            for info, target in sorted(created_dirs, key=lambda pair: len(pair[1].parts), reverse=True):
                _restore_mode(info, target)

    LOGGER.info(result.summary())
    return result


__all__ = ["compress", "extract"]
