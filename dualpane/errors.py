"""Error taxonomy shared by listing, operations, search, and diff.

Engine code converts ``OSError`` into these types at its boundary so front
ends only ever have to render ``FileManagerError`` subclasses.
"""

from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path
from typing import NoReturn


class ErrorKind(str, Enum):
    """Per-item failure classification used in batch results."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    CROSS_DEVICE = "cross_device"
    CANCELLED = "cancelled"
    NOT_COMPARABLE = "not_comparable"
    INVALID = "invalid"
    CORRUPT = "corrupt"
    IO_ERROR = "io_error"


class FileManagerError(Exception):
    """Base class for every engine error."""

    kind = ErrorKind.IO_ERROR

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotFound(FileManagerError):
    kind = ErrorKind.NOT_FOUND


class PermissionDenied(FileManagerError):
    kind = ErrorKind.PERMISSION_DENIED


class AlreadyExists(FileManagerError):
    kind = ErrorKind.ALREADY_EXISTS


class CrossDeviceMove(FileManagerError):
    """Informational: a move must fall back to copy + delete."""

    kind = ErrorKind.CROSS_DEVICE


class Cancelled(FileManagerError):
    kind = ErrorKind.CANCELLED


class NotComparable(FileManagerError):
    kind = ErrorKind.NOT_COMPARABLE


class CorruptArchive(FileManagerError):
    """The archive container itself cannot be read."""

    kind = ErrorKind.CORRUPT


class InvalidOperation(FileManagerError):
    """Rejected before any mutation (self-containment, bad names, ...)."""

    kind = ErrorKind.INVALID


class PartialFailure(FileManagerError):
    """Some items of a batch operation failed.

    ``failures`` holds ``(path, kind, message)`` triples; ``total`` is the
    number of items attempted.
    """

    kind = ErrorKind.IO_ERROR

    def __init__(self, failures: list[tuple[Path, ErrorKind, str]], total: int) -> None:
        self.failures = list(failures)
        self.total = total
        super().__init__(self.summary())

    @property
    def succeeded(self) -> int:
        return max(0, self.total - len(self.failures))

    def summary(self) -> str:
        """Render ``N of M succeeded`` followed by one line per failure."""
        lines = [f"{self.succeeded} of {self.total} succeeded"]
        for path, kind, message in self.failures:
            lines.append(f"  {path}: {kind.value} ({message})")
        return "\n".join(lines)


_ERRNO_KINDS = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.ENOTDIR: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EROFS: ErrorKind.PERMISSION_DENIED,
    errno.EEXIST: ErrorKind.ALREADY_EXISTS,
    errno.EXDEV: ErrorKind.CROSS_DEVICE,
}

_KIND_ERRORS: dict[ErrorKind, type[FileManagerError]] = {
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.PERMISSION_DENIED: PermissionDenied,
    ErrorKind.ALREADY_EXISTS: AlreadyExists,
    ErrorKind.CROSS_DEVICE: CrossDeviceMove,
}


def error_kind_for(exc: BaseException) -> ErrorKind:
    """Classify an exception into an ``ErrorKind``."""
    if isinstance(exc, FileManagerError):
        return exc.kind
    if isinstance(exc, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PermissionError):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(exc, FileExistsError):
        return ErrorKind.ALREADY_EXISTS
    if isinstance(exc, OSError) and exc.errno is not None:
        return _ERRNO_KINDS.get(exc.errno, ErrorKind.IO_ERROR)
    return ErrorKind.IO_ERROR


def convert_os_error(exc: OSError, path: Path) -> FileManagerError:
    """Wrap ``exc`` in the matching ``FileManagerError`` subclass."""
    kind = error_kind_for(exc)
    error_type = _KIND_ERRORS.get(kind, FileManagerError)
    message = exc.strerror or str(exc)
    return error_type(f"{path}: {message}", path=path)


def raise_for_os_error(exc: OSError, path: Path) -> NoReturn:
    """Raise the ``FileManagerError`` matching ``exc``, chained to it."""
    raise convert_os_error(exc, path) from exc


__all__ = [
    "AlreadyExists",
    "Cancelled",
    "CorruptArchive",
    "CrossDeviceMove",
    "ErrorKind",
    "FileManagerError",
    "InvalidOperation",
    "NotComparable",
    "NotFound",
    "PartialFailure",
    "PermissionDenied",
    "convert_os_error",
    "error_kind_for",
    "raise_for_os_error",
]
