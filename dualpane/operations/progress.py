"""Cancellation tokens, progress events, and batch results."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import Cancelled, ErrorKind, PartialFailure, error_kind_for


class CancelToken:
    """Cooperative cancellation flag checked between items."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("operation cancelled")


@dataclass(frozen=True)
class Progress:
    """Items completed so far out of ``total`` for one operation."""

    operation: str
    completed: int
    total: int
    current: Path | None = None

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return min(1.0, self.completed / self.total)


ProgressCallback = Callable[[Progress], None]


@dataclass
class OperationResult:
    """Outcome of a best-effort batch operation.

    Every attempted item lands either in ``succeeded`` or in ``failures``;
    ``total`` counts the items the plan contained.
    """

    operation: str
    total: int = 0
    succeeded: int = 0
    failures: list[tuple[Path, ErrorKind, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cancelled: bool = False
    cross_device: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled

    @property
    def failed(self) -> int:
        return len(self.failures)

    def record_success(self) -> None:
        self.succeeded += 1

    def record_failure(self, path: Path, error: BaseException | ErrorKind, message: str | None = None) -> None:
        if isinstance(error, ErrorKind):
            kind = error
            text = message or kind.value
        else:
            kind = error_kind_for(error)
            text = message or getattr(error, "strerror", None) or str(error)
        self.failures.append((path, kind, text))

    def summary(self) -> str:
        """One-line ``N of M succeeded`` summary plus a cancellation note."""
        text = f"{self.operation}: {self.succeeded} of {self.total} succeeded"
        if self.cancelled:
            text += " (cancelled)"
        return text

    def raise_for_failures(self) -> None:
        """Raise ``PartialFailure`` when any item failed."""
        if self.failures:
            raise PartialFailure(self.failures, self.total)


class ProgressReporter:
    """Counts completed items and forwards ``Progress`` to an optional callback."""

    def __init__(self, operation: str, total: int, callback: ProgressCallback | None) -> None:
        self.operation = operation
        self.total = total
        self.completed = 0
        self._callback = callback

    def advance(self, current: Path | None = None, count: int = 1) -> None:
        self.completed += count
        if self._callback is not None:
            self._callback(Progress(self.operation, self.completed, self.total, current))


__all__ = [
    "CancelToken",
    "OperationResult",
    "Progress",
    "ProgressCallback",
    "ProgressReporter",
]
