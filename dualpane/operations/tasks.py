"""Background workers for long-running operations and searches.

Each submitted task runs on its own daemon thread and publishes
``TaskEvent`` records to a queue the front end drains from its event loop.
A shared ``PathLockRegistry`` serializes tasks whose paths overlap.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Empty, Queue

from ..errors import Cancelled
from .plan import absolute, is_within
from .progress import CancelToken, Progress, ProgressCallback

LOGGER = logging.getLogger(__name__)


class TaskEventKind(str, Enum):
    PROGRESS = "progress"
    ITEM = "item"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True)
class TaskEvent:
    """One message from a background task to the front end."""

    task_id: int
    name: str
    kind: TaskEventKind
    payload: object = None


class PathLockRegistry:
    """Process-wide registry of paths held by running tasks.

    Two path sets conflict when any path of one equals, contains, or lies
    inside any path of the other. ``acquire`` takes all paths at once, so
    tasks never hold part of their set while waiting for the rest.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._held: dict[int, tuple[Path, ...]] = {}
        self._ids = itertools.count(1)

    def _conflicts(self, paths: tuple[Path, ...]) -> bool:
        for held in self._held.values():
            for first in held:
                for second in paths:
                    if is_within(first, second) or is_within(second, first):
                        return True
        return False

    def acquire(self, paths: Iterable[Path], timeout: float | None = None) -> int | None:
        """Block until ``paths`` are free; returns a lock id or ``None`` on timeout."""
        wanted = tuple(sorted({absolute(path) for path in paths}))
        with self._condition:
            if not self._condition.wait_for(lambda: not self._conflicts(wanted), timeout=timeout):
                return None
            lock_id = next(self._ids)
            self._held[lock_id] = wanted
            return lock_id

    def release(self, lock_id: int) -> None:
        with self._condition:
            self._held.pop(lock_id, None)
            self._condition.notify_all()

    def is_locked(self, path: Path) -> bool:
        target = absolute(path)
        with self._condition:
            return self._conflicts((target,))


TaskWork = Callable[[CancelToken, ProgressCallback, Callable[[object], None]], object]


class TaskHandle:
    """Caller-side view of one background task."""

    def __init__(self, task_id: int, name: str) -> None:
        self.task_id = task_id
        self.name = name
        self.token = CancelToken()
        self.result: object = None
        self.error: BaseException | None = None
        self.last_progress: Progress | None = None
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> None:
        self.token.cancel()

    def wait(self, timeout: float | None = None) -> object:
        """Wait for completion and return the result, re-raising task errors."""
        if not self._done.wait(timeout):
            raise TimeoutError(f"task {self.name} still running")
        if self.error is not None:
            raise self.error
        return self.result


class TaskRunner:
    """Starts background tasks and collects their events."""

    def __init__(self, locks: PathLockRegistry | None = None) -> None:
        self.locks = locks if locks is not None else PathLockRegistry()
        self._events: Queue[TaskEvent] = Queue()
        self._next_task_id = itertools.count(1)
        self._lock = threading.Lock()
        self._handles: dict[int, TaskHandle] = {}

    def _worker(self, handle: TaskHandle, work: TaskWork, paths: tuple[Path, ...]) -> None:
        def publish(kind: TaskEventKind, payload: object) -> None:
            self._events.put(TaskEvent(handle.task_id, handle.name, kind, payload))

        def on_progress(progress: Progress) -> None:
            handle.last_progress = progress
            publish(TaskEventKind.PROGRESS, progress)

        def on_item(item: object) -> None:
            publish(TaskEventKind.ITEM, item)

        lock_id = self.locks.acquire(paths)
        try:
            handle.token.raise_if_cancelled()
            handle.result = work(handle.token, on_progress, on_item)
        except Cancelled as exc:
            handle.error = exc
            publish(TaskEventKind.ERROR, exc)
        except Exception as exc:
            LOGGER.exception("task %s failed", handle.name)
            handle.error = exc
            publish(TaskEventKind.ERROR, exc)
        else:
            publish(TaskEventKind.RESULT, handle.result)
        finally:
            if lock_id is not None:
                self.locks.release(lock_id)
            handle._done.set()
            with self._lock:
                self._handles.pop(handle.task_id, None)

    def submit(self, name: str, work: TaskWork, paths: Iterable[Path] = ()) -> TaskHandle:
        """Run ``work(token, on_progress, on_item)`` on a background thread.

        ``paths`` are locked for the whole run; the task waits for any running
        task holding an overlapping path.
        """
        with self._lock:
            handle = TaskHandle(next(self._next_task_id), name)
            self._handles[handle.task_id] = handle
        worker = threading.Thread(
            target=self._worker,
            args=(handle, work, tuple(paths)),
            name=f"dualpane-{name}-{handle.task_id}",
            daemon=True,
        )
        worker.start()
        return handle

    def running(self) -> list[TaskHandle]:
        with self._lock:
            return list(self._handles.values())

    def cancel_all(self) -> None:
        for handle in self.running():
            handle.cancel()

    def drain_events(self) -> list[TaskEvent]:
        """Drain all queued task events."""
        out: list[TaskEvent] = []
        while True:
            try:
                out.append(self._events.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "PathLockRegistry",
    "TaskEvent",
    "TaskEventKind",
    "TaskHandle",
    "TaskRunner",
]
