"""File operation engine: planning, execution, archives, and background tasks.

- plan phase: ordered, validated ``(source, destination)`` enumeration
- best-effort copy/move/delete plus single-item rename/mkdir
- ZIP compress/extract with per-entry failures
- threaded task runner with progress events and path locking
"""

from __future__ import annotations

from .archive import compress, extract
from .engine import copy, copy_file, delete, mkdir, move, rename
from .plan import ItemKind, PlanItem, TransferPlan, build_transfer_plan, is_within, same_device
from .progress import CancelToken, OperationResult, Progress, ProgressCallback
from .tasks import PathLockRegistry, TaskEvent, TaskEventKind, TaskHandle, TaskRunner

__all__ = [
    "compress",
    "extract",
    "copy",
    "copy_file",
    "delete",
    "mkdir",
    "move",
    "rename",
    "ItemKind",
    "PlanItem",
    "TransferPlan",
    "build_transfer_plan",
    "is_within",
    "same_device",
    "CancelToken",
    "OperationResult",
    "Progress",
    "ProgressCallback",
    "PathLockRegistry",
    "TaskEvent",
    "TaskEventKind",
    "TaskHandle",
    "TaskRunner",
]
