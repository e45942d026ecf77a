"""Mounted filesystems with usage, polled fresh on every call."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import psutil

LOGGER = logging.getLogger(__name__)

WARNING_PERCENT = 70.0
CRITICAL_PERCENT = 90.0
REMOVABLE_MOUNT_MARKERS = ("/media/", "/run/media/", "/Volumes/")


class UsageLevel(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


def usage_level(percent: float) -> UsageLevel:
    """Normal below 70%, warning from 70% through 90%, critical above 90%."""
    if percent > CRITICAL_PERCENT:
        return UsageLevel.CRITICAL
    if percent >= WARNING_PERCENT:
        return UsageLevel.WARNING
    return UsageLevel.NORMAL


@dataclass(frozen=True)
class MountPoint:
    device_name: str
    mount_path: Path
    filesystem_type: str
    total_bytes: int
    used_bytes: int
    is_removable: bool

    @property
    def name(self) -> str:
        return self.mount_path.name or str(self.mount_path)

    @property
    def free_bytes(self) -> int:
        return max(0, self.total_bytes - self.used_bytes)

    @property
    def usage_percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100.0

    @property
    def usage_level(self) -> UsageLevel:
        return usage_level(self.usage_percent)


def is_removable(device: str, mount_path: str, options: str = "") -> bool:
    """Guess whether a partition is removable from its device, mount path, and options."""
    if "removable" in options.split(","):
        return True
    if "usb" in device.lower():
        return True
    padded = mount_path.rstrip("/") + "/"
    return any(marker in padded for marker in REMOVABLE_MOUNT_MARKERS)


def list_mounts(all_partitions: bool = False) -> list[MountPoint]:
    """Return the current mounts, removable first, then by mount path.

    Mounts whose usage cannot be read are left out.
    """
    mounts: list[MountPoint] = []
    for partition in psutil.disk_partitions(all=all_partitions):
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as exc:
            LOGGER.debug("skipping mount %s: %s", partition.mountpoint, exc)
            continue
        mounts.append(
            MountPoint(
                device_name=partition.device,
                mount_path=Path(partition.mountpoint),
                filesystem_type=partition.fstype,
                total_bytes=int(usage.total),
                used_bytes=int(usage.used),
                is_removable=is_removable(partition.device, partition.mountpoint, partition.opts),
            )
        )
    mounts.sort(key=lambda mount: (not mount.is_removable, str(mount.mount_path)))
    return mounts


__all__ = [
    "MountPoint",
    "UsageLevel",
    "is_removable",
    "list_mounts",
    "usage_level",
]
