"""Device path resolution.

Maps the operator-supplied block device to the path every later step uses
(preferably a stable ``/dev/disk/by-id`` name) and derives partition paths
for the three naming conventions in use:

- ``/dev/disk/by-id/ata-FOO``  -> ``/dev/disk/by-id/ata-FOO-part1``
- ``/dev/nvme0n1``, ``/dev/mmcblk0`` -> ``/dev/nvme0n1p1``
- ``/dev/sda``, ``/dev/vdb`` -> ``/dev/sda1``

Nothing here touches the disk.
"""

from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from .env import PATHS

logger = logging.getLogger(__name__)

_STABLE_RE = re.compile(r"^/dev/disk/")
_NVME_MMC_RE = re.compile(r"nvme|mmcblk")


class DeviceClass(enum.Enum):
    STABLE = "stable"  # /dev/disk/by-id, by-path, ...
    NVME_MMC = "nvme_mmc"
    PLAIN = "plain"


def classify_device(path: str) -> DeviceClass:
    if _STABLE_RE.match(path):
        return DeviceClass.STABLE
    if _NVME_MMC_RE.search(path):
        return DeviceClass.NVME_MMC
    return DeviceClass.PLAIN


def partition_path(base: str, partnum: int) -> str:
    kind = classify_device(base)
    if kind is DeviceClass.STABLE:
        return f"{base}-part{partnum}"
    if kind is DeviceClass.NVME_MMC:
        return f"{base}p{partnum}"
    return f"{base}{partnum}"


def find_by_id(raw: str, by_id_dir: str = PATHS.by_id_dir) -> Optional[str]:
    """Return the first by-id entry (sorted) whose resolved target is ``raw``."""

    if not os.path.isdir(by_id_dir):
        return None
    for name in sorted(os.listdir(by_id_dir)):
        entry = os.path.join(by_id_dir, name)
        if os.path.realpath(entry) == raw:
            return entry
    return None


@dataclass(frozen=True)
class ResolvedDevice:
    raw: str
    base: str
    device_class: DeviceClass

    def part(self, partnum: int) -> str:
        return partition_path(self.base, partnum)

    @property
    def esp(self) -> str:
        return self.part(1)

    @property
    def zfs(self) -> str:
        return self.part(2)


def resolve_device(
    raw: str,
    *,
    use_by_id: bool = True,
    by_id_dir: str = PATHS.by_id_dir,
) -> ResolvedDevice:
    base = raw
    if use_by_id:
        stable = find_by_id(raw, by_id_dir)
        if stable:
            base = stable
        else:
            logger.info("No %s entry for %s; using it directly", by_id_dir, raw)
    return ResolvedDevice(raw=raw, base=base, device_class=classify_device(base))
