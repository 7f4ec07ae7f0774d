from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .command import run_cmd

logger = logging.getLogger(__name__)

# sgdisk type codes
ESP_TYPECODE = "EF00"
ZFS_TYPECODE = "BF01"


@dataclass(frozen=True)
class PartitionPlan:
    disk: str
    esp_size_mib: int = 1024
    esp_label: str = "EFI"


def plan_commands(plan: PartitionPlan) -> List[List[str]]:
    """sgdisk invocations creating the two-partition layout.

    Layout:
    - 1: ESP, starts at the 1 MiB boundary, ``esp_size_mib`` long
    - 2: ZFS, the rest of the disk
    """

    disk = plan.disk
    return [
        [
            "sgdisk",
            f"-n1:1MiB:+{plan.esp_size_mib}MiB",
            f"-t1:{ESP_TYPECODE}",
            "-c1:EFI System",
            disk,
        ],
        ["sgdisk", "-n2:0:0", f"-t2:{ZFS_TYPECODE}", "-c2:ZFS", disk],
    ]


def partition_disk(plan: PartitionPlan, *, dry_run: bool = False) -> None:
    """Destroy any partition table on ``plan.disk`` and create the layout."""

    disk = plan.disk
    logger.info("Partitioning %s (EFI %sMiB + ZFS)", disk, plan.esp_size_mib)

    # A blank disk has nothing to zap.
    run_cmd(["sgdisk", "--zap-all", disk], check=False, dry_run=dry_run)
    run_cmd(["partprobe", disk], check=False, dry_run=dry_run)

    for argv in plan_commands(plan):
        run_cmd(argv, dry_run=dry_run)

    # Inform kernel
    run_cmd(["partprobe", disk], dry_run=dry_run)


def format_esp(esp_dev: str, label: str, *, dry_run: bool = False) -> None:
    logger.info("Formatting EFI System Partition on %s", esp_dev)
    run_cmd(["mkfs.vfat", "-F32", "-n", label, esp_dev], dry_run=dry_run)
