from __future__ import annotations

import logging

from ..errors import DetectionError
from .command import run_cmd

logger = logging.getLogger(__name__)

DRY_RUN_PARTUUID = "00000000-0000-0000-0000-000000000000"


def _first_line(text: str) -> str:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return ""


def get_partuuid(dev: str, *, dry_run: bool = False) -> str:
    """Return the GPT partition UUID of a block device."""

    r = run_cmd(["blkid", "-s", "PARTUUID", "-o", "value", dev], check=False, dry_run=dry_run)
    partuuid = _first_line(r.stdout)
    if not partuuid:
        if dry_run:
            return DRY_RUN_PARTUUID
        raise DetectionError(f"Unable to determine PARTUUID for {dev}")
    return partuuid


def get_partnum(dev: str, *, dry_run: bool = False) -> str:
    """Return the partition number of a partition device as lsblk reports it."""

    r = run_cmd(["lsblk", "-no", "PARTN", dev], check=False, dry_run=dry_run)
    partnum = _first_line(r.stdout)
    if not partnum:
        if dry_run:
            return "1"
        raise DetectionError(f"Failed to determine EFI partition number for {dev}")
    return partnum
