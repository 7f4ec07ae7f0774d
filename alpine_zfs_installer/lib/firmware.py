from __future__ import annotations

import logging
import os
from pathlib import Path

from .command import run_cmd
from .env import PATHS

logger = logging.getLogger(__name__)


def is_uefi(efi_dir: str = PATHS.efi_firmware) -> bool:
    """True when the *currently running* system was booted through UEFI."""

    return Path(efi_dir).is_dir()


def ensure_efivars(efivars_dir: str = PATHS.efivars, *, dry_run: bool = False) -> bool:
    """Best-effort mount of efivarfs so efibootmgr can write boot entries.

    Returns True when efivars is (or was just) mounted.
    """

    if not Path(efivars_dir).is_dir():
        return False
    if os.path.ismount(efivars_dir):
        return True
    r = run_cmd(["mount", "-t", "efivarfs", "efivarfs", efivars_dir], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Could not mount efivarfs at %s: %s", efivars_dir, r.stderr.strip())
    return r.ok
