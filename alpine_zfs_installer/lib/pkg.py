from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from .chroot import chroot_cmd
from .command import run_cmd
from .env import PATHS

logger = logging.getLogger(__name__)

# Tools the live ISO needs before anything touches the disk.
LIVE_PACKAGES = [
    "zfs",
    "eudev",
    "parted",
    "util-linux",
    "dosfstools",
    "curl",
    "efibootmgr",
    "e2fsprogs",
    "sgdisk",
]

# Older Alpine releases only ship sgdisk inside gdisk.
LIVE_PACKAGES_FALLBACK = [p if p != "sgdisk" else "gdisk" for p in LIVE_PACKAGES]

ZFS_SERVICES = ["zfs-import", "zfs-load-key", "zfs-mount"]


def target_packages(kernel_flavor: str) -> list[str]:
    return ["zfs", f"zfs-{kernel_flavor}", "eudev"]


def apk_update(target_root: str | None = None, *, dry_run: bool = False) -> bool:
    """Refresh the package index (best-effort). Returns True on success."""

    if target_root:
        r = chroot_cmd(target_root, ["apk", "update"], check=False, dry_run=dry_run)
    else:
        r = run_cmd(["apk", "update"], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("apk update failed (rc=%s); continuing with cached index", r.returncode)
    return r.ok


def apk_add(
    packages: Sequence[str],
    *,
    target_root: str | None = None,
    check: bool = True,
    dry_run: bool = False,
) -> bool:
    if not packages:
        return True
    argv = ["apk", "add", "--no-cache", *packages]
    if target_root:
        r = chroot_cmd(target_root, argv, check=check, dry_run=dry_run)
    else:
        r = run_cmd(argv, check=check, dry_run=dry_run)
    return r.ok


def repositories_configured(path: str = PATHS.apk_repositories) -> bool:
    p = Path(path)
    return p.is_file() and p.stat().st_size > 0


def setup_apkrepos(*, dry_run: bool = False) -> bool:
    """Let alpine-conf pick the fastest mirror (best-effort)."""

    r = run_cmd(["setup-apkrepos", "-f"], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("setup-apkrepos failed (rc=%s)", r.returncode)
    return r.ok


def setup_disk(target_root: str, kernel_flavor: str, *, dry_run: bool = False) -> None:
    """Install the base system into an already mounted root.

    BOOTLOADER=none: ZFSBootMenu is installed separately.
    """

    run_cmd(
        ["setup-disk", "-k", kernel_flavor, "-v", target_root],
        env={"BOOTLOADER": "none"},
        dry_run=dry_run,
    )


def copy_repositories(
    target_root: str,
    src: str = PATHS.apk_repositories,
    *,
    dry_run: bool = False,
) -> bool:
    """Propagate the live apk repositories into the target (best-effort)."""

    dst = Path(target_root) / PATHS.apk_repositories.lstrip("/")
    if dry_run:
        logger.info("Would copy %s -> %s", src, str(dst))
        return True
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    except OSError as e:
        logger.warning("Could not copy %s into target: %s", src, e)
        return False
    return True


def rc_update_add(target_root: str, service: str, runlevel: str = "boot", *, dry_run: bool = False) -> bool:
    r = chroot_cmd(target_root, ["rc-update", "add", service, runlevel], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("rc-update add %s %s failed (rc=%s)", service, runlevel, r.returncode)
    return r.ok
