"""Edits to the installed system's configuration files.

All paths are relative to the target root so the functions work the same
against ``/mnt`` and against a temporary directory.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from ..errors import DetectionError
from .chroot import chroot_cmd
from .env import ESP_MOUNT_OPTIONS, PATHS

logger = logging.getLogger(__name__)

MKINITFS_CONF = "etc/mkinitfs/mkinitfs.conf"
MKINITFS_FEATURES = "base keymap kms nvme scsi virtio zfs"
FEATURES_LINE = f'features="{MKINITFS_FEATURES}"'

_FEATURES_RE = re.compile(r"^features=.*$", re.MULTILINE)


def _target_path(root: str, rel: str) -> Path:
    return Path(root) / rel.lstrip("/")


def write_file(root: str, rel: str, contents: str, *, dry_run: bool = False) -> None:
    p = _target_path(root, rel)
    if dry_run:
        logger.info("Would write %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")


def write_hostname(root: str, hostname: str, *, dry_run: bool = False) -> None:
    write_file(root, "etc/hostname", hostname.strip() + "\n", dry_run=dry_run)


def set_initfs_features(text: str) -> str:
    """Return mkinitfs.conf contents with the ZFS-capable feature list."""

    if _FEATURES_RE.search(text):
        return _FEATURES_RE.sub(FEATURES_LINE, text)
    if text and not text.endswith("\n"):
        text += "\n"
    return text + FEATURES_LINE + "\n"


def configure_mkinitfs(root: str, *, dry_run: bool = False) -> None:
    p = _target_path(root, MKINITFS_CONF)
    current = p.read_text(encoding="utf-8") if p.exists() else ""
    write_file(root, MKINITFS_CONF, set_initfs_features(current), dry_run=dry_run)


def detect_kernel_version(root: str, *, dry_run: bool = False) -> str:
    """First installed kernel module directory, in sorted order."""

    modules = _target_path(root, "lib/modules")
    versions = sorted(p.name for p in modules.iterdir() if p.is_dir()) if modules.is_dir() else []
    if not versions:
        if dry_run:
            return "0.0.0-dry-run"
        raise DetectionError(f"No kernel modules found under {modules}")
    return versions[0]


def rebuild_initramfs(root: str, kernel_version: str, *, dry_run: bool = False) -> None:
    chroot_cmd(root, ["mkinitfs", "-c", f"/{MKINITFS_CONF}", kernel_version], dry_run=dry_run)


def fstab_line(partuuid: str, mountpoint: str = PATHS.esp_mount) -> str:
    return f"PARTUUID={partuuid} {mountpoint} vfat noatime,{ESP_MOUNT_OPTIONS} 0 2\n"


def has_mount(fstab_text: str, mountpoint: str) -> bool:
    for line in fstab_text.splitlines():
        fields = line.split()
        if not fields or fields[0].startswith("#"):
            continue
        if len(fields) >= 2 and fields[1] == mountpoint:
            return True
    return False


def ensure_fstab_entry(
    root: str,
    partuuid: str,
    mountpoint: str = PATHS.esp_mount,
    *,
    dry_run: bool = False,
) -> bool:
    """Append the ESP line unless ``mountpoint`` is already mounted by fstab.

    Returns True when a line was appended.
    """

    p = _target_path(root, "etc/fstab")
    current = p.read_text(encoding="utf-8") if p.exists() else ""
    if has_mount(current, mountpoint):
        logger.info("fstab already mounts %s; leaving it alone", mountpoint)
        return False
    if current and not current.endswith("\n"):
        current += "\n"
    write_file(root, "etc/fstab", current + fstab_line(partuuid, mountpoint), dry_run=dry_run)
    return True


def set_timezone(root: str, timezone: str, *, dry_run: bool = False) -> bool:
    zoneinfo = Path("/usr/share/zoneinfo") / timezone
    if not _target_path(root, str(zoneinfo)).is_file():
        logger.warning("Timezone %s not available in target (tzdata missing?); skipping", timezone)
        return False
    localtime = _target_path(root, "etc/localtime")
    if dry_run:
        logger.info("Would link %s -> %s", str(localtime), str(zoneinfo))
    else:
        if localtime.is_symlink() or localtime.exists():
            localtime.unlink()
        localtime.parent.mkdir(parents=True, exist_ok=True)
        localtime.symlink_to(zoneinfo)
    write_file(root, "etc/timezone", timezone + "\n", dry_run=dry_run)
    return True


def set_root_password(root: str, password: str, *, dry_run: bool = False) -> None:
    chroot_cmd(root, ["chpasswd"], input_text=f"root:{password}\n", dry_run=dry_run)


def install_ssh_key(root: str, pubkey_file: Optional[str], *, dry_run: bool = False) -> bool:
    """Append a public key to root's authorized_keys. Returns True if installed."""

    if not pubkey_file:
        return False
    src = Path(pubkey_file)
    if not src.is_file():
        logger.warning("SSH public key %s not found; skipping", pubkey_file)
        return False

    key = src.read_text(encoding="utf-8")
    if key and not key.endswith("\n"):
        key += "\n"

    ssh_dir = _target_path(root, "root/.ssh")
    auth = ssh_dir / "authorized_keys"
    if dry_run:
        logger.info("Would append %s to %s", pubkey_file, str(auth))
        return True

    ssh_dir.mkdir(parents=True, exist_ok=True)
    with auth.open("a", encoding="utf-8") as f:
        f.write(key)
    os.chmod(auth, 0o600)
    os.chmod(ssh_dir, 0o700)
    return True
