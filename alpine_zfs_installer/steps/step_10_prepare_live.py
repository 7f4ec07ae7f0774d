from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import CommandError
from ..install_config import InstallConfig
from ..lib.command import need_cmd, run_cmd
from ..lib.pkg import LIVE_PACKAGES, LIVE_PACKAGES_FALLBACK, apk_add, apk_update
from ..pipeline import warn

logger = logging.getLogger(__name__)

# tool -> package providing it
REQUIRED_TOOLS = {
    "sgdisk": "sgdisk",
    "partprobe": "parted",
    "mkfs.vfat": "dosfstools",
    "zpool": "zfs",
    "zfs": "zfs",
    "blkid": "util-linux",
    "lsblk": "util-linux",
    "setup-disk": "alpine-conf",
}


class PrepareLiveEnvStep:
    """Install the tooling the live ISO needs and load the ZFS module."""

    step_id = "10_prepare_live"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        dry_run = cfg.dry_run

        if not dry_run:
            need_cmd("apk", "apk-tools")

        apk_update(dry_run=dry_run)
        if not apk_add(LIVE_PACKAGES, check=False, dry_run=dry_run):
            logger.info("Retrying live package install with gdisk instead of sgdisk")
            if not apk_add(LIVE_PACKAGES_FALLBACK, check=False, dry_run=dry_run):
                raise CommandError(
                    ["apk", "add", "--no-cache", *LIVE_PACKAGES_FALLBACK],
                    1,
                    "could not install live environment packages",
                )

        if not run_cmd(["modprobe", "zfs"], check=False, dry_run=dry_run).ok:
            warn(state, "modprobe zfs failed; assuming the module is built in or already loaded")
        run_cmd(["mdev", "-s"], check=False, dry_run=dry_run)

        if not dry_run:
            for tool, package in REQUIRED_TOOLS.items():
                need_cmd(tool, package)

        return state
