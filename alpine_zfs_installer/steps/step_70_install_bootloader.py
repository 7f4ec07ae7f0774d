from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.block import get_partnum
from ..lib.bootloader import ZBM_COMMANDLINE_PROPERTY, download_zbm, register_boot_entry
from ..lib.command import need_cmd
from ..lib.env import PATHS
from ..lib.firmware import ensure_efivars, is_uefi
from ..lib.zfs import set_property
from ..pipeline import warn

logger = logging.getLogger(__name__)


class InstallBootloaderStep:
    step_id = "70_install_bootloader"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        mounts = state.get("mounts") or {}
        target_root = mounts.get("target_root")
        if device is None or not target_root:
            raise RuntimeError("Missing device/target_root; run earlier steps first")

        dry_run = cfg.dry_run
        logger.info("Installing ZFSBootMenu EFI")

        esp_mount = mounts.get("esp") or str(Path(target_root) / PATHS.esp_mount.lstrip("/"))
        download_zbm(cfg.zbm_efi_url, str(Path(esp_mount) / cfg.zbm_efi_relpath), dry_run=dry_run)

        if not dry_run:
            need_cmd("efibootmgr")
        ensure_efivars(dry_run=dry_run)
        if not is_uefi():
            warn(state, "System not booted in UEFI mode; efibootmgr may fail")

        partnum = get_partnum(device.esp, dry_run=dry_run)
        state.setdefault("decisions", {})["esp_partnum"] = partnum
        register_boot_entry(disk=device.base, partnum=partnum, loader=cfg.zbm_efi_path, dry_run=dry_run)

        r = set_property(
            cfg.root_dataset,
            ZBM_COMMANDLINE_PROPERTY,
            cfg.zbm_commandline,
            check=False,
            dry_run=dry_run,
        )
        if not r.ok:
            warn(state, f"Could not set {ZBM_COMMANDLINE_PROPERTY} on {cfg.root_dataset}")

        return state
