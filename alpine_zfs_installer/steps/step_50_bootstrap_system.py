from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.command import run_cmd
from ..lib.env import ESP_MOUNT_OPTIONS, PATHS
from ..lib.pkg import (
    ZFS_SERVICES,
    apk_add,
    apk_update,
    copy_repositories,
    rc_update_add,
    repositories_configured,
    setup_apkrepos,
    setup_disk,
    target_packages,
)
from ..pipeline import warn

logger = logging.getLogger(__name__)


class BootstrapSystemStep:
    step_id = "50_bootstrap_system"

    def __init__(self, repositories: str = PATHS.apk_repositories) -> None:
        self.repositories = repositories

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        target_root = (state.get("mounts") or {}).get("target_root")
        if device is None or not target_root:
            raise RuntimeError("Missing device/target_root; run earlier steps first")

        dry_run = cfg.dry_run
        logger.info("Bootstrapping Alpine into %s", target_root)

        esp_mount = str(Path(target_root) / PATHS.esp_mount.lstrip("/"))
        if not dry_run:
            Path(esp_mount).mkdir(parents=True, exist_ok=True)
        run_cmd(["mount", "-t", "vfat", "-o", ESP_MOUNT_OPTIONS, device.esp, esp_mount], dry_run=dry_run)
        state.setdefault("mounts", {})["esp"] = esp_mount

        # setup-disk fetches packages, so the live env needs repositories.
        if not repositories_configured(self.repositories):
            setup_apkrepos(dry_run=dry_run)
            if not dry_run and not repositories_configured(self.repositories):
                warn(state, f"{self.repositories} is still empty; package installation will likely fail")

        setup_disk(target_root, cfg.kernel_flavor, dry_run=dry_run)

        if not copy_repositories(target_root, self.repositories, dry_run=dry_run):
            warn(state, "Target keeps its own apk repositories")
        if not apk_update(target_root, dry_run=dry_run):
            warn(state, "apk update in target failed")
        apk_add(target_packages(cfg.kernel_flavor), target_root=target_root, dry_run=dry_run)

        for service in ZFS_SERVICES:
            if not rc_update_add(target_root, service, "boot", dry_run=dry_run):
                warn(state, f"Could not enable {service}; enable it manually with rc-update")

        return state
