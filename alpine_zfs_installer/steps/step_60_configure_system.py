from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib import bootcfg
from ..lib.block import get_partuuid
from ..pipeline import warn

logger = logging.getLogger(__name__)


class ConfigureSystemStep:
    step_id = "60_configure_system"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        target_root = (state.get("mounts") or {}).get("target_root")
        if device is None or not target_root:
            raise RuntimeError("Missing device/target_root; run earlier steps first")

        dry_run = cfg.dry_run
        decisions = state.setdefault("decisions", {})
        logger.info("Configuring system")

        bootcfg.write_hostname(target_root, cfg.hostname, dry_run=dry_run)

        bootcfg.configure_mkinitfs(target_root, dry_run=dry_run)
        kver = bootcfg.detect_kernel_version(target_root, dry_run=dry_run)
        decisions["kernel_version"] = kver
        bootcfg.rebuild_initramfs(target_root, kver, dry_run=dry_run)

        partuuid = get_partuuid(device.esp, dry_run=dry_run)
        decisions["esp_partuuid"] = partuuid
        bootcfg.ensure_fstab_entry(target_root, partuuid, dry_run=dry_run)

        if not bootcfg.set_timezone(target_root, cfg.timezone, dry_run=dry_run):
            warn(state, f"Timezone {cfg.timezone} not applied")

        if cfg.root_password:
            bootcfg.set_root_password(target_root, cfg.root_password, dry_run=dry_run)
        else:
            logger.info("No root password configured; set one after first boot")

        if cfg.ssh_pubkey_file:
            if not bootcfg.install_ssh_key(target_root, cfg.ssh_pubkey_file, dry_run=dry_run):
                warn(state, f"SSH public key {cfg.ssh_pubkey_file} was not installed")

        logger.info("Configured hostname=%s kernel=%s esp PARTUUID=%s", cfg.hostname, kver, partuuid)
        return state
