from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.zfs import create_pool

logger = logging.getLogger(__name__)


class CreatePoolStep:
    step_id = "40_create_pool"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        target_root = (state.get("mounts") or {}).get("target_root")
        if device is None or not target_root:
            raise RuntimeError("Missing device/target_root; run 20_resolve_device first")

        if cfg.keylocation == "prompt":
            logger.info("zpool will now ask for the encryption passphrase")
        create_pool(cfg, device.zfs, target_root, dry_run=cfg.dry_run)
        return state
