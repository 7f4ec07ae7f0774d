from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.command import run_cmd
from ..lib.zfs import export_pool, set_bootfs
from ..pipeline import warn

logger = logging.getLogger(__name__)


class FinalizeStep:
    step_id = "90_finalize"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        target_root = (state.get("mounts") or {}).get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = cfg.dry_run
        logger.info("Setting pool bootfs and unmounting")

        set_bootfs(cfg.pool_name, cfg.root_dataset, dry_run=dry_run)
        if not run_cmd(["umount", "-Rl", target_root], check=False, dry_run=dry_run).ok:
            warn(state, f"umount -Rl {target_root} reported errors")
        export_pool(cfg.pool_name, dry_run=dry_run)

        logger.info("Done. You can now reboot into ZFSBootMenu.")
        return state
