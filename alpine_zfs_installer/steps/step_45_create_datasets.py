from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from ..errors import CommandError, InstallerError
from ..install_config import InstallConfig
from ..lib.zfs import AUX_DATASETS, create_dataset, mount_dataset

logger = logging.getLogger(__name__)


class CreateDatasetsStep:
    step_id = "45_create_datasets"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        target_root = (state.get("mounts") or {}).get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = cfg.dry_run
        pool = cfg.pool_name
        logger.info("Creating datasets")

        # The boot environment must exist and be mounted before anything
        # else can be mounted beneath it.
        create_dataset(f"{pool}/ROOT", {"mountpoint": "none"}, dry_run=dry_run)
        create_dataset(cfg.root_dataset, {"canmount": "noauto", "mountpoint": "/"}, dry_run=dry_run)
        mount_dataset(cfg.root_dataset, dry_run=dry_run)

        failed: List[str] = []
        for spec in AUX_DATASETS:
            name = f"{pool}/{spec.name}"
            try:
                create_dataset(name, spec.properties, dry_run=dry_run)
            except CommandError as e:
                logger.error("Failed to create %s: %s", name, e)
                failed.append(name)

        if failed:
            raise InstallerError(f"Dataset creation failed: {', '.join(failed)}")

        tmp = Path(target_root) / "tmp"
        if dry_run:
            logger.info("Would chmod 1777 %s", str(tmp))
        else:
            os.chmod(tmp, 0o1777)

        state.setdefault("decisions", {})["datasets"] = [f"{pool}/ROOT", cfg.root_dataset] + [
            f"{pool}/{s.name}" for s in AUX_DATASETS
        ]
        return state
