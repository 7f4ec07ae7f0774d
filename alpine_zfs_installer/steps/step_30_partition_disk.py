from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.storage import PartitionPlan, format_esp, partition_disk

logger = logging.getLogger(__name__)


class PartitionDiskStep:
    step_id = "30_partition_disk"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        if device is None:
            raise RuntimeError("No resolved device; run 20_resolve_device first")

        plan = PartitionPlan(disk=device.base, esp_size_mib=cfg.efi_size_mib, esp_label=cfg.efi_label)
        partition_disk(plan, dry_run=cfg.dry_run)
        format_esp(device.esp, cfg.efi_label, dry_run=cfg.dry_run)
        return state
