from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.devices import resolve_device
from ..lib.env import PATHS

logger = logging.getLogger(__name__)


class ResolveDeviceStep:
    step_id = "20_resolve_device"

    def __init__(self, by_id_dir: str = PATHS.by_id_dir) -> None:
        self.by_id_dir = by_id_dir

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        device = resolve_device(cfg.target_disk, use_by_id=cfg.use_by_id, by_id_dir=self.by_id_dir)
        state["device"] = device
        logger.info(
            "Using %s (%s): esp=%s zfs=%s",
            device.base,
            device.device_class.value,
            device.esp,
            device.zfs,
        )
        return state
