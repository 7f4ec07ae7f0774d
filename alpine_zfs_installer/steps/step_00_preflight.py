from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..errors import PreconditionError
from ..install_config import InstallConfig
from ..pipeline import warn

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "00_preflight"

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        if os.geteuid() != 0:
            if not cfg.dry_run:
                raise PreconditionError("Run as root")
            warn(state, "Not running as root; continuing because this is a dry run")

        logger.info(
            "Target disk=%s pool=%s boot environment=%s kernel=%s",
            cfg.target_disk,
            cfg.pool_name,
            cfg.root_dataset,
            cfg.kernel_flavor,
        )
        return state
