from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from ..errors import ConfirmationError
from ..install_config import InstallConfig

logger = logging.getLogger(__name__)

CONFIRM_WORD = "WIPE"


class ConfirmDestructionStep:
    step_id = "05_confirm"

    def __init__(self, read_line: Callable[[str], str] = input) -> None:
        self._read_line = read_line

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        if cfg.non_interactive:
            logger.info("Non-interactive mode; skipping confirmation for %s", cfg.target_disk)
            return state

        print(f"\nThis will WIPE {cfg.target_disk} and install Alpine on encrypted ZFS.")
        try:
            answer = self._read_line(f"Type '{CONFIRM_WORD}' to continue: ")
        except EOFError:
            answer = ""
        if answer.strip() != CONFIRM_WORD:
            raise ConfirmationError("Aborted")

        state.setdefault("decisions", {})["confirmed"] = True
        return state
