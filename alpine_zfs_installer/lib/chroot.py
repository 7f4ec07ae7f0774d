from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def chroot_cmd(
    target_root: str,
    argv: Sequence[str],
    *,
    check: bool = True,
    input_text: str | None = None,
    env: Mapping[str, str] | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command inside target root."""

    return run_cmd(
        ["chroot", target_root, *argv],
        check=check,
        input_text=input_text,
        env=env,
        dry_run=dry_run,
    )
