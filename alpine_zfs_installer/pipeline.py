from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .errors import StepFailed
from .install_config import InstallConfig
from .lib.env import PATHS

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single pipeline stage. Stages are not retried and not undone."""

    step_id: str

    def run(self, cfg: InstallConfig, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    completed: bool


def new_state(target_root: str = PATHS.target_root) -> Dict[str, Any]:
    return {
        "mounts": {"target_root": target_root},
        "device": None,
        "decisions": {},
        "warnings": [],
        "execution": {"current_step": None},
    }


def warn(state: Dict[str, Any], message: str) -> None:
    """Record a tolerated failure; the pipeline continues."""

    logger.warning("%s", message)
    state.setdefault("warnings", []).append(message)


def run_pipeline(
    *,
    cfg: InstallConfig,
    state: Dict[str, Any],
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps strictly in order; the first failure stops everything."""

    ran: List[str] = []
    known = [s.step_id for s in steps]
    if stop_after is not None and stop_after not in known:
        raise ValueError(f"Unknown step {stop_after!r} (known: {', '.join(known)})")

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("Running step %s", step.step_id)
        try:
            state = step.run(cfg, state)
        except StepFailed:
            raise
        except Exception as e:
            raise StepFailed(step.step_id, e) from e
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, completed=len(ran) == len(steps))
