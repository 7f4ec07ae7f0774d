from __future__ import annotations

from typing import Dict, List, Tuple

import pytest

from alpine_zfs_installer.errors import CommandError
from alpine_zfs_installer.lib import block, bootloader, chroot, firmware, pkg, storage, zfs
from alpine_zfs_installer.lib.command import CmdResult
from alpine_zfs_installer.steps import (
    step_10_prepare_live,
    step_50_bootstrap_system,
    step_90_finalize,
)

_RUN_CMD_USERS = [
    block,
    bootloader,
    chroot,
    firmware,
    pkg,
    storage,
    zfs,
    step_10_prepare_live,
    step_50_bootstrap_system,
    step_90_finalize,
]


class FakeRun:
    """Stand-in for run_cmd that records argv lists instead of executing."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.kwargs: List[dict] = []
        self._results: Dict[Tuple[str, ...], Tuple[int, str, str]] = {}

    def respond(self, *prefix: str, rc: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._results[tuple(prefix)] = (rc, stdout, stderr)

    def fail(self, *prefix: str, rc: int = 1, stderr: str = "boom") -> None:
        self.respond(*prefix, rc=rc, stderr=stderr)

    def _lookup(self, argv: List[str]) -> Tuple[int, str, str]:
        best: Tuple[str, ...] = ()
        for prefix in self._results:
            if tuple(argv[: len(prefix)]) == prefix and len(prefix) > len(best):
                best = prefix
        return self._results.get(best, (0, "", ""))

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, interactive=False, dry_run=False):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.kwargs.append(
            {"check": check, "env": env, "input_text": input_text, "interactive": interactive, "dry_run": dry_run}
        )
        rc, out, err = self._lookup(argv)
        if check and rc != 0:
            raise CommandError(argv, rc, err)
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)

    def find(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]

    def index(self, *prefix: str) -> int:
        for i, c in enumerate(self.calls):
            if tuple(c[: len(prefix)]) == prefix:
                return i
        raise AssertionError(f"no call starting with {prefix!r}; calls={self.calls!r}")


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    fake = FakeRun()
    for module in _RUN_CMD_USERS:
        monkeypatch.setattr(module, "run_cmd", fake)
    return fake
