from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from ..install_config import InstallConfig
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

POOL_OPTIONS = [
    ("-o", "ashift=12"),
    ("-o", "autotrim=on"),
]

FS_OPTIONS = [
    ("-O", "acltype=posixacl"),
    ("-O", "xattr=sa"),
    ("-O", "atime=off"),
    ("-O", "relatime=on"),
    ("-O", "dnodesize=auto"),
    ("-O", "normalization=formD"),
    ("-O", "mountpoint=none"),
]


@dataclass(frozen=True)
class DatasetSpec:
    name: str  # relative to the pool
    properties: Dict[str, str] = field(default_factory=dict)


# Auxiliary datasets, created after the boot environment is mounted.
AUX_DATASETS: List[DatasetSpec] = [
    DatasetSpec("home", {"mountpoint": "/home"}),
    DatasetSpec("var", {"mountpoint": "/var"}),
    DatasetSpec("var/log", {"mountpoint": "/var/log"}),
    DatasetSpec("var/tmp", {"mountpoint": "/var/tmp", "setuid": "off"}),
    DatasetSpec("tmp", {"mountpoint": "/tmp", "devices": "off", "setuid": "off"}),
]


def pool_create_argv(cfg: InstallConfig, zfs_dev: str, altroot: str) -> List[str]:
    argv = ["zpool", "create", "-f"]
    for flag, opt in POOL_OPTIONS + FS_OPTIONS:
        argv += [flag, opt]
    argv += [
        "-O", f"compression={cfg.compression}",
        "-O", f"encryption={cfg.encryption}",
        "-O", f"keyformat={cfg.keyformat}",
        "-O", f"keylocation={cfg.keylocation}",
        "-R", altroot,
        cfg.pool_name,
        zfs_dev,
    ]
    return argv


def create_pool(cfg: InstallConfig, zfs_dev: str, altroot: str, *, dry_run: bool = False) -> None:
    """Create the encrypted pool.

    With ``keylocation=prompt`` zpool asks for the passphrase on the
    terminal, so the command runs interactively and blocks until answered.
    """

    logger.info("Creating encrypted ZFS pool %s on %s", cfg.pool_name, zfs_dev)
    run_cmd(pool_create_argv(cfg, zfs_dev, altroot), interactive=True, dry_run=dry_run)


def dataset_create_argv(dataset: str, properties: Dict[str, str]) -> List[str]:
    argv = ["zfs", "create"]
    for key, value in properties.items():
        argv += ["-o", f"{key}={value}"]
    argv.append(dataset)
    return argv


def create_dataset(dataset: str, properties: Dict[str, str], *, dry_run: bool = False) -> None:
    run_cmd(dataset_create_argv(dataset, properties), dry_run=dry_run)


def mount_dataset(dataset: str, *, dry_run: bool = False) -> None:
    run_cmd(["zfs", "mount", dataset], dry_run=dry_run)


def set_property(
    target: str,
    prop: str,
    value: str,
    *,
    check: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    return run_cmd(["zfs", "set", f"{prop}={value}", target], check=check, dry_run=dry_run)


def set_bootfs(pool: str, dataset: str, *, dry_run: bool = False) -> None:
    run_cmd(["zpool", "set", f"bootfs={dataset}", pool], dry_run=dry_run)


def export_pool(pool: str, *, dry_run: bool = False) -> None:
    run_cmd(["zpool", "export", pool], dry_run=dry_run)
