from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Dict, Mapping, Optional, Sequence

from .errors import ConfigError, InstallerError
from .install_config import KERNEL_FLAVORS, InstallConfig, build_install_config
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, Step, new_state, run_pipeline
from .steps import (
    BootstrapSystemStep,
    ConfigureSystemStep,
    ConfirmDestructionStep,
    CreateDatasetsStep,
    CreatePoolStep,
    FinalizeStep,
    InstallBootloaderStep,
    PartitionDiskStep,
    PreflightStep,
    PrepareLiveEnvStep,
    ResolveDeviceStep,
)

logger = logging.getLogger(__name__)

EPILOG = """\
Behavior:
  - Creates GPT with an EFI System Partition + rest ZFS
  - Creates an encrypted ZFS pool (passphrase prompted by zpool)
  - Bootloader: installs the prebuilt ZFSBootMenu EFI and registers it with efibootmgr
  - Boot environments: creates <pool>/ROOT/<name>

Every option can also be set through the environment (TARGET_DISK, HOSTNAME,
POOL_NAME, EFI_SIZE_MIB, KERNEL_FLAVOR, ZFS_COMPRESSION, ZFS_ENC_ALGO,
ZFS_KEYFORMAT, ZFS_KEYLOCATION, ZBM_EFI_URL, ZBM_EFI_PATH, ...).

WARNING: this DESTROYS all data on the target disk.

Example:
  alpine-zfs-installer -d /dev/nvme0n1 -H myhost --kernel lts
"""


def build_steps() -> list[Step]:
    return [
        PreflightStep(),
        ConfirmDestructionStep(),
        PrepareLiveEnvStep(),
        ResolveDeviceStep(),
        PartitionDiskStep(),
        CreatePoolStep(),
        CreateDatasetsStep(),
        BootstrapSystemStep(),
        ConfigureSystemStep(),
        InstallBootloaderStep(),
        FinalizeStep(),
    ]


def run(
    cfg: InstallConfig,
    *,
    steps: Optional[Sequence[Step]] = None,
    state: Optional[Dict[str, Any]] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run the installer pipeline. Any failure is fatal and leaves the disk as-is."""

    result = run_pipeline(
        cfg=cfg,
        state=state if state is not None else new_state(),
        steps=steps if steps is not None else build_steps(),
        stop_after=stop_after,
    )
    warnings = result.state.get("warnings") or []
    if warnings:
        logger.warning("%d non-fatal problem(s) during install; review the log", len(warnings))
    if result.completed:
        logger.info("Installation complete.")
    return result


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="alpine-zfs-installer",
        description="Install Alpine Linux on UEFI + encrypted ZFS root (ZFSBootMenu).",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-d", "--disk", dest="target_disk", default=None, help="Target disk device (e.g. /dev/nvme0n1)")
    p.add_argument("-H", "--hostname", default=None, help="System hostname (default: alpine)")
    p.add_argument("-p", "--root-password", default=None, help="Root password (if empty, set it later)")
    p.add_argument(
        "-k",
        "--ssh-pubkey",
        dest="ssh_pubkey_file",
        default=None,
        help="Path to SSH public key to add to /root/.ssh/authorized_keys",
    )
    p.add_argument("--pool-name", default=None, help="ZFS pool name (default: zroot)")
    p.add_argument("--efi-size-mib", type=int, default=None, help="EFI System Partition size in MiB (default: 1024)")
    p.add_argument(
        "--kernel",
        dest="kernel_flavor",
        choices=KERNEL_FLAVORS,
        default=None,
        help="Kernel flavor (default: lts)",
    )
    p.add_argument(
        "--non-interactive",
        action="store_const",
        const=True,
        default=None,
        help="Do not prompt except for the ZFS passphrase",
    )
    p.add_argument(
        "--no-by-id",
        dest="use_by_id",
        action="store_const",
        const=False,
        default=None,
        help="Use the direct disk path instead of /dev/disk/by-id",
    )
    p.add_argument("--config", default=None, help="YAML file with installer settings")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument(
        "--dry-run",
        action="store_const",
        const=True,
        default=None,
        help="Log every command without executing anything",
    )
    p.add_argument("--stop-after", default=None, help="Stop after step_id (e.g. 30_partition_disk)")
    p.add_argument("-v", "--verbose", action="store_true", help="Show command output on the console")
    return p


_CONFIG_ARGS = (
    "target_disk",
    "hostname",
    "root_password",
    "ssh_pubkey_file",
    "pool_name",
    "efi_size_mib",
    "kernel_flavor",
    "non_interactive",
    "use_by_id",
    "dry_run",
)


def main(argv: Optional[list[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    try:
        cfg = build_install_config(
            overrides={k: getattr(args, k) for k in _CONFIG_ARGS},
            environ=os.environ if environ is None else environ,
            config_path=args.config,
        )
    except ConfigError as e:
        p.error(str(e))

    steps = build_steps()
    known = [s.step_id for s in steps]
    if args.stop_after is not None and args.stop_after not in known:
        p.error(f"--stop-after: unknown step {args.stop_after!r} (known: {', '.join(known)})")

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        run(cfg, steps=steps, stop_after=args.stop_after)
    except InstallerError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted; %s is left partially provisioned", cfg.target_disk)
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
