from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

KERNEL_FLAVORS = ("lts", "virt")

# field name -> environment variable
ENV_VARS: Dict[str, str] = {
    "pool_name": "POOL_NAME",
    "root_be_name": "ROOT_BE_NAME",
    "efi_label": "EFI_LABEL",
    "efi_size_mib": "EFI_SIZE_MIB",
    "hostname": "HOSTNAME",
    "timezone": "TIMEZONE",
    "kernel_flavor": "KERNEL_FLAVOR",
    "compression": "ZFS_COMPRESSION",
    "encryption": "ZFS_ENC_ALGO",
    "keyformat": "ZFS_KEYFORMAT",
    "keylocation": "ZFS_KEYLOCATION",
    "zbm_efi_url": "ZBM_EFI_URL",
    "zbm_efi_path": "ZBM_EFI_PATH",
    "zbm_commandline": "ZBM_COMMANDLINE",
    "target_disk": "TARGET_DISK",
    "use_by_id": "USE_BY_ID",
    "non_interactive": "NON_INTERACTIVE",
    "root_password": "ROOT_PASSWORD",
    "ssh_pubkey_file": "SSH_PUBKEY_FILE",
    "dry_run": "DRY_RUN",
}

_BOOL_FIELDS = {"use_by_id", "non_interactive", "dry_run"}
_INT_FIELDS = {"efi_size_mib"}
_OPTIONAL_FIELDS = {"root_password", "ssh_pubkey_file"}


@dataclass(frozen=True)
class InstallConfig:
    target_disk: str
    pool_name: str = "zroot"
    root_be_name: str = "alpine"
    efi_label: str = "EFI"
    efi_size_mib: int = 1024
    hostname: str = "alpine"
    timezone: str = "UTC"
    kernel_flavor: str = "lts"
    compression: str = "zstd-19"
    encryption: str = "aes-256-gcm"
    keyformat: str = "passphrase"
    keylocation: str = "prompt"
    zbm_efi_url: str = "https://get.zfsbootmenu.org/efi"
    zbm_efi_path: str = "\\EFI\\ZBM\\ZFSBootMenu.EFI"
    zbm_commandline: str = "quiet loglevel=3"
    use_by_id: bool = True
    non_interactive: bool = False
    root_password: Optional[str] = None
    ssh_pubkey_file: Optional[str] = None
    dry_run: bool = False

    def __post_init__(self) -> None:
        if not self.target_disk:
            raise ConfigError("--disk is required")
        if not isinstance(self.efi_size_mib, int) or self.efi_size_mib <= 0:
            raise ConfigError(f"EFI size must be a positive number of MiB, got {self.efi_size_mib!r}")
        if self.kernel_flavor not in KERNEL_FLAVORS:
            raise ConfigError(
                f"Unsupported kernel flavor {self.kernel_flavor!r} (expected one of: {', '.join(KERNEL_FLAVORS)})"
            )
        if not self.pool_name or "/" in self.pool_name:
            raise ConfigError(f"Invalid pool name {self.pool_name!r}")

    @property
    def root_dataset(self) -> str:
        return f"{self.pool_name}/ROOT/{self.root_be_name}"

    @property
    def zbm_efi_relpath(self) -> str:
        """The firmware path of the boot manager, relative to the ESP root (POSIX form)."""
        return self.zbm_efi_path.replace("\\", "/").lstrip("/")


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name}: expected an integer, got {value!r}") from e


def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in values.items():
        if key in _BOOL_FIELDS:
            out[key] = _as_bool(key, value)
        elif key in _INT_FIELDS:
            out[key] = _as_int(key, value)
        elif key in _OPTIONAL_FIELDS:
            out[key] = str(value) if value not in (None, "") else None
        else:
            out[key] = "" if value is None else str(value)
    return out


def load_config_file(path: str) -> Dict[str, Any]:
    """Read a flat YAML mapping of InstallConfig field names."""

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    known = {f.name for f in dataclasses.fields(InstallConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")
    return _coerce(raw)


def config_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    # Set-but-empty variables fall back to the default.
    values = {field: environ[var] for field, var in ENV_VARS.items() if environ.get(var)}
    return _coerce(values)


def build_install_config(
    *,
    overrides: Mapping[str, Any],
    environ: Mapping[str, str],
    config_path: Optional[str] = None,
) -> InstallConfig:
    """Layer defaults < YAML file < environment < command line."""

    values: Dict[str, Any] = {}
    if config_path:
        values.update(load_config_file(config_path))
    values.update(config_from_env(environ))
    values.update(_coerce({k: v for k, v in overrides.items() if v is not None}))
    values.setdefault("target_disk", "")
    return InstallConfig(**values)
