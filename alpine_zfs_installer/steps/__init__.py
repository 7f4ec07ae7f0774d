from .step_00_preflight import PreflightStep
from .step_05_confirm import ConfirmDestructionStep
from .step_10_prepare_live import PrepareLiveEnvStep
from .step_20_resolve_device import ResolveDeviceStep
from .step_30_partition_disk import PartitionDiskStep
from .step_40_create_pool import CreatePoolStep
from .step_45_create_datasets import CreateDatasetsStep
from .step_50_bootstrap_system import BootstrapSystemStep
from .step_60_configure_system import ConfigureSystemStep
from .step_70_install_bootloader import InstallBootloaderStep
from .step_90_finalize import FinalizeStep

__all__ = [
    "PreflightStep",
    "ConfirmDestructionStep",
    "PrepareLiveEnvStep",
    "ResolveDeviceStep",
    "PartitionDiskStep",
    "CreatePoolStep",
    "CreateDatasetsStep",
    "BootstrapSystemStep",
    "ConfigureSystemStep",
    "InstallBootloaderStep",
    "FinalizeStep",
]
