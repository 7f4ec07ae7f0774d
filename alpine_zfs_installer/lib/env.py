from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/mnt"
    # ESP mount point inside the installed system (ZFSBootMenu docs prefer /efi)
    esp_mount: str = "/efi"
    by_id_dir: str = "/dev/disk/by-id"
    apk_repositories: str = "/etc/apk/repositories"
    efi_firmware: str = "/sys/firmware/efi"
    efivars: str = "/sys/firmware/efi/efivars"
    log_default: str = "/var/log/alpine-zfs-installer.log"


PATHS = Paths()

ESP_MOUNT_OPTIONS = "fmask=0077,dmask=0077,iocharset=iso8859-1"
