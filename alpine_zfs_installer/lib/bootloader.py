from __future__ import annotations

import logging
import os
from pathlib import Path

import requests

from ..errors import DownloadError
from .command import run_cmd

logger = logging.getLogger(__name__)

ZBM_LABEL = "ZFSBootMenu"
ZBM_COMMANDLINE_PROPERTY = "org.zfsbootmenu:commandline"

_CHUNK = 1 << 16


def download_zbm(url: str, dest: str, *, timeout: float = 60.0, dry_run: bool = False) -> None:
    """Fetch the prebuilt ZFSBootMenu EFI binary to ``dest`` (on the ESP)."""

    out = Path(dest)
    logger.info("Downloading %s -> %s", url, str(out))
    if dry_run:
        return

    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_name(out.name + ".part")
    try:
        with requests.get(url, stream=True, timeout=timeout, allow_redirects=True) as response:
            response.raise_for_status()
            with tmp.open("wb") as f:
                for chunk in response.iter_content(chunk_size=_CHUNK):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        tmp.unlink(missing_ok=True)
        raise DownloadError(url, str(e)) from e

    if tmp.stat().st_size == 0:
        tmp.unlink()
        raise DownloadError(url, "empty response body")
    tmp.replace(out)
    # The ESP is about to be unmounted lazily; make sure the binary is on disk.
    os.sync()


def register_boot_entry(
    *,
    disk: str,
    partnum: str,
    loader: str,
    label: str = ZBM_LABEL,
    dry_run: bool = False,
) -> None:
    """Create a UEFI boot entry (efibootmgr) for ``loader`` on ``disk`` partition ``partnum``."""

    run_cmd(
        ["efibootmgr", "-c", "-d", disk, "-p", str(partnum), "-L", label, "-l", loader],
        dry_run=dry_run,
    )
    logger.info("Registered UEFI boot entry %s -> %s", label, loader)
