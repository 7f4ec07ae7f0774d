import os
import stat

import pytest

from alpine_zfs_installer.errors import DetectionError
from alpine_zfs_installer.lib import bootcfg


def test_features_line_replaced():
    text = 'modloop="yes"\nfeatures="ata base ide scsi usb virtio ext4"\n'
    out = bootcfg.set_initfs_features(text)
    assert out == 'modloop="yes"\nfeatures="base keymap kms nvme scsi virtio zfs"\n'


def test_features_line_appended():
    assert bootcfg.set_initfs_features("") == 'features="base keymap kms nvme scsi virtio zfs"\n'
    assert bootcfg.set_initfs_features("a=1").endswith('a=1\nfeatures="base keymap kms nvme scsi virtio zfs"\n')


def test_configure_mkinitfs_creates_file(tmp_path):
    bootcfg.configure_mkinitfs(str(tmp_path))
    conf = tmp_path / "etc/mkinitfs/mkinitfs.conf"
    assert "zfs" in conf.read_text(encoding="utf-8")


def test_fstab_entry_appended_once(tmp_path):
    fstab = tmp_path / "etc" / "fstab"
    fstab.parent.mkdir()
    fstab.write_text("zroot/ROOT/alpine / zfs defaults 0 0", encoding="utf-8")

    assert bootcfg.ensure_fstab_entry(str(tmp_path), "1234-abcd") is True
    assert bootcfg.ensure_fstab_entry(str(tmp_path), "1234-abcd") is False

    lines = fstab.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "zroot/ROOT/alpine / zfs defaults 0 0"
    assert lines[1] == "PARTUUID=1234-abcd /efi vfat noatime,fmask=0077,dmask=0077,iocharset=iso8859-1 0 2"
    assert len(lines) == 2


def test_fstab_existing_efi_line_not_duplicated(tmp_path):
    fstab = tmp_path / "etc" / "fstab"
    fstab.parent.mkdir()
    fstab.write_text("UUID=AAAA-BBBB /efi vfat defaults 0 2\n", encoding="utf-8")
    assert bootcfg.ensure_fstab_entry(str(tmp_path), "1234-abcd") is False
    assert "PARTUUID" not in fstab.read_text(encoding="utf-8")


def test_has_mount_ignores_comments_and_other_paths():
    text = "# /efi was here\nUUID=1 /efi/extra vfat defaults 0 2\n"
    assert not bootcfg.has_mount(text, "/efi")


def test_detect_kernel_version(tmp_path):
    modules = tmp_path / "lib" / "modules"
    (modules / "6.6.30-0-lts").mkdir(parents=True)
    (modules / "6.1.90-0-lts").mkdir()
    assert bootcfg.detect_kernel_version(str(tmp_path)) == "6.1.90-0-lts"


def test_detect_kernel_version_missing(tmp_path):
    with pytest.raises(DetectionError):
        bootcfg.detect_kernel_version(str(tmp_path))
    assert bootcfg.detect_kernel_version(str(tmp_path), dry_run=True)


def test_rebuild_initramfs_runs_in_chroot(fake_run):
    bootcfg.rebuild_initramfs("/mnt", "6.6.30-0-lts")
    assert fake_run.calls == [
        ["chroot", "/mnt", "mkinitfs", "-c", "/etc/mkinitfs/mkinitfs.conf", "6.6.30-0-lts"]
    ]


def test_root_password_fed_on_stdin(fake_run):
    bootcfg.set_root_password("/mnt", "s3cret")
    assert fake_run.calls == [["chroot", "/mnt", "chpasswd"]]
    assert fake_run.kwargs[0]["input_text"] == "root:s3cret\n"


def test_install_ssh_key(tmp_path):
    key = tmp_path / "id_ed25519.pub"
    key.write_text("ssh-ed25519 AAAA test@host", encoding="utf-8")
    root = tmp_path / "target"

    assert bootcfg.install_ssh_key(str(root), str(key)) is True
    assert bootcfg.install_ssh_key(str(root), str(key)) is True

    auth = root / "root/.ssh/authorized_keys"
    assert auth.read_text(encoding="utf-8") == "ssh-ed25519 AAAA test@host\n" * 2
    assert stat.S_IMODE(os.stat(auth).st_mode) == 0o600
    assert stat.S_IMODE(os.stat(auth.parent).st_mode) == 0o700


def test_install_ssh_key_missing_file(tmp_path):
    assert bootcfg.install_ssh_key(str(tmp_path), str(tmp_path / "nope.pub")) is False
    assert bootcfg.install_ssh_key(str(tmp_path), None) is False
    assert not (tmp_path / "root").exists()


def test_set_timezone(tmp_path):
    zone = tmp_path / "usr/share/zoneinfo/Europe/Berlin"
    zone.parent.mkdir(parents=True)
    zone.write_bytes(b"TZif")

    assert bootcfg.set_timezone(str(tmp_path), "Europe/Berlin") is True
    assert os.readlink(tmp_path / "etc/localtime") == "/usr/share/zoneinfo/Europe/Berlin"
    assert (tmp_path / "etc/timezone").read_text(encoding="utf-8") == "Europe/Berlin\n"
    assert bootcfg.set_timezone(str(tmp_path), "Mars/Olympus") is False


def test_dry_run_writes_nothing(tmp_path):
    bootcfg.write_hostname(str(tmp_path), "box", dry_run=True)
    bootcfg.ensure_fstab_entry(str(tmp_path), "x", dry_run=True)
    assert not (tmp_path / "etc").exists()
