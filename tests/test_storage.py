import pytest

from alpine_zfs_installer.errors import CommandError
from alpine_zfs_installer.lib import storage


def test_plan_has_exactly_two_partitions():
    cmds = storage.plan_commands(storage.PartitionPlan(disk="/dev/sdx", esp_size_mib=512))
    assert len(cmds) == 2
    esp, zfs = cmds
    assert esp == ["sgdisk", "-n1:1MiB:+512MiB", "-t1:EF00", "-c1:EFI System", "/dev/sdx"]
    assert zfs == ["sgdisk", "-n2:0:0", "-t2:BF01", "-c2:ZFS", "/dev/sdx"]


def test_partition_disk_zaps_then_creates_then_rereads(fake_run):
    storage.partition_disk(storage.PartitionPlan(disk="/dev/nvme0n1"))

    assert fake_run.calls[0] == ["sgdisk", "--zap-all", "/dev/nvme0n1"]
    assert fake_run.kwargs[0]["check"] is False
    assert fake_run.calls[2][1] == "-n1:1MiB:+1024MiB"
    assert fake_run.calls[-1] == ["partprobe", "/dev/nvme0n1"]
    assert fake_run.kwargs[-1]["check"] is True


def test_zap_failure_is_tolerated_but_create_failure_is_fatal(fake_run):
    fake_run.fail("sgdisk", "--zap-all")
    fake_run.fail("sgdisk", "-n2:0:0")

    with pytest.raises(CommandError):
        storage.partition_disk(storage.PartitionPlan(disk="/dev/sdx"))
    assert ["partprobe", "/dev/sdx"] in fake_run.calls
    # final reread never happens
    assert fake_run.calls[-1][1] == "-n2:0:0"


def test_format_esp_uses_label(fake_run):
    storage.format_esp("/dev/sdx1", "EFI")
    assert fake_run.calls == [["mkfs.vfat", "-F32", "-n", "EFI", "/dev/sdx1"]]
