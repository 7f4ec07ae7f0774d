from alpine_zfs_installer.install_config import InstallConfig
from alpine_zfs_installer.lib import zfs


def _pairs(argv, flag):
    return [argv[i + 1] for i, a in enumerate(argv) if a == flag]


def test_pool_create_argv_fixed_and_configured_options():
    cfg = InstallConfig(target_disk="/dev/sdx", compression="lz4", encryption="aes-128-gcm")
    argv = zfs.pool_create_argv(cfg, "/dev/sdx2", "/mnt")

    assert argv[:3] == ["zpool", "create", "-f"]
    assert _pairs(argv, "-o") == ["ashift=12", "autotrim=on"]
    fs = _pairs(argv, "-O")
    for opt in (
        "acltype=posixacl",
        "xattr=sa",
        "atime=off",
        "relatime=on",
        "dnodesize=auto",
        "normalization=formD",
        "mountpoint=none",
        "compression=lz4",
        "encryption=aes-128-gcm",
        "keyformat=passphrase",
        "keylocation=prompt",
    ):
        assert opt in fs
    assert _pairs(argv, "-R") == ["/mnt"]
    assert argv[-2:] == ["zroot", "/dev/sdx2"]


def test_create_pool_runs_interactively(fake_run):
    cfg = InstallConfig(target_disk="/dev/sdx")
    zfs.create_pool(cfg, "/dev/sdx2", "/mnt")
    assert fake_run.calls[0][0] == "zpool"
    assert fake_run.kwargs[0]["interactive"] is True


def test_dataset_create_argv():
    assert zfs.dataset_create_argv("zroot/tmp", {"mountpoint": "/tmp", "devices": "off", "setuid": "off"}) == [
        "zfs", "create", "-o", "mountpoint=/tmp", "-o", "devices=off", "-o", "setuid=off", "zroot/tmp",
    ]


def test_aux_dataset_layout():
    names = [d.name for d in zfs.AUX_DATASETS]
    assert names == ["home", "var", "var/log", "var/tmp", "tmp"]
    props = {d.name: d.properties for d in zfs.AUX_DATASETS}
    assert props["var/tmp"]["setuid"] == "off"
    assert props["tmp"]["devices"] == "off"
