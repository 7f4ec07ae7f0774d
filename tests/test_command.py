import pytest

from alpine_zfs_installer.errors import CommandError, PreconditionError
from alpine_zfs_installer.lib import command


def test_run_cmd_captures_output():
    r = command.run_cmd(["sh", "-c", "echo hello; echo oops >&2"])
    assert r.ok
    assert r.stdout.strip() == "hello"
    assert r.stderr.strip() == "oops"


def test_run_cmd_failure():
    with pytest.raises(CommandError) as exc:
        command.run_cmd(["sh", "-c", "echo bad >&2; exit 3"])
    assert exc.value.returncode == 3
    assert "bad" in str(exc.value)

    r = command.run_cmd(["sh", "-c", "exit 3"], check=False)
    assert r.returncode == 3 and not r.ok


def test_run_cmd_missing_binary():
    with pytest.raises(CommandError):
        command.run_cmd(["definitely-not-a-real-tool-xyz"])
    assert command.run_cmd(["definitely-not-a-real-tool-xyz"], check=False).returncode == 127


def test_run_cmd_dry_run_does_not_execute(tmp_path):
    marker = tmp_path / "marker"
    r = command.run_cmd(["touch", str(marker)], dry_run=True)
    assert r.ok
    assert not marker.exists()


def test_run_cmd_env_and_input():
    r = command.run_cmd(["sh", "-c", 'read x; echo "$FOO:$x"'], env={"FOO": "bar"}, input_text="baz\n")
    assert r.stdout.strip() == "bar:baz"


def test_need_cmd():
    assert command.need_cmd("sh")
    with pytest.raises(PreconditionError, match="apk add some-pkg"):
        command.need_cmd("definitely-not-a-real-tool-xyz", "some-pkg")
