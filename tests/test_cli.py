"""Tests for the typer CLI, driven against the fake ping script."""
import json
import sys
import time
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from pingproc.cli.main import EXIT_CANCELLED, EXIT_LAUNCH_FAILED, app
from pingproc.tasks.handles import PingHandle


@pytest.fixture
def cli_env(tmp_path, monkeypatch, fake_ping):
    """Point the CLI at the fake ping through a config file in the working directory."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(work)
    (work / ".pingproc.yaml").write_text(
        yaml.safe_dump(
            {
                "ping_executable": sys.executable,
                "ping_args": [str(fake_ping)],
                "output_dir": str(tmp_path / "logs"),
            }
        ),
        encoding="utf-8",
    )
    return work


@pytest.fixture
def cli():
    return CliRunner()


def test_run_single_host(cli, cli_env):
    result = cli.invoke(app, ["run", "localhost"])
    assert result.exit_code == 0
    assert "Reply from ::1" in result.output


def test_run_exit_status_is_ping_exit_code(cli, cli_env):
    result = cli.invoke(app, ["run", "badaddress"])
    assert result.exit_code == 1
    assert "could not find host badaddress" in result.output


def test_run_json_output(cli, cli_env, tmp_path):
    result = cli.invoke(app, ["run", "localhost", "localhost", "--json", "-o", str(tmp_path / "out")])
    assert result.exit_code == 0
    out = result.output
    payload = json.loads(out[out.index("{"):out.rindex("}") + 1])
    assert payload["exit_code"] == 0
    assert payload["targets"] == ["localhost", "localhost"]
    assert payload["std_output"].count("Reply from ::1") == 8
    assert (tmp_path / "out" / "pingproc.log").exists()


def test_run_stream(cli, cli_env):
    result = cli.invoke(app, ["run", "localhost", "--stream"])
    assert result.exit_code == 0
    assert result.output.count("Reply from ::1") == 4


def test_run_stream_requires_single_host(cli, cli_env):
    result = cli.invoke(app, ["run", "a", "b", "--stream"])
    assert result.exit_code == 2


def test_run_launch_failure(cli, cli_env):
    (cli_env / ".pingproc.yaml").write_text(
        "ping_executable: pingproc-definitely-missing-executable\nping_args: []\n",
        encoding="utf-8",
    )
    result = cli.invoke(app, ["run", "localhost", "-o", str(cli_env / "logs")])
    assert result.exit_code == EXIT_LAUNCH_FAILED
    assert "Could not start ping" in result.output


def test_run_ctrl_c_kills_ping_and_exits_130(cli, cli_env, popen_spy):
    def _interrupt(*args, **kwargs):
        deadline = time.monotonic() + 10
        while not popen_spy and time.monotonic() < deadline:
            time.sleep(0.01)
        raise KeyboardInterrupt

    with patch.object(PingHandle, "result", side_effect=_interrupt):
        result = cli.invoke(app, ["run", "hang"])

    assert result.exit_code == EXIT_CANCELLED
    assert "Cancelled by user" in result.output
    assert len(popen_spy) == 1
    assert popen_spy[0].returncode is not None


def test_info(cli, cli_env):
    result = cli.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "Ping Command" in result.output
