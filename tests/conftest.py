"""Shared fixtures: a scripted stand-in for the system ping utility."""
import fnmatch
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest
from loguru import logger

from pingproc.core.config import AppConfig
from pingproc.core.executor import ProcessRunner

# Same report Windows ping prints for a loopback target; * matches anything.
PING_OUTPUT_LIKE_EXPRESSION = """\
Pinging * with 32 bytes of data:
Reply from ::1: time<*
Reply from ::1: time<*
Reply from ::1: time<*
Reply from ::1: time<*

Ping statistics for ::1:
    Packets: Sent = *, Received = *, Lost = 0 (0% loss),
Approximate round trip times in milli-seconds:
    Minimum = *, Maximum = *, Average = *"""

BAD_ADDRESS_OUTPUT = (
    "Ping request could not find host badaddress. Please check the name and try again."
)

FAKE_PING_SOURCE = textwrap.dedent(
    '''
    import sys
    import time

    target = sys.argv[-1]

    if target == "hang":
        print("Pinging hang with 32 bytes of data:", flush=True)
        time.sleep(60)
        sys.exit(0)

    if target == "badaddress":
        print("Ping request could not find host badaddress. Please check the name and try again.")
        sys.exit(1)

    if target == "unreachable":
        print()
        print("Pinging unreachable with 32 bytes of data:")
        for _ in range(4):
            print("Request timed out.")
        print()
        print("Ping statistics for unreachable:")
        print("    Packets: Sent = 4, Received = 0, Lost = 4 (100% loss),")
        sys.exit(2)

    if target == "noisy":
        print("out line")
        print("err line 1", file=sys.stderr)
        print("err line 2", file=sys.stderr)
        sys.exit(0)

    if target == "flood":
        for i in range(20000):
            sys.stdout.write("stdout %05d\\n" % i)
            sys.stderr.write("stderr %05d\\n" % i)
        sys.exit(0)

    if target.startswith("slow-"):
        time.sleep(int(target.split("-", 1)[1]) / 10.0)

    print()
    print("Pinging %s [::1] with 32 bytes of data:" % target)
    for _ in range(4):
        print("Reply from ::1: time<1ms")
    print()
    print("Ping statistics for ::1:")
    print("    Packets: Sent = 4, Received = 4, Lost = 0 (0% loss),")
    print("Approximate round trip times in milli-seconds:")
    print("    Minimum = 0ms, Maximum = 0ms, Average = 0ms")
    '''
)


def is_like(text: str, pattern: str) -> bool:
    """Wildcard match over the whole (multi-line) text."""
    return fnmatch.fnmatchcase(text, pattern)


def assert_valid_ping_output(result) -> None:
    assert result.std_output and result.std_output.strip()
    assert is_like(result.std_output.strip(), PING_OUTPUT_LIKE_EXPRESSION), (
        f"Output is unexpected: {result.std_output}"
    )
    assert result.exit_code == 0


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


@pytest.fixture
def fake_ping(tmp_path: Path) -> Path:
    script = tmp_path / "fake_ping.py"
    script.write_text(FAKE_PING_SOURCE, encoding="utf-8")
    return script


@pytest.fixture
def fake_command(fake_ping: Path) -> list:
    return [sys.executable, str(fake_ping)]


@pytest.fixture
def runner(fake_command) -> ProcessRunner:
    return ProcessRunner(fake_command)


@pytest.fixture
def config(tmp_path: Path, fake_ping: Path) -> AppConfig:
    return AppConfig(
        output_dir=tmp_path / "out",
        max_workers=4,
        ping_executable=sys.executable,
        ping_args=[str(fake_ping)],
    )


@pytest.fixture
def popen_spy(monkeypatch):
    """Record every process spawned, while still spawning it for real."""
    created = []
    real_popen = subprocess.Popen

    def _spawn(*args, **kwargs):
        proc = real_popen(*args, **kwargs)
        created.append(proc)
        return proc

    monkeypatch.setattr("pingproc.core.executor.subprocess.Popen", _spawn)
    return created
