"""
Process execution engine: spawn ping, drain its streams, reap it.
"""

import subprocess
import threading
import time
from typing import IO, Callable, List, Optional

from loguru import logger

from pingproc.core.cancellation import CancellationToken
from pingproc.core.config import AppConfig
from pingproc.core.detector import SystemDetector
from pingproc.core.errors import LaunchError
from pingproc.core.result import RawRun

LineCallback = Callable[[str], None]

# Suppresses the console window on Windows; 0 elsewhere.
_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)


class _StreamDrain(threading.Thread):
    """Read one pipe to EOF into a private buffer."""

    def __init__(self, stream: IO[str], name: str, callback: Optional[LineCallback]):
        super().__init__(name=name, daemon=True)
        self.stream = stream
        self.callback = callback
        self.chunks: List[str] = []
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        for line in self.stream:
            self.chunks.append(line)
            if self.callback is not None and self.error is None:
                try:
                    self.callback(line.rstrip("\n"))
                except Exception as e:
                    # Keep draining so the child never blocks on a full pipe.
                    self.error = e

    @property
    def text(self) -> str:
        return "".join(self.chunks)


class ProcessRunner:
    """Run the ping command against one target and capture its output."""

    def __init__(self, command: List[str], encoding: str = "utf-8"):
        if not command:
            raise ValueError("command must name an executable")
        self.command = list(command)
        self.encoding = encoding

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        detector: Optional[SystemDetector] = None,
    ) -> "ProcessRunner":
        detector = detector or SystemDetector()
        command = detector.ping_command(config.ping_executable, config.ping_args)
        return cls(command, encoding=config.encoding)

    def run(
        self,
        target: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
        on_stdout: Optional[LineCallback] = None,
        on_stderr: Optional[LineCallback] = None,
    ) -> RawRun:
        """
        Execute ping for a single target and block until it exits.

        Args:
            target: Host name or address, passed through unvalidated
            cancel_token: Kills the process when cancelled
            on_stdout: Called with each stdout line as it arrives
            on_stderr: Called with each stderr line as it arrives

        Returns:
            RawRun with the real exit code and the full captured text

        Raises:
            LaunchError: if the executable cannot be started
        """
        argv = [*self.command, target]
        cmd_str = " ".join(argv)

        if cancel_token is not None and cancel_token.cancelled:
            logger.warning(f"Cancelled before start, not spawning: {cmd_str}")
            return RawRun(exit_code=-1, stdout="", stderr="", cancelled=True, spawned=False)

        logger.debug(f"Executing command: {cmd_str}")
        start_time = time.time()

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding=self.encoding,
                errors="replace",
                creationflags=_CREATION_FLAGS,
            )
        except OSError as e:
            logger.error(f"Command failed to launch: {cmd_str} - {e}")
            raise LaunchError(argv, str(e)) from e

        killed = threading.Event()

        def _kill() -> None:
            # A cancel after the child has exited leaves the run completed.
            if proc.poll() is not None:
                return
            killed.set()
            try:
                proc.kill()
            except OSError:
                pass  # already exited

        with proc:
            stdout_drain = _StreamDrain(proc.stdout, f"ping-stdout-{proc.pid}", on_stdout)
            stderr_drain = _StreamDrain(proc.stderr, f"ping-stderr-{proc.pid}", on_stderr)
            stdout_drain.start()
            stderr_drain.start()

            reg_id = cancel_token.register(_kill) if cancel_token is not None else None
            try:
                exit_code = proc.wait()
            finally:
                if reg_id is not None:
                    cancel_token.unregister(reg_id)
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()
                stdout_drain.join()
                stderr_drain.join()

        duration = time.time() - start_time

        for drain in (stdout_drain, stderr_drain):
            if drain.error is not None:
                raise drain.error

        if killed.is_set():
            logger.warning(
                f"Command cancelled: {cmd_str} "
                f"(return code: {exit_code}, duration: {duration:.2f}s)"
            )
        else:
            logger.info(
                f"Command completed: {cmd_str} "
                f"(return code: {exit_code}, duration: {duration:.2f}s)"
            )

        return RawRun(
            exit_code=exit_code,
            stdout=stdout_drain.text,
            stderr=stderr_drain.text,
            cancelled=killed.is_set(),
        )
