"""Launch external programs and exchange bytes with them over stdio."""
from __future__ import annotations

import shlex
import signal
import subprocess
from dataclasses import dataclass

from ..logging import get_logger
from .deadline import Deadline
from .errors import ExchangeError
from .program import ResolvedProgram

POLL_INTERVAL = 0.1
REAP_TIMEOUT = 5.0

logger = get_logger(__name__)


def describe_exit(returncode: int) -> str:
    """Render a process exit state as ``exit status N`` or ``signal: NAME``."""

    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal: {name}"
    return f"exit status {returncode}"


@dataclass(slots=True)
class ProcessLauncher:
    """Run a resolved program once, feeding *payload* on stdin.

    Waiting happens in slices of ``poll_interval`` so the deadline and its
    cancellation flag are honoured promptly. The child is reaped on every
    path out of :meth:`launch`.
    """

    poll_interval: float = POLL_INTERVAL
    reap_timeout: float = REAP_TIMEOUT

    def launch(
        self,
        program: ResolvedProgram,
        payload: bytes,
        *,
        working_dir: str | None = None,
        deadline: Deadline | None = None,
    ) -> bytes | ExchangeError:
        """Return the program's stdout, or the reason it could not produce one."""

        deadline = deadline or Deadline()
        argv = program.argv
        command_line = shlex.join(argv)

        if deadline.done():
            return self._deadline_error(program, deadline)

        logger.debug("exchange.program.executing", program=command_line)

        try:
            process = subprocess.Popen(  # noqa: S603 - argument vector, no shell
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=working_dir or None,
            )
        except OSError as exc:
            return ExchangeError.execution_failed(
                program.path, state="not started", error=str(exc)
            )

        partial = (b"", b"")
        try:
            outcome = self._communicate(process, payload, deadline)
        finally:
            if process.returncode is None:
                partial = self._terminate(process)

        stdout, stderr = partial if outcome is None else outcome
        logger.debug(
            "exchange.program.executed",
            program=command_line,
            output=stdout.decode("utf-8", errors="replace"),
        )

        if outcome is None:
            return self._deadline_error(program, deadline)

        if process.returncode != 0:
            return ExchangeError.execution_failed(
                program.path,
                state=describe_exit(process.returncode),
                stderr=stderr.decode("utf-8", errors="replace") or None,
            )
        return stdout

    def _communicate(
        self, process: subprocess.Popen, payload: bytes, deadline: Deadline
    ) -> tuple[bytes, bytes] | None:
        # Input is only accepted on the first call; later calls keep writing
        # whatever is left of it while draining stdout and stderr.
        pending: bytes | None = payload
        while not deadline.done():
            remaining = deadline.remaining()
            window = self.poll_interval if remaining is None else min(self.poll_interval, remaining)
            try:
                return process.communicate(input=pending, timeout=window)
            except subprocess.TimeoutExpired:
                pending = None
        return None

    def _terminate(self, process: subprocess.Popen) -> tuple[bytes, bytes]:
        """Kill and reap *process*, returning whatever output it left behind."""

        process.kill()
        try:
            stdout, stderr = process.communicate(timeout=self.reap_timeout)
            return stdout or b"", stderr or b""
        except subprocess.TimeoutExpired:
            # A grandchild may still hold the pipes open.
            for stream in (process.stdin, process.stdout, process.stderr):
                if stream is not None:
                    stream.close()
            process.wait()
            return b"", b""

    def _deadline_error(self, program: ResolvedProgram, deadline: Deadline) -> ExchangeError:
        if deadline.cancelled:
            state = "cancelled before the program exited"
        else:
            state = f"did not exit within {deadline.timeout:g} seconds"
        logger.warning(
            "exchange.program.terminated", program=program.path, state=state
        )
        return ExchangeError.execution_failed(program.path, state=state, timed_out=True)


__all__ = ["ProcessLauncher", "describe_exit"]
