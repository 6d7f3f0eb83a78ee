"""Local Connector - runs diagnostics commands on this host."""

import shlex
import shutil
import socket
import subprocess
from contextlib import contextmanager
from typing import Iterator

from unit_doctor.connector.base import CommandResult


class LocalConnector:
    """Connector for the host unit-doctor itself runs on.

    Example:
        >>> local = LocalConnector()
        >>> with local.stream(["journalctl", "-ru", "docker", "--output=json"]) as lines:
        ...     first = next(iter(lines), None)
    """

    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout
        self.hostname = socket.gethostname()

    def __enter__(self) -> "LocalConnector":
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def run(self, command: str, timeout: float | None = None) -> CommandResult:
        """Run a command (no shell) and collect its output."""
        argv = shlex.split(command)
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout if timeout is not None else self.timeout,
            )
        except FileNotFoundError as e:
            return CommandResult(command=command, stdout="", stderr=str(e), exit_code=127)
        except subprocess.TimeoutExpired:
            return CommandResult(command=command, stdout="", stderr="Command timed out", exit_code=124)

        return CommandResult(
            command=command,
            stdout=proc.stdout,
            stderr=proc.stderr,
            exit_code=proc.returncode,
        )

    @contextmanager
    def stream(self, argv: list[str]) -> Iterator[Iterator[str]]:
        """Start a command and yield its stdout as lines while it runs."""
        try:
            proc = subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ConnectionError(f"Could not start '{argv[0]}': {e}") from e

        try:
            yield proc.stdout
        finally:
            # The reader may stop early; closing the pipe makes the writer exit.
            proc.stdout.close()
            if proc.poll() is None:
                proc.terminate()
            proc.wait()

    def which(self, program: str) -> str:
        """Path of `program` on PATH, or '' when absent."""
        return shutil.which(program) or ""
