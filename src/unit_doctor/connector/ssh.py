"""SSH Connector - diagnose a remote host over SSH.

Only read-only commands are ever sent: `systemctl show`, `command -v`
and `journalctl`.
"""

import shlex
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import paramiko
from paramiko.ssh_exception import AuthenticationException, SSHException

from unit_doctor.connector.base import CommandResult


@dataclass
class SSHConfig:
    """How to reach and authenticate to a host."""

    host: str
    user: str = "root"
    port: int = 22
    key_path: str | None = None
    password: str | None = None  # used for login only when no key is given, and for sudo
    use_sudo: bool = True
    timeout: int = 30

    @property
    def needs_sudo(self) -> bool:
        return self.use_sudo and self.user != "root"


class SSHConnector:
    """Connector for a remote host.

    Example:
        >>> with SSHConnector(SSHConfig(host="node1.example.com", user="ops")) as ssh:
        ...     ssh.which("openshift")
        '/usr/bin/openshift'
    """

    def __init__(self, config: SSHConfig) -> None:
        self.config = config
        self.hostname = config.host
        self._client: paramiko.SSHClient | None = None

    def __enter__(self) -> "SSHConnector":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    def _login_kwargs(self) -> dict[str, Any]:
        cfg = self.config
        kwargs: dict[str, Any] = {
            "hostname": cfg.host,
            "port": cfg.port,
            "username": cfg.user,
            "timeout": cfg.timeout,
        }
        if cfg.key_path:
            key_file = Path(cfg.key_path).expanduser()
            if key_file.exists():
                kwargs["key_filename"] = str(key_file)
        elif cfg.password:
            kwargs["password"] = cfg.password
        return kwargs

    def connect(self) -> None:
        """Open the SSH session.

        Raises:
            ConnectionError: login or transport setup failed.
        """
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(**self._login_kwargs())
        except AuthenticationException as e:
            raise ConnectionError(f"Authentication to {self.config.host} failed: {e}") from e
        except (SSHException, OSError) as e:
            raise ConnectionError(f"Could not connect to {self.config.host}: {e}") from e
        self._client = client

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None

    def _sudo(self, command: str) -> str:
        """Prefix a command with sudo when configured and not already root."""
        if not self.config.needs_sudo:
            return command
        if self.config.password:
            # -S reads the password from stdin, -p '' keeps the prompt out of stdout
            return f"sudo -S -p '' {command}"
        return f"sudo -n {command}"

    def _exec(self, command: str, timeout: float | None, privileged: bool = True):
        if self._client is None:
            raise RuntimeError("SSHConnector is not connected; use it as a context manager")
        if privileged:
            command = self._sudo(command)
        stdin, stdout, stderr = self._client.exec_command(command, timeout=timeout)
        if privileged and self.config.needs_sudo and self.config.password:
            stdin.write(self.config.password + "\n")
            stdin.flush()
        return stdin, stdout, stderr

    def run(self, command: str, timeout: float | None = None) -> CommandResult:
        """Run a command to completion and collect its output.

        Transport failures are reported as exit code 255 rather than raised.
        """
        return self._collect(command, timeout, privileged=True)

    def _collect(self, command: str, timeout: float | None, privileged: bool) -> CommandResult:
        try:
            _, stdout, stderr = self._exec(command, self.config.timeout if timeout is None else timeout, privileged)
            out = stdout.read().decode("utf-8", errors="replace")
            err = stderr.read().decode("utf-8", errors="replace")
            status = stdout.channel.recv_exit_status()
        except (SSHException, OSError) as e:
            return CommandResult(command=command, stdout="", stderr=f"SSH error: {e}", exit_code=255)
        return CommandResult(command=command, stdout=out, stderr=err, exit_code=status)

    @contextmanager
    def stream(self, argv: list[str]) -> Iterator[Iterator[str]]:
        """Start a remote command and yield its stdout line by line.

        No timeout: a remote command that never ends keeps the stream open.
        """
        try:
            _, stdout, _ = self._exec(shlex.join(argv), None)
        except (SSHException, OSError) as e:
            raise ConnectionError(f"Could not start '{argv[0]}' on {self.config.host}: {e}") from e

        channel = stdout.channel
        try:
            yield iter(stdout)
        finally:
            # Closing the channel stops the remote command if still running.
            channel.close()

    def which(self, program: str) -> str:
        """Path of `program` on the remote PATH, or '' when absent."""
        # shell builtin; cannot run under sudo
        result = self._collect(f"command -v {shlex.quote(program)}", None, privileged=False)
        return result.stdout.strip() if result.success else ""
