"""Connector interface shared by the local and SSH host connectors."""

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Iterator, Protocol


@dataclass
class CommandResult:
    """Result of a command execution."""

    command: str
    stdout: str
    stderr: str
    exit_code: int
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.exit_code == 0


class Connector(Protocol):
    """Runs read-only commands on the host being diagnosed.

    ``stream`` must start the command before returning the context manager's
    value and raise ``ConnectionError`` (an ``OSError``) when it cannot.
    Leaving the context always releases the output pipe and reaps the
    process, whether or not the output was read to the end.
    """

    hostname: str

    def run(self, command: str, timeout: float | None = None) -> CommandResult: ...

    def stream(self, argv: list[str]) -> AbstractContextManager[Iterator[str]]: ...

    def which(self, program: str) -> str: ...
