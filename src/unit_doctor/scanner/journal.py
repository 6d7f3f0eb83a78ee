"""Journal source - streams a unit's journal newest-first.

Scanners collect raw data; they do not decide what it means.
"""

from contextlib import ExitStack, contextmanager
from typing import Iterator

from unit_doctor.connector.base import Connector


class LogSourceError(Exception):
    """The journal reader for a unit could not be started or piped."""

    def __init__(self, unit: str, cause: BaseException) -> None:
        super().__init__(f"could not read journal for '{unit}': {cause}")
        self.unit = unit
        self.cause = cause


def journal_command(unit: str) -> list[str]:
    """journalctl invocation: newest entry first, one JSON record per line."""
    return ["journalctl", "-ru", unit, "--output=json"]


@contextmanager
def open_journal(connector: Connector, unit: str) -> Iterator[Iterator[str]]:
    """Open a unit's journal as a line stream.

    Raises LogSourceError when the reader cannot be started. The reader
    process is released when the context exits, on every path.
    """
    with ExitStack() as stack:
        try:
            lines = stack.enter_context(connector.stream(journal_command(unit)))
        except OSError as e:
            raise LogSourceError(unit, e) from e
        yield lines
