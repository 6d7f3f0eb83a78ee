"""Scanner package - Data collection from the host.

Scanners run commands and collect raw data.
They do NOT analyze or reason - that's the analyzer's job.
"""

from unit_doctor.scanner.journal import LogSourceError, journal_command, open_journal
from unit_doctor.scanner.systemd import SnapshotError, SystemdScanner

__all__ = [
    "LogSourceError",
    "SnapshotError",
    "SystemdScanner",
    "journal_command",
    "open_journal",
]
