"""Evidence dataclass and severity levels for findings."""

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity levels for findings, most severe first."""

    ERROR = "error"  # Service is (or will be) broken
    WARN = "warn"  # Likely problem, worth a look
    INFO = "info"  # Advisory or progress note
    DEBUG = "debug"  # Diagnostic noise about the diagnostics themselves

    @property
    def rank(self) -> int:
        """Sort position: 0 for ERROR through 3 for DEBUG."""
        return _RANKS[self]

    def at_least(self, other: "Severity") -> bool:
        """True when this severity is as severe as `other` or more."""
        return self.rank <= other.rank

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Parse a user-supplied level name ("warning" is accepted for WARN)."""
        name = value.strip().lower()
        if name == "warning":
            name = "warn"
        return cls(name)


_RANKS = {
    Severity.ERROR: 0,
    Severity.WARN: 1,
    Severity.INFO: 2,
    Severity.DEBUG: 3,
}


@dataclass(frozen=True)
class Evidence:
    """Where a finding came from.

    Attributes:
        source: The unit or subsystem the evidence was read from.
        excerpt: The actual text that triggered the finding (a journal
            message or a summary of unit state).
        command: Command that produced this evidence, if any
            (e.g. 'journalctl -ru docker').
    """

    source: str
    excerpt: str
    command: str | None = None

    def __str__(self) -> str:
        """Format evidence for display."""
        return f"{self.source}: {self.excerpt}"
