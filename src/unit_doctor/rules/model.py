"""Rule model - what to look for in a unit's journal and what to say about it.

A matcher is one of two variants:

- ``StaticMatcher``: emits its fixed interpretation when it matches and is
  retired after the first match unless ``persistent`` is set.
- ``HandlerMatcher``: hands the match to a ``MatchHandler`` which decides
  what (if anything) to emit and whether the matcher stays active.

Consumers dispatch on the variant type; there is no optional-callback field.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Union

from unit_doctor.model.evidence import Severity
from unit_doctor.model.journal import LogEntry

if TYPE_CHECKING:
    from unit_doctor.checks import DiagnosticContext


@dataclass(frozen=True, kw_only=True)
class _BaseMatcher:
    pattern: re.Pattern[str]
    severity: Severity
    id: str = ""

    def search(self, message: str) -> re.Match[str] | None:
        """Match this rule's pattern anywhere in a log message."""
        return self.pattern.search(message)


@dataclass(frozen=True, kw_only=True)
class StaticMatcher(_BaseMatcher):
    """Matcher with a fixed, human-readable explanation."""

    interpretation: str
    persistent: bool = False  # usually only the newest matching entry is worth reporting


class MatchHandler(Protocol):
    """Custom logic run when a HandlerMatcher matches.

    Returns True to keep the matcher active for the rest of the scan.
    """

    def __call__(
        self,
        ctx: "DiagnosticContext",
        rule: "HandlerMatcher",
        unit: str,
        entry: LogEntry,
        groups: tuple[str, ...],
    ) -> bool: ...


@dataclass(frozen=True, kw_only=True)
class HandlerMatcher(_BaseMatcher):
    """Matcher whose output and lifetime are decided by a handler."""

    handler: MatchHandler


LogMatcher = Union[StaticMatcher, HandlerMatcher]


@dataclass(frozen=True)
class UnitSpec:
    """One monitored unit: its start marker and ordered suspect patterns."""

    name: str
    start_boundary: re.Pattern[str]  # log message written when the unit (re)starts
    matchers: tuple[LogMatcher, ...] = field(default_factory=tuple)  # checked in order


def log_prelude(unit: str, entry: LogEntry) -> str:
    """Header quoting the journal line a finding was raised for."""
    return f"Found '{unit}' journald log message:\n  {entry.message}\n"


@dataclass(frozen=True)
class DependencyRule:
    """`dependent` does not work properly unless `required` is running too."""

    dependent: str
    required: str
    rationale: str
