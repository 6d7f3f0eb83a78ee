"""Base Reporter Interface."""

from abc import ABC, abstractmethod

from rich.console import Console

from unit_doctor.model.evidence import Severity
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot


class BaseReporter(ABC):
    """Abstract base class for all diagnostic reporters."""

    def __init__(self, console: Console, min_level: Severity = Severity.INFO) -> None:
        self.console = console
        self.min_level = min_level

    def visible(self, findings: list[Finding]) -> list[Finding]:
        """Findings at or above the configured display level."""
        return [f for f in findings if f.severity.at_least(self.min_level)]

    @staticmethod
    def exit_code(findings: list[Finding]) -> int:
        """2 when any error remains, 1 for warnings only, else 0."""
        if any(f.severity == Severity.ERROR for f in findings):
            return 2
        if any(f.severity == Severity.WARN for f in findings):
            return 1
        return 0

    @abstractmethod
    def report_findings(self, findings: list[Finding], suppressed: list[dict[str, str]] | None = None) -> int:
        """Report findings; return the process exit code they imply."""
        pass

    @abstractmethod
    def report_host_summary(self, environment: HostEnvironment, snapshot: UnitSnapshot) -> None:
        """Display what was found on the host before the findings."""
        pass
