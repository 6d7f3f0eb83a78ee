"""Plain Text Reporter Implementation."""

from unit_doctor.actions.reporters.base import BaseReporter
from unit_doctor.model.evidence import Severity
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot


class PlainReporter(BaseReporter):
    """Generates clean, text-only output."""

    def report_findings(self, findings: list[Finding], suppressed: list[dict[str, str]] | None = None) -> int:
        """Report diagnosis findings to the console."""
        error_count = sum(1 for f in findings if f.severity == Severity.ERROR)
        warn_count = sum(1 for f in findings if f.severity == Severity.WARN)

        self.console.print()
        self.console.print("DIAGNOSIS RESULTS", style="bold", highlight=False)
        self.console.print(f"Summary: {error_count} error(s), {warn_count} warning(s)", highlight=False)
        if suppressed:
            self.console.print(f"Waived: {len(suppressed)}", highlight=False)
        self.console.print()

        for finding in self.visible(findings):
            self._print_finding(finding)

        return self.exit_code(findings)

    def _print_finding(self, finding: Finding) -> None:
        """Print a single finding."""
        # markup off: messages contain literal [brackets] and shell prompts
        self.console.print(f"[{finding.severity_label}] {finding.id}", markup=False, highlight=False)
        for line in finding.text.splitlines():
            self.console.print(f"   {line}", markup=False, highlight=False)
        for ev in finding.evidence:
            self.console.print(f"   evidence: {ev}", markup=False, highlight=False)
        self.console.print()

    def report_host_summary(self, environment: HostEnvironment, snapshot: UnitSnapshot) -> None:
        """Display host summary."""
        self.console.print(f"HOST: {environment.hostname}", markup=False, highlight=False)
        self.console.print(f"systemd: {'yes' if environment.has_systemd else 'no'}", highlight=False)
        self.console.print(f"openshift: {environment.openshift_path or 'not found'}", markup=False, highlight=False)
        for name in sorted(snapshot):
            self.console.print(f"unit {snapshot[name].describe()}", markup=False, highlight=False)
