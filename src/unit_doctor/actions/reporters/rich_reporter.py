"""Rich Reporter Implementation."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from unit_doctor.actions.reporters.base import BaseReporter
from unit_doctor.model.evidence import Severity
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot

_STYLES = {
    Severity.ERROR: ("red", "x"),
    Severity.WARN: ("yellow", "!"),
    Severity.INFO: ("blue", "i"),
    Severity.DEBUG: ("dim", "."),
}


class RichReporter(BaseReporter):
    """Generates high-fidelity terminal output using Rich."""

    def report_findings(self, findings: list[Finding], suppressed: list[dict[str, str]] | None = None) -> int:
        """Report diagnosis findings to the console."""
        error_count = sum(1 for f in findings if f.severity == Severity.ERROR)
        warn_count = sum(1 for f in findings if f.severity == Severity.WARN)

        self.console.print()
        self.console.print("Diagnosis Results", style="bold underline")
        self.console.print(f"   Summary: [red]{error_count} error(s)[/], [yellow]{warn_count} warning(s)[/]")
        if suppressed:
            self.console.print(f"   [dim]Waived: {len(suppressed)}[/]")
        self.console.print()

        for finding in self.visible(findings):
            self._print_finding(finding)

        if error_count == 0 and warn_count == 0:
            self.console.print("   [green][bold]PASS:[/] No problems found.[/]")

        return self.exit_code(findings)

    def _print_finding(self, finding: Finding) -> None:
        """Print a single finding."""
        color, icon = _STYLES.get(finding.severity, ("white", "i"))
        title = f"[{color}]{icon} {escape(f'[{finding.severity.value}]')} {escape(finding.id)}[/]"

        # Progress notes and debug output stay on one line
        if finding.severity in (Severity.INFO, Severity.DEBUG) and "\n" not in finding.text:
            self.console.print(f"{title} {escape(finding.text)}")
            return

        self.console.print(Panel(escape(finding.text), title=title, title_align="left", border_style=color))
        for evidence in finding.evidence:
            line = f"      - {escape(str(evidence))}"
            if evidence.command:
                line += f" [dim]({escape(evidence.command)})[/]"
            self.console.print(line)
        self.console.print()

    def report_host_summary(self, environment: HostEnvironment, snapshot: UnitSnapshot) -> None:
        """Display host summary."""
        self.console.print()
        self.console.print(Panel.fit(f"Host: {escape(environment.hostname)}", style="bold cyan"))
        self.console.print(f"   systemd: {'yes' if environment.has_systemd else '[yellow]no[/]'}")
        self.console.print(f"   openshift: {escape(environment.openshift_path) or '[yellow]not found[/]'}")

        if not snapshot:
            return

        table = Table(show_header=True)
        table.add_column("Unit")
        table.add_column("Loaded")
        table.add_column("Enabled")
        table.add_column("Active")

        def mark(value: bool) -> str:
            return "[green]yes[/]" if value else "[dim]no[/]"

        for name in sorted(snapshot):
            unit = snapshot[name]
            table.add_row(escape(name), mark(unit.exists), mark(unit.enabled), mark(unit.active))

        self.console.print(table)
