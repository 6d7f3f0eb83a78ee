"""Report Action - Present diagnosis results.

This action is read-only.
"""

from rich.console import Console
from rich.table import Table

from unit_doctor.actions.reporters.base import BaseReporter
from unit_doctor.actions.reporters.json_reporter import JsonReporter
from unit_doctor.actions.reporters.plain_reporter import PlainReporter
from unit_doctor.actions.reporters.rich_reporter import RichReporter
from unit_doctor.model.evidence import Severity
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot
from unit_doctor.rules.catalog import RuleCatalog
from unit_doctor.rules.model import HandlerMatcher, StaticMatcher

REPORTERS: dict[str, type[BaseReporter]] = {
    "rich": RichReporter,
    "plain": PlainReporter,
    "json": JsonReporter,
}


class ReportAction:
    """Print diagnosis results in the selected format."""

    def __init__(
        self,
        console: Console | None = None,
        format_mode: str = "rich",
        min_level: Severity = Severity.INFO,
    ) -> None:
        self.console = console or Console()
        try:
            reporter_cls = REPORTERS[format_mode]
        except KeyError:
            raise ValueError(f"Unknown output format: {format_mode}") from None
        self.format_mode = format_mode
        self.reporter = reporter_cls(self.console, min_level=min_level)

    def report_host_summary(self, environment: HostEnvironment, snapshot: UnitSnapshot) -> None:
        self.reporter.report_host_summary(environment, snapshot)

    def report_findings(self, findings: list[Finding], suppressed: list[dict[str, str]] | None = None) -> int:
        """Print findings and return the exit code they imply."""
        return self.reporter.report_findings(findings, suppressed)

    def report_catalog(self, catalog: RuleCatalog) -> None:
        """List every unit, its start boundary and the log rules that watch it."""
        table = Table(show_header=True, title="Journal rules")
        table.add_column("Unit")
        table.add_column("Start boundary")
        table.add_column("Rule")
        table.add_column("Severity")
        table.add_column("Kind")
        table.add_column("Pattern")

        for name in catalog.unit_names():
            spec = catalog.units.get(name)
            if spec is None or not spec.matchers:
                boundary = spec.start_boundary.pattern if spec else "-"
                table.add_row(name, boundary, "-", "-", "-", "-")
                continue
            for matcher in spec.matchers:
                if isinstance(matcher, StaticMatcher):
                    kind = "persistent" if matcher.persistent else "once"
                elif isinstance(matcher, HandlerMatcher):
                    kind = "handler"
                else:
                    kind = "?"
                table.add_row(name, spec.start_boundary.pattern, matcher.id or "-", matcher.severity.value, kind, matcher.pattern.pattern)

        self.console.print(table)

        deps = Table(show_header=True, title="Unit dependencies")
        deps.add_column("Dependent")
        deps.add_column("Requires")
        for rule in catalog.dependencies:
            deps.add_row(rule.dependent, rule.required)
        self.console.print(deps)
