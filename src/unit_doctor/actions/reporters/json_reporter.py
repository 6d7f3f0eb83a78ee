"""JSON Reporter Implementation."""

import json
from dataclasses import asdict

from unit_doctor.actions.reporters.base import BaseReporter
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot


class JsonReporter(BaseReporter):
    """Generates machine-readable JSON output."""

    def report_findings(self, findings: list[Finding], suppressed: list[dict[str, str]] | None = None) -> int:
        """Report diagnosis findings as one JSON document."""
        data = {
            "findings": [self._finding_dict(f) for f in self.visible(findings)],
            "suppressed": suppressed or [],
        }
        self.console.print_json(json.dumps(data, default=str))
        return self.exit_code(findings)

    def _finding_dict(self, finding: Finding) -> dict:
        return {
            "id": finding.id,
            "severity": finding.severity.value,
            "text": finding.text,
            "fields": finding.fields,
            "evidence": [asdict(e) for e in finding.evidence],
        }

    def report_host_summary(self, environment: HostEnvironment, snapshot: UnitSnapshot) -> None:
        """Host facts are folded into the findings document; nothing is printed separately."""
        pass
