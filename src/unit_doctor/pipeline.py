"""Diagnosis pipeline - everything `diagnose` does between connecting and printing.

IMPORTANT: this module only ORCHESTRATES:
- detects the host environment and collects the unit snapshot
- runs the registered diagnostics against one shared context
- deduplicates and applies waivers
"""

import logging
from dataclasses import dataclass, field
from datetime import date

# Importing the module registers its diagnostics.
import unit_doctor.checks.systemd  # noqa: F401
from unit_doctor.checks import DiagnosticContext, run_diagnostics
from unit_doctor.connector.base import Connector
from unit_doctor.engine.deduplication import deduplicate_findings
from unit_doctor.engine.sink import FindingCollector
from unit_doctor.engine.waivers import WaiverRule, apply_waivers
from unit_doctor.model.finding import Finding
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot
from unit_doctor.rules.catalog import RuleCatalog, build_catalog
from unit_doctor.scanner.systemd import SystemdScanner

logger = logging.getLogger(__name__)


@dataclass
class DiagnosisResult:
    """What one diagnosis run found."""

    environment: HostEnvironment
    snapshot: UnitSnapshot
    findings: list[Finding] = field(default_factory=list)
    suppressed: list[dict[str, str]] = field(default_factory=list)
    ran: list[str] = field(default_factory=list)


def run_diagnosis(
    connector: Connector,
    catalog: RuleCatalog | None = None,
    names: list[str] | None = None,
    waivers: list[WaiverRule] | None = None,
    on_date: date | None = None,
) -> DiagnosisResult:
    """Run the selected diagnostics against one host.

    Raises:
        SnapshotError: unit state could not be collected at all.
        ValueError: an unknown diagnostic name was selected.
    """
    catalog = catalog or build_catalog()
    scanner = SystemdScanner(connector)

    environment = scanner.detect_environment()
    snapshot = UnitSnapshot()
    if environment.has_systemd:
        snapshot = scanner.scan(catalog.unit_names())
    logger.debug("Collected state for %d unit(s) on %s", len(snapshot), environment.hostname)

    sink = FindingCollector()
    context = DiagnosticContext(
        sink=sink,
        connector=connector,
        environment=environment,
        snapshot=snapshot,
        catalog=catalog,
    )
    ran = run_diagnostics(context, names)

    findings = deduplicate_findings(sink.findings)
    findings, suppressed = apply_waivers(findings, waivers or [], on_date=on_date)

    return DiagnosisResult(
        environment=environment,
        snapshot=snapshot,
        findings=findings,
        suppressed=suppressed,
        ran=ran,
    )
