"""Systemd diagnostics - journal analysis and unit status."""

import logging

from unit_doctor.analyzer.dependency_checker import check_unit_dependencies
from unit_doctor.analyzer.log_scanner import scan_unit_logs
from unit_doctor.checks import BaseDiagnostic, DiagnosticContext, register_diagnostic
from unit_doctor.model.evidence import Severity

logger = logging.getLogger(__name__)


def systemd_skip_reason(context: DiagnosticContext) -> str | None:
    """Shared relevance condition for the systemd diagnostics."""
    env = context.environment
    if not env.has_systemd:
        return "systemd is not present on this host"
    if not env.openshift_path:
        return "`openshift` binary is not in the path on this host; we assume host is not a server"
    return None


@register_diagnostic
class AnalyzeLogs(BaseDiagnostic):
    """Scan the journal of every enabled or active catalog unit."""

    name = "AnalyzeLogs"
    description = "Check for problems in systemd service logs since each service last started"

    def skip_reason(self, context: DiagnosticContext) -> str | None:
        return systemd_skip_reason(context)

    def run(self, context: DiagnosticContext) -> None:
        for spec in context.catalog.units.values():
            state = context.snapshot[spec.name]
            if not (state.enabled or state.active):
                continue
            if not spec.matchers:
                logger.debug("No journal rules for %s; not reading its log", spec.name)
                continue

            context.sink.emit(Severity.INFO, "sdCheckLogs", {
                "tmpl": "Checking journalctl logs for '{{ unit }}' service",
                "unit": spec.name,
            })
            try:
                result = scan_unit_logs(spec, context)
            except Exception as e:
                # One unit's failure must not stop the others
                logger.warning("Log scan for %s failed: %s", spec.name, e)
                context.sink.emit(Severity.ERROR, "sdLogScanFailed", {
                    "tmpl": "Scanning the '{{ unit }}' journal failed unexpectedly:\n{{ error }}",
                    "unit": spec.name,
                    "error": f"({type(e).__name__}) {e}",
                })
                continue
            logger.debug(
                "Scanned %d journal lines for %s (stopped: %s)",
                result.lines_read, spec.name, result.stop.value,
            )


@register_diagnostic
class UnitStatus(BaseDiagnostic):
    """Check declared unit dependencies and enabled-but-stopped units."""

    name = "UnitStatus"
    description = "Check status for OpenShift-related systemd units"

    def skip_reason(self, context: DiagnosticContext) -> str | None:
        return systemd_skip_reason(context)

    def run(self, context: DiagnosticContext) -> None:
        check_unit_dependencies(context.snapshot, context.catalog.dependencies, context.sink)
