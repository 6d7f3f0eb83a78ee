"""Diagnostic plugin system for unit-doctor.

Each diagnostic is a registered class with a name, a description and a
relevance condition. All of them report through the context's sink.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from unit_doctor.model.evidence import Severity

if TYPE_CHECKING:
    from unit_doctor.connector.base import Connector
    from unit_doctor.engine.sink import FindingSink
    from unit_doctor.model.unit import HostEnvironment, UnitSnapshot
    from unit_doctor.rules.catalog import RuleCatalog

logger = logging.getLogger(__name__)


@dataclass
class DiagnosticContext:
    """Everything a diagnostic run shares.

    Built once per invocation and passed to every diagnostic and every
    custom match handler.
    """

    sink: "FindingSink"
    connector: "Connector"
    environment: "HostEnvironment"
    snapshot: "UnitSnapshot"
    catalog: "RuleCatalog"


class BaseDiagnostic(ABC):
    """Abstract base class for all diagnostics.

    Each diagnostic must implement:
    - name / description
    - run(context), reporting through context.sink
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used to select the diagnostic (e.g. 'AnalyzeLogs')."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    def skip_reason(self, context: DiagnosticContext) -> str | None:
        """Why this diagnostic does not apply to the host, or None to run it."""
        return None

    @abstractmethod
    def run(self, context: DiagnosticContext) -> None:
        """Run the diagnostic."""
        ...


# Registry of all available diagnostics
_diagnostic_registry: list[type[BaseDiagnostic]] = []


def register_diagnostic(diagnostic_class: type[BaseDiagnostic]) -> type[BaseDiagnostic]:
    """Decorator to register a diagnostic class."""
    _diagnostic_registry.append(diagnostic_class)
    return diagnostic_class


def get_all_diagnostics() -> list[type[BaseDiagnostic]]:
    """Get all registered diagnostic classes."""
    return _diagnostic_registry.copy()


def diagnostic_names() -> list[str]:
    """Names of all registered diagnostics, in run order."""
    return [cls().name for cls in get_all_diagnostics()]


def run_diagnostics(context: DiagnosticContext, names: list[str] | None = None) -> list[str]:
    """Run the selected (default: all) diagnostics in registration order.

    A diagnostic that does not apply is reported as skipped; one that
    crashes is reported as an error and the rest still run.

    Returns:
        Names of the diagnostics that actually ran.
    """
    if names:
        unknown = sorted(set(names) - set(diagnostic_names()))
        if unknown:
            raise ValueError(f"Unknown diagnostic(s): {', '.join(unknown)}")

    ran: list[str] = []
    for diagnostic_class in _diagnostic_registry:
        diagnostic = diagnostic_class()
        if names and diagnostic.name not in names:
            continue

        reason = diagnostic.skip_reason(context)
        if reason:
            context.sink.emit(Severity.INFO, "diagSkip", {
                "tmpl": "Skipping diagnostic: {{ diagnostic }}\nDescription: {{ description }}\nBecause: {{ reason }}",
                "diagnostic": diagnostic.name,
                "description": diagnostic.description,
                "reason": reason,
            })
            continue

        try:
            diagnostic.run(context)
            ran.append(diagnostic.name)
        except Exception as e:
            # Log error but don't fail the entire run
            logger.warning("Diagnostic %s failed: %s", diagnostic.name, e)
            context.sink.emit(Severity.ERROR, "diagFailed", {
                "tmpl": "Diagnostic {{ diagnostic }} failed unexpectedly:\n{{ error }}",
                "diagnostic": diagnostic.name,
                "error": f"({type(e).__name__}) {e}",
            })

    return ran
