"""Model package - Core data structures for unit-doctor."""

from unit_doctor.model.evidence import Evidence, Severity
from unit_doctor.model.finding import Finding
from unit_doctor.model.journal import LogEntry
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot, UnitState

__all__ = [
    "Evidence",
    "Finding",
    "HostEnvironment",
    "LogEntry",
    "Severity",
    "UnitSnapshot",
    "UnitState",
]
