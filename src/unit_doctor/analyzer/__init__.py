"""Analyzer package - reasoning over journal streams and the unit snapshot.

IMPORTANT: Analyzers NEVER run shell commands themselves.
Journal access goes through the scanner layer; unit state comes from
the snapshot collected up front.
"""

from unit_doctor.analyzer.dependency_checker import (
    check_dependency,
    check_enabled_but_inactive,
    check_sdn_node_started_node,
    check_unit_dependencies,
)
from unit_doctor.analyzer.log_scanner import ScanResult, StopReason, scan_unit_logs

__all__ = [
    "ScanResult",
    "StopReason",
    "check_dependency",
    "check_enabled_but_inactive",
    "check_sdn_node_started_node",
    "check_unit_dependencies",
    "scan_unit_logs",
]
