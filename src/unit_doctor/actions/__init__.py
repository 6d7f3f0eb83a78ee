"""Actions package - what unit-doctor does with diagnosis results.

Actions never change the host; they only present what was found.
"""

from unit_doctor.actions.report import ReportAction

__all__ = ["ReportAction"]
