"""Engine package - finding collection, deduplication and waivers."""

from unit_doctor.engine.deduplication import deduplicate_findings
from unit_doctor.engine.sink import FindingCollector, FindingSink, render_message
from unit_doctor.engine.waivers import WaiverError, WaiverRule, apply_waivers, load_waiver_rules

__all__ = [
    "FindingCollector",
    "FindingSink",
    "WaiverError",
    "WaiverRule",
    "apply_waivers",
    "deduplicate_findings",
    "load_waiver_rules",
    "render_message",
]
