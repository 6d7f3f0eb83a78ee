"""Finding dataclass - one emitted diagnostic message."""

from dataclasses import dataclass, field
from typing import Any

from unit_doctor.model.evidence import Evidence, Severity


@dataclass
class Finding:
    """A rendered diagnostic message.

    Attributes:
        severity: How critical this finding is.
        id: Stable identifier (e.g. 'sdLogDfatal'), used for docs and waivers.
        text: Fully rendered, human-readable message.
        fields: Substitution values the message was rendered from
            (unit, client, reason, ...).
        evidence: What supports the finding. Progress and debug notes
            usually carry none.
    """

    severity: Severity
    id: str
    text: str
    fields: dict[str, Any] = field(default_factory=dict)
    evidence: list[Evidence] = field(default_factory=list)

    @property
    def unit(self) -> str | None:
        """Unit this finding is about, when known."""
        value = self.fields.get("unit")
        return str(value) if value else None

    @property
    def severity_label(self) -> str:
        """Get label for severity level."""
        labels = {
            Severity.ERROR: "ERROR",
            Severity.WARN: "WARN",
            Severity.INFO: "Info",
            Severity.DEBUG: "debug",
        }
        return labels.get(self.severity, "FINDING")
