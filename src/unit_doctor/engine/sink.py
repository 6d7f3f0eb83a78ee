"""Finding sink - the single reporting channel for all diagnostics.

Diagnostics never print. They call ``emit(level, id, fields)`` where
``fields`` carries either a jinja2 template under ``tmpl`` (rendered with the
remaining fields as variables) or pre-rendered text under ``text``.
"""

import logging
from typing import Any, Protocol, runtime_checkable

from jinja2 import Environment, StrictUndefined, TemplateError

from unit_doctor.model.evidence import Evidence, Severity
from unit_doctor.model.finding import Finding

logger = logging.getLogger(__name__)

_templates = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=False,
)


@runtime_checkable
class FindingSink(Protocol):
    """Anything that accepts leveled, keyed, templated messages."""

    def emit(self, level: Severity, id: str, fields: dict[str, Any]) -> None:
        """Record one message."""
        ...


def render_message(fields: dict[str, Any]) -> str:
    """Render the message text for a set of emit() fields.

    A template that fails to render is returned as-is so the finding is
    still reported.
    """
    template = fields.get("tmpl")
    if template is None:
        return str(fields.get("text", "")).strip()

    variables = {k: v for k, v in fields.items() if k not in ("tmpl", "evidence")}
    try:
        return _templates.from_string(template).render(**variables).strip()
    except TemplateError as e:
        logger.warning("Could not render message template: %s", e)
        return str(template).strip()


class FindingCollector:
    """Sink that renders and keeps every emitted message as a Finding.

    Example:
        >>> sink = FindingCollector()
        >>> sink.emit(Severity.WARN, "sdUnitInactive", {"tmpl": "{{ unit }} is down", "unit": "docker"})
        >>> sink.findings[0].text
        'docker is down'
    """

    def __init__(self) -> None:
        self.findings: list[Finding] = []

    def emit(self, level: Severity, id: str, fields: dict[str, Any]) -> None:
        """Render and record one message."""
        evidence = list(fields.get("evidence") or [])
        log_msg = fields.get("logMsg")
        unit = fields.get("unit")
        if log_msg and unit:
            evidence.append(Evidence(source=str(unit), excerpt=str(log_msg), command=f"journalctl -ru {unit}"))

        self.findings.append(
            Finding(
                severity=level,
                id=id,
                text=render_message(fields),
                fields={k: v for k, v in fields.items() if k not in ("tmpl", "text", "evidence")},
                evidence=evidence,
            )
        )

    def by_id(self, finding_id: str) -> list[Finding]:
        """All findings recorded under one id."""
        return [f for f in self.findings if f.id == finding_id]

    def at_least(self, level: Severity) -> list[Finding]:
        """Findings at `level` or more severe."""
        return [f for f in self.findings if f.severity.at_least(level)]
