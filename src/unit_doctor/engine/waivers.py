"""Waiver engine - user-declared suppression of finding ids.

A waiver file is YAML in one of three shapes::

    waivers:                      # full form
      - id: sdLogOMhzRef
        reason: nodes are provisioned after the master
        unit: openshift-master    # optional
        expires: 2026-12-31       # optional

    - id: sdUnitInactive          # bare list of the same entries

    sdLogOMIgnore: harmless       # id -> reason

A missing file means no waivers.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterable

import yaml

from unit_doctor.model.finding import Finding


class WaiverError(ValueError):
    """The waiver file exists but cannot be understood."""


@dataclass(frozen=True)
class WaiverRule:
    """Suppress findings with this id, optionally for one unit only, until `expires`."""

    id: str
    reason: str = ""
    unit: str | None = None
    expires: date | None = None

    def in_force(self, today: date) -> bool:
        return self.expires is None or today <= self.expires

    def covers(self, finding: Finding) -> bool:
        if finding.id.casefold() != self.id.casefold():
            return False
        return self.unit is None or finding.unit == self.unit


def default_waiver_path(config_dir: Path | None = None) -> Path:
    return (config_dir or Path.home() / ".unit-doctor") / "waivers.yaml"


def load_waiver_rules(path: str | Path | None) -> list[WaiverRule]:
    """Read waiver rules from a YAML file.

    Raises:
        WaiverError: the file is not valid YAML, has an unknown shape, or
            an entry carries an unreadable expiry date.
    """
    if not path:
        return []
    source = Path(path).expanduser()
    if not source.is_file():
        return []

    try:
        document = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise WaiverError(f"{source}: not valid YAML: {e}") from e

    return [_to_rule(entry, source) for entry in _entries(document, source) if _entry_id(entry)]


def _entries(document: Any, source: Path) -> Iterable[dict[str, Any]]:
    if document is None:
        return []
    if isinstance(document, dict) and isinstance(document.get("waivers"), list):
        document = document["waivers"]
    if isinstance(document, list):
        return [item for item in document if isinstance(item, dict)]
    if isinstance(document, dict):
        return [
            {"id": key, "reason": "" if value is None else str(value)}
            for key, value in document.items()
            if isinstance(key, str)
        ]
    raise WaiverError(f"{source}: expected a mapping or a list of waivers")


def _entry_id(entry: dict[str, Any]) -> str:
    return str(entry.get("id") or "").strip()


def _to_rule(entry: dict[str, Any], source: Path) -> WaiverRule:
    rule_id = _entry_id(entry)
    unit = str(entry.get("unit") or "").strip()
    return WaiverRule(
        id=rule_id,
        reason=str(entry.get("reason") or "").strip(),
        unit=unit or None,
        expires=_expiry(entry.get("expires"), rule_id, source),
    )


def _expiry(value: Any, rule_id: str, source: Path) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        # unquoted ISO dates arrive already parsed
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise WaiverError(f"{source}: waiver {rule_id} has invalid expiry {value!r}") from e


def apply_waivers(
    findings: list[Finding],
    rules: list[WaiverRule],
    on_date: date | None = None,
) -> tuple[list[Finding], list[dict[str, str]]]:
    """Split findings into (kept, suppressed); suppressed entries are summaries for reporting."""
    today = on_date or date.today()
    live = [rule for rule in rules if rule.in_force(today)]
    if not live:
        return findings, []

    kept: list[Finding] = []
    suppressed: list[dict[str, str]] = []
    for finding in findings:
        rule = next((r for r in live if r.covers(finding)), None)
        if rule is None:
            kept.append(finding)
        else:
            suppressed.append({
                "id": finding.id,
                "severity": finding.severity.value.upper(),
                "unit": finding.unit or "",
                "reason": rule.reason or "Waived",
            })
    return kept, suppressed
