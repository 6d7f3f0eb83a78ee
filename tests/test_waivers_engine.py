from datetime import date
from pathlib import Path

import pytest

from unit_doctor.engine.waivers import WaiverError, apply_waivers, load_waiver_rules
from unit_doctor.model.evidence import Severity
from unit_doctor.model.finding import Finding


def _finding(fid: str, unit: str | None = None) -> Finding:
    fields = {"unit": unit} if unit else {}
    return Finding(severity=Severity.WARN, id=fid, text="text", fields=fields)


def test_load_and_apply_waivers(tmp_path: Path):
    waiver_file = tmp_path / "waivers.yaml"
    waiver_file.write_text(
        """
waivers:
  - id: sdLogOMhzRef
    reason: nodes come up after the master
  - id: sdUnitInactive
    unit: chronyd
    reason: time sync handled elsewhere
""".strip(),
        encoding="utf-8",
    )

    rules = load_waiver_rules(waiver_file)
    findings = [
        _finding("sdLogOMhzRef", "openshift-master"),
        _finding("sdUnitInactive", "chronyd"),
        _finding("sdUnitInactive", "docker"),
    ]

    kept, suppressed = apply_waivers(findings, rules)

    assert [(f.id, f.unit) for f in kept] == [("sdUnitInactive", "docker")]
    assert {item["unit"] for item in suppressed} == {"openshift-master", "chronyd"}
    assert any("nodes come up" in item["reason"] for item in suppressed)


def test_map_format(tmp_path: Path):
    waiver_file = tmp_path / "waivers.yaml"
    waiver_file.write_text("sdLogOMIgnore: harmless\n", encoding="utf-8")

    rules = load_waiver_rules(waiver_file)

    assert len(rules) == 1
    assert rules[0].id == "sdLogOMIgnore"
    assert rules[0].reason == "harmless"


def test_expired_waiver_is_ignored(tmp_path: Path):
    waiver_file = tmp_path / "waivers.yaml"
    waiver_file.write_text("- id: sdUnitInactive\n  expires: 2020-01-01\n", encoding="utf-8")

    rules = load_waiver_rules(waiver_file)
    kept, suppressed = apply_waivers([_finding("sdUnitInactive")], rules, on_date=date(2021, 1, 1))

    assert len(kept) == 1
    assert suppressed == []

    kept, suppressed = apply_waivers([_finding("sdUnitInactive")], rules, on_date=date(2019, 12, 31))
    assert kept == []


def test_missing_file_means_no_waivers(tmp_path: Path):
    assert load_waiver_rules(tmp_path / "absent.yaml") == []
    assert load_waiver_rules(None) == []


def test_invalid_yaml_raises(tmp_path: Path):
    waiver_file = tmp_path / "waivers.yaml"
    waiver_file.write_text("waivers: [unclosed\n", encoding="utf-8")

    with pytest.raises(WaiverError):
        load_waiver_rules(waiver_file)


def test_invalid_expiry_raises(tmp_path: Path):
    waiver_file = tmp_path / "waivers.yaml"
    waiver_file.write_text("- id: x\n  expires: someday\n", encoding="utf-8")

    with pytest.raises(WaiverError):
        load_waiver_rules(waiver_file)
