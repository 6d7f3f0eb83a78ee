from unit_doctor.engine.deduplication import deduplicate_findings
from unit_doctor.model.evidence import Evidence, Severity
from unit_doctor.model.finding import Finding


def _finding(fid: str, text: str, severity: Severity = Severity.WARN, source: str = "x") -> Finding:
    return Finding(
        severity=severity,
        id=fid,
        text=text,
        evidence=[Evidence(source=source, excerpt="e")],
    )


def test_identical_findings_collapse_and_merge_evidence() -> None:
    findings = [
        _finding("sdUnitInactive", "docker is down", source="a"),
        _finding("sdUnitInactive", "docker is down", source="b"),
    ]

    deduped = deduplicate_findings(findings)

    assert len(deduped) == 1
    assert [e.source for e in deduped[0].evidence] == ["a", "b"]
    # inputs untouched
    assert len(findings[0].evidence) == 1


def test_same_id_different_text_is_kept() -> None:
    deduped = deduplicate_findings([
        _finding("sdUnitInactive", "docker is down"),
        _finding("sdUnitInactive", "iptables is down"),
    ])
    assert len(deduped) == 2


def test_orders_by_severity_then_emission() -> None:
    deduped = deduplicate_findings([
        _finding("info-1", "i", Severity.INFO),
        _finding("warn-1", "w1", Severity.WARN),
        _finding("err-1", "e", Severity.ERROR),
        _finding("warn-2", "w2", Severity.WARN),
    ])
    assert [f.id for f in deduped] == ["err-1", "warn-1", "warn-2", "info-1"]


def test_empty_input() -> None:
    assert deduplicate_findings([]) == []
