"""Tests for the finding sink."""

from unit_doctor.engine.sink import FindingCollector, FindingSink, render_message
from unit_doctor.model.evidence import Evidence, Severity


def test_template_fields_are_substituted():
    text = render_message({"tmpl": "\nunit {{ unit }} needs {{ required }}\n", "unit": "a", "required": "b"})
    assert text == "unit a needs b"


def test_plain_text_is_used_when_no_template():
    assert render_message({"text": "  already rendered  "}) == "already rendered"


def test_broken_template_falls_back_to_raw_text(caplog):
    text = render_message({"tmpl": "missing {{ nothing }}"})
    assert text == "missing {{ nothing }}"
    assert "Could not render message template" in caplog.text


def test_collector_records_findings():
    sink = FindingCollector()
    assert isinstance(sink, FindingSink)

    sink.emit(Severity.WARN, "sdUnitInactive", {
        "tmpl": "{{ unit }} is down",
        "unit": "docker",
        "evidence": [Evidence(source="systemd", excerpt="docker: exists=yes")],
    })

    finding = sink.findings[0]
    assert finding.id == "sdUnitInactive"
    assert finding.text == "docker is down"
    assert finding.fields == {"unit": "docker"}
    assert len(finding.evidence) == 1


def test_log_message_becomes_journal_evidence():
    sink = FindingCollector()
    sink.emit(Severity.ERROR, "sdLogDfatal", {"text": "boom", "unit": "docker", "logMsg": 'level="fatal"'})

    evidence = sink.findings[0].evidence[0]
    assert evidence.source == "docker"
    assert evidence.excerpt == 'level="fatal"'
    assert evidence.command == "journalctl -ru docker"


def test_at_least_filters_by_severity():
    sink = FindingCollector()
    for level in Severity:
        sink.emit(level, level.value, {"text": level.value})

    assert [f.id for f in sink.at_least(Severity.WARN)] == ["error", "warn"]
    assert len(sink.at_least(Severity.DEBUG)) == 4
