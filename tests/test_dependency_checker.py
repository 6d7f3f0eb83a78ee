"""Tests for unit dependency checks."""

from conftest import make_snapshot

from unit_doctor.analyzer.dependency_checker import (
    check_dependency,
    check_enabled_but_inactive,
    check_sdn_node_started_node,
    check_unit_dependencies,
)
from unit_doctor.engine.sink import FindingCollector
from unit_doctor.model.evidence import Severity
from unit_doctor.model.unit import UnitState
from unit_doctor.rules.catalog import DEPENDENCY_RULES
from unit_doctor.rules.model import DependencyRule

RATIONALE = "Containers need it."


def test_missing_required_unit_is_install_error(sink):
    dependent = UnitState("openshift-node", exists=True, enabled=True, active=True)
    required = UnitState("docker")

    level = check_dependency(dependent, required, RATIONALE, sink)

    assert level == Severity.ERROR
    assert len(sink.findings) == 1
    finding = sink.findings[0]
    assert finding.id == "sdUnitReqLoaded"
    assert finding.severity == Severity.ERROR
    assert "yum install docker" in finding.text
    assert "Containers need it." in finding.text
    assert finding.unit == "openshift-node"


def test_stopped_required_unit_is_error(sink):
    dependent = UnitState("openshift-node", exists=True, enabled=False, active=True)
    required = UnitState("docker", exists=True, enabled=True, active=False)

    assert check_dependency(dependent, required, RATIONALE, sink) == Severity.ERROR
    assert [f.id for f in sink.findings] == ["sdUnitReqActive"]
    assert "systemctl start docker" in sink.findings[0].text


def test_not_enabled_required_unit_is_warning(sink):
    dependent = UnitState("openshift-node", exists=True, enabled=True, active=False)
    required = UnitState("docker", exists=True, enabled=False, active=False)

    assert check_dependency(dependent, required, RATIONALE, sink) == Severity.WARN
    assert [f.id for f in sink.findings] == ["sdUnitReqEnabled"]
    assert "systemctl enable docker" in sink.findings[0].text


def test_error_tier_suppresses_lower_tiers(sink):
    # dependent active and enabled, required present but neither: only the active tier fires
    dependent = UnitState("openshift-node", exists=True, enabled=True, active=True)
    required = UnitState("docker", exists=True, enabled=False, active=False)

    check_dependency(dependent, required, RATIONALE, sink)

    assert [f.id for f in sink.findings] == ["sdUnitReqActive"]


def test_idle_dependent_needs_nothing(sink):
    dependent = UnitState("openshift-node", exists=True)
    required = UnitState("docker")

    assert check_dependency(dependent, required, RATIONALE, sink) is None
    assert sink.findings == []


def test_healthy_pair_is_silent(sink):
    dependent = UnitState("openshift-node", exists=True, enabled=True, active=True)
    required = UnitState("docker", exists=True, enabled=True, active=True)

    assert check_dependency(dependent, required, RATIONALE, sink) is None


def test_evidence_describes_both_units(sink):
    check_dependency(UnitState("a", True, True, True), UnitState("b"), RATIONALE, sink)

    excerpts = [e.excerpt for e in sink.findings[0].evidence]
    assert excerpts == [
        "a: exists=yes enabled=yes active=yes",
        "b: exists=no enabled=no active=no",
    ]


def test_sdn_node_running_without_node(sink):
    snapshot = make_snapshot(openshift_sdn_node=(True, True, True), openshift_node=(True, False, False))

    check_sdn_node_started_node(snapshot, sink)

    assert [f.id for f in sink.findings] == ["sdUnitSDNreqSN"]
    assert sink.findings[0].severity == Severity.ERROR


def test_sdn_node_check_ignores_missing_units(sink):
    check_sdn_node_started_node(make_snapshot(), sink)
    assert sink.findings == []


def test_enabled_inactive_unit_warns_once(sink):
    snapshot = make_snapshot(
        chronyd=(True, True, False),
        docker=(True, True, True),
    )

    check_unit_dependencies(snapshot, [], sink)

    inactive = sink.by_id("sdUnitInactive")
    assert len(inactive) == 1
    assert inactive[0].severity == Severity.WARN
    assert inactive[0].unit == "chronyd"
    assert "systemctl start chronyd" in inactive[0].text


def test_inactive_sweep_is_sorted_by_unit_name(sink):
    snapshot = make_snapshot(zebra=(True, True, False), alpha=(True, True, False), mid=(True, True, False))

    check_enabled_but_inactive(snapshot, sink)

    assert [f.unit for f in sink.findings] == ["alpha", "mid", "zebra"]


def test_dependency_checks_are_idempotent():
    snapshot = make_snapshot(
        openshift_node=(True, True, True),
        openshift_sdn_node=(True, True, True),
        docker=(True, True, False),
        openvswitch=(True, False, False),
    )
    first, second = FindingCollector(), FindingCollector()

    check_unit_dependencies(snapshot, DEPENDENCY_RULES, first)
    check_unit_dependencies(snapshot, DEPENDENCY_RULES, second)

    assert [(f.id, f.text) for f in first.findings] == [(f.id, f.text) for f in second.findings]
    assert {f.id for f in first.findings} == {
        "sdUnitReqLoaded",  # iptables not installed
        "sdUnitReqActive",  # docker and openvswitch stopped
        "sdUnitInactive",  # docker enabled but stopped
    }


def test_lookup_of_uncollected_unit_does_not_grow_snapshot(sink):
    snapshot = make_snapshot(openshift_node=(True, True, True))

    check_unit_dependencies(snapshot, [DependencyRule("openshift-node", "iptables", "")], sink)

    assert list(snapshot) == ["openshift-node"]
    assert sink.by_id("sdUnitReqLoaded")[0].fields["required"] == "iptables"
