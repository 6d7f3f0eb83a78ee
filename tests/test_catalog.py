"""Tests for the rule catalog."""

from types import SimpleNamespace

from unit_doctor.engine.sink import FindingCollector
from unit_doctor.model.evidence import Severity
from unit_doctor.model.journal import LogEntry
from unit_doctor.rules.catalog import BAD_CERT_REPEAT, BAD_IMAGE_TEMPLATE, BadCertificateHandler, build_catalog
from unit_doctor.rules.model import HandlerMatcher, StaticMatcher


def test_catalog_covers_expected_units():
    catalog = build_catalog()
    assert set(catalog.units) == {
        "openshift-master",
        "openshift-sdn-master",
        "openshift-node",
        "openshift-sdn-node",
        "docker",
        "openvswitch",
    }
    assert catalog.units["openvswitch"].matchers == ()
    assert catalog.units["openshift-sdn-master"].matchers == ()


def test_unit_names_include_dependency_only_units():
    names = build_catalog().unit_names()
    assert "iptables" in names
    assert "openshift" in names
    assert names == sorted(names)


def test_bad_image_rule_is_shared_by_master_and_node():
    units = build_catalog().units
    assert units["openshift-master"].matchers[0] is BAD_IMAGE_TEMPLATE
    assert units["openshift-node"].matchers[0] is BAD_IMAGE_TEMPLATE
    assert BAD_IMAGE_TEMPLATE.search(
        "Unable to find an image for origin-pod due to an error processing the format: %!v(MISSING)"
    )


def test_docker_catch_all_is_last():
    matchers = build_catalog().units["docker"].matchers
    assert [m.id for m in matchers] == ["sdLogDbadOpt", "sdLogDfatal"]
    assert matchers[0].search("Usage: docker [OPTIONS] COMMAND [arg...]")
    assert not matchers[0].search("Usage: docker OPTIONS COMMAND")


def test_each_catalog_gets_its_own_handler_state():
    def handler_of(catalog):
        return next(m for m in catalog.units["openshift-master"].matchers if isinstance(m, HandlerMatcher)).handler

    first, second = handler_of(build_catalog()), handler_of(build_catalog())
    assert isinstance(first, BadCertificateHandler)
    assert first is not second


def test_matchers_are_static_or_handler_variants():
    for spec in build_catalog().units.values():
        for matcher in spec.matchers:
            assert isinstance(matcher, (StaticMatcher, HandlerMatcher))
            assert matcher.id
            assert isinstance(matcher.severity, Severity)


def test_sdn_node_no_subnet_waits_with_any_two_characters():
    matcher = next(m for m in build_catalog().units["openshift-sdn-node"].matchers if m.id == "sdLogOSNnoSubnet")
    base = "Could not find an allocated subnet for this minion node1.example.com(Key not found). "
    assert matcher.search(base + "Waiting..")
    assert matcher.search(base + "Waiting--")
    assert not matcher.search(base + "Waiting")


def test_bad_certificate_handler_reports_each_client_once():
    rule = next(m for m in build_catalog().units["openshift-master"].matchers if isinstance(m, HandlerMatcher))
    ctx = SimpleNamespace(sink=FindingCollector())

    def handle(client):
        entry = LogEntry(message=f"http: TLS handshake error from {client}:443: remote error: bad certificate")
        return rule.handler(ctx, rule, "openshift-master", entry, (client,))

    assert handle("10.0.0.5") is True
    assert handle("10.0.0.5") is True
    assert handle("10.0.0.6") is True

    found = ctx.sink.by_id("sdLogOMreBadCert")
    assert [f.fields["client"] for f in found] == ["10.0.0.5", "10.0.0.6"]
    assert BAD_CERT_REPEAT not in found[0].text
    assert found[1].text.endswith(BAD_CERT_REPEAT)
