"""Dependency Checker - audits required-unit relationships in the snapshot.

IMPORTANT: like all analyzers this never runs commands. It only reasons
about the UnitSnapshot already collected.
"""

from unit_doctor.engine.sink import FindingSink
from unit_doctor.model.evidence import Evidence, Severity
from unit_doctor.model.unit import UnitSnapshot, UnitState
from unit_doctor.rules.model import DependencyRule

_REQ_LOADED_TMPL = """
systemd unit {{ unit }} depends on unit {{ required }}, which is not loaded.
{{ reason }}
An administrator probably needs to install the {{ required }} unit with:

  # yum install {{ required }}

If it is already installed, you may need to reload the definition with:

  # systemctl reload {{ required }}
"""

_REQ_ACTIVE_TMPL = """
systemd unit {{ unit }} is running but {{ required }} is not.
{{ reason }}
An administrator can start the {{ required }} unit with:

  # systemctl start {{ required }}

To ensure it is not failing to run, check the status and logs with:

  # systemctl status {{ required }}
  # journalctl -ru {{ required }}
"""

_REQ_ENABLED_TMPL = """
systemd unit {{ unit }} is enabled to run automatically at boot, but {{ required }} is not.
{{ reason }}
An administrator can enable the {{ required }} unit with:

  # systemctl enable {{ required }}
"""

_SDN_NODE_WITHOUT_NODE = """
systemd unit openshift-sdn-node is running but openshift-node is not.
Normally openshift-sdn-node starts openshift-node once initialized.
It is likely that openshift-node has crashed or been stopped.

An administrator can start openshift-node with:

  # systemctl start openshift-node

To ensure it is not repeatedly failing to run, check the status and logs with:

  # systemctl status openshift-node
  # journalctl -ru openshift-node
"""

_INACTIVE_TMPL = """
The {{ unit }} systemd unit is intended to start at boot but is not currently active.
An administrator can start the {{ unit }} unit with:

  # systemctl start {{ unit }}

To ensure it is not failing to run, check the status and logs with:

  # systemctl status {{ unit }}
  # journalctl -ru {{ unit }}
"""


def check_dependency(dependent: UnitState, required: UnitState, rationale: str, sink: FindingSink) -> Severity | None:
    """Report at most one problem with `dependent` needing `required`.

    Tiers, first match wins:
    1. dependent in use, required not installed   -> ERROR sdUnitReqLoaded
    2. dependent running, required not running    -> ERROR sdUnitReqActive
    3. dependent enabled, required not enabled    -> WARN  sdUnitReqEnabled

    Returns:
        Severity of the emitted finding, or None when the pair is healthy.
    """
    fields = {
        "unit": dependent.name,
        "required": required.name,
        "reason": rationale.strip("\n"),
        "evidence": [
            Evidence(source="systemd", excerpt=dependent.describe(), command=f"systemctl status {dependent.name}"),
            Evidence(source="systemd", excerpt=required.describe(), command=f"systemctl status {required.name}"),
        ],
    }

    if (dependent.active or dependent.enabled) and not required.exists:
        sink.emit(Severity.ERROR, "sdUnitReqLoaded", {**fields, "tmpl": _REQ_LOADED_TMPL})
        return Severity.ERROR
    if dependent.active and not required.active:
        sink.emit(Severity.ERROR, "sdUnitReqActive", {**fields, "tmpl": _REQ_ACTIVE_TMPL})
        return Severity.ERROR
    if dependent.enabled and not required.enabled:
        sink.emit(Severity.WARN, "sdUnitReqEnabled", {**fields, "tmpl": _REQ_ENABLED_TMPL})
        return Severity.WARN
    return None


def check_sdn_node_started_node(snapshot: UnitSnapshot, sink: FindingSink) -> None:
    """openshift-sdn-node starts openshift-node itself, so node need not be enabled.

    If sdn-node is running and node is not, node has crashed or been stopped.
    """
    sdn_node = snapshot["openshift-sdn-node"]
    node = snapshot["openshift-node"]
    if sdn_node.active and not node.active:
        sink.emit(Severity.ERROR, "sdUnitSDNreqSN", {
            "text": _SDN_NODE_WITHOUT_NODE,
            "unit": node.name,
            "evidence": [
                Evidence(source="systemd", excerpt=sdn_node.describe()),
                Evidence(source="systemd", excerpt=node.describe()),
            ],
        })


def check_enabled_but_inactive(snapshot: UnitSnapshot, sink: FindingSink) -> None:
    """Anything that is enabled but not running deserves notice (unit-name order)."""
    for name in sorted(snapshot):
        unit = snapshot[name]
        if unit.enabled and not unit.active:
            sink.emit(Severity.WARN, "sdUnitInactive", {
                "tmpl": _INACTIVE_TMPL,
                "unit": name,
                "evidence": [Evidence(source="systemd", excerpt=unit.describe(), command=f"systemctl status {name}")],
            })


def check_unit_dependencies(snapshot: UnitSnapshot, rules: tuple[DependencyRule, ...] | list[DependencyRule], sink: FindingSink) -> None:
    """Run every declared dependency rule plus the fixed checks, once."""
    for rule in rules:
        check_dependency(snapshot[rule.dependent], snapshot[rule.required], rule.rationale, sink)
    check_sdn_node_started_node(snapshot, sink)
    check_enabled_but_inactive(snapshot, sink)
