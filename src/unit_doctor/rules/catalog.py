"""Rule catalog - which units we check and what to look for and say about them.

``build_catalog()`` is called once per run. Stateful handlers are created
inside it, so their memory lasts exactly as long as the catalog does.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from unit_doctor.model.evidence import Severity
from unit_doctor.model.journal import LogEntry
from unit_doctor.rules.model import (
    DependencyRule,
    HandlerMatcher,
    LogMatcher,
    StaticMatcher,
    UnitSpec,
    log_prelude,
)

if TYPE_CHECKING:
    from unit_doctor.checks import DiagnosticContext


@dataclass(frozen=True)
class RuleCatalog:
    """All log rules (per unit, in check order) and unit dependency rules."""

    units: dict[str, UnitSpec] = field(default_factory=dict)
    dependencies: tuple[DependencyRule, ...] = ()

    def unit_names(self) -> list[str]:
        """Every unit the catalog refers to, sorted."""
        names = set(self.units)
        for rule in self.dependencies:
            names.update((rule.dependent, rule.required))
        return sorted(names)


# =========================================================================
# Reusable matchers
# =========================================================================

BAD_IMAGE_TEMPLATE = StaticMatcher(
    pattern=re.compile(r"Unable to find an image for .* due to an error processing the format: %!v\(MISSING\)"),
    severity=Severity.INFO,
    id="sdLogBadImageTmpl",
    interpretation="""
This error indicates openshift was given the flag --images including an invalid format variable.
Valid formats can include (literally) ${component} and ${version}.
This could be a typo or you might be intending to hardcode something,
such as a version which should be specified as e.g. v3.0, not ${v3.0}.
Note that the --images flag may be supplied via the OpenShift master,
node, or "openshift ex registry/router" invocations and should usually
be the same for each.""",
)


BAD_CERT_EXPLANATION = """
This error indicates that a client attempted to connect to the master
HTTPS API server but broke off the connection because the master's
certificate is not validated by a certificate authority (CA) acceptable
to the client. There are a number of ways this can occur, some more
problematic than others.

At this time, the OpenShift master certificate is signed by a private CA
(created the first time the master runs) and clients should have a copy of
that CA certificate in order to validate connections to the master. Most
likely, either:
1. the master has generated a new CA (after the administrator deleted
   the old one) and the client has a copy of the old CA cert, or
2. the client hasn't been configured with a private CA at all (or the
   wrong one), or
3. the client is attempting to reach the master at a URL that isn't
   covered by the master's server certificate, e.g. a public-facing
   name or IP that isn't known to the master automatically; this may
   need to be specified with the --public-master flag on the master
   in order to generate a new server certificate including it.

Clients of the master may include users, nodes, and infrastructure
components running as containers. Check the "from" IP address in the
log message:
* If it is from a SDN IP, it is likely from an infrastructure
  component. Check pod logs and recreate it with the correct CA cert.
  Routers and registries won't work properly with the wrong CA.
* If it is from a node IP, the client is likely a node. Check the
  openshift-node and openshift-sdn-node logs and reconfigure with the
  correct CA cert. Nodes will be unable to create pods until this is
  corrected.
* If it is from an external IP, it is likely from a user (CLI, browser,
  etc.). osc and openshift clients should be configured with the correct
  CA cert; browsers can also add CA certs but it is usually easier
  to just have them accept the server certificate on the first visit
  (so this message may simply indicate that the master generated a new
  server certificate, e.g. to add a different --public-master, and a
  browser hasn't accepted it yet and is still attempting API calls;
  try logging out of the console and back in again)."""

BAD_CERT_REPEAT = "This message was diagnosed above, but for a different client address."


class BadCertificateHandler:
    """Report TLS "bad certificate" handshake failures once per client address.

    The first client gets the full explanation, each further client a short
    note pointing back to it, and repeats for a known client nothing at all.
    The matcher always stays active so every failing client is reported.
    """

    def __init__(self) -> None:
        self._seen: set[str] | None = None  # created on first match

    def __call__(
        self,
        ctx: "DiagnosticContext",
        rule: HandlerMatcher,
        unit: str,
        entry: LogEntry,
        groups: tuple[str, ...],
    ) -> bool:
        client = groups[0]
        prelude = log_prelude(unit, entry)
        fields = {"client": client, "unit": unit, "logMsg": entry.message}

        if self._seen is None:
            self._seen = {client}
            # TODO: tailor the explanation to whether the client is on the SDN, node or external subnet
            ctx.sink.emit(rule.severity, rule.id, {**fields, "text": prelude + BAD_CERT_EXPLANATION})
        elif client not in self._seen:
            self._seen.add(client)
            ctx.sink.emit(rule.severity, rule.id, {**fields, "text": prelude + BAD_CERT_REPEAT})
        return True


def _master_matchers() -> tuple[LogMatcher, ...]:
    return (
        BAD_IMAGE_TEMPLATE,
        StaticMatcher(
            pattern=re.compile(r"Unable to decode an event from the watch stream: local error: unexpected message"),
            severity=Severity.INFO,
            id="sdLogOMIgnore",
            interpretation="You can safely ignore this message.",
        ),
        StaticMatcher(
            pattern=re.compile(r"HTTP probe error: Get .*/healthz: dial tcp .*:10250: connection refused"),
            severity=Severity.INFO,
            id="sdLogOMhzRef",
            interpretation="""
The OpenShift master does a health check on nodes that are defined in
its records, and this is the result when the node is not available yet.
Since the master records are typically created before the node is
available, this is not usually a problem, unless it continues in the
logs after the node is actually available.""",
        ),
        HandlerMatcher(
            # IPv4 only for now
            pattern=re.compile(r"http: TLS handshake error from ([\d.]+):\d+: remote error: bad certificate"),
            severity=Severity.WARN,
            id="sdLogOMreBadCert",
            handler=BadCertificateHandler(),
        ),
        StaticMatcher(
            # user &{system:anonymous  [system:unauthenticated]} -> /api/v1beta1/services?namespace="
            pattern=re.compile(r"system:anonymous\W*system:unauthenticated\W*/api/v1beta1/services\?namespace="),
            severity=Severity.WARN,
            id="sdLogOMunauthNode",
            interpretation="""
This indicates the OpenShift API server (master) received an unscoped
request to get Services. Requests like this probably come from an
OpenShift node trying to discover where it should proxy services.

However, the request was unauthenticated, so it was denied. The node
either did not offer a client certificate for credential, or offered an
invalid one (not signed by the certificate authority the master uses).
The node will not be able to function without this access.

Unfortunately, this message does not tell us *which* node is the
problem. But running diagnostics on your node hosts should find a log
message for any node with this problem.""",
        ),
    )


def _node_matchers() -> tuple[LogMatcher, ...]:
    return (
        BAD_IMAGE_TEMPLATE,
        StaticMatcher(
            # e.g. x509: certificate signed by unknown authority
            pattern=re.compile(r"Unable to load services: Get (http\S+/api/v1beta1/services\?namespace=): (.+)"),
            severity=Severity.ERROR,
            id="sdLogONconnMaster",
            interpretation="""
openshift-node could not connect to the OpenShift master API in order
to determine its responsibilities. This host will not function as a node
until this is resolved. Pods scheduled for this node will remain in
pending or unknown state forever.""",
        ),
        StaticMatcher(
            pattern=re.compile(
                r'Unable to load services: request.*403 Forbidden: Forbidden: "/api/v1beta1/services\?namespace=" denied by default'
            ),
            severity=Severity.ERROR,
            id="sdLogONMasterForbids",
            interpretation="""
openshift-node could not connect to the OpenShift master API to determine
its responsibilities because it lacks the proper credentials. Nodes
should specify a client certificate in order to identify themselves to
the master. This message typically means that either no client key/cert
was supplied, or it is not validated by the certificate authority (CA)
the master uses. You should supply a correct client key and certificate
to the .kubeconfig specified in /etc/sysconfig/openshift-node

This host will not function as a node until this is resolved. Pods
scheduled for this node will remain in pending or unknown state forever.""",
        ),
    )


def _sdn_node_matchers() -> tuple[LogMatcher, ...]:
    return (
        StaticMatcher(
            pattern=re.compile(r"Could not find an allocated subnet for this minion.*Waiting.."),
            severity=Severity.WARN,
            id="sdLogOSNnoSubnet",
            interpretation="""
This warning occurs when openshift-sdn-node is trying to request the
SDN subnet it should be configured with according to openshift-sdn-master,
but either can't connect to it ("All the given peers are not reachable")
or has not yet been assigned a subnet ("Key not found").

This can just be a matter of waiting for the master to become fully
available and define a record for the node (aka "minion") to use,
and openshift-sdn-node will wait until that occurs, so the presence
of this message in the node log isn't necessarily a problem as
long as the SDN is actually working, but this message may help indicate
the problem if it is not working.

If the master is available and this node's record is defined and this
message persists, then it may be a sign of a different misconfiguration.
Unfortunately the message is not specific about why the connection failed.
Check MASTER_URL in /etc/sysconfig/openshift-sdn-node:
 * Is the protocol https? It should be http.
 * Can you reach the address and port from the node using curl?
   ("404 page not found" is correct response)""",
        ),
    )


def _docker_matchers() -> tuple[LogMatcher, ...]:
    return (
        StaticMatcher(
            pattern=re.compile(r"Usage: docker \[OPTIONS\] COMMAND"),
            severity=Severity.ERROR,
            id="sdLogDbadOpt",
            interpretation="""
This indicates that docker failed to parse its command line
successfully, so it just printed a standard usage message and exited.
Its command line is built from variables in /etc/sysconfig/docker
(which may be overridden by variables in /etc/sysconfig/openshift-sdn-node)
so check there for problems.

The OpenShift node will not work on this host until this is resolved.""",
        ),
        # Generic catch-all; must stay last.
        StaticMatcher(
            pattern=re.compile(r'(?:^|\s)level="fatal"(?:\s|$)'),
            severity=Severity.ERROR,
            id="sdLogDfatal",
            interpretation="""
This is not a known problem, but it is causing Docker to crash,
so the OpenShift node will not work on this host until it is resolved.""",
        ),
    )


_SDN_RATIONALE = """
The software-defined network (SDN) enables networking between
containers on different nodes. If it is not running, containers
on different nodes will not be able to connect to each other."""

_IPTABLES_RATIONALE = """
iptables is used by OpenShift nodes for container networking.
Connections to a container will fail without it."""

_DOCKER_RATIONALE = "OpenShift nodes use Docker to run containers."

DEPENDENCY_RULES: tuple[DependencyRule, ...] = (
    DependencyRule("openshift-node", "iptables", _IPTABLES_RATIONALE),
    DependencyRule("openshift-node", "docker", _DOCKER_RATIONALE),
    # SDN+OVS is the only network implementation checked; all-in-one hosts may run without it.
    DependencyRule("openshift-node", "openshift-sdn-node", _SDN_RATIONALE),
    DependencyRule(
        "openshift-sdn-master",
        "openshift-master",
        """
The software-defined network (SDN) enables networking between containers
on different nodes, coordinated via openshift-sdn-master. It does not
make sense to run this service unless the host is operating as an
OpenShift master.""",
    ),
    DependencyRule(
        "openshift-master",
        "openshift-sdn-master",
        _SDN_RATIONALE + "\nopenshift-sdn-master is required to provision the SDN subnets.",
    ),
    DependencyRule(
        "openshift-sdn-node",
        "openvswitch",
        """
The software-defined network (SDN) enables networking between
containers on different nodes. Containers will not be able to
connect to each other without the openvswitch service carrying
this traffic.""",
    ),
    DependencyRule("openshift", "docker", _DOCKER_RATIONALE),
    DependencyRule("openshift", "iptables", _IPTABLES_RATIONALE),
)


def build_catalog() -> RuleCatalog:
    """Build the rule catalog for one diagnostics run."""
    specs = [
        UnitSpec("openshift-master", re.compile(r"Starting an OpenShift master"), _master_matchers()),
        UnitSpec("openshift-sdn-master", re.compile(r"Starting OpenShift SDN Master")),
        UnitSpec("openshift-node", re.compile(r"Starting an OpenShift node"), _node_matchers()),
        UnitSpec("openshift-sdn-node", re.compile(r"Starting OpenShift SDN node"), _sdn_node_matchers()),
        # RHEL Docker at least
        UnitSpec("docker", re.compile(r"Starting Docker Application Container Engine\."), _docker_matchers()),
        UnitSpec("openvswitch", re.compile(r"Starting Open vSwitch")),
    ]
    return RuleCatalog(units={spec.name: spec for spec in specs}, dependencies=DEPENDENCY_RULES)
