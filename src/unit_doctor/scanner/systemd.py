"""Systemd Scanner - Collects unit state via systemctl.

Builds the UnitSnapshot (exists/enabled/active per unit) and the host
environment facts the diagnostics' relevance conditions need.
"""

from unit_doctor.connector.base import Connector
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot, UnitState

_ACTIVE_STATES = {"active", "reloading"}
_ENABLED_STATES = {"enabled", "enabled-runtime"}


class SnapshotError(RuntimeError):
    """Unit state could not be collected at all."""


class SystemdScanner:
    """Scanner for systemd unit state.

    Collects, per unit:
    - LoadState (does the unit exist)
    - ActiveState (is it running)
    - UnitFileState (does it start at boot)
    """

    def __init__(self, connector: Connector) -> None:
        self.connector = connector

    def detect_environment(self) -> HostEnvironment:
        """Check for systemd and the openshift binary on the host."""
        return HostEnvironment(
            hostname=self.connector.hostname,
            has_systemd=bool(self.connector.which("systemctl")),
            openshift_path=self.connector.which("openshift"),
        )

    def scan(self, unit_names: list[str]) -> UnitSnapshot:
        """Collect state for the given units.

        Raises:
            SnapshotError: systemctl failed; nothing can be diagnosed.
        """
        if not unit_names:
            return UnitSnapshot()

        cmd = (
            f"systemctl show {' '.join(unit_names)} "
            "--property=Id,LoadState,ActiveState,UnitFileState --no-pager"
        )
        result = self.connector.run(cmd)
        if not result.success:
            raise SnapshotError(f"systemctl show failed (exit {result.exit_code}): {result.stderr.strip()}")

        return UnitSnapshot.from_states(self._parse_show_output(result.stdout, unit_names))

    def _parse_show_output(self, output: str, unit_names: list[str]) -> list[UnitState]:
        """Parse `systemctl show` output: one KEY=VALUE block per unit."""
        blocks: list[dict[str, str]] = []
        current: dict[str, str] = {}

        for line in output.splitlines():
            if not line.strip():
                if current:
                    blocks.append(current)
                    current = {}
                continue
            if "=" in line:
                key, val = line.split("=", 1)
                current[key] = val
        if current:
            blocks.append(current)

        wanted = set(unit_names)
        states = []
        for props in blocks:
            name = _unit_name(props.get("Id", ""))
            if name not in wanted:
                continue
            states.append(
                UnitState(
                    name=name,
                    exists=props.get("LoadState") == "loaded",
                    enabled=props.get("UnitFileState") in _ENABLED_STATES,
                    active=props.get("ActiveState") in _ACTIVE_STATES,
                )
            )
        return states


def _unit_name(unit_id: str) -> str:
    """'docker.service' -> 'docker'; other unit types keep their suffix."""
    if unit_id.endswith(".service"):
        return unit_id[: -len(".service")]
    return unit_id
