"""Unit state dataclasses - the runtime snapshot the diagnostics reason about."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UnitState:
    """Runtime state of one systemd unit."""

    name: str
    exists: bool = False  # unit definition is loaded
    enabled: bool = False  # starts at boot
    active: bool = False  # currently running

    def describe(self) -> str:
        """One-line state summary used as finding evidence."""
        return (
            f"{self.name}: exists={_yes_no(self.exists)} "
            f"enabled={_yes_no(self.enabled)} active={_yes_no(self.active)}"
        )


class UnitSnapshot(dict[str, UnitState]):
    """Mapping of unit name -> UnitState.

    Looking up a unit that was not collected yields an absent state
    (not installed, not enabled, not active) without adding it to the
    mapping, so the blanket sweeps only see units that were really
    collected.
    """

    def __missing__(self, name: str) -> UnitState:
        return UnitState(name=name)

    @classmethod
    def from_states(cls, states: "list[UnitState]") -> "UnitSnapshot":
        """Build a snapshot from a list of unit states."""
        return cls((state.name, state) for state in states)


@dataclass
class HostEnvironment:
    """What the diagnostics need to know about the host they run on."""

    hostname: str = "localhost"
    has_systemd: bool = False
    openshift_path: str = ""  # empty when the binary is not on PATH


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"
