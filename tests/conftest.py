"""Pytest configuration and fixtures for unit-doctor tests."""

import json
from contextlib import contextmanager
from typing import Iterator

import pytest

from unit_doctor.checks import DiagnosticContext
from unit_doctor.connector.base import CommandResult
from unit_doctor.engine.sink import FindingCollector
from unit_doctor.model.unit import HostEnvironment, UnitSnapshot, UnitState
from unit_doctor.rules.catalog import build_catalog


def journal_line(message: str, **extra: str) -> str:
    """One `journalctl --output=json` record."""
    return json.dumps({"MESSAGE": message, "_SYSTEMD_UNIT": "test.service", **extra}) + "\n"


class FakeConnector:
    """In-memory host: canned journals, `systemctl show` output and PATH.

    Records how many journal lines each unit's reader handed out, and
    whether every stream was closed.
    """

    def __init__(
        self,
        journals: dict[str, list[str]] | None = None,
        show_output: str = "",
        show_exit: int = 0,
        programs: dict[str, str] | None = None,
        broken_units: set[str] | None = None,
    ) -> None:
        self.hostname = "testhost"
        self.journals = journals or {}
        self.show_output = show_output
        self.show_exit = show_exit
        self.programs = programs if programs is not None else {
            "systemctl": "/usr/bin/systemctl",
            "openshift": "/usr/bin/openshift",
        }
        self.broken_units = broken_units or set()
        self.lines_read: dict[str, int] = {}
        self.opened: list[str] = []
        self.closed: list[str] = []
        self.commands: list[str] = []

    def run(self, command: str, timeout: float | None = None) -> CommandResult:
        self.commands.append(command)
        if command.startswith("systemctl show"):
            return CommandResult(command=command, stdout=self.show_output, stderr="boom" if self.show_exit else "", exit_code=self.show_exit)
        return CommandResult(command=command, stdout="", stderr="", exit_code=1)

    @contextmanager
    def stream(self, argv: list[str]) -> Iterator[Iterator[str]]:
        unit = argv[2]
        if unit in self.broken_units:
            raise ConnectionError(f"cannot run {argv[0]}")
        self.opened.append(unit)
        self.lines_read[unit] = 0

        def lines() -> Iterator[str]:
            for line in self.journals.get(unit, []):
                self.lines_read[unit] += 1
                yield line

        try:
            yield lines()
        finally:
            self.closed.append(unit)

    def which(self, program: str) -> str:
        return self.programs.get(program, "")


def make_snapshot(**units: tuple[bool, bool, bool]) -> UnitSnapshot:
    """make_snapshot(docker=(exists, enabled, active), ...); underscores become dashes."""
    return UnitSnapshot.from_states(
        [UnitState(name.replace("_", "-"), *state) for name, state in units.items()]
    )


@pytest.fixture
def sink() -> FindingCollector:
    return FindingCollector()


@pytest.fixture
def fake_connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def make_context(sink):
    """Build a DiagnosticContext around a connector and snapshot."""

    def _make(connector=None, snapshot=None, catalog=None, environment=None) -> DiagnosticContext:
        return DiagnosticContext(
            sink=sink,
            connector=connector or FakeConnector(),
            environment=environment or HostEnvironment("testhost", True, "/usr/bin/openshift"),
            snapshot=snapshot if snapshot is not None else UnitSnapshot(),
            catalog=catalog or build_catalog(),
        )

    return _make
