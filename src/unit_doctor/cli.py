"""
Click-based CLI for unit-doctor.

IMPORTANT: This module only ORCHESTRATES. It never reasons or makes decisions.
- Loads host profiles
- Invokes the diagnosis pipeline
- Passes flags
- Formats output
"""

import contextlib
import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from unit_doctor import __version__
from unit_doctor.actions.report import REPORTERS, ReportAction
from unit_doctor.checks import diagnostic_names
from unit_doctor.config import ConfigManager
from unit_doctor.connector.local import LocalConnector
from unit_doctor.connector.ssh import SSHConfig, SSHConnector
from unit_doctor.engine.waivers import WaiverError, default_waiver_path, load_waiver_rules
from unit_doctor.model.evidence import Severity
from unit_doctor.pipeline import run_diagnosis
from unit_doctor.rules.catalog import build_catalog
from unit_doctor.scanner.systemd import SnapshotError

console = Console()

LEVELS = [s.value for s in Severity]


@click.group()
@click.version_option(version=__version__, prog_name="unit-doctor")
@click.option("--config", "-c", type=click.Path(), help="Path to config directory")
@click.option("--verbose", "-v", is_flag=True, help="Log engine internals to stderr")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """unit-doctor: journal and dependency diagnostics for OpenShift systemd units.

    Finds known problems in unit logs since each unit last started, and
    units whose required units are missing, stopped or not enabled.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    config_dir = Path(config) if config else None
    ctx.obj["config_mgr"] = ConfigManager(config_dir)


def _resolve_config(ctx: click.Context, server: str) -> SSHConfig:
    """Resolve server string to SSHConfig (profile name or host)."""
    config_mgr = ctx.obj["config_mgr"]
    cfg = config_mgr.get_profile(server)
    if cfg:
        return cfg

    # Otherwise treat as hostname/IP with default root user
    return SSHConfig(host=server, user="root")


def _open_connector(ctx: click.Context, server: str | None) -> LocalConnector | SSHConnector:
    if server is None:
        return LocalConnector()
    return SSHConnector(_resolve_config(ctx, server))


@main.command()
@click.argument("server", required=False)
@click.option("--format", "fmt", type=click.Choice(sorted(REPORTERS)), default=None, help="Output format")
@click.option(
    "--level",
    type=click.Choice(LEVELS, case_sensitive=False),
    default=Severity.INFO.value,
    show_default=True,
    help="Lowest severity to display",
)
@click.option(
    "--diagnostic",
    "-d",
    "diagnostics",
    multiple=True,
    help="Run only this diagnostic (repeatable)",
)
@click.option("--waivers", type=click.Path(dir_okay=False), default=None, help="Waiver YAML file")
@click.pass_context
def diagnose(
    ctx: click.Context,
    server: str | None,
    fmt: str | None,
    level: str,
    diagnostics: tuple[str, ...],
    waivers: str | None,
) -> None:
    """Diagnose systemd units on this host, or on SERVER over SSH.

    SERVER may be a saved profile name or a hostname.
    Exits with 2 if any error remains, 1 for warnings only, else 0.
    """
    # Auto-detect format if not specified
    if fmt is None:
        fmt = "plain" if not sys.stdout.isatty() else "rich"

    unknown = sorted(set(diagnostics) - set(diagnostic_names()))
    if unknown:
        raise click.BadParameter(
            f"unknown diagnostic(s) {', '.join(unknown)}; choose from {', '.join(diagnostic_names())}",
            param_hint="--diagnostic",
        )

    config_mgr = ctx.obj["config_mgr"]
    waiver_path = waivers or default_waiver_path(config_mgr.config_dir)
    try:
        waiver_rules = load_waiver_rules(waiver_path)
    except WaiverError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(2)

    try:
        with _open_connector(ctx, server) as connector:
            status = console.status("Diagnosing units...", spinner="dots") if fmt == "rich" else contextlib.nullcontext()
            with status:
                result = run_diagnosis(
                    connector,
                    names=list(diagnostics) or None,
                    waivers=waiver_rules,
                )
    except (ConnectionError, SnapshotError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(2)

    reporter = ReportAction(console, format_mode=fmt, min_level=Severity.parse(level))
    reporter.report_host_summary(result.environment, result.snapshot)
    exit_code = reporter.report_findings(result.findings, result.suppressed)
    sys.exit(exit_code)


@main.command()
def rules() -> None:
    """List the journal rules and unit dependencies that are checked."""
    reporter = ReportAction(console)
    reporter.report_catalog(build_catalog())


@main.group()
def config() -> None:
    """Manage host connection profiles."""
    pass


@config.command("add")
@click.argument("name")
@click.option("--host", "-h", required=True, help="Server hostname or IP")
@click.option("--user", "-u", default="root", help="SSH username")
@click.option("--port", "-p", default=22, help="SSH port")
@click.option("--password", "-pass", help="SSH password")
@click.option("--key", "-k", type=click.Path(), help="Path to SSH private key")
@click.option("--sudo/--no-sudo", default=True, help="Use sudo for commands")
@click.pass_context
def config_add(
    ctx: click.Context, name: str, host: str, user: str, port: int, password: str | None, key: str | None, sudo: bool
) -> None:
    """Add a new host profile."""
    config_mgr = ctx.obj["config_mgr"]
    cfg = SSHConfig(host=host, user=user, port=port, password=password, key_path=key, use_sudo=sudo)
    config_mgr.add_profile(name, cfg)
    console.print(f"[bold green]Added host profile:[/] {name}")


@config.command("list")
@click.pass_context
def config_list(ctx: click.Context) -> None:
    """List all host profiles."""
    config_mgr = ctx.obj["config_mgr"]
    profiles = config_mgr.list_profiles()
    if not profiles:
        console.print("[dim]No profiles configured yet.[/]")
        return

    for name, data in profiles.items():
        console.print(f"[bold green]{name}[/]: {data['user']}@{data['host']}:{data['port']}")


@config.command("remove")
@click.argument("name")
@click.pass_context
def config_remove(ctx: click.Context, name: str) -> None:
    """Remove a host profile."""
    config_mgr = ctx.obj["config_mgr"]
    if config_mgr.remove_profile(name):
        console.print(f"[bold green]Removed profile:[/] {name}")
    else:
        console.print(f"[bold red]Error:[/] Profile {name} not found.")
        sys.exit(1)


if __name__ == "__main__":
    main()
