"""
Command-line interface for the host pre-flight checks.

Provides commands for setting up the host, checking it before a virtual
machine starts, and cleaning up what setup created.
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import ConfigError, ConfigLoader, PreflightConfig, Preset
from .platform.probe import current_platform, get_operations
from .preflight import (
    CheckStatus,
    NetworkMode,
    OutcomeKind,
    RegistryOptions,
    RunMode,
    RunOutcome,
    get_all_checks,
    run_preflight,
)
from .state import SetupState

console = Console()
logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_REBOOT_REQUIRED = 3

STATUS_STYLES = {
    CheckStatus.PASSED: "[green]PASS[/green]",
    CheckStatus.FIXED: "[green]FIXED[/green]",
    CheckStatus.CLEANED: "[green]DONE[/green]",
    CheckStatus.SKIPPED: "[dim]SKIP[/dim]",
    CheckStatus.WARNED: "[yellow]WARN[/yellow]",
    CheckStatus.FAILED: "[red]FAIL[/red]",
}


# ============================================================
# Main CLI Group
# ============================================================

@click.group()
@click.version_option(version=__version__, prog_name="vmpreflight")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """
    Host pre-flight checks

    Validate and prepare the host before virtual machines are created,
    and undo the setup afterwards.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )


def _config_options(func):
    """Options overriding the configuration file."""
    func = click.option(
        "--network-mode",
        type=click.Choice([m.value for m in NetworkMode]),
        help="Networking mode of the virtual machine",
    )(func)
    func = click.option(
        "--preset",
        type=click.Choice([p.value for p in Preset]),
        help="Bundle preset",
    )(func)
    func = click.option("--bundle", "-b", type=click.Path(), help="Bundle to use")(func)
    func = click.option(
        "--skip-check",
        "skip_checks",
        multiple=True,
        help="Check key to skip (repeatable)",
    )(func)
    return func


def _load_config(ctx, network_mode, preset, bundle, skip_checks) -> PreflightConfig:
    overrides = {
        "network_mode": network_mode,
        "preset": preset,
        "bundle": bundle,
        "skip_checks": list(skip_checks) or None,
    }
    try:
        return ConfigLoader(ctx.obj.get("config_path")).load(overrides).config
    except ConfigError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(EXIT_FAILED)


def _execute(config: PreflightConfig, mode: RunMode, cold_start: bool) -> RunOutcome:
    platform = current_platform()
    ops = get_operations(platform, config.home_dir)
    options = RegistryOptions(
        bundle_path=config.bundle_path,
        preset=config.preset.value,
        daemon_tasks=config.daemon_tasks,
        admin_helper=config.admin_helper,
    )
    logger.debug("Platform %s, network mode %s, cold start %s", platform.value, config.network_mode.value, cold_start)
    return run_preflight(
        ops,
        options,
        mode,
        platform=platform,
        network_mode=config.network_mode,
        cold_start=cold_start,
        skip_keys=config.skip_checks,
        warn_keys=config.warn_checks,
    )


def _report(outcome: RunOutcome) -> None:
    """Print results and exit with the code matching the outcome."""
    if outcome.results:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Step")
        table.add_column("Status")
        table.add_column("Details")
        for result in outcome.results:
            table.add_row(result.description, STATUS_STYLES[result.status], result.message)
        console.print(table)

    console.print()
    if outcome.kind == OutcomeKind.REBOOT_REQUIRED:
        console.print(Panel.fit(
            f"[yellow]{outcome.reboot_message}[/yellow]",
            title="Reboot Required",
        ))
        sys.exit(EXIT_REBOOT_REQUIRED)

    if outcome.kind == OutcomeKind.FAILED:
        console.print(f"[red]{outcome.summary()}[/red]")
        for failure in outcome.failures:
            console.print(f"\n[bold]{failure.description}[/bold]")
            if failure.message:
                console.print(f"  [red]{failure.message}[/red]")
            if failure.guidance:
                console.print(f"  [dim]{failure.guidance}[/dim]")
        sys.exit(EXIT_FAILED)

    console.print(f"[green]{outcome.summary()}[/green]")


# ============================================================
# SETUP Command
# ============================================================

@cli.command()
@_config_options
@click.pass_context
def setup(ctx, network_mode, preset, bundle, skip_checks):
    """Check the host and fix what can be fixed."""
    config = _load_config(ctx, network_mode, preset, bundle, skip_checks)
    console.print("\n[bold blue]Setting up the host[/bold blue]\n")

    outcome = _execute(config, RunMode.CHECK_AND_FIX, cold_start=True)
    if outcome.passed:
        SetupState(config.home_dir).mark_setup_completed(config.network_mode)
    _report(outcome)
    console.print("\n[bold]Setup is complete, you can now start the virtual machine.[/bold]")


# ============================================================
# START Command
# ============================================================

@cli.command()
@_config_options
@click.pass_context
def start(ctx, network_mode, preset, bundle, skip_checks):
    """
    Run the checks needed before starting the virtual machine.

    A start before setup completed, or after a network mode change, runs the
    full check-and-fix pass. Later starts only verify.
    """
    config = _load_config(ctx, network_mode, preset, bundle, skip_checks)
    state = SetupState.load(config.home_dir)

    if state.is_cold_start(config.network_mode):
        console.print("\n[bold blue]Running full pre-flight checks[/bold blue]\n")
        outcome = _execute(config, RunMode.CHECK_AND_FIX, cold_start=True)
        if outcome.passed:
            state.mark_setup_completed(config.network_mode)
    else:
        console.print("\n[bold blue]Running pre-flight checks[/bold blue]\n")
        outcome = _execute(config, RunMode.CHECK_ONLY, cold_start=False)

    _report(outcome)


# ============================================================
# CHECK Command
# ============================================================

@cli.command()
@_config_options
@click.option("--all", "-a", "include_startup", is_flag=True, help="Include checks normally run only at setup")
@click.pass_context
def check(ctx, network_mode, preset, bundle, skip_checks, include_startup: bool):
    """Verify the host without changing anything."""
    config = _load_config(ctx, network_mode, preset, bundle, skip_checks)
    console.print("\n[bold blue]Checking the host[/bold blue]\n")

    outcome = _execute(config, RunMode.CHECK_ONLY, cold_start=include_startup)
    _report(outcome)


# ============================================================
# CLEANUP Command
# ============================================================

@cli.command()
@_config_options
@click.pass_context
def cleanup(ctx, network_mode, preset, bundle, skip_checks):
    """Undo the changes made by setup."""
    config = _load_config(ctx, network_mode, preset, bundle, skip_checks)
    console.print("\n[bold blue]Cleaning up the host[/bold blue]\n")

    outcome = _execute(config, RunMode.CLEANUP, cold_start=True)
    SetupState(config.home_dir).clear()
    _report(outcome)
    console.print("\n[bold]Cleanup finished.[/bold]")


# ============================================================
# LIST Command
# ============================================================

@cli.command("list")
@click.option("--all-platforms", is_flag=True, help="Include checks for other platforms")
@click.pass_context
def list_checks(ctx, all_platforms: bool):
    """List registered checks and their keys."""
    config = _load_config(ctx, None, None, None, ())
    platform = current_platform()
    ops = get_operations(platform, config.home_dir)

    table = Table(title="Pre-flight Checks")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Role")
    table.add_column("Labels", style="dim")

    for descriptor in get_all_checks(ops):
        if not all_platforms and descriptor.labels.os not in (None, platform):
            continue
        description = descriptor.check_description or descriptor.cleanup_description
        role = descriptor.role.value
        if descriptor.startup_only:
            role += " (startup)"
        table.add_row(descriptor.key or "-", description, role, str(descriptor.labels))

    console.print(table)


# ============================================================
# Entry Point
# ============================================================

def main():
    cli(obj={})


if __name__ == "__main__":
    main()
