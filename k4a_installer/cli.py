"""CLI entry point for k4a-installer."""

from __future__ import annotations

import logging
import os
import sqlite3
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

import k4a_installer

app = typer.Typer(
    name="k4a-installer",
    help="Azure Kinect SDK installer for Jetson devices.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

ENV_VARS = {
    "variant": "K4A_INSTALLER_VARIANT",
    "work_dir": "K4A_INSTALLER_WORK_DIR",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _open_store():
    """Open the local store, or None if it cannot be created."""
    from k4a_installer.data.store import DataStore

    try:
        return DataStore()
    except (sqlite3.Error, OSError) as e:
        logger.warning("Local store unavailable: %s", e)
        return None


def _require_store():
    """Open the local store or exit with an error."""
    store = _open_store()
    if store is None:
        console.print("[red]Cannot open the local store (~/.k4a-installer/data.db).[/]")
        raise typer.Exit(1)
    return store


def _resolve_setting(flag: Optional[str], key: str, store) -> str:
    """Resolve a setting from CLI flag → env var → store → default."""
    from k4a_installer.data.store import CONFIG_DEFAULTS

    if flag:
        return flag
    env_var = ENV_VARS.get(key)
    if env_var and os.environ.get(env_var):
        return os.environ[env_var]
    if store is not None:
        value = store.get_config(key)
        if value:
            return value
    return CONFIG_DEFAULTS[key]


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", help="Show debug logging"
    ),
) -> None:
    """Azure Kinect SDK installer for Jetson devices."""
    _configure_logging(verbose)


@app.command()
def install(
    variant: Optional[str] = typer.Option(
        None, "--variant", "-v", help="Install variant (e.g. dependencies, network)"
    ),
    work_dir: Optional[str] = typer.Option(
        None, "--work-dir", "-w", help="Directory for downloads and the SDK checkout"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Do not ask for confirmation"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Show debug logging"
    ),
) -> None:
    """Install the Azure Kinect SDK and its dependencies."""
    from rich.prompt import Confirm

    from k4a_installer.core.environment import EnvironmentDetector
    from k4a_installer.core.executor import SystemExecutor
    from k4a_installer.core.output import StatusPrinter
    from k4a_installer.core.report import Reporter
    from k4a_installer.core.runner import StepRunner
    from k4a_installer.installers import registry
    from k4a_installer.installers.base import InstallSettings, StepContext

    if verbose:
        _configure_logging(True)

    store = _open_store()
    variant_id = _resolve_setting(variant, "variant", store)
    try:
        install_variant = registry.get_variant(variant_id)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    settings = InstallSettings(
        work_dir=os.path.abspath(_resolve_setting(work_dir, "work_dir", store)),
        sdk_repo_url=_resolve_setting(None, "sdk_repo_url", store),
        depthengine_url=_resolve_setting(None, "depthengine_url", store),
    )

    environment = EnvironmentDetector.detect_current()
    printer = StatusPrinter(console)
    printer.banner(["Azure Kinect SDK Dependency Installer", "For Jetson Orin Nano"])

    info = install_variant.get_info()
    console.print(
        Panel(
            f"[bold]Variant:[/] {info.name} ({info.identifier})\n"
            f"[bold]OS:[/] {environment.os_version}\n"
            f"[bold]Architecture:[/] {environment.architecture}\n"
            f"[bold]Work dir:[/] {settings.work_dir}",
            title="Installation",
            border_style="blue",
        )
    )
    if environment.is_root:
        printer.warning("Running as root. This is acceptable but not required.")
    if not environment.is_arm64:
        printer.warning(
            f"Detected architecture {environment.architecture}; "
            "these steps target aarch64 (Jetson)."
        )

    if not yes and not Confirm.ask("Proceed with installation?", console=console):
        console.print("[yellow]Aborted.[/]")
        raise typer.Exit(1)

    context = StepContext(
        environment=environment,
        executor=SystemExecutor(environment),
        printer=printer,
        settings=settings,
    )
    runner = StepRunner(context, Reporter(printer, install_variant.get_report_config(settings)))

    run_id = None
    if store is not None:
        try:
            run_id = store.create_run(info.identifier, environment)
        except sqlite3.Error as e:
            logger.warning("Could not record run start: %s", e)

    result = runner.run(install_variant.build_steps(settings))

    if store is not None:
        try:
            if run_id:
                store.complete_run(run_id, result)
        except sqlite3.Error as e:
            logger.warning("Could not record run result: %s", e)
        store.close()

    raise typer.Exit(result.exit_code)


@app.command("list-variants")
def list_variants() -> None:
    """List all install variants."""
    from k4a_installer.installers import registry

    variants = registry.list_variants()
    if not variants:
        console.print("[yellow]No install variants found.[/]")
        raise typer.Exit(0)

    table = Table(title="Install Variants")
    table.add_column("Identifier", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Steps", justify="right")
    table.add_column("Description")

    for variant_id in variants:
        variant = registry.get_variant(variant_id)
        info = variant.get_info()
        steps = variant.build_steps(_default_settings())
        table.add_row(info.identifier, info.name, str(len(steps)), info.description)

    console.print(table)


def _default_settings():
    from k4a_installer.installers.base import InstallSettings

    return InstallSettings()


@app.command()
def detect() -> None:
    """Show what the installer detects about this host."""
    from k4a_installer.core.environment import EnvironmentDetector

    console.print("[dim]Detecting environment...[/]\n")
    env = EnvironmentDetector.detect_current()

    table = Table(title="Environment")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("OS", f"{env.os_name} ({env.os_version})")
    table.add_row("Version ID", env.os_version_id or "(unknown)")
    table.add_row("Architecture", env.architecture + ("" if env.is_arm64 else " (not arm64)"))
    table.add_row("Root", "yes" if env.is_root else "no (sudo will be used)")
    table.add_row("Package manager", env.package_manager or "(none found)")
    table.add_row("Python", env.python_version)
    console.print(table)

    missing = [tool for tool, found in env.tools.items() if not found]
    if missing:
        console.print(f"\n[yellow]Missing tools:[/] {', '.join(missing)}")
    else:
        console.print("\n[green]All expected tools found.[/]")


@app.command()
def explain(
    category: Optional[str] = typer.Argument(
        None, help="Failure category or tag (e.g. depthengine, udev-missing)"
    ),
) -> None:
    """Show suggested fixes for a failure category."""
    from k4a_installer.core.diagnostics import FailureCategory
    from k4a_installer.core.remediation import remediate

    if category is None:
        console.print("[bold]Known categories:[/]")
        for cat in FailureCategory:
            console.print(f"  - {cat.value}")
        return

    advice = remediate(category)
    if not advice:
        console.print(f"[yellow]No remediation known for {category!r}[/]")
        raise typer.Exit(1)
    console.print(f"[yellow]Suggested solutions for {category}:[/]")
    for i, line in enumerate(advice, 1):
        console.print(f"  {i}. {line}", markup=False)


@app.command()
def history(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of runs to show"),
) -> None:
    """Show recent installation runs."""
    store = _require_store()
    runs = store.get_recent_runs(limit)
    store.close()
    if not runs:
        console.print("[yellow]No runs recorded yet.[/]")
        return

    table = Table(title="Recent Runs")
    table.add_column("Started", style="cyan")
    table.add_column("Variant")
    table.add_column("Exit", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Warnings")

    for run in runs:
        exit_code = run["exit_code"]
        if exit_code is None:
            exit_text = "[dim]-[/]"
        elif exit_code == 0:
            exit_text = "[green]0[/]"
        else:
            exit_text = f"[red]{exit_code}[/]"
        table.add_row(
            run["started_at"][:19],
            run["variant"],
            exit_text,
            f"{run['steps_completed'] or 0}/{run['total_steps'] or '?'}",
            ", ".join(run["tags"]) or "-",
        )
    console.print(table)


@app.command()
def config(
    action: str = typer.Argument(
        "get", help="Action: get or set"
    ),
    key: Optional[str] = typer.Argument(
        None, help="Config key (variant, work_dir, sdk_repo_url, depthengine_url)"
    ),
    value: Optional[str] = typer.Argument(
        None, help="Value to set"
    ),
) -> None:
    """View or modify configuration."""
    from k4a_installer.data.store import CONFIG_DEFAULTS
    from k4a_installer.installers import registry

    if key and key not in CONFIG_DEFAULTS:
        console.print(
            f"[red]Unknown config key: {key}. "
            f"Valid keys: {', '.join(CONFIG_DEFAULTS)}[/]"
        )
        raise typer.Exit(1)

    store = _require_store()

    if action == "get":
        if key:
            val = store.get_config(key)
            if val is not None:
                console.print(f"{key} = {val}")
            else:
                console.print(f"[yellow]{key} is not set[/]")
        else:
            for k in CONFIG_DEFAULTS:
                val = store.get_config(k)
                console.print(f"{k} = {val or '(not set)'}")
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: k4a-installer config set <key> <value>[/]")
            raise typer.Exit(1)
        if key == "variant" and value not in registry.list_variants():
            console.print(
                f"[red]Unknown variant: {value}. "
                f"Available: {', '.join(registry.list_variants())}[/]"
            )
            raise typer.Exit(1)
        store.set_config(key, value)
        console.print(f"[green]Set {key} = {value}[/]")
    else:
        console.print("[red]Unknown action. Use 'get' or 'set'.[/]")
        raise typer.Exit(1)

    store.close()


@app.command()
def version() -> None:
    """Print version."""
    console.print(f"k4a-installer {k4a_installer.__version__}")


if __name__ == "__main__":
    app()
