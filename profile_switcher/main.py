"""profile-switcher CLI - switch between profiles defined in settings.yaml."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .console import console
from .errors import ProfileSwitchError, UnknownProfileError
from .logging_setup import init_console_logging, init_json_logging
from .manager import ProfileSwitcher
from .settings import SCOPES, SettingsManager
from .stages import STAGES, TransitionEvent

logger = logging.getLogger(__name__)


def _settings(ctx: click.Context) -> SettingsManager:
    return ctx.obj["settings"]


def _load_switcher(ctx: click.Context) -> ProfileSwitcher:
    try:
        return ProfileSwitcher.from_settings(_settings(ctx), working_dir=Path.cwd())
    except ProfileSwitchError as e:
        _fail(e)


def _fail(error: Exception, exit_code: int = 1) -> NoReturn:
    """Print an error panel and exit."""
    lines = [escape(str(error))]
    cause = error.__cause__
    if cause is not None:
        lines.append(f"[dim]Caused by {type(cause).__name__}: {escape(str(cause))}[/dim]")
    console.print(Panel("\n".join(lines), title=f"[bold red]{type(error).__name__}[/bold red]", border_style="red"))
    sys.exit(exit_code)


@click.group(invoke_without_command=True)
@click.option(
    "--settings-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding settings.yaml and settings.local.yaml (default: .profile-switcher)",
)
@click.option(
    "--log-level", default=None, help="Log level; logs go to stderr unless --log-file is given (default: INFO)"
)
@click.option("--log-file", default=None, help="Write JSONL logs to this file")
@click.pass_context
def cli(ctx: click.Context, settings_dir: Path | None, log_level: str | None, log_file: str | None):
    """Switch between mutually exclusive profiles within named contexts."""
    if log_file or os.environ.get("PROFILE_SWITCHER_LOG_PATH"):
        init_json_logging(log_file, log_level)
    elif log_level:
        init_console_logging(log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = SettingsManager(settings_dir)

    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@cli.command(name="contexts")
@click.pass_context
def contexts_cmd(ctx: click.Context):
    """List configured contexts."""
    switcher = _load_switcher(ctx)
    names = switcher.context_names()

    if not names:
        console.print("[yellow]No contexts configured.[/yellow]")
        return

    table = Table(title="Contexts", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Profiles", justify="right")
    table.add_column("Active")
    table.add_column("Status")

    for name in names:
        status = "[cyan]default[/cyan]" if name == switcher.default_context else ""
        table.add_row(
            name,
            str(len(switcher.list_profiles(name))),
            switcher.get_active_profile(name) or "[dim]-[/dim]",
            status,
        )

    console.print(table)


@cli.command(name="profiles")
@click.argument("context", required=False)
@click.pass_context
def profiles_cmd(ctx: click.Context, context: str | None):
    """List the profiles of CONTEXT (default: the default context)."""
    switcher = _load_switcher(ctx)
    name = switcher.registry.resolve_context_name(context)
    profiles = switcher.list_profiles(name)

    if not profiles:
        console.print(f"[yellow]No profiles in context '{escape(name)}'.[/yellow]")
        return

    active = switcher.get_active_profile(name)
    table = Table(title=f"Profiles in {escape(name)}", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Activate")
    table.add_column("Deactivate")
    table.add_column("Status")

    for profile in profiles:
        info = profile.to_dict()
        status = "[bold green]active[/bold green]" if profile.name == active else ""
        table.add_row(profile.name, escape(info["on_activate"]), escape(info["on_deactivate"]), status)

    console.print(table)


@cli.command(name="switch")
@click.argument("profile")
@click.option("--context", "-c", "context", default=None, help="Context to switch (default: the default context)")
@click.option("--from", "from_profile", default=None, help="Profile currently in effect; its deactivate runs first")
@click.option("--trace", is_flag=True, help="Print every lifecycle stage")
@click.pass_context
def switch_cmd(ctx: click.Context, profile: str, context: str | None, from_profile: str | None, trace: bool):
    """Deactivate the current profile and activate PROFILE."""
    switcher = _load_switcher(ctx)
    name = switcher.registry.resolve_context_name(context)

    if trace:
        for stage in STAGES:
            switcher.subscribe(stage, _print_stage)

    try:
        if from_profile:
            switcher.registry.restore_active(name, from_profile)
        switcher.switch_profile(name, profile)
    except UnknownProfileError as e:
        _fail(e, exit_code=2)
    except ProfileSwitchError as e:
        active = switcher.get_active_profile(name)
        logger.error(f"Switch of context '{name}' to '{profile}' failed; active profile: {active}")
        _fail(e)

    console.print(f"[bold green]Active profile:[/bold green] {escape(profile)} [dim](context: {escape(name)})[/dim]")


@cli.command(name="default")
@click.argument("context", required=False)
@click.option("--scope", type=click.Choice(SCOPES), default="project", show_default=True)
@click.option("--clear", is_flag=True, help="Remove the default context from SCOPE")
@click.pass_context
def default_cmd(ctx: click.Context, context: str | None, scope: str, clear: bool):
    """Show or set the default context."""
    settings = _settings(ctx)

    if clear:
        if settings.clear_default_context(scope):
            console.print(f"[green]✓ Cleared {scope} default context[/green]")
        else:
            console.print(f"[yellow]No {scope} default context set[/yellow]")
        return

    if context:
        settings.set_default_context(context, scope)
        console.print(f"[green]✓ Default context set to '{escape(context)}' ({scope})[/green]")
        return

    try:
        current = settings.get_default_context()
    except ProfileSwitchError as e:
        _fail(e)
    console.print(f"[bold green]Default context:[/bold green] {escape(current)}")


def _print_stage(event: TransitionEvent) -> None:
    console.print(
        f"[dim]{event.stage:<18}[/dim] previous={event.previous or '-'} "
        f"current={event.current or '-'} next={event.next or '-'}",
        highlight=False,
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
