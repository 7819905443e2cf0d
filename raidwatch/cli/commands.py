"""CLI entry point for raidwatch."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from raidwatch import __logo__, __version__

app = typer.Typer(
    name="raidwatch",
    help=f"{__logo__} raidwatch - air-raid alert watcher with call escalation",
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} raidwatch v{__version__}")
        raise typer.Exit()


def _print_banner(config) -> None:
    ai = "[green]on[/green]" if config.classifier.enabled else "[yellow]off (keyword rules)[/yellow]"
    console.print("=" * 60)
    console.print(f"{__logo__} [bold]raidwatch[/bold] v{__version__}")
    console.print("=" * 60)
    console.print(f"  Channel:   [cyan]{config.telegram.channel}[/cyan]")
    console.print(f"  City:      [cyan]{config.alert.monitored_city}[/cyan]")
    console.print(f"  Recipient: [cyan]{config.alert.recipient_id}[/cyan]")
    console.print(f"  AI:        {ai}")
    console.print(
        f"  Polling:   every {config.schedule.poll_interval_s:g}s, "
        f"calls {config.calls.max_retries}x / {config.calls.call_timeout_s:g}s timeout"
    )


@app.command()
def run(
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to config.json (default: ~/.raidwatch/config.json)"
    ),
    reset_cursor: bool = typer.Option(False, "--reset-cursor", help="Forget read progress before starting"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """Watch the alert channel and escalate threats to the recipient."""
    from raidwatch.app.bootstrap import build_runtime, configure_logging
    from raidwatch.config.loader import load_config
    from raidwatch.errors import ConfigurationError, PersistenceError, TransportError

    config = load_config(config_path)
    configure_logging(config, verbose=verbose)

    try:
        runtime = build_runtime(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print("Set the values in ~/.raidwatch/config.json or RAIDWATCH_* environment variables.")
        raise typer.Exit(1)

    if reset_cursor:
        try:
            runtime.store.reset()
        except PersistenceError as e:
            console.print(f"[red]Could not reset cursor:[/red] {e}")
            raise typer.Exit(1)
        console.print("[green]✓[/green] Cursor reset")

    _print_banner(config)

    async def main() -> None:
        runtime.install_signal_handlers()
        await runtime.run()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\nShutting down...")
    except TransportError as e:
        console.print(f"[red]Transport error:[/red] {e}")
        raise typer.Exit(1)
    console.print("[dim]raidwatch stopped[/dim]")
