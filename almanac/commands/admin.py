"""Admin commands for configuration."""

import sys

from rich.console import Console

from almanac.config import create_default_config, get_config_path, load_settings
from almanac.errors import ConfigurationError

console = Console()


def init_command(force: bool = False) -> None:
    """Create the almanac configuration file."""
    config_path = get_config_path()

    # Guard: refuse to overwrite without force flag
    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'almanac init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
        console.print("[green]✓[/green] Config file created (permissions: 600)")
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def config_command() -> None:
    """Show the effective settings."""
    config_path = get_config_path()

    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]", style="bold")
        sys.exit(1)

    source = str(config_path) if config_path.exists() else "defaults (no config file)"
    console.print(f"[dim]Source: {source}[/dim]")
    console.print(f"[bold]Timezone:[/bold] {settings.timezone}")
    console.print(f"[bold]Palette:[/bold] {', '.join(settings.palette)}")
    console.print(f"[bold]Fallback color:[/bold] {settings.fallback_color}")
    console.print(f"[bold]Stray comments:[/bold] {settings.stray_comments.value}")
    console.print(f"[bold]Page size:[/bold] {settings.page_size}")
    console.print(f"[bold]Browse URI:[/bold] {settings.browse_uri}")
