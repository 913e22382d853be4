"""Command line entry point for the extension host."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import Config
from .extensions import ExtensionError, ExtensionHost, ExtensionLoader, load_manifest
from .services import ConsoleUIBridge, HostServices

console = Console()
app = typer.Typer(
    name="exthost",
    help="exthost - run and inspect editor extensions",
    no_args_is_help=True,
    invoke_without_command=True,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Logging level"),
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    """Host, validate and run editor extensions."""
    if version:
        from . import __version__
        console.print(f"exthost version {__version__}")
        raise typer.Exit()

    config = Config(config_path)
    setup_logging(log_level or config.log_level)
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _host(config: Config) -> ExtensionHost:
    services = HostServices.from_config(config, ui=ConsoleUIBridge(console))
    return ExtensionHost(config=config, services=services)


@app.command("list")
def list_extensions(ctx: typer.Context) -> None:
    """List extensions found in the configured directories."""
    config: Config = ctx.obj
    loader = ExtensionLoader(config.get_extensions_dirs(), include_builtin=config.get("include_builtin"))
    manifests = loader.discover_manifests()

    if not manifests:
        console.print("[yellow]No extensions found.[/yellow]")
        return

    table = Table(title="Extensions")
    table.add_column("Name", style="cyan")
    table.add_column("Display name")
    table.add_column("Version", style="green")
    table.add_column("Permissions")
    table.add_column("Path", style="dim")
    for path, manifest in manifests:
        table.add_row(
            manifest.name,
            manifest.display_name,
            manifest.version,
            ", ".join(sorted(manifest.permissions)),
            str(path),
        )
    console.print(table)


@app.command()
def validate(path: Path = typer.Argument(..., help="Extension directory or extension.json")) -> None:
    """Validate an extension manifest."""
    try:
        manifest = load_manifest(path)
    except ExtensionError as e:
        console.print(f"[red]❌ Invalid manifest: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ {manifest.display_name} ({manifest.name}) v{manifest.version} is valid[/green]")


@app.command()
def run(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Extension directory"),
    command: str = typer.Argument(..., help="Command id registered by the extension"),
    args: Optional[List[str]] = typer.Argument(None, help="Command arguments (JSON values or plain strings)"),
) -> None:
    """Load an extension, activate it, run one of its commands and unload it."""
    config: Config = ctx.obj
    parsed = [_parse_arg(arg) for arg in args or []]

    async def _run():
        async with _host(config) as host:
            manifest = host.loader.load_manifest(path)
            await host.load_from_directory(path, activate=True)
            return await host.execute_extension_command(manifest.name, command, *parsed)

    try:
        result = asyncio.run(_run())
    except ExtensionError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    body = json.dumps(result.to_dict(), indent=2, default=str)
    style = "green" if result.success else "red"
    console.print(Panel(body, title=f"{command}", border_style=style))
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Load every discovered extension and print host statistics."""
    config: Config = ctx.obj

    async def _stats():
        async with _host(config) as host:
            await host.load_discovered()
            return host.get_statistics(), [e.to_dict() for e in host.get_extension_errors()]

    statistics, errors = asyncio.run(_stats())

    table = Table(title="Extension host statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key in ("total", "active", "inactive", "with_errors"):
        table.add_row(key, str(statistics[key]))
    for token, count in sorted(statistics["permissions"].items()):
        table.add_row(f"permission {token}", str(count))
    console.print(table)

    for error in errors:
        console.print(f"[red]{error['extensionId']}: {error['message']}[/red]")


@app.command("init-config")
def init_config(ctx: typer.Context) -> None:
    """Create a default config file."""
    config: Config = ctx.obj
    try:
        path = config.create_default_config()
        console.print(f"[green]✅ Created default config file at {path}[/green]")
    except OSError as e:
        console.print(f"[red]Error creating config: {e}[/red]")
        raise typer.Exit(code=1)


def _parse_arg(value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


if __name__ == "__main__":
    app()
