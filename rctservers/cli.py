"""rctservers CLI - browse game servers from the command line."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.table import Table

from rctservers import __version__
from rctservers.browser import ServerBrowser
from rctservers.config import ServerListConfig, default_user_dir
from rctservers.core.adapters.favourites_adapter import FAVOURITES_FILE_NAME
from rctservers.core.domain.models import ServerListEntry
from rctservers.discovery.remote import DEFAULT_MASTER_SERVER_URL

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route structlog output to stderr at the requested level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _render_table(browser: ServerBrowser, title: str) -> Table:
    server_list = browser.server_list
    version = server_list.protocol_version

    table = Table(title=title)
    table.add_column("", style="yellow", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("Address", style="white")
    table.add_column("Players", justify="right")
    table.add_column("Version")
    table.add_column("Password", justify="center")
    table.add_column("LAN", justify="center")

    for entry in server_list.get_servers():
        version_style = "green" if entry.is_version_valid(version) else "red"
        table.add_row(
            "★" if entry.favourite else "",
            entry.name,
            entry.address,
            f"{entry.players}/{entry.max_players}",
            f"[{version_style}]{entry.version or '-'}[/{version_style}]",
            "yes" if entry.requires_password else "",
            "yes" if entry.local else "",
        )

    return table


@click.group()
@click.version_option(version=__version__, prog_name="rctservers")
@click.option(
    "--user-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="RCTSERVERS_USER_DIR",
    help=f"Directory holding {FAVOURITES_FILE_NAME}",
)
@click.option(
    "--protocol-version",
    default="",
    envvar="RCTSERVERS_PROTOCOL_VERSION",
    help="Network version of your game; matching servers sort first",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs")
@click.pass_context
def main(ctx: click.Context, user_dir: Optional[Path], protocol_version: str, verbose: bool) -> None:
    """rctservers - discover OpenRCT2 multiplayer servers."""
    configure_logging(verbose)
    ctx.obj = ServerListConfig(
        user_dir=user_dir or default_user_dir(),
        protocol_version=protocol_version,
    )


@main.command("list")
@click.option(
    "--master-server-url",
    default="",
    envvar="RCTSERVERS_MASTER_SERVER_URL",
    help=f"Master server URL (default: {DEFAULT_MASTER_SERVER_URL})",
)
@click.option(
    "--broadcast-address",
    default="255.255.255.255",
    envvar="RCTSERVERS_BROADCAST_ADDRESS",
    help="Broadcast address for the LAN probe",
)
@click.option("--no-local", is_flag=True, help="Skip the LAN probe")
@click.option("--no-remote", is_flag=True, help="Skip the master server")
@click.option("--no-http", is_flag=True, help="Disable HTTP entirely")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_obj
def list_servers(
    config: ServerListConfig,
    master_server_url: str,
    broadcast_address: str,
    no_local: bool,
    no_remote: bool,
    no_http: bool,
    as_json: bool,
) -> None:
    """Discover servers and list them, best match first."""
    config = config.model_copy(
        update={
            "master_server_url": master_server_url,
            "broadcast_address": broadcast_address,
            "http_enabled": not no_http,
        }
    )

    async def run() -> tuple[ServerBrowser, list]:
        async with ServerBrowser(config) as browser:
            errors = await browser.refresh(local=not no_local, remote=not no_remote)
        return browser, errors

    if not as_json:
        console.print("[bold]Searching for servers...[/bold]")

    browser, errors = asyncio.run(run())
    server_list = browser.server_list

    if as_json:
        click.echo(
            json.dumps(
                {
                    "servers": [e.model_dump() for e in server_list.get_servers()],
                    "totalPlayers": server_list.get_total_player_count(),
                    "errors": [e.kind.value for e in errors],
                },
                indent=2,
            )
        )
        return

    for error in errors:
        console.print(f"[yellow]Warning:[/yellow] {error}")

    console.print(_render_table(browser, "Servers"))
    console.print(
        f"{server_list.get_count()} servers, "
        f"{server_list.get_total_player_count()} players online"
    )


@main.group()
def favourites() -> None:
    """Favourite server commands."""
    pass


@favourites.command("list")
@click.pass_obj
def list_favourites(config: ServerListConfig) -> None:
    """List favourite servers."""
    browser = ServerBrowser(config.model_copy(update={"http_enabled": False}))
    browser.server_list.read_and_add_favourites()

    if browser.server_list.get_count() == 0:
        console.print("[yellow]No favourite servers.[/yellow]")
        return

    console.print(_render_table(browser, "Favourite Servers"))


@favourites.command("add")
@click.argument("address")
@click.option("--name", "-n", default="", help="Display name")
@click.option("--description", "-d", default="", help="Description")
@click.pass_obj
def add_favourite(config: ServerListConfig, address: str, name: str, description: str) -> None:
    """Add ADDRESS (host:port) to favourites."""
    browser = ServerBrowser(config.model_copy(update={"http_enabled": False}))
    entry = ServerListEntry(address=address, name=name or address, description=description)

    if not browser.add_favourite(entry):
        console.print(f"[red]Failed to save favourites to {config.user_dir}[/red]")
        sys.exit(1)

    console.print(f"[green]✓[/green] Added {address}")


@favourites.command("remove")
@click.argument("address")
@click.pass_obj
def remove_favourite(config: ServerListConfig, address: str) -> None:
    """Remove ADDRESS from favourites."""
    browser = ServerBrowser(config.model_copy(update={"http_enabled": False}))

    if not browser.remove_favourite(address):
        console.print(f"[red]Not removed:[/red] {address}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Removed {address}")


@main.command()
@click.pass_obj
def info(config: ServerListConfig) -> None:
    """Show effective configuration."""
    table = Table(title="rctservers")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Version", __version__)
    table.add_row("Favourites file", str(config.user_dir / FAVOURITES_FILE_NAME))
    table.add_row("Master server", config.resolved_master_server_url())
    table.add_row("Protocol version", config.protocol_version or "(any)")
    table.add_row("LAN probe", f"{config.broadcast_address}:{config.broadcast_port}")

    console.print(table)


if __name__ == "__main__":
    main()
