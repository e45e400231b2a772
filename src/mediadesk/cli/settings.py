"""``mediadesk config`` and ``mediadesk reveal``."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from mediadesk.core.session import AppSession
from mediadesk.models import MediaSettings

from ._common import bootstrap, make_bridge

console = Console()
reveal_app = typer.Typer(no_args_is_help=True, help="Open config or log folders via the backend")


def _settings_table(title: str, settings: MediaSettings) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.to_wire().items():
        table.add_row(key, str(value))
    return table


def show_config():
    """Print the persisted settings and what the backend supports."""
    config = bootstrap()
    bridge = make_bridge(config)

    async def _load() -> AppSession:
        session = AppSession(bridge, config=config)
        await session.start()
        return session

    try:
        session = asyncio.run(_load())
    finally:
        bridge.close()
    store = session.store
    if not store.is_initialized:
        console.print(f"[red]Backend at {config.backend_url} is unavailable.[/red]")
        raise typer.Exit(code=1)

    console.print(_settings_table("Image settings", store.get_image_settings()))
    console.print(_settings_table("Video settings", store.get_video_settings()))
    caps = store.capabilities
    console.print(f"[bold]Image formats:[/] {', '.join(caps.image_formats) or '-'}")
    console.print(f"[bold]Video formats:[/] {', '.join(caps.video_formats) or '-'}")
    console.print(f"[bold]Video codecs:[/]  {', '.join(caps.video_codecs) or '-'}")


def _reveal(what: str) -> None:
    config = bootstrap()
    bridge = make_bridge(config)
    session = AppSession(bridge, config=config)
    try:
        if what == "config":
            ok = asyncio.run(session.reveal_config_location())
        else:
            ok = asyncio.run(session.reveal_log_location())
    finally:
        bridge.close()
    if not ok:
        console.print(f"[red]Backend could not open the {what} folder.[/red]")
        raise typer.Exit(code=1)


@reveal_app.command("config")
def reveal_config():
    """Open the folder holding the persisted settings."""
    _reveal("config")


@reveal_app.command("logs")
def reveal_logs():
    """Open the backend log folder."""
    _reveal("log")
