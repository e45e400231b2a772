"""``mediadesk process images|videos`` and ``mediadesk cancel``.

Jobs are started with the persisted settings, exactly as the desktop form
would submit them after loading.  Progress is rendered with rich while the
job runs; Ctrl+C asks the backend to cancel.
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from mediadesk.config.client_config import ClientConfig
from mediadesk.core.job_controller import JobKind
from mediadesk.core.progress_monitor import ProgressView
from mediadesk.core.session import AppSession
from mediadesk.errors import InvalidSettings
from mediadesk.formatting import describe_progress
from mediadesk.rpc.bridge import Operation

from ._common import bootstrap, make_bridge

console = Console()
log = logging.getLogger("mediadesk.cli")
process_app = typer.Typer(no_args_is_help=True, help="Start a processing job with the stored settings")


async def _run_job(session: AppSession, kind: JobKind) -> bool:
    if not await session.start():
        console.print(f"[red]Backend at {session.config.backend_url} is unavailable.[/red]")
        return False
    view = session.open_view(kind)
    with Progress(
        TextColumn("[bold]{task.fields[status]}"),
        BarColumn(),
        TextColumn("{task.percentage:>5.1f}%"),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    ) as progress:
        task_id = progress.add_task(kind.value, total=100.0, status="Starting")

        def on_view(pv: ProgressView) -> None:
            if pv.snapshot is None:
                return
            progress.update(
                task_id,
                completed=min(pv.snapshot.percentage, 100.0),
                status=pv.snapshot.status or "Processing",
            )
            log.debug(describe_progress(pv.snapshot))

        view.monitor.add_listener(on_view)
        try:
            ok = await view.submit()
        except InvalidSettings as exc:
            progress.stop()
            console.print("[red]Stored settings are not valid:[/red]")
            for field, message in exc.errors.items():
                console.print(f"  [bold]{field}[/]: {message}")
            return False
        finally:
            view.close()
    if not ok:
        console.print(f"[red]{view.jobs.last_error}[/red]")
    return ok


async def _cancel(config: ClientConfig) -> bool:
    bridge = make_bridge(config)
    try:
        await bridge.call(Operation.CANCEL_PROCESS)
        return True
    except Exception as exc:
        log.warning("Failed to cancel processing: %s", exc)
        return False
    finally:
        bridge.close()


def _process(kind: JobKind) -> None:
    config = bootstrap()
    bridge = make_bridge(config)
    session = AppSession(bridge, config=config)
    try:
        ok = asyncio.run(_run_job(session, kind))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, asking the backend to cancel…[/yellow]")
        asyncio.run(_cancel(config))
        raise typer.Exit(code=130)
    finally:
        session.close()
        bridge.close()
    if not ok:
        raise typer.Exit(code=1)
    console.print(f"[green]{kind.value.capitalize()} processing finished.[/green]")


@process_app.command("images")
def process_images():
    """Process images with the stored image settings."""
    _process(JobKind.IMAGE)


@process_app.command("videos")
def process_videos():
    """Process videos with the stored video settings."""
    _process(JobKind.VIDEO)


def cancel():
    """Ask the backend to cancel the running job."""
    config = bootstrap()
    if not asyncio.run(_cancel(config)):
        console.print("[red]Backend did not accept the cancel request.[/red]")
        raise typer.Exit(code=1)
    console.print("Cancel requested.")
