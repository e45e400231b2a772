import typer
from rich import print

from ._common import bootstrap

gui_app = typer.Typer(no_args_is_help=False, invoke_without_command=True)


@gui_app.callback()
def _entry(ctx: typer.Context):
    """Launch the desktop window when no subcommand is given."""
    if ctx.invoked_subcommand is None:
        _launch()


@gui_app.command("run")
def run():
    """Explicitly launch the desktop window."""
    _launch()


def _launch():
    config = bootstrap()
    try:
        from mediadesk.ui.main_window import launch_gui
    except ImportError as e:
        print(f"[red]Cannot load the desktop UI: {e}[/red]")
        raise typer.Exit(code=1)
    print(f"[bold]MediaDesk[/] launching, backend at {config.backend_url}")
    raise typer.Exit(code=launch_gui(config))
