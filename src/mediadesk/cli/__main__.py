from typing import Optional

import typer

from ._common import set_log_level
from .gui import gui_app
from .process import cancel, process_app
from .settings import reveal_app, show_config

app = typer.Typer(pretty_exceptions_enable=False, add_completion=False, no_args_is_help=True)


@app.callback()
def _main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
):
    """MediaDesk: batch image and video processing client."""
    set_log_level(log_level)


app.add_typer(gui_app, name="gui", help="Launch the desktop window")
app.add_typer(process_app, name="process", help="Start a processing job")
app.add_typer(reveal_app, name="reveal", help="Open config or log folders")
app.command("config")(show_config)
app.command("cancel")(cancel)

if __name__ == "__main__":
    app()
