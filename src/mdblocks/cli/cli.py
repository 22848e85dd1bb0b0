"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated, Optional

import typer

from mdblocks.cli.commands import (
    _fail,
    _settings,
    build_cmd,
    check_cmd,
    editor_load_cmd,
    editor_save_cmd,
    extract_cmd,
    render_cmd,
)
from mdblocks.config import LOG_LEVELS, configure_logging


app = typer.Typer(name="mdblocks", no_args_is_help=True, help="Markdown <-> block model transcoding")


@app.callback()
def main(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level; defaults to config")] = None,
    ):
    """Markdown <-> block model transcoding."""
    level = (log_level or _settings().log_level).upper()
    if level not in LOG_LEVELS:
        _fail(f"Unknown log level: {log_level}")
    configure_logging(level)


app.command(name="extract")(extract_cmd)
app.command(name="render")(render_cmd)
app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="editor-load")(editor_load_cmd)
app.command(name="editor-save")(editor_save_cmd)
