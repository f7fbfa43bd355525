"""Root Typer app with global options."""

from __future__ import annotations

from typing import Optional

import typer

app = typer.Typer(
    name="photostats",
    help="Incremental photo library statistics.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        from photostats import __version__

        typer.echo(f"photostats {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version."
    ),
) -> None:
    """photostats: count what is in your photo library."""


# Import and register commands
from photostats.cli.scan import scan  # noqa: E402
from photostats.cli.report import show  # noqa: E402

app.command()(scan)
app.command()(show)
