"""CLI app definition and command registration."""

from typing import Annotated

import typer

from compliance_metrics.utils import console
from compliance_metrics.version import get_version


def _version_callback(value: bool):
    if value:
        console.print(get_version())
        raise typer.Exit()


app = typer.Typer(
    help="Heuristic code quality compliance metrics for JavaScript/TypeScript repositories.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    """Heuristic code quality compliance metrics."""


# Register commands from submodules
from compliance_metrics import metrics as _metrics_mod

_metrics_mod.register(app)
