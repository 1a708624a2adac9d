from __future__ import annotations

import typer

from tagrel import __version__
from tagrel.cli.commands.run_cmd import run
from tagrel.cli.commands.steps import build, formula, package, publish, resolve

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Tag-triggered release pipeline.",
)


# Commands
app.command()(run)
app.command()(resolve)
app.command()(build)
app.command()(package)
app.command()(publish)
app.command()(formula)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
