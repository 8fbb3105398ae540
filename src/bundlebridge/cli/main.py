"""bundlebridge CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from bundlebridge.cli.import_cmd import import_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("bundlebridge")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bundlebridge {_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


app = typer.Typer(
    name="bundlebridge",
    help=(
        "bundlebridge — import dev-server bundles for local debugging.\n\n"
        "  bundlebridge import URL   Fetch a bundle + source map, store them, run the bundle."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log fetches, writes and cleanup."),
    ] = False,
) -> None:
    """bundlebridge — import dev-server bundles for local debugging."""
    _configure_logging(verbose)


app.command("import")(import_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed bundlebridge version."""
    typer.echo(f"bundlebridge {_version()}")


if __name__ == "__main__":
    app()
