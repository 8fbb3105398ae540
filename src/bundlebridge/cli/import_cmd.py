"""bundlebridge import — fetch a bundle, store it for the debugger, run it.

Artifacts are written to <project-root>/<store.directory> (default .vscode)
and removed when this process exits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from bundlebridge.cli.errors import (
    err_bad_url,
    err_config,
    err_fetch_failed,
    err_script_failed,
    err_write_failed,
)
from bundlebridge.config import ConfigError, load_config, validate_engine
from bundlebridge.errors import FetchError, PersistError, ScriptExecutionError
from bundlebridge.importer import ScriptImporter

console = Console()


def import_cmd(
    url: Annotated[str, typer.Argument(help="Bundle URL, e.g. http://localhost:8081/index.bundle")],
    project_root: Annotated[
        Path,
        typer.Option("--project-root", "-p", help="Workspace root. Defaults to current directory."),
    ] = Path("."),
    engine: Annotated[
        str | None,
        typer.Option("--engine", "-e", help="Script engine: python | node (overrides config)."),
    ] = None,
) -> None:
    """Import a remotely served bundle and run it under its local file name."""
    try:
        cfg = load_config(project_dir=project_root)
        if engine:
            validate_engine(engine)
            cfg.executor.engine = engine
    except ConfigError as exc:
        console.print(err_config(exc))
        raise typer.Exit(1)

    importer = ScriptImporter(project_root, cfg)
    try:
        script_path = importer.check_url(url)
    except ValueError as exc:
        console.print(err_bad_url(url, exc))
        raise typer.Exit(1)

    # Errors raised by the script itself are not caught here.
    try:
        result = importer.run(url)
    except FetchError as exc:
        console.print(err_fetch_failed(exc.url, exc.__cause__ or exc))
        raise typer.Exit(1)
    except PersistError as exc:
        console.print(err_write_failed(exc.path, exc.__cause__ or exc))
        raise typer.Exit(1)
    except ScriptExecutionError as exc:
        console.print(err_script_failed(script_path, exc))
        raise typer.Exit(1)

    console.print(f"  [green]✓[/] Script stored at {escape(str(result.script.path))}")
    if result.source_map is not None:
        note = "" if result.map_rewritten else " [yellow](unparseable — stored unchanged)[/]"
        stored = escape(str(result.source_map.path))
        console.print(f"  [green]✓[/] Source map stored at {stored}{note}")
    else:
        console.print("  [dim]No source map directive found[/]")
