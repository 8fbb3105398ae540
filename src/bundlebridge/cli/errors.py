"""bundlebridge rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from bundlebridge.cli.errors import err_fetch_failed
    console.print(err_fetch_failed(url, reason))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape


def err_fetch_failed(url: str, reason: object) -> str:
    """The bundle or its source map could not be retrieved."""
    return (
        f"[red]Error:[/] Could not fetch '{escape(str(url))}'.\n"
        f"  Cause: {escape(str(reason))}\n"
        "  Check that the dev server is running, then re-run the import."
    )


def err_write_failed(path: object, reason: object) -> str:
    """An artifact could not be written to the temp directory."""
    return (
        f"[red]Error:[/] Could not write '{escape(str(path))}'.\n"
        f"  Cause: {escape(str(reason))}\n"
        "  Check permissions on the project directory, or set:  "
        "export BUNDLEBRIDGE_TEMP_DIR=<writable relative dir>"
    )


def err_bad_url(url: str, reason: object) -> str:
    """The bundle URL cannot be imported."""
    return (
        f"[red]Error:[/] Cannot import '{escape(str(url))}': {escape(str(reason))}\n"
        "  Use a full http:// or https:// URL ending in the bundle file name,\n"
        "  e.g. http://localhost:8081/index.ios.bundle?platform=ios"
    )


def err_config(reason: object) -> str:
    """Config file or environment holds an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {escape(str(reason))}\n"
        "  Fix bundlebridge.yaml (or ~/.bundlebridge/config.yaml) and re-run."
    )


def err_script_failed(path: object, reason: object) -> str:
    """The external engine reported a failure while running the bundle."""
    return (
        f"[red]Error:[/] Script '{escape(str(path))}' failed.\n"
        f"  {escape(str(reason))}\n"
        "  Use:  --engine python  to run it in-process, or install Node.js and re-run."
    )
