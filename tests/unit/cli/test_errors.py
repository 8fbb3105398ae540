"""Tests for bundlebridge rich error messages."""

from __future__ import annotations

import pytest

from bundlebridge.cli.errors import (
    err_bad_url,
    err_config,
    err_fetch_failed,
    err_script_failed,
    err_write_failed,
)


def _has_action(msg: str) -> bool:
    """Every error must contain an actionable instruction."""
    lower = msg.lower()
    return any(kw in lower for kw in ["check ", "use", "fix ", "set:", "export ", "install"])


@pytest.mark.parametrize(
    "msg",
    [
        err_fetch_failed("http://localhost:8081/index.bundle", "Connection refused"),
        err_write_failed("/proj/.vscode/index.bundle", "Permission denied"),
        err_bad_url("http://localhost:8081/", "URL has no file name"),
        err_config("Unknown executor.engine 'ruby'"),
        err_script_failed("/proj/.vscode/index.bundle", "exited with status 1"),
    ],
)
def test_every_error_has_cause_and_action(msg: str) -> None:
    assert msg.startswith("[red]Error:[/]")
    assert _has_action(msg)


def test_fetch_failed_contains_url_and_reason() -> None:
    msg = err_fetch_failed("http://localhost:8081/index.bundle", "Connection refused")
    assert "http://localhost:8081/index.bundle" in msg
    assert "Connection refused" in msg


def test_write_failed_mentions_env_override() -> None:
    msg = err_write_failed("/proj/.vscode/index.bundle", "Permission denied")
    assert "BUNDLEBRIDGE_TEMP_DIR" in msg


def test_bad_url_shows_example() -> None:
    assert "http://localhost:8081/index.ios.bundle" in err_bad_url("x", "bad")


def test_script_failed_suggests_engine() -> None:
    assert "--engine python" in err_script_failed("/p/a.bundle", "exited")


def test_url_and_path_markup_is_escaped() -> None:
    assert "\\[red]" in err_fetch_failed("http://localhost:8081/[red]x.bundle", "refused")
    assert "\\[bold]" in err_write_failed("/proj/[bold]/a.bundle", "denied")
    assert "\\[red]" in err_bad_url("http://h/[red]", "bad")
    assert "\\[bold]" in err_script_failed("/proj/[bold]/a.bundle", "exited")
