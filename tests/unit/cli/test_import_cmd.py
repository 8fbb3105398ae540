"""Tests for the bundlebridge import command."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from bundlebridge import config as config_module
from bundlebridge.cli.main import app
from bundlebridge.errors import FetchError
from bundlebridge.fetch.http import HttpFetcher
from bundlebridge.store import temp_store
from bundlebridge.store.temp_store import CleanupRegistry

runner = CliRunner()

_URL = "http://localhost:8081/index.bundle?platform=ios"
_MAP_URL = "http://localhost:8081/index.map?platform=ios"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    """Private cleanup registry, no global config, no env overrides."""
    registry = CleanupRegistry()
    monkeypatch.setattr(temp_store, "_default_registry", registry)
    monkeypatch.setattr(config_module, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    for var in ("BUNDLEBRIDGE_TEMP_DIR", "BUNDLEBRIDGE_ENGINE", "BUNDLEBRIDGE_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    return registry


def _serve(responses: dict[str, str]):
    """Patch HttpFetcher.fetch to serve *responses*."""

    def fake_fetch(self, url):
        if url not in responses:
            raise FetchError(url, "Connection refused")
        return responses[url]

    return patch.object(HttpFetcher, "fetch", fake_fetch)


def _invoke(tmp_path: Path, *extra: str, url: str = _URL):
    return runner.invoke(app, ["import", url, "--project-root", str(tmp_path), *extra])


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


def test_import_without_map(tmp_path: Path) -> None:
    with _serve({_URL: "value = 1\n"}):
        result = _invoke(tmp_path)
    assert result.exit_code == 0, result.output
    assert "Script stored at" in result.output
    assert "No source map" in result.output
    assert (tmp_path / ".vscode" / "index.bundle").read_text() == "value = 1\n"


def test_import_with_map(tmp_path: Path) -> None:
    body = 'value = 1\n"""\n//# sourceMappingURL=/index.map?platform=ios\n"""\n'
    source_map = json.dumps({"version": 3, "sources": [str(tmp_path / "a.py")], "names": [], "mappings": ""})
    with _serve({_URL: body, _MAP_URL: source_map}):
        result = _invoke(tmp_path)
    assert result.exit_code == 0, result.output
    assert "Source map stored at" in result.output
    stored = json.loads((tmp_path / ".vscode" / "index.map").read_text())
    assert stored["file"] == "index.bundle"


def test_import_with_unparseable_map(tmp_path: Path) -> None:
    body = 'value = 1\n"""\n//# sourceMappingURL=/index.map?platform=ios\n"""\n'
    with _serve({_URL: body, _MAP_URL: "not json"}):
        result = _invoke(tmp_path)
    assert result.exit_code == 0, result.output
    assert "unparseable" in result.output


def test_import_registers_cleanup(tmp_path: Path, _isolated) -> None:
    with _serve({_URL: "value = 1\n"}):
        _invoke(tmp_path)
    assert [p.name for p in _isolated.pending()] == ["index.bundle"]


def test_import_project_store_directory(tmp_path: Path) -> None:
    (tmp_path / "bundlebridge.yaml").write_text("store:\n  directory: .debug\n")
    with _serve({_URL: "value = 1\n"}):
        result = _invoke(tmp_path)
    assert result.exit_code == 0, result.output
    assert (tmp_path / ".debug" / "index.bundle").exists()


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_import_fetch_failure(tmp_path: Path) -> None:
    with _serve({}):
        result = _invoke(tmp_path)
    assert result.exit_code == 1
    assert "Could not fetch" in result.output
    assert "dev server" in result.output


def test_import_bad_url(tmp_path: Path) -> None:
    result = _invoke(tmp_path, url="http://localhost:8081/")
    assert result.exit_code == 1
    assert "Cannot import" in result.output


def test_import_bad_scheme(tmp_path: Path) -> None:
    result = _invoke(tmp_path, url="file:///tmp/index.bundle")
    assert result.exit_code == 1
    assert "Cannot import" in result.output


def test_import_unknown_engine(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "--engine", "ruby")
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_import_write_failure(tmp_path: Path) -> None:
    (tmp_path / ".vscode").write_text("not a directory")
    with _serve({_URL: "value = 1\n"}):
        result = _invoke(tmp_path)
    assert result.exit_code == 1
    assert "Could not write" in result.output


def test_import_script_error_not_swallowed(tmp_path: Path) -> None:
    with _serve({_URL: "1 / 0\n"}):
        result = _invoke(tmp_path)
    assert result.exit_code == 1
    assert isinstance(result.exception, ZeroDivisionError)


def test_import_node_engine_failure(tmp_path: Path) -> None:
    with _serve({_URL: "process.exit(3);\n"}):
        with patch("bundlebridge.executor.subprocess.run", return_value=MagicMock(returncode=3)):
            result = _invoke(tmp_path, "--engine", "node")
    assert result.exit_code == 1
    assert "failed" in result.output


def test_import_node_engine_success(tmp_path: Path) -> None:
    with _serve({_URL: "console.log('hi');\n"}):
        with patch("bundlebridge.executor.subprocess.run", return_value=MagicMock(returncode=0)) as run:
            result = _invoke(tmp_path, "--engine", "node")
    assert result.exit_code == 0, result.output
    args = run.call_args.args[0]
    assert args[0] == "node"
    assert Path(args[-1]).name == "index.bundle"


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("bundlebridge ")


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "bundlebridge" in result.output
