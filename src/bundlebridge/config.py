"""bundlebridge configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (BUNDLEBRIDGE_TEMP_DIR, BUNDLEBRIDGE_ENGINE,
                             BUNDLEBRIDGE_TIMEOUT)
  3. Per-project bundlebridge.yaml  (in the project root)
  4. Global ~/.bundlebridge/config.yaml
  5. Hardcoded defaults

store.directory must stay inside the project root: the debugger only resolves
source maps for files inside the workspace.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".bundlebridge"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "bundlebridge.yaml"

_KNOWN_SECTIONS: frozenset[str] = frozenset(["store", "fetch", "executor"])

ENGINES: frozenset[str] = frozenset(["python", "node"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StoreCfg:
    """Artifact location (bundlebridge.yaml: store:).

    Attributes:
        directory: Directory, relative to the project root, that bundles and
            source maps are written to.
    """

    directory: str = ".vscode"


@dataclass
class FetchCfg:
    """HTTP transport limits (bundlebridge.yaml: fetch:)."""

    timeout: float = 30.0  # seconds, connect + read
    max_redirects: int = 3
    max_bytes: int = 50 * 1024 * 1024
    user_agent: str = "bundlebridge/0.1"


@dataclass
class ExecutorCfg:
    """Script engine selection (bundlebridge.yaml: executor:)."""

    engine: str = "python"  # python | node
    node_binary: str = "node"


@dataclass
class BridgeConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    store: StoreCfg = field(default_factory=StoreCfg)
    fetch: FetchCfg = field(default_factory=FetchCfg)
    executor: ExecutorCfg = field(default_factory=ExecutorCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def validate_store_directory(directory: str) -> None:
    """Raise ConfigError unless *directory* is a relative path inside the project."""
    path = PurePath(directory)
    if not directory.strip() or path.is_absolute() or directory.startswith(("/", "\\")):
        raise ConfigError(
            f"store.directory must be a path relative to the project root: '{directory}'\n"
            "  Example: store.directory: .vscode"
        )
    if ".." in path.parts:
        raise ConfigError(
            f"store.directory must stay inside the project root: '{directory}'\n"
            "  Remove '..' segments from the path."
        )


def validate_engine(engine: str) -> None:
    if engine not in ENGINES:
        raise ConfigError(
            f"Unknown executor.engine '{engine}'. "
            f"Use one of: {', '.join(sorted(ENGINES))}"
        )


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


def _cfg_from_dict(data: dict[str, Any]) -> BridgeConfig:
    """Build a *BridgeConfig* from a merged raw YAML dict."""
    cfg = BridgeConfig()

    try:
        if "store" in data:
            s = data["store"] or {}
            cfg.store = StoreCfg(directory=str(s.get("directory", cfg.store.directory)))

        if "fetch" in data:
            f = data["fetch"] or {}
            cfg.fetch = FetchCfg(
                timeout=float(f.get("timeout", cfg.fetch.timeout)),
                max_redirects=int(f.get("max_redirects", cfg.fetch.max_redirects)),
                max_bytes=int(f.get("max_bytes", cfg.fetch.max_bytes)),
                user_agent=str(f.get("user_agent", cfg.fetch.user_agent)),
            )

        if "executor" in data:
            e = data["executor"] or {}
            cfg.executor = ExecutorCfg(
                engine=str(e.get("engine", cfg.executor.engine)),
                node_binary=str(e.get("node_binary", cfg.executor.node_binary)),
            )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: BridgeConfig) -> BridgeConfig:
    """Apply BUNDLEBRIDGE_* environment variable overrides (layer 2)."""
    if directory := os.environ.get("BUNDLEBRIDGE_TEMP_DIR"):
        cfg.store.directory = directory
    if engine := os.environ.get("BUNDLEBRIDGE_ENGINE"):
        cfg.executor.engine = engine
    if timeout := os.environ.get("BUNDLEBRIDGE_TIMEOUT"):
        try:
            cfg.fetch.timeout = float(timeout)
        except ValueError as exc:
            raise ConfigError(f"BUNDLEBRIDGE_TIMEOUT must be a number: '{timeout}'") from exc
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> BridgeConfig:
    """Load and return a merged *BridgeConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *bundlebridge.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a value has the wrong type, ``store.directory`` leaves
            the project root, or ``executor.engine`` is unknown.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    validate_store_directory(cfg.store.directory)
    validate_engine(cfg.executor.engine)
    return cfg
