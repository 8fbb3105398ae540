"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from bundlebridge.store.temp_store import CleanupRegistry, TempStore


@pytest.fixture
def registry():
    """Private cleanup registry — never hooked into atexit."""
    return CleanupRegistry()


@pytest.fixture
def store(tmp_path, registry):
    """TempStore writing under tmp_path/.vscode with a private registry."""
    return TempStore(tmp_path / ".vscode", registry)
