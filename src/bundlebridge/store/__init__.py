"""Artifact storage with process-exit cleanup."""

from bundlebridge.store.temp_store import CleanupRegistry, TempStore, default_registry

__all__ = ["CleanupRegistry", "TempStore", "default_registry"]
