"""Temp store — persists artifacts for the debugger and removes them at exit.

Files are written under one fixed directory inside the project (the debugger
only resolves source maps for files inside the workspace). They must outlive
the import call that wrote them, so deletion is tied to process exit rather
than to the caller:

- Every successful write registers its exact path with a CleanupRegistry.
- Registering a path twice is a no-op (concurrent imports may race on the
  same file name; last write wins).
- ``CleanupRegistry.drain()`` deletes each pending path once. Files that are
  already gone and OS errors are logged at INFO and never raised, so exit is
  never blocked.
- ``CleanupRegistry.install()`` hooks ``drain`` into ``atexit`` exactly once.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import threading
from pathlib import Path

from bundlebridge.errors import PersistError
from bundlebridge.models import TempArtifact, url_file_name

logger = logging.getLogger(__name__)


class CleanupRegistry:
    """Thread-safe set of paths to delete when the process exits."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[Path, bool] = {}
        self._installed = False

    def register(self, path: Path | str) -> bool:
        """Schedule *path* for deletion. Returns False if already scheduled."""
        key = Path(path)
        with self._lock:
            if self._pending.get(key):
                return False
            self._pending[key] = True
            return True

    def pending(self) -> list[Path]:
        with self._lock:
            return [p for p, flag in self._pending.items() if flag]

    def drain(self) -> list[Path]:
        """Delete every pending path once. Returns the paths actually removed."""
        with self._lock:
            paths = [p for p, flag in self._pending.items() if flag]
            for p in paths:
                self._pending[p] = False

        removed: list[Path] = []
        for path in paths:
            try:
                os.unlink(path)
            except FileNotFoundError:
                logger.info("Temporary file already removed: %s", path)
            except OSError as exc:
                logger.info("Could not remove temporary file %s: %s", path, exc)
            else:
                logger.info("Successfully cleaned temporary file: %s", path)
                removed.append(path)
        return removed

    def install(self) -> None:
        """Run ``drain`` at interpreter exit (idempotent)."""
        with self._lock:
            if self._installed:
                return
            self._installed = True
        atexit.register(self.drain)


_default_registry: CleanupRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> CleanupRegistry:
    """Process-wide registry, hooked into ``atexit`` on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = CleanupRegistry()
            _default_registry.install()
        return _default_registry


class TempStore:
    """Writes artifacts under *directory* and schedules their removal.

    Args:
        directory: Fixed directory for all artifacts (created on first write).
        registry: Cleanup registry; defaults to the process-wide one.
    """

    def __init__(self, directory: Path | str, registry: CleanupRegistry | None = None) -> None:
        self.directory = Path(directory).resolve()
        self.registry = registry if registry is not None else default_registry()

    def path_for(self, url: str) -> Path:
        """Local path for the artifact served at *url* (final path segment)."""
        return self.directory / url_file_name(url)

    def persist(self, path: Path | str, content: str) -> TempArtifact:
        """Write *content* to *path* (overwriting) and register its cleanup.

        Raises:
            PersistError: If the directory or file cannot be written. Nothing
                is registered for cleanup in that case.
        """
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the bundle's own line endings byte-for-byte.
            f = open(target, "w", encoding="utf-8", newline="")
        except OSError as exc:
            raise PersistError(target, exc) from exc

        try:
            with f:
                f.write(content)
        except OSError as exc:
            # Drop the truncated file; nothing usable was written.
            target.unlink(missing_ok=True)
            raise PersistError(target, exc) from exc

        self.registry.register(target)
        logger.debug("Stored %d characters at %s", len(content), target)
        return TempArtifact(path=target, content=content)

    async def persist_async(self, path: Path | str, content: str) -> TempArtifact:
        """``persist`` without blocking the event loop."""
        return await asyncio.to_thread(self.persist, path, content)
