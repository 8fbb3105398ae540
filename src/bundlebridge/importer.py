"""Import orchestrator — fetch a bundle, store it for the debugger, run it.

Pipeline (each step starts only after the previous one's I/O completed):
  1. Fetch the bundle body.
  2. Look for a ``//# sourceMappingURL=`` directive.
  3. No directive: store the body unmodified, run it.
  4. Directive: fetch + rewrite + store the map, point the directive at the
     stored map's file name, store the patched body, run it.

Both artifacts go to the same directory so the relative paths written into
the map resolve. Fetch and write failures propagate (no rollback of earlier
writes); errors raised by the script itself propagate unwrapped.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from bundlebridge.config import BridgeConfig
from bundlebridge.executor import Executor, executor_from_config
from bundlebridge.fetch.http import HttpFetcher
from bundlebridge.models import ImportResult, ScriptBundle, TempArtifact
from bundlebridge.sourcemap.locator import locate_source_map
from bundlebridge.sourcemap.patcher import patch_directive
from bundlebridge.sourcemap.rewriter import PassthroughMap, rewrite_source_map
from bundlebridge.store.temp_store import CleanupRegistry, TempStore

logger = logging.getLogger(__name__)


class ScriptImporter:
    """Imports remotely served bundles into *project_root* for local debugging.

    Args:
        project_root: Workspace root; artifacts go to ``config.store.directory``
            below it.
        config: Loaded configuration (defaults when omitted).
        fetcher: Transport with ``fetch_async(url) -> str``.
        store: Temp store; built from *config* and *registry* when omitted.
        executor: Script engine; chosen by ``config.executor`` when omitted.
        registry: Cleanup registry for the default store (process-wide
            registry when omitted).
    """

    def __init__(
        self,
        project_root: Path | str,
        config: BridgeConfig | None = None,
        *,
        fetcher: HttpFetcher | None = None,
        store: TempStore | None = None,
        executor: Executor | None = None,
        registry: CleanupRegistry | None = None,
    ) -> None:
        cfg = config if config is not None else BridgeConfig()
        self.project_root = Path(project_root).resolve()
        self.fetcher = fetcher if fetcher is not None else HttpFetcher(cfg.fetch)
        self.store = (
            store
            if store is not None
            else TempStore(self.project_root / cfg.store.directory, registry)
        )
        self.executor = executor if executor is not None else executor_from_config(cfg.executor)

    @property
    def bundle_dir(self) -> Path:
        return self.store.directory

    async def import_script(self, script_url: str) -> ImportResult:
        """Fetch, store, and run the bundle at *script_url*.

        Raises:
            ValueError: If *script_url* (or the source map URL it names) has
                no file name, or *script_url* is not an http(s) URL.
            FetchError: If the bundle or its source map cannot be fetched.
            PersistError: If an artifact cannot be written.
        """
        script_path = self.check_url(script_url)
        body = await self.fetcher.fetch_async(script_url)
        bundle = ScriptBundle(url=script_url, body=body)

        source_map_url = locate_source_map(bundle.url, bundle.body)
        if source_map_url is None:
            logger.debug("No source map directive in %s", bundle.url)
            script = await self.store.persist_async(script_path, bundle.body)
            self._run(script)
            return ImportResult(script=script)

        source_map, rewritten = await self._write_source_map(source_map_url, script_path)
        patched = patch_directive(bundle.body, source_map_url, source_map.path.name)
        script = await self.store.persist_async(script_path, patched)
        self._run(script)
        return ImportResult(
            script=script,
            source_map=source_map,
            source_map_url=source_map_url,
            map_rewritten=rewritten,
        )

    def check_url(self, script_url: str) -> Path:
        """Validate *script_url* and return the local path its bundle will use.

        Raises:
            ValueError: If the scheme is not http(s) or the path has no file name.
        """
        self.fetcher.validate_url(script_url)
        return self.store.path_for(script_url)

    def run(self, script_url: str) -> ImportResult:
        """Blocking wrapper around ``import_script``."""
        return asyncio.run(self.import_script(script_url))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _write_source_map(
        self, source_map_url: str, script_path: Path
    ) -> tuple[TempArtifact, bool]:
        """Fetch, rewrite, and store the map. Returns (artifact, rewritten).

        A map whose URL ends in the same file name as the bundle is stored as
        ``<bundle name>.map`` so the bundle does not overwrite it.
        """
        map_path = self.store.path_for(source_map_url)
        if map_path == script_path:
            map_path = script_path.with_name(script_path.name + ".map")
        raw = await self.fetcher.fetch_async(source_map_url)
        result = rewrite_source_map(raw, script_path.name, self.bundle_dir)
        if isinstance(result, PassthroughMap):
            logger.info("Storing source map %s unchanged (%s)", source_map_url, result.reason)
        artifact = await self.store.persist_async(map_path, result.text)
        return artifact, result.rewritten

    def _run(self, script: TempArtifact) -> None:
        logger.debug("Running %s", script.path)
        self.executor.run(script.content, str(script.path))
