"""Source map handling — directive lookup, map rewriting, body patching."""

from bundlebridge.sourcemap.locator import DIRECTIVE_RE, find_directive, locate_source_map
from bundlebridge.sourcemap.patcher import patch_directive
from bundlebridge.sourcemap.rewriter import (
    PassthroughMap,
    RewriteResult,
    RewrittenMap,
    SourceMapDocument,
    rewrite_source_map,
)

__all__ = [
    "DIRECTIVE_RE",
    "PassthroughMap",
    "RewriteResult",
    "RewrittenMap",
    "SourceMapDocument",
    "find_directive",
    "locate_source_map",
    "patch_directive",
    "rewrite_source_map",
]
