"""Source map rewriter — makes a fetched map resolvable from the temp directory.

The rewritten map is what the local debugger reads next to the persisted
bundle, so every ``sources`` entry must resolve relative to the map's own
location and use forward slashes only (the debugger rejects backslashes on
every platform).

Rewrite steps (order of ``sources`` is preserved; it is the index space the
``mappings`` string refers to):
  1. Absolute source paths → relative to the temp directory.
  2. Backslashes → forward slashes.
  3. ``sourcesContent`` dropped; the debugger reads sources from disk.
  4. ``sourceRoot`` set to ``""``; paths are already fully resolved.
  5. ``file`` set to the local bundle's file name.

A map that is not valid JSON, or whose ``sources`` is not a list of strings,
is passed through untouched: debugging loses path fidelity but the import
still succeeds.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

# Keys modelled as fields; everything else is carried in SourceMapDocument.extra.
_KNOWN_KEYS: frozenset[str] = frozenset(
    ["version", "file", "sourceRoot", "sources", "sourcesContent", "names", "mappings"]
)


@dataclass
class SourceMapDocument:
    """Structured view of a standard (v3) source map.

    ``mappings`` is opaque and passed through unmodified. ``sources`` and
    ``sources_content`` are index-aligned while both are present. Unknown
    top-level keys (e.g. bundler extensions) are kept in *extra* and written
    back unchanged.
    """

    sources: list[str | None]
    version: Any = 3
    file: str = ""
    names: list[Any] = field(default_factory=list)
    mappings: Any = ""
    source_root: str | None = None
    sources_content: list[Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> SourceMapDocument:
        """Build a document from parsed JSON.

        Raises:
            ValueError: If *data* is not an object or ``sources`` is not a
                list of strings (``null`` entries are allowed).
        """
        if not isinstance(data, dict):
            raise ValueError(f"source map must be a JSON object, got {type(data).__name__}")
        sources = data.get("sources")
        if not isinstance(sources, list):
            raise ValueError("source map has no 'sources' list")
        if not all(s is None or isinstance(s, str) for s in sources):
            raise ValueError("source map 'sources' must contain only strings")

        return cls(
            sources=list(sources),
            version=data.get("version", 3),
            file=data.get("file", ""),
            names=data.get("names", []),
            mappings=data.get("mappings", ""),
            source_root=data.get("sourceRoot"),
            sources_content=data.get("sourcesContent"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"version": self.version, "file": self.file}
        if self.source_root is not None:
            out["sourceRoot"] = self.source_root
        out["sources"] = list(self.sources)
        if self.sources_content is not None:
            out["sourcesContent"] = list(self.sources_content)
        out["names"] = self.names
        out["mappings"] = self.mappings
        out.update(self.extra)
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class RewrittenMap:
    """The map parsed and rewritten; *text* is the serialised result."""

    document: SourceMapDocument
    text: str

    @property
    def rewritten(self) -> bool:
        return True


@dataclass(frozen=True)
class PassthroughMap:
    """The map could not be parsed; *text* is the original input, unchanged."""

    text: str
    reason: str

    @property
    def rewritten(self) -> bool:
        return False


RewriteResult = Union[RewrittenMap, PassthroughMap]


def rewrite_source_map(
    text: str, generated_file: str, bundle_dir: Path | str
) -> RewriteResult:
    """Rewrite the map *text* for a bundle stored as *generated_file* in *bundle_dir*.

    Args:
        text: Raw source map as fetched.
        generated_file: Local file name of the bundle the map describes.
        bundle_dir: Directory both the bundle and the map are written to.

    Returns:
        RewrittenMap on success, PassthroughMap (original text) otherwise.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        logger.debug("Source map is not valid JSON, storing it unchanged: %s", exc)
        return PassthroughMap(text=text, reason=f"invalid JSON: {exc}")

    try:
        document = SourceMapDocument.from_dict(data)
    except ValueError as exc:
        logger.debug("Source map has an unexpected shape, storing it unchanged: %s", exc)
        return PassthroughMap(text=text, reason=str(exc))

    document.sources = [relative_source(s, bundle_dir) for s in document.sources]
    document.sources_content = None
    document.source_root = ""
    document.file = generated_file
    return RewrittenMap(document=document, text=document.to_json())


def relative_source(source: str | None, bundle_dir: Path | str) -> str | None:
    """Return *source* relative to *bundle_dir*, using forward slashes only.

    Relative entries (including ones rewritten earlier) and URLs such as
    ``webpack:///src/app.js`` are only slash-normalised.
    """
    if source is None:
        return None
    if os.path.isabs(source):
        try:
            source = os.path.relpath(source, os.fspath(bundle_dir))
        except ValueError:
            # Different drive on Windows; no relative form exists.
            pass
    return source.replace("\\", "/")
