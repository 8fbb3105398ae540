"""Domain models for the import pipeline."""

from __future__ import annotations

import posixpath
import urllib.parse
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ScriptBundle:
    url: str
    body: str


@dataclass(frozen=True)
class TempArtifact:
    path: Path
    content: str


@dataclass
class ImportResult:
    script: TempArtifact
    source_map: TempArtifact | None = None
    source_map_url: str | None = None
    map_rewritten: bool = False  # False when the map was passed through as-is


def url_file_name(url: str) -> str:
    """Return the final segment of *url*'s path, without query or fragment.

    Raises:
        ValueError: If the path has no final segment (e.g. ``http://host/``).
    """
    path = urllib.parse.urlsplit(url).path
    name = posixpath.basename(urllib.parse.unquote(path))
    if not name or name in (".", ".."):
        raise ValueError(f"URL has no file name in its path: {url}")
    return name
