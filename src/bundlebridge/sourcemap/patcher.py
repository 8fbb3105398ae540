"""Script body patcher — points the directive at the locally stored map."""

from __future__ import annotations

from bundlebridge.models import url_file_name
from bundlebridge.sourcemap.locator import DIRECTIVE_RE


def patch_directive(body: str, source_map_url: str, file_name: str | None = None) -> str:
    """Replace the first directive's value in *body* with the map's base name.

    Path and query of *source_map_url* are dropped, so
    ``http://host/index.ios.map?platform=ios`` becomes ``index.ios.map``.
    *file_name*, when given, is written instead (the map was stored under a
    different local name). Everything outside the matched directive is left
    byte-identical, and a body without a directive is returned unchanged.
    """
    match = DIRECTIVE_RE.search(body)
    if match is None:
        return body

    start, end = match.span(1)
    # Keep a CRLF line ending intact.
    if body[start:end].endswith("\r"):
        end -= 1
    name = file_name if file_name is not None else url_file_name(source_map_url)
    return body[:start] + name + body[end:]
