"""Source map locator — finds the ``//# sourceMappingURL=`` directive.

Only a directive that starts a line counts; a trailing comment elsewhere on a
line is not a directive. The first match wins and later ones are ignored.
"""

from __future__ import annotations

import re
import urllib.parse

# Shared with the patcher so both agree on what "the directive" is.
DIRECTIVE_RE: re.Pattern[str] = re.compile(r"^//# sourceMappingURL=(.*)$", re.MULTILINE)


def find_directive(body: str) -> str | None:
    """Return the raw reference of the first directive in *body*, or None."""
    match = DIRECTIVE_RE.search(body)
    if match is None:
        return None
    # (.*) stops before "\n" but keeps a "\r" from CRLF line endings.
    return match.group(1).rstrip("\r")


def locate_source_map(script_url: str, body: str) -> str | None:
    """Resolve the directive in *body* to an absolute source map URL.

    The reference may be relative. Its own path, query and fragment are kept
    (a bare path is taken from the server root); scheme and host always come
    from *script_url*, even when the reference names its own.

    Example:
        script_url = "http://localhost:8081/index.ios.bundle?platform=ios"
        directive  = "//# sourceMappingURL=/index.ios.map?platform=ios"
        result     = "http://localhost:8081/index.ios.map?platform=ios"

    Returns:
        The absolute URL, or None when *body* carries no directive or the
        directive has an empty value.
    """
    reference = find_directive(body)
    if reference is None or not reference.strip():
        return None

    script = urllib.parse.urlsplit(script_url)
    ref = urllib.parse.urlsplit(reference.strip())
    path = ref.path if ref.path.startswith("/") else "/" + ref.path

    return urllib.parse.urlunsplit(
        (script.scheme, script.netloc, path, ref.query, ref.fragment)
    )
