"""HTTP fetcher for bundles and source maps.

Requirements:
- Allowed URL schemes: https:// and http:// only.
- Timeout, redirect cap, and response size cap come from FetchCfg.
- Body decoded with the response charset (UTF-8 fallback, invalid bytes replaced).
- Transport failures surface as FetchError; no retries.
- No private-address guard: the usual target is a dev server on localhost.
"""

from __future__ import annotations

import asyncio
import logging
import urllib.error
import urllib.parse
import urllib.request
from http.client import HTTPException, HTTPResponse

from bundlebridge.config import FetchCfg
from bundlebridge.errors import FetchError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"https", "http"}


class HttpFetcher:
    """Fetch text resources over HTTP(S) with the limits from *cfg*."""

    def __init__(self, cfg: FetchCfg | None = None) -> None:
        self.cfg = cfg if cfg is not None else FetchCfg()

    def fetch(self, url: str) -> str:
        """Return the decoded body of *url*.

        Raises:
            ValueError: If *url* is not an http/https URL with a hostname.
            FetchError: On connection, HTTP status, redirect, or size failures.
        """
        self.validate_url(url)
        raw, charset = self._fetch(url)
        logger.debug("Fetched %d bytes from %s", len(raw), url)
        try:
            return raw.decode(charset or "utf-8", errors="replace")
        except LookupError:
            # Unknown charset label in Content-Type.
            return raw.decode("utf-8", errors="replace")

    async def fetch_async(self, url: str) -> str:
        """``fetch`` without blocking the event loop."""
        return await asyncio.to_thread(self.fetch, url)

    @staticmethod
    def validate_url(url: str) -> None:
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme not in _ALLOWED_SCHEMES:
            raise ValueError(
                f"Unsupported URL scheme '{parsed.scheme}'. Only https:// and http:// are allowed."
            )
        if not parsed.hostname:
            raise ValueError(f"URL has no hostname: {url}")

    def _fetch(self, url: str) -> tuple[bytes, str | None]:
        """Fetch *url*; returns (body_bytes, charset or None)."""
        request = urllib.request.Request(url, headers={"User-Agent": self.cfg.user_agent})
        opener = urllib.request.build_opener(
            _LimitedRedirectHandler(self.cfg.max_redirects)
        )

        try:
            response: HTTPResponse = opener.open(request, timeout=self.cfg.timeout)
        except (urllib.error.URLError, OSError, HTTPException, RedirectLimitError) as exc:
            raise FetchError(url, exc) from exc

        with response:
            try:
                body = response.read(self.cfg.max_bytes + 1)
            except (OSError, HTTPException) as exc:
                raise FetchError(url, exc) from exc
            charset = response.headers.get_content_charset()

        if len(body) > self.cfg.max_bytes:
            raise FetchError(
                url, f"response body exceeds {self.cfg.max_bytes // (1024 * 1024)} MB limit"
            )
        return body, charset


class RedirectLimitError(RuntimeError):
    """Raised after more than the allowed number of redirects."""


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Raise RedirectLimitError after more than *max_redirects* redirects."""

    def __init__(self, max_redirects: int) -> None:
        self._max_redirects = max_redirects
        self._count = 0

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        self._count += 1
        if self._count > self._max_redirects:
            raise RedirectLimitError(
                f"Too many redirects (>{self._max_redirects}) for URL '{req.full_url}'."
            )
        return super().redirect_request(req, fp, code, msg, headers, newurl)
