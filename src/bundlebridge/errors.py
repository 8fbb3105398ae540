"""Exception taxonomy for the import pipeline.

Fetch and write failures surface as the import's failure. Malformed source
maps are not errors (see ``sourcemap.rewriter``). Errors raised by the
imported script itself are never wrapped when the in-process engine runs it.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for failures raised by bundlebridge itself."""


class FetchError(BridgeError, RuntimeError):
    """Raised when a bundle or source map cannot be retrieved."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"Failed to fetch URL '{url}': {reason}")
        self.url = url


class PersistError(BridgeError, OSError):
    """Raised when an artifact cannot be written to the temp directory."""

    def __init__(self, path: object, reason: object) -> None:
        super().__init__(f"Failed to write '{path}': {reason}")
        self.path = path


class ScriptExecutionError(BridgeError, RuntimeError):
    """Raised by external engines when the script exits with an error."""
