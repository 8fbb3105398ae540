"""Transport for bundles and source maps."""

from bundlebridge.fetch.http import HttpFetcher

__all__ = ["HttpFetcher"]
