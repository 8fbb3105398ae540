"""bundlebridge — import remotely served script bundles for local debugging."""

from bundlebridge.importer import ScriptImporter

__all__ = ["ScriptImporter"]
