"""Script engines — run an imported bundle under its local file identity.

``IsolatedExecutor`` evaluates the code in-process, in a fresh global
namespace compiled against *filename*, so tracebacks and breakpoints point at
the persisted file. Errors raised by the script propagate unwrapped.

``NodeExecutor`` hands the persisted file to ``node`` for JavaScript bundles
(shell=False; the file must already be on disk).
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from typing import Any

from bundlebridge.config import ExecutorCfg
from bundlebridge.errors import ScriptExecutionError


class Executor(ABC):
    """Abstract base for script engines."""

    @abstractmethod
    def run(self, code: str, filename: str) -> Any:
        """Evaluate *code* as top-level program code identified as *filename*.

        Blocks until top-level evaluation completes. Side effects of the
        script (threads, callbacks, registered handlers) may outlive the call.
        """


class IsolatedExecutor(Executor):
    """Evaluate code in-process in a namespace separate from the host's globals.

    Args:
        init_globals: Names pre-seeded into each fresh namespace.
    """

    def __init__(self, init_globals: dict[str, Any] | None = None) -> None:
        self.init_globals = dict(init_globals or {})

    def run(self, code: str, filename: str) -> dict[str, Any]:
        """Compile and execute *code*; returns the script's global namespace."""
        namespace: dict[str, Any] = dict(self.init_globals)
        namespace.update({"__name__": "__bundle__", "__file__": filename})
        compiled = compile(code, filename, "exec")
        exec(compiled, namespace)
        return namespace


class NodeExecutor(Executor):
    """Run the persisted bundle with Node.js (``node --enable-source-maps``).

    *code* is not re-sent: the bundle at *filename* was written by the temp
    store before execution, and node reads it from there.
    """

    def __init__(self, node_binary: str = "node") -> None:
        self.node_binary = node_binary

    def run(self, code: str, filename: str) -> int:
        try:
            result = subprocess.run(
                [self.node_binary, "--enable-source-maps", filename],
                shell=False,
                check=False,
            )
        except FileNotFoundError:
            raise ScriptExecutionError(
                f"Node.js binary '{self.node_binary}' not found."
            ) from None
        if result.returncode != 0:
            raise ScriptExecutionError(
                f"{filename} exited with status {result.returncode}"
            )
        return result.returncode


def executor_from_config(cfg: ExecutorCfg) -> Executor:
    if cfg.engine == "node":
        return NodeExecutor(cfg.node_binary)
    return IsolatedExecutor()
