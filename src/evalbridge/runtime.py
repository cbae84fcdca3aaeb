"""The shared script runtime: one namespace, one lock, lazily initialized."""

from __future__ import annotations

import builtins
import importlib
import logging
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from .config import RuntimeConfig
from .types import RuntimeInitError

logger = logging.getLogger(__name__)

NAMESPACE_NAME = "__evalbridge__"


class ScriptRuntime:
    """Embedded runtime that compiled expressions register their functions in.

    Every compile and every call goes through ``lock``; callers on other
    threads wait their turn. Initialization happens on first use and a
    failure is permanent for the instance.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        self.config = config if config is not None else RuntimeConfig()
        self.lock = threading.RLock()
        self.library_path: Optional[Path] = None
        self._namespace: Optional[Dict[str, Any]] = None
        self._init_error: Optional[RuntimeInitError] = None

    @property
    def initialized(self) -> bool:
        return self._namespace is not None

    def initialize(self) -> Dict[str, Any]:
        with self.lock:
            if self._namespace is not None:
                return self._namespace

            if self._init_error is not None:
                raise self._init_error

            try:
                self._namespace = self._build_namespace()
            except RuntimeInitError as exc:
                self._init_error = exc
                raise

            return self._namespace

    def _build_namespace(self) -> Dict[str, Any]:
        logger.debug("Initializing script runtime")
        self.library_path = self._resolve_library_path()

        if self.library_path is not None:
            entry = str(self.library_path)
            if entry not in sys.path:
                sys.path.append(entry)
            logger.debug("Script library path: %s", entry)

        namespace: Dict[str, Any] = {
            "__name__": NAMESPACE_NAME,
            "__builtins__": builtins,
        }

        for module_name in self.config.preload:
            try:
                importlib.import_module(module_name)
            except Exception as exc:
                # SyntaxError from a broken library module lands here too.
                raise RuntimeInitError(
                    f"Cannot preload module '{module_name}': {type(exc).__name__}: {exc}"
                ) from exc

            # Bound like `import a.b`: the top-level package name.
            top = module_name.split(".")[0]
            namespace[top] = sys.modules[top]
            logger.debug("Preloaded %s", module_name)

        logger.debug("Done with script runtime initialization")
        return namespace

    def _resolve_library_path(self) -> Optional[Path]:
        explicit = self.config.library_path
        if explicit:
            path = Path(explicit).resolve()
            if not path.is_dir():
                raise RuntimeInitError(f"Configured library path does not exist: {path}")
            return path

        found = self.config.discover_library_path()
        if found is None:
            logger.warning(
                "No script library directory found among %s; using interpreter defaults",
                ", ".join(str(p) for p in self.config.candidate_paths()),
            )

        return found

    def define(self, name: str, definition: str, filename: str = "<expression>") -> None:
        """Compile ``definition`` and execute it in the namespace.

        SyntaxError propagates and leaves the namespace untouched.
        """
        with self.lock:
            namespace = self.initialize()
            code = compile(definition, filename, "exec")
            exec(code, namespace)
            logger.debug("Registered %s", name)

    def is_defined(self, name: str) -> bool:
        with self.lock:
            return self._namespace is not None and name in self._namespace

    def function(self, name: str) -> Callable[..., Any]:
        with self.lock:
            namespace = self.initialize()
            return namespace[name]

    def call(self, name: str, args: Sequence[Any]) -> Any:
        with self.lock:
            return self.function(name)(*args)


_DEFAULT_RUNTIME: Optional[ScriptRuntime] = None
_DEFAULT_LOCK = threading.Lock()


def default_runtime() -> ScriptRuntime:
    """Process-wide runtime, created with environment settings on first use."""
    global _DEFAULT_RUNTIME

    with _DEFAULT_LOCK:
        if _DEFAULT_RUNTIME is None:
            _DEFAULT_RUNTIME = ScriptRuntime()
        return _DEFAULT_RUNTIME


def set_default_runtime(runtime: Optional[ScriptRuntime]) -> None:
    """Install the runtime every bridge without an explicit one will share."""
    global _DEFAULT_RUNTIME

    with _DEFAULT_LOCK:
        _DEFAULT_RUNTIME = runtime
