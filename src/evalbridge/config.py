from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

LIBRARY_PATH_ENV = "EVALBRIDGE_LIBRARY_PATH"
PRELOAD_ENV = "EVALBRIDGE_PRELOAD"

# Relative to the directory the host was launched from: a distribution root
# first, then a development checkout.
DEFAULT_LIBRARY_CANDIDATES: Tuple[str, ...] = (
    "webapp/WEB-INF/lib/python",
    "main/webapp/WEB-INF/lib/python",
)


def _env_preload() -> Tuple[str, ...]:
    raw = os.getenv(PRELOAD_ENV, "")
    return tuple(name.strip() for name in raw.split(",") if name.strip())


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings for the shared script runtime.

    Values can be overridden via environment variables:
    - EVALBRIDGE_LIBRARY_PATH: directory added to the module search path
    - EVALBRIDGE_PRELOAD: comma-separated modules imported into the namespace

    When ``library_path`` is unset, each of ``library_candidates`` is tried
    relative to ``base_dir`` (the working directory by default) and the first
    existing directory wins. When none exists the runtime starts with the
    interpreter's own search path.
    """

    library_path: Optional[str] = field(
        default_factory=lambda: os.getenv(LIBRARY_PATH_ENV) or None
    )
    library_candidates: Tuple[str, ...] = DEFAULT_LIBRARY_CANDIDATES
    base_dir: Optional[str] = None
    preload: Tuple[str, ...] = field(default_factory=_env_preload)

    def candidate_paths(self) -> Tuple[Path, ...]:
        base = Path(self.base_dir) if self.base_dir else Path.cwd()
        return tuple((base / rel).resolve() for rel in self.library_candidates)

    def discover_library_path(self) -> Optional[Path]:
        """Return the first existing candidate directory, or None."""
        for cand in self.candidate_paths():
            if cand.is_dir() and os.access(cand, os.R_OK):
                return cand

        return None
