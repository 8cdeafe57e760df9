"""Config file discovery.

One invocation reads at most one ``envfold.toml``. The first of these wins:

1. ``--config PATH`` on the command line
2. the ``ENVFOLD_CONFIG`` env var
3. a walk-up from the working directory, the way git finds ``.git/``

An explicit path (1 or 2) that does not exist is an error rather than a
silent fallback to walk-up discovery.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "envfold.toml"
CONFIG_ENV_VAR = "ENVFOLD_CONFIG"


class ConfigNotFoundError(FileNotFoundError):
    """An explicitly requested config file does not exist."""

    def __init__(self, path: Path, source: str) -> None:
        self.path = path
        self.source = source
        super().__init__(f"Config file not found: {path} (from {source})")


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for envfold.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def locate_config(explicit: str | Path | None = None, start: Path | None = None) -> Path | None:
    """Return the config file for this invocation, or None if there is none.

    Raises:
        ConfigNotFoundError: *explicit* or ``ENVFOLD_CONFIG`` names a
            file that does not exist.
    """
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise ConfigNotFoundError(path, "--config")
        return path

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            raise ConfigNotFoundError(path, CONFIG_ENV_VAR)
        return path

    return find_config(start)
