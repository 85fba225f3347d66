"""
Working-directory helpers.

The CLI keeps its selection and permission decision in a relative state path
(`.cache/waitcast/state.json`). Anchoring that path at the checkout, not at
whatever directory the command runs from, keeps one state file per checkout.

- `find_workspace()`: the nearest directory upward holding `.env`, `.git` or a
  `pyproject.toml` (or `WAITCAST_HOME` when set).
- `load_dotenv_if_present()`: loads that directory's `.env` once, never
  clobbering variables already in the environment.
- `resolve_project_path()`: anchors relative paths at the workspace.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

_MARKERS = (".env", ".git", "pyproject.toml")


@lru_cache
def find_workspace() -> Path:
    home = os.getenv("WAITCAST_HOME")
    if home:
        return Path(home).expanduser().resolve()

    cwd = Path.cwd().resolve()
    for directory in (cwd, *cwd.parents):
        if any((directory / marker).exists() for marker in _MARKERS):
            return directory
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `WAITCAST_ENV_FILE` or the workspace `.env`; returns the file loaded, if any.

    python-dotenv is optional at runtime; without it nothing is loaded.
    """
    try:
        from dotenv import load_dotenv
    except ImportError:
        return None

    explicit = os.getenv("WAITCAST_ENV_FILE")
    candidate = Path(explicit).expanduser() if explicit else find_workspace() / ".env"
    if not candidate.is_file():
        return None
    load_dotenv(dotenv_path=candidate, override=False)
    return candidate.resolve()


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else (find_workspace() / p).resolve()
