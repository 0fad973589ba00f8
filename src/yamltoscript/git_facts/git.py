# git.py
# Thin wrapper around the git CLI, used to pick a sensible default
# working directory for generated scripts.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """Run git and return stripped stdout. Raises CalledProcessError on failure."""
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str | Path] = None) -> Path:
    """Absolute path of the repository containing `cwd`."""
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def default_working_directory(cwd: Optional[str | Path] = None) -> Path:
    """
    Repository root when inside a git checkout, otherwise `cwd` itself.

    Pipelines reference $(System.DefaultWorkingDirectory) as the checkout
    root, so the repo root is the closest local equivalent.
    """
    start = Path(cwd) if cwd is not None else Path.cwd()
    try:
        return repo_root(start).resolve()
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return start.resolve()
