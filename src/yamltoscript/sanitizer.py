# sanitizer.py
from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

WORKING_DIRECTORY_TOKEN = "$(System.DefaultWorkingDirectory)"

# ${{ parameters.name }} with optional whitespace inside the braces
PARAMETER_PATTERN = re.compile(r"\$\{\{\s*parameters\.([^\s}]+)\s*\}\}")


def parameter_names(command: str) -> list[str]:
    """Names referenced through `${{ parameters.<name> }}`, in order of appearance."""
    return [m.group(1) for m in PARAMETER_PATTERN.finditer(command)]


def sanitize_command(
    command: str,
    parameters: Mapping[str, str],
    working_directory: str | Path,
) -> str:
    """
    Turn a pipeline command into a literal shell command.

    Two passes, in order:
      1. every working-directory token -> absolute working directory
      2. every parameter placeholder   -> its bound value

    A placeholder whose name is not bound is left as written.
    """
    sanitized = command.replace(WORKING_DIRECTORY_TOKEN, str(working_directory))

    def _bind(match: re.Match) -> str:
        name = match.group(1)
        if name not in parameters:
            return match.group(0)
        return str(parameters[name])

    return PARAMETER_PATTERN.sub(_bind, sanitized)
