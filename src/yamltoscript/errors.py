# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GenerationError(Exception):
    """
    Structured, fatal generation error.

    Carries enough context for clean CLI output without a traceback:
      kind     - DefinitionLoadError | MissingJobsKey | TemplateDepthExceeded
      message  - one-line summary
      path     - file being processed when the error happened
      details  - extra key/value context
    """
    kind: str
    message: str
    path: str | None = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.path:
            lines.append(f"path={self.path}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigError(ValueError):
    """Raised for malformed exclusion/config files."""
