# config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

import yaml

from .errors import ConfigError
from .model import ExclusionRules
from .script_builder import ScriptOptions

DEFAULT_MAX_TEMPLATE_DEPTH = 32

# Environment variable prefix for every CLI option, e.g.
#   YAML_TO_SCRIPT_GENERATE_INTERACTIVE=1
ENV_PREFIX = "YAML_TO_SCRIPT"


@dataclass(frozen=True)
class GeneratorOptions:
    """The four toggles plus the template recursion bound."""
    interactive: bool = False
    error_check: bool = True
    echo: bool = True
    summary: bool = True
    max_template_depth: int = DEFAULT_MAX_TEMPLATE_DEPTH

    @property
    def script_options(self) -> ScriptOptions:
        return ScriptOptions(echo=self.echo, error_check=self.error_check, summary=self.summary)


def _string_list(data: dict, key: str, path: Path) -> List[str]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' in {path} must be a list of strings")
    return value


def load_exclusions(path: str | Path) -> ExclusionRules:
    """
    Load exclusion rules from a YAML file:

        commands:
          - Publish final artifacts
        templates:
          - templates/prep-android-nuget.yml
    """
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read exclusions file {p}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Exclusions file {p} is not valid YAML: {e}") from e

    if data is None:
        return ExclusionRules()
    if not isinstance(data, dict):
        raise ConfigError(f"Exclusions file {p} must contain a mapping")

    unknown = sorted(set(data) - {"commands", "templates"})
    if unknown:
        raise ConfigError(f"Unknown keys in exclusions file {p}: {unknown}")

    return ExclusionRules.build(
        commands=_string_list(data, "commands", p),
        templates=_string_list(data, "templates", p),
    )


def build_exclusions(
    commands: Iterable[str] = (),
    templates: Iterable[str] = (),
    files: Iterable[str | Path] = (),
) -> ExclusionRules:
    """Union of exclusions given directly and those read from files."""
    rules = ExclusionRules.build(commands=commands, templates=templates)
    for f in files:
        rules = rules.merge(load_exclusions(f))
    return rules
