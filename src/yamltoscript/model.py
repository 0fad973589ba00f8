# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

DEFAULT_DISPLAY_NAME = "Command without display name"

# Only this task kind maps onto a literal shell command.
SUPPORTED_TASKS = frozenset({"CmdLine@2"})


@dataclass(frozen=True)
class TemplateStep:
    """Reference to a template file plus the parameters bound at the reference site."""
    reference: str
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CommandStep:
    """A literal shell command taken from `inputs.script` (or the `script:` shorthand)."""
    script: str
    display_name: Optional[str] = None
    task: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or DEFAULT_DISPLAY_NAME

    @property
    def is_supported(self) -> bool:
        return self.task is None or self.task in SUPPORTED_TASKS


@dataclass(frozen=True)
class Step:
    """
    One entry of a step list.

    A step node may carry a template reference, a command, or both; nothing
    in the pipeline format enforces exclusivity so both halves are kept.
    """
    template: Optional[TemplateStep] = None
    command: Optional[CommandStep] = None


@dataclass(frozen=True)
class Job:
    name: str
    steps: List[Step] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineDefinition:
    jobs: List[Job]


@dataclass(frozen=True)
class TemplateDefinition:
    """A reusable step list with the parameter names it requires."""
    parameters: List[str]
    steps: List[Step]


def normalize_reference(reference: str) -> str:
    ref = reference.strip().replace("\\", "/")
    while ref.startswith("./"):
        ref = ref[2:]
    return ref


@dataclass(frozen=True)
class ExclusionRules:
    """Static deny lists: command display names and template references."""
    commands: frozenset = frozenset()
    templates: frozenset = frozenset()

    @classmethod
    def build(cls, commands=(), templates=()) -> ExclusionRules:
        return cls(
            commands=frozenset(commands),
            templates=frozenset(normalize_reference(t) for t in templates),
        )

    def excludes_command(self, display_name: str) -> bool:
        return display_name in self.commands

    def excludes_template(self, reference: str) -> bool:
        return normalize_reference(reference) in self.templates

    def merge(self, other: ExclusionRules) -> ExclusionRules:
        return ExclusionRules(
            commands=self.commands | other.commands,
            templates=self.templates | other.templates,
        )
