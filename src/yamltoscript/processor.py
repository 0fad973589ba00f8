# processor.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import GeneratorOptions
from .errors import GenerationError
from .loader import load_pipeline, load_template
from .model import (
    CommandStep,
    ExclusionRules,
    Job,
    PipelineDefinition,
    Step,
    TemplateDefinition,
    TemplateStep,
    normalize_reference,
)
from .prompt import Prompter, Question, ResponseType
from .sanitizer import parameter_names, sanitize_command
from .script_builder import ScriptBuilder
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Run state
# ----------------------------------------------------------------------

class Decision(enum.Enum):
    """Interactive state. Only ever moves away from UNDECIDED, never back."""
    UNDECIDED = "undecided"
    ACCEPT_ALL = "accept_all"
    SKIP_ALL = "skip_all"


@dataclass(frozen=True)
class Session:
    decision: Decision = Decision.UNDECIDED

    @property
    def accept_all(self) -> bool:
        return self.decision is Decision.ACCEPT_ALL

    @property
    def skip_all(self) -> bool:
        return self.decision is Decision.SKIP_ALL

    def decide(self, decision: Decision) -> Session:
        if self.decision is not Decision.UNDECIDED:
            return self
        return replace(self, decision=decision)


@dataclass(frozen=True)
class Proceed:
    session: Session


@dataclass(frozen=True)
class Terminated:
    """The run stops here; nothing further is processed or written."""
    exit_code: int
    reason: str


Outcome = Union[Proceed, Terminated]


@dataclass(frozen=True)
class Context:
    """Everything fixed for the lifetime of one run."""
    builder: ScriptBuilder
    prompter: Prompter
    working_directory: Path
    options: GeneratorOptions = field(default_factory=GeneratorOptions)
    exclusions: ExclusionRules = field(default_factory=ExclusionRules)
    console: Console = field(default_factory=get_console)


@dataclass(frozen=True)
class Scope:
    """
    Where a step list is being processed:
      directory  - base for relative template references
      parameters - bindings of the enclosing template invocation
      chain      - template files currently being expanded, outermost first
    """
    directory: Path
    parameters: Mapping[str, str] = field(default_factory=dict)
    chain: Tuple[str, ...] = ()


# ----------------------------------------------------------------------
# Questions
# ----------------------------------------------------------------------

def _missing_parameter_question(parameter: str, template_name: str) -> Question:
    return Question(
        context=f"Error: Missing parameter '{parameter}' for template '{template_name}'.",
        text="Provide a value now?",
        allowed=ResponseType.QUIT | ResponseType.STRING,
        default=ResponseType.QUIT,
        placeholder=parameter,
        color="red",
    )


def _keep_command_question(name: str, command: str) -> Question:
    return Question(
        context=f"Processing command: {name}:\n{command}\n",
        text=f"Add '{name}' to your script?",
        allowed=(
            ResponseType.YES
            | ResponseType.NO
            | ResponseType.ACCEPT_REMAINING
            | ResponseType.SKIP_REMAINING
            | ResponseType.QUIT
        ),
        default=ResponseType.YES,
    )


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------

def review_command(
    ctx: Context, session: Session, name: str, command: str
) -> Union[Tuple[bool, Session], Terminated]:
    """Ask whether to keep one command. Returns (keep, session) or Terminated on Quit."""
    response = ctx.prompter.ask(_keep_command_question(name, command))
    kind = response.type

    if kind == ResponseType.QUIT:
        ctx.console.print_info("Terminating script generation.")
        return Terminated(exit_code=0, reason="Quit requested")
    if kind == ResponseType.ACCEPT_REMAINING:
        ctx.console.print_info("Accepting all subsequent commands.\n", color="yellow")
        return True, session.decide(Decision.ACCEPT_ALL)
    if kind == ResponseType.SKIP_REMAINING:
        ctx.console.print_info("Skipping all subsequent commands.\n", color="yellow")
        return False, session.decide(Decision.SKIP_ALL)
    if kind == ResponseType.NO:
        return False, session
    return True, session


def process_command(ctx: Context, session: Session, scope: Scope, command: CommandStep) -> Outcome:
    name = command.name

    if not command.is_supported and not session.skip_all:
        ctx.console.print_warning(
            f"Unsupported task type '{command.task}' for command '{name}'. Skipping command.\n"
        )
        return Proceed(session)

    sanitized = sanitize_command(command.script, scope.parameters, ctx.working_directory)

    if ctx.exclusions.excludes_command(name):
        ctx.console.print_debug(f"Excluded command: {name}")
        return Proceed(session)

    if session.skip_all:
        return Proceed(session)

    if ctx.options.interactive and not session.accept_all:
        reviewed = review_command(ctx, session, name, sanitized)
        if isinstance(reviewed, Terminated):
            return reviewed
        keep, session = reviewed
        if not keep:
            return Proceed(session)

    ctx.builder.add_command(name, sanitized)
    return Proceed(session)


# ----------------------------------------------------------------------
# Templates
# ----------------------------------------------------------------------

def bind_parameters(
    ctx: Context,
    template_path: Path,
    declared: Sequence[str],
    supplied: Mapping[str, str],
) -> Union[Dict[str, str], Terminated]:
    """
    Check every declared parameter is bound, asking for the missing ones.

    Returns a fresh binding map, or Terminated(exit_code=1) if the user
    declines to supply a value.
    """
    bindings = dict(supplied)
    for parameter in declared:
        if parameter in bindings:
            continue
        response = ctx.prompter.ask(_missing_parameter_question(parameter, template_path.name))
        if response.type != ResponseType.STRING:
            ctx.console.print_info("Terminating script generation.")
            return Terminated(
                exit_code=1,
                reason=f"Missing parameter '{parameter}' for template '{template_path}'",
            )
        bindings[parameter] = response.value
    return bindings


def required_parameters(ctx: Context, template: TemplateDefinition) -> List[str]:
    """
    Declared parameter names followed by any name the template's own steps
    use through `${{ parameters.<name> }}` without declaring it.

    Placeholders in excluded or unsupported commands, and in the values of
    excluded template references, are not counted.
    """
    names = list(template.parameters)
    for step in template.steps:
        used: List[str] = []
        if step.template is not None and not ctx.exclusions.excludes_template(step.template.reference):
            for value in step.template.parameters.values():
                used.extend(parameter_names(value))
        command = step.command
        if command is not None and command.is_supported and not ctx.exclusions.excludes_command(command.name):
            used.extend(parameter_names(command.script))
        for name in used:
            if name not in names:
                names.append(name)
    return names


def resolve_template(ctx: Context, session: Session, scope: Scope, step: TemplateStep) -> Outcome:
    """Load a referenced template, bind its parameters and expand its steps in place."""
    path = scope.directory / normalize_reference(step.reference)

    if len(scope.chain) >= ctx.options.max_template_depth:
        raise GenerationError(
            kind="TemplateDepthExceeded",
            message=(
                f"Template nesting deeper than {ctx.options.max_template_depth} levels "
                "(self-referencing template?)"
            ),
            path=str(path),
            details={"chain": " -> ".join(scope.chain + (str(path),))},
        )

    ctx.console.print_debug(f"Expanding template {path}")
    template = load_template(path)

    # Values written at the reference site may re-specify outer bindings,
    # e.g. `target: ${{ parameters.target }}`.
    supplied = {
        name: sanitize_command(value, scope.parameters, ctx.working_directory)
        for name, value in step.parameters.items()
    }
    bindings = bind_parameters(ctx, path, required_parameters(ctx, template), supplied)
    if isinstance(bindings, Terminated):
        return bindings

    inner = Scope(directory=path.parent, parameters=bindings, chain=scope.chain + (str(path),))
    return process_steps(ctx, session, inner, template.steps)


# ----------------------------------------------------------------------
# Step lists / jobs
# ----------------------------------------------------------------------

def process_step(ctx: Context, session: Session, scope: Scope, step: Step) -> Outcome:
    outcome: Outcome = Proceed(session)

    if step.template is not None:
        if ctx.exclusions.excludes_template(step.template.reference):
            ctx.console.print_debug(f"Excluded template: {step.template.reference}")
        else:
            outcome = resolve_template(ctx, session, scope, step.template)
            if isinstance(outcome, Terminated):
                return outcome

    if step.command is not None:
        outcome = process_command(ctx, outcome.session, scope, step.command)

    return outcome


def process_steps(ctx: Context, session: Session, scope: Scope, steps: Sequence[Step]) -> Outcome:
    """Walk a step list in order, depth-first through templates."""
    for step in steps:
        outcome = process_step(ctx, session, scope, step)
        if isinstance(outcome, Terminated):
            return outcome
        session = outcome.session
    return Proceed(session)


def process_job(ctx: Context, session: Session, job: Job, directory: Path) -> Outcome:
    if not job.steps:
        return Proceed(session)
    ctx.builder.add_job(job.name)
    return process_steps(ctx, session, Scope(directory=directory), job.steps)


def process_pipeline(
    ctx: Context, pipeline: PipelineDefinition, directory: Path, session: Session | None = None
) -> Outcome:
    session = session or Session()
    for job in pipeline.jobs:
        outcome = process_job(ctx, session, job, directory)
        if isinstance(outcome, Terminated):
            return outcome
        session = outcome.session
    return Proceed(session)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class GenerationResult:
    exit_code: int
    output: Optional[Path]
    commands: List[Tuple[str, str]]
    reason: str = ""

    @property
    def written(self) -> bool:
        return self.output is not None


def generate_script(
    input_path: str | Path,
    output_path: str | Path,
    working_directory: str | Path,
    prompter: Prompter,
    *,
    options: GeneratorOptions | None = None,
    exclusions: ExclusionRules | None = None,
    console: Console | None = None,
) -> GenerationResult:
    """
    Turn a pipeline definition into an executable shell script.

    Raises GenerationError for fatal definition problems. A Quit or a
    declined missing parameter returns a result with nothing written.
    """
    options = options or GeneratorOptions()
    console = console or get_console()
    input_p = Path(input_path).resolve()

    pipeline = load_pipeline(input_p)

    builder = ScriptBuilder(options.script_options)
    ctx = Context(
        builder=builder,
        prompter=prompter,
        working_directory=Path(working_directory).resolve(),
        options=options,
        exclusions=exclusions or ExclusionRules(),
        console=console,
    )

    outcome = process_pipeline(ctx, pipeline, input_p.parent)
    if isinstance(outcome, Terminated):
        return GenerationResult(
            exit_code=outcome.exit_code,
            output=None,
            commands=builder.commands,
            reason=outcome.reason,
        )

    out = builder.write(output_path)
    console.print_success(f"Script generated successfully to {out}")
    return GenerationResult(exit_code=0, output=out, commands=builder.commands)
