# cli.py
from __future__ import annotations

import sys

import click

from yamltoscript.config import DEFAULT_MAX_TEMPLATE_DEPTH, ENV_PREFIX, GeneratorOptions, build_exclusions
from yamltoscript.errors import ConfigError, GenerationError
from yamltoscript.git_facts.git import default_working_directory
from yamltoscript.processor import generate_script
from yamltoscript.prompt import ConsolePrompter, NonInteractivePrompter, Prompter
from yamltoscript.ui.console import Console, set_console, get_console
from yamltoscript.validate import validate_input_path, validate_output_path, validate_working_directory

BANNER = (
    "Reads an Azure DevOps pipeline YAML file and generates a build script that "
    "replicates its steps locally. Templates are expanded in place and their "
    "parameter values substituted into the commands."
)

EPILOG = "Example usage:\n\n  yaml-to-script generate -p .ado/android-pr.yml -o ./build.sh -d . -i"


def make_prompter(color: bool = True) -> Prompter:
    """Terminal prompter when stdin is a TTY, otherwise answer with defaults."""
    if sys.stdin.isatty():
        return ConsolePrompter(color=color)
    return NonInteractivePrompter()


def _terminate(console: Console) -> None:
    console.print_info("Terminating script generation.")
    sys.exit(0)


@click.group(help=BANNER)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option("--color/--no-color", default=True, help="Colourize console output")
@click.pass_context
def cli(ctx, debug, color):
    """yaml-to-script: pipeline YAML -> local shell script."""
    console = Console(debug=debug, color=color)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["color"] = color


@cli.command(epilog=EPILOG)
@click.option(
    "-p", "--path", "input_path",
    required=True,
    help="Path to the pipeline YAML file. May be absolute or relative.",
)
@click.option(
    "-o", "--output", "output_path",
    required=True,
    help="Path to save the generated build script to.",
)
@click.option(
    "-d", "--defaultworkingdir", "working_dir",
    default=None,
    help="Directory the generated script runs from; replaces $(System.DefaultWorkingDirectory). "
         "Defaults to the git repository root.",
)
@click.option(
    "-i", "--interactive",
    is_flag=True,
    default=False,
    help="Present each step and choose whether it goes into the script.",
)
@click.option(
    "--errorcheck/--no-errorcheck",
    default=True,
    show_default=True,
    help="Abort the generated script when a command fails.",
)
@click.option("--echo/--no-echo", default=True, show_default=True, help="Echo each command before running it.")
@click.option(
    "--summary/--no-summary",
    default=True,
    show_default=True,
    help="Print a timing summary when the generated script finishes.",
)
@click.option(
    "--max-depth",
    default=DEFAULT_MAX_TEMPLATE_DEPTH,
    type=click.IntRange(min=1),
    show_default=True,
    help="Maximum template nesting depth.",
)
@click.option("--exclude-command", multiple=True, help="Display name of a command to leave out (repeatable).")
@click.option("--exclude-template", multiple=True, help="Template reference not to expand (repeatable).")
@click.option(
    "--exclusions",
    "exclusion_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with `commands:` and `templates:` lists to exclude.",
)
@click.pass_context
def generate(
    ctx,
    input_path,
    output_path,
    working_dir,
    interactive,
    errorcheck,
    echo,
    summary,
    max_depth,
    exclude_command,
    exclude_template,
    exclusion_files,
):
    """Generate a shell script from a pipeline definition."""
    console = get_console()
    prompter = make_prompter(color=ctx.obj.get("color", True))
    if interactive and isinstance(prompter, NonInteractivePrompter):
        console.print_warning(
            "stdin is not a terminal; ignoring --interactive and keeping every command.\n"
        )

    try:
        exclusions = build_exclusions(exclude_command, exclude_template, exclusion_files)
    except ConfigError as e:
        console.print_error(
            "Invalid exclusions",
            str(e),
            suggestion="Expected a YAML mapping such as:\n  commands: [\"Npm pack\"]\n  templates: [templates/publish.yml]",
        )
        sys.exit(1)

    input_p = validate_input_path(input_path, prompter)
    if input_p is None:
        _terminate(console)
    output_p = validate_output_path(output_path, prompter)
    if output_p is None:
        _terminate(console)
    working_p = validate_working_directory(
        working_dir if working_dir is not None else default_working_directory(),
        prompter,
        console,
    )
    if working_p is None:
        _terminate(console)

    console.print_debug(f"input={input_p} output={output_p} working_dir={working_p}")

    options = GeneratorOptions(
        interactive=interactive,
        error_check=errorcheck,
        echo=echo,
        summary=summary,
        max_template_depth=max_depth,
    )

    try:
        result = generate_script(
            input_p,
            output_p,
            working_p,
            prompter,
            options=options,
            exclusions=exclusions,
            console=console,
        )
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except GenerationError as e:
        details = [f"path: {e.path}"] if e.path else []
        details.extend(f"{k}: {v}" for k, v in e.details.items())
        console.print_error(e.kind, e.message, details=details)
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if not result.written:
        console.print_debug(f"No script written: {result.reason}")
    sys.exit(result.exit_code)


def main() -> None:
    cli(auto_envvar_prefix=ENV_PREFIX)


if __name__ == "__main__":
    main()
