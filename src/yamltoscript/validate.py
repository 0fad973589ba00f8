# validate.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .prompt import Prompter, Question, ResponseType
from .ui.console import Console, get_console

# Each validator returns the accepted path, or None when the user chose Quit.


def _ask_for_path(prompter: Prompter, context: str, label: str) -> Optional[str]:
    response = prompter.ask(
        Question(
            context=context,
            text="Please specify a new one:",
            allowed=ResponseType.STRING | ResponseType.QUIT,
            default=ResponseType.QUIT,
            placeholder=label,
            color="red",
        )
    )
    if response.type != ResponseType.STRING:
        return None
    return response.value


def validate_input_path(path: str | Path, prompter: Prompter) -> Optional[Path]:
    """Keep asking until the pipeline definition exists."""
    input_path = Path(path).expanduser().resolve()
    while not input_path.is_file():
        answer = _ask_for_path(
            prompter,
            f"Error: input file at path {input_path} is invalid!",
            "Path to input file",
        )
        if answer is None:
            return None
        input_path = Path(answer).expanduser().resolve()
    return input_path


def validate_working_directory(
    path: str | Path, prompter: Prompter, console: Console | None = None
) -> Optional[Path]:
    """Keep asking until the working directory exists and is a directory."""
    console = console or get_console()
    directory = Path(path).expanduser().resolve()
    replaced = False
    while not directory.is_dir():
        replaced = True
        answer = _ask_for_path(
            prompter,
            f"Error: working directory at path {directory} is invalid!",
            "Path to directory",
        )
        if answer is None:
            return None
        directory = Path(answer).expanduser().resolve()

    if replaced:
        console.print_success(f"{directory} set as the default working directory\n")
    return directory


def validate_output_path(path: str | Path, prompter: Prompter) -> Optional[Path]:
    """Confirm before overwriting an existing file; No asks for another path."""
    output_path = Path(path).expanduser().resolve()
    while output_path.exists():
        response = prompter.ask(
            Question(
                context=f"Warning: File at path {output_path} already exists.",
                text="Are you sure you want to overwrite it?",
                allowed=ResponseType.YES | ResponseType.NO | ResponseType.QUIT,
                default=ResponseType.YES,
                color="yellow",
            )
        )
        if response.type == ResponseType.QUIT:
            return None
        if response.type == ResponseType.YES:
            break

        answer = prompter.ask(
            Question(
                text="Please enter the filepath to generate the output script to:",
                allowed=ResponseType.STRING,
            )
        )
        output_path = Path(answer.value).expanduser().resolve()

    return output_path
