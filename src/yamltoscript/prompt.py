# prompt.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Protocol

import click

from .ui.console import colorize


class ResponseType(enum.Flag):
    """Kinds of answer a question accepts. Combine with `|`."""
    YES = enum.auto()
    NO = enum.auto()
    ACCEPT_REMAINING = enum.auto()
    SKIP_REMAINING = enum.auto()
    QUIT = enum.auto()
    STRING = enum.auto()
    INVALID = enum.auto()


# Order here is the order choices are shown in.
_CHOICES = [
    (ResponseType.YES, "y", "Yes"),
    (ResponseType.NO, "n", "No"),
    (ResponseType.ACCEPT_REMAINING, "a", "Accept remaining"),
    (ResponseType.SKIP_REMAINING, "s", "Skip remaining"),
    (ResponseType.QUIT, "q", "Quit"),
]

KEYS = {rt: key for rt, key, _label in _CHOICES}


def is_single(response_type: ResponseType) -> bool:
    return bin(response_type.value).count("1") == 1


@dataclass(frozen=True)
class Response:
    type: ResponseType
    value: str = ""


@dataclass(frozen=True)
class Question:
    """
    One question to put to the user.

    context:     optional line shown before the question
    allowed:     set of acceptable responses
    default:     response chosen on empty input (a single flag)
    placeholder: label for free text when STRING is allowed
    """
    text: str
    allowed: ResponseType = ResponseType.YES | ResponseType.NO
    default: Optional[ResponseType] = None
    context: Optional[str] = None
    placeholder: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self):
        if self.default is not None and not is_single(self.default):
            raise ValueError("Default response must be a single response type")


def format_choices(question: Question) -> str:
    """e.g. `Yes(y) No(n) Quit(q) | <target> [q]: `"""
    parts = [f"{label}({key})" for rt, key, label in _CHOICES if rt in question.allowed]
    if ResponseType.STRING in question.allowed:
        if question.allowed == ResponseType.STRING:
            return ""
        if question.placeholder is not None:
            parts.append("|")
            parts.append(f"<{question.placeholder}>")
    if question.default is not None:
        parts.append(f"[{KEYS.get(question.default, '')}]")
    return " ".join(parts) + ": "


def parse_response(question: Question, raw: str) -> Response:
    """Map raw input onto one of the allowed responses (INVALID if none match)."""
    if raw == "" and question.default is not None:
        return Response(question.default, KEYS.get(question.default, ""))

    for rt, key, _label in _CHOICES:
        if rt in question.allowed and raw.strip().lower() == key:
            return Response(rt, raw)

    if ResponseType.STRING in question.allowed and raw != "":
        return Response(ResponseType.STRING, raw)

    return Response(ResponseType.INVALID, "")


class Prompter(Protocol):
    def ask(self, question: Question) -> Response:
        ...


class PromptUnavailableError(RuntimeError):
    """Raised when a question needs an answer but nobody can give one."""


class ConsolePrompter:
    """Blocking terminal prompter; keeps asking until the answer is valid."""

    def __init__(self, color: bool = True):
        self.color = color

    def _style(self, text: str, color: Optional[str]) -> str:
        return colorize(text, color) if self.color else text

    def ask(self, question: Question) -> Response:
        if question.context is not None:
            click.echo(self._style(question.context, question.color))
        click.echo(self._style(question.text, question.color))

        while True:
            raw = click.prompt(
                format_choices(question),
                default="",
                show_default=False,
                prompt_suffix="",
            )
            response = parse_response(question, raw)
            if response.type != ResponseType.INVALID:
                click.echo("")
                return response
            click.echo(self._style("Invalid response! Please enter a valid response:", "red"))


class NonInteractivePrompter:
    """Answers every question with its default. Used when stdin is not a terminal."""

    def ask(self, question: Question) -> Response:
        if question.default is None:
            raise PromptUnavailableError(
                f"Cannot answer '{question.text}' without an interactive terminal"
            )
        return Response(question.default, KEYS.get(question.default, ""))
