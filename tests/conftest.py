from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, List

import pytest

from yamltoscript.prompt import Question, Response, ResponseType
from yamltoscript.ui.console import Console, set_console


class ScriptedPrompter:
    """Replays canned answers and records every question asked."""

    def __init__(self, *answers: Response):
        self.answers: List[Response] = list(answers)
        self.questions: List[Question] = []

    def ask(self, question: Question) -> Response:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"Unexpected question: {question.text}")
        return self.answers.pop(0)


def answer(kind: ResponseType, value: str = "") -> Response:
    return Response(kind, value)


@pytest.fixture
def console() -> Console:
    c = Console(color=False)
    set_console(c)
    return c


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """write_yaml("templates/build.yml", "...") -> absolute path"""
    def _write(relative: str, body: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
        return path
    return _write
