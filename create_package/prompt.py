"""
Operator prompts.

What to ask is described by a declarative ``Question``; how it gets answered
is up to an ``AnswerSource``. The terminal source uses rich prompts, the
scripted source reads answers from a mapping so runs can be driven without a
terminal.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import yaml
from rich.console import Console
from rich.prompt import Confirm, Prompt

from create_package.exceptions import InvalidConfigError, MissingAnswerError

logger = logging.getLogger(__name__)


class QuestionKind(str, Enum):
    TEXT = "text"
    PASSWORD = "password"
    CHOICE = "choice"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class Question:
    """
    A single question for the operator.

    Attributes:
        key: Stable identifier, used to look up scripted answers
        kind: How the answer is collected
        message: Text shown to the operator
        default: Answer used when the operator just presses enter
        choices: Allowed answers for CHOICE questions
    """

    key: str
    kind: QuestionKind
    message: str
    default: Any = None
    choices: Sequence[str] = field(default_factory=tuple)


class AnswerSource(Protocol):
    def answer(self, question: Question) -> Any: ...


class RichAnswerSource:
    """Answers questions interactively in the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def answer(self, question: Question) -> Any:
        if question.kind == QuestionKind.CONFIRM:
            return Confirm.ask(
                question.message,
                default=bool(question.default),
                console=self.console,
            )

        if question.kind == QuestionKind.CHOICE:
            return Prompt.ask(
                question.message,
                choices=list(question.choices),
                default=question.default,
                console=self.console,
            )

        return Prompt.ask(
            question.message,
            default=question.default,
            password=question.kind == QuestionKind.PASSWORD,
            show_default=question.kind != QuestionKind.PASSWORD,
            console=self.console,
        )


class ScriptedAnswerSource:
    """
    Answers questions from a mapping of question keys to answers.

    Questions without a scripted answer go to ``fallback`` when one is given,
    otherwise they raise ``MissingAnswerError``.
    """

    def __init__(self, answers: Mapping[str, Any], fallback: AnswerSource | None = None):
        self.answers = dict(answers)
        self.fallback = fallback
        self.asked: list[str] = []

    @classmethod
    def from_file(cls, path: Path, fallback: AnswerSource | None = None) -> "ScriptedAnswerSource":
        if not path.exists():
            raise InvalidConfigError(f"Answers file not found: {path}")
        with open(path) as f:
            answers = yaml.safe_load(f) or {}
        if not isinstance(answers, dict):
            raise InvalidConfigError(
                f"Answers file must contain a mapping, got {type(answers).__name__}"
            )
        return cls(answers, fallback=fallback)

    def answer(self, question: Question) -> Any:
        self.asked.append(question.key)
        if question.key in self.answers:
            return self.answers[question.key]
        if self.fallback is not None:
            return self.fallback.answer(question)
        raise MissingAnswerError(question.key, question.message)


class Prompter:
    """Asks typed questions through an answer source and normalizes the answers."""

    def __init__(self, source: AnswerSource):
        self.source = source

    def text(self, key: str, message: str, default: str | None = None) -> str:
        answer = self.source.answer(Question(key, QuestionKind.TEXT, message, default))
        if answer is None or str(answer) == "":
            answer = default if default is not None else ""
        return str(answer)

    def password(self, key: str, message: str) -> str:
        answer = self.source.answer(Question(key, QuestionKind.PASSWORD, message))
        if answer is None or str(answer) == "":
            raise MissingAnswerError(key, message)
        return str(answer)

    def choice(
        self,
        key: str,
        message: str,
        choices: Sequence[str],
        default: str | None = None,
    ) -> str:
        question = Question(key, QuestionKind.CHOICE, message, default, tuple(choices))
        answer = self.source.answer(question)
        if answer is None or answer == "":
            answer = default
        for candidate in choices:
            if str(answer).lower() == candidate.lower():
                return candidate
        raise InvalidConfigError(
            f"Invalid answer {answer!r} for '{key}'. Must be one of: {', '.join(choices)}"
        )

    def confirm(self, key: str, message: str, default: bool = False) -> bool:
        answer = self.source.answer(Question(key, QuestionKind.CONFIRM, message, default))
        if isinstance(answer, str):
            return _parse_bool(answer, key)
        return bool(answer)


def _parse_bool(value: str, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise InvalidConfigError(f"Answer for '{key}' must be a boolean (yes/no)")
