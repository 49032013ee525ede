"""Yes/no policies consulted before mutating prerequisites."""
from __future__ import annotations

from typing import Callable, List, Protocol, TextIO
import sys


class ConsentPolicy(Protocol):
    def confirm(self, question: str, *, default: bool = False) -> bool:
        ...


class AutoConsent:
    """Answers every question with a fixed value and remembers what was asked."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.questions: List[str] = []

    def confirm(self, question: str, *, default: bool = False) -> bool:
        self.questions.append(question)
        return self.answer


class PromptConsent:
    """Asks on the terminal; falls back to the default when stdin is not a TTY."""

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self._stdin = stdin
        self._prompt = prompt

    def _interactive(self) -> bool:
        stream = self._stdin or sys.stdin
        return bool(stream) and stream.isatty()

    def confirm(self, question: str, *, default: bool = False) -> bool:
        if not self._interactive():
            return default
        suffix = "[Y/n]" if default else "[y/N]"
        try:
            answer = self._prompt(f"{question} {suffix} ").strip().lower()
        except EOFError:
            return default
        if not answer:
            return default
        return answer in {"y", "yes"}


__all__ = ["AutoConsent", "ConsentPolicy", "PromptConsent"]
