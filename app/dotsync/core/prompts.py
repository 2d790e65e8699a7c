"""Interactive prompt abstraction.

Components never read from the terminal directly; they ask a Prompter.
The CLI wires in TyperPrompter, tests substitute scripted fakes.
"""

from abc import ABC, abstractmethod
from typing import TypeVar

import typer

T = TypeVar("T")


class Prompter(ABC):
    """Abstract source of operator answers."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Defaults to no."""

    @abstractmethod
    def ask(self, message: str) -> str:
        """Ask for a free-form answer. An empty answer is allowed."""

    def choose(self, message: str, choices: dict[str, T]) -> T:
        """Ask until the answer starts with one of the choice keys.

        Args:
            message: Question shown to the operator.
            choices: Mapping of single-letter key to the value returned.

        Returns:
            The value of the chosen key.
        """
        while True:
            answer = self.ask(message).strip().lower()
            if answer and answer[0] in choices:
                return choices[answer[0]]
            self.invalid_choice(answer)

    def invalid_choice(self, answer: str) -> None:
        """Hook called when an answer matched none of the choices."""


class TyperPrompter(Prompter):
    """Prompter reading answers from the controlling terminal via Typer."""

    def confirm(self, message: str) -> bool:
        return typer.confirm(message, default=False)

    def ask(self, message: str) -> str:
        return typer.prompt(message, default="", show_default=False)

    def invalid_choice(self, answer: str) -> None:
        typer.echo("Invalid choice.")
