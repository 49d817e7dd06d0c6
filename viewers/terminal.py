"""Viewer dla terminala (konsoli)."""

from typing import Sequence

import click

from core.models import Sign
from viewers.base import BaseViewer


class TerminalViewer(BaseViewer):
    """
    Viewer rozmawiający z użytkownikiem przez terminal.

    Odpowiedzi wpisuje się symbolem znaku: "+" (tak), "-" (nie), "~" (nie wiem).
    """

    def debug(self, message: str) -> None:
        click.echo(f"DEBUG: {message}")

    def print(self, message: str) -> None:
        click.echo(message)

    def print_error(self, message: str) -> None:
        click.echo(f"ERROR: {message}", err=True)

    def ask(self, question: str, options: Sequence[Sign]) -> Sign:
        choices = click.Choice([option.value for option in options])
        reply = click.prompt(question, type=choices, show_choices=True)
        return Sign.parse(reply)
