from __future__ import annotations

import typer


class TyperPrompter:
    """Prompter reading answers from the terminal."""

    def ask(self, message: str, *, secret: bool = False) -> str:
        answer: str = typer.prompt(
            message,
            default="",
            show_default=False,
            hide_input=secret,
        )
        return answer
