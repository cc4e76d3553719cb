"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from hcs.core.result import Err, Result
from hcs.output.errors import print_publish_error, publish_error_exit_code
from hcs.services.errors import PublishError

if TYPE_CHECKING:
    from hcs.cli.context import CLIContext


def exit_on_error[T, E: PublishError](result: Result[T, E], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code.

    Replaces the repeated pattern:
        if isinstance(result, Err):
            print_publish_error(result.error, ctx.console)
            raise typer.Exit(code=publish_error_exit_code(result.error))
        value = result.value
    """
    if isinstance(result, Err):
        print_publish_error(result.error, ctx.console)
        exit_with_code(publish_error_exit_code(result.error))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
