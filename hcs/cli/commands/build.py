from __future__ import annotations

import typer

from hcs.cli.commands._helpers import exit_on_error
from hcs.cli.context import build_context
from hcs.services.publish import build as build_archive


def build(
    latest: bool = typer.Option(
        False,
        "--latest",
        help="Name the archive 'latest' instead of the app.json version. "
        "Do NOT use this unless you know what you are doing!",
    ),
) -> None:
    """Create a tar.gz file for the app."""
    ctx = build_context()
    ctx.console.header("Building the app")
    archive = exit_on_error(build_archive(ctx.project_root, ctx.console, latest=latest), ctx)
    ctx.console.success(f"Build finished: {archive.path}")
    ctx.console.print(f"sha1: {archive.content_hash}")
