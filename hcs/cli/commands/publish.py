from __future__ import annotations

import typer

from hcs.cli.commands._helpers import exit_on_error, exit_with_code
from hcs.cli.context import build_context
from hcs.cli.prompts import TyperPrompter
from hcs.output.errors import print_publish_error, publish_error_exit_code
from hcs.services.assets import s3_store_for
from hcs.services.credentials import CredentialResolver, KeyringCredentialStore
from hcs.services.publish import publish as run_publish
from hcs.services.registry import UrllibRegistryClient


def publish(
    force: bool = typer.Option(
        False,
        "--force",
        help="CAUTION: This will override the version if it already exists in the store!",
    ),
) -> None:
    """Build the app and upload it to the Homey Community Store."""
    ctx = build_context()
    ctx.console.header("Publishing the app")

    resolver = CredentialResolver(
        KeyringCredentialStore(ctx.config.keyring_service),
        TyperPrompter(),
        ctx.console,
    )
    result = run_publish(
        ctx.project_root,
        ctx.console,
        config=ctx.config,
        resolver=resolver,
        registry=UrllibRegistryClient(timeout=ctx.config.timeout),
        store_factory=s3_store_for,
        force=force,
    )
    outcome = exit_on_error(result, ctx)

    failure = outcome.failure()
    if failure is not None:
        print_publish_error(failure, ctx.console)
        exit_with_code(publish_error_exit_code(failure))

    ctx.console.success(
        f"Successfully published the app ({len(outcome.uploads)} assets uploaded)."
    )
