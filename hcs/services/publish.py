"""Build and publish pipelines.

``publish`` runs strictly in order, each step feeding the next:

    descriptor -> archive -> locales -> credentials -> content store
      -> signed request -> registry submission -> (accepted) asset sync

Nothing is uploaded unless the registry accepted the release. Once it has,
upload failures no longer fail the pipeline: they come back inside the
``PipelineOutcome`` so the caller can report an incomplete sync instead of a
failed publish.
"""

from __future__ import annotations

import time
from pathlib import Path

from hcs.core.config import PublishConfig
from hcs.core.result import Err, Ok, Result
from hcs.output.console import ConsoleProtocol, Style
from hcs.services.archive import ArchiveResult, create_archive
from hcs.services.assets import PipelineOutcome, StoreFactory, sync_assets
from hcs.services.credentials import CredentialResolver
from hcs.services.errors import ManifestError, PackError, PublishError
from hcs.services.locales import assemble_locales
from hcs.services.manifest import APP_MANIFEST, load_descriptor
from hcs.services.registry import RegistryClient, submit
from hcs.services.signing import build_publish_request, serialize_request, sign_request

__all__ = ["build", "publish"]


def build(
    project_root: Path,
    console: ConsoleProtocol,
    *,
    latest: bool = False,
) -> Result[ArchiveResult, ManifestError | PackError]:
    """Pack the app without publishing it."""
    console.print(f"Loading '{project_root / APP_MANIFEST}'", Style.DIM)
    descriptor = load_descriptor(project_root)
    if isinstance(descriptor, Err):
        return descriptor
    return create_archive(project_root, descriptor.value, latest=latest, console=console)


def publish(
    project_root: Path,
    console: ConsoleProtocol,
    *,
    config: PublishConfig,
    resolver: CredentialResolver,
    registry: RegistryClient,
    store_factory: StoreFactory,
    force: bool = False,
    now_ms: int | None = None,
) -> Result[PipelineOutcome, PublishError]:
    """Publish the app in project_root and sync its assets.

    Args:
        project_root: App folder containing app.json.
        console: Progress output.
        config: Registry and content store settings.
        resolver: Credential resolver; consulted once.
        registry: Client used to send the signed request.
        store_factory: Builds the content store from the resolved credentials;
            called before submission.
        force: Ask the registry to overwrite an existing version.
        now_ms: Timestamp for the release document (defaults to now).

    Returns:
        Ok(PipelineOutcome) once the registry accepted the release, even when
        some uploads failed; Err for every failure before that point.
    """
    console.print(f"Loading '{project_root / APP_MANIFEST}'", Style.DIM)
    loaded = load_descriptor(project_root)
    if isinstance(loaded, Err):
        return loaded
    descriptor = loaded.value

    archive = create_archive(project_root, descriptor, console=console)
    if isinstance(archive, Err):
        return archive
    console.print(f"{archive.value.filename} created successfully", Style.DIM)

    console.print("Processing locales", Style.DIM)
    locales = assemble_locales(descriptor, console=console)

    credentials = resolver.resolve()
    if isinstance(credentials, Err):
        return credentials

    # Built before submission: a failure here leaves nothing registered.
    store = store_factory(credentials.value, config)
    if isinstance(store, Err):
        return store

    request = build_publish_request(
        descriptor,
        archive.value,
        locales,
        force=force,
        timestamp_ms=now_ms if now_ms is not None else int(time.time() * 1000),
    )
    envelope = sign_request(serialize_request(request), credentials.value, config)
    if isinstance(envelope, Err):
        return envelope

    console.print(f"Send request to the API {envelope.value.url}", Style.DIM)
    accepted = submit(envelope.value, registry)
    if isinstance(accepted, Err):
        return accepted
    if accepted.value:
        console.print(accepted.value, Style.DIM)

    uploads = sync_assets(
        project_root,
        descriptor.asset_prefix,
        store.value,
        console,
        workers=config.upload_workers,
    )
    return Ok(PipelineOutcome(message=accepted.value, uploads=tuple(uploads)))
