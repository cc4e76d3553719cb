"""Static asset sync to the content store.

Discovery and upload are separate: ``iter_assets`` lazily lists the eligible
files (images and the packed archive), ``sync_assets`` fans the uploads out
over a bounded thread pool and records one ``UploadOutcome`` per file. A
failing upload never cancels its siblings; the caller always gets the full
picture.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from hcs.core.config import PublishConfig
from hcs.core.result import Err, Ok, Result
from hcs.output.console import ConsoleProtocol, Style
from hcs.services.credentials import Credentials
from hcs.services.errors import ContentStoreError, PartialUploadFailure

__all__ = [
    "ASSET_EXTENSIONS",
    "UploadOutcome",
    "PipelineOutcome",
    "ContentStore",
    "S3ContentStore",
    "MockContentStore",
    "StoreFactory",
    "s3_store_for",
    "iter_assets",
    "asset_key",
    "content_type_for",
    "sync_assets",
]

ASSET_EXTENSIONS = frozenset({".svg", ".png", ".jpeg", ".jpg", ".gz"})
EXCLUDED_DIRS = frozenset({"node_modules", ".github"})

_CONTENT_TYPES = {
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gz": "application/gzip",
}


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    path: str
    key: str
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    """Result of an accepted publish: registry message plus asset uploads."""

    message: str
    uploads: tuple[UploadOutcome, ...]

    @property
    def failed(self) -> tuple[UploadOutcome, ...]:
        return tuple(u for u in self.uploads if not u.succeeded)

    @property
    def succeeded(self) -> tuple[UploadOutcome, ...]:
        return tuple(u for u in self.uploads if u.succeeded)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        return "published" if self.success else "partially_failed"

    def failure(self) -> PartialUploadFailure | None:
        if self.success:
            return None
        return PartialUploadFailure(
            failed_paths=tuple(u.path for u in self.failed),
            total=len(self.uploads),
        )


@runtime_checkable
class ContentStore(Protocol):
    def put(self, key: str, path: Path, content_type: str) -> Result[None, str]:
        """Upload one file, publicly readable, under key."""
        ...


class S3ContentStore:
    """ContentStore writing to an S3 bucket through a boto3 client."""

    def __init__(self, client: object, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    def put(self, key: str, path: Path, content_type: str) -> Result[None, str]:
        try:
            body = path.read_bytes()
            self._client.put_object(  # type: ignore[attr-defined]
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ACL="public-read",
                ContentType=content_type,
            )
        except ClientError as e:
            return Err(str(e.response.get("Error", {}).get("Message") or e))
        except (BotoCoreError, OSError) as e:
            return Err(str(e))
        return Ok(None)


class MockContentStore:
    """ContentStore that records uploads; keys in ``fail_keys`` fail."""

    def __init__(self, fail_keys: set[str] | None = None) -> None:
        self.fail_keys = set(fail_keys or ())
        self.puts: list[tuple[str, str]] = []

    def put(self, key: str, path: Path, content_type: str) -> Result[None, str]:
        self.puts.append((key, content_type))
        if key in self.fail_keys:
            return Err("Access Denied (mock)")
        return Ok(None)


StoreFactory = Callable[[Credentials, PublishConfig], Result[ContentStore, ContentStoreError]]


def s3_store_for(
    credentials: Credentials, config: PublishConfig
) -> Result[ContentStore, ContentStoreError]:
    """Build a store with its own boto3 session bound to the resolved credentials.

    Client creation reads the local AWS config (e.g. ``AWS_PROFILE``) and can
    fail before any request is made.
    """
    try:
        session = boto3.Session(
            aws_access_key_id=credentials.key_id,
            aws_secret_access_key=credentials.secret,
            region_name=config.region,
        )
        client = session.client(
            "s3",
            config=BotoConfig(max_pool_connections=max(10, config.upload_workers)),
        )
    except BotoCoreError as e:
        return Err(ContentStoreError(str(e)))
    return Ok(S3ContentStore(client, config.bucket))


def iter_assets(
    root: Path, on_error: Callable[[Path, OSError], None] | None = None
) -> Iterator[Path]:
    """Yield eligible asset files under root, in sorted order.

    A path that cannot be listed or stat'ed is reported to on_error and skipped;
    without on_error the OSError propagates.
    """
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        if on_error is None:
            raise
        on_error(root, e)
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir() and not entry.is_symlink()
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            if on_error is None:
                raise
            on_error(entry, e)
            continue
        if is_dir:
            if entry.name in EXCLUDED_DIRS:
                continue
            yield from iter_assets(entry, on_error)
        elif is_file and entry.suffix.lower() in ASSET_EXTENSIONS:
            yield entry


def asset_key(root: Path, path: Path, prefix: str) -> str:
    rel = path.relative_to(root).as_posix()
    return f"{prefix.rstrip('/')}/{rel}"


def content_type_for(path: Path) -> str:
    suffix = path.suffix.lower()
    known = _CONTENT_TYPES.get(suffix)
    if known:
        return known
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def _upload(
    store: ContentStore, root: Path, path: Path, key: str, console: ConsoleProtocol
) -> UploadOutcome:
    rel = path.relative_to(root).as_posix()
    result = store.put(key, path, content_type_for(path))
    if isinstance(result, Err):
        console.error(f"Could not upload {key}: {result.error}")
        return UploadOutcome(path=rel, key=key, succeeded=False, error=result.error)
    console.print(f"Uploaded {rel} as {key}", Style.DIM)
    return UploadOutcome(path=rel, key=key, succeeded=True)


def sync_assets(
    root: Path,
    prefix: str,
    store: ContentStore,
    console: ConsoleProtocol,
    *,
    workers: int = 8,
) -> list[UploadOutcome]:
    """Upload every eligible asset and wait for all of them to settle."""
    console.print("Upload assets to the content store", Style.DIM)
    unreadable: list[tuple[Path, OSError]] = []
    paths = list(iter_assets(root, lambda p, e: unreadable.append((p, e))))
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = [
            pool.submit(_upload, store, root, p, asset_key(root, p, prefix), console)
            for p in paths
        ]
        outcomes: list[UploadOutcome] = []
        for path, future in zip(paths, futures):
            try:
                outcomes.append(future.result())
            except Exception as e:  # recorded per file like any other upload failure
                rel = path.relative_to(root).as_posix()
                key = asset_key(root, path, prefix)
                console.error(f"Could not upload {key}: {e}")
                outcomes.append(UploadOutcome(path=rel, key=key, succeeded=False, error=str(e)))

    # Paths that could not be listed are reported as failed uploads.
    for directory, error in unreadable:
        rel = directory.relative_to(root).as_posix()
        key = asset_key(root, directory, prefix)
        console.error(f"Could not read {rel}: {error}")
        outcomes.append(UploadOutcome(path=rel, key=key, succeeded=False, error=str(error)))
    return outcomes
