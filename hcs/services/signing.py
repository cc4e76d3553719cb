"""Publish request construction and AWS SigV4 signing.

The request body is serialized exactly once. The same ``bytes`` object is
handed to the signer and carried in the envelope for transport; the registry
rejects any request whose body differs from what was signed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials as BotoCredentials
from botocore.exceptions import BotoCoreError

from hcs.core.config import PublishConfig
from hcs.core.result import Err, Ok, Result
from hcs.services.archive import ArchiveResult
from hcs.services.credentials import Credentials
from hcs.services.errors import SignatureBuildError
from hcs.services.locales import LocaleBundle, bundle_as_dict
from hcs.services.manifest import ReleaseDescriptor

__all__ = [
    "PublishRequest",
    "SignedEnvelope",
    "build_publish_request",
    "serialize_request",
    "sign_request",
]

DEFAULT_BRAND_COLOR = "#000000"

# Recomputed by the HTTP client from the URL and the body.
_TRANSPORT_HEADERS = frozenset({"host", "content-length"})


@dataclass(frozen=True, slots=True)
class PublishRequest:
    descriptor: ReleaseDescriptor
    archive: ArchiveResult
    locales: LocaleBundle
    force: bool
    timestamp_ms: int

    def app_document(self) -> dict[str, object]:
        d = self.descriptor
        extras = d.extras
        images = extras.get("images")
        images_table = images if isinstance(images, dict) else {}
        ts = self.timestamp_ms

        version: dict[str, object] = {
            "id": d.app_id,
            "summary": d.summary or None,
            "hash": self.archive.content_hash,
            "filename": self.archive.filename,
            "added": ts,
            "modified": ts,
            "sdk": d.sdk,
            "version": d.version,
            "compatibility": d.compatibility,
            "name": d.name or None,
            "icon": extras.get("icon"),
            "brandColor": extras.get("brandColor") or DEFAULT_BRAND_COLOR,
            "tags": {lang: list(tags) for lang, tags in d.tags.items()} or None,
            "category": list(d.category),
            "author": d.author,
            "contributors": d.contributors,
            "source": extras.get("source"),
            "homepage": extras.get("homepage"),
            "support": extras.get("support"),
            "permissions": list(d.permissions),
            "contributing": extras.get("contributing"),
            "bugs": extras.get("bugs"),
            "homeyCommunityTopicId": extras.get("homeyCommunityTopicId"),
            "signals": extras.get("signals"),
            "flow": extras.get("flow"),
            "discovery": extras.get("discovery"),
            "drivers": extras.get("drivers"),
            "description": dict(d.description),
            "enabled": True,
        }
        # Unset fields are left out entirely; images always carries both slots.
        version = {k: v for k, v in version.items() if v is not None}
        version["images"] = {
            "small": images_table.get("small"),
            "large": images_table.get("large"),
        }
        if d.changelog:
            version["changelog"] = d.changelog
        version["locales"] = bundle_as_dict(self.locales)

        app: dict[str, object] = {"id": d.app_id, "added": ts, "modified": ts}
        if d.changelog:
            app["changelog"] = d.changelog
        app["versions"] = [version]
        return app

    def as_payload(self) -> dict[str, object]:
        return {"app": self.app_document(), "force": self.force}


@dataclass(frozen=True, slots=True)
class SignedEnvelope:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes


def build_publish_request(
    descriptor: ReleaseDescriptor,
    archive: ArchiveResult,
    locales: LocaleBundle,
    *,
    force: bool,
    timestamp_ms: int,
) -> PublishRequest:
    return PublishRequest(
        descriptor=descriptor,
        archive=archive,
        locales=locales,
        force=force,
        timestamp_ms=timestamp_ms,
    )


def serialize_request(request: PublishRequest) -> bytes:
    """Canonical wire form of the request body."""
    return json.dumps(request.as_payload(), separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def sign_request(
    body: bytes,
    credentials: Credentials,
    config: PublishConfig,
) -> Result[SignedEnvelope, SignatureBuildError]:
    """Sign body for a POST to the registry endpoint.

    The returned envelope carries ``body`` itself, not a re-serialization.
    """
    if not credentials.key_id or not credentials.secret:
        return Err(SignatureBuildError("access key id and secret are required to sign"))
    if not body:
        return Err(SignatureBuildError("refusing to sign an empty request body"))

    request = AWSRequest(
        method="POST",
        url=config.api_url,
        data=body,
        headers={"content-type": "application/json"},
    )
    try:
        signer = SigV4Auth(
            BotoCredentials(credentials.key_id, credentials.secret),
            config.signing_service,
            config.region,
        )
        signer.add_auth(request)
    except (BotoCoreError, ValueError) as e:
        return Err(SignatureBuildError(f"could not sign request: {e}"))

    headers = {
        k: str(v) for k, v in request.headers.items() if k.lower() not in _TRANSPORT_HEADERS
    }
    return Ok(SignedEnvelope(method="POST", url=config.api_url, headers=headers, body=body))
