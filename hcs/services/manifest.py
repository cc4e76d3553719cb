"""Release descriptor loading.

Reads everything a release needs from the project root:

- ``app.json``: id, version, localized name/description/tags and the
  metadata the store displays (author, permissions, images, drivers...)
- ``README*.txt`` (or ``README*.md`` when no text readme exists): the long
  description, one file per language
- ``.homeychangelog.json``: optional changelog, version -> language -> text
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from hcs.core.result import Err, Ok, Result
from hcs.core.structured import StrDict, as_obj_list, as_str_dict, as_text_map, get_str
from hcs.services.errors import ManifestError

__all__ = [
    "APP_MANIFEST",
    "CHANGELOG_SIDECAR",
    "ReleaseDescriptor",
    "load_descriptor",
    "read_readmes",
    "read_changelog",
]

APP_MANIFEST = "app.json"
CHANGELOG_SIDECAR = ".homeychangelog.json"
DEFAULT_CATEGORY = "general"

# app.json fields forwarded to the registry as-is
PASSTHROUGH_FIELDS = (
    "icon",
    "brandColor",
    "source",
    "homepage",
    "support",
    "images",
    "contributing",
    "bugs",
    "homeyCommunityTopicId",
    "signals",
    "flow",
    "discovery",
    "drivers",
)

Changelog = dict[str, dict[str, str]]


def _empty_text_map() -> dict[str, str]:
    return {}


def _empty_tags() -> dict[str, tuple[str, ...]]:
    return {}


def _empty_changelog() -> Changelog:
    return {}


def _empty_extras() -> StrDict:
    return {}


@dataclass(frozen=True, slots=True)
class ReleaseDescriptor:
    """Normalized, read-only snapshot of the project metadata."""

    app_id: str
    version: str
    name: dict[str, str] = field(default_factory=_empty_text_map)
    summary: dict[str, str] = field(default_factory=_empty_text_map)
    description: dict[str, str] = field(default_factory=_empty_text_map)
    tags: dict[str, tuple[str, ...]] = field(default_factory=_empty_tags)
    category: tuple[str, ...] = (DEFAULT_CATEGORY,)
    compatibility: str | None = None
    sdk: int | None = None
    author: object = None
    contributors: object = None
    permissions: tuple[str, ...] = ()
    changelog: Changelog = field(default_factory=_empty_changelog)
    extras: StrDict = field(default_factory=_empty_extras)

    @property
    def asset_prefix(self) -> str:
        """Content store prefix for this release's assets."""
        return f"{self.app_id}/{self.version}"


def _category(raw: object) -> tuple[str, ...]:
    if isinstance(raw, str) and raw:
        return (raw,)
    items = as_obj_list(raw)
    if items:
        return tuple(str(c) for c in items)
    return (DEFAULT_CATEGORY,)


def _tags(raw: object) -> dict[str, tuple[str, ...]]:
    table = as_str_dict(raw)
    if table is None:
        return {}
    out: dict[str, tuple[str, ...]] = {}
    for lang, value in table.items():
        items = as_obj_list(value)
        if items is not None:
            out[lang] = tuple(str(t) for t in items)
    return out


def _changelog(raw: object) -> Changelog | None:
    table = as_str_dict(raw)
    if table is None:
        return None
    out: Changelog = {}
    for version, entry in table.items():
        texts = as_text_map(entry)
        if texts is None:
            return None
        out[version] = texts
    return out


def _readme_language(filename: str, suffix: str) -> str | None:
    lower = filename.lower()
    if not lower.endswith(suffix) or "readme" not in lower:
        return None
    if lower == f"readme{suffix}":
        return "en"
    parts = lower.split(".")
    # README.nl.txt -> nl
    return parts[1] if len(parts) > 2 else None


def read_readmes(project_root: Path) -> dict[str, str]:
    """Collect localized readmes, preferring ``.txt`` over ``.md`` files."""
    names = sorted(p.name for p in project_root.iterdir() if p.is_file())
    for suffix in (".txt", ".md"):
        texts: dict[str, str] = {}
        for name in names:
            lang = _readme_language(name, suffix)
            if lang is not None:
                texts[lang] = (project_root / name).read_text(encoding="utf-8")
        if texts:
            return texts
    return {}


def read_changelog(project_root: Path) -> Result[Changelog | None, ManifestError]:
    """Load the changelog sidecar; Ok(None) when the project has none."""
    path = project_root / CHANGELOG_SIDECAR
    if not path.exists():
        return Ok(None)
    try:
        data: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(ManifestError(path, f"unreadable changelog ({e})"))
    changelog = _changelog(data)
    if changelog is None:
        return Err(ManifestError(path, "expected {version: {language: text}}"))
    return Ok(changelog)


def load_descriptor(project_root: Path) -> Result[ReleaseDescriptor, ManifestError]:
    """Build the release descriptor for the app in project_root."""
    path = project_root / APP_MANIFEST
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError(path, "not found (run hcs from the app's root folder)"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(ManifestError(path, f"unreadable ({e})"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ManifestError(path, "root must be a JSON object"))

    app_id = get_str(data, "id")
    version = get_str(data, "version")
    if app_id is None:
        return Err(ManifestError(path, "missing 'id'"))
    if version is None:
        return Err(ManifestError(path, "missing 'version'"))

    changelog = read_changelog(project_root)
    if isinstance(changelog, Err):
        return changelog

    try:
        readmes = read_readmes(project_root)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(path, f"could not read readme files ({e})"))

    sdk = data.get("sdk")
    permissions = as_obj_list(data.get("permissions")) or []

    return Ok(
        ReleaseDescriptor(
            app_id=app_id,
            version=version,
            name=as_text_map(data.get("name")) or {},
            summary=as_text_map(data.get("description")) or {},
            description=readmes,
            tags=_tags(data.get("tags")),
            category=_category(data.get("category")),
            compatibility=get_str(data, "compatibility"),
            sdk=sdk if isinstance(sdk, int) and not isinstance(sdk, bool) else None,
            author=data.get("author"),
            contributors=data.get("contributors"),
            permissions=tuple(str(p) for p in permissions),
            changelog=changelog.value or {},
            extras={k: data[k] for k in PASSTHROUGH_FIELDS if k in data},
        )
    )
