"""Per-language merge of the release's translatable fields.

Sources are applied in a fixed order: name, summary, description, tags,
changelog. When two sources set the same field for a language, the later one
wins; in practice this means the readme ``description`` replaces the
app.json ``description`` (the summary) wherever both exist.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from hcs.output.console import ConsoleProtocol, Style
from hcs.services.manifest import ReleaseDescriptor

__all__ = ["LocaleEntry", "LocaleBundle", "assemble_locales", "bundle_as_dict"]


def _empty_changelog() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class LocaleEntry:
    """Translatable fields for one language; None means "not provided"."""

    name: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None
    changelog: dict[str, str] = field(default_factory=_empty_changelog)

    def as_dict(self) -> dict[str, object]:
        """Serialize, leaving out fields no source provided."""
        out: dict[str, object] = {}
        if self.name is not None:
            out["name"] = self.name
        if self.description is not None:
            out["description"] = self.description
        if self.tags is not None:
            out["tags"] = list(self.tags)
        if self.changelog:
            out["changelog"] = dict(self.changelog)
        return out


LocaleBundle = dict[str, LocaleEntry]


def _merge_field(bundle: LocaleBundle, lang: str, **values: object) -> None:
    bundle[lang] = replace(bundle.get(lang, LocaleEntry()), **values)


def assemble_locales(
    descriptor: ReleaseDescriptor,
    changelog: Mapping[str, Mapping[str, str]] | None = None,
    *,
    console: ConsoleProtocol | None = None,
) -> LocaleBundle:
    """Build the language-keyed bundle for a release.

    Args:
        descriptor: Loaded release descriptor.
        changelog: Changelog to use instead of ``descriptor.changelog``.
        console: Optional console for progress lines.
    """
    bundle: LocaleBundle = {}

    def note(source: str, langs: list[str]) -> None:
        if console is not None and langs:
            console.print(f"Processing locales from the {source}: {', '.join(langs)}", Style.DIM)

    note("name", list(descriptor.name))
    for lang, text in descriptor.name.items():
        _merge_field(bundle, lang, name=text)

    note("summary", list(descriptor.summary))
    for lang, text in descriptor.summary.items():
        _merge_field(bundle, lang, description=text)

    note("description", list(descriptor.description))
    for lang, text in descriptor.description.items():
        _merge_field(bundle, lang, description=text)

    note("tags", list(descriptor.tags))
    for lang, tags in descriptor.tags.items():
        _merge_field(bundle, lang, tags=tuple(tags))

    entries = descriptor.changelog if changelog is None else changelog
    for version, texts in entries.items():
        note(f"changelog {version}", list(texts))
        for lang, text in texts.items():
            current = bundle.get(lang, LocaleEntry())
            _merge_field(bundle, lang, changelog={**current.changelog, version: text})

    return bundle


def bundle_as_dict(bundle: LocaleBundle) -> dict[str, dict[str, object]]:
    return {lang: entry.as_dict() for lang, entry in bundle.items()}
