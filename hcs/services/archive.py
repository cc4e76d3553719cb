"""App packaging: ``{id}-v{version}.tar.gz`` plus its SHA-1 fingerprint.

Design goals:

- The fingerprint is taken from the archive bytes, not from the source tree,
  so it matches exactly what the store will serve.
- Repacking an unchanged tree yields a byte-identical archive: members are
  sorted, owner fields are blanked and the gzip header carries no timestamp.
- Dependencies (``node_modules``), dotfiles and the archive itself are never
  packed.
"""

from __future__ import annotations

import gzip
import hashlib
import tarfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from hcs.core.result import Err, Ok, Result
from hcs.output.console import ConsoleProtocol, Style
from hcs.services.errors import HashError, PackagingError, PackError
from hcs.services.manifest import ReleaseDescriptor

__all__ = [
    "DEPENDENCY_DIR",
    "ArchiveResult",
    "archive_filename",
    "iter_archive_members",
    "create_archive",
    "fingerprint",
]

DEPENDENCY_DIR = "node_modules"
LATEST_ALIAS = "latest"

_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class ArchiveResult:
    path: Path
    filename: str
    content_hash: str
    size: int


def archive_filename(descriptor: ReleaseDescriptor, *, latest: bool = False) -> str:
    version = LATEST_ALIAS if latest else f"v{descriptor.version}"
    return f"{descriptor.app_id}-{version}.tar.gz"


def _is_excluded(rel: Path, output_name: str) -> bool:
    if DEPENDENCY_DIR in rel.parts:
        return True
    if any(part.startswith(".") for part in rel.parts):
        return True
    return rel.as_posix() == output_name


def iter_archive_members(root: Path, output_name: str) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, arcname)`` for every file that belongs in the archive.

    Directories are walked in sorted order; excluded directories are pruned
    rather than descended into.
    """
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        rel = entry.relative_to(root)
        yield from _walk(root, rel, output_name)


def _walk(root: Path, rel: Path, output_name: str) -> Iterator[tuple[Path, str]]:
    if _is_excluded(rel, output_name):
        return
    path = root / rel
    if path.is_dir() and not path.is_symlink():
        for child in sorted(path.iterdir(), key=lambda p: p.name):
            yield from _walk(root, rel / child.name, output_name)
    elif path.is_file():
        yield path, rel.as_posix()


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    info.mtime = int(info.mtime)
    return info


def _write_archive(root: Path, out_path: Path) -> int:
    count = 0
    with out_path.open("wb") as raw:
        with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
            with tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tar:
                for path, arcname in iter_archive_members(root, out_path.name):
                    tar.add(path, arcname=arcname, recursive=False, filter=_normalize)
                    count += 1
    return count


def fingerprint(path: Path) -> Result[str, HashError]:
    """Stream the archive through SHA-1."""
    h = hashlib.sha1()
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                h.update(chunk)
    except OSError as e:
        return Err(HashError(path, str(e)))
    return Ok(h.hexdigest())


def create_archive(
    root: Path,
    descriptor: ReleaseDescriptor,
    *,
    latest: bool = False,
    console: ConsoleProtocol | None = None,
) -> Result[ArchiveResult, PackError]:
    """Pack the project at root and fingerprint the result.

    A failed build leaves no archive behind.
    """
    filename = archive_filename(descriptor, latest=latest)
    out_path = root / filename
    if console is not None:
        console.print(f"Filename determined: '{filename}'", Style.DIM)

    try:
        count = _write_archive(root, out_path)
    except (OSError, tarfile.TarError) as e:
        out_path.unlink(missing_ok=True)
        return Err(PackagingError(out_path, str(e)))

    digest = fingerprint(out_path)
    if isinstance(digest, Err):
        return digest

    try:
        size = out_path.stat().st_size
    except OSError as e:
        return Err(HashError(out_path, str(e)))

    if console is not None:
        console.print(f"Packed {count} files into {filename} ({size} bytes)", Style.DIM)
    return Ok(ArchiveResult(path=out_path, filename=filename, content_hash=digest.value, size=size))
