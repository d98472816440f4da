"""Archive index: one row per file with its chunk locations and checksums."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Sequence

from .meta import CHECKSUM_SIZE, ChunkMeta, ChunkMetaCompact

_log = logging.getLogger(__name__)

INDEX_FORMAT = "znippy-index"
INDEX_VERSION = 1
EMPTY_CHECKSUM = bytes(CHECKSUM_SIZE)

COMPRESSED_EXTENSIONS = frozenset(
    {
        "zip", "gz", "bz2", "xz", "lz", "lzma",
        "7z", "rar", "cab", "jar", "war", "ear",
        "zst", "sz", "lz4", "tgz", "txz", "tbz",
        "apk", "dmg", "deb", "rpm", "arrow", "mpeg",
        "mpg", "jpeg", "jpg", "gif", "bmp", "png",
        "webp", "webm",
    }
)


def _new_hasher() -> Any:
    """A fresh hasher producing checksums of the archive's checksum size."""
    return hashlib.blake2b(digest_size=CHECKSUM_SIZE)


def _combine_checksums(checksums: Iterable[bytes | None]) -> bytes:
    """File checksum from its chunk checksums, in order; zeros for no chunks."""
    parts = list(checksums)
    if not parts:
        return EMPTY_CHECKSUM
    hasher = _new_hasher()
    for part in parts:
        hasher.update(part or b"")
    return hasher.digest()


@dataclass(frozen=True)
class IndexChunk:
    """Location of one chunk in the data file."""

    offset: int
    length: int
    checksum: bytes | None = None


@dataclass(frozen=True)
class IndexRow:
    """One file in the archive index."""

    relative_path: str
    compressed: bool
    uncompressed_size: int
    checksum: bytes | None = None
    chunks: tuple[IndexChunk, ...] | None = None


@dataclass
class VerifyReport:
    """Outcome of verifying or extracting an archive."""

    total_files: int = 0
    verified_files: int = 0
    corrupt_files: int = 0
    total_bytes: int = 0
    verified_bytes: int = 0
    corrupt_bytes: int = 0


def is_probably_compressed(path: str | os.PathLike[str]) -> bool:
    """True when the file's extension names a format that is already compressed."""
    suffix = Path(path).suffix
    return bool(suffix) and suffix[1:].lower() in COMPRESSED_EXTENSIONS


def should_skip_compression(path: str | os.PathLike[str]) -> bool:
    return is_probably_compressed(path)


def convert_to_compact(
    nested: Iterable[Iterable[ChunkMeta]], total_files: int
) -> list[list[ChunkMetaCompact]]:
    """Regroup per-thread chunk lists into per-file compact lists."""
    result: list[list[ChunkMetaCompact]] = [[] for _ in range(total_files)]
    for thread_metas in nested:
        for meta in thread_metas:
            result[meta.file_index].append(
                ChunkMetaCompact(
                    offset=meta.offset,
                    length=meta.length,
                    checksum=meta.checksum,
                    compressed=meta.compressed,
                    uncompressed_size=meta.uncompressed_size,
                )
            )
    return result


def build_index(
    paths: Sequence[str | os.PathLike[str]], metas: Sequence[Sequence[ChunkMeta]]
) -> list[IndexRow]:
    """One row per path; the file checksum is left unset."""
    rows = []
    for path, chunks in zip(paths, metas, strict=True):
        relative_path = os.fsdecode(path)
        if not chunks:
            rows.append(IndexRow(relative_path, False, 0, None, None))
            continue
        rows.append(
            IndexRow(
                relative_path=relative_path,
                compressed=chunks[0].compressed,
                uncompressed_size=sum(chunk.uncompressed_size for chunk in chunks),
                checksum=None,
                chunks=tuple(
                    IndexChunk(chunk.offset, chunk.length, chunk.checksum)
                    for chunk in chunks
                ),
            )
        )
    return rows


def add_file_checksums_and_cleanup(
    rows: Iterable[IndexRow], nuke_chunk_checksums: bool
) -> list[IndexRow]:
    """Set each file checksum from its chunk checksums, optionally dropping those."""
    result = []
    for row in rows:
        chunks = row.chunks or ()
        file_checksum = _combine_checksums(chunk.checksum for chunk in chunks)
        new_chunks = row.chunks
        if nuke_chunk_checksums and row.chunks is not None:
            new_chunks = tuple(replace(chunk, checksum=None) for chunk in row.chunks)
        result.append(replace(row, checksum=file_checksum, chunks=new_chunks))
    return result


def _hex_or_none(value: bytes | None) -> str | None:
    return None if value is None else value.hex()


def _bytes_or_none(value: str | None) -> bytes | None:
    return None if value is None else bytes.fromhex(value)


def _row_to_json(row: IndexRow) -> dict[str, Any]:
    return {
        "relative_path": row.relative_path,
        "compressed": row.compressed,
        "uncompressed_size": row.uncompressed_size,
        "checksum": _hex_or_none(row.checksum),
        "chunks": None
        if row.chunks is None
        else [
            {
                "offset": chunk.offset,
                "length": chunk.length,
                "checksum": _hex_or_none(chunk.checksum),
            }
            for chunk in row.chunks
        ],
    }


def _row_from_json(item: dict[str, Any]) -> IndexRow:
    chunks = item.get("chunks")
    return IndexRow(
        relative_path=str(item["relative_path"]),
        compressed=bool(item["compressed"]),
        uncompressed_size=int(item["uncompressed_size"]),
        checksum=_bytes_or_none(item.get("checksum")),
        chunks=None
        if chunks is None
        else tuple(
            IndexChunk(
                offset=int(chunk["offset"]),
                length=int(chunk["length"]),
                checksum=_bytes_or_none(chunk.get("checksum")),
            )
            for chunk in chunks
        ),
    )


def write_index(path: str | os.PathLike[str], rows: Iterable[IndexRow]) -> None:
    """Write the index file."""
    document = {
        "format": INDEX_FORMAT,
        "version": INDEX_VERSION,
        "rows": [_row_to_json(row) for row in rows],
    }
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(document, handle)


def read_index(path: str | os.PathLike[str]) -> list[IndexRow]:
    """Read an index file; raise ValueError when it is not a valid index."""
    with open(path, encoding="utf-8") as handle:
        try:
            document = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{os.fsdecode(path)} is not a znippy index") from exc
    if not isinstance(document, dict) or document.get("format") != INDEX_FORMAT:
        raise ValueError(f"{os.fsdecode(path)} is not a znippy index")
    if document.get("version") != INDEX_VERSION:
        raise ValueError(f"unsupported index version {document.get('version')!r}")
    try:
        rows = [_row_from_json(item) for item in document["rows"]]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed index row in {os.fsdecode(path)}: {exc}") from exc
    _log.debug("read %d index rows from %s", len(rows), os.fsdecode(path))
    return rows


def list_archive_contents(path: str | os.PathLike[str]) -> list[IndexRow]:
    """Print one line per archived file and return the rows."""
    rows = read_index(path)
    for row in rows:
        chunk_count = len(row.chunks) if row.chunks else 0
        checksum = row.checksum.hex() if row.checksum else "-"
        print(
            f"{row.relative_path}\tcompressed={row.compressed}\t"
            f"size={row.uncompressed_size}\tchunks={chunk_count}\tchecksum={checksum}"
        )
    return rows