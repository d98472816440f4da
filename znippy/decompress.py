"""Reading, verifying and extracting archives."""

from __future__ import annotations

import io
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, Iterable

import zstandard

from .config import get_config
from .index import (
    EMPTY_CHECKSUM,
    IndexRow,
    VerifyReport,
    _combine_checksums,
    _new_hasher,
    read_index,
)
from .meta import CHECKSUM_SIZE

_log = logging.getLogger(__name__)


class DecompressionError(ValueError):
    """A chunk could not be decompressed."""


def decompress_chunk_stream(data: bytes) -> bytes:
    """Decompress one or more concatenated zstd frames."""
    if not data:
        return b""
    block_size = get_config().zstd_output_buffer_size
    parts = []
    try:
        with zstandard.ZstdDecompressor().stream_reader(
            io.BytesIO(data), read_across_frames=True
        ) as reader:
            while block := reader.read(block_size):
                parts.append(block)
    except zstandard.ZstdError as exc:
        raise DecompressionError(f"zstd decompression error: {exc}") from exc
    return b"".join(parts)


def extract_file_checksums(rows: Iterable[IndexRow]) -> list[bytes]:
    """The file checksums of all rows, fitted to the checksum size; zeros where unset."""
    result = []
    for row in rows:
        if row.checksum is None:
            result.append(EMPTY_CHECKSUM)
        else:
            head = row.checksum[:CHECKSUM_SIZE]
            result.append(head + bytes(CHECKSUM_SIZE - len(head)))
    return result


def _read_stored(zdata: BinaryIO, offset: int, length: int) -> bytes:
    zdata.seek(offset)
    data = zdata.read(length)
    if len(data) != length:
        raise ValueError(
            f"data file truncated: wanted {length} bytes at offset {offset}, got {len(data)}"
        )
    return data


def _digest(data: bytes) -> bytes:
    hasher = _new_hasher()
    hasher.update(data)
    return hasher.digest()


def decompress_archive(
    index_path: str | os.PathLike[str],
    save_data: bool,
    out_dir: str | os.PathLike[str],
) -> VerifyReport:
    """Check every file against its checksum and, when asked, write it out."""
    index_path = Path(index_path)
    out_dir = Path(out_dir)
    rows = read_index(index_path)
    expected_checksums = extract_file_checksums(rows)
    zdata_path = index_path.with_suffix(".zdata")
    workers = max(1, get_config().max_core_in_compress)
    report = VerifyReport()

    with open(zdata_path, "rb") as zdata, ThreadPoolExecutor(workers) as pool:
        for file_index, (row, expected) in enumerate(zip(rows, expected_checksums)):
            report.total_files += 1
            report.total_bytes += row.uncompressed_size

            stored = [_read_stored(zdata, c.offset, c.length) for c in row.chunks or ()]
            calculated = _combine_checksums(pool.map(_digest, stored))

            if calculated != expected:
                _log.error(
                    "checksum mismatch for file index %d: expected %s, calculated %s",
                    file_index,
                    expected.hex(),
                    calculated.hex(),
                )
                report.corrupt_files += 1
                report.corrupt_bytes += row.uncompressed_size
                continue

            if row.compressed:
                try:
                    pieces = list(pool.map(decompress_chunk_stream, stored))
                except DecompressionError as exc:
                    _log.error("decompression failed for file index %d: %s", file_index, exc)
                    report.corrupt_files += 1
                    report.corrupt_bytes += row.uncompressed_size
                    continue
            else:
                pieces = stored

            if save_data:
                target = out_dir / f"file_{file_index}"
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(b"".join(pieces))

            report.verified_files += 1
            report.verified_bytes += row.uncompressed_size

    return report


def extract_archive(
    archive_path: str | os.PathLike[str], output_dir: str | os.PathLike[str]
) -> VerifyReport:
    """Verify and extract every file of the archive into ``output_dir``."""
    return decompress_archive(archive_path, True, output_dir)


def verify_archive_integrity(path: str | os.PathLike[str]) -> VerifyReport:
    """Verify every file of the archive without writing anything."""
    return decompress_archive(path, False, Path(os.devnull))