"""Compressing a directory tree into a data file plus an index."""

from __future__ import annotations

import logging
import math
import os
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

import zstandard

from .config import StrategicConfig, get_config
from .index import (
    _new_hasher,
    add_file_checksums_and_cleanup,
    build_index,
    should_skip_compression,
    write_index,
)
from .meta import ChunkMeta, CompressionReport, WriterStats

_log = logging.getLogger(__name__)

DATA_SUFFIX = ".zdata"
INDEX_SUFFIX = ".znippy"


@dataclass(frozen=True)
class _Encoded:
    """A chunk ready to be appended to the data file."""

    file_index: int
    chunk_index: int
    stored: bytes
    compressed: bool
    uncompressed_size: int
    checksum: bytes


def _scan(input_dir: Path) -> tuple[list[Path], int]:
    """Regular files below ``input_dir`` depth first, and the number of directories."""
    if input_dir.is_file() and not input_dir.is_symlink():
        return [input_dir], 0
    files: list[Path] = []
    total_dirs = 0
    for dirpath, dirnames, filenames in os.walk(input_dir):
        total_dirs += 1
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file() and not path.is_symlink():
                files.append(path)
    return files, total_dirs


def _file_chunks(handle: BinaryIO, block_size: int, path: Path) -> Iterator[bytes]:
    """Blocks of the file; a single empty block for an empty file."""
    has_data = False
    while True:
        try:
            block = handle.read(block_size)
        except OSError as exc:
            _log.warning("[reader] error reading file %s: %s", path, exc)
            return
        if not block:
            if not has_data:
                yield b""
            return
        has_data = True
        yield block


class _Encoder:
    """Compresses and checksums chunks; one zstd context per worker thread."""

    def __init__(self, config: StrategicConfig) -> None:
        self._level = config.compression_level
        self._threads = max(0, config.max_core_in_compress)
        self._local = threading.local()

    def _compressor(self) -> zstandard.ZstdCompressor:
        compressor = getattr(self._local, "compressor", None)
        if compressor is None:
            compressor = zstandard.ZstdCompressor(level=self._level, threads=self._threads)
            self._local.compressor = compressor
        return compressor

    def __call__(self, file_index: int, chunk_index: int, data: bytes, skip: bool) -> _Encoded:
        stored = data if skip else self._compressor().compress(data)
        hasher = _new_hasher()
        hasher.update(stored)
        return _Encoded(
            file_index=file_index,
            chunk_index=chunk_index,
            stored=stored,
            compressed=not skip,
            uncompressed_size=len(data),
            checksum=hasher.digest(),
        )


def compress_dir(
    input_dir: str | os.PathLike[str],
    output: str | os.PathLike[str],
    no_skip: bool = False,
) -> CompressionReport:
    """Compress every file below ``input_dir`` into ``output``'s data and index files."""
    input_dir = Path(input_dir)
    output = Path(output)
    config = get_config()

    all_files, total_dirs = _scan(input_dir)
    _log.debug("found %d files to compress in %d directories", len(all_files), total_dirs)

    zdata_path = output.with_suffix(DATA_SUFFIX)
    index_path = output.with_suffix(INDEX_SUFFIX)
    block_size = config.file_split_block_size
    in_flight = max(1, config.max_core_in_flight)

    metas_per_file: list[list[ChunkMeta]] = [[] for _ in all_files]
    stats = WriterStats()
    compressed_files = uncompressed_files = 0
    compressed_bytes = uncompressed_bytes = 0
    encoder = _Encoder(config)

    with open(zdata_path, "wb") as zdata, ThreadPoolExecutor(in_flight) as pool:

        def write(encoded: _Encoded) -> None:
            zdata.write(encoded.stored)
            metas_per_file[encoded.file_index].append(
                ChunkMeta(
                    file_index=encoded.file_index,
                    chunk_index=encoded.chunk_index,
                    offset=stats.offset,
                    length=len(encoded.stored),
                    compressed=encoded.compressed,
                    uncompressed_size=encoded.uncompressed_size,
                    checksum=encoded.checksum,
                )
            )
            stats.offset += len(encoded.stored)
            stats.total_chunks += 1
            stats.total_written_bytes += len(encoded.stored)

        pending: deque[Future[_Encoded]] = deque()
        for file_index, path in enumerate(all_files):
            skip = not no_skip and should_skip_compression(path)
            size = path.stat().st_size
            if skip:
                _log.debug("[reader] skipping compression for %s", path)
                uncompressed_files += 1
                uncompressed_bytes += size
            else:
                compressed_files += 1
                compressed_bytes += size

            with open(path, "rb") as handle:
                for chunk_index, block in enumerate(_file_chunks(handle, block_size, path)):
                    pending.append(pool.submit(encoder, file_index, chunk_index, block, skip))
                    while len(pending) >= in_flight:
                        write(pending.popleft().result())
        while pending:
            write(pending.popleft().result())

    _log.info(
        "[writer] wrote %d chunks, %d bytes", stats.total_chunks, stats.total_written_bytes
    )

    rows = build_index(all_files, metas_per_file)
    rows = add_file_checksums_and_cleanup(rows, True)
    write_index(index_path, rows)
    _log.info("index with %d rows written to %s", len(rows), index_path)

    if uncompressed_bytes > 0:
        denominator = stats.total_written_bytes - uncompressed_bytes
        ratio = (compressed_bytes / denominator) * 100.0 if denominator > 0 else math.inf
    else:
        ratio = 0.0

    return CompressionReport(
        total_files=len(all_files),
        compressed_files=compressed_files,
        uncompressed_files=uncompressed_files,
        total_dirs=total_dirs,
        total_bytes_in=compressed_bytes + uncompressed_bytes,
        total_bytes_out=stats.total_written_bytes,
        compressed_bytes=compressed_bytes,
        uncompressed_bytes=uncompressed_bytes,
        compression_ratio=ratio,
    )