"""Metadata records for chunks, files and reports."""

from __future__ import annotations

from dataclasses import dataclass, field

CHECKSUM_SIZE = 32


def _checked_checksum(value: bytes) -> bytes:
    checksum = bytes(value)
    if len(checksum) != CHECKSUM_SIZE:
        raise ValueError(
            f"checksum must be {CHECKSUM_SIZE} bytes, got {len(checksum)}"
        )
    return checksum


@dataclass(frozen=True)
class ChunkMeta:
    """One chunk stored in the data file."""

    file_index: int
    chunk_index: int
    offset: int
    length: int
    compressed: bool
    uncompressed_size: int
    checksum: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "checksum", _checked_checksum(self.checksum))


@dataclass(frozen=True)
class ChunkMetaCompact:
    """A chunk record without its file and sequence numbers."""

    offset: int
    length: int
    checksum: bytes
    compressed: bool
    uncompressed_size: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "checksum", _checked_checksum(self.checksum))


@dataclass
class WriterStats:
    """Running totals kept by the data-file writer."""

    offset: int = 0
    total_chunks: int = 0
    total_written_bytes: int = 0


@dataclass
class FileMeta:
    """A whole file: its archive path and its chunks."""

    relative_path: str
    chunks: list[ChunkMeta] = field(default_factory=list)


@dataclass
class ChunkGroup:
    """The chunks belonging to one file inside the pipeline."""

    file_index: int
    chunks: list[ChunkMeta] = field(default_factory=list)


@dataclass
class CompressionReport:
    """Summary of a compression run."""

    total_files: int = 0
    compressed_files: int = 0
    uncompressed_files: int = 0
    total_dirs: int = 0
    total_bytes_in: int = 0
    total_bytes_out: int = 0
    compressed_bytes: int = 0
    uncompressed_bytes: int = 0
    compression_ratio: float = 0.0