import dataclasses

import pytest

from znippy.meta import (
    ChunkGroup,
    ChunkMeta,
    ChunkMetaCompact,
    CompressionReport,
    FileMeta,
    WriterStats,
)

CHECKSUM = bytes(range(32))


def _chunk(**overrides):
    values = dict(
        file_index=1,
        chunk_index=2,
        offset=0,
        length=10,
        compressed=True,
        uncompressed_size=20,
        checksum=CHECKSUM,
    )
    values.update(overrides)
    return ChunkMeta(**values)


def test_chunk_meta_keeps_checksum():
    meta = _chunk(checksum=bytearray(CHECKSUM))
    assert meta.checksum == CHECKSUM
    assert isinstance(meta.checksum, bytes)


@pytest.mark.parametrize("size", [0, 31, 33])
def test_chunk_meta_rejects_wrong_checksum_size(size):
    with pytest.raises(ValueError):
        _chunk(checksum=b"\x00" * size)


def test_compact_rejects_wrong_checksum_size():
    with pytest.raises(ValueError):
        ChunkMetaCompact(offset=0, length=1, checksum=b"x", compressed=False, uncompressed_size=1)


def test_chunk_meta_is_immutable_and_replaceable():
    meta = _chunk()
    with pytest.raises(dataclasses.FrozenInstanceError):
        meta.offset = 5
    moved = dataclasses.replace(meta, offset=99)
    assert moved.offset == 99
    assert dataclasses.replace(moved, offset=meta.offset) == meta


def test_writer_stats_start_at_zero():
    stats = WriterStats()
    assert (stats.offset, stats.total_chunks, stats.total_written_bytes) == (0, 0, 0)


def test_file_meta_and_group_have_independent_lists():
    first, second = FileMeta("a.txt"), FileMeta("b.txt")
    first.chunks.append(_chunk())
    assert second.chunks == []
    group = ChunkGroup(file_index=3)
    group.chunks.append(_chunk(file_index=3))
    assert ChunkGroup(file_index=4).chunks == []
    assert group.chunks[0].file_index == group.file_index


def test_compression_report_defaults_and_round_trip():
    report = CompressionReport(total_files=2, compressed_files=1, uncompressed_files=1)
    assert report.compression_ratio == 0.0
    assert CompressionReport(**dataclasses.asdict(report)) == report