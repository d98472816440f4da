import itertools

import pytest

from znippy.chunks import ChunkPool, ChunkRevolver, IterRevolver
from znippy.config import StrategicConfig


def _config(block=16, chunks=4):
    return StrategicConfig(
        max_core_in_flight=1,
        max_core_in_compress=0,
        max_mem_allowed=block * chunks,
        min_free_memory_ratio=0.0,
        file_split_block_size=block,
        max_chunks=chunks,
        compression_level=19,
        zstd_output_buffer_size=32,
    )


def test_revolver_hands_out_each_index_once():
    revolver = ChunkRevolver(_config())
    indexes = [revolver.get_chunk().index for _ in range(4)]
    assert indexes == [0, 1, 2, 3]
    with pytest.raises(RuntimeError):
        revolver.get_chunk()


def test_revolver_chunk_size():
    revolver = ChunkRevolver(_config(block=16))
    assert revolver.chunk_size() == 16
    assert len(revolver.get_chunk()) == 16


def test_returned_chunk_is_reused():
    revolver = ChunkRevolver(_config())
    chunks = [revolver.get_chunk() for _ in range(4)]
    revolver.return_chunk(chunks[2].index)
    assert revolver.get_chunk().index == chunks[2].index


def test_written_data_visible_in_chunk_view():
    revolver = ChunkRevolver(_config())
    revolver.get_chunk()
    chunk = revolver.get_chunk()
    payload = b"hello"
    chunk.data[: len(payload)] = payload
    assert bytes(revolver.chunk_view(chunk.index, len(payload))) == payload


def test_chunks_do_not_overlap():
    revolver = ChunkRevolver(_config())
    first = revolver.get_chunk()
    second = revolver.get_chunk()
    first.data[:] = b"a" * len(first)
    second.data[:] = b"b" * len(second)
    assert bytes(revolver.chunk_view(first.index, len(first))) == b"a" * len(first)


def test_chunk_view_is_read_only_and_bounded():
    revolver = ChunkRevolver(_config(block=16))
    view = revolver.chunk_view(0, 4)
    with pytest.raises(TypeError):
        view[0] = 1
    with pytest.raises(ValueError):
        revolver.chunk_view(0, 17)


def test_pool_requires_chunks():
    with pytest.raises(ValueError):
        ChunkPool(_config(chunks=0))


def test_pool_indexes_and_underrun():
    pool = ChunkPool(_config(chunks=3))
    assert [pool.get_index() for _ in range(3)] == [0, 1, 2]
    with pytest.raises(RuntimeError):
        pool.get_index()
    pool.return_index(1)
    assert pool.get_index() == 1


def test_pool_buffer_is_shared():
    pool = ChunkPool(_config(block=8))
    buffer = pool.get_buffer(0)
    buffer[0] = 42
    assert pool.get_buffer(0)[0] == 42
    assert len(pool.get_buffer(1)) == 8
    assert pool.get_buffer(1)[0] == 0


def test_iter_revolver_cycles():
    items = ["a", "b", "c"]
    taken = list(itertools.islice(IterRevolver(items), 7))
    assert taken == ["a", "b", "c", "a", "b", "c", "a"]


def test_iter_revolver_yields_shared_items():
    shards = [[], []]
    revolver = IterRevolver(shards)
    for value in range(5):
        next(revolver).append(value)
    assert shards == [[0, 2, 4], [1, 3]]


def test_iter_revolver_empty_stops():
    with pytest.raises(StopIteration):
        next(IterRevolver([]))