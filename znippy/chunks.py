"""Preallocated chunk buffers recycled through a ring of free indexes."""

from __future__ import annotations

import logging
from collections.abc import MutableSequence
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from .config import StrategicConfig, get_config
from .int_ring import RingBuffer

_log = logging.getLogger(__name__)

T = TypeVar("T")


def _index_ring(count: int) -> RingBuffer:
    ring = RingBuffer(count)
    while not ring.is_empty():
        ring.pop()
    for index in range(count):
        ring.push(index)
    return ring


@dataclass
class RevolverChunk:
    """A writable view of one slot of a ChunkRevolver."""

    index: int
    data: memoryview

    def __len__(self) -> int:
        return len(self.data)


class ChunkRevolver:
    """One contiguous memory block split into fixed-size, reusable chunks."""

    def __init__(self, config: StrategicConfig | None = None) -> None:
        config = config or get_config()
        self._chunk_size = int(config.file_split_block_size)
        num_chunks = int(config.max_chunks)
        self._memory = bytearray(self._chunk_size * num_chunks)
        self._view = memoryview(self._memory)
        self._ring = _index_ring(num_chunks)

    def get_chunk(self) -> RevolverChunk:
        """Take the next free chunk; raise RuntimeError when none is left."""
        try:
            index = self._ring.pop()
        except IndexError:
            raise RuntimeError("ChunkRevolver underrun") from None
        offset = index * self._chunk_size
        return RevolverChunk(index, self._view[offset : offset + self._chunk_size])

    def return_chunk(self, index: int) -> None:
        """Give a chunk back for reuse."""
        self._ring.push(index)

    def chunk_view(self, index: int, used: int) -> memoryview:
        """Read-only view of the first ``used`` bytes of chunk ``index``."""
        if used < 0 or used > self._chunk_size:
            raise ValueError(f"used length {used} outside chunk of {self._chunk_size} bytes")
        offset = index * self._chunk_size
        if offset + used > len(self._memory) or index < 0:
            raise IndexError(f"chunk index {index} out of range")
        return self._view[offset : offset + used].toreadonly()

    def chunk_size(self) -> int:
        return self._chunk_size


class ChunkPool:
    """A pool of separately allocated, reusable chunk buffers."""

    def __init__(self, config: StrategicConfig | None = None) -> None:
        config = config or get_config()
        if config.max_chunks <= 0:
            raise ValueError("max_chunks must be > 0")
        chunk_size = int(config.file_split_block_size)
        self._buffers = [bytearray(chunk_size) for _ in range(config.max_chunks)]
        self._ring = _index_ring(config.max_chunks)
        _log.debug("chunk pool: %d buffers allocated", config.max_chunks)

    def get_index(self) -> int:
        """Take the next free buffer index; raise RuntimeError when none is left."""
        try:
            index = self._ring.pop()
        except IndexError:
            raise RuntimeError("ring buffer underrun: no free chunk indexes left") from None
        _log.debug("[ChunkPool] get_index -> %d", index)
        return index

    def return_index(self, index: int) -> None:
        _log.debug("[ChunkPool] return_index <- %d", index)
        self._ring.push(index)

    def get_buffer(self, index: int) -> bytearray:
        """The shared buffer for ``index``."""
        return self._buffers[index]


class IterRevolver(Generic[T]):
    """Endless iterator that cycles over the elements of a sequence in place."""

    def __init__(self, items: MutableSequence[T]) -> None:
        self._items = items
        self._position = 0

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if not self._items:
            raise StopIteration
        if self._position >= len(self._items):
            self._position = 0
        item = self._items[self._position]
        self._position += 1
        return item