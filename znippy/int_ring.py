"""Fixed-capacity FIFO ring of chunk indexes."""

from __future__ import annotations

from collections import deque

MINI_SIZE = 64  # ~1 GB * 0.75 / 10 MB
MEDIUM_SIZE = 512  # ~8 GB * 0.75 / 10 MB
LARGE_SIZE = 2048  # ~32 GB * 0.75 / 10 MB
STORLEK_ENORM = 256_000  # ~2.44 TB at 10 MB per chunk

_TIERS = (MINI_SIZE, MEDIUM_SIZE, LARGE_SIZE)


def _capacity_for(max_chunks: int) -> int:
    for size in _TIERS:
        if max_chunks <= size:
            return size
    return STORLEK_ENORM


class RingBuffer:
    """A FIFO of integers with a capacity picked from a few fixed tiers.

    The ring starts full, holding ``0 .. capacity - 1`` in order.
    """

    def __init__(self, max_chunks: int) -> None:
        self._capacity = _capacity_for(max_chunks)
        self._items: deque[int] = deque(range(self._capacity))

    def pop(self) -> int:
        """Remove and return the oldest value; raise IndexError when empty."""
        if not self._items:
            raise IndexError("pop from empty ring buffer")
        return self._items.popleft()

    def push(self, val: int) -> None:
        """Append a value; raise OverflowError when the ring is full."""
        if len(self._items) >= self._capacity:
            raise OverflowError("push to full ring buffer")
        self._items.append(int(val))

    def is_empty(self) -> bool:
        return not self._items

    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"RingBuffer(len={len(self)}, capacity={self._capacity})"