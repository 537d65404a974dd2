"""Partitioned byte buffer used for in-place progress rendering.

A :class:`RenderBuffer` holds one ``bytearray`` containing a whole frame
(literal ANSI/punctuation bytes included) plus a :class:`PartitionTable`
marking the variable fields inside it. Each field can be swapped out
without rebuilding the rest of the frame; only bytes after the field move.
"""

from collections.abc import Iterable

__all__ = ["PartitionTable", "RenderBuffer"]

# Upper bound on the number of fields a table may hold
MAX_PARTS = 32


class PartitionTable:
    """Ordered, non-overlapping ``(start, end)`` ranges over one buffer.

    Bounds are stored flat as ``[s0, e0, s1, e1, ...]``. Resizing a
    partition shifts its own end and every later bound by the same delta.
    """

    __slots__ = ("_bounds",)

    def __init__(self, bounds: Iterable[int] | Iterable[tuple[int, int]], total_len: int | None = None):
        flat: list[int] = []
        for item in bounds:
            if isinstance(item, tuple):
                flat.extend(item)
            else:
                flat.append(item)
        if len(flat) % 2:
            raise ValueError("Partition bounds must come in (start, end) pairs")
        if len(flat) // 2 > MAX_PARTS:
            raise ValueError(f"At most {MAX_PARTS} partitions are supported")

        prev = 0
        for pos in flat:
            if pos < prev:
                raise ValueError(f"Partition bounds must be ascending: {flat}")
            prev = pos
        if total_len is not None and prev > total_len:
            raise ValueError(f"Partition bound {prev} exceeds buffer length {total_len}")
        self._bounds = flat

    def __len__(self) -> int:
        return len(self._bounds) // 2

    def __repr__(self) -> str:
        return f"PartitionTable({self.partitions()!r})"

    def start(self, idx: int) -> int:
        return self._bounds[idx * 2]

    def end(self, idx: int) -> int:
        return self._bounds[idx * 2 + 1]

    def length(self, idx: int) -> int:
        return self._bounds[idx * 2 + 1] - self._bounds[idx * 2]

    def is_empty(self, idx: int) -> bool:
        return self._bounds[idx * 2] == self._bounds[idx * 2 + 1]

    def range(self, idx: int) -> slice:
        return slice(self._bounds[idx * 2], self._bounds[idx * 2 + 1])

    def partitions(self) -> list[tuple[int, int]]:
        b = self._bounds
        return [(b[i], b[i + 1]) for i in range(0, len(b), 2)]

    def shift_from(self, idx: int, delta: int):
        """Move the end of ``idx`` and every later bound by ``delta``."""
        if delta < 0 and self.length(idx) < -delta:
            raise ValueError(f"Cannot shrink partition {idx} below zero")
        b = self._bounds
        for i in range(idx * 2 + 1, len(b)):
            b[i] += delta

    def clamp_from(self, idx: int, pos: int):
        """Set the end of ``idx`` and every later bound to ``pos``."""
        b = self._bounds
        for i in range(idx * 2 + 1, len(b)):
            b[i] = pos

    def zero(self):
        self._bounds = [0] * len(self._bounds)


class RenderBuffer:
    """A byte buffer with named fields that can be resized in place."""

    __slots__ = ("_buf", "_toc")

    def __init__(self, buf: bytes = b"", bounds: Iterable = ()):
        self._buf = bytearray(buf)
        self._toc = PartitionTable(bounds, len(self._buf))

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __eq__(self, other) -> bool:
        if isinstance(other, RenderBuffer):
            return self._buf == other._buf
        if isinstance(other, (bytes, bytearray)):
            return self._buf == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"RenderBuffer({bytes(self._buf)!r}, {self._toc.partitions()!r})"

    @property
    def table(self) -> PartitionTable:
        return self._toc

    def as_bytes(self) -> bytes:
        return bytes(self._buf)

    def total_len(self) -> int:
        return len(self._buf)

    def count(self, byte: bytes) -> int:
        return self._buf.count(byte)

    def length(self, idx: int) -> int:
        return self._toc.length(idx)

    def start(self, idx: int) -> int:
        return self._toc.start(idx)

    def end(self, idx: int) -> int:
        return self._toc.end(idx)

    def get(self, idx: int) -> bytes:
        return bytes(self._buf[self._toc.range(idx)])

    def clear(self):
        self._buf.clear()
        self._toc.zero()

    def resize(self, idx: int, new_len: int):
        """Grow or shrink partition ``idx`` to ``new_len`` bytes.

        Growth inserts zero bytes at the end of the partition; the caller is
        expected to overwrite them before the buffer is read.
        """
        if new_len < 0:
            raise ValueError(f"Partition {idx} cannot have a negative length: {new_len}")
        old_len = self._toc.length(idx)
        end = self._toc.end(idx)

        if new_len < old_len:
            adj = old_len - new_len
            if end == len(self._buf):
                # Last field in the buffer: truncate
                last = end - adj
                del self._buf[last:]
                self._toc.clamp_from(idx, last)
            else:
                del self._buf[end - adj : end]
                self._toc.shift_from(idx, -adj)
        elif new_len > old_len:
            adj = new_len - old_len
            self._buf[end:end] = bytes(adj)
            self._toc.shift_from(idx, adj)

    def replace(self, idx: int, data: bytes) -> bool:
        """Replace the content of partition ``idx``.

        Returns False (and touches nothing) when the content is unchanged.
        """
        rng = self._toc.range(idx)
        if self._buf[rng] == data:
            return False
        self.resize(idx, len(data))
        if data:
            self._buf[self._toc.range(idx)] = data
        return True

    def write_at(self, idx: int, data: bytes):
        """Overwrite partition ``idx`` with same-length ``data``."""
        rng = self._toc.range(idx)
        if len(data) != rng.stop - rng.start:
            raise ValueError(f"Partition {idx} is {rng.stop - rng.start} bytes, got {len(data)}")
        self._buf[rng] = data

    def extend(self, idx: int, data: bytes):
        """Append ``data`` to the end of partition ``idx``."""
        if not data:
            return
        end = self._toc.end(idx)
        self.resize(idx, self._toc.length(idx) + len(data))
        self._buf[end : end + len(data)] = data

    def truncate(self, idx: int, length: int):
        """Shrink partition ``idx`` to at most ``length`` bytes."""
        if self._toc.length(idx) > length:
            self.resize(idx, length)
