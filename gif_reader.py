import struct
from bisect import bisect_right
from dataclasses import dataclass

from gif_errors import TruncatedBufferError


@dataclass(frozen=True)
class ByteCursor:
    """
    Read position over an immutable buffer.

    Reads never modify the cursor; they return the value together with a new cursor
    placed after it, so every parse step hands its advanced position back to the caller.
    """

    data: bytes
    offset: int = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    def read(self, length: int) -> tuple[bytes, "ByteCursor"]:
        if length < 0 or length > self.remaining:
            raise TruncatedBufferError(self.offset, length, max(self.remaining, 0))
        end = self.offset + length
        return self.data[self.offset:end], ByteCursor(self.data, end)

    def read_u8(self) -> tuple[int, "ByteCursor"]:
        chunk, cursor = self.read(1)
        return chunk[0], cursor

    def read_u16(self) -> tuple[int, "ByteCursor"]:
        (value,), cursor = self.unpack("<H")
        return value, cursor

    def unpack(self, fmt: str) -> tuple[tuple, "ByteCursor"]:
        chunk, cursor = self.read(struct.calcsize(fmt))
        return struct.unpack(fmt, chunk), cursor


@dataclass(frozen=True)
class SubBlockData:
    """Payload of a sub-block chain, with the buffer offset each payload chunk came from."""

    payload: bytes
    chunk_starts: tuple[int, ...]  # offset into payload where each chunk begins
    chunk_offsets: tuple[int, ...]  # buffer offset of each chunk's first byte
    start: int  # buffer offset of the first length byte

    @property
    def chunks(self) -> tuple[bytes, ...]:
        ends = self.chunk_starts[1:] + (len(self.payload),)
        return tuple(self.payload[s:e] for s, e in zip(self.chunk_starts, ends))

    def buffer_offset(self, position: int) -> int:
        """Map a byte position in the concatenated payload back to the buffer."""
        if not self.chunk_starts:
            return self.start
        index = max(bisect_right(self.chunk_starts, position) - 1, 0)
        return self.chunk_offsets[index] + position - self.chunk_starts[index]


def read_sub_blocks(cursor: ByteCursor) -> tuple[SubBlockData, ByteCursor]:
    """Read length-prefixed sub-blocks up to and including the zero-length terminator."""
    start = cursor.offset
    chunks: list[bytes] = []
    chunk_starts: list[int] = []
    chunk_offsets: list[int] = []
    size = 0

    block_size, cursor = cursor.read_u8()
    while block_size:
        chunk_starts.append(size)
        chunk_offsets.append(cursor.offset)
        chunk, cursor = cursor.read(block_size)
        chunks.append(chunk)
        size += block_size
        block_size, cursor = cursor.read_u8()

    data = SubBlockData(
        payload=b"".join(chunks),
        chunk_starts=tuple(chunk_starts),
        chunk_offsets=tuple(chunk_offsets),
        start=start,
    )
    return data, cursor


def skip_sub_blocks(cursor: ByteCursor) -> ByteCursor:
    block_size, cursor = cursor.read_u8()
    while block_size:
        _, cursor = cursor.read(block_size)
        block_size, cursor = cursor.read_u8()
    return cursor
