class GifError(Exception):
    """Base class for all decoding failures. `offset` is the buffer position where the problem was detected."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.message: str = message
        self.offset: int = offset

    def __str__(self) -> str:
        return f"{self.message} (at offset {self.offset})"


class FormatError(GifError):
    """Not a GIF, or a top-level block introducer that isn't recognized."""


class TruncatedBufferError(GifError):
    def __init__(self, offset: int, wanted: int, available: int):
        super().__init__(
            f"Unexpected end of data: wanted {wanted} bytes, {available} available",
            offset
        )
        self.wanted: int = wanted
        self.available: int = available


class DecodeError(GifError):
    """
    Image data that can't be turned into pixels.

    `partial` holds a GIFDocument with the frames decoded before the failing one,
    when the error was raised by the decoder's block loop.
    """

    def __init__(self, message: str, offset: int, partial=None):
        super().__init__(message, offset)
        self.partial = partial
