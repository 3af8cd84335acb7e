import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum

RGB = tuple[int, int, int]

# application extensions that carry an animation loop count
LOOPING_APPLICATIONS = (b"NETSCAPE2.0", b"ANIMEXTS1.0")


class DisposalMethod(IntEnum):
    NONE = 0
    DO_NOT_DISPOSE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

    @property
    def description(self) -> str:
        return DISPOSAL_DESCRIPTIONS[self]


DISPOSAL_DESCRIPTIONS = {
    DisposalMethod.NONE: "No disposal specified",
    DisposalMethod.DO_NOT_DISPOSE: "Do not dispose",
    DisposalMethod.RESTORE_BACKGROUND: "Restore to background",
    DisposalMethod.RESTORE_PREVIOUS: "Restore to previous",
}


@dataclass(frozen=True)
class ColorTable:
    colors: tuple[RGB, ...]
    sorted: bool = False

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> RGB:
        return self.colors[index]

    def __iter__(self) -> Iterator[RGB]:
        return iter(self.colors)


@dataclass(frozen=True)
class GraphicControlExtension:
    disposal_method: DisposalMethod = DisposalMethod.NONE
    user_input: bool = False
    has_transparency: bool = False
    delay_time: int = 0  # 1/100ths of a second
    transparent_index: int = 0


@dataclass(frozen=True)
class ApplicationExtension:
    identifier: bytes
    auth_code: bytes
    sub_blocks: tuple[bytes, ...] = ()

    @property
    def name(self) -> bytes:
        return self.identifier + self.auth_code

    @property
    def data(self) -> bytes:
        return b"".join(self.sub_blocks)

    @property
    def loop_count(self) -> int | None:
        """Iterations from a NETSCAPE2.0-style block (0 = forever), None if this block has none."""
        if self.name not in LOOPING_APPLICATIONS:
            return None
        # sub-block id 1 is the loop count, others (e.g. id 2, buffering) are skipped
        for block in self.sub_blocks:
            if len(block) == 3 and block[0] == 1:
                return struct.unpack("<H", block[1:3])[0]
        return None


@dataclass(frozen=True)
class Frame:
    left: int
    top: int
    width: int
    height: int
    interlaced: bool
    local_color_table: ColorTable | None
    disposal_method: DisposalMethod
    delay_time: int
    user_input: bool
    transparent_index: int | None
    indices: bytes = field(repr=False)
    pixels: tuple[RGB | None, ...] = field(repr=False)

    def pixel(self, x: int, y: int) -> RGB | None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} frame")
        return self.pixels[y * self.width + x]

    def rows(self) -> Iterator[tuple[RGB | None, ...]]:
        for y in range(self.height):
            yield self.pixels[y * self.width:(y + 1) * self.width]


@dataclass(frozen=True)
class GIFDocument:
    version: str
    width: int
    height: int
    global_color_table: ColorTable | None
    background_index: int
    pixel_aspect_ratio: int
    color_resolution: int
    frames: tuple[Frame, ...] = ()
    comments: tuple[bytes, ...] = ()
    applications: tuple[ApplicationExtension, ...] = ()

    @property
    def loop_count(self) -> int | None:
        for application in self.applications:
            if application.loop_count is not None:
                return application.loop_count
        return None

    @property
    def total_duration(self) -> int:
        return sum(frame.delay_time for frame in self.frames)

    @property
    def aspect_ratio(self) -> float | None:
        if not self.pixel_aspect_ratio:
            return None
        return (self.pixel_aspect_ratio + 15) / 64
