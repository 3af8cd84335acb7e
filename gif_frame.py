from collections.abc import Iterator

from gif_model import ColorTable, Frame, GraphicControlExtension, RGB

# (first row, row step) of the four interlace passes
INTERLACE_PASSES = ((0, 8), (4, 8), (2, 4), (1, 2))


def interlaced_row_order(height: int) -> Iterator[int]:
    """Generate destination row numbers in the order an interlaced image stores them."""
    for start, step in INTERLACE_PASSES:
        yield from range(start, height, step)


def deinterlace(indices: bytes, width: int, height: int) -> bytes:
    """Reorder interlaced rows (1 byte/pixel) into top-to-bottom order."""
    rows: list[bytes] = [b""] * height
    for source_row, dest_row in enumerate(interlaced_row_order(height)):
        rows[dest_row] = indices[source_row * width:(source_row + 1) * width]
    return b"".join(rows)


def resolve_pixels(indices: bytes, color_table: ColorTable,
                   transparent_index: int | None) -> tuple[RGB | None, ...]:
    palette: list[RGB | None] = list(color_table.colors)
    if transparent_index is not None and transparent_index < len(palette):
        palette[transparent_index] = None
    return tuple(palette[i] for i in indices)


def assemble_frame(descriptor: dict, indices: bytes, color_table: ColorTable,
                   gce: GraphicControlExtension | None) -> Frame:
    """
    Build a Frame from decoded image data.

    descriptor is the dict returned by gif_parser.parse_image_descriptor(); indices are
    in storage order and are reordered here when the image is interlaced.
    """

    if gce is None:
        gce = GraphicControlExtension()
    width = descriptor["width"]
    height = descriptor["height"]

    if descriptor["interlaced"]:
        indices = deinterlace(indices, width, height)

    transparent_index = gce.transparent_index if gce.has_transparency else None

    return Frame(
        left=descriptor["left"],
        top=descriptor["top"],
        width=width,
        height=height,
        interlaced=descriptor["interlaced"],
        local_color_table=descriptor["local_color_table"],
        disposal_method=gce.disposal_method,
        delay_time=gce.delay_time,
        user_input=gce.user_input,
        transparent_index=transparent_index,
        indices=indices,
        pixels=resolve_pixels(indices, color_table, transparent_index),
    )
