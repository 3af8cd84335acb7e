from gif_frame import assemble_frame, deinterlace, interlaced_row_order, resolve_pixels
from gif_model import ColorTable, DisposalMethod, GraphicControlExtension

from gif_builders import interlace

TABLE = ColorTable(((0, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)))


def descriptor(width, height, interlaced=False):
    return {
        "left": 1,
        "top": 2,
        "width": width,
        "height": height,
        "interlaced": interlaced,
        "sort_flag": False,
        "local_color_table": None,
    }


def test_interlaced_row_order():
    assert list(interlaced_row_order(10)) == [0, 8, 4, 2, 6, 1, 3, 5, 7, 9]
    assert list(interlaced_row_order(1)) == [0]


def test_interlaced_row_order_is_permutation():
    for height in range(1, 40):
        assert sorted(interlaced_row_order(height)) == list(range(height))


def test_deinterlace():
    width, height = 3, 11
    rows = [y % 4 for y in range(height) for _ in range(width)]
    stored = bytes(interlace(rows, width, height))
    assert stored != bytes(rows)
    assert deinterlace(stored, width, height) == bytes(rows)


def test_resolve_pixels_transparency():
    assert resolve_pixels(b"\x00\x02\x01", TABLE, 2) == ((0, 0, 0), None, (255, 0, 0))
    assert resolve_pixels(b"\x02", TABLE, None) == ((0, 255, 0),)


def test_assemble_without_gce():
    frame = assemble_frame(descriptor(2, 1), b"\x01\x03", TABLE, None)
    assert frame.left == 1
    assert frame.top == 2
    assert frame.disposal_method == DisposalMethod.NONE
    assert frame.delay_time == 0
    assert frame.transparent_index is None
    assert frame.pixels == ((255, 0, 0), (0, 0, 255))


def test_assemble_with_gce():
    gce = GraphicControlExtension(
        disposal_method=DisposalMethod.RESTORE_PREVIOUS,
        user_input=True,
        has_transparency=True,
        delay_time=25,
        transparent_index=3,
    )
    frame = assemble_frame(descriptor(2, 1), b"\x01\x03", TABLE, gce)
    assert frame.disposal_method == DisposalMethod.RESTORE_PREVIOUS
    assert frame.user_input
    assert frame.delay_time == 25
    assert frame.transparent_index == 3
    assert frame.pixel(1, 0) is None


def test_transparent_index_ignored_without_flag():
    gce = GraphicControlExtension(has_transparency=False, transparent_index=1)
    frame = assemble_frame(descriptor(1, 1), b"\x01", TABLE, gce)
    assert frame.transparent_index is None
    assert frame.pixels == ((255, 0, 0),)


def test_assemble_interlaced():
    width, height = 2, 9
    rows = [y % 4 for y in range(height) for _ in range(width)]
    stored = bytes(interlace(rows, width, height))
    frame = assemble_frame(descriptor(width, height, interlaced=True), stored, TABLE, None)
    assert frame.interlaced
    assert frame.indices == bytes(rows)
    assert [row[0] for row in frame.rows()] == [TABLE[y % 4] for y in range(height)]
