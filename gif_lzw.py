import logging

from gif_errors import DecodeError

logger = logging.getLogger(__name__)

MAX_CODE_WIDTH = 12
MAX_DICTIONARY_SIZE = 1 << MAX_CODE_WIDTH


def lzw_decode(data: bytes, min_code_size: int, pixel_count: int, table_size: int = 256) -> bytes:
    """
    Expand GIF LZW data into color table indices.

    data:          concatenated sub-block payloads
    min_code_size: the byte that precedes the image's sub-blocks
    pixel_count:   width * height; decoding stops as soon as this many indices exist
    table_size:    length of the active color table; larger indices are rejected

    Raises DecodeError with `offset` set to the byte position within `data` where the
    problem was found; callers translate that into a buffer offset.
    """

    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    width = min_code_size + 1

    # index = code, value = expansion; the two control codes get empty placeholders
    entries: list[bytes] = [bytes((i,)) for i in range(clear_code)] + [b"", b""]
    previous: bytes | None = None

    output = bytearray()
    pos = 0          # next byte of data to load into the bit buffer
    bit_buffer = 0   # unread bits, least significant first
    bit_count = 0
    code_count = 0

    while len(output) < pixel_count:
        while bit_count < width:
            if pos >= len(data):
                raise DecodeError(
                    f"Image data ended after {len(output)} of {pixel_count} pixels",
                    pos
                )
            bit_buffer |= data[pos] << bit_count
            bit_count += 8
            pos += 1

        code = bit_buffer & ((1 << width) - 1)
        bit_buffer >>= width
        bit_count -= width
        code_count += 1

        if code == clear_code:
            del entries[end_code + 1:]
            width = min_code_size + 1
            previous = None
            continue
        if code == end_code:
            raise DecodeError(
                f"End of information code after {len(output)} of {pixel_count} pixels",
                pos - 1
            )

        if code < len(entries):
            entry = entries[code]
            if code < clear_code and code >= table_size:
                raise DecodeError(
                    f"Pixel index {code} outside color table of {table_size} entries",
                    pos - 1
                )
            if previous is not None and len(entries) < MAX_DICTIONARY_SIZE:
                entries.append(previous + entry[:1])
        elif code == len(entries) and previous is not None:
            # code refers to the entry being defined by this very step
            entry = previous + previous[:1]
            entries.append(entry)
        else:
            raise DecodeError(
                f"Invalid LZW code {code} (dictionary has {len(entries)} entries)",
                pos - 1
            )

        output += entry
        previous = entry

        # a full dictionary keeps 12-bit codes until the encoder sends a clear code
        if len(entries) == 1 << width and width < MAX_CODE_WIDTH:
            width += 1

    logger.debug(
        "LZW data: %d codes, %d of %d bytes, %d pixels",
        code_count, pos, len(data), pixel_count
    )

    return bytes(output[:pixel_count])
