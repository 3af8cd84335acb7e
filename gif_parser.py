import logging
import struct
from pathlib import Path

from gif_errors import DecodeError, FormatError
from gif_frame import assemble_frame
from gif_lzw import lzw_decode
from gif_model import (
    ApplicationExtension,
    ColorTable,
    DisposalMethod,
    Frame,
    GIFDocument,
    GraphicControlExtension,
)
from gif_reader import ByteCursor, read_sub_blocks, skip_sub_blocks

logger = logging.getLogger(__name__)

# GIF Block Types
IMAGE_SEPARATOR = 0x2C
EXTENSION_INTRODUCER = 0x21
TRAILER = 0x3B

# GIF Extension Labels
PLAIN_TEXT_LABEL = 0x01
GRAPHICS_CONTROL_LABEL = 0xF9
COMMENT_LABEL = 0xFE
APPLICATION_LABEL = 0xFF

KNOWN_VERSIONS = ('87a', '89a')


def parse_header(cursor: ByteCursor) -> tuple[dict, ByteCursor]:
    start = cursor.offset
    (signature, version), cursor = cursor.unpack('3s3s')
    if signature != b'GIF':
        raise FormatError('Not a GIF file', start)
    version = version.decode('ascii', errors='replace')
    if version not in KNOWN_VERSIONS:
        logger.warning('Unknown GIF version %r', version)

    (width, height, packed, background_index, aspect_ratio), cursor = cursor.unpack('<2H3B')

    header = {
        'version': version,
        'width': width,
        'height': height,
        'global_color_table_flag': bool(packed & 0b10000000),
        'color_resolution': ((packed & 0b01110000) >> 4) + 1,
        'sort_flag': bool(packed & 0b00001000),
        'global_color_table_size': 2 << (packed & 0b00000111),
        'background_index': background_index,
        'pixel_aspect_ratio': aspect_ratio,
    }
    return header, cursor


def parse_color_table(cursor: ByteCursor, length: int, sort_flag: bool = False) -> tuple[ColorTable, ByteCursor]:
    table, cursor = cursor.read(3 * length)
    colors = tuple(
        (table[i], table[i + 1], table[i + 2]) for i in range(0, len(table), 3)
    )
    return ColorTable(colors, sort_flag), cursor


def parse_graphics_control_extension(cursor: ByteCursor) -> tuple[GraphicControlExtension, ByteCursor]:
    start = cursor.offset
    blocks, cursor = read_sub_blocks(cursor)
    if len(blocks.payload) < 4:
        raise FormatError('Graphic Control Extension is too short', start)
    packed, delay_time, transparent_index = struct.unpack('<BHB', blocks.payload[:4])

    disposal = (packed & 0b00011100) >> 2
    if disposal > DisposalMethod.RESTORE_PREVIOUS:
        logger.debug('Reserved disposal method %d treated as unspecified', disposal)
        disposal = DisposalMethod.NONE

    gce = GraphicControlExtension(
        disposal_method=DisposalMethod(disposal),
        user_input=bool(packed & 0b00000010),
        has_transparency=bool(packed & 0b00000001),
        delay_time=delay_time,
        transparent_index=transparent_index,
    )
    return gce, cursor


def parse_application_extension(cursor: ByteCursor) -> tuple[ApplicationExtension, ByteCursor]:
    # the first sub-block is the identifier + authentication code, the rest is data
    blocks, cursor = read_sub_blocks(cursor)
    chunks = blocks.chunks
    app_header = chunks[0] if chunks else b''
    application = ApplicationExtension(
        identifier=app_header[:8],
        auth_code=app_header[8:],
        sub_blocks=chunks[1:],
    )
    return application, cursor


def parse_extension(cursor: ByteCursor) -> tuple[int, object, ByteCursor]:
    # cursor must be at the label, after the '!' introducer;
    # value is a GraphicControlExtension, an ApplicationExtension, comment bytes or None
    label, cursor = cursor.read_u8()
    if label == GRAPHICS_CONTROL_LABEL:
        value, cursor = parse_graphics_control_extension(cursor)
    elif label == APPLICATION_LABEL:
        value, cursor = parse_application_extension(cursor)
    elif label == COMMENT_LABEL:
        blocks, cursor = read_sub_blocks(cursor)
        value = blocks.payload
    else:
        # Plain Text and unknown extensions are self-describing sub-block chains
        if label != PLAIN_TEXT_LABEL:
            logger.debug('Skipping unknown extension 0x%02X', label)
        value = None
        cursor = skip_sub_blocks(cursor)
    return label, value, cursor


def parse_image_descriptor(cursor: ByteCursor) -> tuple[dict, ByteCursor]:
    (left, top, width, height, packed), cursor = cursor.unpack('<4HB')

    local_color_table_flag = bool(packed & 0b10000000)
    sort_flag = bool(packed & 0b00100000)
    local_color_table = None
    if local_color_table_flag:
        local_color_table, cursor = parse_color_table(
            cursor, 2 << (packed & 0b00000111), sort_flag
        )

    descriptor = {
        'left': left,
        'top': top,
        'width': width,
        'height': height,
        'interlaced': bool(packed & 0b01000000),
        'sort_flag': sort_flag,
        'local_color_table': local_color_table,
    }
    return descriptor, cursor


def parse_image(cursor: ByteCursor, global_color_table: ColorTable | None,
                gce: GraphicControlExtension | None,
                max_pixels: int | None = None) -> tuple[Frame, ByteCursor]:
    start = cursor.offset - 1
    descriptor, cursor = parse_image_descriptor(cursor)

    color_table = descriptor['local_color_table'] or global_color_table
    if color_table is None:
        raise DecodeError('Image has no Local or Global Color Table', start)

    width, height = descriptor['width'], descriptor['height']
    pixel_count = width * height
    if max_pixels is not None and pixel_count > max_pixels:
        raise DecodeError(
            f'Image of {width}x{height} exceeds limit of {max_pixels} pixels',
            start
        )

    code_size_offset = cursor.offset
    min_code_size, cursor = cursor.read_u8()
    if not 1 <= min_code_size <= 11:
        raise DecodeError(f'Invalid LZW minimum code size {min_code_size}', code_size_offset)

    blocks, cursor = read_sub_blocks(cursor)
    try:
        indices = lzw_decode(blocks.payload, min_code_size, pixel_count, len(color_table))
    except DecodeError as e:
        raise DecodeError(e.message, blocks.buffer_offset(e.offset)) from e

    return assemble_frame(descriptor, indices, color_table, gce), cursor


class GifParser:
    # max_frames: stop after this many images (the trailer is not required then)
    # max_pixels: reject images whose width * height is larger
    def __init__(self, data: bytes, *, max_frames: int | None = None, max_pixels: int | None = None):
        self._data: bytes = bytes(data)
        self._max_frames: int | None = max_frames
        self._max_pixels: int | None = max_pixels
        self._document: GIFDocument | None = None

    @classmethod
    def from_file(cls, file_path: Path, **kwargs) -> 'GifParser':
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f'File {file_path} not found')
        return cls(file_path.read_bytes(), **kwargs)

    def parse(self) -> GIFDocument:
        if self._document is None:
            self._document = self._parse()
        return self._document

    def _parse(self) -> GIFDocument:
        cursor = ByteCursor(self._data)
        header, cursor = parse_header(cursor)

        global_color_table = None
        if header['global_color_table_flag']:
            global_color_table, cursor = parse_color_table(
                cursor, header['global_color_table_size'], header['sort_flag']
            )

        frames: list[Frame] = []
        comments: list[bytes] = []
        applications: list[ApplicationExtension] = []
        pending_gce: GraphicControlExtension | None = None

        def document() -> GIFDocument:
            return GIFDocument(
                version=header['version'],
                width=header['width'],
                height=header['height'],
                global_color_table=global_color_table,
                background_index=header['background_index'],
                pixel_aspect_ratio=header['pixel_aspect_ratio'],
                color_resolution=header['color_resolution'],
                frames=tuple(frames),
                comments=tuple(comments),
                applications=tuple(applications),
            )

        while self._max_frames is None or len(frames) < self._max_frames:
            block_offset = cursor.offset
            block_type, cursor = cursor.read_u8()

            if block_type == IMAGE_SEPARATOR:
                try:
                    frame, cursor = parse_image(
                        cursor, global_color_table, pending_gce, self._max_pixels
                    )
                except DecodeError as e:
                    e.partial = document()
                    raise
                logger.debug(
                    'Frame %d at offset %d: %dx%d+%d+%d', len(frames), block_offset,
                    frame.width, frame.height, frame.left, frame.top
                )
                frames.append(frame)
                pending_gce = None
            elif block_type == EXTENSION_INTRODUCER:
                label, value, cursor = parse_extension(cursor)
                logger.debug('Extension 0x%02X at offset %d', label, block_offset)
                if label == GRAPHICS_CONTROL_LABEL:
                    pending_gce = value
                elif label == APPLICATION_LABEL:
                    applications.append(value)
                elif label == COMMENT_LABEL:
                    comments.append(value)
            elif block_type == TRAILER:
                if not cursor.at_end():
                    logger.warning('Ignoring %d bytes after trailer', cursor.remaining)
                break
            else:
                raise FormatError(f'Unknown block type 0x{block_type:02X}', block_offset)

        return document()

    def get_info(self) -> dict[str, dict | list | tuple | int]:
        doc = self.parse()
        total_duration = doc.total_duration * 10
        frame_count = len(doc.frames)

        summary = {
            'Summary': {
                'Resolution': (f'{doc.width}x{doc.height}', 'Image dimensions'),
                'Frame Count': (frame_count, 'Total number of frames'),
                'File Size': (format_size(len(self._data)), 'Size in memory'),
                'Duration': (f'{total_duration}ms', 'Total animation duration'),
                'Frame Rate': (f'{1000 * frame_count / total_duration:.1f} FPS' if total_duration > 0 else 'N/A', 'Average frame rate')
            }
        }

        headers_info = {
            'Header': {
                'Signature': ('GIF', 'GIF signature'),
                'Version': (doc.version, 'GIF version')
            },
            'Logical Screen Descriptor': {
                'Canvas Size': (f'{doc.width}x{doc.height}', 'Image dimensions'),
                'Global Color Table': (doc.global_color_table is not None, 'Whether global color table exists'),
                'Color Resolution': (doc.color_resolution, 'Bits per primary color'),
                'Sort Flag': (bool(doc.global_color_table and doc.global_color_table.sorted), 'Whether colors are sorted'),
                'Color Table Size': (len(doc.global_color_table) if doc.global_color_table else 0, 'Number of entries in global color table'),
                'Background Color': (doc.background_index, 'Background color index'),
                'Aspect Ratio': (doc.pixel_aspect_ratio, 'Pixel aspect ratio')
            }
        }

        metadata = {}
        if doc.loop_count is not None:
            metadata['Loop Count'] = (doc.loop_count, 'Number of animation iterations (0 = infinite)')
        if doc.comments:
            metadata['Comment'] = (''.join(c.decode('ascii', errors='ignore') for c in doc.comments), 'GIF comment data')
        if doc.applications:
            metadata['Applications'] = (', '.join(a.name.decode('ascii', errors='replace') for a in doc.applications), 'Application extensions')
        if metadata:
            headers_info['Metadata'] = metadata

        return {
            'headers': {**summary, **headers_info},
            'frames': [frame_info(frame) for frame in doc.frames],
            'dimensions': (doc.width, doc.height),
            'frame_count': frame_count
        }


def frame_info(frame: Frame) -> dict[str, tuple[int, int] | str | bool | int | None]:
    table = frame.local_color_table
    return {
        'Position': (frame.left, frame.top),
        'Size': f'{frame.width}x{frame.height}',
        'Local Color Table': table is not None,
        'Interlaced': frame.interlaced,
        'Sort Flag': bool(table and table.sorted),
        'Color Table Size': len(table) if table else 0,
        'Delay': f'{frame.delay_time * 10}ms',
        'Disposal Method': frame.disposal_method.description,
        'User Input': frame.user_input,
        'Transparency': frame.transparent_index is not None,
        'Transparent Color': frame.transparent_index
    }


def format_size(size_bytes):
    for unit in ['B', 'KB', 'MB']:
        if size_bytes < 1024:
            return f'{size_bytes:.1f} {unit}'
        size_bytes /= 1024
    return f'{size_bytes:.1f} GB'


def decode(data: bytes, *, max_frames: int | None = None, max_pixels: int | None = None) -> GIFDocument:
    return GifParser(data, max_frames=max_frames, max_pixels=max_pixels).parse()
