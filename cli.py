import argparse
import logging
import sys
from pathlib import Path

from gif_errors import GifError
from gif_export import save_frames
from gif_parser import GifParser


def format_report(info: dict) -> str:
    text = []
    text.append("=== GIF Information ===")
    for section, items in info['headers'].items():
        text.append(f"\n{section}:")
        for key, (value, description) in items.items():
            text.append(f"{key}: {value} ({description})")

    text.append("\n=== Frame Information ===")
    for i, frame in enumerate(info['frames'], 1):
        text.append(f"\nFrame {i}:")
        for key, value in frame.items():
            text.append(f"{key}: {value}")

    return "\n".join(text)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Decode GIF files and report their structure and frames')
    parser.add_argument('file', type=Path, help='Path to GIF file to decode')
    parser.add_argument('-o', '--output', type=Path, help='Save result to specified file')
    parser.add_argument('-e', '--export', type=Path, metavar='DIR', help='Write each decoded frame as a PNG into DIR')
    parser.add_argument('--max-frames', type=int, help='Decode at most this many frames')
    parser.add_argument('--max-pixels', type=int, help='Reject frames with more pixels than this')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log decoding details')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        gif_parser = GifParser.from_file(args.file, max_frames=args.max_frames, max_pixels=args.max_pixels)
        result = format_report(gif_parser.get_info())

        if args.output:
            args.output.write_text(result, encoding='utf-8')
            print(f"Result saved to {args.output}")
        else:
            print(result)

        if args.export:
            paths = save_frames(gif_parser.parse(), args.export)
            print(f"{len(paths)} frames written to {args.export}")

    except (GifError, OSError) as e:
        print(f"Error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
