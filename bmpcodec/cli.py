# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for bmpcodec

Thin file-handling wrapper around the decoder and encoder:

    python -m bmpcodec info image.bmp [--format json]
    python -m bmpcodec roundtrip input.bmp output.bmp
    python -m bmpcodec roundtrip app.ico output.bmp --icon 1

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bmpcodec import __version__
from bmpcodec.bmp_parser import BMPParser
from bmpcodec.bmp_writer import BMPWriter
from bmpcodec.config import DecodeConfig
from bmpcodec.exceptions import BMPError
from bmpcodec.ico_parser import decode_icon


def format_output(metadata: dict, format_type: str = "text") -> str:
    """
    Format metadata output based on format type.

    Args:
        metadata: Dictionary of metadata
        format_type: Output format ('text' or 'json')

    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps(metadata, indent=2, ensure_ascii=False)
    lines = []
    for tag, value in sorted(metadata.items()):
        lines.append(f"{tag}: {value}")
    return "\n".join(lines)


def show_info(file_path: Path, format_type: str, config: DecodeConfig) -> str:
    parser = BMPParser(file_path=str(file_path), config=config)
    return format_output(parser.parse(), format_type)


def roundtrip(
    input_path: Path,
    output_path: Path,
    config: DecodeConfig,
    icon_index: Optional[int] = None
) -> str:
    """
    Decode ``input_path`` and re-encode it as a canonical BMP.

    Returns:
        Status message
    """
    if icon_index is not None:
        pixels, descriptor = decode_icon(input_path.read_bytes(), icon_index)
    else:
        pixels, descriptor = BMPParser(file_path=str(input_path), config=config).decode()
    BMPWriter().write_bmp(pixels, descriptor, output_path)
    return (
        f"Wrote {descriptor.width}x{descriptor.height} "
        f"{'RGBA' if descriptor.channels == 4 else 'RGB'} image to {output_path}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmpcodec",
        description="Inspect and re-encode Windows Bitmap files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--implicit-palette",
        action="store_true",
        help="Treat a colors-used count of 0 as a full palette",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print header information")
    info.add_argument("file", type=Path)
    info.add_argument("--format", choices=("text", "json"), default="text")

    rt = subparsers.add_parser("roundtrip", help="Decode and re-encode as canonical BMP")
    rt.add_argument("input", type=Path)
    rt.add_argument("output", type=Path)
    rt.add_argument("--icon", type=int, metavar="INDEX", help="Decode image INDEX of an ICO/CUR file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = DecodeConfig(implicit_palette=args.implicit_palette)
    try:
        if args.command == "info":
            print(show_info(args.file, args.format, config))
        else:
            print(roundtrip(args.input, args.output, config, args.icon))
    except (BMPError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
