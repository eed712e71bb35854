"""Record the tile dimensions of a front sprite PNG."""

from __future__ import annotations

import sys
from pathlib import Path

from gsromtools.common import ToolError, read_png_width

PROGRAM_NAME = "png_dimensions"
USAGE = f"Usage: {PROGRAM_NAME} front.png front.dimensions"

VALID_WIDTHS = (40, 48, 56)


def read_png_dimensions(path) -> int:
    """Return the dimensions byte: tile width in both nibbles."""
    width_px = read_png_width(path)
    if width_px not in VALID_WIDTHS:
        raise ToolError(f'Not a valid width for "{path}": {width_px} px')
    width_tiles = width_px // 8
    return (width_tiles << 4) | width_tiles


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print(USAGE, file=sys.stderr)
        return 1
    try:
        value = read_png_dimensions(args[0])
        try:
            Path(args[1]).write_bytes(bytes([value]))
        except OSError as exc:
            raise ToolError(f'Could not open file "{args[1]}": {exc.strerror}') from exc
    except ToolError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    return 0