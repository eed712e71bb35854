"""Merge Game Boy Color palettes into one four-color palette."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

from gsromtools.common import ToolError

PROGRAM_NAME = "gbcpal"
USAGE = f"Usage: {PROGRAM_NAME} [-h|--help] [-r|--reverse] out.gbcpal in.gbcpal..."


@dataclass(frozen=True)
class Color:
    """A 15-bit color with 5-bit channels."""

    r: int
    g: int
    b: int

    def pack(self) -> int:
        return (self.b << 10) | (self.g << 5) | self.r

    def luminance(self) -> float:
        return 0.299 * self.r + 0.587 * self.g + 0.114 * self.b


BLACK = Color(0, 0, 0)
WHITE = Color(31, 31, 31)


def unpack_color(value: int) -> Color:
    return Color(value & 0x1F, (value >> 5) & 0x1F, (value >> 10) & 0x1F)


def parse_gbcpal(data: bytes, name="") -> list[Color]:
    """Decode little-endian 16-bit colors."""
    if not data:
        raise ToolError(f"{name}: empty gbcpal file")
    if len(data) % 2:
        raise ToolError(f"{name}: invalid gbcpal file")
    return [unpack_color(int.from_bytes(data[i : i + 2], "little")) for i in range(0, len(data), 2)]


def read_gbcpal(path) -> list[Color]:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc
    return parse_gbcpal(data, path)


def build_palette(colors, reverse=False, name="") -> list[Color]:
    """Return white, the two remaining colors by luminance, and black."""
    ordered = sorted(colors, key=Color.luminance, reverse=not reverse)
    filtered: list[Color] = []
    for color in ordered:
        if color in (BLACK, WHITE):
            continue
        if filtered and filtered[-1] == color:
            continue
        filtered.append(color)
    if len(filtered) > 2:
        raise ToolError(f"{name}: more than 2 colors besides black and white ({len(filtered)})")
    if not filtered:
        middle = [WHITE, BLACK]
    elif len(filtered) == 1:
        middle = [filtered[0], filtered[0]]
    else:
        middle = filtered
    return [WHITE, *middle, BLACK]


def encode_palette(colors) -> bytes:
    return b"".join(color.pack().to_bytes(2, "little") for color in colors)


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def main(argv=None) -> int:
    parser = _Parser(prog=PROGRAM_NAME, add_help=False)
    parser.add_argument("-r", "--reverse", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("files", nargs="*")
    try:
        args = parser.parse_intermixed_args(argv)
    except _UsageError:
        print(USAGE, file=sys.stderr)
        return 1
    if args.help:
        print(USAGE, file=sys.stderr)
        return 0
    if len(args.files) < 2:
        print(USAGE, file=sys.stderr)
        return 1
    out_name, *in_names = args.files
    try:
        colors = [color for in_name in in_names for color in read_gbcpal(in_name)]
        palette = build_palette(colors, args.reverse, out_name)
        try:
            Path(out_name).write_bytes(encode_palette(palette))
        except OSError as exc:
            raise ToolError(f'Could not open file "{out_name}": {exc.strerror}') from exc
    except ToolError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    return 0