"""Post-process converted tile graphics: trim, dedupe, interleave."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from gsromtools.common import ToolError, read_png_width

PROGRAM_NAME = "gfx"
USAGE = (
    f"Usage: {PROGRAM_NAME} [-h|--help] [--trim-whitespace] [--remove-whitespace] "
    "[--interleave] [--remove-duplicates [--keep-whitespace]] [--remove-xflip] "
    "[--remove-yflip] [--preserve indexes] [-d|--depth depth] "
    "[-p|--png filename.png] [-o|--out outfile] infile"
)

_FLIPPED = bytes(int(f"{value:08b}"[::-1], 2) for value in range(256))


@dataclass
class GfxOptions:
    """Which transformations to apply and how tiles are laid out."""

    trim_whitespace: bool = False
    remove_whitespace: bool = False
    interleave: bool = False
    remove_duplicates: bool = False
    keep_whitespace: bool = False
    remove_xflip: bool = False
    remove_yflip: bool = False
    preserved: list[int] = field(default_factory=list)
    depth: int = 2
    png_file: str | None = None
    outfile: str | None = None
    infile: str | None = None


class Graphic:
    """Tile data being transformed in place."""

    def __init__(self, data, options=None):
        self.options = options if options is not None else GfxOptions()
        if self.options.depth < 1:
            raise ValueError(f"invalid depth: {self.options.depth}")
        self.data = bytearray(data)
        self.preserved = list(self.options.preserved)

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    @property
    def tile_size(self) -> int:
        return self.options.depth * (16 if self.options.interleave else 8)

    def _is_preserved(self, index: int) -> bool:
        return index in self.preserved

    def _shift_preserved(self, removed: int) -> None:
        self.preserved = [index - 1 if index >= removed else index for index in self.preserved]

    def _is_whitespace(self, offset: int, size: int) -> bool:
        return not any(self.data[offset : offset + size])

    def _align(self, tile_size: int) -> int:
        """Cut the data down to the tile size's alignment and return the new size."""
        aligned = len(self.data) & ~(tile_size - 1)
        self.data = self.data[:aligned]
        return aligned

    def _tile_exists(self, tile: bytes, num_tiles: int, tile_size: int) -> bool:
        return any(
            self.data[index * tile_size : (index + 1) * tile_size] == tile
            for index in range(num_tiles)
        )

    def _flip(self, tile: bytes, xflip: bool, yflip: bool) -> bytes:
        tile_size = len(tile)
        half = tile_size // 2
        flipped = bytearray(tile_size)
        for index, byte in enumerate(tile):
            if yflip:
                end = half if self.options.interleave and index < half else tile_size
                target = end - 1 - (index ^ 1)
            else:
                target = index
            flipped[target] = _FLIPPED[byte] if xflip else byte
        return bytes(flipped)

    def trim_whitespace(self) -> None:
        """Drop blank tiles from the end, always keeping the first tile."""
        tile_size = self.options.depth * 8
        size = len(self.data)
        for offset in range(size - tile_size, 0, -tile_size):
            if self._is_whitespace(offset, tile_size) and not self._is_preserved(offset // tile_size):
                size = offset
            else:
                break
        del self.data[size:]

    def interleave(self, width: int) -> None:
        """Reorder tiles so that pairs of tile rows become 8x16 columns."""
        tile_size = self.options.depth * 8
        width_tiles = width // 8
        if width_tiles <= 0:
            raise ToolError(f"invalid width for --interleave: {width} px")
        num_tiles = len(self.data) // tile_size
        placed: dict[int, bytes] = {}
        for index in range(num_tiles):
            row = index // width_tiles
            base = width_tiles * (row + 1) - 1 if row % 2 else width_tiles * row
            placed[index * 2 - base] = bytes(self.data[index * tile_size : (index + 1) * tile_size])
        self.data = bytearray(
            b"".join(placed.get(slot, bytes(tile_size)) for slot in range(num_tiles))
        )

    def _remove_matching(self, matches: Callable[[bytes, int, int], bool]) -> None:
        tile_size = self.tile_size
        size = self._align(tile_size)
        num_tiles = 0
        dest = src = removed = 0
        while dest < size and src < size:
            while src < size and matches(bytes(self.data[src : src + tile_size]), num_tiles, tile_size):
                index = src // tile_size - removed
                if (self.options.keep_whitespace and self._is_whitespace(src, tile_size)) or self._is_preserved(index):
                    break
                self._shift_preserved(index)
                src += tile_size
                removed += 1
            if src >= size:
                break
            if src > dest:
                self.data[dest : dest + tile_size] = self.data[src : src + tile_size]
            num_tiles += 1
            dest += tile_size
            src += tile_size
        del self.data[num_tiles * tile_size :]

    def remove_duplicates(self) -> None:
        """Drop tiles identical to an earlier kept tile."""
        self._remove_matching(self._tile_exists)

    def remove_flip(self, xflip: bool, yflip: bool) -> None:
        """Drop tiles that are a flipped copy of an earlier kept tile."""

        def matches(tile: bytes, num_tiles: int, tile_size: int) -> bool:
            return self._tile_exists(self._flip(tile, xflip, yflip), num_tiles, tile_size)

        self._remove_matching(matches)

    def remove_whitespace(self) -> None:
        """Drop every blank tile that is not preserved."""
        tile_size = self.tile_size
        size = self._align(tile_size)
        dest = src = removed = 0
        while dest < size and src < size:
            while (
                src < size
                and self._is_whitespace(src, tile_size)
                and not self._is_preserved(src // tile_size - removed)
            ):
                self._shift_preserved(src // tile_size - removed)
                src += tile_size
                removed += 1
            if src >= size:
                break
            if src > dest:
                self.data[dest : dest + tile_size] = self.data[src : src + tile_size]
            dest += tile_size
            src += tile_size
        del self.data[dest:]


def process(data, options, png_width=None) -> bytes:
    """Apply every transformation the options ask for, in the fixed order."""
    graphic = Graphic(data, options)
    if options.trim_whitespace:
        graphic.trim_whitespace()
    if options.interleave:
        if png_width is None:
            raise ToolError("--interleave needs --png to infer dimensions")
        graphic.interleave(png_width)
    if options.remove_duplicates:
        graphic.remove_duplicates()
    if options.remove_xflip:
        graphic.remove_flip(True, False)
    if options.remove_yflip:
        graphic.remove_flip(False, True)
    if options.remove_xflip and options.remove_yflip:
        graphic.remove_flip(True, True)
    if options.remove_whitespace:
        graphic.remove_whitespace()
    return bytes(graphic)


def _parse_c_uint(text: str) -> int:
    """Parse a number the way strtoul with base 0 does, yielding 0 on garbage."""
    stripped = text.lstrip()
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    if stripped[:2].lower() == "0x" and stripped[2:3] and stripped[2] in "0123456789abcdefABCDEF":
        base, digits, body = 16, "0123456789abcdefABCDEF", stripped[2:]
    elif stripped.startswith("0"):
        base, digits, body = 8, "01234567", stripped
    else:
        base, digits, body = 10, "0123456789", stripped
    prefix = ""
    for char in body:
        if char not in digits:
            break
        prefix += char
    return sign * int(prefix, base) if prefix else 0


class _UsageExit(Exception):
    def __init__(self, status: int):
        super().__init__(status)
        self.status = status


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        print(f"{self.prog}: {message}", file=sys.stderr)
        raise _UsageExit(1)


def parse_args(argv=None) -> GfxOptions:
    """Build options from the command line."""
    parser = _Parser(prog=PROGRAM_NAME, add_help=False)
    parser.add_argument("--remove-whitespace", action="store_true")
    parser.add_argument("--trim-whitespace", action="store_true")
    parser.add_argument("--interleave", action="store_true")
    parser.add_argument("--remove-duplicates", action="store_true")
    parser.add_argument("--keep-whitespace", action="store_true")
    parser.add_argument("--remove-xflip", action="store_true")
    parser.add_argument("--remove-yflip", action="store_true")
    parser.add_argument("--preserve", action="append", default=[])
    parser.add_argument("-p", "--png")
    parser.add_argument("-d", "--depth")
    parser.add_argument("-o", "--out")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("files", nargs="*")
    args = parser.parse_intermixed_args(argv)
    if args.help:
        raise _UsageExit(0)
    preserved = [
        _parse_c_uint(token)
        for group in args.preserve
        for token in group.split(",")
        if token
    ]
    return GfxOptions(
        trim_whitespace=args.trim_whitespace,
        remove_whitespace=args.remove_whitespace,
        interleave=args.interleave,
        remove_duplicates=args.remove_duplicates,
        keep_whitespace=args.keep_whitespace,
        remove_xflip=args.remove_xflip,
        remove_yflip=args.remove_yflip,
        preserved=preserved,
        depth=2 if args.depth is None else _parse_c_uint(args.depth),
        png_file=args.png,
        outfile=args.out,
        infile=args.files[0] if args.files else None,
    )


def main(argv=None) -> int:
    try:
        options = parse_args(argv)
    except _UsageExit as exc:
        print(USAGE, file=sys.stderr)
        return exc.status
    if options.infile is None:
        print(USAGE, file=sys.stderr)
        return 1
    try:
        try:
            data = Path(options.infile).read_bytes()
        except OSError as exc:
            raise ToolError(f'Could not open file "{options.infile}": {exc.strerror}') from exc
        png_width = None
        if options.interleave and options.png_file:
            png_width = read_png_width(options.png_file)
        try:
            result = process(data, options, png_width)
        except ValueError as exc:
            raise ToolError(str(exc)) from exc
        if options.outfile:
            try:
                Path(options.outfile).write_bytes(result)
            except OSError as exc:
                raise ToolError(f'Could not open file "{options.outfile}": {exc.strerror}') from exc
    except ToolError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    return 0