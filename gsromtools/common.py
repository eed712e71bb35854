"""Errors and file readers shared by the ROM build tools."""

from __future__ import annotations

from pathlib import Path

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\x0d" + b"IHDR"

VALID_DIMENSIONS = (5, 6, 7)


class ToolError(Exception):
    """A fatal error reported by one of the tools."""


def _read_bytes(path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc


def read_png_width(path) -> int:
    """Return the width in pixels stored in a PNG file's IHDR chunk."""
    data = _read_bytes(path)
    if len(data) < len(PNG_HEADER):
        raise ToolError(f'Could not read from file "{path}"')
    if data[: len(PNG_HEADER)] != PNG_HEADER:
        raise ToolError(f'Not a valid PNG file: "{path}"')
    width_bytes = data[len(PNG_HEADER) : len(PNG_HEADER) + 4]
    if len(width_bytes) < 4:
        raise ToolError(f'Could not read from file "{path}"')
    return int.from_bytes(width_bytes, "big")


def read_dimensions(path) -> int:
    """Return the square tile size stored in a one-byte dimensions file."""
    data = _read_bytes(path)
    if len(data) != 1:
        raise ToolError(f"{path}: invalid dimensions file")
    width = data[0] & 0xF
    height = data[0] >> 4
    if width != height or width not in VALID_DIMENSIONS:
        raise ToolError(f"{path}: invalid dimensions: {width}x{height} tiles")
    return width