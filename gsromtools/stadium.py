"""Write the Pokémon Stadium checksum data into a 2 MB ROM."""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

from gsromtools.common import ToolError

PROGRAM_NAME = "stadium"
USAGE = f"Usage: {PROGRAM_NAME} pokegold.gbc"

NUM_BANKS = 128
BANK_SIZE = 0x4000
ROM_SIZE = NUM_BANKS * BANK_SIZE
GLOBAL_OFF = 0x014E

N64PS3 = b"N64PS3"
N64PS3_HEADER_SIZE = len(N64PS3) + 2
N64PS3_DATA_SIZE = NUM_BANKS * 2 * 2
N64PS3_TOTAL_SIZE = N64PS3_HEADER_SIZE + N64PS3_DATA_SIZE
N64PS3_OFF = ROM_SIZE - N64PS3_TOTAL_SIZE

CRC_POLY = 0xC387
CRC_INIT = 0xFEFE


@lru_cache(maxsize=None)
def crc_table() -> tuple[int, ...]:
    """Return the 256-entry table for the Stadium CRC."""
    table = []
    for index in range(256):
        rem = 0
        value = index
        for _ in range(8):
            rem = (rem >> 1) ^ (CRC_POLY if (rem ^ value) & 1 else 0)
            value >>= 1
        table.append(rem)
    return tuple(table)


def calculate_checksum(checksum: int, data) -> int:
    """Add every byte of data to a 16-bit running sum."""
    return (checksum + sum(data)) & 0xFFFF


def calculate_checksums(rom) -> bytes:
    """Return the ROM with Stadium data and global checksum filled in."""
    buf = bytearray(rom)
    if len(buf) != ROM_SIZE:
        raise ValueError(f"ROM must be {ROM_SIZE} bytes, not {len(buf)}")

    buf[GLOBAL_OFF : GLOBAL_OFF + 2] = bytes(2)
    buf[N64PS3_OFF : N64PS3_OFF + N64PS3_TOTAL_SIZE] = bytes(N64PS3_TOTAL_SIZE)
    buf[N64PS3_OFF : N64PS3_OFF + len(N64PS3)] = N64PS3

    data_off = N64PS3_OFF + N64PS3_HEADER_SIZE
    half = BANK_SIZE // 2
    for index in range(NUM_BANKS * 2):
        checksum = calculate_checksum(CRC_INIT, buf[index * half : (index + 1) * half])
        buf[data_off + index * 2 : data_off + index * 2 + 2] = checksum.to_bytes(2, "big")

    table = crc_table()
    crc = CRC_INIT
    for byte in buf[data_off : data_off + N64PS3_DATA_SIZE]:
        crc = (crc >> 8) ^ table[(crc & 0xFF) ^ byte]
    buf[data_off - 2 : data_off] = crc.to_bytes(2, "big")

    globalsum = calculate_checksum(0, buf)
    buf[GLOBAL_OFF : GLOBAL_OFF + 2] = globalsum.to_bytes(2, "big")
    return bytes(buf)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print(USAGE, file=sys.stderr)
        return 1
    path = Path(args[0])
    try:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc
        if len(data) == ROM_SIZE:
            data = calculate_checksums(data)
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc
    except ToolError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    return 0