"""Read an LZ command stream and expand it back into data."""

from __future__ import annotations

from gsromtools.lz.commands import (
    COPY_FLIPPED,
    COPY_REVERSED,
    LITERAL,
    MAX_FILE_SIZE,
    REPEAT_BYTE,
    REPEAT_WORD,
    ZEROS,
    Command,
    LZError,
    flip_bits,
)


def _invalid() -> LZError:
    return LZError("invalid command stream", 1)


def parse_commands(data) -> tuple[list[Command], int]:
    """Decode commands up to the 0xFF terminator; return them and the trailing byte count."""
    data = bytes(data)
    size = len(data)
    pos = 0
    commands: list[Command] = []

    def take() -> int:
        nonlocal pos
        if pos >= size:
            raise _invalid()
        byte = data[pos]
        pos += 1
        return byte

    while True:
        header = take()
        kind = header >> 5
        count = header & 31
        if kind == 7:
            kind = count >> 2
            count = (count & 3) << 8
            if kind == 7:
                # only the byte 0xFF is a terminator; other nested long headers are invalid
                if count == 0x300:
                    break
                raise _invalid()
            count |= take()
        count += 1

        value = 0
        if kind == LITERAL:
            if size - pos <= count:
                raise _invalid()
            value = pos
            pos += count
        elif kind in (REPEAT_BYTE, REPEAT_WORD):
            if size - pos <= kind:
                raise _invalid()
            value = int.from_bytes(data[pos:pos + kind], "little")
            pos += kind
        elif kind != ZEROS:
            first = take()
            if first & 128:
                value = 127 - first
            else:
                value = (first << 8) | take()
        commands.append(Command(kind, count, value))

    return commands, size - pos


def expand_commands(commands, compressed) -> bytes:
    """Run the commands against the compressed bytes and return the output."""
    out = bytearray()
    for command in commands:
        kind, count, value = command.command, command.count, command.value
        if kind == LITERAL:
            out += compressed[value:value + count]
        elif kind in (REPEAT_BYTE, REPEAT_WORD):
            out += bytes((value >> ((index % kind) * 8)) & 0xFF for index in range(count))
        elif kind == ZEROS:
            out += bytes(count)
        else:
            base = len(out) + value if value < 0 else value
            step = -1 if kind == COPY_REVERSED else 1
            for index in range(count):
                source = base + step * index
                if not 0 <= source < len(out):
                    raise LZError("invalid copy reference in command stream", 1)
                byte = out[source]
                out.append(flip_bits(byte) if kind == COPY_FLIPPED else byte)
        if len(out) > MAX_FILE_SIZE:
            raise LZError("output data is too large", 1)
    return bytes(out)


def decompress(data) -> bytes:
    """Decompress a whole LZ stream."""
    commands, _ = parse_commands(data)
    return expand_commands(commands, bytes(data))