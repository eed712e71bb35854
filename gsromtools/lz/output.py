"""Write LZ command streams as binary data or as assembly text."""

from __future__ import annotations

from gsromtools.lz.commands import (
    COPY_FLIPPED,
    COPY_NORMAL,
    COPY_REVERSED,
    LITERAL,
    LOOKBACK_LIMIT,
    MAX_COMMAND_COUNT,
    MAX_FILE_SIZE,
    REPEAT_BYTE,
    REPEAT_WORD,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
    LZError,
    compressed_length,
)

_COPY_KINDS = {COPY_NORMAL: "normal", COPY_FLIPPED: "flipped", COPY_REVERSED: "reversed"}
_TERMINATOR = b"\xff"


def _invalid() -> LZError:
    return LZError("invalid command in output stream", 2)


def _check_copy(command: Command) -> None:
    if command.value < -LOOKBACK_LIMIT or command.value >= MAX_FILE_SIZE:
        raise _invalid()


def _literal_bytes(command: Command, data) -> bytes:
    chunk = bytes(data[command.value:command.value + command.count])
    if command.value < 0 or len(chunk) != command.count:
        raise _invalid()
    return chunk


def _padding_size(commands, alignment: int) -> int:
    return ~compressed_length(commands) & ((1 << alignment) - 1)


def format_command(command, data) -> str:
    """Return the assembly line for one command."""
    count, value = command.count, command.value
    if not count or count > MAX_COMMAND_COUNT:
        raise _invalid()
    kind = command.command
    if kind == LITERAL:
        chunk = _literal_bytes(command, data)
        return "\tlzdata " + ", ".join(f"${byte:02x}" for byte in chunk) + "\n"
    if kind == REPEAT_BYTE:
        if not 0 <= value <= 255:
            raise _invalid()
        return f"\tlzrepeat {count}, ${value:02x}\n"
    if kind == REPEAT_WORD:
        if value < 0:
            raise _invalid()
        return f"\tlzrepeat {count}, ${value & 0xFF:02x}, ${(value >> 8) & 0xFF:02x}\n"
    if kind == ZEROS:
        return f"\tlzzero {count}\n"
    if kind in _COPY_KINDS:
        _check_copy(command)
        name = _COPY_KINDS[kind]
        if value < 0:
            return f"\tlzcopy {name}, {count}, {value}\n"
        return f"\tlzcopy {name}, {count}, ${value & 0xFFFF:04x}\n"
    raise _invalid()


def format_commands(commands, data, alignment=0) -> str:
    """Return the assembly text for a stream, its terminator and alignment padding."""
    lines = [format_command(command, data) for command in commands]
    lines.append("\tlzend\n")
    padding = _padding_size(commands, alignment)
    if padding:
        lines.append("\tdb 0" + ", 0" * (padding - 1) + "\n")
    return "".join(lines)


def format_commands_with_padding(commands, data, padding=b"") -> str:
    """Return the assembly text for a stream followed by the given trailing bytes."""
    lines = [format_command(command, data) for command in commands]
    lines.append("\tlzend\n")
    if padding:
        items = [f"${byte:02x}" if byte else "0" for byte in bytes(padding)]
        lines.append("\tdb " + ", ".join(items) + "\n")
    return "".join(lines)


def encode_command(command, data) -> bytes:
    """Return the binary encoding of one command."""
    count, value, kind = command.count, command.value, command.command
    if not count or count > MAX_COMMAND_COUNT:
        raise _invalid()
    if kind not in (LITERAL, REPEAT_BYTE, REPEAT_WORD, ZEROS) and kind not in _COPY_KINDS:
        raise _invalid()
    stored = count - 1
    out = bytearray()
    if stored < SHORT_COMMAND_COUNT:
        out.append((kind << 5) + stored)
    else:
        out.append(224 + (kind << 2) + (stored >> 8))
        out.append(stored & 0xFF)
    if kind in (REPEAT_BYTE, REPEAT_WORD):
        if value < 0 or value >= 1 << (kind * 8):
            raise _invalid()
        out += value.to_bytes(kind, "little")
    elif kind in _COPY_KINDS:
        _check_copy(command)
        if value < 0:
            out.append((value ^ 127) & 0xFF)
        else:
            out += value.to_bytes(2, "big")
    elif kind == LITERAL:
        out += _literal_bytes(command, data)
    return bytes(out)


def encode_commands(commands, data, alignment=0) -> bytes:
    """Return the binary stream: commands, the 0xFF terminator and zero padding."""
    body = b"".join(encode_command(command, data) for command in commands)
    return body + _TERMINATOR + bytes(_padding_size(commands, alignment))