"""LZ command representation and shared command-stream helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace

NUM_COMPRESSORS = 4
COMPRESSION_METHODS = 96
MAX_FILE_SIZE = 32768
SHORT_COMMAND_COUNT = 32
MAX_COMMAND_COUNT = 1024
LOOKBACK_LIMIT = 128
LOOKAHEAD_LIMIT = 3072
MULTIPASS_SKIP_THRESHOLD = 64

LITERAL = 0
REPEAT_BYTE = 1
REPEAT_WORD = 2
ZEROS = 3
COPY_NORMAL = 4
COPY_FLIPPED = 5
COPY_REVERSED = 6
DUMMY = 7

BIT_FLIPPING_TABLE = bytes(int(f"{value:08b}"[::-1], 2) for value in range(256))


class LZError(Exception):
    """A fatal compressor error, carrying the process exit code."""

    def __init__(self, message: str, code: int = 1):
        super().__init__(message)
        self.code = code


@dataclass
class Command:
    """One command: kind 0-6 (7 is a placeholder), output length and value.

    The value is an offset into the source for literals, the repeated bytes
    for repetitions, and a position (negative when relative) for copies.
    """

    command: int
    count: int = 0
    value: int = 0


def flip_bits(byte: int) -> int:
    """Return the byte with its bit order reversed."""
    return BIT_FLIPPING_TABLE[byte]


def command_size(command: Command) -> int:
    """Return the encoded size of a command in bytes."""
    header = 1 + (command.count > SHORT_COMMAND_COUNT)
    if command.command & 4:
        return header + 1 + (command.value >= 0)
    return header + (command.count, 1, 2, 0)[command.command]


def is_better(new: Command, old: Command) -> bool:
    """Tell whether new saves more bytes than old."""
    if new.command == DUMMY:
        return False
    if old.command == DUMMY:
        return True
    return new.count - command_size(new) > old.count - command_size(old)


def pick_best_command(*args: Command) -> Command:
    """Return a copy of the best command, the earliest one on a tie."""
    if not args:
        raise ValueError("pick_best_command needs at least one command")
    best = args[0]
    for candidate in args[1:]:
        if is_better(candidate, best):
            best = candidate
    return replace(best)


def compressed_length(commands) -> int:
    """Return the encoded size of a command sequence, ignoring placeholders."""
    return sum(command_size(command) for command in commands if command.command != DUMMY)


def optimize(commands) -> None:
    """Merge adjacent compatible commands in place, marking absorbed ones as placeholders."""
    live = [command for command in commands]
    start = next((index for index, command in enumerate(live) if command.command != DUMMY), len(live))
    remaining = live[start:]
    if len(remaining) < 2:
        return
    current = remaining[0]
    for following in remaining[1:]:
        if following.command == DUMMY:
            continue
        total = current.count + following.count
        if (
            current.command == LITERAL
            and command_size(following) == following.count
            and total <= MAX_COMMAND_COUNT
            and (current.count > SHORT_COMMAND_COUNT or total <= SHORT_COMMAND_COUNT)
        ):
            current.count = total
            following.command = DUMMY
            continue
        if following.command == current.command:
            if current.command == LITERAL:
                if current.value + current.count == following.value:
                    current.count = total
                    following.command = DUMMY
                    if current.count <= MAX_COMMAND_COUNT:
                        continue
                    following.command = LITERAL
                    following.value = current.value + MAX_COMMAND_COUNT
                    following.count = current.count - MAX_COMMAND_COUNT
                    current.count = MAX_COMMAND_COUNT
            elif current.command == ZEROS or (
                current.command == REPEAT_BYTE and current.value == following.value
            ):
                if total <= MAX_COMMAND_COUNT:
                    current.count = total
                    following.command = DUMMY
                    continue
                following.count = total - MAX_COMMAND_COUNT
                current.count = MAX_COMMAND_COUNT
        current = following


def repack(commands) -> list[Command]:
    """Return the commands without placeholders."""
    return [command for command in commands if command.command != DUMMY]