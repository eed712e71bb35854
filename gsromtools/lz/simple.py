"""Uncompressed storage and repetition-only compression methods."""

from __future__ import annotations

from gsromtools.lz.commands import (
    DUMMY,
    LITERAL,
    MAX_COMMAND_COUNT,
    REPEAT_BYTE,
    REPEAT_WORD,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
    command_size,
)


def store_uncompressed(data, flipped=None, flags=0) -> list[Command]:
    """Cover the data with literal commands only.

    Flag 1 keeps a trailing 33-to-64-byte block whole instead of
    splitting it into two short blocks.
    """
    commands: list[Command] = []
    position = 0
    remainder = len(data)
    while remainder:
        block = min(remainder, MAX_COMMAND_COUNT)
        if not flags & 1 and SHORT_COMMAND_COUNT < block <= 2 * SHORT_COMMAND_COUNT:
            block = SHORT_COMMAND_COUNT
        commands.append(Command(LITERAL, block, position))
        position += block
        remainder -= block
    return commands


def find_repetition_at_position(data, position) -> Command:
    """Return the repetition command that best starts at position."""
    length = len(data)
    if position + 1 >= length:
        return Command(ZEROS, 1) if not data[position] else Command(DUMMY)
    pair = (data[position], data[position + 1])
    limit = min(length - position, MAX_COMMAND_COUNT)
    repcount = 2
    while repcount < limit and data[position + repcount] == pair[repcount & 1]:
        repcount += 1
    first, second = pair
    if first != second:
        if not first and repcount < 3:
            return Command(ZEROS, 1)
        return Command(REPEAT_WORD, repcount, first | (second << 8))
    if first:
        return Command(REPEAT_BYTE, repcount, first)
    return Command(ZEROS, repcount)


def try_compress_repetitions(data, flipped=None, flags=0) -> list[Command]:
    """Compress with a subset of repetition commands.

    flags + 1 is a bit set of the allowed kinds, lowest first:
    single-byte repeats, two-byte repeats, zero runs.
    """
    allowed = (flags + 1) << 1
    size = len(data)
    commands: list[Command] = []
    position = 0
    skipped = 0
    while position < size:
        candidate = find_repetition_at_position(data, position)
        if candidate.command == ZEROS and not allowed & 8:
            candidate.command = REPEAT_BYTE
            candidate.value = 0
        if candidate.command == REPEAT_BYTE and not allowed & 2:
            candidate.command = REPEAT_WORD
            candidate.value |= candidate.value << 8
        if allowed & (1 << candidate.command) and command_size(candidate) <= candidate.count:
            if skipped:
                commands.append(Command(LITERAL, skipped, position - skipped))
            skipped = 0
            commands.append(candidate)
            position += candidate.count
        else:
            position += 1
            skipped += 1
            if skipped == MAX_COMMAND_COUNT:
                commands.append(Command(LITERAL, MAX_COMMAND_COUNT, position - MAX_COMMAND_COUNT))
                skipped = 0
    if skipped:
        commands.append(Command(LITERAL, skipped, position - skipped))
    return commands