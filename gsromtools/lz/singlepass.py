"""Single-pass compressor: choose the best command at each position."""

from __future__ import annotations

from gsromtools.lz.commands import (
    COPY_FLIPPED,
    COPY_NORMAL,
    COPY_REVERSED,
    DUMMY,
    LITERAL,
    LOOKBACK_LIMIT,
    MAX_COMMAND_COUNT,
    SHORT_COMMAND_COUNT,
    Command,
    command_size,
    optimize,
    pick_best_command,
    repack,
)
from gsromtools.lz.simple import find_repetition_at_position


def _offset(best_match: int, position: int) -> int:
    if best_match + LOOKBACK_LIMIT >= position:
        return best_match - position
    return best_match


def scan_forwards(data, position, source) -> tuple[int, int]:
    """Find the longest earlier match of data[position:] in source.

    Returns (count, offset); the offset is relative when near enough.
    A count of 0 means no match.
    """
    limit = len(data) - position
    if limit <= 0:
        return 0, 0
    first = data[position]
    best_match = 0
    best_length = 0
    for start in range(position):
        if source[start] != first:
            continue
        length = 0
        while length < limit and source[start + length] == data[position + length]:
            length += 1
        length = min(length, MAX_COMMAND_COUNT)
        if length < best_length:
            continue
        best_match, best_length = start, length
    if not best_length:
        return 0, 0
    return best_length, _offset(best_match, position)


def scan_backwards(data, position) -> tuple[int, int]:
    """Find the longest earlier run that read backwards matches data[position:]."""
    limit = min(len(data) - position, position)
    best_match = 0
    best_length = 0
    target = data[position] if position < len(data) else None
    for start in range(position):
        if data[start] != target:
            continue
        length = 0
        while (
            length <= start
            and length < limit
            and data[start - length] == data[position + length]
        ):
            length += 1
        length = min(length, MAX_COMMAND_COUNT)
        if length < best_length:
            continue
        best_match, best_length = start, length
    if not best_length:
        return 0, 0
    return best_length, _offset(best_match, position)


def find_best_repetition(data, position) -> Command:
    """Return the best repetition command starting at position."""
    return find_repetition_at_position(data, position)


def find_best_copy(data, position, flipped, flags) -> Command:
    """Return the best copy command at position, honouring the preference flags."""
    simple = Command(DUMMY)
    flipped_copy = Command(DUMMY)
    backwards = Command(DUMMY)
    count, offset = scan_forwards(data, position, data)
    if count:
        simple = Command(COPY_NORMAL, count, offset)
    count, offset = scan_forwards(data, position, flipped)
    if count:
        flipped_copy = Command(COPY_FLIPPED, count, offset)
    count, offset = scan_backwards(data, position)
    if count:
        backwards = Command(COPY_REVERSED, count, offset)
    preference = flags // 24
    if preference == 0:
        command = pick_best_command(simple, backwards, flipped_copy)
    elif preference == 1:
        command = pick_best_command(backwards, flipped_copy, simple)
    elif preference == 2:
        command = pick_best_command(flipped_copy, backwards, simple)
    else:
        raise ValueError(f"invalid single-pass flags: {flags}")
    if flags & 4 and command.count > SHORT_COMMAND_COUNT:
        command.count = SHORT_COMMAND_COUNT
    return command


def try_compress_single_pass(data, flipped, flags) -> list[Command]:
    """Compress in one pass; flags select tie-breaks, scan delay and copy preference."""
    length = len(data)
    commands: list[Command] = []
    position = 0
    previous_data = 0
    scan_delay = 0
    scan_delay_flag = (flags >> 3) % 3
    while position < length:
        copy = find_best_copy(data, position, flipped, flags)
        repetition = find_best_repetition(data, position)
        if flags & 1:
            current = pick_best_command(repetition, copy)
        else:
            current = pick_best_command(copy, repetition)
        current = pick_best_command(Command(LITERAL, 1, position), current)
        if (
            flags & 2
            and command_size(current) == current.count
            and previous_data
            and previous_data not in (SHORT_COMMAND_COUNT, MAX_COMMAND_COUNT)
        ):
            current = Command(LITERAL, 1, position)
        if scan_delay_flag:
            if scan_delay >= scan_delay_flag:
                scan_delay = 0
            elif current.command:
                scan_delay += 1
                current = Command(LITERAL, 1, position)
        if current.command:
            previous_data = 0
        else:
            previous_data += current.count
        commands.append(current)
        position += current.count
    optimize(commands)
    return repack(commands)