"""Multi-pass compressor: one command per position, then refinement passes."""

from __future__ import annotations

from dataclasses import replace

from gsromtools.lz.commands import (
    COPY_NORMAL,
    COPY_REVERSED,
    DUMMY,
    LITERAL,
    LOOKAHEAD_LIMIT,
    LOOKBACK_LIMIT,
    MAX_COMMAND_COUNT,
    MULTIPASS_SKIP_THRESHOLD,
    REPEAT_BYTE,
    REPEAT_WORD,
    ZEROS,
    Command,
    command_size,
    repack,
)

_COUNT_MASK = 0xFFF


def pick_repetition_for_pass(data, position, flags) -> Command:
    """Return the repetition starting at position; flag 8 forbids single-byte repeats."""
    length = len(data)
    byte = data[position]
    if byte:
        if position + 1 >= length:
            return Command(REPEAT_BYTE, 1, byte)
        following = data[position + 1]
        if not flags & 8 and byte == following:
            result = Command(REPEAT_BYTE, 0, byte)
        else:
            result = Command(REPEAT_WORD, 0, byte | (following << 8))
        count = 1
        while position + count < length and count < LOOKAHEAD_LIMIT:
            if data[position + count] != data[position + (count & 1)]:
                break
            count += 1
        result.count = count
        return result
    end = position + 1
    while end < length and end < position + LOOKAHEAD_LIMIT:
        if data[end]:
            break
        end += 1
    return Command(ZEROS, end - position)


def pick_copy_for_pass(data, reference, sources, command_type, position, flags) -> Command:
    """Return the longest copy from the earlier sources, or a placeholder.

    Flag 4 requires a copy to be at least four bytes long.
    """
    length = len(data)
    result = Command(DUMMY, 4 if flags & 4 else 3)
    if length < 3:
        return result
    head = length - position if position + 4 > length else 4
    wanted = bytes(data[position:position + head])
    for source in sources:
        refpos = length - 1 - source if command_type == COPY_REVERSED else source
        window = bytes(reference[refpos:refpos + 4]).ljust(4, b"\0")
        if wanted != window[:head]:
            continue
        count = 4
        while count < length - position and count < length - refpos:
            if data[position + count] != reference[refpos + count]:
                break
            count += 1
        count = min(count, length - refpos, length - position)
        if result.count > count:
            continue
        result = Command(command_type, count & _COUNT_MASK, source)
    return result


def pick_command_for_pass(data, flipped, reversed_data, sources, position, flags) -> Command:
    """Return the first-pass command for position."""
    result = pick_repetition_for_pass(data, position, flags)
    if result.count >= MULTIPASS_SKIP_THRESHOLD:
        return result
    for command_type, reference in enumerate((data, flipped, reversed_data), start=COPY_NORMAL):
        candidate = pick_copy_for_pass(data, reference, sources, command_type, position, flags)
        if candidate.command == DUMMY:
            continue
        if candidate.count > result.count:
            result = candidate
    if result.command >= COPY_NORMAL and result.value >= position - LOOKBACK_LIMIT:
        result.value -= position
    return result


def try_compress_multi_pass(data, flipped, flags) -> list[Command]:
    """Compress with the multi-pass method.

    Flag bits: 1 starts with a literal; 2 lets two-byte repeats be cut to
    an odd count; 4 forbids three-byte copies; 8 forbids single-byte repeats.
    """
    size = len(data)
    result = [Command(LITERAL) for _ in range(size)]
    reversed_data = bytes(data)[::-1]
    sources: list[int] = []

    position = flags & 1
    while position < size:
        picked = pick_command_for_pass(data, flipped, reversed_data, sources, position, flags)
        result[position] = picked
        if picked.command >= COPY_NORMAL or picked.count < MULTIPASS_SKIP_THRESHOLD:
            sources.append(position)
        position += picked.count if picked.count >= MULTIPASS_SKIP_THRESHOLD else 1

    # Cut each command short where a longer one starts inside it
    for position, command in enumerate(result):
        for step in range(1, command.count):
            if position + step >= size:
                break
            if result[position + step].count > command.count:
                command.count = step
                if command.command == REPEAT_WORD and step & 1 and not flags & 2:
                    command.count -= 1
                break
        if command.count <= command_size(command):
            result[position] = Command(LITERAL, 0, 0)

    # Fill gaps with literals and split over-long commands
    for position in range(size):
        command = result[position]
        if not command.command:
            step = 1
            while step < MAX_COMMAND_COUNT and position + step < size:
                if result[position + step].command:
                    break
                step += 1
            result[position] = Command(LITERAL, step, position)
        elif command.count > MAX_COMMAND_COUNT:
            rest = replace(command, count=command.count - MAX_COMMAND_COUNT)
            if rest.command >= COPY_NORMAL and rest.value >= 0:
                rest.value += -MAX_COMMAND_COUNT if command.command == COPY_REVERSED else MAX_COMMAND_COUNT
            result[position + MAX_COMMAND_COUNT] = rest
            command.count = MAX_COMMAND_COUNT

    # Keep only the chain of commands that starts at position 0
    following = 0
    for position, command in enumerate(result):
        if position == following:
            following += command.count
        else:
            command.command = DUMMY
    return repack(result)