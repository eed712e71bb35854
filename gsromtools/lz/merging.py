"""Combine the command streams of several methods into a shorter one."""

from __future__ import annotations

from dataclasses import replace

from gsromtools.lz.commands import (
    COMPRESSION_METHODS,
    Command,
    compressed_length,
    pick_best_command,
)

# Methods per compressor, in the order of the compressor table
COMPRESSOR_METHODS = (72, 2, 6, 16)


def merge_command_sequences(current, new) -> list[Command]:
    """Merge two streams for the same data, keeping the cheaper of each aligned segment.

    Where both streams have a command boundary at the same place, the
    segments in between are compared; on a tie the current one is kept.
    """
    if sum(command.count for command in current) != sum(command.count for command in new):
        raise ValueError("command sequences cover different amounts of data")
    result: list[Command] = []
    i = j = 0
    while i < len(current):
        if current[i].count == new[j].count:
            result.append(pick_best_command(current[i], new[j]))
            i += 1
            j += 1
            continue
        start_i, start_j = i, j
        current_pos = current[i].count
        new_pos = new[j].count
        i += 1
        j += 1
        while current_pos != new_pos:
            if current_pos < new_pos:
                current_pos += current[i].count
                i += 1
            else:
                new_pos += new[j].count
                j += 1
        current_segment = current[start_i:i]
        new_segment = new[start_j:j]
        if compressed_length(new_segment) < compressed_length(current_segment):
            chosen = new_segment
        else:
            chosen = current_segment
        result.extend(replace(command) for command in chosen)
    return result


def select_command_sequence(sequences, backwards=False) -> list[Command]:
    """Start from the shortest stream and merge every other one into it in turn.

    The others are visited cyclically after the shortest, or in the
    opposite direction when backwards is set.
    """
    if not sequences:
        raise ValueError("no command sequences to select from")
    count = len(sequences)
    lengths = [compressed_length(sequence) for sequence in sequences]
    min_index = min(range(count), key=lengths.__getitem__)
    current = [replace(command) for command in sequences[min_index]]
    for step in range(1, count):
        index = count - step if backwards else step
        current = merge_command_sequences(current, sequences[(index + min_index) % count])
    return current


def select_optimal_sequence(sequences) -> list[Command]:
    """Combine the streams of every compression method into the best one found."""
    if len(sequences) != COMPRESSION_METHODS:
        raise ValueError(
            f"expected {COMPRESSION_METHODS} command sequences, got {len(sequences)}"
        )
    forward: list[list[Command]] = []
    backward: list[list[Command]] = []
    inverted: list[list[Command]] = []
    method = 0
    for methods in COMPRESSOR_METHODS:
        group = list(sequences[method:method + methods])
        forward.append(select_command_sequence(group, False))
        backward.append(select_command_sequence(group, True))
        inverted.extend(reversed(group))
        method += methods
    finals = [
        select_command_sequence(forward, False),
        select_command_sequence(forward, True),
        select_command_sequence(backward, False),
        select_command_sequence(backward, True),
        select_command_sequence(sequences, False),
        select_command_sequence(sequences, True),
        select_command_sequence(inverted, False),
        select_command_sequence(inverted, True),
    ]
    return select_command_sequence(finals, False)