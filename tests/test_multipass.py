import random

import pytest

from gsromtools.lz.commands import (
    BIT_FLIPPING_TABLE,
    COPY_NORMAL,
    DUMMY,
    LITERAL,
    LOOKAHEAD_LIMIT,
    MAX_COMMAND_COUNT,
    REPEAT_BYTE,
    REPEAT_WORD,
    Command,
)
from gsromtools.lz.decompress import expand_commands
from gsromtools.lz.multipass import (
    pick_command_for_pass,
    pick_copy_for_pass,
    pick_repetition_for_pass,
    try_compress_multi_pass,
)


def _flip(data):
    return bytes(data).translate(BIT_FLIPPING_TABLE)


_rng = random.Random(5)
_segment = bytes(_rng.randrange(256) for _ in range(30))
SAMPLES = [
    b"",
    b"\x00",
    b"\x09",
    b"\x01\x02",
    b"abcabcabcabcabc",
    _segment + _flip(_segment) + _segment[::-1] + bytes(12) + b"\x44\x55" * 9,
    b"\x00" * 300 + b"\x12\x34" * 80 + b"\x77" * 90,
    b"\xaa" * 3000,
    bytes(_rng.randrange(3) for _ in range(150)),
    bytes(_rng.randrange(256) for _ in range(200)) * 2,
]


def test_repetition_zero_run():
    assert pick_repetition_for_pass(b"\x00\x00\x00\x05", 0, 0) == Command(3, 3, 0)


def test_repetition_single_byte():
    assert pick_repetition_for_pass(b"\x07\x07\x07", 0, 0) == Command(REPEAT_BYTE, 3, 7)


def test_repetition_flag_forbids_single_byte():
    result = pick_repetition_for_pass(b"\x07\x07\x07", 0, 8)
    assert result.command == REPEAT_WORD
    assert result.value == 0x0707


def test_repetition_at_last_byte():
    assert pick_repetition_for_pass(b"\x00\x09", 1, 0) == Command(REPEAT_BYTE, 1, 9)


def test_repetition_limited_by_lookahead():
    result = pick_repetition_for_pass(b"\x00" * 4000, 0, 0)
    assert result.count == LOOKAHEAD_LIMIT


def test_copy_too_short_data():
    assert pick_copy_for_pass(b"ab", b"ab", [0], COPY_NORMAL, 1, 0) == Command(DUMMY, 3)
    assert pick_copy_for_pass(b"ab", b"ab", [0], COPY_NORMAL, 1, 4).count == 4


def test_copy_finds_earlier_source():
    data = b"abcdabcd"
    assert pick_copy_for_pass(data, data, [0, 1, 2, 3], COPY_NORMAL, 4, 0) == Command(COPY_NORMAL, 4, 0)


def test_copy_without_sources():
    data = b"abcdabcd"
    assert pick_copy_for_pass(data, data, [], COPY_NORMAL, 4, 0).command == DUMMY


def test_pick_command_makes_near_copy_relative():
    data = b"\x01\x02\x03\x04\x01\x02\x03\x04"
    result = pick_command_for_pass(data, _flip(data), data[::-1], [0, 1, 2, 3], 4, 0)
    assert result.command == COPY_NORMAL
    assert result.value == -4


def test_single_byte_becomes_literal():
    assert try_compress_multi_pass(b"\x09", _flip(b"\x09"), 0) == [Command(LITERAL, 1, 0)]


def test_empty():
    assert try_compress_multi_pass(b"", b"", 0) == []


@pytest.mark.parametrize("flags", range(16))
@pytest.mark.parametrize("data", SAMPLES)
def test_multi_pass_round_trip(data, flags):
    commands = try_compress_multi_pass(data, _flip(data), flags)
    assert expand_commands(commands, data) == data
    assert all(0 < c.count <= MAX_COMMAND_COUNT for c in commands)
    assert [c for c in commands if c.command == DUMMY] == []


@pytest.mark.parametrize("data", [s for s in SAMPLES if s])
def test_flag_one_starts_with_literal(data):
    commands = try_compress_multi_pass(data, _flip(data), 1)
    assert commands[0].command == LITERAL
    assert commands[0].value == 0


@pytest.mark.parametrize("data", SAMPLES)
def test_flag_eight_emits_no_single_byte_repeats(data):
    commands = try_compress_multi_pass(data, _flip(data), 8)
    assert [c for c in commands if c.command == REPEAT_BYTE] == []
    assert expand_commands(commands, data) == data


def test_long_run_is_split():
    data = b"\xaa" * 3000
    commands = try_compress_multi_pass(data, _flip(data), 0)
    assert commands[0].count == MAX_COMMAND_COUNT
    assert sum(c.count for c in commands) == len(data)