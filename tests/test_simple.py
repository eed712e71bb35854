import random

import pytest

from gsromtools.lz.commands import (
    BIT_FLIPPING_TABLE,
    DUMMY,
    LITERAL,
    MAX_COMMAND_COUNT,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
)
from gsromtools.lz.decompress import expand_commands
from gsromtools.lz.simple import (
    find_repetition_at_position,
    store_uncompressed,
    try_compress_repetitions,
)


def _flip(data):
    return bytes(data).translate(BIT_FLIPPING_TABLE)


_rng = random.Random(7)
SAMPLES = [
    b"",
    b"\x00",
    b"\x05",
    bytes(range(50)),
    b"\x00" * 300 + b"\x12\x34" * 40 + b"\x77" * 90,
    b"\xaa" * 3000,
    bytes(_rng.randrange(4) for _ in range(400)),
    bytes(_rng.randrange(256) for _ in range(1500)),
]


def test_store_uncompressed_empty():
    assert store_uncompressed(b"", b"", 0) == []


def test_store_uncompressed_splits_trailing_medium_block():
    data = bytes(40)
    commands = store_uncompressed(data, _flip(data), 0)
    assert commands[0].count == SHORT_COMMAND_COUNT
    assert sum(c.count for c in commands) == 40
    assert len(commands) == 2


def test_store_uncompressed_flag_keeps_block_whole():
    data = bytes(40)
    assert store_uncompressed(data, _flip(data), 1) == [Command(LITERAL, 40, 0)]


def test_store_uncompressed_long_data_uses_max_blocks():
    data = bytes(2000)
    commands = store_uncompressed(data, _flip(data), 0)
    assert commands[0] == Command(LITERAL, MAX_COMMAND_COUNT, 0)
    assert commands[1].value == MAX_COMMAND_COUNT
    assert sum(c.count for c in commands) == 2000


@pytest.mark.parametrize("data", SAMPLES)
@pytest.mark.parametrize("flags", [0, 1])
def test_store_uncompressed_round_trip(data, flags):
    commands = store_uncompressed(data, _flip(data), flags)
    assert all(c.command == LITERAL for c in commands)
    assert expand_commands(commands, data) == data


def test_repetition_single_byte():
    assert find_repetition_at_position(b"\x05\x05\x05\x07", 0) == Command(1, 3, 5)


def test_repetition_at_last_nonzero_byte_is_placeholder():
    assert find_repetition_at_position(b"\x01\x02", 1).command == DUMMY


def test_repetition_at_last_zero_byte_is_single_zero():
    assert find_repetition_at_position(b"\x01\x00", 1) == Command(ZEROS, 1)


def test_repetition_short_zero_led_pair_is_single_zero():
    assert find_repetition_at_position(b"\x00\x01\x02", 0) == Command(ZEROS, 1)


def test_repetition_count_is_capped():
    result = find_repetition_at_position(b"\x00" * 3000, 0)
    assert result.command == ZEROS
    assert result.count == MAX_COMMAND_COUNT


@pytest.mark.parametrize("data", SAMPLES)
@pytest.mark.parametrize("flags", range(6))
def test_repetitions_round_trip(data, flags):
    commands = try_compress_repetitions(data, _flip(data), flags)
    assert expand_commands(commands, data) == data
    allowed = {LITERAL} | {kind for kind in (1, 2, 3) if (flags + 1) & (1 << (kind - 1))}
    assert {c.command for c in commands} <= allowed
    assert all(0 < c.count <= MAX_COMMAND_COUNT for c in commands)