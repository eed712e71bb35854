import pytest

from gsromtools.lz.commands import (
    COMPRESSION_METHODS,
    LITERAL,
    MAX_FILE_SIZE,
    LZError,
    compressed_length,
    flip_bits,
)
from gsromtools.lz.compress import COMPRESSORS, compress
from gsromtools.lz.decompress import decompress
from gsromtools.lz.multipass import try_compress_multi_pass
from gsromtools.lz.output import encode_commands
from gsromtools.lz.simple import store_uncompressed, try_compress_repetitions
from gsromtools.lz.singlepass import try_compress_single_pass

SAMPLE = (
    bytes(8)
    + bytes(range(1, 17))
    + b"\x33" * 12
    + b"\xaa\x55" * 6
    + bytes(range(16, 0, -1))
    + bytes(flip_bits(byte) for byte in range(1, 9))
)
FLIPPED = bytes(flip_bits(byte) for byte in SAMPLE)


@pytest.mark.parametrize("method", [0, 9, 24, 48, 71, 72, 73, 74, 77, 79, 80, 87, 95])
def test_single_method_round_trip(method):
    commands = compress(SAMPLE, method)
    assert sum(command.count for command in commands) == len(SAMPLE)
    assert decompress(encode_commands(commands, SAMPLE)) == SAMPLE


def test_optimal_round_trip_and_not_worse_than_any_method():
    best = compress(SAMPLE)
    assert decompress(encode_commands(best, SAMPLE)) == SAMPLE
    lengths = [compressed_length(compress(SAMPLE, method)) for method in range(COMPRESSION_METHODS)]
    assert compressed_length(best) <= min(lengths)


def test_method_above_range_means_optimal():
    assert compress(SAMPLE[:30], COMPRESSION_METHODS + 5) == compress(SAMPLE[:30])


def test_empty_data():
    assert compress(b"") == []
    assert compress(b"", 0) == []


def test_null_method_dispatch():
    assert compress(SAMPLE, 72) == store_uncompressed(SAMPLE, FLIPPED, 0)
    assert compress(SAMPLE, 73) == store_uncompressed(SAMPLE, FLIPPED, 1)
    assert all(command.command == LITERAL for command in compress(SAMPLE, 72))


def test_singlepass_dispatch():
    assert compress(SAMPLE, 71) == try_compress_single_pass(SAMPLE, FLIPPED, 71)


def test_repetitions_dispatch():
    assert compress(SAMPLE, 74) == try_compress_repetitions(SAMPLE, FLIPPED, 0)
    assert compress(SAMPLE, 79) == try_compress_repetitions(SAMPLE, FLIPPED, 5)


@pytest.mark.parametrize("flags", [0, 5, 15])
def test_multipass_dispatch(flags):
    assert compress(SAMPLE, 80 + flags) == try_compress_multi_pass(SAMPLE, FLIPPED, flags)


def test_method_ranges_cover_all_methods():
    offsets = []
    total = 0
    for compressor in COMPRESSORS:
        offsets.append(total)
        total += compressor.methods
    assert offsets == [0, 72, 74, 80]
    assert total == COMPRESSION_METHODS
    assert compress(SAMPLE, total - 1) == try_compress_multi_pass(SAMPLE, FLIPPED, 15)
    assert compress(SAMPLE, offsets[1]) == store_uncompressed(SAMPLE, FLIPPED, 0)


def test_too_big_raises():
    with pytest.raises(LZError) as info:
        compress(bytes(MAX_FILE_SIZE + 1), 72)
    assert info.value.code == 1


def test_negative_method_raises():
    with pytest.raises(ValueError):
        compress(SAMPLE, -1)