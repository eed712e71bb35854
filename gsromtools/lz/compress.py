"""The table of compressors and the top-level compression entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from gsromtools.lz.commands import (
    BIT_FLIPPING_TABLE,
    COMPRESSION_METHODS,
    MAX_FILE_SIZE,
    Command,
    LZError,
)
from gsromtools.lz.merging import select_optimal_sequence
from gsromtools.lz.multipass import try_compress_multi_pass
from gsromtools.lz.simple import store_uncompressed, try_compress_repetitions
from gsromtools.lz.singlepass import try_compress_single_pass


@dataclass(frozen=True)
class Compressor:
    """A compression algorithm with a number of zero-based method flags."""

    name: str
    methods: int
    function: Callable[[bytes, bytes, int], list[Command]]


COMPRESSORS = (
    Compressor("singlepass", 72, try_compress_single_pass),  # 0-71
    Compressor("null", 2, store_uncompressed),  # 72-73
    Compressor("repetitions", 6, try_compress_repetitions),  # 74-79
    Compressor("multipass", 16, try_compress_multi_pass),  # 80-95
)


def compress(data, method=COMPRESSION_METHODS) -> list[Command]:
    """Compress data with one method, or with all of them combined.

    A method number of COMPRESSION_METHODS or more selects the best
    combination of every method.
    """
    data = bytes(data)
    if len(data) > MAX_FILE_SIZE:
        raise LZError("file is too big", 1)
    if method < 0:
        raise ValueError(f"invalid compression method: {method}")
    flipped = data.translate(BIT_FLIPPING_TABLE)
    if method < COMPRESSION_METHODS:
        for compressor in COMPRESSORS:
            if method < compressor.methods:
                return compressor.function(data, flipped, method)
            method -= compressor.methods
    sequences = [
        compressor.function(data, flipped, flags)
        for compressor in COMPRESSORS
        for flags in range(compressor.methods)
    ]
    return select_optimal_sequence(sequences)